"""Shared pytest fixtures for backend tests."""

import os
from datetime import timedelta
from typing import AsyncGenerator, Optional
from uuid import uuid4

# Settings are read at import time, so configure them before importing taskflow
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("TRASH_CLEANUP_IN_PROCESS", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskflow.database import Base, get_db
from taskflow.main import app
from taskflow.models import Project, ProjectMember, Task, User
from taskflow.services.activity_service import activity_logger
from taskflow.services.auth_service import issue_access_token
from taskflow.services.trash_service import trash_cleanup_service
from taskflow.utils.security import get_password_hash
from taskflow.utils.timeutils import utcnow

TEST_PASSWORD = "TestPassword123!"

# Use in-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a test database engine with SQLite."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture(autouse=True)
def background_sessions(monkeypatch, session_maker: async_sessionmaker):
    """Point the activity logger and trash cleanup at the test database."""
    monkeypatch.setattr(activity_logger, "session_factory", session_maker)
    monkeypatch.setattr(trash_cleanup_service, "session_factory", session_maker)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database dependency override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Factories
# =============================================================================


async def make_user(db: AsyncSession, name: str, role: str = "user") -> User:
    user = User(
        id=uuid4(),
        email=f"{name}@example.com",
        password_hash=get_password_hash(TEST_PASSWORD),
        display_name=name.capitalize(),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_project(
    db: AsyncSession,
    owner: Optional[User],
    title: str = "Launch",
    members: Optional[list[tuple[User, Optional[str]]]] = None,
    archived: bool = False,
    trashed_days_ago: Optional[float] = None,
) -> Project:
    """Create a project; ``members`` pairs a user with a role (None = legacy entry)."""
    now = utcnow()
    project = Project(
        id=uuid4(),
        title=title,
        description="",
        created_by=owner.id if owner else None,
        archived=archived,
        archived_at=now if archived else None,
        deleted_at=now - timedelta(days=trashed_days_ago) if trashed_days_ago is not None else None,
    )
    db.add(project)
    await db.flush()
    for user, role in members or []:
        db.add(ProjectMember(project_id=project.id, user_id=user.id, role=role))
    await db.commit()
    await db.refresh(project)
    return project


async def make_task(
    db: AsyncSession,
    project: Project,
    title: str = "Write release notes",
    order: int = 0,
    status: str = "Todo",
    priority: str = "Medium",
    archived: bool = False,
    trashed_days_ago: Optional[float] = None,
) -> Task:
    now = utcnow()
    task = Task(
        id=uuid4(),
        project_id=project.id,
        title=title,
        description="Details",
        status=status,
        priority=priority,
        order=order,
        subtasks=[],
        comments=[],
        archived=archived,
        archived_at=now if archived else None,
        deleted_at=now - timedelta(days=trashed_days_ago) if trashed_days_ago is not None else None,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


def headers_for(user: User) -> dict:
    token = issue_access_token(user)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Users
# =============================================================================


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await make_user(db_session, "owner")


@pytest_asyncio.fixture
async def editor(db_session: AsyncSession) -> User:
    return await make_user(db_session, "editor")


@pytest_asyncio.fixture
async def viewer(db_session: AsyncSession) -> User:
    return await make_user(db_session, "viewer")


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> User:
    return await make_user(db_session, "outsider")


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return headers_for(owner)


@pytest.fixture
def editor_headers(editor: User) -> dict:
    return headers_for(editor)


@pytest.fixture
def viewer_headers(viewer: User) -> dict:
    return headers_for(viewer)


@pytest.fixture
def outsider_headers(outsider: User) -> dict:
    return headers_for(outsider)


# =============================================================================
# Projects and tasks
# =============================================================================


@pytest_asyncio.fixture
async def project(db_session: AsyncSession, owner: User, editor: User, viewer: User) -> Project:
    """Project owned by ``owner`` with an editor and a viewer."""
    return await make_project(
        db_session,
        owner,
        members=[(editor, "editor"), (viewer, "viewer")],
    )


@pytest_asyncio.fixture
async def task(db_session: AsyncSession, project: Project) -> Task:
    return await make_task(db_session, project)
