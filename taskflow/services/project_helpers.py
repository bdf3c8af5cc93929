"""Shared helpers for project and task endpoints.

Loading with eager relationships, access checks that map permission
outcomes onto HTTP errors, and response builders.
"""

from typing import Optional
from uuid import UUID, uuid4

from fastapi import HTTPException, status
from sqlalchemy import String, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.enums import ProjectRole
from ..models.project import Project
from ..models.project_member import ProjectMember
from ..models.task import Task
from ..models.user import User
from ..schemas.project import (
    MemberInput,
    MemberResponse,
    ProjectPermissionFlags,
    ProjectResponse,
)
from ..schemas.task import CommentResponse, SubtaskInput, SubtaskResponse, TaskResponse
from ..schemas.user import UserSummary
from . import lifecycle_service
from .permission_service import (
    canonical_id,
    get_project_permissions,
    has_project_access,
    member_role,
    member_user_id,
    resolve_project_role,
)


def project_not_found(project_id: UUID) -> HTTPException:
    # Same response for "missing" and "no access" so existence never leaks
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Project with ID {project_id} not found",
    )


def task_not_found(task_id: UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Task with ID {task_id} not found",
    )


def require(allowed: bool, detail: str) -> None:
    """Raise 403 with ``detail`` unless ``allowed``."""
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


def conflict(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


# ============================================================================
# Loading and access
# ============================================================================


async def load_project(db: AsyncSession, project_id: UUID) -> Optional[Project]:
    """Fetch a project with owner and members, refreshing any cached copy."""
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()


async def load_task(db: AsyncSession, task_id: UUID) -> Optional[Task]:
    """Fetch a task with its project and assignee, refreshing any cached copy."""
    result = await db.execute(
        select(Task)
        .where(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()


async def verify_project_access(
    db: AsyncSession,
    project_id: UUID,
    user: User,
) -> tuple[Project, ProjectRole]:
    """
    Load a project the user can at least read.

    Raises:
        HTTPException: 404 if the project is missing or the user has no role
    """
    project = await load_project(db, project_id)
    role = resolve_project_role(project, user.id)
    if project is None or not has_project_access(role):
        raise project_not_found(project_id)
    return project, role


async def verify_task_access(
    db: AsyncSession,
    task_id: UUID,
    user: User,
) -> tuple[Task, ProjectRole]:
    """
    Load a task whose project the user can at least read.

    Raises:
        HTTPException: 404 if the task is missing or the user has no role
    """
    task = await load_task(db, task_id)
    if task is None:
        raise task_not_found(task_id)
    role = resolve_project_role(task.project, user.id)
    if not has_project_access(role):
        raise task_not_found(task_id)
    return task, role


def ensure_project_not_trashed(project: Project) -> None:
    if lifecycle_service.is_trashed(project):
        raise conflict("Project is in the trash. Restore it first.")


def ensure_task_not_trashed(task: Task) -> None:
    if lifecycle_service.is_trashed(task):
        raise conflict("Task is in the trash. Restore it first.")


async def count_project_tasks(db: AsyncSession, project_ids: list[UUID]) -> dict[UUID, int]:
    """Task counts per project, including archived and trashed tasks."""
    if not project_ids:
        return {}
    result = await db.execute(
        select(Task.project_id, func.count(Task.id))
        .where(Task.project_id.in_(project_ids))
        .group_by(Task.project_id)
    )
    return {project_id: count for project_id, count in result.all()}


# ============================================================================
# Membership
# ============================================================================


async def build_member_rows(
    db: AsyncSession,
    project: Project,
    members: list[MemberInput],
) -> list[ProjectMember]:
    """
    Turn a membership payload into ProjectMember rows.

    The owner is dropped from the list; unknown users are rejected.

    Raises:
        HTTPException: 400 if a listed user does not exist
    """
    owner_id = canonical_id(project.created_by)
    wanted = [m for m in members if canonical_id(m.user_id) != owner_id]
    if not wanted:
        return []

    user_ids = [m.user_id for m in wanted]
    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    existing = {row[0] for row in result.all()}
    missing = [str(uid) for uid in user_ids if uid not in existing]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown member user(s): {', '.join(missing)}",
        )

    return [
        ProjectMember(project_id=project.id, user_id=m.user_id, role=m.role.value)
        for m in wanted
    ]


def member_response(entry: ProjectMember) -> MemberResponse:
    user = getattr(entry, "user", None)
    return MemberResponse(
        user_id=UUID(member_user_id(entry)),
        role=member_role(entry),
        user=UserSummary.model_validate(user) if user is not None else None,
    )


# ============================================================================
# Responses
# ============================================================================


def build_project_response(
    project: Project,
    user_id: Optional[UUID],
    tasks_count: int = 0,
) -> ProjectResponse:
    """Project response including the caller's role and capabilities."""
    permissions = get_project_permissions(project, user_id)
    return ProjectResponse(
        id=project.id,
        title=project.title,
        description=project.description or "",
        due_date=project.due_date,
        created_by=project.created_by,
        owner=UserSummary.model_validate(project.creator) if project.creator else None,
        members=[member_response(m) for m in project.members],
        archived=bool(project.archived),
        archived_at=project.archived_at,
        deleted_at=project.deleted_at,
        purge_at=lifecycle_service.purge_at(project),
        days_until_purge=lifecycle_service.days_until_purge(project),
        created_at=project.created_at,
        updated_at=project.updated_at,
        tasks_count=tasks_count,
        my_role=permissions.role,
        permissions=ProjectPermissionFlags(**permissions.as_flags()),
    )


def normalize_subtasks(subtasks: list[SubtaskInput]) -> list[dict]:
    """Subtask payload to stored JSON, giving new entries an id."""
    return [
        {
            "id": s.id or uuid4().hex,
            "title": s.title,
            "completed": s.completed,
        }
        for s in subtasks
    ]


def build_task_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        order=task.order,
        assigned_to=task.assigned_to,
        assignee=UserSummary.model_validate(task.assignee) if task.assignee else None,
        subtasks=[SubtaskResponse(**s) for s in (task.subtasks or [])],
        comments=[
            CommentResponse(
                id=c["id"],
                user_id=c.get("user"),
                text=c["text"],
                created_at=c["created_at"],
            )
            for c in (task.comments or [])
        ],
        archived=bool(task.archived),
        archived_at=task.archived_at,
        deleted_at=task.deleted_at,
        purge_at=lifecycle_service.purge_at(task),
        days_until_purge=lifecycle_service.days_until_purge(task),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def clear_comment_author(db: AsyncSession, user_id: UUID) -> int:
    """Null the author of every comment written by ``user_id``; returns tasks touched."""
    author = str(user_id)
    result = await db.execute(
        select(Task).where(cast(Task.comments, String).contains(author))
    )
    touched = 0
    for task in result.unique().scalars().all():
        comments = [
            {**c, "user": None} if c.get("user") == author else c
            for c in (task.comments or [])
        ]
        if comments != task.comments:
            task.comments = comments
            touched += 1
    return touched
