"""Tests for the ARQ worker trash cleanup job."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.models import Project, User
from taskflow.worker import WorkerSettings, parse_redis_url, run_trash_cleanup, startup

from conftest import make_project, make_task


class TestParseRedisUrl:

    def test_full_url(self):
        settings = parse_redis_url("redis://:s3cret@cache.internal:6380/2")
        assert settings.host == "cache.internal"
        assert settings.port == 6380
        assert settings.password == "s3cret"
        assert settings.database == 2

    def test_defaults(self):
        settings = parse_redis_url("redis://")
        assert settings.host == "localhost"
        assert settings.port == 6379
        assert settings.database == 0


class TestWorkerSettings:

    def test_cleanup_is_scheduled(self):
        assert run_trash_cleanup in WorkerSettings.functions
        [job] = WorkerSettings.cron_jobs
        assert job.coroutine is run_trash_cleanup
        assert job.run_at_startup is True
        assert job.unique is True


@pytest.mark.asyncio
class TestRunTrashCleanup:

    async def test_purges_with_context_session(
        self, session_maker: async_sessionmaker, db_session: AsyncSession, owner: User
    ):
        expired = await make_project(db_session, owner, title="expired", trashed_days_ago=45)
        await make_task(db_session, expired)
        await make_project(db_session, owner, title="kept")

        result = await run_trash_cleanup({"session_factory": session_maker})

        assert result["projects_purged"] == 1
        assert result["tasks_purged"] == 1
        titles = {row[0] for row in (await db_session.execute(select(Project.title))).all()}
        assert titles == {"kept"}

    async def test_errors_return_zero_counts(self):
        def broken_factory():
            raise RuntimeError("database unavailable")

        result = await run_trash_cleanup({"session_factory": broken_factory})

        assert result["projects_purged"] == 0
        assert result["tasks_purged"] == 0

    async def test_startup_sets_session_factory(self):
        ctx: dict = {}
        await startup(ctx)
        assert "session_factory" in ctx
