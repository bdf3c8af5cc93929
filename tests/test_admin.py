"""Tests for admin endpoints and the service health endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow import __version__
from taskflow.models import Project, User

from conftest import headers_for, make_project, make_user


@pytest.mark.asyncio
class TestPurgeTrash:

    async def test_admin_runs_sweep(
        self, client: AsyncClient, db_session: AsyncSession, owner: User
    ):
        admin = await make_user(db_session, "admin", role="admin")
        await make_project(db_session, owner, title="expired", trashed_days_ago=31)
        await make_project(db_session, owner, title="recent", trashed_days_ago=2)

        response = await client.post("/api/admin/purge-trash", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["projects_purged"] == 1
        assert response.json()["tasks_purged"] == 0
        titles = {row[0] for row in (await db_session.execute(select(Project.title))).all()}
        assert titles == {"recent"}

    async def test_regular_user_forbidden(self, client: AsyncClient, owner_headers: dict):
        response = await client.post("/api/admin/purge-trash", headers=owner_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"


@pytest.mark.asyncio
class TestServiceEndpoints:

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == __version__

    async def test_health_reports_cleanup_state(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ("healthy", "degraded")
        assert data["trash_cleanup"]["running"] is False
