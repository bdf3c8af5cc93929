"""API tests for projects: CRUD, access control, archive and trash."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.models import Activity, Project, Task, User

from conftest import headers_for, make_project, make_task


def _ids(response) -> set[str]:
    return {p["id"] for p in response.json()}


@pytest.mark.asyncio
class TestCreateProject:

    async def test_create_project_makes_caller_owner(
        self, client: AsyncClient, owner: User, owner_headers: dict
    ):
        response = await client.post(
            "/api/projects",
            json={"title": "  Launch  ", "description": "Go live"},
            headers=owner_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Launch"
        assert data["created_by"] == str(owner.id)
        assert data["owner"]["email"] == owner.email
        assert data["my_role"] == "owner"
        assert data["members"] == []
        assert data["archived"] is False
        assert data["deleted_at"] is None
        assert data["permissions"]["can_manage_members"] is True

    async def test_create_with_members_drops_owner(
        self, client: AsyncClient, owner: User, editor: User, viewer: User, owner_headers: dict
    ):
        response = await client.post(
            "/api/projects",
            json={
                "title": "Launch",
                "members": [
                    {"user_id": str(owner.id), "role": "viewer"},
                    {"user_id": str(editor.id)},
                    {"user_id": str(viewer.id), "role": "viewer"},
                ],
            },
            headers=owner_headers,
        )

        assert response.status_code == 201
        members = {m["user_id"]: m["role"] for m in response.json()["members"]}
        assert members == {str(editor.id): "editor", str(viewer.id): "viewer"}

    async def test_create_with_unknown_member(self, client: AsyncClient, owner_headers: dict):
        response = await client.post(
            "/api/projects",
            json={"title": "Launch", "members": [{"user_id": str(uuid4())}]},
            headers=owner_headers,
        )
        assert response.status_code == 400

    async def test_create_with_duplicate_members(
        self, client: AsyncClient, editor: User, owner_headers: dict
    ):
        response = await client.post(
            "/api/projects",
            json={
                "title": "Launch",
                "members": [{"user_id": str(editor.id)}, {"user_id": str(editor.id), "role": "viewer"}],
            },
            headers=owner_headers,
        )
        assert response.status_code == 422

    async def test_create_requires_title(self, client: AsyncClient, owner_headers: dict):
        response = await client.post("/api/projects", json={"title": "   "}, headers=owner_headers)
        assert response.status_code == 422

    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/projects", json={"title": "Launch"})
        assert response.status_code == 401

    async def test_due_date_with_offset_is_stored_as_utc(
        self, client: AsyncClient, owner_headers: dict
    ):
        response = await client.post(
            "/api/projects",
            json={"title": "Launch", "due_date": "2026-10-20T10:00:00+05:00"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        project_id = response.json()["id"]

        fetched = await client.get(f"/api/projects/{project_id}", headers=owner_headers)
        assert fetched.json()["due_date"] == "2026-10-20T05:00:00"

        updated = await client.put(
            f"/api/projects/{project_id}",
            json={"due_date": "2026-10-21T01:30:00-02:00"},
            headers=owner_headers,
        )
        assert updated.json()["due_date"] == "2026-10-21T03:30:00"

    async def test_create_logs_activity(
        self, client: AsyncClient, db_session: AsyncSession, owner_headers: dict
    ):
        response = await client.post("/api/projects", json={"title": "Launch"}, headers=owner_headers)
        project_id = response.json()["id"]

        activities = await client.get(f"/api/projects/{project_id}/activities", headers=owner_headers)
        assert activities.status_code == 200
        assert [a["action"] for a in activities.json()] == ["project.created"]


@pytest.mark.asyncio
class TestReadProjects:

    async def test_list_scoped_to_caller(
        self, client: AsyncClient, db_session: AsyncSession, project: Project,
        outsider: User, owner_headers: dict, viewer_headers: dict, outsider_headers: dict
    ):
        other = await make_project(db_session, outsider, title="Private")

        assert _ids(await client.get("/api/projects", headers=owner_headers)) == {str(project.id)}
        assert _ids(await client.get("/api/projects", headers=viewer_headers)) == {str(project.id)}
        assert _ids(await client.get("/api/projects", headers=outsider_headers)) == {str(other.id)}

    async def test_list_anonymous_is_empty(self, client: AsyncClient, project: Project):
        response = await client.get("/api/projects")
        assert response.status_code == 200
        assert response.json() == []

    async def test_list_includes_role_and_task_count(
        self, client: AsyncClient, db_session: AsyncSession, project: Project, editor_headers: dict
    ):
        await make_task(db_session, project)
        await make_task(db_session, project, order=1, trashed_days_ago=1)

        data = (await client.get("/api/projects", headers=editor_headers)).json()

        assert data[0]["my_role"] == "editor"
        assert data[0]["tasks_count"] == 2
        assert data[0]["permissions"]["can_edit_project"] is True
        assert data[0]["permissions"]["can_manage_members"] is False

    async def test_get_project(self, client: AsyncClient, project: Project, viewer_headers: dict):
        response = await client.get(f"/api/projects/{project.id}", headers=viewer_headers)
        assert response.status_code == 200
        assert response.json()["my_role"] == "viewer"

    async def test_no_access_looks_like_missing(
        self, client: AsyncClient, project: Project, outsider_headers: dict
    ):
        denied = await client.get(f"/api/projects/{project.id}", headers=outsider_headers)
        missing = await client.get(f"/api/projects/{uuid4()}", headers=outsider_headers)

        assert denied.status_code == 404
        assert missing.status_code == 404
        assert denied.json()["detail"] == f"Project with ID {project.id} not found"

    async def test_legacy_member_reads_and_edits(
        self, client: AsyncClient, db_session: AsyncSession, owner: User, editor: User
    ):
        legacy = await make_project(db_session, owner, title="Legacy", members=[(editor, None)])

        response = await client.get(f"/api/projects/{legacy.id}", headers=headers_for(editor))
        assert response.status_code == 200
        assert response.json()["my_role"] == "editor"
        assert response.json()["members"][0]["role"] == "editor"

        response = await client.put(
            f"/api/projects/{legacy.id}",
            json={"title": "Legacy renamed"},
            headers=headers_for(editor),
        )
        assert response.status_code == 200


@pytest.mark.asyncio
class TestUpdateProject:

    async def test_editor_updates_metadata(
        self, client: AsyncClient, project: Project, editor_headers: dict
    ):
        response = await client.put(
            f"/api/projects/{project.id}",
            json={"title": "Launch v2", "description": "Updated"},
            headers=editor_headers,
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Launch v2"
        assert response.json()["description"] == "Updated"

    async def test_viewer_cannot_update(
        self, client: AsyncClient, project: Project, viewer_headers: dict
    ):
        response = await client.put(
            f"/api/projects/{project.id}", json={"title": "Nope"}, headers=viewer_headers
        )
        assert response.status_code == 403

    async def test_empty_update(self, client: AsyncClient, project: Project, owner_headers: dict):
        response = await client.put(f"/api/projects/{project.id}", json={}, headers=owner_headers)
        assert response.status_code == 400

    async def test_editor_cannot_change_members_even_with_other_fields(
        self, client: AsyncClient, db_session: AsyncSession, project: Project,
        editor: User, editor_headers: dict
    ):
        response = await client.put(
            f"/api/projects/{project.id}",
            json={"title": "Sneaky", "members": [{"user_id": str(editor.id), "role": "editor"}]},
            headers=editor_headers,
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Only the project owner can manage members"

        title = (await db_session.execute(
            select(Project.title).where(Project.id == project.id)
        )).scalar()
        assert title == "Launch"

    async def test_owner_replaces_members(
        self, client: AsyncClient, project: Project, viewer: User, outsider: User, owner_headers: dict
    ):
        response = await client.put(
            f"/api/projects/{project.id}",
            json={"members": [
                {"user_id": str(viewer.id), "role": "editor"},
                {"user_id": str(outsider.id), "role": "viewer"},
            ]},
            headers=owner_headers,
        )

        assert response.status_code == 200
        members = {m["user_id"]: m["role"] for m in response.json()["members"]}
        assert members == {str(viewer.id): "editor", str(outsider.id): "viewer"}

    async def test_archive_toggle(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        response = await client.put(
            f"/api/projects/{project.id}", json={"archived": True}, headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["archived"] is True
        assert response.json()["archived_at"] is not None

        archived = await client.get("/api/projects/archive", headers=owner_headers)
        active = await client.get("/api/projects", headers=owner_headers)
        assert _ids(archived) == {str(project.id)}
        assert _ids(active) == set()

        again = await client.put(
            f"/api/projects/{project.id}", json={"archived": True}, headers=owner_headers
        )
        assert again.status_code == 409

        response = await client.put(
            f"/api/projects/{project.id}", json={"archived": False}, headers=owner_headers
        )
        assert response.json()["archived"] is False
        assert response.json()["archived_at"] is None

    async def test_cannot_edit_trashed_project(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        await client.delete(f"/api/projects/{project.id}", headers=owner_headers)
        response = await client.put(
            f"/api/projects/{project.id}", json={"title": "Zombie"}, headers=owner_headers
        )
        assert response.status_code == 409


@pytest.mark.asyncio
class TestTrash:

    async def test_trash_and_restore_scenario(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        response = await client.delete(f"/api/projects/{project.id}", headers=owner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["deleted_at"] is not None
        assert data["purge_at"] is not None
        assert data["days_until_purge"] == 30

        pid = {str(project.id)}
        assert _ids(await client.get("/api/projects/trash", headers=owner_headers)) == pid
        assert _ids(await client.get("/api/projects", headers=owner_headers)) == set()
        assert _ids(await client.get("/api/projects/archive", headers=owner_headers)) == set()

        response = await client.post(f"/api/projects/{project.id}/restore", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["deleted_at"] is None

        assert _ids(await client.get("/api/projects", headers=owner_headers)) == pid
        assert _ids(await client.get("/api/projects/trash", headers=owner_headers)) == set()

    async def test_restore_never_lands_in_archive(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        await client.put(f"/api/projects/{project.id}", json={"archived": True}, headers=owner_headers)
        await client.delete(f"/api/projects/{project.id}", headers=owner_headers)

        response = await client.post(f"/api/projects/{project.id}/restore", headers=owner_headers)

        assert response.json()["archived"] is False
        assert _ids(await client.get("/api/projects", headers=owner_headers)) == {str(project.id)}

    async def test_editor_can_trash_and_restore(
        self, client: AsyncClient, project: Project, editor_headers: dict
    ):
        assert (await client.delete(f"/api/projects/{project.id}", headers=editor_headers)).status_code == 200
        assert (await client.post(f"/api/projects/{project.id}/restore", headers=editor_headers)).status_code == 200

    async def test_viewer_cannot_trash(
        self, client: AsyncClient, project: Project, viewer_headers: dict
    ):
        response = await client.delete(f"/api/projects/{project.id}", headers=viewer_headers)
        assert response.status_code == 403

    async def test_trash_twice_and_restore_active(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        restore = await client.post(f"/api/projects/{project.id}/restore", headers=owner_headers)
        assert restore.status_code == 409

        await client.delete(f"/api/projects/{project.id}", headers=owner_headers)
        again = await client.delete(f"/api/projects/{project.id}", headers=owner_headers)
        assert again.status_code == 409

    async def test_trash_lists_most_recently_deleted_first(
        self, client: AsyncClient, db_session: AsyncSession, owner: User, owner_headers: dict
    ):
        await make_project(db_session, owner, title="long ago", trashed_days_ago=20)
        await make_project(db_session, owner, title="yesterday", trashed_days_ago=1)
        await make_project(db_session, owner, title="last week", trashed_days_ago=7)

        response = await client.get("/api/projects/trash", headers=owner_headers)

        assert [p["title"] for p in response.json()] == ["yesterday", "last week", "long ago"]


@pytest.mark.asyncio
class TestPermanentDelete:

    async def test_owner_purges_trashed_project_with_tasks(
        self, client: AsyncClient, db_session: AsyncSession, project: Project, owner_headers: dict
    ):
        await make_task(db_session, project, title="active")
        await make_task(db_session, project, title="archived", order=1, archived=True)
        await client.delete(f"/api/projects/{project.id}", headers=owner_headers)

        response = await client.delete(f"/api/projects/{project.id}/permanent", headers=owner_headers)

        assert response.status_code == 204
        tasks_left = (await db_session.execute(
            select(func.count(Task.id)).where(Task.project_id == project.id)
        )).scalar()
        activities_left = (await db_session.execute(
            select(func.count(Activity.id)).where(Activity.project_id == project.id)
        )).scalar()
        assert tasks_left == 0
        assert activities_left == 0

        missing = await client.get(f"/api/projects/{project.id}", headers=owner_headers)
        assert missing.status_code == 404

    async def test_editor_cannot_purge(
        self, client: AsyncClient, project: Project, owner_headers: dict, editor_headers: dict
    ):
        await client.delete(f"/api/projects/{project.id}", headers=owner_headers)
        response = await client.delete(f"/api/projects/{project.id}/permanent", headers=editor_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Only the project owner can permanently delete a project"

    async def test_must_be_in_trash(
        self, client: AsyncClient, project: Project, owner_headers: dict
    ):
        response = await client.delete(f"/api/projects/{project.id}/permanent", headers=owner_headers)
        assert response.status_code == 409


@pytest.mark.asyncio
class TestOwnerlessProject:

    async def test_deleted_owner_leaves_project_to_members(
        self, client: AsyncClient, db_session: AsyncSession, editor: User
    ):
        project = await make_project(db_session, None, title="Orphan", members=[(editor, "editor")])

        response = await client.get(f"/api/projects/{project.id}", headers=headers_for(editor))

        assert response.status_code == 200
        assert response.json()["created_by"] is None
        assert response.json()["my_role"] == "editor"
        assert response.json()["permissions"]["can_permanent_delete_project"] is False
