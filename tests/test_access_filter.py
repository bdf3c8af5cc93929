"""Tests for project read-scoping combined with lifecycle views."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.models import User
from taskflow.services.access_filter import project_tasks_query, visible_projects_query
from taskflow.services.lifecycle_service import LifecycleView

from conftest import make_project, make_task


async def _titles(db: AsyncSession, query) -> set[str]:
    result = await db.execute(query)
    return {p.title for p in result.unique().scalars().all()}


@pytest.mark.asyncio
class TestVisibleProjects:

    async def test_owner_and_members_only(
        self, db_session: AsyncSession, owner: User, editor: User, viewer: User, outsider: User
    ):
        await make_project(db_session, owner, title="shared", members=[(editor, "editor"), (viewer, "viewer")])
        await make_project(db_session, outsider, title="private")

        assert await _titles(db_session, visible_projects_query(owner.id)) == {"shared"}
        assert await _titles(db_session, visible_projects_query(editor.id)) == {"shared"}
        assert await _titles(db_session, visible_projects_query(viewer.id)) == {"shared"}
        assert await _titles(db_session, visible_projects_query(outsider.id)) == {"private"}

    async def test_legacy_member_rows_are_visible(
        self, db_session: AsyncSession, owner: User, editor: User
    ):
        await make_project(db_session, owner, title="legacy", members=[(editor, None)])
        assert await _titles(db_session, visible_projects_query(editor.id)) == {"legacy"}

    async def test_composes_with_view(
        self, db_session: AsyncSession, owner: User, outsider: User
    ):
        await make_project(db_session, owner, title="active")
        await make_project(db_session, owner, title="archived", archived=True)
        await make_project(db_session, owner, title="trashed", trashed_days_ago=1)
        await make_project(db_session, outsider, title="other trashed", trashed_days_ago=1)

        assert await _titles(db_session, visible_projects_query(owner.id, LifecycleView.ACTIVE)) == {"active"}
        assert await _titles(db_session, visible_projects_query(owner.id, LifecycleView.ARCHIVED)) == {"archived"}
        assert await _titles(db_session, visible_projects_query(owner.id, LifecycleView.TRASH)) == {"trashed"}

    async def test_anonymous_sees_nothing_by_default(self, db_session: AsyncSession, owner: User):
        await make_project(db_session, owner, title="active")
        assert await _titles(db_session, visible_projects_query(None, public_browsing=False)) == set()

    async def test_anonymous_public_browsing(self, db_session: AsyncSession, owner: User):
        await make_project(db_session, owner, title="active")
        await make_project(db_session, owner, title="trashed", trashed_days_ago=1)

        assert await _titles(db_session, visible_projects_query(None, public_browsing=True)) == {"active"}
        # Archive and trash are never browsable anonymously
        assert await _titles(
            db_session, visible_projects_query(None, LifecycleView.TRASH, public_browsing=True)
        ) == set()


@pytest.mark.asyncio
class TestProjectTasksQuery:

    async def test_task_views(self, db_session: AsyncSession, owner: User):
        project = await make_project(db_session, owner)
        other = await make_project(db_session, owner, title="other")
        await make_task(db_session, project, title="active")
        await make_task(db_session, project, title="archived", archived=True)
        await make_task(db_session, project, title="trashed", trashed_days_ago=1)
        await make_task(db_session, other, title="elsewhere")

        for view, expected in (
            (LifecycleView.ACTIVE, {"active"}),
            (LifecycleView.ARCHIVED, {"archived"}),
            (LifecycleView.TRASH, {"trashed"}),
        ):
            assert await _titles(db_session, project_tasks_query(project.id, view)) == expected
