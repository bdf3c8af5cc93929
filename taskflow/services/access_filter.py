"""Read-scoping predicates for project and task listings.

A project is visible to a user when the user owns it or appears in its
membership list with any role. The predicate composes with the lifecycle
view filters, e.g. "active projects visible to U".
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import ColumnElement, Select, false, select, true

from ..config import settings
from ..models.project import Project
from ..models.project_member import ProjectMember
from ..models.task import Task
from .lifecycle_service import LifecycleView, view_filter


def project_visibility_filter(
    user_id: Optional[UUID],
    public_browsing: Optional[bool] = None,
) -> ColumnElement[bool]:
    """
    Predicate restricting projects to those ``user_id`` may see.

    Without a user the result is either everything (public browsing
    deployments) or nothing.
    """
    if user_id is None:
        if public_browsing is None:
            public_browsing = settings.public_project_browsing
        return true() if public_browsing else false()
    return (Project.created_by == user_id) | Project.members.any(
        ProjectMember.user_id == user_id
    )


def visible_projects_query(
    user_id: Optional[UUID],
    view: LifecycleView = LifecycleView.ACTIVE,
    public_browsing: Optional[bool] = None,
) -> Select:
    """SELECT of projects in ``view`` that ``user_id`` may see."""
    if user_id is None and view != LifecycleView.ACTIVE:
        # Archive and trash are never browsable anonymously
        public_browsing = False
    return select(Project).where(
        project_visibility_filter(user_id, public_browsing),
        view_filter(Project, view),
    )


def project_tasks_query(
    project_id: UUID,
    view: LifecycleView = LifecycleView.ACTIVE,
) -> Select:
    """SELECT of a project's tasks in ``view``; the caller has checked access."""
    return select(Task).where(
        Task.project_id == project_id,
        view_filter(Task, view),
    )
