"""Lifecycle state machine shared by projects and tasks.

States:
- ACTIVE:   deleted_at is NULL, archived is false
- ARCHIVED: deleted_at is NULL, archived is true
- TRASHED:  deleted_at is set (the archived flag is irrelevant while trashed)
- PURGED:   row removed from storage (terminal, not observable)

Transitions:
- ACTIVE -> ARCHIVED            archive()
- ARCHIVED -> ACTIVE            unarchive()
- ACTIVE | ARCHIVED -> TRASHED  move_to_trash()
- TRASHED -> ACTIVE             restore()  (never lands in the archive)
- TRASHED -> PURGED             purge_project() / purge_task(), or the retention sweep

Transition functions mutate the entity in place and return True when the
transition happened, False when it does not apply to the current state. They
never raise; callers decide how to report a transition that did not apply.

Purging a project removes all of its tasks regardless of their own state.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.activity import Activity
from ..models.project import Project
from ..models.project_member import ProjectMember
from ..models.task import Task
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

LifecycleModel = Union[type[Project], type[Task]]


class LifecycleState(str, Enum):
    """Observable lifecycle state of a project or task."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASHED = "trashed"


class LifecycleView(str, Enum):
    """The three disjoint listing views."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASH = "trash"


def get_state(entity: Any) -> LifecycleState:
    """Current lifecycle state of a project or task."""
    if entity.deleted_at is not None:
        return LifecycleState.TRASHED
    if entity.archived:
        return LifecycleState.ARCHIVED
    return LifecycleState.ACTIVE


def is_trashed(entity: Any) -> bool:
    return get_state(entity) == LifecycleState.TRASHED


# ============================================================================
# Transitions
# ============================================================================


def archive(entity: Any, now: Optional[datetime] = None) -> bool:
    """ACTIVE -> ARCHIVED."""
    if get_state(entity) != LifecycleState.ACTIVE:
        return False
    entity.archived = True
    entity.archived_at = now or utcnow()
    return True


def unarchive(entity: Any) -> bool:
    """ARCHIVED -> ACTIVE."""
    if get_state(entity) != LifecycleState.ARCHIVED:
        return False
    entity.archived = False
    entity.archived_at = None
    return True


def move_to_trash(entity: Any, now: Optional[datetime] = None) -> bool:
    """ACTIVE | ARCHIVED -> TRASHED. The archived flag is left untouched."""
    if get_state(entity) == LifecycleState.TRASHED:
        return False
    entity.deleted_at = now or utcnow()
    return True


def restore(entity: Any) -> bool:
    """TRASHED -> ACTIVE, clearing the archived flag as well."""
    if get_state(entity) != LifecycleState.TRASHED:
        return False
    entity.deleted_at = None
    entity.archived = False
    entity.archived_at = None
    return True


def set_archived(entity: Any, archived: bool, now: Optional[datetime] = None) -> bool:
    """Apply an ``archived`` toggle coming from an update payload."""
    return archive(entity, now) if archived else unarchive(entity)


# ============================================================================
# Views and retention
# ============================================================================


def view_filter(model: LifecycleModel, view: LifecycleView) -> ColumnElement[bool]:
    """SQL predicate selecting the rows of ``model`` that belong to ``view``."""
    view = LifecycleView(view)
    if view == LifecycleView.TRASH:
        return model.deleted_at.is_not(None)
    if view == LifecycleView.ARCHIVED:
        return model.deleted_at.is_(None) & model.archived.is_(True)
    return model.deleted_at.is_(None) & model.archived.is_not(True)


def retention_period() -> timedelta:
    return timedelta(days=settings.trash_retention_days)


def purge_cutoff(now: Optional[datetime] = None) -> datetime:
    """Entities trashed strictly before this instant are eligible for purge."""
    return (now or utcnow()) - retention_period()


def purge_at(entity: Any) -> Optional[datetime]:
    """When a trashed entity becomes eligible for purge (None if not trashed)."""
    if entity.deleted_at is None:
        return None
    return entity.deleted_at + retention_period()


def days_until_purge(entity: Any, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days left before purge, rounded up and never negative."""
    when = purge_at(entity)
    if when is None:
        return None
    remaining = when - (now or utcnow())
    if remaining <= timedelta(0):
        return 0
    return remaining.days + (1 if remaining % timedelta(days=1) else 0)


def is_purge_eligible(entity: Any, now: Optional[datetime] = None) -> bool:
    return entity.deleted_at is not None and entity.deleted_at < purge_cutoff(now)


def expired_filter(model: LifecycleModel, now: Optional[datetime] = None) -> ColumnElement[bool]:
    """SQL predicate for trashed rows past the retention period."""
    return model.deleted_at.is_not(None) & (model.deleted_at < purge_cutoff(now))


# ============================================================================
# Purge (TRASHED -> PURGED)
# ============================================================================


async def purge_project(db: AsyncSession, project_id: UUID) -> int:
    """
    Hard-delete a project together with everything that references it.

    Tasks go first, whatever their own lifecycle state, then memberships and
    activity entries, then the project row. The caller commits.

    Returns:
        int: Number of tasks removed
    """
    task_result = await db.execute(
        delete(Task).where(Task.project_id == project_id)
    )
    await db.execute(
        delete(ProjectMember).where(ProjectMember.project_id == project_id)
    )
    await db.execute(
        delete(Activity).where(Activity.project_id == project_id)
    )
    await db.execute(
        delete(Project).where(Project.id == project_id)
    )
    return task_result.rowcount or 0


async def purge_task(db: AsyncSession, task_id: UUID) -> bool:
    """Hard-delete a single task. The caller commits."""
    result = await db.execute(delete(Task).where(Task.id == task_id))
    return bool(result.rowcount)


async def find_expired_project_ids(
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> list[UUID]:
    result = await db.execute(
        select(Project.id).where(expired_filter(Project, now))
    )
    return [row[0] for row in result.all()]


async def purge_expired_tasks(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete trashed tasks past retention that survived the project cascade."""
    result = await db.execute(
        delete(Task).where(expired_filter(Task, now))
    )
    return result.rowcount or 0
