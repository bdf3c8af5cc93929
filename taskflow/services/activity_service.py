"""Best-effort activity logging.

Activity entries are written in their own session after the caller has
committed its primary change. A failed write is logged and swallowed; it never
fails or rolls back the operation that produced it.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import async_session_maker
from ..models.activity import Activity
from ..models.enums import ActivityAction, EntityType

logger = logging.getLogger(__name__)

ACTIVITY_LIST_LIMIT = 100


class ActivityLogger:
    """Writes activity entries through a dedicated session factory."""

    def __init__(self, session_factory: async_sessionmaker = async_session_maker) -> None:
        self.session_factory = session_factory

    async def record(
        self,
        project_id: UUID,
        action: Union[ActivityAction, str],
        user_id: Optional[UUID] = None,
        entity_type: Union[EntityType, str] = EntityType.TASK,
        entity_id: Optional[UUID] = None,
        entity_title: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        """Record one event. Never raises."""
        try:
            async with self.session_factory() as session:
                session.add(
                    Activity(
                        project_id=project_id,
                        user_id=user_id,
                        action=ActivityAction(action).value,
                        entity_type=EntityType(entity_type).value,
                        entity_id=entity_id,
                        entity_title=entity_title,
                        details=details,
                    )
                )
                await session.commit()
        except Exception as e:
            logger.warning(f"Activity log failed ({action} on project {project_id}): {e}")


async def list_project_activities(
    db: AsyncSession,
    project_id: UUID,
    limit: int = ACTIVITY_LIST_LIMIT,
) -> list[Activity]:
    """Newest-first activity entries for a project."""
    result = await db.execute(
        select(Activity)
        .where(Activity.project_id == project_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


# Global instance
activity_logger = ActivityLogger()
