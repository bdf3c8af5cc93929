"""
Background Trash Cleanup Service

Simple asyncio-based service that permanently deletes trash older than the
retention period (30 days by default). Runs shortly after startup, then hourly.

Sweep order:
1. Find expired trashed projects
2. For each one, delete its tasks, then the project (one commit per project)
3. Delete remaining expired trashed tasks not removed by a project cascade

A failure on one project is logged and the sweep continues with the next.
Re-running with nothing newly expired is a no-op.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import settings
from ..database import async_session_maker
from ..models.project import Project
from ..utils.timeutils import utcnow
from .lifecycle_service import (
    find_expired_project_ids,
    is_purge_eligible,
    purge_expired_tasks,
    purge_project,
)

logger = logging.getLogger(__name__)


async def purge_expired_trash(db: AsyncSession, now: Optional[datetime] = None) -> dict:
    """
    Permanently delete projects and tasks trashed before the retention cutoff.

    Args:
        db: Database session
        now: Reference time (defaults to the current UTC time)

    Returns:
        dict: Counts of purged projects and tasks
    """
    now = now or utcnow()
    projects_purged = 0
    tasks_purged = 0

    project_ids = await find_expired_project_ids(db, now)
    for project_id in project_ids:
        try:
            # Skip projects restored since the scan
            project = await db.get(Project, project_id, populate_existing=True)
            if project is None or not is_purge_eligible(project, now):
                logger.info(f"  Project {project_id} no longer expired, skipping")
                continue
            removed_tasks = await purge_project(db, project_id)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to purge project {project_id}: {e}", exc_info=True)
            continue
        projects_purged += 1
        tasks_purged += removed_tasks
        logger.info(f"  Purged project {project_id} and {removed_tasks} task(s)")

    try:
        expired_tasks = await purge_expired_tasks(db, now)
        await db.commit()
        tasks_purged += expired_tasks
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to purge expired tasks: {e}", exc_info=True)

    if projects_purged or tasks_purged:
        logger.info(
            f"Trash cleanup complete: {projects_purged} project(s), {tasks_purged} task(s) purged"
        )
    else:
        logger.debug("No expired trash to purge")

    return {
        "projects_purged": projects_purged,
        "tasks_purged": tasks_purged,
        "run_at": now.isoformat(),
    }


class TrashCleanupService:
    """
    Cancellable background loop around purge_expired_trash().

    start() schedules the loop, stop() cancels it and waits for it to finish.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker = async_session_maker,
        interval_seconds: Optional[float] = None,
        initial_delay_seconds: Optional[float] = None,
    ) -> None:
        self.session_factory = session_factory
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else settings.trash_cleanup_interval_seconds
        )
        self.initial_delay_seconds = (
            initial_delay_seconds
            if initial_delay_seconds is not None
            else settings.trash_cleanup_initial_delay_seconds
        )
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self.last_result: Optional[dict] = None

    async def start(self) -> None:
        """Start the background cleanup loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info(
            f"Trash cleanup service started (first run in {self.initial_delay_seconds}s, "
            f"then every {self.interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the cleanup service."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Trash cleanup service stopped")

    @property
    def is_running(self) -> bool:
        """Check if service is running."""
        return self._running

    async def _cleanup_loop(self) -> None:
        """Wait the initial delay, then sweep every interval until cancelled."""
        try:
            await asyncio.sleep(self.initial_delay_seconds)
        except asyncio.CancelledError:
            return

        while self._running:
            try:
                await self.run_now()
            except Exception as e:
                logger.error(f"Trash cleanup error: {e}", exc_info=True)

            try:
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break

    async def run_now(self, now: Optional[datetime] = None) -> dict:
        """
        Run one sweep immediately.

        Returns:
            dict: Summary of purged counts
        """
        async with self.session_factory() as db:
            result = await purge_expired_trash(db, now)
        self.last_result = result
        return result


# Global instance
trash_cleanup_service = TrashCleanupService()
