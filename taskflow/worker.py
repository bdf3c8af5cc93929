"""
ARQ Worker Configuration

Runs the trash retention sweep on a Redis-backed schedule, for deployments
where several API processes run and the in-process cleanup loop is disabled
(TRASH_CLEANUP_IN_PROCESS=false).

Run with:
    arq taskflow.worker.WorkerSettings
"""

import logging
from typing import Any
from urllib.parse import urlparse

from arq import cron
from arq.connections import RedisSettings

from .config import settings
from .database import async_session_maker
from .services.trash_service import purge_expired_trash
from .utils.timeutils import utcnow

logger = logging.getLogger(__name__)


# Format: redis://host:port/db or redis://:password@host:port/db
def parse_redis_url(url: str) -> RedisSettings:
    """Parse Redis URL into ARQ RedisSettings."""
    parsed = urlparse(url)
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        password=parsed.password,
        database=int(parsed.path.lstrip("/") or 0),
    )


# =============================================================================
# Trash Cleanup Job
# =============================================================================


async def run_trash_cleanup(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Permanently delete trash older than the retention period.

    Returns:
        dict with counts of purged projects and tasks
    """
    logger.info("Running scheduled trash cleanup...")

    session_factory = ctx.get("session_factory", async_session_maker)
    try:
        async with session_factory() as db:
            return await purge_expired_trash(db)
    except Exception as e:
        logger.error(f"Error running trash cleanup: {e}", exc_info=True)
        return {
            "projects_purged": 0,
            "tasks_purged": 0,
            "run_at": utcnow().isoformat(),
        }


# =============================================================================
# Lifecycle Hooks
# =============================================================================


async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources when worker starts."""
    logger.info("ARQ worker starting up...")
    ctx["session_factory"] = async_session_maker


async def shutdown(ctx: dict[str, Any]) -> None:
    """Cleanup resources when worker stops."""
    logger.info("ARQ worker shutting down...")


# =============================================================================
# Worker Settings
# =============================================================================


class WorkerSettings:
    """ARQ worker configuration."""

    redis_settings = parse_redis_url(settings.redis_url)

    functions = [
        run_trash_cleanup,
    ]

    # Hourly at ARQ_TRASH_CLEANUP_MINUTE, plus once when the worker starts
    cron_jobs = [
        cron(
            run_trash_cleanup,
            minute={settings.arq_trash_cleanup_minute},
            run_at_startup=True,
            unique=True,
        ),
    ]

    on_startup = startup
    on_shutdown = shutdown

    max_jobs = 10
    job_timeout = 300
    keep_result = 3600

    health_check_interval = 30
