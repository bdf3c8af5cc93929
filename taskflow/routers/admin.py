"""Administrative endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..models.user import User
from ..services.auth_service import get_current_user
from ..services.trash_service import trash_cleanup_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


class PurgeResult(BaseModel):
    """Counts reported by one retention sweep."""

    projects_purged: int
    tasks_purged: int
    run_at: str


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post(
    "/purge-trash",
    response_model=PurgeResult,
    summary="Run the trash retention sweep now",
    responses={403: {"description": "Admin access required"}},
)
async def purge_trash(
    current_user: Annotated[User, Depends(require_admin)],
) -> PurgeResult:
    """Permanently delete everything that has been in the trash past the retention period."""
    logger.info(f"Manual trash purge requested by {current_user.email}")
    result = await trash_cleanup_service.run_now()
    return PurgeResult(**result)
