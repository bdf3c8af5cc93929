"""Activity log API endpoints."""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.activity import ActivityResponse
from ..services.activity_service import ACTIVITY_LIST_LIMIT, list_project_activities
from ..services.auth_service import get_current_user
from ..services.project_helpers import verify_project_access

router = APIRouter(prefix="/api/projects/{project_id}/activities", tags=["Activities"])


@router.get(
    "",
    response_model=List[ActivityResponse],
    summary="List project activity",
    responses={404: {"description": "Project not found"}},
)
async def list_activities(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(ACTIVITY_LIST_LIMIT, ge=1, le=ACTIVITY_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
) -> List[ActivityResponse]:
    """Newest-first activity entries of a project the caller can read."""
    await verify_project_access(db, project_id, current_user)
    activities = await list_project_activities(db, project_id, limit)
    return [ActivityResponse.model_validate(a) for a in activities]
