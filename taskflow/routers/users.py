"""Users API endpoints.

Provides the user directory for assignment pickers and self-service
profile management. A user can only read, change or delete their own account.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.user import UserResponse, UserSummary, UserUpdate
from ..services.auth_service import get_current_user, get_user_by_email
from ..services.project_helpers import clear_comment_author
from ..utils.security import get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _ensure_self(user_id: UUID, current_user: User) -> None:
    if user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own account",
        )


@router.get(
    "/list",
    response_model=List[UserSummary],
    summary="List all users",
    description="Id, email and display name of every user, for assignment pickers.",
)
async def list_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[UserSummary]:
    result = await db.execute(select(User).order_by(User.display_name, User.email))
    return [UserSummary.model_validate(u) for u in result.scalars().all()]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user profile",
    responses={403: {"description": "Not your account"}},
)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    _ensure_self(user_id, current_user)
    return current_user


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user profile",
    responses={
        400: {"description": "No fields to update or email already registered"},
        403: {"description": "Not your account"},
    },
)
async def update_user(
    user_id: UUID,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Update the caller's own profile.

    - **display_name**: New display name
    - **email**: New email (must not belong to another account)
    - **password**: New password (re-hashed)
    """
    _ensure_self(user_id, current_user)

    update_data = user_data.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update provided",
        )

    if "email" in update_data:
        email = update_data["email"].lower()
        existing = await get_user_by_email(db, email)
        if existing is not None and existing.id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )
        current_user.email = email

    if "display_name" in update_data:
        current_user.display_name = update_data["display_name"]

    if "password" in update_data:
        current_user.password_hash = get_password_hash(update_data["password"])

    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user account",
    responses={403: {"description": "Not your account"}},
)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete the caller's own account.

    Projects they created keep existing without an owner, their memberships
    are removed, tasks assigned to them become unassigned and their comments
    stay with no author.
    """
    _ensure_self(user_id, current_user)

    await clear_comment_author(db, current_user.id)
    await db.delete(current_user)
    await db.commit()
    logger.info(f"User {user_id} deleted their account")
    return None
