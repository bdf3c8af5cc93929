"""Authentication API endpoints.

Signup and login both answer with a bearer token plus the user it belongs
to, so a freshly registered account is signed in straight away.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.user import AuthSession, UserCreate, UserResponse
from ..services.auth_service import (
    authenticate_user,
    create_user,
    get_current_user,
    issue_access_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _session_for(user: User) -> AuthSession:
    return AuthSession(
        access_token=issue_access_token(user),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthSession,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and sign in",
    responses={400: {"description": "Email already registered"}},
)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    """
    Register and receive a token for the new account.

    The first account ever registered is given the admin role.
    """
    user = await create_user(db, user_data)
    logger.info(f"Registered user {user.id} with role {user.role}")
    return _session_for(user)


@router.post(
    "/login",
    response_model=AuthSession,
    summary="Sign in with email and password",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    """OAuth2 password form; ``username`` carries the email address."""
    user = await authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _session_for(user)


@router.get("/me", response_model=UserResponse, summary="Current user profile")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return current_user
