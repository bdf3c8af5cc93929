"""Pydantic schemas for User model validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.enums import UserRole


class UserBase(BaseModel):
    """Base schema with common user fields."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["user@example.com"],
    )
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User's display name",
        examples=["Jane Doe"],
    )


class UserCreate(UserBase):
    """Schema for creating a new user (registration)."""

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="User's password (will be hashed)",
    )


class UserUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class UserSummary(BaseModel):
    """Minimal user information for owner/member/assignee display."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: Optional[str] = None


class UserResponse(UserBase):
    """Schema for user response (public data only)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        ...,
        description="Unique user identifier",
    )
    role: UserRole = Field(
        UserRole.USER,
        description="Account role",
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthSession(BaseModel):
    """Bearer token issued on signup or login, with the signed-in user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
