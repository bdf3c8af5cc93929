"""Pydantic schemas for Project and membership validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.enums import MemberRole, ProjectRole
from ..utils.timeutils import to_naive_utc
from .user import UserSummary


class MemberInput(BaseModel):
    """One membership entry in a create/update payload."""

    user_id: UUID = Field(..., description="ID of the member")
    role: MemberRole = Field(
        MemberRole.EDITOR,
        description="Member role (editor or viewer)",
    )


class MemberRoleUpdate(BaseModel):
    """Schema for changing a member's role."""

    role: MemberRole


def _reject_duplicate_members(members: Optional[list[MemberInput]]) -> Optional[list[MemberInput]]:
    if members is None:
        return members
    seen: set[UUID] = set()
    for member in members:
        if member.user_id in seen:
            raise ValueError(f"User {member.user_id} is listed more than once")
        seen.add(member.user_id)
    return members


class ProjectCreate(BaseModel):
    """Schema for creating a new project. The caller becomes the owner."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Project title",
        examples=["Launch"],
    )
    description: str = Field(
        "",
        description="Project description",
    )
    due_date: Optional[datetime] = Field(
        None,
        description="Optional due date",
    )
    members: list[MemberInput] = Field(
        default_factory=list,
        description="Initial members (the owner is never listed)",
    )

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("members")
    @classmethod
    def unique_members(cls, value):
        return _reject_duplicate_members(value)

    @field_validator("due_date")
    @classmethod
    def due_date_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Only fields that are sent are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    archived: Optional[bool] = Field(
        None,
        description="Move the project into (true) or out of (false) the archive",
    )
    members: Optional[list[MemberInput]] = Field(
        None,
        description="Full replacement membership list (owner only)",
    )

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("members")
    @classmethod
    def unique_members(cls, value):
        return _reject_duplicate_members(value)

    @field_validator("due_date")
    @classmethod
    def due_date_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class MemberResponse(BaseModel):
    """A membership entry with its effective role."""

    user_id: UUID
    role: MemberRole
    user: Optional[UserSummary] = None


class ProjectPermissionFlags(BaseModel):
    """What the caller may do with the project."""

    can_view: bool = False
    can_edit_project: bool = False
    can_manage_members: bool = False
    can_delete_project: bool = False
    can_restore_project: bool = False
    can_permanent_delete_project: bool = False
    can_edit_tasks: bool = False


class ProjectResponse(BaseModel):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str = ""
    due_date: Optional[datetime] = None
    created_by: Optional[UUID] = None
    owner: Optional[UserSummary] = None
    members: list[MemberResponse] = Field(default_factory=list)
    archived: bool = False
    archived_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    purge_at: Optional[datetime] = Field(
        None,
        description="When a trashed project will be permanently deleted",
    )
    days_until_purge: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    tasks_count: int = 0
    my_role: ProjectRole = ProjectRole.NONE
    permissions: ProjectPermissionFlags = Field(default_factory=ProjectPermissionFlags)
