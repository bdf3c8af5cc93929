"""Pydantic schemas for Task model validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.enums import TaskPriority, TaskStatus
from .user import UserSummary


def _required_text(value: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(message)
    return value


class SubtaskInput(BaseModel):
    """Subtask entry in a create/update payload."""

    id: Optional[str] = Field(None, description="Existing subtask id (kept when sent back)")
    title: str = Field(..., min_length=1, max_length=500)
    completed: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _required_text(value, "Subtask title is required")


class SubtaskResponse(BaseModel):
    id: str
    title: str
    completed: bool = False


class CommentCreate(BaseModel):
    """Schema for adding a comment to a task."""

    text: str = Field(..., min_length=1, max_length=10000)

    @field_validator("text")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _required_text(value, "Comment text is required")


class CommentResponse(BaseModel):
    id: str
    user_id: Optional[UUID] = None
    text: str
    created_at: datetime


class TaskCreate(BaseModel):
    """Schema for creating a new task in a project."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Task title",
        examples=["Write release notes"],
    )
    description: str = Field(
        ...,
        min_length=1,
        description="Task description (required)",
    )
    status: TaskStatus = Field(TaskStatus.TODO, description="Board column")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Priority")
    assigned_to: Optional[UUID] = Field(None, description="ID of the assigned user")
    subtasks: list[SubtaskInput] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _required_text(value, "Title is required")

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return _required_text(value, "Description is required")


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only fields that are sent are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[UUID] = None
    order: Optional[int] = Field(None, ge=0)
    subtasks: Optional[list[SubtaskInput]] = None
    archived: Optional[bool] = Field(
        None,
        description="Move the task into (true) or out of (false) the archive",
    )

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _required_text(value, "Title cannot be empty")

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _required_text(value, "Description cannot be empty")


class TaskResponse(BaseModel):
    """Schema for task response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    order: int
    assigned_to: Optional[UUID] = None
    assignee: Optional[UserSummary] = None
    subtasks: list[SubtaskResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    archived: bool = False
    archived_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    purge_at: Optional[datetime] = None
    days_until_purge: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class BoardColumn(BaseModel):
    """One status column of the board."""

    status: TaskStatus
    tasks: list[TaskResponse] = Field(default_factory=list)


class BoardResponse(BaseModel):
    project_id: UUID
    columns: list[BoardColumn]
