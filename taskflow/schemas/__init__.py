"""Pydantic schemas package."""

from .activity import ActivityResponse
from .project import (
    MemberInput,
    MemberResponse,
    MemberRoleUpdate,
    ProjectCreate,
    ProjectPermissionFlags,
    ProjectResponse,
    ProjectUpdate,
)
from .task import (
    BoardColumn,
    BoardResponse,
    CommentCreate,
    CommentResponse,
    SubtaskInput,
    SubtaskResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from .user import AuthSession, UserCreate, UserResponse, UserSummary, UserUpdate

__all__ = [
    "ActivityResponse",
    "AuthSession",
    "BoardColumn",
    "BoardResponse",
    "CommentCreate",
    "CommentResponse",
    "MemberInput",
    "MemberResponse",
    "MemberRoleUpdate",
    "ProjectCreate",
    "ProjectPermissionFlags",
    "ProjectResponse",
    "ProjectUpdate",
    "SubtaskInput",
    "SubtaskResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
]
