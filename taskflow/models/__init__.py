"""SQLAlchemy ORM models package."""

from .activity import Activity
from .enums import (
    ActivityAction,
    EntityType,
    MemberRole,
    ProjectRole,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from .project import Project
from .project_member import ProjectMember
from .task import Task
from .user import User

__all__ = [
    "Activity",
    "ActivityAction",
    "EntityType",
    "MemberRole",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "UserRole",
]
