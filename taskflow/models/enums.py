"""Enumerations shared by models, schemas and services."""

from enum import Enum


class UserRole(str, Enum):
    """Account-level role tag."""

    USER = "user"
    ADMIN = "admin"


class ProjectRole(str, Enum):
    """
    A user's resolved role on a project.

    Privilege is totally ordered: owner > editor > viewer > none.
    """

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _PROJECT_ROLE_RANK[self]


_PROJECT_ROLE_RANK = {
    ProjectRole.NONE: 0,
    ProjectRole.VIEWER: 1,
    ProjectRole.EDITOR: 2,
    ProjectRole.OWNER: 3,
}


class MemberRole(str, Enum):
    """Role that can be stored on a membership entry (the owner is never a member)."""

    EDITOR = "editor"
    VIEWER = "viewer"


class TaskStatus(str, Enum):
    """Board column of a task, in display order."""

    TODO = "Todo"
    ACTIVE = "Active"
    TESTING = "Testing"
    DONE = "Done"


class TaskPriority(str, Enum):
    """Task priority, lowest first."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @property
    def rank(self) -> int:
        return list(TaskPriority).index(self)


class EntityType(str, Enum):
    """Kind of entity an activity entry refers to."""

    PROJECT = "project"
    TASK = "task"


class ActivityAction(str, Enum):
    """Action tags recorded in the activity log."""

    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_ARCHIVED = "project.archived"
    PROJECT_UNARCHIVED = "project.unarchived"
    PROJECT_DELETED = "project.deleted"
    PROJECT_RESTORED = "project.restored"
    MEMBERS_UPDATED = "members.updated"
    TASK_CREATED = "task.created"
    TASK_UPDATED = "task.updated"
    TASK_COMMENTED = "task.commented"
    TASK_ARCHIVED = "task.archived"
    TASK_UNARCHIVED = "task.unarchived"
    TASK_DELETED = "task.deleted"
    TASK_RESTORED = "task.restored"
    TASK_PURGED = "task.purged"
