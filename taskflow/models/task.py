"""Task SQLAlchemy model for board items."""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow
from .enums import TaskPriority, TaskStatus


class Task(Base):
    """
    Task model representing a card on a project's board.

    Subtasks and comments are embedded JSON lists:
    ``subtasks``: [{"id", "title", "completed"}]
    ``comments``: [{"id", "user", "text", "created_at"}] (user may be null)

    Attributes:
        id: Unique identifier (UUID)
        project_id: FK to parent project
        assigned_to: FK to assigned user
        title: Task title
        description: Task description (required, non-empty)
        status: Board column (Todo, Active, Testing, Done)
        priority: Priority (Low, Medium, High, Urgent)
        order: Manual ordering within the project; never renumbered
        archived: Whether the task sits in the archive
        archived_at: When the task was archived
        deleted_at: When the task was moved to trash
        created_at: Timestamp when task was created
        updated_at: Timestamp when task was last updated
    """

    __tablename__ = "Tasks"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Foreign keys
    project_id = Column(
        Uuid,
        ForeignKey("Projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_to = Column(
        Uuid,
        ForeignKey("Users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Task details
    title = Column(
        String(500),
        nullable=False,
    )
    description = Column(
        Text,
        nullable=False,
    )
    status = Column(
        String(20),
        nullable=False,
        default=TaskStatus.TODO.value,
    )
    priority = Column(
        String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
    )
    order = Column(
        Integer,
        nullable=False,
        default=0,
    )

    subtasks = Column(
        JSON,
        nullable=False,
        default=list,
    )
    comments = Column(
        JSON,
        nullable=False,
        default=list,
    )

    # Lifecycle
    archived = Column(
        Boolean,
        nullable=False,
        default=False,
    )
    archived_at = Column(
        DateTime,
        nullable=True,
    )
    deleted_at = Column(
        DateTime,
        nullable=True,
        index=True,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=utcnow,
        nullable=False,
    )
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # Relationships
    project = relationship(
        "Project",
        lazy="joined",
    )
    assignee = relationship(
        "User",
        foreign_keys=[assigned_to],
        lazy="joined",
    )

    def __repr__(self) -> str:
        """String representation of Task."""
        return f"<Task(id={self.id}, title={self.title[:30]})>"
