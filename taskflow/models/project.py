"""Project SQLAlchemy model."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class Project(Base):
    """
    Project model: a board of tasks shared between an owner and members.

    The creator is the sole owner and is never repeated in ``members``.
    Lifecycle is carried by ``archived``/``archived_at`` and ``deleted_at``
    (see services.lifecycle_service).

    Attributes:
        id: Unique identifier (UUID)
        title: Project title
        description: Free-text description
        due_date: Optional due timestamp
        created_by: FK to the owning user (NULL once that user is deleted)
        archived: Whether the project sits in the archive
        archived_at: When the project was archived
        deleted_at: When the project was moved to trash (NULL if not trashed)
        created_at: Timestamp when project was created
        updated_at: Timestamp when project was last updated
    """

    __tablename__ = "Projects"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    title = Column(
        String(255),
        nullable=False,
    )
    description = Column(
        Text,
        nullable=False,
        default="",
    )
    due_date = Column(
        DateTime,
        nullable=True,
    )

    created_by = Column(
        Uuid,
        ForeignKey("Users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
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
    creator = relationship(
        "User",
        foreign_keys=[created_by],
        lazy="joined",
    )
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.created_at",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of Project."""
        return f"<Project(id={self.id}, title={self.title[:30]})>"
