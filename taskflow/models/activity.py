"""Activity SQLAlchemy model for the append-only project event log."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow
from .enums import EntityType


class Activity(Base):
    """
    Immutable record of something that happened in a project.

    Attributes:
        id: Unique identifier (UUID)
        project_id: Project the event belongs to
        user_id: Acting user (NULL for system actions or deleted users)
        action: Action tag, e.g. 'task.created'
        entity_type: 'project' or 'task'
        entity_id: ID of the affected entity
        entity_title: Title of the entity at the time of the event
        details: Free-text detail
        created_at: When the event was recorded
    """

    __tablename__ = "Activities"
    __table_args__ = (
        Index("ix_Activities_project_created", "project_id", "created_at"),
    )

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    project_id = Column(
        Uuid,
        ForeignKey("Projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid,
        ForeignKey("Users.id", ondelete="SET NULL"),
        nullable=True,
    )
    action = Column(
        String(50),
        nullable=False,
    )
    entity_type = Column(
        String(20),
        nullable=False,
        default=EntityType.TASK.value,
    )
    entity_id = Column(
        Uuid,
        nullable=True,
    )
    entity_title = Column(
        String(500),
        nullable=True,
    )
    details = Column(
        Text,
        nullable=True,
    )
    created_at = Column(
        DateTime,
        default=utcnow,
        nullable=False,
    )

    user = relationship(
        "User",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<Activity(project_id={self.project_id}, action={self.action})>"
