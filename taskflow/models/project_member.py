"""ProjectMember SQLAlchemy model for project membership."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class ProjectMember(Base):
    """
    Membership of a user in a project.

    ``role`` is 'editor' or 'viewer'. Rows migrated from the legacy flat
    member list carry no role (NULL); those resolve as editors.
    """

    __tablename__ = "ProjectMembers"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member_user"),
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
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(
        String(20),
        nullable=True,
    )
    created_at = Column(
        DateTime,
        default=utcnow,
        nullable=False,
    )

    project = relationship(
        "Project",
        back_populates="members",
    )
    user = relationship(
        "User",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<ProjectMember(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"
