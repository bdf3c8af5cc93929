"""User SQLAlchemy model for authentication and user management."""

import uuid

from sqlalchemy import Column, DateTime, String, Uuid

from ..database import Base
from ..utils.timeutils import utcnow
from .enums import UserRole


class User(Base):
    """
    User model representing application users.

    Attributes:
        id: Unique identifier (UUID)
        email: User's email address (unique, stored lowercase)
        password_hash: Hashed password for authentication
        display_name: User's display name
        role: Account role tag ('user' or 'admin')
        created_at: Timestamp when user was created
        updated_at: Timestamp when user was last updated
    """

    __tablename__ = "Users"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Authentication fields
    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash = Column(
        String(255),
        nullable=False,
    )

    # Profile fields
    display_name = Column(
        String(100),
        nullable=False,
    )
    role = Column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
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

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email={self.email})>"
