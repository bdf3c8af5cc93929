"""Pydantic schemas for activity log entries."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .user import UserSummary


class ActivityResponse(BaseModel):
    """Schema for an activity log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    user_id: Optional[UUID] = None
    user: Optional[UserSummary] = None
    action: str
    entity_type: str
    entity_id: Optional[UUID] = None
    entity_title: Optional[str] = None
    details: Optional[str] = None
    created_at: datetime
