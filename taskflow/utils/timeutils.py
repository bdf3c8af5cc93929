"""Time helpers.

All timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time without tzinfo, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
