"""Utility functions and helpers."""

from .security import get_password_hash, verify_password
from .timeutils import utcnow

__all__ = [
    "get_password_hash",
    "utcnow",
    "verify_password",
]
