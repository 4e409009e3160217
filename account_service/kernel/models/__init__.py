"""
Kernel Data Models

SQLAlchemy models backing the account repository.
"""

from account_service.kernel.models.base import Base, TimestampMixin
from account_service.kernel.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
]
