"""
Pydantic schemas for API request/response validation.
"""

from account_service.schemas.auth import (
    UserCreate,
    UserUpdate,
    UserResponse,
    TokenResponse,
    UserUpdateResponse,
)
from account_service.schemas.common import (
    HealthResponse,
    format_errors,
)

__all__ = [
    # Auth
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "TokenResponse",
    "UserUpdateResponse",
    # Common
    "HealthResponse",
    "format_errors",
]
