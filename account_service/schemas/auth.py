"""
Account schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


def _clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Name is required")
    return v.strip()


class UserCreate(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class UserUpdate(BaseModel):
    """
    Account update request.

    Omitted fields are left unchanged. Changing the password needs both
    ``old_password`` and ``new_password``; an empty string counts as omitted.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    old_password: Optional[str] = Field(None, max_length=MAX_PASSWORD_LENGTH)
    new_password: Optional[str] = Field(None, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)

    @field_validator("old_password", "new_password")
    @classmethod
    def empty_as_missing(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Please enter a password with at least {MIN_PASSWORD_LENGTH} characters"
            )
        return v

    @model_validator(mode="after")
    def passwords_come_in_pairs(self) -> "UserUpdate":
        if (self.old_password is None) != (self.new_password is None):
            missing = "old_password" if self.old_password is None else "new_password"
            raise ValueError(f"{missing} is required to change the password")
        return self

    @property
    def changes_password(self) -> bool:
        return self.old_password is not None and self.new_password is not None


class UserResponse(BaseModel):
    """User profile response. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    """Registration response."""

    token: str


class UserUpdateResponse(BaseModel):
    """Account update response."""

    success: bool = True
    user: UserResponse
