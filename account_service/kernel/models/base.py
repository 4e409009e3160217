"""
Declarative base and shared columns for the account tables.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    # Uuid renders as CHAR(32) on SQLite and native UUID on Postgres
    type_annotation_map = {uuid.UUID: Uuid()}


class TimestampMixin:
    """Server-side created_at / updated_at stamps, as shown in profile responses."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
