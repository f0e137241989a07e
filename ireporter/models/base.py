"""Utility mixins shared across ORM models."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func


class PublicIdMixin:
    """Internal integer key plus the UUID exposed outside the process.

    Foreign keys point at ``id``; tokens, URLs, sockets and payloads only ever
    carry ``public_id``.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(UUID(as_uuid=True), unique=True, nullable=False, index=True, default=uuid.uuid4)


class TimestampMixin:
    """Reusable timestamp columns with timezone-aware defaults."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


__all__ = ["PublicIdMixin", "TimestampMixin"]
