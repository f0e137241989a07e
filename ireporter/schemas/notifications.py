"""Schemas for notifications."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    message: str
    read: bool
    created_at: datetime
    emailed_at: datetime | None = None
    report: dict[str, Any] | None = None


class NotificationCreateRequest(BaseModel):
    user_id: str
    message: str = Field(..., max_length=2000)
    force_email: bool = False


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int = 0


class NotificationBulkResponse(BaseModel):
    message: str
    count: int = 0


__all__ = [
    "NotificationResponse",
    "NotificationCreateRequest",
    "NotificationListResponse",
    "NotificationBulkResponse",
]
