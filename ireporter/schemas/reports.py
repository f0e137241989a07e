"""Schemas for incident reports."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class ReportCreateRequest(BaseModel):
    # Required fields are checked by the service so blank strings and missing
    # keys fail the same way.
    title: str | None = None
    description: str | None = None
    location: str | None = None
    type: str | None = Field(default=None, max_length=64)
    # Coordinates are taken raw; unusable values become 0.0 in the service.
    lat: Any = None
    lng: Any = None
    media: list[str] = Field(default_factory=list)


class ReportStatusUpdateRequest(BaseModel):
    status: str


class ReportResponse(BaseModel):
    id: UUID
    owner_id: UUID
    owner_name: str
    title: str
    description: str
    location: str
    lat: float
    lng: float
    type: str
    status: str
    media: list[str]
    created_at: datetime


class ReportEnvelope(BaseModel):
    message: str
    report: ReportResponse


__all__ = [
    "ReportCreateRequest",
    "ReportStatusUpdateRequest",
    "ReportResponse",
    "ReportEnvelope",
]
