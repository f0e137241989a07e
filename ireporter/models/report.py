"""SQLAlchemy ORM model for citizen incident reports."""
from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from ireporter.database import Base
from .base import PublicIdMixin, TimestampMixin


class Report(PublicIdMixin, TimestampMixin, Base):
    __tablename__ = "reports"

    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    lat = Column(Float, nullable=False, default=0.0)
    lng = Column(Float, nullable=False, default=0.0)
    type = Column(String(64), nullable=False, server_default="general", default="general")

    # "pending" | "under-investigation" | "resolved" | "rejected"
    status = Column(String(32), nullable=False, server_default="pending", default="pending", index=True)

    media = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)

    owner = relationship("User", back_populates="reports")


__all__ = ["Report"]
