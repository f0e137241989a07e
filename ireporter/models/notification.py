"""SQLAlchemy ORM model for notifications."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from ireporter.database import Base
from .base import PublicIdMixin


class Notification(PublicIdMixin, Base):
    __tablename__ = "notifications"

    recipient_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(64), nullable=False, server_default="generic", default="generic")
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    emailed_at = Column(DateTime(timezone=True), nullable=True)

    recipient = relationship("User", back_populates="notifications")


__all__ = ["Notification"]
