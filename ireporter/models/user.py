"""SQLAlchemy ORM model for application users."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from ireporter.database import Base
from .base import PublicIdMixin, TimestampMixin


class User(PublicIdMixin, TimestampMixin, Base):
    __tablename__ = "users"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, server_default="user", default="user", index=True)
    phone = Column(String(32), nullable=True)
    bio = Column(String(500), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    first_login_shown = Column(Boolean, nullable=False, server_default=expression.false(), default=False)

    reports = relationship("Report", back_populates="owner", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="recipient", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or (self.email or "")


__all__ = ["User"]
