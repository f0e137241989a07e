"""Convenience exports for ORM models."""
from .notification import Notification
from .report import Report
from .user import User

__all__ = ["Notification", "Report", "User"]
