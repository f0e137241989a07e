"""Project-wide constant values."""
from __future__ import annotations

from typing import Final

REPORT_STATUSES: Final[tuple[str, ...]] = ("pending", "under-investigation", "resolved", "rejected")
DEFAULT_REPORT_STATUS: Final[str] = "pending"
DEFAULT_REPORT_TYPE: Final[str] = "general"

ROLE_USER: Final[str] = "user"
ROLE_ADMIN: Final[str] = "admin"

# Realtime event names shared with the SPA socket client.
EVENT_NOTIFICATION_NEW: Final[str] = "notification:new"
EVENT_REPORT_UPDATED: Final[str] = "report:updated"
EVENT_USER_REPORTS: Final[str] = "user-reports"

__all__ = [
    "REPORT_STATUSES",
    "DEFAULT_REPORT_STATUS",
    "DEFAULT_REPORT_TYPE",
    "ROLE_USER",
    "ROLE_ADMIN",
    "EVENT_NOTIFICATION_NEW",
    "EVENT_REPORT_UPDATED",
    "EVENT_USER_REPORTS",
]
