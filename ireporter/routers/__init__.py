"""Aggregate router exports."""
from .auth import router as auth_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router
from .reports import router as reports_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "notifications_router",
    "realtime_router",
    "reports_router",
    "users_router",
]
