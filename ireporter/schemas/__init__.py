"""Convenience exports for schema layer."""
from .auth import AuthResponse, LoginRequest, MeResponse, MessageResponse, PublicUser, RegisterRequest
from .notifications import (
    NotificationBulkResponse,
    NotificationCreateRequest,
    NotificationListResponse,
    NotificationResponse,
)
from .profiles import PasswordChangeRequest, ProfileUpdateRequest
from .reports import (
    ReportCreateRequest,
    ReportEnvelope,
    ReportResponse,
    ReportStatusUpdateRequest,
)

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "MeResponse",
    "MessageResponse",
    "PublicUser",
    "RegisterRequest",
    "NotificationBulkResponse",
    "NotificationCreateRequest",
    "NotificationListResponse",
    "NotificationResponse",
    "PasswordChangeRequest",
    "ProfileUpdateRequest",
    "ReportCreateRequest",
    "ReportEnvelope",
    "ReportResponse",
    "ReportStatusUpdateRequest",
]
