"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    change_password,
    clear_session_cookie,
    create_access_token,
    decode_access_token,
    ensure_admin,
    get_current_user,
    register_user,
    require_roles,
    resolve_token_user,
    set_session_cookie,
)
from .email_service import EmailDeliveryError, MailGateway, send_email
from .notification_service import (
    NotificationEmitter,
    NotificationType,
    count_unread_notifications,
    delete_all_notifications,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_notification_read,
    to_notification_response,
)
from .presence import PresenceRegistry
from .report_service import (
    create_report,
    delete_report,
    list_reports,
    list_user_reports,
    set_report_status,
    to_report_response,
)
from .task_queue import BackgroundTaskQueue
from .user_service import get_user, list_admins, mark_first_login_shown, to_public_user, update_profile

__all__ = [
    "authenticate_user",
    "change_password",
    "clear_session_cookie",
    "create_access_token",
    "decode_access_token",
    "ensure_admin",
    "get_current_user",
    "register_user",
    "require_roles",
    "resolve_token_user",
    "set_session_cookie",
    "EmailDeliveryError",
    "MailGateway",
    "send_email",
    "NotificationEmitter",
    "NotificationType",
    "count_unread_notifications",
    "delete_all_notifications",
    "delete_notification",
    "list_notifications",
    "mark_all_read",
    "mark_notification_read",
    "to_notification_response",
    "PresenceRegistry",
    "create_report",
    "delete_report",
    "list_reports",
    "list_user_reports",
    "set_report_status",
    "to_report_response",
    "BackgroundTaskQueue",
    "get_user",
    "list_admins",
    "mark_first_login_shown",
    "to_public_user",
    "update_profile",
]
