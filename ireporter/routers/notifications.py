"""Notification API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..constants import ROLE_ADMIN
from ..database import get_session
from ..dependencies import get_notification_emitter
from ..errors import ValidationError
from ..models import User
from ..schemas import (
    MessageResponse,
    NotificationBulkResponse,
    NotificationCreateRequest,
    NotificationListResponse,
    NotificationResponse,
)
from ..services import (
    NotificationEmitter,
    count_unread_notifications,
    delete_all_notifications,
    delete_notification,
    get_current_user,
    list_notifications,
    mark_all_read,
    mark_notification_read,
    require_roles,
    to_notification_response,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_my_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationListResponse:
    records = list_notifications(db, current_user)
    return NotificationListResponse(
        notifications=[to_notification_response(item) for item in records],
        unread_count=count_unread_notifications(db, current_user),
    )


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification_endpoint(
    payload: NotificationCreateRequest,
    _: User = Depends(require_roles(ROLE_ADMIN)),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> NotificationResponse:
    """Send an ad-hoc notification to any user; realtime if online, email otherwise."""

    message = payload.message.strip()
    if not payload.user_id.strip() or not message:
        raise ValidationError("user_id and message are required")
    notification = await emitter.notify(payload.user_id, message, force_email=payload.force_email)
    return to_notification_response(notification)


# Declared before "/{notification_id}/read" so the literal path wins.
@router.put("/mark-all-read", response_model=NotificationBulkResponse)
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationBulkResponse:
    updated = mark_all_read(db, current_user)
    return NotificationBulkResponse(message="All notifications marked as read", count=updated)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_one_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationResponse:
    return to_notification_response(mark_notification_read(db, current_user, notification_id))


@router.delete("", response_model=NotificationBulkResponse)
async def delete_my_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> NotificationBulkResponse:
    removed = delete_all_notifications(db, current_user)
    return NotificationBulkResponse(message="All notifications deleted", count=removed)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_one_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    delete_notification(db, current_user, notification_id)
    return MessageResponse(message="Notification deleted")


__all__ = ["router"]
