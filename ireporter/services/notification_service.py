"""Notification delivery and the notification store.

:class:`NotificationEmitter` persists a notification and then reaches the
recipient over whichever channel is available: a realtime push when the user
holds a live socket, an email otherwise. Both channels are best-effort and run
on the background queue, so a slow mail relay or a dead socket never fails or
delays the request that triggered the notification.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Protocol
from uuid import UUID, uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import EVENT_NOTIFICATION_NEW
from ..database import commit_or_raise, create_session
from ..errors import NotFoundError
from ..models import Notification, User
from ..schemas import NotificationResponse
from .email_service import EmailDeliveryError
from .presence import PresenceRegistry
from .task_queue import BackgroundTaskQueue
from .user_service import get_user, parse_public_id

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_SUBJECT = "iReporter notification"


class NotificationType(StrEnum):
    GENERIC = "generic"
    NEW_REPORT = "new-report"
    STATUS_UPDATE = "status-update"
    REPORT_DELETED = "report-deleted"


class Mailer(Protocol):
    async def send(self, to_address: str, subject: str, body: str) -> bool: ...


def to_notification_response(notification: Notification, *, report: dict[str, Any] | None = None) -> NotificationResponse:
    return NotificationResponse(
        id=notification.public_id,
        type=notification.type or NotificationType.GENERIC,
        message=notification.message,
        read=bool(notification.read),
        created_at=notification.created_at,
        emailed_at=notification.emailed_at,
        report=report,
    )


def build_email_body(message: str) -> str:
    base_url = get_settings().public_base_url.rstrip("/")
    return f"{message}\n\nView your notifications on iReporter: {base_url}/notifications"


class NotificationEmitter:
    """Persists notifications and fans them out to realtime or email."""

    def __init__(
        self,
        db: Session,
        *,
        presence: PresenceRegistry,
        tasks: BackgroundTaskQueue,
        mailer: Mailer,
        session_factory: Callable[[], Session] = create_session,
    ) -> None:
        self._db = db
        self._presence = presence
        self._tasks = tasks
        self._mailer = mailer
        self._session_factory = session_factory

    async def notify(
        self,
        recipient_id: UUID | str,
        message: str,
        *,
        force_email: bool = False,
        type_: NotificationType | str = NotificationType.GENERIC,
        report: dict[str, Any] | None = None,
        email_subject: str | None = None,
    ) -> Notification:
        """Store a notification for ``recipient_id`` and deliver it.

        Raises :class:`NotFoundError` when the recipient does not exist and
        :class:`UpstreamError` when the row cannot be stored. The realtime push
        and the email are submitted to the background queue; this call does
        not wait for either.
        """

        recipient = get_user(self._db, recipient_id)

        # The id is assigned here so the pushed payload and the stored row agree
        # even when the push lands before the commit.
        notification = Notification(
            public_id=uuid4(),
            recipient_id=recipient.id,
            type=str(type_),
            message=message,
            read=False,
            created_at=datetime.now(timezone.utc),
        )

        online = self._presence.is_online(recipient.public_id)
        if online:
            payload = to_notification_response(notification, report=report).model_dump(mode="json")
            self._tasks.submit(
                self._presence.send_to(recipient.public_id, EVENT_NOTIFICATION_NEW, payload),
                name=f"push-notification-{notification.public_id}",
            )

        self._db.add(notification)
        commit_or_raise(self._db, action="save notification")
        self._db.refresh(notification)

        if (force_email or not online) and recipient.email:
            self._tasks.submit(
                self._deliver_email(
                    notification.public_id,
                    recipient.email,
                    email_subject or DEFAULT_EMAIL_SUBJECT,
                    build_email_body(message),
                ),
                name=f"email-notification-{notification.public_id}",
            )

        return notification

    async def _deliver_email(self, notification_id: UUID, to_address: str, subject: str, body: str) -> bool:
        try:
            delivered = await self._mailer.send(to_address, subject, body)
        except EmailDeliveryError as exc:
            logger.warning("Email delivery failed for notification %s: %s", notification_id, exc)
            return False
        except Exception:
            logger.exception("Unexpected mail failure for notification %s", notification_id)
            return False

        if not delivered:
            return False

        logger.info("Notification %s emailed", notification_id)
        self._record_emailed(notification_id)
        return True

    def _record_emailed(self, notification_id: UUID) -> None:
        # The request session may already be closed when this runs.
        with self._session_factory() as session:
            try:
                session.execute(
                    update(Notification)
                    .where(Notification.public_id == notification_id)
                    .values(emailed_at=datetime.now(timezone.utc))
                )
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.warning("Could not record email delivery for notification %s", notification_id)


def list_notifications(db: Session, user: User) -> list[Notification]:
    """Return notifications for ``user`` ordered newest first."""

    stmt = (
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(db.scalars(stmt))


def count_unread_notifications(db: Session, user: User) -> int:
    stmt = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == user.id, Notification.read.is_(False))
    )
    return int(db.scalar(stmt) or 0)


def get_owned_notification(db: Session, user: User, notification_id: UUID | str) -> Notification:
    parsed = parse_public_id(notification_id)
    notification = None
    if parsed is not None:
        notification = db.scalar(
            select(Notification).where(
                Notification.public_id == parsed,
                Notification.recipient_id == user.id,
            )
        )
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


def mark_notification_read(db: Session, user: User, notification_id: UUID | str) -> Notification:
    notification = get_owned_notification(db, user, notification_id)
    if not notification.read:
        notification.read = True
        commit_or_raise(db, action="update notification")
    return notification


def mark_all_read(db: Session, user: User) -> int:
    """Mark every unread notification of ``user`` as read; safe to repeat."""

    stmt = (
        update(Notification)
        .where(Notification.recipient_id == user.id, Notification.read.is_(False))
        .values(read=True)
    )
    result = db.execute(stmt)
    commit_or_raise(db, action="mark all notifications as read")
    return int(result.rowcount or 0)


def delete_notification(db: Session, user: User, notification_id: UUID | str) -> None:
    notification = get_owned_notification(db, user, notification_id)
    db.delete(notification)
    commit_or_raise(db, action="delete notification")


def delete_all_notifications(db: Session, user: User) -> int:
    result = db.execute(delete(Notification).where(Notification.recipient_id == user.id))
    commit_or_raise(db, action="delete notifications")
    return int(result.rowcount or 0)


__all__ = [
    "DEFAULT_EMAIL_SUBJECT",
    "Mailer",
    "NotificationEmitter",
    "NotificationType",
    "build_email_body",
    "count_unread_notifications",
    "delete_all_notifications",
    "delete_notification",
    "get_owned_notification",
    "list_notifications",
    "mark_all_read",
    "mark_notification_read",
    "to_notification_response",
]
