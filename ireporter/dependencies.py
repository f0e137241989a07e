"""FastAPI dependencies for the process-wide realtime and mail collaborators.

The presence registry, background queue and mail gateway live on
``app.state`` for the lifetime of the application; tests swap them by
assigning new objects there.
"""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .database import get_session
from .services.email_service import MailGateway
from .services.notification_service import NotificationEmitter
from .services.presence import PresenceRegistry
from .services.task_queue import BackgroundTaskQueue


def get_presence(request: Request) -> PresenceRegistry:
    return request.app.state.presence


def get_task_queue(request: Request) -> BackgroundTaskQueue:
    return request.app.state.tasks


def get_mailer(request: Request) -> MailGateway:
    return request.app.state.mailer


def get_notification_emitter(
    db: Session = Depends(get_session),
    presence: PresenceRegistry = Depends(get_presence),
    tasks: BackgroundTaskQueue = Depends(get_task_queue),
    mailer: MailGateway = Depends(get_mailer),
) -> NotificationEmitter:
    return NotificationEmitter(db, presence=presence, tasks=tasks, mailer=mailer)


__all__ = ["get_presence", "get_task_queue", "get_mailer", "get_notification_emitter"]
