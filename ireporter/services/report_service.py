"""Report lifecycle: creation, admin status updates, listing and deletion."""
from __future__ import annotations

import logging
import math
from typing import Any, cast
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..config import get_settings
from ..constants import DEFAULT_REPORT_STATUS, DEFAULT_REPORT_TYPE, EVENT_REPORT_UPDATED, EVENT_USER_REPORTS, REPORT_STATUSES
from ..database import commit_or_raise
from ..errors import InvalidStatusError, NotFoundError, PermissionDeniedError, UpstreamError, ValidationError
from ..models import Report, User
from ..schemas import ReportCreateRequest, ReportResponse
from .notification_service import NotificationEmitter, NotificationType
from .presence import PresenceRegistry
from .task_queue import BackgroundTaskQueue
from .user_service import get_user, list_admins, parse_public_id

logger = logging.getLogger(__name__)


def coerce_coordinate(value: Any) -> float:
    """Parse a latitude/longitude, substituting 0.0 for anything unusable."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def normalize_report_type(value: str | None) -> str:
    cleaned = (value or "").strip().lower().replace(" ", "-")
    return cleaned or DEFAULT_REPORT_TYPE


def resolve_media_paths(paths: list[str] | None) -> list[str]:
    """Strip blanks and anchor relative paths under the public uploads prefix."""

    prefix = "/" + get_settings().uploads_url_prefix.strip("/")
    resolved: list[str] = []
    for raw in paths or []:
        path = (raw or "").strip()
        if not path:
            continue
        if not path.startswith(("/", "http://", "https://")):
            path = f"{prefix}/{path}"
        resolved.append(path)
    return resolved


def to_report_response(report: Report) -> ReportResponse:
    owner = report.owner
    return ReportResponse(
        id=cast(UUID, report.public_id),
        owner_id=cast(UUID, owner.public_id),
        owner_name=owner.display_name or "Unknown",
        title=report.title,
        description=report.description,
        location=report.location,
        lat=float(report.lat or 0.0),
        lng=float(report.lng or 0.0),
        type=report.type or DEFAULT_REPORT_TYPE,
        status=report.status,
        media=list(report.media or []),
        created_at=report.created_at,
    )


def report_payload(report: Report) -> dict[str, Any]:
    return to_report_response(report).model_dump(mode="json")


def get_report(db: Session, report_id: UUID | str) -> Report:
    parsed = parse_public_id(report_id)
    report = None
    if parsed is not None:
        report = db.scalar(
            select(Report).options(selectinload(Report.owner)).where(Report.public_id == parsed)
        )
    if report is None:
        raise NotFoundError("Report not found")
    return report


async def _notify_quietly(emitter: NotificationEmitter, recipient_id: UUID, message: str, **kwargs: Any) -> None:
    # The report change is already committed; a failed notification must not undo the response.
    try:
        await emitter.notify(recipient_id, message, **kwargs)
    except UpstreamError:
        logger.warning("Notification for %s was not stored: %s", recipient_id, message)


async def create_report(
    db: Session,
    emitter: NotificationEmitter,
    *,
    owner_id: UUID | str,
    fields: ReportCreateRequest,
) -> Report:
    """Store a new pending report and notify every admin once."""

    title = (fields.title or "").strip()
    description = (fields.description or "").strip()
    location = (fields.location or "").strip()
    if not title or not description or not location:
        raise ValidationError("Missing required fields")

    owner = get_user(db, owner_id)

    report = Report(
        owner=owner,
        title=title,
        description=description,
        location=location,
        lat=coerce_coordinate(fields.lat),
        lng=coerce_coordinate(fields.lng),
        type=normalize_report_type(fields.type),
        status=DEFAULT_REPORT_STATUS,
        media=resolve_media_paths(fields.media),
    )
    db.add(report)
    commit_or_raise(db, action="create report")
    db.refresh(report)

    payload = report_payload(report)
    message = f"New report submitted: {title}"
    for admin in list_admins(db):
        await _notify_quietly(
            emitter,
            admin.public_id,
            message,
            type_=NotificationType.NEW_REPORT,
            report=payload,
        )

    return report


async def set_report_status(
    db: Session,
    emitter: NotificationEmitter,
    presence: PresenceRegistry,
    tasks: BackgroundTaskQueue,
    *,
    report_id: UUID | str,
    new_status: str,
) -> Report:
    """Move a report to ``new_status``; any status may follow any other."""

    if new_status not in REPORT_STATUSES:
        raise InvalidStatusError()

    report = get_report(db, report_id)
    report.status = new_status
    commit_or_raise(db, action="update report status")
    db.refresh(report)

    owner_id = cast(UUID, report.owner.public_id)
    payload = report_payload(report)
    await _notify_quietly(
        emitter,
        owner_id,
        f'Your report "{report.title}" is now "{new_status}"',
        type_=NotificationType.STATUS_UPDATE,
        report=payload,
    )
    if presence.is_online(owner_id):
        # Not awaited; the dashboard refresh is best-effort.
        tasks.submit(presence.send_to(owner_id, EVENT_REPORT_UPDATED, payload), name=f"report-updated-{report.public_id}")

    return report


def list_reports(db: Session) -> list[Report]:
    stmt = select(Report).options(selectinload(Report.owner)).order_by(Report.created_at.desc(), Report.id.desc())
    return list(db.scalars(stmt))


def list_user_reports(
    db: Session,
    presence: PresenceRegistry,
    tasks: BackgroundTaskQueue,
    *,
    owner: User,
) -> list[Report]:
    """Return the owner's reports and mirror them to the owner's open sockets."""

    stmt = (
        select(Report)
        .options(selectinload(Report.owner))
        .where(Report.owner_id == owner.id)
        .order_by(Report.created_at.desc(), Report.id.desc())
    )
    reports = list(db.scalars(stmt))

    if presence.is_online(owner.public_id):
        tasks.submit(
            presence.send_to(owner.public_id, EVENT_USER_REPORTS, {"reports": [report_payload(item) for item in reports]}),
            name=f"user-reports-{owner.public_id}",
        )
    return reports


async def delete_report(
    db: Session,
    emitter: NotificationEmitter,
    *,
    report_id: UUID | str,
    owner: User,
) -> None:
    report = get_report(db, report_id)
    if report.owner_id != owner.id:
        raise PermissionDeniedError("Unauthorized")

    title = report.title
    db.delete(report)
    commit_or_raise(db, action="delete report")

    await _notify_quietly(
        emitter,
        owner.public_id,
        f'Your report "{title}" was deleted',
        type_=NotificationType.REPORT_DELETED,
    )


__all__ = [
    "coerce_coordinate",
    "normalize_report_type",
    "resolve_media_paths",
    "to_report_response",
    "report_payload",
    "get_report",
    "create_report",
    "set_report_status",
    "list_reports",
    "list_user_reports",
    "delete_report",
]
