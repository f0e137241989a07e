"""Report lifecycle endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..constants import ROLE_ADMIN
from ..database import get_session
from ..dependencies import get_notification_emitter, get_presence, get_task_queue
from ..models import User
from ..schemas import MessageResponse, ReportCreateRequest, ReportEnvelope, ReportResponse, ReportStatusUpdateRequest
from ..services import (
    BackgroundTaskQueue,
    NotificationEmitter,
    PresenceRegistry,
    create_report,
    delete_report,
    get_current_user,
    list_reports,
    list_user_reports,
    require_roles,
    set_report_status,
    to_report_response,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[ReportResponse])
async def list_reports_endpoint(
    _: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_session),
) -> list[ReportResponse]:
    return [to_report_response(report) for report in list_reports(db)]


@router.get("/mine", response_model=list[ReportResponse])
async def list_my_reports_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    presence: PresenceRegistry = Depends(get_presence),
    tasks: BackgroundTaskQueue = Depends(get_task_queue),
) -> list[ReportResponse]:
    reports = list_user_reports(db, presence, tasks, owner=current_user)
    return [to_report_response(report) for report in reports]


@router.post("", response_model=ReportEnvelope, status_code=status.HTTP_201_CREATED)
async def create_report_endpoint(
    payload: ReportCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ReportEnvelope:
    report = await create_report(db, emitter, owner_id=current_user.public_id, fields=payload)
    return ReportEnvelope(message="Report created", report=to_report_response(report))


@router.put("/{report_id}/status", response_model=ReportEnvelope)
async def update_report_status_endpoint(
    report_id: str,
    payload: ReportStatusUpdateRequest,
    _: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_session),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    presence: PresenceRegistry = Depends(get_presence),
    tasks: BackgroundTaskQueue = Depends(get_task_queue),
) -> ReportEnvelope:
    report = await set_report_status(
        db,
        emitter,
        presence,
        tasks,
        report_id=report_id,
        new_status=payload.status,
    )
    return ReportEnvelope(message="Status updated", report=to_report_response(report))


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report_endpoint(
    report_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> MessageResponse:
    await delete_report(db, emitter, report_id=report_id, owner=current_user)
    return MessageResponse(message="Report deleted")


__all__ = ["router"]
