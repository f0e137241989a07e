"""Profile and account routes for the signed-in user."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import MessageResponse, PasswordChangeRequest, ProfileUpdateRequest, PublicUser
from ..services import change_password, get_current_user, mark_first_login_shown, to_public_user, update_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=PublicUser)
async def get_my_profile(current_user: User = Depends(get_current_user)) -> PublicUser:
    return to_public_user(current_user)


@router.put("/profile", response_model=PublicUser)
async def update_my_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> PublicUser:
    return to_public_user(update_profile(db, current_user, payload))


@router.put("/password", response_model=MessageResponse)
async def change_my_password(
    payload: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    change_password(db, current_user, payload)
    return MessageResponse(message="Password updated successfully")


@router.put("/first-login-shown", response_model=PublicUser)
async def first_login_shown(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> PublicUser:
    return to_public_user(mark_first_login_shown(db, current_user))


__all__ = ["router"]
