"""Authentication routes: session cookie lifecycle."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import AuthResponse, LoginRequest, MeResponse, MessageResponse, RegisterRequest
from ..services import (
    authenticate_user,
    clear_session_cookie,
    create_access_token,
    get_current_user,
    register_user,
    set_session_cookie,
    to_public_user,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user, token = register_user(db, payload)
    set_session_cookie(response, token)
    return AuthResponse(message="Registration successful", user=to_public_user(user))


@router.post("/login", response_model=AuthResponse)
async def login_endpoint(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user = authenticate_user(db, str(payload.email), payload.password)
    set_session_cookie(response, create_access_token(user.public_id, user.role))
    return AuthResponse(message="Login successful", user=to_public_user(user))


@router.post("/logout", response_model=MessageResponse)
async def logout_endpoint(response: Response) -> MessageResponse:
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def me_endpoint(current_user: User = Depends(get_current_user)) -> MeResponse:
    return MeResponse(user=to_public_user(current_user))


__all__ = ["router"]
