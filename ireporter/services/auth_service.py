"""Authentication: password hashing, session tokens and request identity."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from uuid import UUID

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import ROLE_ADMIN, ROLE_USER
from ..database import commit_or_raise, get_session
from ..errors import AuthError, PermissionDeniedError, ValidationError
from ..models import User
from ..schemas import PasswordChangeRequest, RegisterRequest
from ..security.secrets import MissingSecretError, require_secret
from .user_service import find_user, find_user_by_email, parse_public_id

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except Exception:  # pragma: no cover - passlib internal errors are rare
        logger.exception("Password verification failed due to an unexpected error")
        return False


def create_access_token(subject: UUID, role: str, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT carrying the user's public id and role."""

    settings = get_settings()
    expire_delta = timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "role": role, "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Decode and validate a JWT, returning the embedded public user id."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise AuthError("Invalid token") from exc

    subject = parse_public_id(payload.get("sub") or "")
    if subject is None:
        raise AuthError("Invalid token payload")
    return subject


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the HTTP-only, cross-site session cookie to ``response``."""

    settings = get_settings()
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


def register_user(db: Session, payload: RegisterRequest) -> Tuple[User, str]:
    """Persist a new account and return it with a session token."""

    email = str(payload.email).strip().lower()
    if find_user_by_email(db, email) is not None:
        raise ValidationError("Email already exists")

    first_name = payload.first_name.strip()
    last_name = payload.last_name.strip()
    if not first_name or not last_name:
        raise ValidationError("Missing required fields")

    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        hashed_password=hash_password(payload.password),
        phone=(payload.phone or "").strip() or None,
        role=ROLE_USER,
    )
    db.add(user)
    commit_or_raise(db, action="register user")
    db.refresh(user)

    token = create_access_token(user.public_id, user.role)
    return user, token


def ensure_admin(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "",
) -> Tuple[User, bool]:
    """Create an admin account, or promote and re-key an existing one.

    Returns the account and whether it was newly created.
    """

    normalized = (email or "").strip().lower()
    if not normalized or not password:
        raise ValidationError("Email and password are required")
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    user = find_user_by_email(db, normalized)
    created = user is None
    if user is None:
        user = User(
            first_name=first_name.strip() or "Admin",
            last_name=last_name.strip(),
            email=normalized,
            hashed_password=hash_password(password),
        )
        db.add(user)
    else:
        user.hashed_password = hash_password(password)
    user.role = ROLE_ADMIN

    commit_or_raise(db, action="save admin account")
    db.refresh(user)
    return user, created


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the account for ``email`` when ``password`` matches."""

    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid email or password")
    return user


def change_password(db: Session, user: User, payload: PasswordChangeRequest) -> None:
    if not verify_password(payload.current_password, user.hashed_password):
        raise ValidationError("Current password is incorrect")

    user.hashed_password = hash_password(payload.new_password)
    commit_or_raise(db, action="change password")


def resolve_token_user(db: Session, token: str | None) -> User | None:
    """Return the user a token belongs to, or ``None`` for any invalid token."""

    if not token:
        return None
    try:
        public_id = decode_access_token(token)
    except AuthError:
        return None
    return find_user(db, public_id)


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    token = request.cookies.get(get_settings().cookie_name)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the authenticated user from the session cookie or a bearer token."""

    token = _extract_token(request, credentials)
    if not token:
        raise AuthError("No token provided")

    user = find_user(db, decode_access_token(token))
    if user is None:
        raise AuthError("User not found")
    return user


def require_roles(*allowed_roles: str):
    normalized = {role.lower() for role in allowed_roles if role}

    async def _resolver(user: User = Depends(get_current_user)) -> User:
        role = (user.role or ROLE_USER).lower()
        if normalized and role not in normalized:
            raise PermissionDeniedError()
        return user

    return _resolver


__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "set_session_cookie",
    "clear_session_cookie",
    "register_user",
    "ensure_admin",
    "authenticate_user",
    "change_password",
    "resolve_token_user",
    "get_current_user",
    "require_roles",
]
