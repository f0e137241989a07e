"""User directory: identifier resolution, projections and profile updates."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..constants import ROLE_ADMIN
from ..database import commit_or_raise
from ..errors import NotFoundError
from ..models import User
from ..schemas import ProfileUpdateRequest, PublicUser


def parse_public_id(value: UUID | str) -> UUID | None:
    """Return ``value`` as a UUID, or ``None`` when it cannot be one."""

    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (TypeError, ValueError):
        return None


def find_user(db: Session, public_id: UUID | str) -> User | None:
    parsed = parse_public_id(public_id)
    if parsed is None:
        return None
    return db.scalar(select(User).where(User.public_id == parsed))


def get_user(db: Session, public_id: UUID | str) -> User:
    """Resolve a public user id or raise :class:`NotFoundError`."""

    user = find_user(db, public_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def find_user_by_email(db: Session, email: str) -> User | None:
    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    return db.scalar(select(User).where(User.email == normalized))


def list_admins(db: Session) -> list[User]:
    stmt = select(User).where(User.role == ROLE_ADMIN).order_by(User.id)
    return list(db.scalars(stmt))


def to_public_user(user: User) -> PublicUser:
    return PublicUser(
        id=cast(UUID, user.public_id),
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        display_name=user.display_name,
        email=user.email,
        phone=user.phone or "",
        bio=user.bio or "",
        avatar_url=user.avatar_url or "",
        role=user.role or "user",
        first_login_shown=bool(user.first_login_shown),
    )


def update_profile(db: Session, user: User, payload: ProfileUpdateRequest) -> User:
    """Apply the fields the client actually sent."""

    update_data = payload.model_dump(exclude_unset=True)

    # An empty avatar keeps the existing one.
    if "avatar_url" in update_data and not (update_data["avatar_url"] or "").strip():
        update_data.pop("avatar_url")

    for field in ("first_name", "last_name"):
        if field in update_data:
            value = (update_data[field] or "").strip()
            if not value:
                update_data.pop(field)
            else:
                update_data[field] = value

    for field, value in update_data.items():
        setattr(user, field, value)

    commit_or_raise(db, action="update profile")
    db.refresh(user)
    return user


def mark_first_login_shown(db: Session, user: User) -> User:
    if not user.first_login_shown:
        user.first_login_shown = True
        commit_or_raise(db, action="update first login flag")
        db.refresh(user)
    return user


__all__ = [
    "parse_public_id",
    "find_user",
    "get_user",
    "find_user_by_email",
    "list_admins",
    "to_public_user",
    "update_profile",
    "mark_first_login_shown",
]
