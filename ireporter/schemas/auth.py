"""Pydantic schemas for authentication endpoints."""
from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(default=None, max_length=32)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class PublicUser(BaseModel):
    """Projection of a user that is safe to hand to any client."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    display_name: str
    email: str
    phone: str = ""
    bio: str = ""
    avatar_url: str = ""
    role: str
    first_login_shown: bool = False


class AuthResponse(BaseModel):
    message: str
    user: PublicUser


class MeResponse(BaseModel):
    user: PublicUser


class MessageResponse(BaseModel):
    message: str


__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "PublicUser",
    "AuthResponse",
    "MeResponse",
    "MessageResponse",
]
