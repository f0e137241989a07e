"""Shared fixtures: a throwaway SQLite database plus fake socket and mail collaborators."""
from __future__ import annotations

import json
import os
from typing import Any, Callable, Iterator

import pytest
from sqlalchemy import delete

# Configure the application before any ireporter module reads its settings.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_ireporter.db")
os.environ.setdefault("JWT_SECRET_KEY", "ireporter-test-secret")
os.environ.setdefault("COOKIE_SECURE", "false")

from ireporter.database import Base, SessionLocal, engine  # noqa: E402
from ireporter.models import Notification, Report, User  # noqa: E402
from ireporter.services.email_service import EmailDeliveryError  # noqa: E402


class FakeConnection:
    """Stands in for a WebSocket; records decoded frames."""

    def __init__(self, *, fail: bool = False) -> None:
        self.frames: list[dict[str, Any]] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(json.loads(data))

    def events(self) -> list[str]:
        return [frame["event"] for frame in self.frames]


class FakeMailer:
    def __init__(self, *, result: bool = True, error: Exception | None = None) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.result = result
        self.error = error

    async def send(self, to_address: str, subject: str, body: str) -> bool:
        self.sent.append((to_address, subject, body))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(Notification))
        session.execute(delete(Report))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def db() -> Iterator[Any]:
    with SessionLocal() as session:
        yield session


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _factory(first_name: str, *, role: str = "user", email: str | None = None) -> User:
        with SessionLocal() as session:
            user = User(
                first_name=first_name,
                last_name="Tester",
                email=f"{first_name.lower()}@example.com" if email is None else email,
                hashed_password="not-a-real-hash",
                role=role,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _factory


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def failing_mailer() -> FakeMailer:
    return FakeMailer(error=EmailDeliveryError("relay unavailable"))
