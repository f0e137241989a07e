from __future__ import annotations

import asyncio
import logging
from typing import Iterator

import pytest

from ireporter.config import get_settings
from ireporter.services import email_service
from ireporter.services.email_service import EmailDeliveryError, MailGateway, render_html, send_email

_MAIL_ENV = (
    "EMAIL_HOST",
    "EMAIL_FROM_ADDRESS",
    "EMAIL_USERNAME",
    "EMAIL_PASSWORD",
    "MAILGUN_API_KEY",
    "MAILGUN_DOMAIN",
)


@pytest.fixture(autouse=True)
def _isolated_mail_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _MAIL_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _configure(monkeypatch: pytest.MonkeyPatch, **values: str) -> None:
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    get_settings.cache_clear()


class _FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "ok") -> None:
        self.status_code = status_code
        self.text = text


def test_send_email_without_transport_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ireporter.services.email_service"):
        assert send_email("user@example.com", "Subject", "Body") is False

    assert "no mail transport configured" in caplog.text


def test_send_email_rejects_incomplete_payload() -> None:
    with pytest.raises(EmailDeliveryError):
        send_email("", "Subject", "Body")
    with pytest.raises(EmailDeliveryError):
        send_email("user@example.com", "Subject", "")


def test_smtp_failure_falls_back_to_mailgun(monkeypatch: pytest.MonkeyPatch) -> None:
    _configure(
        monkeypatch,
        EMAIL_HOST="smtp.example.com",
        EMAIL_FROM_ADDRESS="noreply@example.com",
        MAILGUN_API_KEY="key-123456",
        MAILGUN_DOMAIN="mg.example.com",
    )

    def _broken_smtp(*_: str) -> None:
        raise EmailDeliveryError("connection refused")

    captured: dict[str, object] = {}

    def _fake_post(url: str, **kwargs: object) -> _FakeResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _FakeResponse()

    monkeypatch.setattr(email_service, "_send_via_smtp", _broken_smtp)
    monkeypatch.setattr(email_service.requests, "post", _fake_post)

    assert send_email("user@example.com", "Status", "Your report changed") is True
    assert captured["url"] == "https://api.mailgun.net/v3/mg.example.com/messages"
    assert captured["auth"] == ("api", "key-123456")
    data = captured["data"]
    assert isinstance(data, dict)
    assert data["to"] == "user@example.com"
    assert data["html"] == "<p>Your report changed</p>"


def test_smtp_failure_without_fallback_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _configure(monkeypatch, EMAIL_HOST="smtp.example.com", EMAIL_FROM_ADDRESS="noreply@example.com")

    def _broken_smtp(*_: str) -> None:
        raise EmailDeliveryError("connection refused")

    monkeypatch.setattr(email_service, "_send_via_smtp", _broken_smtp)

    with pytest.raises(EmailDeliveryError):
        send_email("user@example.com", "Status", "Body")


def test_mailgun_error_status_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _configure(
        monkeypatch,
        EMAIL_FROM_ADDRESS="noreply@example.com",
        MAILGUN_API_KEY="key-123456",
        MAILGUN_DOMAIN="mg.example.com",
    )
    monkeypatch.setattr(email_service.requests, "post", lambda *_, **__: _FakeResponse(500, "boom"))

    with pytest.raises(EmailDeliveryError):
        send_email("user@example.com", "Status", "Body")


def test_placeholder_mailgun_key_disables_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    _configure(
        monkeypatch,
        EMAIL_FROM_ADDRESS="noreply@example.com",
        MAILGUN_API_KEY="changeme",
        MAILGUN_DOMAIN="mg.example.com",
    )

    assert send_email("user@example.com", "Status", "Body") is False


def test_render_html_escapes_and_splits_paragraphs() -> None:
    html = render_html('Report "<b>Pothole</b>" updated\n\nSee details')

    assert html == "<p>Report &quot;&lt;b&gt;Pothole&lt;/b&gt;&quot; updated</p><p>See details</p>"


def test_mail_gateway_runs_send_email(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str, str]] = []

    def _fake_send(to_address: str, subject: str, body: str) -> bool:
        calls.append((to_address, subject, body))
        return True

    monkeypatch.setattr(email_service, "send_email", _fake_send)

    assert asyncio.run(MailGateway().send("user@example.com", "Subject", "Body")) is True
    assert calls == [("user@example.com", "Subject", "Body")]
