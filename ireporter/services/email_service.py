"""SMTP relay (with Mailgun HTTP fallback) for notification emails."""
from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from html import escape

import requests

from ..config import get_settings
from ..security.secrets import MissingSecretError, optional_secret, require_secret

logger = logging.getLogger(__name__)

_TRANSPORT_TIMEOUT_SECONDS = 20


class EmailDeliveryError(RuntimeError):
    """Raised when every configured transport fails."""


def _resolve_email_password() -> str:
    try:
        return require_secret("EMAIL_PASSWORD")
    except MissingSecretError as exc:
        raise EmailDeliveryError(str(exc)) from exc


def _smtp_enabled() -> bool:
    settings = get_settings()
    return bool(settings.email_host and settings.email_from_address)


def _mailgun_enabled() -> bool:
    settings = get_settings()
    if optional_secret("MAILGUN_API_KEY") is None:
        return False
    return bool(settings.mailgun_domain and settings.email_from_address)


def _sender() -> str:
    settings = get_settings()
    return formataddr((settings.email_from_name, str(settings.email_from_address)))


def render_html(body: str) -> str:
    """Wrap a plaintext body into minimal HTML, one paragraph per block."""

    blocks = [block.strip() for block in body.split("\n\n") if block.strip()]
    return "".join(f"<p>{escape(block)}</p>" for block in blocks)


def _send_via_smtp(to_address: str, subject: str, body: str) -> None:
    settings = get_settings()
    host = settings.email_host
    if not host or not settings.email_from_address:
        raise EmailDeliveryError("SMTP is not fully configured")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = _sender()
    message["To"] = to_address
    message.set_content(body)
    message.add_alternative(render_html(body), subtype="html")

    username = (settings.email_username or "").strip()

    try:
        with smtplib.SMTP(host, settings.email_port, timeout=_TRANSPORT_TIMEOUT_SECONDS) as smtp:
            if settings.email_use_tls:
                smtp.starttls()
            if username:
                smtp.login(username, _resolve_email_password())
            smtp.send_message(message)
    except EmailDeliveryError:
        raise
    except Exception as exc:  # pragma: no cover - network interactions
        logger.exception("SMTP delivery failed for %s", to_address)
        raise EmailDeliveryError(str(exc)) from exc


def _send_via_mailgun(to_address: str, subject: str, body: str) -> None:
    settings = get_settings()
    domain = settings.mailgun_domain
    api_key = optional_secret("MAILGUN_API_KEY")
    if not domain or not api_key or not settings.email_from_address:
        raise EmailDeliveryError("Mailgun is not configured")

    url = f"https://api.mailgun.net/v3/{domain}/messages"
    try:
        response = requests.post(
            url,
            auth=("api", api_key),
            data={
                "from": _sender(),
                "to": to_address,
                "subject": subject,
                "text": body,
                "html": render_html(body),
            },
            timeout=_TRANSPORT_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:  # pragma: no cover - network interactions
        logger.exception("Mailgun request failed for %s", to_address)
        raise EmailDeliveryError(str(exc)) from exc

    if response.status_code >= 400:
        logger.error("Mailgun returned %s: %s", response.status_code, response.text)
        raise EmailDeliveryError(f"Mailgun delivery failed with status {response.status_code}")


def send_email(to_address: str, subject: str, body: str) -> bool:
    """Send a plaintext (plus HTML alternative) email.

    Returns ``True`` when a transport accepted the message and ``False`` when
    no transport is configured, in which case the send is skipped with a
    warning. Raises ``EmailDeliveryError`` for an incomplete payload or when
    every configured transport fails.
    """

    if not to_address or not subject or not body:
        raise EmailDeliveryError("Email payload is incomplete")

    smtp_enabled = _smtp_enabled()
    mailgun_enabled = _mailgun_enabled()
    if not smtp_enabled and not mailgun_enabled:
        logger.warning("Skipping email to %s: no mail transport configured", to_address)
        return False

    if smtp_enabled:
        try:
            _send_via_smtp(to_address, subject, body)
            return True
        except EmailDeliveryError as exc:
            logger.warning("SMTP delivery failed, attempting fallback if available: %s", exc)
            if not mailgun_enabled:
                raise

    _send_via_mailgun(to_address, subject, body)
    return True


class MailGateway:
    """Async facade over :func:`send_email`; the blocking transport runs in a worker thread."""

    async def send(self, to_address: str, subject: str, body: str) -> bool:
        return await asyncio.to_thread(send_email, to_address, subject, body)


__all__ = ["EmailDeliveryError", "MailGateway", "render_html", "send_email"]
