"""Domain error taxonomy and the handlers that render it as JSON."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class IReporterError(Exception):
    """Base class for errors surfaced to API callers as ``{"error": message}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(IReporterError):
    """Missing or malformed required input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidStatusError(ValidationError):
    default_message = "Invalid status"


class NotFoundError(IReporterError):
    """A referenced user, report or notification does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuthError(IReporterError):
    """Missing, invalid or expired credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class PermissionDeniedError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class UpstreamError(IReporterError):
    """Database or mail client failure; detail is logged, never returned."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Service temporarily unavailable"


async def _handle_domain_error(request: Request, exc: IReporterError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Attach the domain and request-validation handlers to ``app``."""

    app.add_exception_handler(IReporterError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]


__all__ = [
    "IReporterError",
    "ValidationError",
    "InvalidStatusError",
    "NotFoundError",
    "AuthError",
    "PermissionDeniedError",
    "UpstreamError",
    "register_error_handlers",
]
