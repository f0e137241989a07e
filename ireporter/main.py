"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import get_settings
from .database import init_db
from .errors import register_error_handlers
from .routers import auth_router, notifications_router, realtime_router, reports_router, users_router
from .services import BackgroundTaskQueue, MailGateway, PresenceRegistry

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth_router)
app.include_router(reports_router)
app.include_router(notifications_router)
app.include_router(users_router)
app.include_router(realtime_router)

# Process-wide collaborators, replaced on every startup so each event loop gets its own queue.
app.state.presence = PresenceRegistry()
app.state.tasks = BackgroundTaskQueue()
app.state.mailer = MailGateway()


@app.on_event("startup")
async def _startup() -> None:
    """Ensure database schema and realtime state are ready before serving."""

    try:
        init_db()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Database initialisation failed")
        raise

    app.state.presence = PresenceRegistry()
    app.state.tasks = BackgroundTaskQueue()
    logger.info("%s %s ready", APP_NAME, API_VERSION)


@app.on_event("shutdown")
async def _shutdown() -> None:
    """Let queued pushes and emails finish before the process exits."""

    tasks: BackgroundTaskQueue = app.state.tasks
    if tasks.pending:
        logger.info("Draining %d background task(s)", tasks.pending)
    await tasks.close()


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str | int]:
    presence: PresenceRegistry = app.state.presence
    return {
        "service": APP_NAME,
        "version": API_VERSION,
        "online_users": len(presence.online_users()),
        "connections": presence.connection_count(),
    }


UPLOADS_ROOT = Path(settings.uploads_root)
UPLOADS_ROOT.mkdir(parents=True, exist_ok=True)
app.mount(
    "/" + settings.uploads_url_prefix.strip("/"),
    StaticFiles(directory=str(UPLOADS_ROOT), check_dir=False),
    name="uploads",
)
