"""WebSocket endpoint that joins clients to their per-user notification room."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket

from ..config import get_settings
from ..database import create_session
from ..services.auth_service import resolve_token_user
from ..services.presence import PresenceRegistry
from ..services.user_service import parse_public_id

router = APIRouter()
logger = logging.getLogger(__name__)


async def _send(websocket: WebSocket, event: str, data: Any = None) -> None:
    await websocket.send_text(json.dumps({"event": event, "data": data if data is not None else {}}, default=str))


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: str | None = Query(default=None)) -> None:
    """Long-lived connection; the client sends ``register`` with its user id to receive pushes."""

    presence: PresenceRegistry = websocket.app.state.presence
    session_token = websocket.cookies.get(get_settings().cookie_name) or token
    with create_session() as db:
        user = resolve_token_user(db, session_token)
        user_id = user.public_id if user is not None else None

    await websocket.accept()
    logger.info("Socket connected from %s", websocket.client)
    await _send(websocket, "ready")
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            # Binary frames carry nothing we understand.
            if raw is None:
                continue

            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                message = {"event": raw.strip()}
            if not isinstance(message, dict):
                message = {"event": str(message)}

            event = str(message.get("event") or "").lower()
            if event == "ping":
                await _send(websocket, "pong")
            elif event == "register":
                requested = parse_public_id(message.get("data") or "")
                if user_id is None:
                    await _send(websocket, "error", {"message": "Authentication required"})
                elif requested != user_id:
                    await _send(websocket, "error", {"message": "Cannot join another user's room"})
                else:
                    presence.register(user_id, websocket)
                    await _send(websocket, "registered", {"user_id": str(user_id)})
            # Anything else is ignored; receiving it keeps the connection alive.
    finally:
        presence.unregister(websocket)
        logger.info("Socket disconnected from %s", websocket.client)


__all__ = ["router"]
