"""Per-user registry of live WebSocket connections ("rooms")."""
from __future__ import annotations

import json
import logging
from typing import Any, Hashable, Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can push a text frame, e.g. :class:`fastapi.WebSocket`."""

    async def send_text(self, data: str) -> None: ...


def _room_key(user_id: UUID | str) -> str:
    return str(user_id).strip().lower()


class PresenceRegistry:
    """Tracks which users currently hold at least one live connection.

    Rooms are keyed by the user's public id. Mutations happen on the event
    loop only, so no locking is done here. Offline is a normal state:
    unknown users never raise.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[Hashable]] = {}
        self._owners: dict[Hashable, str] = {}

    def register(self, user_id: UUID | str, connection: Connection) -> None:
        key = _room_key(user_id)
        if not key:
            return
        previous = self._owners.get(connection)
        if previous is not None and previous != key:
            self.unregister(connection)
        self._rooms.setdefault(key, set()).add(connection)
        self._owners[connection] = key
        logger.info("User %s joined room (%d connection(s))", key, len(self._rooms[key]))

    def unregister(self, connection: Connection) -> None:
        key = self._owners.pop(connection, None)
        if key is None:
            return
        room = self._rooms.get(key)
        if room is None:
            return
        room.discard(connection)
        if not room:
            self._rooms.pop(key, None)
        logger.info("Connection left room %s", key)

    def is_online(self, user_id: UUID | str) -> bool:
        return bool(self._rooms.get(_room_key(user_id)))

    def online_users(self) -> list[str]:
        return sorted(self._rooms)

    def connection_count(self) -> int:
        return len(self._owners)

    async def send_to(self, user_id: UUID | str, event: str, payload: Any) -> int:
        """Deliver ``event`` to every connection of ``user_id``.

        Returns the number of connections that accepted the frame. Connections
        that fail are dropped from the registry.
        """

        targets = list(self._rooms.get(_room_key(user_id), ()))
        if not targets:
            return 0
        serialized = json.dumps({"event": event, "data": payload}, default=str)
        delivered = 0
        for connection in targets:
            try:
                await connection.send_text(serialized)
            except Exception:
                logger.warning("Realtime emit of %s to %s failed; dropping connection", event, user_id)
                self.unregister(connection)
                continue
            delivered += 1
        return delivered


__all__ = ["Connection", "PresenceRegistry"]
