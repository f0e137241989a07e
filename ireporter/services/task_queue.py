"""Tracked fire-and-forget tasks for side effects the request does not await."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class TaskQueueClosedError(RuntimeError):
    """Raised when work is submitted after :meth:`BackgroundTaskQueue.close`."""


class BackgroundTaskQueue:
    """Runs submitted coroutines on the event loop and remembers them.

    Failures are logged and never reach the submitter. :meth:`join` waits for
    everything submitted so far, including tasks submitted while draining,
    which lets shutdown and tests flush side effects deterministically.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        if self._closed:
            coro.close()
            raise TaskQueueClosedError("Background task queue is closed")
        task = asyncio.get_running_loop().create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def join(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self._closed = True
        await self.join()

    @staticmethod
    async def _run(coro: Coroutine[Any, Any, Any], name: str | None) -> Any:
        try:
            return await coro
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Background task %s failed", name or coro)
            return None


__all__ = ["BackgroundTaskQueue", "TaskQueueClosedError"]
