# src/taskflow_client/core/scope.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewScope:
    """
    Lifetime of one view (tasks page, categories page, ...).

    Every request the view issues is spawned here; close() cancels whatever is
    still in flight, and `closed` lets callbacks drop results that arrive late.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        if self._closed:
            coro.close()
            raise RuntimeError(f"View scope {self.name!r} is closed.")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Spawn and await; cancellation of the scope surfaces as CancelledError."""
        return await self.spawn(coro)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        pending = [t for t in self._tasks if not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug("View %s closed; cancelled %d request(s)", self.name, len(pending))
