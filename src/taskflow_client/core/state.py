# src/taskflow_client/core/state.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..api.client import ApiClient
from ..session.store import SessionStore
from .ports import Notifier, TokenStorage

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class AppState:
    """
    Explicit application context, built once by the composition root.

    Holds the session store plus whichever views are currently open
    (each view owns its own request scope).
    """

    settings: object
    api: ApiClient
    token_storage: TokenStorage
    notifier: Notifier
    session: SessionStore

    views: dict[str, Any] = field(default_factory=dict)

    def view(self, name: str, factory: Callable[[], V]) -> V:
        """Return the open view `name`, creating it on first use."""
        existing = self.views.get(name)
        if existing is None:
            existing = factory()
            self.views[name] = existing
            logger.debug("Opened view %s", name)
        return existing

    async def close_view(self, name: str) -> None:
        view = self.views.pop(name, None)
        if view is None:
            return
        close = getattr(view, "close", None)
        if close is not None:
            await close()
        logger.debug("Closed view %s", name)

    async def close_views(self) -> None:
        for name in list(self.views):
            await self.close_view(name)

    async def aclose(self) -> None:
        """Teardown: cancel open views, then release the HTTP client."""
        with contextlib.suppress(Exception):
            await self.close_views()
        await self.api.aclose()
