# src/taskflow_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires token storage, API client, notifier and session store into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..api.client import ApiClient, make_timeout
from ..config import Settings, get_settings
from ..core.notify import ConsoleNotifier
from ..core.ports import Notifier, TokenStorage
from ..core.state import AppState
from ..session.store import SessionStore
from ..session.token_storage import FileTokenStorage, MemoryTokenStorage

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.token_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings: Settings | None = None,
    notifier: Notifier | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    token_storage: TokenStorage
    if settings.persist_token:
        token_storage = FileTokenStorage(settings.token_path)
    else:
        token_storage = MemoryTokenStorage()

    api = ApiClient(
        settings.api_base_url,
        token_storage,
        timeout=make_timeout(settings.http_connect_timeout, settings.http_read_timeout),
        transport=transport,
    )
    notifier = notifier or ConsoleNotifier()
    session = SessionStore(api, token_storage, notifier)

    logger.info(
        "Backend=%s token_storage=%s",
        settings.api_base_url,
        type(token_storage).__name__,
    )
    return AppState(
        settings=settings,
        api=api,
        token_storage=token_storage,
        notifier=notifier,
        session=session,
    )


async def start_session(state: AppState) -> None:
    """Init step: read the persisted token and verify it."""
    status = await state.session.initialize()
    logger.info("Session status after start: %s", status)
