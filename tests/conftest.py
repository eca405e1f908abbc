# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from taskflow_client.api.client import ApiClient
from taskflow_client.cli.bootstrap import create_initial_state
from taskflow_client.config import Settings
from taskflow_client.core.state import AppState
from taskflow_client.session.store import SessionStore
from taskflow_client.session.token_storage import FileTokenStorage

from .fakes import FakeBackend, FakeNotifier

BASE_URL = "http://taskflow.test/api"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Real Settings object pointed at a tmp data dir (no env or .env involved)."""
    return Settings(
        app_name="taskflow-test",
        log_level="DEBUG",
        api_base_url=BASE_URL,
        http_connect_timeout=1.0,
        http_read_timeout=1.0,
        data_dir=tmp_path,
        token_path=tmp_path / "token.json",
        persist_token=True,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def token_storage(settings: Settings) -> FileTokenStorage:
    return FileTokenStorage(settings.token_path)


@pytest_asyncio.fixture()
async def api(backend: FakeBackend, token_storage: FileTokenStorage):
    client = ApiClient(BASE_URL, token_storage, transport=backend.transport())
    yield client
    await client.aclose()


@pytest.fixture()
def session(api: ApiClient, token_storage: FileTokenStorage, notifier: FakeNotifier) -> SessionStore:
    return SessionStore(api, token_storage, notifier)


@pytest_asyncio.fixture()
async def logged_in(session: SessionStore, notifier: FakeNotifier) -> SessionStore:
    """Session already authenticated as a@x.com; notifications from login are cleared."""
    await session.initialize()
    result = await session.login("a@x.com", "secret1")
    assert result.success
    notifier.successes.clear()
    return session


@pytest_asyncio.fixture()
async def state(settings: Settings, backend: FakeBackend, notifier: FakeNotifier):
    """AppState wired through the real composition root, backed by FakeBackend."""
    app_state: AppState = create_initial_state(settings=settings, notifier=notifier, transport=backend.transport())
    await app_state.session.initialize()
    yield app_state
    await app_state.aclose()
