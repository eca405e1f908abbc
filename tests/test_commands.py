# tests/test_commands.py

from __future__ import annotations

import httpx
import pytest

from taskflow_client.cli.commands import LOGIN_REQUIRED, CommandRegistry, format_category, registry
from taskflow_client.session.session_models import SessionStatus
from taskflow_client.session.store import SESSION_EXPIRED_MESSAGE
from taskflow_client.tasks.task_models import Category


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    async def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    notes: list[str] = []
    assert await reg.handle(state, '/a x "y z"') == "h2:x,y z"
    assert await reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")


@pytest.mark.asyncio
async def test_protected_commands_need_login(state, backend) -> None:
    assert await registry.handle(state, "/tasks") == LOGIN_REQUIRED
    assert backend.requests_to("GET", "/tasks") == []


@pytest.mark.asyncio
async def test_login_validation_happens_before_network(state, backend) -> None:
    reply = await registry.handle(state, "/login not-an-email secret1")

    assert reply is not None and "Invalid email address" in reply
    assert backend.requests_to("POST", "/auth/login") == []


@pytest.mark.asyncio
async def test_console_session_flow(state, backend, settings) -> None:
    reply = await registry.handle(state, "/login a@x.com secret1")
    assert reply == "Logged in as A."
    assert settings.token_path.exists()

    listing = await registry.handle(state, "/filter status completed")
    assert listing is not None and "1 task(s) found" in listing
    assert "Buy groceries" in listing

    added = await registry.handle(state, '/add "Call mom" priority=high due=2024-07-01 status=completed')
    assert added is not None and "Call mom" in added

    removed = await registry.handle(state, "/rm 2")
    assert removed == "1 task(s) left."

    cleared = await registry.handle(state, "/filter clear")
    assert cleared is not None and "3 task(s) found" in cleared

    assert await registry.handle(state, "/logout") == "Bye for now."
    assert state.session.status is SessionStatus.ANONYMOUS
    assert state.views == {}
    assert not settings.token_path.exists()


@pytest.mark.asyncio
async def test_categories_command_shows_allowed_actions(state) -> None:
    await registry.handle(state, "/login a@x.com secret1")

    reply = await registry.handle(state, "/categories")

    assert reply is not None
    assert "Work #3b82f6 - 2 task(s), default [read-only]" in reply
    assert "Errands #10b981 - 1 task(s), yours [edit]" in reply
    assert "Someday #f59e0b - 0 task(s), yours [edit, delete]" in reply


def test_format_category_default_is_read_only() -> None:
    cat = Category(id=9, name="Inbox", color="#ffffff", user_id=None, task_count=0)
    assert format_category(cat).endswith("[read-only]")


@pytest.mark.asyncio
async def test_next_user_after_expiry_starts_with_fresh_views(state, backend, notifier) -> None:
    await registry.handle(state, "/login a@x.com secret1")
    await registry.handle(state, "/filter status completed")
    backend.tokens.clear()  # server-side expiry

    await registry.handle(state, "/tasks")
    assert state.session.status is SessionStatus.ANONYMOUS
    assert SESSION_EXPIRED_MESSAGE in notifier.errors

    assert await registry.handle(state, '/register "Bo" bo@x.com hunter22') == "Account created. You are now logged in."
    assert "tasks" not in state.views

    reply = await registry.handle(state, "/filter")
    assert reply is not None and reply.startswith("No filters set.")
    assert state.views["tasks"].tasks == []


@pytest.mark.asyncio
async def test_filter_shows_category_options(state, backend) -> None:
    await registry.handle(state, "/login a@x.com secret1")

    reply = await registry.handle(state, "/filter")
    assert reply is not None
    assert "Category options: #1 Work, #2 Errands, #3 Someday" in reply

    unknown = await registry.handle(state, "/filter category_id 99")
    assert unknown is not None and unknown.startswith("Unknown category: 99.")
    assert "#2 Errands" in unknown
    assert not any("category_id" in r.url.params for r in backend.requests_to("GET", "/tasks"))

    listing = await registry.handle(state, "/filter category_id 2")
    assert listing is not None
    assert "1 task(s) found for category_id='2' (Errands)" in listing


@pytest.mark.asyncio
async def test_category_changes_reload_filter_options(state) -> None:
    await registry.handle(state, "/login a@x.com secret1")
    await registry.handle(state, "/filter")

    assert await registry.handle(state, '/category-add Health "#ff0000"') == "Category saved."
    reply = await registry.handle(state, "/filter")
    assert reply is not None and "#4 Health" in reply

    assert await registry.handle(state, "/category-rm 3") == "Category deleted."
    reply = await registry.handle(state, "/filter")
    assert reply is not None and "Someday" not in reply


@pytest.mark.asyncio
async def test_filter_clear_fetches_once(state, backend) -> None:
    await registry.handle(state, "/login a@x.com secret1")
    await registry.handle(state, "/filter status completed")
    await registry.handle(state, "/filter priority low")
    before = len(backend.requests_to("GET", "/tasks"))

    reply = await registry.handle(state, "/filter clear")

    assert reply is not None and "3 task(s) found" in reply
    assert len(backend.requests_to("GET", "/tasks")) == before + 1
    assert backend.requests_to("GET", "/tasks")[-1].url.params == httpx.QueryParams()
