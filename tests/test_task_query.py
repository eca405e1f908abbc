# tests/test_task_query.py

from __future__ import annotations

import asyncio

import httpx
import pytest

from taskflow_client.api.client import ApiClient
from taskflow_client.api.errors import RATE_LIMIT_MESSAGE
from taskflow_client.forms import ValidationError
from taskflow_client.session.token_storage import MemoryTokenStorage
from taskflow_client.tasks.task_models import TaskStatus
from taskflow_client.tasks.task_query import TaskQuery, build_query

from .conftest import BASE_URL


@pytest.mark.parametrize(
    ("filters", "expected"),
    [
        ({"status": "completed", "search": "  "}, {"status": "completed"}),
        ({"search": "  report ", "priority": "", "category_id": None}, {"search": "report"}),
        ({"search": "", "status": "", "priority": "", "category_id": ""}, {}),
        ({"status": "pending", "priority": "high", "category_id": " 2 "}, {"status": "pending", "priority": "high", "category_id": "2"}),
    ],
)
def test_build_query_keeps_only_non_empty_trimmed(filters, expected) -> None:
    assert build_query(filters) == expected


@pytest.fixture()
def query(logged_in, api, notifier) -> TaskQuery:
    return TaskQuery(api, notifier)


@pytest.mark.asyncio
async def test_set_filter_refetches_with_clean_query(query, backend) -> None:
    await query.set_filter("search", "  ")
    await query.set_filter("status", "completed")

    sent = backend.requests_to("GET", "/tasks")
    assert [dict(r.url.params) for r in sent] == [{}, {"status": "completed"}]
    assert [t.id for t in query.tasks] == [2]
    assert query.filters == {"search": "  ", "status": "completed", "priority": "", "category_id": ""}
    assert not query.loading


@pytest.mark.asyncio
async def test_reset_filters_refetches_once(query, backend) -> None:
    await query.set_filter("status", "completed")
    await query.set_filter("priority", "low")

    assert await query.reset_filters() is True

    sent = backend.requests_to("GET", "/tasks")
    assert [dict(r.url.params) for r in sent] == [{"status": "completed"}, {"status": "completed", "priority": "low"}, {}]
    assert query.query() == {}
    assert len(query.tasks) == 3


@pytest.mark.asyncio
async def test_category_name_lookup(query) -> None:
    assert query.category_name(2) is None

    await query.load_categories()

    assert query.category_name(2) == "Errands"
    assert query.category_name(" 3 ") == "Someday"
    assert query.category_name(99) is None


@pytest.mark.asyncio
async def test_set_filter_rejects_unknown_key(query) -> None:
    with pytest.raises(ValueError):
        query.set_filter("owner", "me")


@pytest.mark.asyncio
async def test_tasks_carry_server_computed_fields(query) -> None:
    await query.refresh()

    report = query.find(1)
    assert report is not None
    assert report.category_name == "Work"
    assert report.due_date is not None and report.due_date.isoformat() == "2024-05-01"
    assert query.find("3").due_date.isoformat() == "2024-06-10"


@pytest.mark.asyncio
async def test_fetch_failure_keeps_previous_list(query, backend, notifier) -> None:
    await query.refresh()
    before = query.tasks

    backend.force[("GET", "/tasks")] = 500
    assert await query.set_filter("priority", "low") is False

    assert query.tasks == before
    assert notifier.errors == ["Failed to load tasks: Forced 500"]


@pytest.mark.asyncio
async def test_rate_limit_has_its_own_message(query, backend, notifier) -> None:
    backend.force[("GET", "/tasks")] = 429

    assert await query.refresh() is False

    assert notifier.errors == [RATE_LIMIT_MESSAGE]


@pytest.mark.asyncio
async def test_stale_response_never_overwrites_newer_one(notifier) -> None:
    first_started = asyncio.Event()
    release_first = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("status") == "pending":
            first_started.set()
            await release_first.wait()
            tasks = [{"id": 1, "title": "old", "status": "pending"}]
        else:
            tasks = [{"id": 2, "title": "new", "status": "completed"}]
        return httpx.Response(200, json={"success": True, "data": {"tasks": tasks}})

    api = ApiClient(BASE_URL, MemoryTokenStorage("t"), transport=httpx.MockTransport(handler))
    query = TaskQuery(api, notifier)
    try:
        first = query.set_filter("status", "pending")
        await first_started.wait()
        second = query.set_filter("status", "completed")

        assert await second is True
        release_first.set()
        assert await first is False

        assert [t.title for t in query.tasks] == ["new"]
        assert notifier.errors == []
    finally:
        await query.close()
        await api.aclose()


@pytest.mark.asyncio
async def test_close_cancels_in_flight_fetch(notifier) -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.Event().wait()  # never answers
        raise AssertionError("unreachable")

    api = ApiClient(BASE_URL, MemoryTokenStorage("t"), transport=httpx.MockTransport(handler))
    query = TaskQuery(api, notifier)
    try:
        pending = query.set_filter("search", "report")
        await started.wait()

        await query.close()

        assert pending.cancelled()
        assert query.tasks == []
        with pytest.raises(RuntimeError):
            query.set_filter("search", "again")
    finally:
        await api.aclose()


@pytest.mark.asyncio
async def test_delete_removes_exactly_that_task(query, notifier) -> None:
    await query.refresh()

    assert await query.delete_task(2) is True

    assert sorted(t.id for t in query.tasks) == [1, 3]
    assert notifier.successes[-1] == "Task deleted successfully"


@pytest.mark.asyncio
async def test_delete_failure_changes_nothing(query, backend, notifier) -> None:
    await query.refresh()
    before = query.tasks

    backend.force[("DELETE", "/tasks/2")] = 500
    assert await query.delete_task(2) is False
    backend.force.clear()
    backend.business_fail[("DELETE", "/tasks/2")] = "Task is locked"
    assert await query.delete_task(2) is False

    assert query.tasks == before
    assert notifier.errors == ["Forced 500", "Task is locked"]


@pytest.mark.asyncio
async def test_toggle_status_patches_locally_after_success(query, backend) -> None:
    await query.refresh()
    list_calls = len(backend.requests_to("GET", "/tasks"))

    assert await query.toggle_status(2) is True  # completed -> pending
    assert await query.toggle_status(3) is True  # in_progress -> completed

    assert query.find(2).status is TaskStatus.PENDING
    assert query.find(3).status is TaskStatus.COMPLETED
    assert backend.tasks[2]["status"] == "pending"
    # no refetch for status flips
    assert len(backend.requests_to("GET", "/tasks")) == list_calls


@pytest.mark.asyncio
async def test_status_failure_leaves_list(query, backend, notifier) -> None:
    await query.refresh()
    backend.business_fail[("PUT", "/tasks/1")] = ""

    assert await query.update_status(1, "completed") is False

    assert query.find(1).status is TaskStatus.PENDING
    assert notifier.errors == ["Failed to update task status"]


@pytest.mark.asyncio
async def test_save_task_creates_and_refetches(query, backend) -> None:
    await query.refresh()

    ok = await query.save_task({"title": "  Call mom ", "priority": "high", "due_date": "", "category_id": "2"})

    assert ok
    assert backend.tasks[4]["title"] == "Call mom"
    assert backend.tasks[4]["description"] == ""
    assert backend.tasks[4]["due_date"] is None
    # refetched list shows the server-computed category name
    assert query.find(4).category_name == "Errands"
    assert len(backend.requests_to("GET", "/tasks")) == 2


@pytest.mark.asyncio
async def test_save_task_update_uses_put(query, backend) -> None:
    await query.refresh()

    assert await query.save_task({"title": "Write final report", "status": "in_progress"}, task_id=1)

    assert backend.tasks[1]["title"] == "Write final report"
    assert query.find(1).status is TaskStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_invalid_task_form_never_reaches_network(query, backend) -> None:
    with pytest.raises(ValidationError) as exc:
        await query.save_task({"title": "   ", "priority": "urgent", "due_date": "tomorrow"})

    assert set(exc.value.errors) == {"title", "priority", "due_date"}
    assert backend.requests_to("POST", "/tasks") == []


@pytest.mark.asyncio
async def test_category_options_failure_is_quiet(query, backend, notifier) -> None:
    backend.force[("GET", "/categories")] = 500

    assert await query.load_categories() is False

    assert query.categories == []
    assert notifier.errors == []
