# src/taskflow_client/tasks/task_query.py

"""
Task list view state.

Holds the filter set (search / status / priority / category_id) and keeps the
cached task list consistent with it:

- set_filter() is the only mutator of filter state; every change schedules a refetch.
- Every fetch gets a request id; only the latest issued request may write the list.
- Fetch failures leave the previous list untouched.
- Status changes and deletes patch the list only after the backend confirms;
  create/update always refetch so server-computed fields (category name/color) show up.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..api.client import ApiClient
from ..api.errors import RATE_LIMIT_MESSAGE, ApiError, RateLimitError, friendly_api_error_message
from ..core.ports import Notifier
from ..core.scope import ViewScope
from ..forms import clean_task_form
from .task_models import Category, Task, TaskStatus, categories_from_api, tasks_from_api

logger = logging.getLogger(__name__)

FILTER_KEYS = ("search", "status", "priority", "category_id")


def build_query(filters: Mapping[str, Any]) -> dict[str, str]:
    """Keep only non-empty filters, trimmed. Whitespace-only counts as empty."""
    query: dict[str, str] = {}
    for key, value in filters.items():
        if value is None:
            continue
        s = str(value).strip()
        if s:
            query[key] = s
    return query


class TaskQuery:
    def __init__(self, api: ApiClient, notifier: Notifier, *, scope: ViewScope | None = None) -> None:
        self._api = api
        self._notifier = notifier
        self._scope = scope or ViewScope("tasks")

        self._filters: dict[str, str] = {k: "" for k in FILTER_KEYS}
        self._tasks: list[Task] = []
        self._categories: list[Category] = []
        self._last_request_id = 0
        self.loading = False

    # ---- read side ----

    @property
    def filters(self) -> dict[str, str]:
        return dict(self._filters)

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    def query(self) -> dict[str, str]:
        return build_query(self._filters)

    def find(self, task_id: int | str) -> Task | None:
        for t in self._tasks:
            if str(t.id) == str(task_id):
                return t
        return None

    # ---- filters / fetching ----

    def set_filter(self, key: str, value: str | None) -> asyncio.Task[bool]:
        """Update one filter field and schedule a refetch (returned so callers may await it)."""
        if key not in FILTER_KEYS:
            raise ValueError(f"Unknown filter: {key!r}. Expected one of: {', '.join(FILTER_KEYS)}")
        self._filters[key] = "" if value is None else str(value)
        return self._scope.spawn(self._fetch())

    def reset_filters(self) -> asyncio.Task[bool]:
        """Clear every filter with a single refetch."""
        self._filters = {k: "" for k in FILTER_KEYS}
        return self._scope.spawn(self._fetch())

    def category_name(self, category_id: int | str) -> str | None:
        for c in self._categories:
            if str(c.id) == str(category_id).strip():
                return c.name
        return None

    async def refresh(self) -> bool:
        return await self._scope.run(self._fetch())

    def _is_stale(self, request_id: int) -> bool:
        return request_id != self._last_request_id or self._scope.closed

    async def _fetch(self) -> bool:
        self._last_request_id += 1
        request_id = self._last_request_id
        query = self.query()
        logger.debug("Fetching tasks #%d with query=%s", request_id, query)

        self.loading = True
        try:
            response = await self._api.tasks.list(query)
        except RateLimitError:
            if self._is_stale(request_id):
                return False
            logger.info("Task list rate-limited (#%d)", request_id)
            self._notifier.error(RATE_LIMIT_MESSAGE)
            return False
        except ApiError as e:
            if self._is_stale(request_id):
                return False
            logger.info("Task list failed (#%d): %s", request_id, e)
            self._notifier.error(f"Failed to load tasks: {e.server_message or e}")
            return False
        finally:
            if request_id == self._last_request_id:
                self.loading = False

        if self._is_stale(request_id):
            logger.debug("Dropping stale task list response #%d (latest=#%d)", request_id, self._last_request_id)
            return False

        if not response.success:
            self._notifier.error(response.message or "Failed to load tasks")
            return False

        data = response.data if isinstance(response.data, dict) else {}
        self._tasks = tasks_from_api(data.get("tasks"))
        logger.debug("Tasks loaded: %d", len(self._tasks))
        return True

    async def load_categories(self) -> bool:
        """Category options for the filter; failures are logged only."""
        try:
            response = await self._scope.run(self._api.categories.list())
        except ApiError as e:
            logger.info("Category options failed to load: %s", e)
            return False
        if not response.success or self._scope.closed:
            return False
        self._categories = categories_from_api(response.data)
        return True

    # ---- mutations ----

    async def update_status(self, task_id: int | str, status: TaskStatus | str) -> bool:
        new_status = TaskStatus(status)
        try:
            response = await self._scope.run(self._api.tasks.update(task_id, {"status": new_status.value}))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to update task status"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to update task status")
            return False
        if self._scope.closed:
            return False

        self._tasks = [replace(t, status=new_status) if str(t.id) == str(task_id) else t for t in self._tasks]
        self._notifier.success("Task status updated")
        return True

    async def toggle_status(self, task_id: int | str) -> bool:
        task = self.find(task_id)
        if task is None:
            self._notifier.error(f"Task {task_id} is not in the current list")
            return False
        return await self.update_status(task.id, task.status.toggled())

    async def delete_task(self, task_id: int | str) -> bool:
        try:
            response = await self._scope.run(self._api.tasks.delete(task_id))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to delete task"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to delete task")
            return False
        if self._scope.closed:
            return False

        self._tasks = [t for t in self._tasks if str(t.id) != str(task_id)]
        self._notifier.success("Task deleted successfully")
        return True

    async def save_task(self, form: dict[str, Any], task_id: int | str | None = None) -> bool:
        """
        Create (task_id=None) or update a task from editor input, then refetch.

        Raises forms.ValidationError before any network call if the form is invalid.
        """
        payload = clean_task_form(form)
        try:
            if task_id is None:
                response = await self._scope.run(self._api.tasks.create(payload))
            else:
                response = await self._scope.run(self._api.tasks.update(task_id, payload))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to save task"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to save task")
            return False

        self._notifier.success("Task created successfully!" if task_id is None else "Task updated successfully!")
        await self.refresh()
        return True

    async def close(self) -> None:
        await self._scope.close()
