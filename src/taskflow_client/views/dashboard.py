# src/taskflow_client/views/dashboard.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..api.client import ApiClient
from ..api.errors import ApiError
from ..core.scope import ViewScope
from ..tasks.task_models import Task, tasks_from_api

logger = logging.getLogger(__name__)

STAT_KEYS = ("total_tasks", "completed_tasks", "in_progress_tasks", "pending_tasks", "overdue_tasks")


@dataclass(slots=True, frozen=True)
class DashboardData:
    stats: dict[str, int]
    recent_tasks: list[Task] = field(default_factory=list)
    upcoming_tasks: list[Task] = field(default_factory=list)

    @property
    def completion_rate(self) -> int:
        total = self.stats.get("total_tasks", 0)
        if total <= 0:
            return 0
        return round(self.stats.get("completed_tasks", 0) * 100 / total)

    @classmethod
    def from_api(cls, raw: Any) -> DashboardData:
        raw = raw if isinstance(raw, dict) else {}
        stats_raw = raw.get("stats") if isinstance(raw.get("stats"), dict) else {}
        stats: dict[str, int] = {}
        for key in STAT_KEYS:
            try:
                stats[key] = int(stats_raw.get(key) or 0)
            except (TypeError, ValueError):
                stats[key] = 0
        return cls(
            stats=stats,
            recent_tasks=tasks_from_api(raw.get("recentTasks")),
            upcoming_tasks=tasks_from_api(raw.get("upcomingTasks")),
        )


class DashboardView:
    """Dashboard statistics. A failed load sets `error`; calling load() again is the retry."""

    def __init__(self, api: ApiClient, *, scope: ViewScope | None = None) -> None:
        self._api = api
        self._scope = scope or ViewScope("dashboard")
        self.data: DashboardData | None = None
        self.error: str | None = None
        self.loading = False

    async def load(self) -> DashboardData | None:
        self.loading = True
        self.error = None
        try:
            response = await self._scope.run(self._api.users.get_dashboard())
        except ApiError as e:
            logger.info("Dashboard failed to load: %s", e)
            self.error = "Failed to load dashboard data"
            return self.data
        finally:
            self.loading = False

        if self._scope.closed:
            return None
        if response.success:
            self.data = DashboardData.from_api(response.data)
        else:
            self.error = response.message or "Failed to load dashboard data"
        return self.data

    async def close(self) -> None:
        await self._scope.close()
