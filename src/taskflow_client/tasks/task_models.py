# src/taskflow_client/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_api(cls, raw: Any) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(str(raw))
        except ValueError:
            return cls.PENDING

    def toggled(self) -> TaskStatus:
        """The checkbox flip: completed <-> pending (in_progress counts as not done)."""
        return TaskStatus.PENDING if self is TaskStatus.COMPLETED else TaskStatus.COMPLETED


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_api(cls, raw: Any) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw))
        except ValueError:
            return cls.MEDIUM


def parse_due_date(raw: Any) -> date | None:
    """Accepts 'YYYY-MM-DD' or a full ISO timestamp; anything else -> None."""
    if not raw:
        return None
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip()[:10])
    except ValueError:
        return None


@dataclass(slots=True, frozen=True)
class Task:
    id: int | str
    title: str
    status: TaskStatus
    priority: TaskPriority

    description: str | None = None
    due_date: date | None = None

    # server-computed from the category join
    category_id: int | str | None = None
    category_name: str | None = None
    category_color: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=raw["id"],
            title=str(raw.get("title") or ""),
            status=TaskStatus.from_api(raw.get("status")),
            priority=TaskPriority.from_api(raw.get("priority")),
            description=raw.get("description") or None,
            due_date=parse_due_date(raw.get("due_date")),
            category_id=raw.get("category_id"),
            category_name=raw.get("category_name") or None,
            category_color=raw.get("category_color") or None,
        )


@dataclass(slots=True, frozen=True)
class Category:
    id: int | str
    name: str
    color: str
    user_id: int | str | None = None  # None => system default category
    task_count: int = 0

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Category:
        try:
            task_count = int(raw.get("task_count") or 0)
        except (TypeError, ValueError):
            task_count = 0
        return cls(
            id=raw["id"],
            name=str(raw.get("name") or ""),
            color=str(raw.get("color") or ""),
            user_id=raw.get("user_id"),
            task_count=task_count,
        )

    @property
    def can_edit(self) -> bool:
        return self.user_id is not None

    @property
    def can_delete(self) -> bool:
        return self.user_id is not None and self.task_count == 0


def tasks_from_api(items: Any) -> list[Task]:
    if not isinstance(items, list):
        return []
    return [Task.from_api(t) for t in items if isinstance(t, dict) and "id" in t]


def categories_from_api(items: Any) -> list[Category]:
    if not isinstance(items, list):
        return []
    return [Category.from_api(c) for c in items if isinstance(c, dict) and "id" in c]
