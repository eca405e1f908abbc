# src/taskflow_client/forms.py

"""
Form-boundary validation.

Each validator returns the cleaned payload or raises ValidationError with
per-field messages. Nothing that fails here is ever sent to the backend.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from .tasks.task_models import TaskPriority, TaskStatus

EMAIL_RE = re.compile(r"^\S+@\S+$", re.IGNORECASE)
COLOR_RE = re.compile(r"^#[0-9a-f]{6}$", re.IGNORECASE)

MIN_PASSWORD_LENGTH = 6
MAX_CATEGORY_NAME_LENGTH = 50


class ValidationError(ValueError):
    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))

    @property
    def first_message(self) -> str:
        return next(iter(self.errors.values()), "Invalid input")


def _s(value: Any) -> str:
    return "" if value is None else str(value)


def _check_email(errors: dict[str, str], email: str) -> None:
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["email"] = "Invalid email address"


def validate_login(email: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    email = _s(email).strip()
    _check_email(errors, email)
    if not _s(password):
        errors["password"] = "Password is required"
    if errors:
        raise ValidationError(errors)
    return {"email": email, "password": password}


def validate_register(name: str, email: str, password: str, confirm_password: str | None = None) -> dict[str, str]:
    errors: dict[str, str] = {}
    name = _s(name).strip()
    email = _s(email).strip()
    if not name:
        errors["name"] = "Name is required"
    _check_email(errors, email)
    if not _s(password):
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if confirm_password is not None and confirm_password != password:
        errors["confirmPassword"] = "Passwords do not match"
    if errors:
        raise ValidationError(errors)
    return {"name": name, "email": email, "password": password}


def clean_task_form(form: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and normalize a task editor submission.

    Empty description -> "", empty due_date/category_id -> None.
    """
    errors: dict[str, str] = {}

    title = _s(form.get("title")).strip()
    if not title:
        errors["title"] = "Title is required"

    status = _s(form.get("status") or TaskStatus.PENDING).strip()
    if status not in {s.value for s in TaskStatus}:
        errors["status"] = "Invalid status"

    priority = _s(form.get("priority") or TaskPriority.MEDIUM).strip()
    if priority not in {p.value for p in TaskPriority}:
        errors["priority"] = "Invalid priority"

    due_raw = _s(form.get("due_date")).strip()
    due_date: str | None = None
    if due_raw:
        try:
            due_date = date.fromisoformat(due_raw).isoformat()
        except ValueError:
            errors["due_date"] = "Due date must be YYYY-MM-DD"

    if errors:
        raise ValidationError(errors)

    category_id = form.get("category_id")
    if isinstance(category_id, str):
        category_id = category_id.strip()

    return {
        "title": title,
        "description": _s(form.get("description")).strip(),
        "status": status,
        "priority": priority,
        "due_date": due_date,
        "category_id": category_id or None,
    }


def validate_category(name: str, color: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    name = _s(name).strip()
    color = _s(color).strip()
    if not name:
        errors["name"] = "Category name is required"
    elif len(name) > MAX_CATEGORY_NAME_LENGTH:
        errors["name"] = f"Category name must be at most {MAX_CATEGORY_NAME_LENGTH} characters"
    if not COLOR_RE.match(color):
        errors["color"] = "Color must look like #RRGGBB"
    if errors:
        raise ValidationError(errors)
    return {"name": name, "color": color}


def validate_profile(name: str, email: str, avatar_url: str | None = None) -> dict[str, str]:
    errors: dict[str, str] = {}
    name = _s(name).strip()
    email = _s(email).strip()
    if not name:
        errors["name"] = "Name is required"
    _check_email(errors, email)
    if errors:
        raise ValidationError(errors)
    return {"name": name, "email": email, "avatar_url": _s(avatar_url).strip()}


def validate_password_change(current_password: str, new_password: str, confirm_password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not current_password:
        errors["currentPassword"] = "Current password is required"
    if not new_password:
        errors["newPassword"] = "New password is required"
    elif len(new_password) < MIN_PASSWORD_LENGTH:
        errors["newPassword"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not confirm_password:
        errors["confirmPassword"] = "Please confirm your new password"
    elif confirm_password != new_password:
        errors["confirmPassword"] = "Passwords do not match"
    if errors:
        raise ValidationError(errors)
    return {"currentPassword": current_password, "newPassword": new_password}
