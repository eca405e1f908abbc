# src/taskflow_client/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from typing import Any, cast

from ..core.state import AppState
from ..forms import ValidationError, validate_login, validate_register
from ..tasks.task_models import Category, Task
from ..tasks.task_query import FILTER_KEYS, TaskQuery
from ..views.categories import CategoriesView
from ..views.dashboard import DashboardView
from ..views.profile import ProfileView

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

LOGIN_REQUIRED = "Please /login first."


class CommandRegistry:
    """Slash-command registry used by the console (/help, /login, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._protected: set[str] = set()
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        requires_auth: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        if requires_auth:
            self._protected.add(key)
        for alias in aliases:
            self._handlers[alias.lower()] = handler
            if requires_auth:
                self._protected.add(alias.lower())

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if name in self._protected and not state.session.is_authenticated:
            return LOGIN_REQUIRED

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except ValidationError as e:
            lines = ["Invalid input:"]
            lines.extend(f"  {field}: {msg}" for field, msg in e.errors.items())
            return "\n".join(lines)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lock = " (login required)" if name in self._protected else ""
            lines.append(f"  /{name} - {help_text}{lock}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_task(task: Task) -> str:
    mark = "x" if task.status == "completed" else " "
    parts = [f"[{mark}] #{task.id} {task.title}", f"({task.status.replace('_', ' ')}, {task.priority})"]
    if task.category_name:
        parts.append(f"[{task.category_name}]")
    if task.due_date:
        parts.append(f"due {task.due_date.strftime('%b %d, %Y')}")
    return " ".join(parts)


def format_category(category: Category) -> str:
    controls = []
    if category.can_edit:
        controls.append("edit")
    if category.can_delete:
        controls.append("delete")
    owner = "default" if category.user_id is None else "yours"
    actions = ", ".join(controls) if controls else "read-only"
    return f"#{category.id} {category.name} {category.color} - {category.task_count} task(s), {owner} [{actions}]"


def _parse_kv(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split `title words key=value ...` into positional words and key/value options."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key and key.isidentifier():
            opts[key.lower()] = value
        else:
            words.append(a)
    return words, opts


_TASK_OPT_ALIASES = {"due": "due_date", "category": "category_id", "desc": "description"}


def _task_form(opts: dict[str, str], base: dict[str, Any] | None = None) -> dict[str, Any]:
    form = dict(base or {})
    for key, value in opts.items():
        form[_TASK_OPT_ALIASES.get(key, key)] = value
    return form


def _tasks_view(state: AppState) -> TaskQuery:
    return state.view("tasks", lambda: TaskQuery(state.api, state.notifier))


def _categories_view(state: AppState) -> CategoriesView:
    return state.view("categories", lambda: CategoriesView(state.api, state.notifier))


def _render_filters(view: TaskQuery) -> str:
    parts = []
    for key, value in view.query().items():
        name = view.category_name(value) if key == "category_id" else None
        parts.append(f"{key}={value!r}" + (f" ({name})" if name else ""))
    return ", ".join(parts)


def _render_category_options(view: TaskQuery) -> str:
    if not view.categories:
        return "Category options: (none loaded)"
    return "Category options: " + ", ".join(f"#{c.id} {c.name}" for c in view.categories)


async def _reload_category_options(state: AppState) -> None:
    """Keep the task filter's category options in step with category edits."""
    view = state.views.get("tasks")
    if view is not None:
        await view.load_categories()


def _render_tasks(view: TaskQuery) -> str:
    tasks = view.tasks
    header = f"{len(tasks)} task(s) found"
    if view.query():
        header += " for " + _render_filters(view)
    if not tasks:
        return header + "\nNo tasks found. Create one with /add <title>."
    return "\n".join([header, *(f"  {format_task(t)}" for t in tasks)])


# ---- session commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    user = state.session.user
    who = f"{user.name} <{user.email}>" if user else "nobody"
    return (
        "Status:\n"
        f"  Backend: {getattr(settings, 'api_base_url', '?')}\n"
        f"  Session: {state.session.status}\n"
        f"  Logged in as: {who}"
    )


async def cmd_login(state: AppState, args: list[str]) -> str:
    if state.session.is_authenticated:
        return "Already logged in. Use /logout first."
    if len(args) < 2:
        return "Usage: /login <email> <password>"
    form = validate_login(args[0], args[1])
    # views left open by an expired session belong to the previous user
    await state.close_views()
    result = await state.session.login(form["email"], form["password"])
    if result.success and state.session.user is not None:
        return f"Logged in as {state.session.user.name}."
    return f"Login failed: {result.message}"


async def cmd_register(state: AppState, args: list[str]) -> str:
    if state.session.is_authenticated:
        return "Already logged in. Use /logout first."
    if len(args) < 3:
        return 'Usage: /register "<name>" <email> <password> [confirm]'
    confirm = args[3] if len(args) > 3 else None
    form = validate_register(args[0], args[1], args[2], confirm)
    await state.close_views()
    result = await state.session.register(form["name"], form["email"], form["password"])
    if result.success:
        return "Account created. You are now logged in."
    return f"Registration failed: {result.message}"


async def cmd_logout(state: AppState, args: list[str]) -> str:
    await state.close_views()
    state.session.logout()
    return "Bye for now."


async def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = state.session.user
    if user is None:
        return LOGIN_REQUIRED
    lines = [f"Name: {user.name}", f"Email: {user.email}"]
    if user.avatar_url:
        lines.append(f"Avatar: {user.avatar_url}")
    if user.created_at:
        lines.append(f"Member since: {user.created_at}")
    return "\n".join(lines)


# ---- dashboard ----


async def cmd_dashboard(state: AppState, args: list[str]) -> str:
    view = state.view("dashboard", lambda: DashboardView(state.api))
    data = await view.load()
    if view.error:
        return f"Error loading dashboard: {view.error}. Run /dashboard to try again."
    if data is None:
        return "No dashboard data."
    s = data.stats
    lines = [
        "Dashboard:",
        f"  Total: {s['total_tasks']}  Completed: {s['completed_tasks']}  "
        f"In progress: {s['in_progress_tasks']}  Overdue: {s['overdue_tasks']}",
        f"  Completion rate: {data.completion_rate}%",
    ]
    for title, tasks in (("Recent tasks:", data.recent_tasks), ("Upcoming:", data.upcoming_tasks)):
        lines.append(title)
        if not tasks:
            lines.append("  (none)")
        lines.extend(f"  {format_task(t)}" for t in tasks)
    return "\n".join(lines)


# ---- tasks ----


async def cmd_tasks(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    view = _tasks_view(state)
    if emit and not view.categories:
        emit("Loading tasks and categories...")
    if not view.categories:
        await view.load_categories()
    await view.refresh()
    return _render_tasks(view)


async def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                      -> show current filters
    /filter status completed     -> set one filter
    /filter search               -> clear one filter
    /filter clear                -> clear all
    """
    view = _tasks_view(state)
    if not view.categories:
        await view.load_categories()

    if not args:
        if not view.query():
            current = f"No filters set. Keys: {', '.join(FILTER_KEYS)}"
        else:
            current = "Filters: " + _render_filters(view)
        return current + "\n" + _render_category_options(view)

    key = args[0].lower()
    if key == "clear":
        await view.reset_filters()
        return _render_tasks(view)

    if key not in FILTER_KEYS:
        return f"Unknown filter: {key}. Keys: {', '.join(FILTER_KEYS)}"
    value = " ".join(args[1:])
    if key == "category_id" and value.strip() and view.categories and view.category_name(value) is None:
        return f"Unknown category: {value.strip()}.\n" + _render_category_options(view)
    await view.set_filter(key, value)
    return _render_tasks(view)


async def cmd_add(state: AppState, args: list[str]) -> str:
    words, opts = _parse_kv(args)
    if not words and "title" not in opts:
        return "Usage: /add <title> [desc=...] [priority=low|medium|high] [due=YYYY-MM-DD] [category=<id>]"
    form = _task_form(opts, {"title": " ".join(words)})
    view = _tasks_view(state)
    ok = await view.save_task(form)
    return _render_tasks(view) if ok else "Task was not saved."


async def cmd_edit(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /edit <id> [title=...] [desc=...] [status=...] [priority=...] [due=...] [category=...]"
    view = _tasks_view(state)
    task = view.find(args[0])
    if task is None:
        return f"Task {args[0]} is not in the current list. Run /tasks first."
    _, opts = _parse_kv(args[1:])
    base = {
        "title": task.title,
        "description": task.description or "",
        "status": task.status.value,
        "priority": task.priority.value,
        "due_date": task.due_date.isoformat() if task.due_date else "",
        "category_id": task.category_id or "",
    }
    ok = await view.save_task(_task_form(opts, base), task_id=task.id)
    return _render_tasks(view) if ok else "Task was not saved."


async def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    view = _tasks_view(state)
    ok = await view.toggle_status(args[0])
    task = view.find(args[0])
    return format_task(task) if ok and task else "No change."


async def cmd_set_status(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /set-status <id> <pending|in_progress|completed>"
    view = _tasks_view(state)
    try:
        ok = await view.update_status(args[0], args[1])
    except ValueError:
        return f"Unknown status: {args[1]}"
    task = view.find(args[0])
    return format_task(task) if ok and task else "No change."


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    view = _tasks_view(state)
    ok = await view.delete_task(args[0])
    return f"{len(view.tasks)} task(s) left." if ok else "No change."


# ---- categories ----


async def cmd_categories(state: AppState, args: list[str]) -> str:
    view = _categories_view(state)
    await view.load()
    cats = view.categories
    if not cats:
        return "No categories yet. Create one with /category-add <name> <#color>."
    return "\n".join(["Categories:", *(f"  {format_category(c)}" for c in cats)])


async def cmd_category_add(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return 'Usage: /category-add "<name>" <#RRGGBB>'
    ok = await _categories_view(state).create(args[0], args[1])
    if not ok:
        return "Category was not saved."
    await _reload_category_options(state)
    return "Category saved."


async def cmd_category_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 3:
        return 'Usage: /category-edit <id> "<name>" <#RRGGBB>'
    view = _categories_view(state)
    if not view.categories:
        await view.load()
    ok = await view.update(args[0], args[1], args[2])
    if not ok:
        return "Category was not saved."
    await _reload_category_options(state)
    return "Category saved."


async def cmd_category_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /category-rm <id>"
    view = _categories_view(state)
    if not view.categories:
        await view.load()
    ok = await view.delete(args[0])
    if not ok:
        return "No change."
    await _reload_category_options(state)
    return "Category deleted."


# ---- profile ----


async def cmd_profile(state: AppState, args: list[str]) -> str:
    user = state.session.user
    if user is None:
        return LOGIN_REQUIRED
    if not args:
        return await cmd_whoami(state, args)
    _, opts = _parse_kv(args)
    view = state.view("profile", lambda: ProfileView(state.api, state.session, state.notifier))
    ok = await view.update_profile(
        opts.get("name", user.name),
        opts.get("email", user.email),
        opts.get("avatar", opts.get("avatar_url", user.avatar_url or "")),
    )
    return await cmd_whoami(state, []) if ok else "Profile was not updated."


async def cmd_password(state: AppState, args: list[str]) -> str:
    if len(args) < 3:
        return "Usage: /password <current> <new> <confirm>"
    view = state.view("profile", lambda: ProfileView(state.api, state.session, state.notifier))
    ok = await view.change_password(args[0], args[1], args[2])
    return "Password changed." if ok else "Password was not changed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend and session status.")
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register("register", cmd_register, help_text='Create an account: /register "<name>" <email> <password> [confirm].')
registry.register("logout", cmd_logout, help_text="Log out and forget the stored token.", requires_auth=True)
registry.register("whoami", cmd_whoami, help_text="Show the current user.", requires_auth=True)
registry.register("dashboard", cmd_dashboard, help_text="Task statistics, recent and upcoming tasks.", aliases=["dash"], requires_auth=True)
registry.register("tasks", cmd_tasks, help_text="List tasks using the current filters.", aliases=["ls"], requires_auth=True)
registry.register("filter", cmd_filter, help_text="Filter tasks: /filter <search|status|priority|category_id> [value] | /filter clear.", requires_auth=True)
registry.register("add", cmd_add, help_text="Create a task: /add <title> [key=value ...].", requires_auth=True)
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [key=value ...].", requires_auth=True)
registry.register("done", cmd_done, help_text="Toggle a task between completed and pending.", requires_auth=True)
registry.register("set-status", cmd_set_status, help_text="Set a task status: /set-status <id> <status>.", requires_auth=True)
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", requires_auth=True)
registry.register("categories", cmd_categories, help_text="List categories with what you may do to each.", aliases=["cats"], requires_auth=True)
registry.register("category-add", cmd_category_add, help_text='Create a category: /category-add "<name>" <#RRGGBB>.', requires_auth=True)
registry.register("category-edit", cmd_category_edit, help_text='Edit one of your categories: /category-edit <id> "<name>" <#RRGGBB>.', requires_auth=True)
registry.register("category-rm", cmd_category_rm, help_text="Delete an empty category of yours: /category-rm <id>.", requires_auth=True)
registry.register("profile", cmd_profile, help_text="Show or update your profile: /profile [name=...] [email=...] [avatar=...].", requires_auth=True)
registry.register("password", cmd_password, help_text="Change password: /password <current> <new> <confirm>.", requires_auth=True)
