# src/taskflow_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The session store and the views depend on Protocols instead of concrete implementations.
This keeps storage/notification front-ends swappable and makes testing easier.
"""

from typing import Protocol


class TokenStorage(Protocol):
    """Durable single-key storage for the bearer token (absence means logged out)."""

    def get_token(self) -> str | None: ...
    def set_token(self, token: str) -> None: ...
    def remove_token(self) -> None: ...


class Notifier(Protocol):
    """
    User-visible notifications (the toast channel).

    The front-end decides how to render them: the console prints,
    tests record them.
    """

    def success(self, text: str) -> None: ...
    def error(self, text: str) -> None: ...
