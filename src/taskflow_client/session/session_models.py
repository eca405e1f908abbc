# src/taskflow_client/session/session_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

# Fields the backend owns; anything else in a partial update is kept in `extra`.
_USER_FIELDS = ("id", "name", "email", "avatar_url", "created_at")


class SessionStatus(StrEnum):
    INITIALIZING = "initializing"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(slots=True, frozen=True)
class User:
    id: int | str | None
    name: str
    email: str
    avatar_url: str | None = None
    created_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> User:
        return cls(
            id=raw.get("id"),
            name=str(raw.get("name") or ""),
            email=str(raw.get("email") or ""),
            avatar_url=raw.get("avatar_url") or None,
            created_at=raw.get("created_at"),
            extra={k: v for k, v in raw.items() if k not in _USER_FIELDS},
        )

    def merged(self, partial: dict[str, Any]) -> User:
        """Shallow merge, like `{...user, ...partial}`."""
        known = {k: v for k, v in partial.items() if k in _USER_FIELDS}
        unknown = {k: v for k, v in partial.items() if k not in _USER_FIELDS}
        return replace(self, **known, extra={**self.extra, **unknown})


@dataclass(slots=True)
class Session:
    user: User | None = None
    token: str | None = None
    loading: bool = True


@dataclass(slots=True, frozen=True)
class AuthResult:
    success: bool
    message: str | None = None
