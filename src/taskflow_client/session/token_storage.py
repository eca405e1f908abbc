# src/taskflow_client/session/token_storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class FileTokenStorage:
    """
    Durable bearer-token storage: one JSON file holding `{"token": "..."}`.

    Writes are atomic (tmp + os.replace) and the file is kept private (0600).
    A missing, unreadable or malformed file reads as "no token".
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_token(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Token file %s is unreadable; treating as logged out.", self._path)
            return None
        if not isinstance(data, dict):
            return None
        token = data.get("token")
        if not isinstance(token, str) or not token.strip():
            return None
        return token

    def set_token(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"token": token}), "utf-8")
        with contextlib.suppress(OSError):
            os.chmod(tmp, 0o600)
        os.replace(tmp, self._path)
        logger.debug("Token saved to %s", self._path)

    def remove_token(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()
            logger.debug("Token removed from %s", self._path)


class MemoryTokenStorage:
    """Process-lifetime storage, used when token persistence is switched off."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def remove_token(self) -> None:
        self._token = None
