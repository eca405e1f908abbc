# src/taskflow_client/core/notify.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints notifications with a local timestamp, like the console connector does."""

    def __init__(self, emit: Emitter | None = None) -> None:
        self._emit = emit or (lambda line: print(line, flush=True))

    def success(self, text: str) -> None:
        logger.debug("notify success: %s", text)
        self._emit(f"[{_ts_local()}] [OK] {text}")

    def error(self, text: str) -> None:
        logger.debug("notify error: %s", text)
        self._emit(f"[{_ts_local()}] [ERROR] {text}")
