# src/taskflow_client/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskflow.log"

# Console shares the terminal with the command prompt and the [OK]/[ERROR] notices,
# so only session transitions and real problems go there. Longest prefix wins.
_CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    ("taskflow_client.session.", logging.INFO),
    ("taskflow_client.api.", logging.WARNING),
    ("taskflow_client.", logging.WARNING),
)

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def console_threshold(logger_name: str) -> int:
    """Lowest level a record from `logger_name` needs to reach the console."""
    for prefix, level in _CONSOLE_THRESHOLDS:
        if logger_name.startswith(prefix):
            return level
    # py.warnings, httpx, anything else
    return logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console: session events and warnings, filtered per logger.
    File (`<log_dir>/taskflow.log`): everything down to `file_level`, including
    the request log of the API client.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # The API client logs each call itself; httpx/httpcore would log it twice.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
