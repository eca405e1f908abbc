# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskflow_client.logging_setup import console_threshold, setup_logging


@pytest.mark.parametrize(
    ("name", "level"),
    [
        ("taskflow_client.session.store", logging.INFO),
        ("taskflow_client.api.client", logging.WARNING),
        ("taskflow_client.tasks.task_query", logging.WARNING),
        ("py.warnings", logging.ERROR),
        ("httpx", logging.ERROR),
    ],
)
def test_console_threshold_per_logger(name: str, level: int) -> None:
    assert console_threshold(name) == level


def test_setup_logging_writes_file_and_filters_console(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        log_file = setup_logging(log_dir=tmp_path, console_level=logging.DEBUG)

        logging.getLogger("taskflow_client.session.store").info("session restored")
        logging.getLogger("taskflow_client.api.client").info("API GET /tasks -> 200")
        for h in root.handlers:
            h.flush()

        err = capsys.readouterr().err
        assert "session restored" in err
        assert "API GET /tasks" not in err

        text = log_file.read_text("utf-8")
        assert log_file == tmp_path / "taskflow.log"
        assert "session restored" in text
        assert "API GET /tasks -> 200" in text
    finally:
        for h in list(root.handlers):
            if h in saved[0]:
                continue
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
