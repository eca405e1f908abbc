# src/taskflow_client/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, restores the session from the stored
token, then runs the console REPL until /exit.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, start_session
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    with asyncio.Runner() as runner:
        state = create_initial_state(settings=settings)
        try:
            runner.run(start_session(state))
            user = state.session.user
            if user is not None:
                print(f"Welcome back, {user.name}.")
            else:
                print("Not logged in. Use /login or /register.")

            run_console_loop(state, runner)
        finally:
            runner.run(_shutdown(state))
            logger.info("Bye.")


if __name__ == "__main__":
    main()
