# src/taskflow_client/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _prompt(state: AppState) -> str:
    user = state.session.user
    return f"{user.name}> " if user else "guest> "


def run_console_loop(state: AppState, runner: asyncio.Runner) -> None:
    """
    Interactive REPL. Input is read synchronously; every command runs on `runner`,
    the single event loop that owns the API client.
    """
    logger.info("Console connector started (session=%s).", state.session.status)
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for slow operations.
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            prompt = _prompt(state)
            user_input = input(prompt).strip()
            _rewrite_prev_line(f"[{_ts_local()}] {prompt}{user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = runner.run(command_registry.handle(state, user_input, emit=emit))
        except KeyboardInterrupt:
            # Ctrl+C while a request is in flight cancels that command only.
            _print_ts("Cancelled.")
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Page not found: commands start with '/'. Use /help to list them."
        print(f"[{_ts_local()}] {reply}\n")

    logger.info("Console connector finished.")
