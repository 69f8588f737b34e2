# src/dayline/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, user_input: str) -> str:
    """
    Route one line of console input.

    Lines starting with '/' are commands; anything else is a shortcut for
    /add with the whole line as the title.
    """
    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    line = user_input if user_input.startswith("/") else f"/add {_quote(user_input)}"

    try:
        reply = command_registry.handle(state, line, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    return reply if reply is not None else "Use /help for commands."


def _quote(text: str) -> str:
    # Keep free text as a single title argument for the command parser.
    return "'" + text.replace("'", "'\"'\"'") + "'"


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "dayline"))
    _print_ts(f"[{app_name}] Type a task title to add it. Use /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
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

        print(handle_line(state, user_input))
        print()

    logger.info("Console connector finished.")
