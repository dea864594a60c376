# src/futureboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL on stdin.

    input() runs in a worker thread so the rollover scheduler keeps ticking on
    the event loop; command handlers themselves run on the loop, one at a time.
    """
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "FutureBoard"))
    _print_ts(f"[{app_name}] Use /help for commands, /add <title> to create a task, /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
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

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add.
            user_input = f"/add {user_input}"

        try:
            reply = await command_registry.handle(state, user_input, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command. Please retry."

        if reply is not None:
            _print_ts(reply)

    logger.info("Console connector finished.")
