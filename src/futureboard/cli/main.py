# src/futureboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one event loop:
- the rollover scheduler (background task, hourly by default),
- the console REPL in the foreground.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    state.scheduler.stop()
    try:
        await asyncio.wait_for(state.scheduler.wait_closed(), timeout=30.0)
    except Exception:
        logger.exception("Rollover scheduler did not stop cleanly.")

    mirror = state.mirror_sync.mirror if state.mirror_sync is not None else None
    aclose = getattr(mirror, "aclose", None)
    if aclose is not None:
        try:
            await aclose()
        except Exception:
            logger.debug("Mirror close failed.", exc_info=True)


async def _run(state: AppState) -> None:
    state.scheduler.start()

    loop = asyncio.get_running_loop()
    stop_main = asyncio.Event()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        loop.add_signal_handler(signal.SIGTERM, _handle_signal, signal.SIGTERM)
    except (NotImplementedError, RuntimeError):
        # Some platforms do not support loop signal handlers.
        pass

    console = asyncio.create_task(run_console_loop(state), name="console")
    stopper = asyncio.create_task(stop_main.wait(), name="stop-signal")
    try:
        await asyncio.wait({console, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopper.cancel()
        console.cancel()
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/futureboard")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "FutureBoard"))

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
