# src/taskmatrix/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the console REPL, and flushes
pending task writes on exit.
"""

from __future__ import annotations

import contextlib
import logging
import signal

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state, shutdown_state

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskmatrix")
    log_file = setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s... (log: %s)", getattr(settings, "app_name", "taskmatrix"), log_file)

    state = create_initial_state(settings=settings)

    def _handle_sigterm(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        shutdown_state(state)
        raise SystemExit(0)

    # signal.signal() only works from the main thread.
    with contextlib.suppress(ValueError):
        signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        run_console_loop(state)
    finally:
        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
