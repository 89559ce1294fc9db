# src/taskmatrix/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable.

    Application records pass, except loggers listed in `quiet` which need at
    least the mapped level (storage writes fire from a timer thread and would
    land in the middle of the prompt). Everything else, captured
    `py.warnings` included, only reaches the console at ERROR.
    """

    def __init__(
        self,
        app_prefix: str = "taskmatrix.",
        quiet: dict[str, int] | None = None,
        foreign_level: int = logging.ERROR,
    ) -> None:
        super().__init__()
        self._app_prefix = app_prefix
        self._quiet = quiet if quiet is not None else {"taskmatrix.storage.": logging.WARNING}
        self._foreign_level = foreign_level

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith(self._app_prefix):
            return record.levelno >= self._foreign_level

        for prefix, min_level in self._quiet.items():
            if name.startswith(prefix):
                return record.levelno >= min_level
        return True


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskmatrix",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    file_name: str = "taskmatrix.log",
) -> Path:
    """
    Install a filtered stderr handler and a full file log on the root logger.

    Existing root handlers are replaced, so calling it twice does not
    duplicate output. Returns the log file path.
    """
    log_file = Path(log_dir) / file_name
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = _handler(logging.StreamHandler(sys.stderr), console_level)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)
    root.addHandler(_handler(logging.FileHandler(str(log_file), encoding="utf-8"), file_level))

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)
    return log_file
