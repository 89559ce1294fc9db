# src/taskmatrix/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_PREFIX = "TASKMATRIX"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import find_dotenv, load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(find_dotenv(usecwd=True), override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_path: Path

    # ---- Persistence ----
    storage_key: str
    persist_enabled: bool
    persist_delay_ms: int

    # ---- Views ----
    upcoming_days: int
    urgent_window_hours: int

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv_if_available()

        app_name = _env(_k("APP_NAME"), "taskmatrix") or "taskmatrix"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmatrix"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.sqlite3")

        storage_key = _env(_k("STORAGE_KEY"), "tasks").strip() or "tasks"
        persist_enabled = _env_bool(_k("PERSIST"), True)
        persist_delay_ms = max(0, _env_int(_k("PERSIST_DELAY_MS"), 500))

        upcoming_days = max(1, _env_int(_k("UPCOMING_DAYS"), 7))
        urgent_window_hours = max(0, _env_int(_k("URGENT_WINDOW_HOURS"), 48))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            storage_key=storage_key,
            persist_enabled=persist_enabled,
            persist_delay_ms=persist_delay_ms,
            upcoming_days=upcoming_days,
            urgent_window_hours=urgent_window_hours,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
