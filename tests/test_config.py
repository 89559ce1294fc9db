# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from taskmatrix.config import Settings

_VARS = (
    "APP_NAME",
    "LOG_LEVEL",
    "DATA_DIR",
    "STORAGE_PATH",
    "STORAGE_KEY",
    "PERSIST",
    "PERSIST_DELAY_MS",
    "UPCOMING_DAYS",
    "URGENT_WINDOW_HOURS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path) -> None:
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    for name in _VARS:
        monkeypatch.delenv(f"TASKMATRIX_{name}", raising=False)


def test_defaults() -> None:
    s = Settings.from_env()

    assert s.app_name == "taskmatrix"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/taskmatrix")
    assert s.storage_path == Path(".local/taskmatrix/storage.sqlite3")
    assert s.storage_key == "tasks"
    assert s.persist_enabled is True
    assert s.persist_delay_ms == 500
    assert s.upcoming_days == 7
    assert s.urgent_window_hours == 48


def test_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TASKMATRIX_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("TASKMATRIX_STORAGE_KEY", "my-tasks")
    monkeypatch.setenv("TASKMATRIX_PERSIST", "off")
    monkeypatch.setenv("TASKMATRIX_PERSIST_DELAY_MS", "250")
    monkeypatch.setenv("TASKMATRIX_UPCOMING_DAYS", "14")

    s = Settings.from_env()

    assert s.data_dir == tmp_path / "data"
    assert s.storage_path == tmp_path / "data" / "storage.sqlite3"
    assert s.storage_key == "my-tasks"
    assert s.persist_enabled is False
    assert s.persist_delay_ms == 250
    assert s.upcoming_days == 14


def test_invalid_numbers_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("TASKMATRIX_PERSIST_DELAY_MS", "soon")
    monkeypatch.setenv("TASKMATRIX_UPCOMING_DAYS", "0")
    monkeypatch.setenv("TASKMATRIX_URGENT_WINDOW_HOURS", "-5")

    s = Settings.from_env()

    assert s.persist_delay_ms == 500
    assert s.upcoming_days == 1
    assert s.urgent_window_hours == 0


def test_dotenv_file_in_working_dir_is_loaded(tmp_path) -> None:
    (tmp_path / ".env").write_text("TASKMATRIX_STORAGE_KEY=from-dotenv\n", encoding="utf-8")

    try:
        s = Settings.from_env()
    finally:
        # load_dotenv writes os.environ directly
        os.environ.pop("TASKMATRIX_STORAGE_KEY", None)

    assert s.storage_key == "from-dotenv"
