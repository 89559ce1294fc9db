# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmatrix.cli.bootstrap import create_initial_state
from taskmatrix.core.state import AppState
from taskmatrix.storage.kv_store import SafeStorage
from taskmatrix.tasks.task_models import TaskCategory, TaskDraft, TaskPriority
from taskmatrix.tasks.task_store import TaskStore
from taskmatrix.tasks.task_views import TaskViews

from .fakes import FakeClock, ManualScheduler, RecordingBackend

START = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskmatrix-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.sqlite3",
        storage_key="tasks",
        persist_enabled=True,
        persist_delay_ms=500,
        upcoming_days=7,
        urgent_window_hours=48,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def store(backend: RecordingBackend, scheduler: ManualScheduler, clock: FakeClock) -> TaskStore:
    return TaskStore(SafeStorage(backend), scheduler=scheduler, persist_delay=0.5, clock=clock)


@pytest.fixture()
def views(store: TaskStore, clock: FakeClock) -> TaskViews:
    return TaskViews(store, clock=clock)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    backend: RecordingBackend,
    scheduler: ManualScheduler,
    clock: FakeClock,
) -> AppState:
    """AppState wired through the real composition root with deterministic fakes."""
    return create_initial_state(settings=settings, backend=backend, scheduler=scheduler, clock=clock)


@pytest.fixture()
def make_draft():
    def _make(
        title: str = "Task",
        *,
        due_in: dict[str, float] | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        category: TaskCategory = TaskCategory.WORK,
        now: datetime = START,
        **extra,
    ) -> TaskDraft:
        return TaskDraft(
            title=title,
            description=extra.pop("description", "Test"),
            due_date=now + timedelta(**(due_in or {"days": 7})),
            priority=priority,
            category=category,
            **extra,
        )

    return _make
