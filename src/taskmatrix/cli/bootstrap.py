# src/taskmatrix/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage backend, scheduler, TaskStore and TaskViews into AppState,
- flushes pending writes on shutdown.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..config import get_settings
from ..core.ports import Clock, KeyValueBackend, TimerScheduler
from ..core.state import AppState
from ..storage.kv_store import MemoryKeyValueBackend, SafeStorage, SQLiteKeyValueBackend
from ..tasks.dates import utc_now
from ..tasks.debounce import ThreadingScheduler
from ..tasks.task_store import TaskStore
from ..tasks.task_views import TaskViews

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def _make_backend(settings) -> KeyValueBackend:
    if not settings.persist_enabled:
        logger.info("Persistence disabled; tasks live in memory only.")
        return MemoryKeyValueBackend()
    try:
        return SQLiteKeyValueBackend(settings.storage_path)
    except Exception:
        # Storage unavailable must not stop the session.
        logger.exception("Cannot open storage at %s; falling back to memory", settings.storage_path)
        return MemoryKeyValueBackend()


def create_initial_state(
    *,
    settings=None,
    backend: KeyValueBackend | None = None,
    scheduler: TimerScheduler | None = None,
    clock: Clock = utc_now,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/backend/scheduler injectable makes the app easy to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if backend is None:
        _ensure_local_dirs(settings)
        backend = _make_backend(settings)

    storage = SafeStorage(backend)
    store = TaskStore(
        storage,
        storage_key=settings.storage_key,
        scheduler=scheduler or ThreadingScheduler(),
        persist_delay=settings.persist_delay_ms / 1000.0,
        clock=clock,
    )
    views = TaskViews(
        store,
        clock=clock,
        urgent_window=timedelta(hours=settings.urgent_window_hours),
        upcoming_days=settings.upcoming_days,
    )
    return AppState(settings=settings, storage=storage, task_store=store, views=views)


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.task_store.close()
    except Exception:
        logger.exception("Failed to flush task store on shutdown.")
