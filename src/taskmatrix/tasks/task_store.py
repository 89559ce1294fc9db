# src/taskmatrix/tasks/task_store.py

from __future__ import annotations

import dataclasses
import logging
import secrets
import string
import threading
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from ..core.ports import Clock, TimerScheduler
from ..storage.kv_store import SafeStorage
from .dates import as_utc, utc_now
from .debounce import Debouncer, ThreadingScheduler
from .task_codec import deserialize_tasks, serialize_tasks
from .task_models import UPDATABLE_FIELDS, Task, TaskDraft

logger = logging.getLogger(__name__)

Subscriber = Callable[[tuple[Task, ...]], None]

DEFAULT_STORAGE_KEY = "tasks"
DEFAULT_PERSIST_DELAY = 0.5  # seconds

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_task_id() -> str:
    """'<epoch-ms>-<9 random base36 chars>'"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def _normalized(task: Task) -> Task:
    return dataclasses.replace(
        task,
        due_date=as_utc(task.due_date),
        created_at=as_utc(task.created_at),
        updated_at=as_utc(task.updated_at),
    )


class TaskStore:
    """
    In-memory task collection with debounced write-behind persistence.

    - The collection is an immutable tuple replaced on every mutation, so
      readers always see a complete snapshot.
    - Every mutation schedules one debounced write of the full collection;
      a burst of mutations inside the quiet interval produces one write.
    - Storage failures are handled by SafeStorage and never reach callers;
      in-memory state stays authoritative.

    One instance per session; the owner calls close() at shutdown.
    """

    def __init__(
        self,
        storage: SafeStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        scheduler: TimerScheduler | None = None,
        persist_delay: float = DEFAULT_PERSIST_DELAY,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self._storage = storage
        self._key = storage_key
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._version = 0
        self._persister = Debouncer(scheduler or ThreadingScheduler(), persist_delay, self._persist)

        self._tasks: tuple[Task, ...] = tuple(self._load())
        logger.info("TaskStore ready key=%s total=%d", self._key, len(self._tasks))

    # ---- persistence ----

    def _load(self) -> list[Task]:
        payload = self._storage.get(self._key, [])
        return deserialize_tasks(payload)

    def _persist(self, snapshot: tuple[Task, ...]) -> None:
        if self._storage.set(self._key, serialize_tasks(snapshot)):
            logger.debug("Persisted %d tasks key=%s", len(snapshot), self._key)

    def flush(self) -> bool:
        """Write pending state now (no-op if nothing is pending)."""
        return self._persister.flush()

    @property
    def persist_pending(self) -> bool:
        return self._persister.pending

    def close(self) -> None:
        self.flush()
        logger.info("TaskStore closed key=%s total=%d", self._key, len(self._tasks))

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        return as_utc(self._clock())

    def _commit(self, tasks: tuple[Task, ...], *, persist: bool = True) -> None:
        with self._lock:
            self._tasks = tasks
            self._version += 1
            if persist:
                self._persister.trigger(tasks)
            subscribers = list(self._subscribers)
        self._notify(subscribers, tasks)

    @staticmethod
    def _notify(subscribers: list[Subscriber], snapshot: tuple[Task, ...]) -> None:
        for cb in subscribers:
            try:
                cb(snapshot)
            except Exception:
                logger.exception("Task subscriber failed")

    def _fresh_id(self) -> str:
        live = {t.id for t in self._tasks}
        while True:
            task_id = self._id_factory()
            if task_id not in live:
                return task_id

    # ---- observation ----

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # ---- public API ----

    def count(self) -> int:
        return len(self._tasks)

    def get_all(self) -> tuple[Task, ...]:
        return self._tasks

    def get_by_id(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def add(self, draft: TaskDraft) -> Task:
        with self._lock:
            now = self._now()
            task = Task(
                id=self._fresh_id(),
                title=draft.title,
                description=draft.description,
                is_complete=draft.is_complete,
                due_date=as_utc(draft.due_date),
                priority=draft.priority,
                category=draft.category,
                created_at=now,
                updated_at=now,
            )
            self._commit(self._tasks + (task,))
        logger.debug("Task added id=%s priority=%s category=%s", task.id, task.priority, task.category)
        return task

    def update(self, task_id: str, **changes: Any) -> Task | None:
        """
        Merge `changes` over the task and bump updated_at.

        Only UPDATABLE_FIELDS are applied; id/created_at/updated_at and unknown
        keys are ignored. Returns None when the id is unknown.
        """
        ignored = set(changes) - UPDATABLE_FIELDS
        if ignored:
            logger.debug("update(%s): ignoring fields %s", task_id, sorted(ignored))
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if "due_date" in fields:
            fields["due_date"] = as_utc(fields["due_date"])

        with self._lock:
            for idx, task in enumerate(self._tasks):
                if task.id != task_id:
                    continue
                updated = dataclasses.replace(
                    task,
                    **fields,
                    updated_at=max(self._now(), task.created_at),
                )
                self._commit(self._tasks[:idx] + (updated,) + self._tasks[idx + 1 :])
                logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
                return updated
        return None

    def delete(self, task_id: str) -> bool:
        with self._lock:
            remaining = tuple(t for t in self._tasks if t.id != task_id)
            if len(remaining) == len(self._tasks):
                return False
            self._commit(remaining)
        logger.debug("Task deleted id=%s", task_id)
        return True

    def toggle_complete(self, task_id: str) -> None:
        with self._lock:
            task = self.get_by_id(task_id)
            if task is None:
                return
            self.update(task_id, is_complete=not task.is_complete)

    def clear(self) -> None:
        self._commit(())
        logger.info("TaskStore cleared")

    def import_tasks(self, tasks: Iterable[Task]) -> None:
        """
        Replace the whole collection (ids are kept as given).

        Items that are not Task instances are dropped and instants are
        converted to aware UTC like add()/update() do.
        """
        items = list(tasks)
        accepted = tuple(_normalized(t) for t in items if isinstance(t, Task))
        if len(accepted) != len(items):
            logger.warning("import_tasks: dropped %d non-Task items", len(items) - len(accepted))
        self._commit(accepted)
        logger.info("Imported %d tasks", len(accepted))

    def reset(self) -> None:
        """Reload from storage, discarding in-memory edits and any pending write."""
        with self._lock:
            self._persister.cancel()
            loaded = tuple(self._load())
            self._commit(loaded, persist=False)
        logger.info("TaskStore reset from storage total=%d", len(loaded))
