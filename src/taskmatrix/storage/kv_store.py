# src/taskmatrix/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, TypeVar

from ..core.ports import KeyValueBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteKeyValueBackend:
    """
    SQLite-backed key-value backend.

    One table, one row per key. The schema is created if missing.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteKeyValueBackend ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- KeyValueBackend ----

    def get_item(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def clear(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv")
            conn.commit()
        finally:
            conn.close()


class MemoryKeyValueBackend:
    """In-process backend (persistence disabled, tests)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class SafeStorage:
    """
    Failure-tolerant JSON facade over a KeyValueBackend.

    - get(): missing key, backend error or undecodable JSON -> default
    - set()/remove()/clear(): backend or encode errors are logged and dropped
    - set() returns whether the write went through (callers may ignore it)
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def get(self, key: str, default: T) -> Any | T:
        try:
            raw = self._backend.get_item(key)
        except Exception:
            logger.exception("Error reading from storage (key: %s)", key)
            return default
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.exception("Stored value is not valid JSON (key: %s)", key)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            raw = json.dumps(value, ensure_ascii=False)
            self._backend.set_item(key, raw)
            return True
        except Exception:
            logger.exception("Error writing to storage (key: %s)", key)
            return False

    def remove(self, key: str) -> None:
        try:
            self._backend.remove_item(key)
        except Exception:
            logger.exception("Error removing from storage (key: %s)", key)

    def clear(self) -> None:
        try:
            self._backend.clear()
        except Exception:
            logger.exception("Error clearing storage")
