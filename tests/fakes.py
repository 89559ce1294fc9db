# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from taskmatrix.storage.kv_store import MemoryKeyValueBackend


class FakeClock:
    """
    Deterministic clock for unit tests.

    Callable like utc_now(); advance() moves time forward explicitly.
    """

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass(slots=True)
class _ManualTimer:
    when: float
    fn: Callable[[], Any]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(slots=True)
class ManualScheduler:
    """
    TimerScheduler that only fires when the test calls advance().

    This avoids real timers and makes debounce tests purely about ordering:
    which timers were cancelled and which fired.
    """

    now: float = 0.0
    timers: list[_ManualTimer] = field(default_factory=list)

    def call_later(self, delay: float, fn: Callable[[], Any]) -> _ManualTimer:
        t = _ManualTimer(when=self.now + delay, fn=fn)
        self.timers.append(t)
        return t

    @property
    def active(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.timers.remove(timer)
            self.now = timer.when
            timer.fn()
        self.now = target
        self.timers = [t for t in self.timers if not t.cancelled]


class RecordingBackend(MemoryKeyValueBackend):
    """In-memory backend that remembers every write."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []

    def set_item(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        super().set_item(key, value)


class FailingBackend:
    """Backend whose every operation fails (quota exceeded / storage disabled)."""

    def __init__(self) -> None:
        self.calls = 0

    def _fail(self) -> None:
        self.calls += 1
        raise OSError("storage unavailable")

    def get_item(self, key: str) -> str | None:
        self._fail()
        return None

    def set_item(self, key: str, value: str) -> None:
        self._fail()

    def remove_item(self, key: str) -> None:
        self._fail()

    def clear(self) -> None:
        self._fail()
