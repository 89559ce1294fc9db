# src/taskmatrix/tasks/debounce.py

"""
Debounced calls.

A Debouncer collapses a burst of trigger() calls into one call of `fn` with the
arguments of the last trigger, once `delay` seconds pass without a new trigger.
The timer source is injected (threading, asyncio, or a manual fake in tests).
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any

from ..core.ports import TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)


class ThreadingScheduler:
    """TimerScheduler backed by daemon threading.Timer objects."""

    def call_later(self, delay: float, fn: Callable[[], Any]) -> TimerHandle:
        t = threading.Timer(max(0.0, float(delay)), fn)
        t.daemon = True
        t.start()
        return t


class AsyncioScheduler:
    """TimerScheduler for code that already runs inside an asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, fn: Callable[[], Any]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, float(delay)), fn)


class Debouncer:
    def __init__(self, scheduler: TimerScheduler, delay: float, fn: Callable[..., Any]) -> None:
        self._scheduler = scheduler
        self._delay = max(0.0, float(delay))
        self._fn = fn
        self._lock = threading.Lock()
        self._handle: TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._generation = 0
        # Serializes runs; a run older than the last completed one is dropped.
        self._run_lock = threading.Lock()
        self._last_run = 0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            gen = self._generation
            self._args = args
            self._handle = self._scheduler.call_later(self._delay, lambda: self._fire(gen))

    def _fire(self, gen: int) -> None:
        with self._lock:
            # A timer that lost the race with a newer trigger/cancel is stale.
            if gen != self._generation or self._handle is None:
                return
            self._handle = None
            args = self._args
            self._args = ()
        self._run(gen, args)

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            if self._handle is None:
                return False
            self._handle.cancel()
            self._handle = None
            gen = self._generation
            self._generation += 1
            args = self._args
            self._args = ()
        self._run(gen, args)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._handle = None
            self._generation += 1
            self._args = ()

    def _run(self, gen: int, args: tuple[Any, ...]) -> None:
        with self._run_lock:
            if gen < self._last_run:
                logger.debug("Dropping superseded debounced call gen=%d", gen)
                return
            self._last_run = gen
            try:
                self._fn(*args)
            except Exception:
                logger.exception("Debounced call failed")
