# src/taskmatrix/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task subsystem.

The store depends on Protocols instead of concrete implementations.
This keeps storage backends and timer sources swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

Clock = Callable[[], datetime]
# Returns the current instant (timezone-aware UTC).


class KeyValueBackend(Protocol):
    """
    Raw string-keyed durable storage (localStorage-like).

    Implementations may raise on any call (disk full, locked DB, disabled storage);
    SafeStorage is responsible for turning that into log lines + defaults.
    """

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...
    def clear(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerScheduler(Protocol):
    """Something that can run `fn` once after `delay` seconds, cancellable."""

    def call_later(self, delay: float, fn: Callable[[], Any]) -> TimerHandle: ...
