# src/taskmatrix/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..storage.kv_store import SafeStorage
from ..tasks.task_store import TaskStore
from ..tasks.task_views import TaskViews


@dataclass
class AppState:
    """
    Per-session state.

    Built once by cli.bootstrap.create_initial_state() and passed explicitly
    to connectors/commands; there is no module-level store.
    """

    settings: Any
    storage: SafeStorage
    task_store: TaskStore
    views: TaskViews

    # Serializes command handling when more than one connector is active.
    lock: threading.RLock = field(default_factory=threading.RLock)
