# src/taskmatrix/tasks/task_views.py

"""
Derived, read-only projections over a TaskStore.

Pull model: every read takes the store's current snapshot and the clock's
current instant, so results can never lag behind the last mutation and
time-dependent classification is never cached.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..core.ports import Clock
from . import aggregation
from .dates import URGENT_WINDOW, as_utc, utc_now
from .matrix import group_by_quadrant
from .task_models import (
    MatrixQuadrant,
    Task,
    TaskCategory,
    TaskFilter,
    TaskPriority,
    TaskSortBy,
    TaskStats,
    TaskWithQuadrant,
)
from .task_store import TaskStore


class TaskViews:
    def __init__(
        self,
        store: TaskStore,
        *,
        clock: Clock = utc_now,
        urgent_window: timedelta = URGENT_WINDOW,
        upcoming_days: int = 7,
    ) -> None:
        self._store = store
        self._clock = clock
        self._window = urgent_window
        self._upcoming_days = upcoming_days

    def now(self) -> datetime:
        """The instant every view read is evaluated at."""
        return as_utc(self._clock())

    def filtered(
        self,
        task_filter: TaskFilter | None = None,
        *,
        category: TaskCategory | None = None,
        priority: TaskPriority | None = None,
        is_complete: bool | None = None,
        quadrant: MatrixQuadrant | None = None,
    ) -> list[Task]:
        """Filter by a TaskFilter or by keyword fields (not both)."""
        keywords = (category, priority, is_complete, quadrant)
        if task_filter is not None and any(v is not None for v in keywords):
            raise TypeError("pass either a TaskFilter or keyword fields, not both")
        if task_filter is None:
            task_filter = TaskFilter(
                category=category,
                priority=priority,
                is_complete=is_complete,
                quadrant=quadrant,
            )
        return aggregation.filter_tasks(self._store.get_all(), task_filter, self.now(), self._window)

    def matrix(self) -> dict[MatrixQuadrant, list[TaskWithQuadrant]]:
        """Incomplete tasks grouped by quadrant."""
        incomplete = [t for t in self._store.get_all() if not t.is_complete]
        return group_by_quadrant(incomplete, self.now(), self._window)

    def stats(self) -> TaskStats:
        return aggregation.stats_of(self._store.get_all(), self.now(), self._window)

    def category_completion(self, category: TaskCategory) -> int:
        return aggregation.completion_percentage_for_category(self._store.get_all(), category)

    def upcoming(self, days: int | None = None) -> list[Task]:
        span = self._upcoming_days if days is None else days
        return aggregation.upcoming(self._store.get_all(), self.now(), span)

    def overdue(self) -> list[Task]:
        return aggregation.overdue(self._store.get_all(), self.now())

    def sorted_by(self, sort_by: TaskSortBy, *, descending: bool = False) -> list[Task]:
        return aggregation.sort_tasks(self._store.get_all(), sort_by, descending=descending)
