# src/taskmatrix/tasks/aggregation.py

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any

from .dates import URGENT_WINDOW, as_utc
from .matrix import classify_quadrant, group_by_quadrant, priority_rank
from .task_models import (
    MatrixQuadrant,
    Task,
    TaskCategory,
    TaskFilter,
    TaskPriority,
    TaskSortBy,
    TaskStats,
)


def percentage(part: int, total: int) -> int:
    """round(part / total * 100); 0 when total is 0. Halves round up."""
    if total == 0:
        return 0
    return math.floor(part / total * 100 + 0.5)


def stats_of(tasks: Sequence[Task], now: datetime, window: timedelta = URGENT_WINDOW) -> TaskStats:
    """
    Aggregate counts.

    by_category / by_priority are taken over ALL tasks, by_quadrant over
    incomplete tasks only.
    """
    total = len(tasks)
    completed = sum(1 for t in tasks if t.is_complete)

    by_category: dict[TaskCategory, int] = dict(Counter(t.category for t in tasks))
    by_priority: dict[TaskPriority, int] = dict(Counter(t.priority for t in tasks))

    matrix = group_by_quadrant((t for t in tasks if not t.is_complete), now, window)
    by_quadrant: dict[MatrixQuadrant, int] = {q: len(items) for q, items in matrix.items()}

    return TaskStats(
        total=total,
        completed=completed,
        completion_percentage=percentage(completed, total),
        by_category=by_category,
        by_priority=by_priority,
        by_quadrant=by_quadrant,
    )


def upcoming(tasks: Iterable[Task], now: datetime, days: int = 7) -> list[Task]:
    """Incomplete tasks with now <= due_date <= now + days, earliest first."""
    start = as_utc(now)
    end = start + timedelta(days=days)
    items = [t for t in tasks if not t.is_complete and start <= t.due_date <= end]
    return sorted(items, key=lambda t: t.due_date)


def overdue(tasks: Iterable[Task], now: datetime) -> list[Task]:
    start = as_utc(now)
    items = [t for t in tasks if not t.is_complete and t.due_date < start]
    return sorted(items, key=lambda t: t.due_date)


def completion_percentage_for_category(tasks: Iterable[Task], category: TaskCategory) -> int:
    in_category = [t for t in tasks if t.category == category]
    done = sum(1 for t in in_category if t.is_complete)
    return percentage(done, len(in_category))


def filter_tasks(
    tasks: Iterable[Task],
    task_filter: TaskFilter,
    now: datetime,
    window: timedelta = URGENT_WINDOW,
) -> list[Task]:
    out: list[Task] = []
    for t in tasks:
        if task_filter.category is not None and t.category != task_filter.category:
            continue
        if task_filter.priority is not None and t.priority != task_filter.priority:
            continue
        if task_filter.is_complete is not None and t.is_complete != task_filter.is_complete:
            continue
        if task_filter.quadrant is not None and classify_quadrant(t, now, window) != task_filter.quadrant:
            continue
        out.append(t)
    return out


_SORT_KEYS: dict[TaskSortBy, Callable[[Task], Any]] = {
    TaskSortBy.DUE_DATE: lambda t: t.due_date,
    TaskSortBy.PRIORITY: lambda t: priority_rank(t.priority),
    TaskSortBy.CREATED_AT: lambda t: t.created_at,
    TaskSortBy.TITLE: lambda t: t.title.casefold(),
}


def sort_tasks(tasks: Iterable[Task], sort_by: TaskSortBy, *, descending: bool = False) -> list[Task]:
    """Stable sort by one display key; priority order is High < Medium < Low."""
    return sorted(tasks, key=_SORT_KEYS[sort_by], reverse=descending)
