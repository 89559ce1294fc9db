# src/taskmatrix/tasks/matrix.py

"""
Eisenhower matrix classification.

Pure functions of (task, now). The quadrant depends on wall-clock time, so
callers pass `now` explicitly and must not cache results across reads.

    important = priority in {High, Medium}
    urgent    = overdue OR due within the next 48h (inclusive)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from .dates import URGENT_WINDOW, is_date_overdue, is_date_urgent
from .task_models import MatrixQuadrant, Task, TaskPriority, TaskWithQuadrant

_IMPORTANT = frozenset({TaskPriority.HIGH, TaskPriority.MEDIUM})

_PRIORITY_ORDER = {TaskPriority.HIGH: 0, TaskPriority.MEDIUM: 1, TaskPriority.LOW: 2}

_DISPLAY_NAMES = {
    MatrixQuadrant.URGENT_IMPORTANT: "Do First",
    MatrixQuadrant.NOT_URGENT_IMPORTANT: "Schedule",
    MatrixQuadrant.URGENT_NOT_IMPORTANT: "Delegate",
    MatrixQuadrant.NOT_URGENT_NOT_IMPORTANT: "Eliminate",
}

_DESCRIPTIONS = {
    MatrixQuadrant.URGENT_IMPORTANT: "Critical tasks that require immediate attention",
    MatrixQuadrant.NOT_URGENT_IMPORTANT: "Important tasks to plan and schedule for later",
    MatrixQuadrant.URGENT_NOT_IMPORTANT: "Tasks that are time-sensitive but less critical",
    MatrixQuadrant.NOT_URGENT_NOT_IMPORTANT: "Low priority tasks to consider eliminating",
}

_COLORS = {
    MatrixQuadrant.URGENT_IMPORTANT: "red",
    MatrixQuadrant.NOT_URGENT_IMPORTANT: "green",
    MatrixQuadrant.URGENT_NOT_IMPORTANT: "yellow",
    MatrixQuadrant.NOT_URGENT_NOT_IMPORTANT: "gray",
}


def priority_rank(priority: TaskPriority) -> int:
    return _PRIORITY_ORDER[priority]


def is_important(task: Task) -> bool:
    return task.priority in _IMPORTANT


def is_urgent(task: Task, now: datetime, window: timedelta = URGENT_WINDOW) -> bool:
    return is_date_urgent(task.due_date, now, window) or is_date_overdue(task.due_date, now)


def classify_quadrant(task: Task, now: datetime, window: timedelta = URGENT_WINDOW) -> MatrixQuadrant:
    urgent = is_urgent(task, now, window)
    important = is_important(task)

    if urgent and important:
        return MatrixQuadrant.URGENT_IMPORTANT
    if important:
        return MatrixQuadrant.NOT_URGENT_IMPORTANT
    if urgent:
        return MatrixQuadrant.URGENT_NOT_IMPORTANT
    return MatrixQuadrant.NOT_URGENT_NOT_IMPORTANT


def enhance(task: Task, now: datetime, window: timedelta = URGENT_WINDOW) -> TaskWithQuadrant:
    return TaskWithQuadrant(
        task=task,
        quadrant=classify_quadrant(task, now, window),
        is_urgent=is_urgent(task, now, window),
        is_important=is_important(task),
    )


def empty_buckets() -> dict[MatrixQuadrant, list[TaskWithQuadrant]]:
    return {q: [] for q in MatrixQuadrant}


def group_by_quadrant(
    tasks: Iterable[Task],
    now: datetime,
    window: timedelta = URGENT_WINDOW,
) -> dict[MatrixQuadrant, list[TaskWithQuadrant]]:
    """
    Partition tasks into the four quadrants (all keys always present).

    Relative input order is kept inside each bucket. Completed tasks are not
    filtered here; that is the caller's decision.
    """
    grouped = empty_buckets()
    for task in tasks:
        item = enhance(task, now, window)
        grouped[item.quadrant].append(item)
    return grouped


def sort_in_quadrant(tasks: Iterable[TaskWithQuadrant]) -> list[TaskWithQuadrant]:
    """Priority first (High..Low), then earlier due date."""
    return sorted(tasks, key=lambda t: (priority_rank(t.priority), t.due_date))


def quadrant_display_name(quadrant: MatrixQuadrant) -> str:
    return _DISPLAY_NAMES[quadrant]


def quadrant_description(quadrant: MatrixQuadrant) -> str:
    return _DESCRIPTIONS[quadrant]


def quadrant_color(quadrant: MatrixQuadrant) -> str:
    return _COLORS[quadrant]
