# tests/test_task_views.py

from __future__ import annotations

import pytest

from taskmatrix.tasks.task_models import (
    MatrixQuadrant,
    TaskCategory,
    TaskFilter,
    TaskPriority,
    TaskSortBy,
)


def test_views_reflect_latest_mutation(store, views, make_draft) -> None:
    assert views.stats().total == 0

    task = store.add(make_draft("a"))
    assert views.stats().total == 1

    store.toggle_complete(task.id)
    stats = views.stats()
    assert stats.completed == 1
    assert stats.completion_percentage == 100

    store.delete(task.id)
    assert views.stats().total == 0


def test_quadrant_moves_when_only_time_passes(store, views, clock, make_draft) -> None:
    task = store.add(make_draft("report", due_in={"days": 3}, priority=TaskPriority.HIGH))

    matrix = views.matrix()
    assert [t.id for t in matrix[MatrixQuadrant.NOT_URGENT_IMPORTANT]] == [task.id]
    assert matrix[MatrixQuadrant.URGENT_IMPORTANT] == []

    clock.advance(days=2)

    matrix = views.matrix()
    assert [t.id for t in matrix[MatrixQuadrant.URGENT_IMPORTANT]] == [task.id]
    assert matrix[MatrixQuadrant.NOT_URGENT_IMPORTANT] == []


def test_matrix_excludes_completed_tasks(store, views, make_draft) -> None:
    open_task = store.add(make_draft("open", due_in={"hours": 1}, priority=TaskPriority.HIGH))
    done = store.add(make_draft("done", due_in={"hours": 1}, priority=TaskPriority.HIGH))
    store.toggle_complete(done.id)

    matrix = views.matrix()

    assert set(matrix) == set(MatrixQuadrant)
    assert [t.id for t in matrix[MatrixQuadrant.URGENT_IMPORTANT]] == [open_task.id]


def test_filtered_by_keywords_and_quadrant(store, views, make_draft) -> None:
    store.add(make_draft("urgent work", due_in={"hours": 2}, priority=TaskPriority.HIGH))
    store.add(make_draft("later work", due_in={"days": 10}, priority=TaskPriority.HIGH))
    store.add(make_draft("urgent home", due_in={"hours": 2}, category=TaskCategory.PERSONAL))

    work = views.filtered(category=TaskCategory.WORK)
    assert [t.title for t in work] == ["urgent work", "later work"]

    q1 = views.filtered(quadrant=MatrixQuadrant.URGENT_IMPORTANT)
    assert [t.title for t in q1] == ["urgent work", "urgent home"]

    assert [t.title for t in views.filtered()] == ["urgent work", "later work", "urgent home"]


def test_upcoming_and_overdue_follow_clock(store, views, clock, make_draft) -> None:
    soon = store.add(make_draft("soon", due_in={"days": 2}))
    store.add(make_draft("far", due_in={"days": 30}))

    assert [t.id for t in views.upcoming()] == [soon.id]
    assert views.overdue() == []

    clock.advance(days=3)

    assert views.upcoming() == []
    assert [t.id for t in views.overdue()] == [soon.id]
    assert [t.title for t in views.upcoming(days=30)] == ["far"]


def test_category_completion_and_sorting(store, views, make_draft) -> None:
    a = store.add(make_draft("b-task", priority=TaskPriority.LOW))
    store.add(make_draft("a-task", priority=TaskPriority.HIGH))
    store.toggle_complete(a.id)

    assert views.category_completion(TaskCategory.WORK) == 50
    assert views.category_completion(TaskCategory.HEALTH) == 0
    assert [t.title for t in views.sorted_by(TaskSortBy.TITLE)] == ["a-task", "b-task"]
    assert [t.title for t in views.sorted_by(TaskSortBy.PRIORITY, descending=True)] == ["b-task", "a-task"]


def test_filtered_rejects_filter_and_keywords_together(views) -> None:
    with pytest.raises(TypeError):
        views.filtered(TaskFilter(category=TaskCategory.WORK), priority=TaskPriority.HIGH)
