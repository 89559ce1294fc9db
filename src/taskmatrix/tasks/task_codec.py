# src/taskmatrix/tasks/task_codec.py

"""
Task <-> JSON-safe record conversion.

Wire shape (one element of the persisted JSON array):

    {"id": "...", "title": "...", "description": "...", "isComplete": false,
     "dueDate": "2026-10-19T12:00:00.000000Z", "priority": "High",
     "category": "Work", "createdAt": "...", "updatedAt": "..."}

Decoding never raises on bad instant text: such fields get INVALID_INSTANT
and the task is reported by is_corrupt().
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, Final

from .dates import as_utc
from .task_models import Task, TaskCategory, TaskPriority

logger = logging.getLogger(__name__)

INVALID_INSTANT: Final = datetime.min.replace(tzinfo=UTC)


def format_instant(dt: datetime) -> str:
    return as_utc(dt).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_instant(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        return INVALID_INSTANT
    try:
        return as_utc(datetime.fromisoformat(raw.strip()))
    except (ValueError, OverflowError):
        # OverflowError: valid text whose UTC conversion leaves datetime's range
        return INVALID_INSTANT


def is_valid_instant(dt: datetime) -> bool:
    return dt != INVALID_INSTANT


def is_corrupt(task: Task) -> bool:
    return not (
        is_valid_instant(task.due_date)
        and is_valid_instant(task.created_at)
        and is_valid_instant(task.updated_at)
    )


def serialize_task(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "isComplete": task.is_complete,
        "dueDate": format_instant(task.due_date),
        "priority": task.priority.value,
        "category": task.category.value,
        "createdAt": format_instant(task.created_at),
        "updatedAt": format_instant(task.updated_at),
    }


def _priority_from_record(raw: Any) -> TaskPriority:
    try:
        return TaskPriority(raw)
    except ValueError:
        logger.warning("Unknown priority %r in stored task; using Medium", raw)
        return TaskPriority.MEDIUM


def _category_from_record(raw: Any) -> TaskCategory:
    try:
        return TaskCategory(raw)
    except ValueError:
        logger.warning("Unknown category %r in stored task; using Other", raw)
        return TaskCategory.OTHER


def _flag_from_record(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    logger.warning("Non-boolean isComplete %r in stored task; using False", raw)
    return False


def deserialize_task(record: dict[str, Any]) -> Task:
    return Task(
        id=str(record.get("id") or ""),
        title=str(record.get("title") or ""),
        description=str(record.get("description") or ""),
        is_complete=_flag_from_record(record.get("isComplete", False)),
        due_date=parse_instant(record.get("dueDate")),
        priority=_priority_from_record(record.get("priority")),
        category=_category_from_record(record.get("category")),
        created_at=parse_instant(record.get("createdAt")),
        updated_at=parse_instant(record.get("updatedAt")),
    )


def serialize_tasks(tasks: Iterable[Task]) -> list[dict[str, Any]]:
    return [serialize_task(t) for t in tasks]


def deserialize_tasks(payload: Any) -> list[Task]:
    """
    Decode a persisted payload with per-record recovery.

    Non-list payloads decode to []. Records that are not objects, have no id,
    carry invalid instants, or repeat an earlier id are skipped with a warning.
    """
    if not isinstance(payload, list):
        if payload is not None:
            logger.warning("Stored tasks payload is %s, expected list; ignoring", type(payload).__name__)
        return []

    out: list[Task] = []
    seen: set[str] = set()
    for idx, record in enumerate(payload):
        if not isinstance(record, dict):
            logger.warning("Skipping stored task #%d: not an object", idx)
            continue
        task = deserialize_task(record)
        if not task.id:
            logger.warning("Skipping stored task #%d: missing id", idx)
            continue
        if is_corrupt(task):
            logger.warning("Skipping stored task #%d id=%s: invalid date field", idx, task.id)
            continue
        if task.id in seen:
            logger.warning("Skipping stored task #%d: duplicate id=%s", idx, task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return out
