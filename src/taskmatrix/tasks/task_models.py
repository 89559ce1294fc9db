# src/taskmatrix/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class TaskPriority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, raw: str) -> TaskPriority:
        """Case-insensitive lookup ("high", "HIGH", "h"). Raises ValueError."""
        s = (raw or "").strip().lower()
        for p in cls:
            if p.value.lower() == s or p.value[0].lower() == s:
                return p
        raise ValueError(f"unknown priority: {raw!r}")


class TaskCategory(StrEnum):
    WORK = "Work"
    PERSONAL = "Personal"
    FINANCE = "Finance"
    HEALTH = "Health"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: str) -> TaskCategory:
        s = (raw or "").strip().lower()
        for c in cls:
            if c.value.lower() == s:
                return c
        raise ValueError(f"unknown category: {raw!r}")


class MatrixQuadrant(StrEnum):
    """
    Eisenhower matrix quadrant.

    Q1 UrgentImportant       -> Do First
    Q2 NotUrgentImportant    -> Schedule
    Q3 UrgentNotImportant    -> Delegate
    Q4 NotUrgentNotImportant -> Eliminate
    """

    URGENT_IMPORTANT = "UrgentImportant"
    NOT_URGENT_IMPORTANT = "NotUrgentImportant"
    URGENT_NOT_IMPORTANT = "UrgentNotImportant"
    NOT_URGENT_NOT_IMPORTANT = "NotUrgentNotImportant"


class TaskSortBy(StrEnum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"
    TITLE = "title"


# Fields a caller may change through TaskStore.update().
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "is_complete", "due_date", "priority", "category"}
)


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Input for TaskStore.add(): a task without id and timestamps."""

    title: str
    due_date: datetime
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.OTHER
    is_complete: bool = False


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str
    is_complete: bool
    due_date: datetime
    priority: TaskPriority
    category: TaskCategory
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class TaskWithQuadrant:
    """Read-only task + classification computed at one instant. Never persisted."""

    task: Task
    quadrant: MatrixQuadrant
    is_urgent: bool
    is_important: bool

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    @property
    def description(self) -> str:
        return self.task.description

    @property
    def is_complete(self) -> bool:
        return self.task.is_complete

    @property
    def due_date(self) -> datetime:
        return self.task.due_date

    @property
    def priority(self) -> TaskPriority:
        return self.task.priority

    @property
    def category(self) -> TaskCategory:
        return self.task.category

    @property
    def created_at(self) -> datetime:
        return self.task.created_at

    @property
    def updated_at(self) -> datetime:
        return self.task.updated_at


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """All fields optional; set fields are AND-combined."""

    category: TaskCategory | None = None
    priority: TaskPriority | None = None
    is_complete: bool | None = None
    quadrant: MatrixQuadrant | None = None


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    completion_percentage: int
    by_category: dict[TaskCategory, int] = field(default_factory=dict)
    by_priority: dict[TaskPriority, int] = field(default_factory=dict)
    # Counted over incomplete tasks only.
    by_quadrant: dict[MatrixQuadrant, int] = field(default_factory=dict)
