# src/taskmatrix/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from ..core.state import AppState
from ..tasks.dates import format_date_short, format_relative_time, parse_due
from ..tasks.matrix import quadrant_display_name, sort_in_quadrant
from ..tasks.task_codec import deserialize_tasks, serialize_tasks
from ..tasks.task_models import (
    MatrixQuadrant,
    Task,
    TaskCategory,
    TaskDraft,
    TaskFilter,
    TaskPriority,
    TaskSortBy,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Arguments are split shell-style, so quoted titles stay one argument.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting / parsing helpers ----

_QUADRANT_ALIASES: dict[str, MatrixQuadrant] = {
    "q1": MatrixQuadrant.URGENT_IMPORTANT,
    "q2": MatrixQuadrant.NOT_URGENT_IMPORTANT,
    "q3": MatrixQuadrant.URGENT_NOT_IMPORTANT,
    "q4": MatrixQuadrant.NOT_URGENT_NOT_IMPORTANT,
}


def _now(state: AppState) -> datetime:
    return state.views.now()


def _parse_quadrant(raw: str) -> MatrixQuadrant:
    s = raw.strip().lower()
    if s in _QUADRANT_ALIASES:
        return _QUADRANT_ALIASES[s]
    for q in MatrixQuadrant:
        if s in (q.value.lower(), quadrant_display_name(q).lower().replace(" ", "")):
            return q
    raise ValueError(f"unknown quadrant: {raw!r}")


def _parse_bool(raw: str) -> bool:
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "y", "done"):
        return True
    if s in ("0", "false", "no", "n", "open"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _format_task(task: Task, now: datetime) -> str:
    mark = "x" if task.is_complete else " "
    due = f"{format_date_short(task.due_date)} ({format_relative_time(task.due_date, now)})"
    return f"[{mark}] {task.id}  {task.title}  <{task.priority.value}/{task.category.value}>  due {due}"


def _format_list(tasks: list[Task], now: datetime, empty: str) -> str:
    if not tasks:
        return empty
    return "\n".join(_format_task(t, now) for t in tasks)


def _resolve(state: AppState, raw: str) -> Task | str:
    """Find a task by full id or unique id prefix; returns an error string otherwise."""
    task = state.task_store.get_by_id(raw)
    if task is not None:
        return task
    matches = [t for t in state.task_store.get_all() if t.id.startswith(raw)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        return f"No task with id {raw}."
    return f"Id prefix {raw} is ambiguous ({len(matches)} tasks)."


def _split_flags(args: list[str], flags: set[str]) -> tuple[list[str], dict[str, str]]:
    """Split ['a', 'b', '--due', '+2d'] into (['a', 'b'], {'due': '+2d'})."""
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        tok = args[i]
        if tok.startswith("--") and tok[2:] in flags:
            if i + 1 >= len(args):
                raise ValueError(f"missing value for {tok}")
            opts[tok[2:]] = args[i + 1]
            i += 2
            continue
        words.append(tok)
        i += 1
    return words, opts


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    persist = "ON" if getattr(settings, "persist_enabled", False) else "OFF (memory only)"
    pending = "yes" if state.task_store.persist_pending else "no"
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count()}\n"
        f"  Persistence: {persist}\n"
        f"  Storage: {getattr(settings, 'storage_path', '-')} (key={getattr(settings, 'storage_key', 'tasks')})\n"
        f"  Write pending: {pending}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [--due X] [--priority P] [--category C] [--desc text]
    """
    try:
        words, opts = _split_flags(args, {"due", "priority", "category", "desc"})
        title = " ".join(words).strip()
        if not title:
            return "Usage: /add <title> [--due +2d|tomorrow|YYYY-MM-DD] [--priority High|Medium|Low] [--category C] [--desc text]"
        draft = TaskDraft(
            title=title,
            description=opts.get("desc", ""),
            due_date=parse_due(opts.get("due", "tomorrow"), _now(state)),
            priority=TaskPriority.parse(opts["priority"]) if "priority" in opts else TaskPriority.MEDIUM,
            category=TaskCategory.parse(opts["category"]) if "category" in opts else TaskCategory.OTHER,
        )
    except ValueError as e:
        return f"Invalid input: {e}."

    task = state.task_store.add(draft)
    return f"Added {task.id}: {task.title}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                     -> all tasks
    /list open | done         -> by completion
    /list category=Work priority=High quadrant=q1
    """
    fields: dict[str, Any] = {}
    try:
        for arg in args:
            low = arg.lower()
            if low in ("open", "done"):
                fields["is_complete"] = low == "done"
                continue
            key, sep, value = arg.partition("=")
            if not sep:
                raise ValueError(f"expected key=value, got {arg!r}")
            key = key.lower()
            if key == "category":
                fields["category"] = TaskCategory.parse(value)
            elif key == "priority":
                fields["priority"] = TaskPriority.parse(value)
            elif key == "quadrant":
                fields["quadrant"] = _parse_quadrant(value)
            elif key in ("done", "complete"):
                fields["is_complete"] = _parse_bool(value)
            else:
                raise ValueError(f"unknown filter {key!r}")
    except ValueError as e:
        return f"Invalid filter: {e}."

    tasks = state.views.filtered(TaskFilter(**fields))
    return _format_list(tasks, _now(state), "No tasks match.")


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    found = _resolve(state, args[0])
    if isinstance(found, str):
        return found
    now = _now(state)
    return (
        f"{_format_task(found, now)}\n"
        f"  description: {found.description or '-'}\n"
        f"  created: {found.created_at.isoformat()}\n"
        f"  updated: {found.updated_at.isoformat()}"
    )


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    found = _resolve(state, args[0])
    if isinstance(found, str):
        return found
    state.task_store.toggle_complete(found.id)
    after = state.task_store.get_by_id(found.id)
    status = "complete" if after is not None and after.is_complete else "open"
    return f"Task {found.id} is now {status}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> title="New title" priority=High category=Work due=+3d desc="..." done=yes
    """
    if len(args) < 2:
        return "Usage: /edit <id> field=value [field=value ...]"
    found = _resolve(state, args[0])
    if isinstance(found, str):
        return found

    changes: dict[str, Any] = {}
    try:
        for arg in args[1:]:
            key, sep, value = arg.partition("=")
            if not sep:
                raise ValueError(f"expected field=value, got {arg!r}")
            key = key.lower()
            if key == "title":
                if not value.strip():
                    raise ValueError("title cannot be empty")
                changes["title"] = value.strip()
            elif key in ("desc", "description"):
                changes["description"] = value
            elif key == "due":
                changes["due_date"] = parse_due(value, _now(state))
            elif key == "priority":
                changes["priority"] = TaskPriority.parse(value)
            elif key == "category":
                changes["category"] = TaskCategory.parse(value)
            elif key in ("done", "complete"):
                changes["is_complete"] = _parse_bool(value)
            else:
                raise ValueError(f"unknown field {key!r}")
    except ValueError as e:
        return f"Invalid input: {e}."

    updated = state.task_store.update(found.id, **changes)
    if updated is None:
        return f"No task with id {found.id}."
    return f"Updated {updated.id}: {', '.join(sorted(changes))}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    found = _resolve(state, args[0])
    if isinstance(found, str):
        return found
    if state.task_store.delete(found.id):
        return f"Deleted {found.id}."
    return f"No task with id {found.id}."


def cmd_matrix(state: AppState, args: list[str]) -> str:
    grouped = state.views.matrix()
    now = _now(state)
    lines: list[str] = []
    for idx, quadrant in enumerate(MatrixQuadrant, start=1):
        items = sort_in_quadrant(grouped[quadrant])
        lines.append(f"Q{idx} {quadrant_display_name(quadrant)} ({len(items)})")
        for item in items:
            lines.append(f"  {_format_task(item.task, now)}")
    return "\n".join(lines)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.views.stats()
    lines = [
        f"Total: {stats.total}  Completed: {stats.completed}  ({stats.completion_percentage}%)",
        "By category: "
        + (", ".join(f"{k.value}={v}" for k, v in stats.by_category.items()) or "-"),
        "By priority: "
        + (", ".join(f"{k.value}={v}" for k, v in stats.by_priority.items()) or "-"),
        "Open by quadrant: "
        + ", ".join(f"{quadrant_display_name(k)}={v}" for k, v in stats.by_quadrant.items()),
    ]
    for category in TaskCategory:
        if stats.by_category.get(category):
            lines.append(f"  {category.value}: {state.views.category_completion(category)}% done")
    return "\n".join(lines)


def cmd_upcoming(state: AppState, args: list[str]) -> str:
    days: int | None = None
    if args:
        try:
            days = max(0, int(args[0]))
        except ValueError:
            return "Usage: /upcoming [days]"
    return _format_list(state.views.upcoming(days), _now(state), "Nothing due soon.")


def cmd_overdue(state: AppState, args: list[str]) -> str:
    return _format_list(state.views.overdue(), _now(state), "Nothing overdue.")


def cmd_sort(state: AppState, args: list[str]) -> str:
    if not args:
        keys = ", ".join(k.value for k in TaskSortBy)
        return f"Usage: /sort <{keys}> [desc]"
    key = args[0].lower()
    sort_by = next((k for k in TaskSortBy if k.value.lower() == key), None)
    if sort_by is None:
        return f"Unknown sort key: {args[0]}."
    descending = len(args) > 1 and args[1].lower() == "desc"
    return _format_list(state.views.sorted_by(sort_by, descending=descending), _now(state), "No tasks.")


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /export <path.json>"
    path = Path(args[0]).expanduser()
    tasks = state.task_store.get_all()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(serialize_tasks(tasks), ensure_ascii=False, indent=2), "utf-8")
    except OSError as e:
        logger.exception("Export to %s failed", path)
        return f"Export failed: {e}"
    return f"Exported {len(tasks)} tasks to {path}."


def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /import <path.json>  -> replace ALL tasks with the file contents
    """
    if not args:
        return "Usage: /import <path.json>"
    path = Path(args[0]).expanduser()
    try:
        payload = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as e:
        return f"Import failed: {e}"
    if not isinstance(payload, list):
        return "Import failed: expected a JSON array of tasks."

    tasks = deserialize_tasks(payload)
    skipped = len(payload) - len(tasks)
    if emit is not None and skipped:
        emit(f"[IMPORT] Skipping {skipped} malformed record(s).")
    state.task_store.import_tasks(tasks)
    return f"Imported {len(tasks)} tasks from {path}."


def cmd_clear(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() != "yes":
        return f"This deletes all {state.task_store.count()} tasks. Confirm with /clear yes"
    state.task_store.clear()
    return "All tasks deleted."


def cmd_reset(state: AppState, args: list[str]) -> str:
    state.task_store.reset()
    return f"Reloaded {state.task_store.count()} tasks from storage."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count and persistence status.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [--due X] [--priority P] [--category C] [--desc text].",
    aliases=["new"],
)
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [open|done] [category=C] [priority=P] [quadrant=q1..q4].",
    aliases=["ls"],
)
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Edit fields: /edit <id> field=value ...")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("matrix", cmd_matrix, help_text="Open tasks by Eisenhower quadrant.")
registry.register("stats", cmd_stats, help_text="Counts and completion percentages.")
registry.register("upcoming", cmd_upcoming, help_text="Open tasks due soon: /upcoming [days].")
registry.register("overdue", cmd_overdue, help_text="Open tasks past their due date.")
registry.register("sort", cmd_sort, help_text="List sorted: /sort dueDate|priority|createdAt|title [desc].")
registry.register("export", cmd_export, help_text="Write tasks to a JSON file: /export <path>.")
registry.register("import", cmd_import, help_text="Replace tasks from a JSON file: /import <path>.")
registry.register("clear", cmd_clear, help_text="Delete all tasks: /clear yes.")
registry.register("reset", cmd_reset, help_text="Discard unsaved edits and reload from storage.")
