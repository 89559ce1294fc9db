# src/taskmatrix/tasks/dates.py

"""
Date/time helpers.

All instants inside the task subsystem are timezone-aware UTC datetimes.
Naive datetimes coming from callers are interpreted as UTC.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime, time, timedelta

URGENT_WINDOW = timedelta(hours=48)

_RELATIVE_RE = re.compile(r"^\+(\d+)\s*([mhdw])$")


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def is_date_urgent(due: datetime, now: datetime, window: timedelta = URGENT_WINDOW) -> bool:
    """Due within the next `window`, both ends inclusive."""
    diff = as_utc(due) - as_utc(now)
    return timedelta(0) <= diff <= window


def is_date_overdue(due: datetime, now: datetime) -> bool:
    return as_utc(due) < as_utc(now)


def days_until(due: datetime, now: datetime) -> int:
    """Whole days until `due`, rounded up (negative when overdue)."""
    diff = (as_utc(due) - as_utc(now)).total_seconds()
    return math.ceil(diff / 86400)


def format_relative_time(dt: datetime, now: datetime) -> str:
    diff = (as_utc(dt) - as_utc(now)).total_seconds()
    past = diff < 0
    seconds = math.floor(abs(diff))

    if seconds < 60:
        return "just now" if past else "in a moment"

    for unit_s, name, limit in (
        (60, "minute", 60),
        (3600, "hour", 24),
        (86400, "day", 30),
    ):
        n = seconds // unit_s
        if n < limit:
            return _relative(n, name, past)

    months = seconds // (86400 * 30)
    return _relative(months, "month", past)


def _relative(n: int, unit: str, past: bool) -> str:
    label = unit if n == 1 else f"{unit}s"
    return f"{n} {label} ago" if past else f"in {n} {label}"


def is_same_day(a: datetime, b: datetime) -> bool:
    return as_utc(a).date() == as_utc(b).date()


def start_of_day(dt: datetime) -> datetime:
    d = as_utc(dt)
    return datetime.combine(d.date(), time.min, tzinfo=UTC)


def end_of_day(dt: datetime) -> datetime:
    d = as_utc(dt)
    return datetime.combine(d.date(), time(23, 59, 59, 999000), tzinfo=UTC)


def format_date_short(dt: datetime) -> str:
    return as_utc(dt).strftime("%b %d, %Y")


def parse_due(text: str, now: datetime) -> datetime:
    """
    Parse a due date typed by a user.

    Accepted:
    - "today" / "tomorrow" (end of that day)
    - "+30m", "+36h", "+2d", "+1w"
    - ISO date ("2026-11-01") -> end of that day
    - ISO datetime ("2026-11-01T09:30", "...Z", "...+02:00")

    Raises ValueError for anything else.
    """
    s = (text or "").strip().lower()
    if not s:
        raise ValueError("empty due date")

    if s == "today":
        return end_of_day(now)
    if s == "tomorrow":
        return end_of_day(as_utc(now) + timedelta(days=1))

    m = _RELATIVE_RE.match(s)
    if m:
        n = int(m.group(1))
        unit = m.group(2)
        delta = {
            "m": timedelta(minutes=n),
            "h": timedelta(hours=n),
            "d": timedelta(days=n),
            "w": timedelta(weeks=n),
        }[unit]
        return as_utc(now) + delta

    raw = text.strip()
    if len(raw) == 10:
        return end_of_day(datetime.fromisoformat(raw))
    return as_utc(datetime.fromisoformat(raw))
