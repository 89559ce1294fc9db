# tests/test_dates.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from taskmatrix.tasks.dates import (
    as_utc,
    days_until,
    end_of_day,
    format_date_short,
    format_relative_time,
    is_same_day,
    parse_due,
    start_of_day,
)

from .conftest import START


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("today", datetime(2026, 10, 19, 23, 59, 59, 999000, tzinfo=UTC)),
        ("Tomorrow", datetime(2026, 10, 20, 23, 59, 59, 999000, tzinfo=UTC)),
        ("+30m", START + timedelta(minutes=30)),
        ("+36h", START + timedelta(hours=36)),
        ("+2d", START + timedelta(days=2)),
        ("+1w", START + timedelta(weeks=1)),
        ("2026-11-01", datetime(2026, 11, 1, 23, 59, 59, 999000, tzinfo=UTC)),
        ("2026-11-01T09:30", datetime(2026, 11, 1, 9, 30, tzinfo=UTC)),
        ("2026-11-01T09:30:00Z", datetime(2026, 11, 1, 9, 30, tzinfo=UTC)),
        ("2026-11-01T11:30:00+02:00", datetime(2026, 11, 1, 9, 30, tzinfo=UTC)),
    ],
)
def test_parse_due(text, expected) -> None:
    assert parse_due(text, START) == expected


@pytest.mark.parametrize("text", ["", "   ", "next week", "+5y", "2026-13-01"])
def test_parse_due_rejects_garbage(text) -> None:
    with pytest.raises(ValueError):
        parse_due(text, START)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=30), "in a moment"),
        (timedelta(seconds=-30), "just now"),
        (timedelta(minutes=5), "in 5 minutes"),
        (timedelta(minutes=-1), "1 minute ago"),
        (timedelta(hours=3), "in 3 hours"),
        (timedelta(days=-2), "2 days ago"),
        (timedelta(days=1), "in 1 day"),
        (timedelta(days=65), "in 2 months"),
    ],
)
def test_format_relative_time(delta, expected) -> None:
    assert format_relative_time(START + delta, START) == expected


def test_days_until_rounds_up() -> None:
    assert days_until(START + timedelta(hours=1), START) == 1
    assert days_until(START + timedelta(days=2), START) == 2
    assert days_until(START, START) == 0
    assert days_until(START - timedelta(days=1, hours=1), START) == -1


def test_day_boundaries_and_formatting() -> None:
    assert start_of_day(START) == datetime(2026, 10, 19, tzinfo=UTC)
    assert end_of_day(START).date() == START.date()
    assert is_same_day(START, end_of_day(START))
    assert not is_same_day(START, START + timedelta(days=1))
    assert format_date_short(START) == "Oct 19, 2026"


def test_as_utc_treats_naive_as_utc() -> None:
    naive = datetime(2026, 10, 19, 12, 0)
    assert as_utc(naive) == START
    shifted = datetime(2026, 10, 19, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(shifted) == START
    assert as_utc(shifted).tzinfo is UTC
