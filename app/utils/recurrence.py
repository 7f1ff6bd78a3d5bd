from __future__ import annotations

import secrets
import time as _time
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from app.utils.timephrases import weekday_number

MIN_WEEK_COUNT = 1


@dataclass(frozen=True)
class RecurrenceSpec:
    weekdays: frozenset[int]
    week_count: int
    anchor_date: date
    start_time: time
    duration_minutes: int


def clamp_week_count(value: int | None, default: int, maximum: int) -> int:
    """Week count for a series: the default when unspecified, kept within [1, maximum]."""
    if value is None:
        value = default
    return max(MIN_WEEK_COUNT, min(value, maximum))


def first_occurrence(reference: date, weekdays) -> date:
    """Earliest date on or after ``reference`` that falls on one of ``weekdays``."""
    wanted = set(weekdays)
    for offset in range(7):
        day = reference + timedelta(days=offset)
        if weekday_number(day) in wanted:
            return day
    return reference


def build_spec(
    reference: date,
    weekdays,
    week_count: int,
    start_time: time,
    duration_minutes: int,
) -> RecurrenceSpec:
    return RecurrenceSpec(
        weekdays=frozenset(weekdays),
        week_count=week_count,
        anchor_date=first_occurrence(reference, weekdays),
        start_time=start_time,
        duration_minutes=duration_minutes,
    )


def expand(spec: RecurrenceSpec) -> list[tuple[datetime, datetime]]:
    """
    Every (start, end) occurrence of a weekly series, ascending by start.

    Offsets are measured forward from the anchor's weekday, so the same
    weekday set in any order produces the same series.
    """
    anchor_weekday = weekday_number(spec.anchor_date)
    duration = timedelta(minutes=max(spec.duration_minutes, 1))
    occurrences = []
    for week in range(max(spec.week_count, MIN_WEEK_COUNT)):
        for weekday in sorted(spec.weekdays):
            offset = (weekday - anchor_weekday) % 7 + week * 7
            start = datetime.combine(spec.anchor_date + timedelta(days=offset), spec.start_time)
            occurrences.append((start, start + duration))
    occurrences.sort()
    return occurrences


def new_recurrence_id() -> str:
    return f"rec-{int(_time.time() * 1000)}-{secrets.token_hex(4)}"
