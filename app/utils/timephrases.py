from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from types import MappingProxyType

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

# Weekday numbers follow the calendar grid: 0 = Sunday ... 6 = Saturday.
WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
WEEKDAY_SHORT_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_RELATIVE_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)

WEEKDAY_ABBREVIATIONS = MappingProxyType({
    "su": 0, "sun": 0,
    "m": 1, "mo": 1, "mon": 1,
    "t": 2, "tu": 2, "tue": 2, "tues": 2,
    "w": 3, "wed": 3,
    "th": 4, "thu": 4, "thur": 4, "thurs": 4,
    "f": 5, "fr": 5, "fri": 5,
    "sa": 6, "sat": 6,
})

NUMBER_WORDS = MappingProxyType({
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
})

PART_OF_DAY_TIMES = MappingProxyType({
    "morning": time(9, 0),
    "afternoon": time(14, 0),
    "evening": time(18, 0),
    "tonight": time(18, 0),
})

DEFAULT_START = time(12, 0)

_DAY = "(" + "|".join(WEEKDAY_NAMES) + ")"
_ABBR = "(" + "|".join(sorted(WEEKDAY_ABBREVIATIONS, key=len, reverse=True)) + ")"
_UNIT_AHEAD = r"(?!\s*(?:weeks?|wks?|days?|hours?|hrs?|minutes?|mins?)\b)"

# Recurring weekday sets, first match wins in this order.
WEEKDAY_RANGE_RE = re.compile(
    rf"\b{_DAY}s?(?:\s*[-–]\s*|\s+(?:to|through|thru)\s+){_DAY}s?\b", re.IGNORECASE
)
WEEKDAY_ABBR_RANGE_RE = re.compile(
    rf"\b{_ABBR}\.?(?:\s*[-–]\s*|\s+to\s+){_ABBR}\b\.?", re.IGNORECASE
)
WEEKDAYS_RE = re.compile(r"\b(?:every\s+)?weekdays?\b", re.IGNORECASE)
EVERY_DAY_RE = re.compile(r"\bevery\s*day\b", re.IGNORECASE)
EVERY_WEEKDAY_RE = re.compile(
    rf"\bevery\s+{_DAY}s?(?:\s*(?:,|&|\band\b)\s*{_DAY}s?)*\b", re.IGNORECASE
)

WEEK_COUNT_RE = re.compile(
    r"\bfor\s+(?:the\s+next\s+)?(\d{1,3}|" + "|".join(NUMBER_WORDS) + r")\s+weeks?\b",
    re.IGNORECASE,
)

# Single dates: "tomorrow" beats "today"/"tonight", which beat a weekday name.
TOMORROW_RE = re.compile(r"\btomorrow\b", re.IGNORECASE)
TODAY_RE = re.compile(r"\b(?:today|tonight)\b", re.IGNORECASE)
SINGLE_WEEKDAY_RE = re.compile(rf"\b(?:(?:next|this)\s+)?{_DAY}s?\b", re.IGNORECASE)
SHORT_WEEKDAY_RE = re.compile(
    r"\b(?:on|next|this)\s+(sun|mon|tues?|wed|thu(?:rs?)?|fri|sat)\b\.?", re.IGNORECASE
)

TIME_RANGE_RE = re.compile(
    r"(?P<lead>\bfrom\s+)?"
    r"\b(?P<h1>\d{1,2})(?::(?P<m1>\d{2}))?(?:\s*(?P<mer1>[ap])\.?m\b\.?)?"
    r"(?:\s*[-–—]\s*|\s+(?:to|until|till|til)\s+)"
    r"(?P<h2>\d{1,2})(?::(?P<m2>\d{2}))?(?:\s*(?P<mer2>[ap])\.?m\b\.?)?"
    + _UNIT_AHEAD + r"(?![\d:])",
    re.IGNORECASE,
)

# Single clock times, first match wins in this order.
SINGLE_TIME_PATTERNS = (
    ("clock_meridiem", re.compile(
        r"\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<meridiem>[ap])\.?m\b\.?", re.IGNORECASE)),
    ("hour_meridiem", re.compile(
        r"\b(?P<hour>\d{1,2})\s*(?P<meridiem>[ap])\.?m\b\.?", re.IGNORECASE)),
    ("at_hour", re.compile(
        r"(?:\bat\s+|@\s*)(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\b(?!:)" + _UNIT_AHEAD,
        re.IGNORECASE)),
    ("after_date_word", re.compile(
        r"\b(?:today|tonight|tomorrow|" + "|".join(WEEKDAY_NAMES) + r")\s+"
        r"(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\b(?!:)" + _UNIT_AHEAD,
        re.IGNORECASE)),
    ("bare_clock", re.compile(r"\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\b", re.IGNORECASE)),
    ("noon", re.compile(r"\b(?:noon|midday)\b", re.IGNORECASE)),
)

PART_OF_DAY_RE = re.compile(
    r"\b(?:(?:in\s+the|this)\s+)?(morning|afternoon|evening|tonight)\b", re.IGNORECASE
)
_PM_CUE_RE = re.compile(r"\b(?:afternoon|evening|tonight)\b", re.IGNORECASE)

_LEADING_PREPOSITION_RE = re.compile(
    r"(?:\b(?:at|on|from|by|every|this|next|for|starting|until|each)\s+|@\s*)$", re.IGNORECASE
)
# Longest preposition plus a few spaces; lookups never scan further back.
_PREPOSITION_WINDOW = 16

# Weekly blocks where a bare "9-4" is a time range.
_SCHEDULE_BLOCK_RE = re.compile(r"\b(?:preschool|school|daycare|camp)\b", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedWhen:
    """Calendar components resolved from one utterance, in caller-local time."""

    date: date
    start: time
    end: time | None = None
    weekdays: tuple[int, ...] = ()
    week_count: int | None = None


def local_now(offset_minutes: int, utc_now: datetime | None = None) -> datetime:
    """
    Caller-local wall clock as a naive datetime.

    The offset uses the browser ``Date.getTimezoneOffset()`` sign: minutes
    between local time and UTC, positive west of Greenwich (PST = 480).
    """
    if utc_now is None:
        utc_now = datetime.now(UTC)
    elif utc_now.tzinfo is None:
        utc_now = utc_now.replace(tzinfo=UTC)
    return (utc_now.astimezone(UTC) - timedelta(minutes=offset_minutes)).replace(tzinfo=None)


def to_utc(local: datetime, offset_minutes: int) -> datetime:
    return (local + timedelta(minutes=offset_minutes)).replace(tzinfo=UTC)


def weekday_number(day: date) -> int:
    """Sunday-based weekday number for a date."""
    return (day.weekday() + 1) % 7


def to_24_hour(hour: int, meridiem: str | None = None, pm_hint: bool = False) -> int | None:
    """
    Convert a spoken hour to 0-23, or None when it cannot be a clock hour.

    Without a meridiem, hours below 7 are read as PM ("at 3" is 3pm). This is
    a usability heuristic for casual scheduling text, kept as-is.
    """
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem.lower().startswith("p"):
            return hour if hour == 12 else hour + 12
        return 0 if hour == 12 else hour
    if hour > 23:
        return None
    if hour < 7 or (pm_hint and hour < 12):
        return hour + 12
    return hour


def _clock(hour: int | None, minute: int) -> time | None:
    if hour is None or not 0 <= hour <= 23 or not 0 <= minute <= 59:
        return None
    return time(hour, minute)


def _accepted_range(match: re.Match, bare_ok: bool = False) -> bool:
    # "3-4" alone is too ambiguous unless the text names a weekly schedule.
    return bare_ok or any(match.group(g) for g in ("lead", "m1", "m2", "mer1", "mer2"))


def _bare_ranges_allowed(text: str) -> bool:
    return bool(_SCHEDULE_BLOCK_RE.search(text) or resolve_weekday_set(text))


def _range_times(match: re.Match, pm_hint: bool) -> tuple[time, time] | None:
    h1, h2 = int(match.group("h1")), int(match.group("h2"))
    m1, m2 = int(match.group("m1") or 0), int(match.group("m2") or 0)
    mer1, mer2 = match.group("mer1"), match.group("mer2")

    if mer1 and mer2:
        start_hour, end_hour = to_24_hour(h1, mer1), to_24_hour(h2, mer2)
    elif mer2:
        start_hour, end_hour = to_24_hour(h1, mer2), to_24_hour(h2, mer2)
        if start_hour is not None and end_hour is not None and (start_hour, m1) >= (end_hour, m2):
            start_hour = to_24_hour(h1, "a")
    elif mer1:
        start_hour, end_hour = to_24_hour(h1, mer1), to_24_hour(h2, mer1)
        if start_hour is not None and end_hour is not None and (end_hour, m2) <= (start_hour, m1):
            end_hour = to_24_hour(h2, "p")
    else:
        start_hour, end_hour = to_24_hour(h1, None, pm_hint), to_24_hour(h2, None, pm_hint)
        if (
            start_hour is not None and end_hour is not None
            and (end_hour, m2) <= (start_hour, m1) and end_hour < 12
        ):
            end_hour += 12

    start, end = _clock(start_hour, m1), _clock(end_hour, m2)
    if start is None or end is None or end <= start:
        return None
    return start, end


def _time_ranges(text: str):
    bare_ok = _bare_ranges_allowed(text)
    for match in TIME_RANGE_RE.finditer(text):
        if _accepted_range(match, bare_ok):
            yield match


def resolve_clock(text: str) -> tuple[time | None, time | None]:
    """
    Return (start, end) clock times found in the text.

    Precedence: explicit range > single explicit time (SINGLE_TIME_PATTERNS
    order) > part of day. Either value may be None.
    """
    pm_hint = bool(_PM_CUE_RE.search(text))

    for match in _time_ranges(text):
        times = _range_times(match, pm_hint)
        if times is not None:
            return times

    for name, pattern in SINGLE_TIME_PATTERNS:
        for match in pattern.finditer(text):
            if name == "noon":
                return time(12, 0), None
            meridiem = match.groupdict().get("meridiem")
            hour = to_24_hour(int(match.group("hour")), meridiem, pm_hint)
            start = _clock(hour, int(match.groupdict().get("minute") or 0))
            if start is not None:
                return start, None

    part = PART_OF_DAY_RE.search(text)
    if part:
        return PART_OF_DAY_TIMES[part.group(1).lower()], None
    return None, None


def _walk_weekdays(first: int, last: int) -> tuple[int, ...]:
    days = [first]
    while days[-1] != last:
        days.append((days[-1] + 1) % 7)
    return tuple(days)


def resolve_weekday_set(text: str) -> tuple[int, ...]:
    """
    Recurring weekdays named in the text, in walking order, or ().

    Ranges walk forward from the first day to the last, wrapping past
    Saturday ("sa-m" is Sat, Sun, Mon).
    """
    match = WEEKDAY_RANGE_RE.search(text)
    if match:
        return _walk_weekdays(
            WEEKDAY_NAMES.index(match.group(1).lower()),
            WEEKDAY_NAMES.index(match.group(2).lower()),
        )

    match = WEEKDAY_ABBR_RANGE_RE.search(text)
    if match:
        return _walk_weekdays(
            WEEKDAY_ABBREVIATIONS[match.group(1).lower()],
            WEEKDAY_ABBREVIATIONS[match.group(2).lower()],
        )

    if WEEKDAYS_RE.search(text):
        return (1, 2, 3, 4, 5)
    if EVERY_DAY_RE.search(text):
        return (0, 1, 2, 3, 4, 5, 6)

    match = EVERY_WEEKDAY_RE.search(text)
    if match:
        found = re.findall(_DAY, match.group(0), re.IGNORECASE)
        days: list[int] = []
        for name in found:
            number = WEEKDAY_NAMES.index(name.lower())
            if number not in days:
                days.append(number)
        return tuple(days)
    return ()


def resolve_week_count(text: str) -> int | None:
    match = WEEK_COUNT_RE.search(text)
    if not match:
        return None
    raw = match.group(1).lower()
    return int(raw) if raw.isdigit() else NUMBER_WORDS[raw]


def _single_weekday(text: str) -> int | None:
    match = SINGLE_WEEKDAY_RE.search(text)
    if match:
        return WEEKDAY_NAMES.index(match.group(1).lower())
    match = SHORT_WEEKDAY_RE.search(text)
    if match:
        return WEEKDAY_ABBREVIATIONS[match.group(1).lower()[:3]]
    return None


def resolve_date(text: str, reference: datetime, start: time | None = None) -> date | None:
    """
    Resolve a single-day phrase relative to the caller-local reference time.

    A weekday name means its next occurrence; when that is today and the
    start time has already passed, the same weekday next week.
    """
    today = reference.date()
    if TOMORROW_RE.search(text):
        return today + timedelta(days=1)
    if TODAY_RE.search(text):
        return today

    weekday = _single_weekday(text)
    if weekday is None:
        return None
    target = today + relativedelta(weekday=_RELATIVE_WEEKDAYS[weekday])
    if target == today and (start or DEFAULT_START) <= reference.time():
        target += timedelta(days=7)
    return target


def has_date_token(text: str) -> bool:
    return bool(
        resolve_weekday_set(text)
        or TOMORROW_RE.search(text)
        or TODAY_RE.search(text)
        or _single_weekday(text) is not None
    )


def has_time_token(text: str) -> bool:
    start, _ = resolve_clock(text)
    return start is not None


def resolve_when(text: str, reference: datetime) -> ResolvedWhen:
    """Resolve every date, time and recurrence phrase in one utterance."""
    start, end = resolve_clock(text)
    weekdays = resolve_weekday_set(text)
    day = None if weekdays else resolve_date(text, reference, start)
    return ResolvedWhen(
        date=day or reference.date(),
        start=start or DEFAULT_START,
        end=end,
        weekdays=weekdays,
        week_count=resolve_week_count(text),
    )


def _leading_preposition(text: str, start: int) -> int | None:
    """Start of a preposition directly before ``start``, searched in a fixed window."""
    window_start = max(0, start - _PREPOSITION_WINDOW)
    lead = _LEADING_PREPOSITION_RE.search(text, window_start, start)
    if lead is None or lead.start() == start:
        return None
    # the window may cut a word in half ("ch|at 3"); that is not a preposition
    if lead.start() == window_start and window_start > 0 and text[window_start - 1].isalnum():
        return None
    return lead.start()


def token_spans(text: str) -> list[tuple[int, int]]:
    """
    Character spans of every recognized date, time and recurrence token.

    Each span is widened to swallow a leading preposition ("at 3pm",
    "on friday", "for 8 weeks"). Overlapping spans are merged.
    """
    matches: list[re.Match] = list(_time_ranges(text))
    for pattern in (
        WEEKDAY_RANGE_RE, WEEKDAY_ABBR_RANGE_RE, WEEKDAYS_RE, EVERY_DAY_RE, EVERY_WEEKDAY_RE,
        WEEK_COUNT_RE,
        TOMORROW_RE, TODAY_RE, SINGLE_WEEKDAY_RE, SHORT_WEEKDAY_RE, PART_OF_DAY_RE,
    ):
        matches.extend(pattern.finditer(text))
    for _, pattern in SINGLE_TIME_PATTERNS:
        matches.extend(pattern.finditer(text))

    spans = []
    for match in matches:
        start, end = match.span()
        lead = _leading_preposition(text, start)
        while lead is not None:
            start = lead
            lead = _leading_preposition(text, start)
        spans.append((start, end))

    merged: list[tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return merged
