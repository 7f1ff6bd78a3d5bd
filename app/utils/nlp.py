from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time

from app.utils.duration import infer_duration
from app.utils.timephrases import has_date_token, has_time_token, resolve_when
from app.utils.titles import ACTION_VERB_RE, EVENT_KEYWORD_RE, extract_attributes


@dataclass
class EventDraft:
    """
    Structured extraction shared by the rule-based and model-backed paths.

    ``day`` and ``start`` are caller-local. A non-empty ``weekdays`` turns the
    draft into a weekly series anchored at or after ``day``.
    """

    title: str
    day: date
    start: time
    duration_minutes: int
    location: str | None = None
    attendees: list[str] = field(default_factory=list)
    description: str | None = None
    weekdays: tuple[int, ...] = ()
    week_count: int | None = None
    assigned_members: list[str] = field(default_factory=list)
    everyone: bool = False


def looks_like_event_request(text: str) -> bool:
    """
    Heuristic classification of an utterance as "create an event".

    True when it starts with an action verb, mentions an event keyword, or
    carries both a date token and a time token.
    """
    if ACTION_VERB_RE.match(text) or EVENT_KEYWORD_RE.search(text):
        return True
    return has_date_token(text) and has_time_token(text)


def parse_event_draft(text: str, reference: datetime) -> EventDraft:
    """
    Rule-based extraction of one event (or weekly series) from free text.

    Works for any input: the worst case is a placeholder title at noon on
    the reference day for an hour.
    """
    when = resolve_when(text, reference)
    attributes = extract_attributes(text)
    return EventDraft(
        title=attributes.title,
        day=when.date,
        start=when.start,
        duration_minutes=infer_duration(text, when.start, when.end),
        location=attributes.location,
        attendees=attributes.attendees,
        weekdays=when.weekdays,
        week_count=when.week_count,
    )
