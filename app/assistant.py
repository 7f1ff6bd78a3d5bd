"""Turns one chat message into an event proposal, a weekly batch, or a hint.

Extraction goes to the model when one is configured and falls back to the
rule-based parser on any failure, so callers always get a well-formed reply.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, time, timedelta
from functools import partial

import structlog

from app.config import Settings, settings
from app.schemas import (
    AssistantResponse,
    ChatIn,
    CreateEventResponse,
    CreateEventsResponse,
    EventProposal,
    MessageResponse,
)
from app.utils import llm, nlp
from app.utils.duration import format_duration
from app.utils.members import Assignment, resolve_assignment
from app.utils.recurrence import build_spec, clamp_week_count, expand, new_recurrence_id
from app.utils.timephrases import WEEKDAY_SHORT_LABELS, local_now, to_utc, weekday_number

logger = structlog.get_logger()

USAGE_HINT = (
    'Try describing an event, like "coffee with George tomorrow at 3" '
    'or "dentist appointment Friday 10am".'
)

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

RemoteExtractor = Callable[..., "llm.RemoteEventArgs | str"]


def clock_label(moment: datetime | time) -> str:
    """12-hour clock, e.g. '3:00 PM'."""
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment.minute:02d} {'AM' if moment.hour < 12 else 'PM'}"


def weekday_label(weekdays: Sequence[int]) -> str:
    """'Mon–Fri' for a run of three or more consecutive days, else 'Tue, Thu'."""
    days = list(dict.fromkeys(weekdays))
    labels = [WEEKDAY_SHORT_LABELS[d % 7] for d in days]
    consecutive = all((b - a) % 7 == 1 for a, b in zip(days, days[1:]))
    if len(days) > 2 and consecutive:
        return f"{labels[0]}–{labels[-1]}"
    return ", ".join(labels)


def single_message(start: datetime, end: datetime, duration_minutes: int, location: str | None) -> str:
    day = f"{WEEKDAY_SHORT_LABELS[weekday_number(start.date())]}, {MONTH_LABELS[start.month - 1]} {start.day}"
    parts = [f"{day} {clock_label(start)}–{clock_label(end)}", format_duration(duration_minutes)]
    if location:
        parts.append(location)
    return " · ".join(parts)


def batch_message(
    weekdays: Sequence[int],
    start: datetime,
    end: datetime,
    week_count: int,
    total: int,
    location: str | None,
) -> str:
    weeks = "1 week" if week_count == 1 else f"{week_count} weeks"
    events = "1 event" if total == 1 else f"{total} events"
    parts = [f"{weekday_label(weekdays)} {clock_label(start)}–{clock_label(end)}", weeks, events]
    if location:
        parts.append(location)
    return " · ".join(parts)


def _proposal(
    draft: nlp.EventDraft,
    assignment: Assignment,
    start: datetime,
    end: datetime,
    offset_minutes: int,
) -> EventProposal:
    return EventProposal(
        title=draft.title or "New Event",
        start=to_utc(start, offset_minutes),
        end=to_utc(end, offset_minutes),
        location=draft.location,
        attendees=assignment.attendees or None,
        description=draft.description,
        member_ids=assignment.member_ids,
    )


def build_response(
    draft: nlp.EventDraft,
    payload: ChatIn,
    config: Settings = settings,
) -> CreateEventResponse | CreateEventsResponse:
    assignment = resolve_assignment(
        draft.attendees,
        payload.household_members,
        payload.current_user_name,
        everyone=draft.everyone,
        assigned=draft.assigned_members,
    )
    offset = payload.timezone_offset_minutes

    if draft.weekdays:
        week_count = clamp_week_count(
            draft.week_count, config.DEFAULT_RECURRENCE_WEEKS, config.MAX_RECURRENCE_WEEKS
        )
        spec = build_spec(draft.day, draft.weekdays, week_count, draft.start, draft.duration_minutes)
        occurrences = expand(spec)
        proposals = [_proposal(draft, assignment, start, end, offset) for start, end in occurrences]
        recurrence_id = new_recurrence_id()
        first_start, first_end = occurrences[0]
        logger.info(
            "proposals_built",
            kind="batch",
            title=draft.title,
            count=len(proposals),
            weeks=week_count,
            recurrence_id=recurrence_id,
        )
        return CreateEventsResponse(
            message=batch_message(
                draft.weekdays, first_start, first_end, week_count, len(proposals), draft.location
            ),
            proposal=proposals[0],
            proposals=proposals,
            recurrence_id=recurrence_id,
        )

    start = datetime.combine(draft.day, draft.start)
    end = start + timedelta(minutes=draft.duration_minutes)
    proposal = _proposal(draft, assignment, start, end, offset)
    logger.info("proposals_built", kind="single", title=draft.title, start=proposal.start.isoformat())
    return CreateEventResponse(
        message=single_message(start, end, draft.duration_minutes, draft.location),
        proposal=proposal,
    )


def _remote_draft(
    payload: ChatIn,
    reference: datetime,
    remote: RemoteExtractor,
) -> nlp.EventDraft | str | None:
    try:
        reply = remote(
            payload.message,
            payload.conversation_history,
            reference,
            members=payload.household_members,
            current_user_name=payload.current_user_name,
        )
        if isinstance(reply, str):
            return reply
        draft = reply.to_draft()
        if draft.duration_minutes <= 0 or not draft.title:
            logger.warning("remote_extraction_unusable", title=draft.title)
            return None
        return draft
    except Exception as exc:
        # any remote failure, including a missing key, means the rule-based parser takes over
        logger.warning("remote_extraction_failed", error=str(exc), error_type=type(exc).__name__)
        return None


def process_message(
    payload: ChatIn,
    now: datetime | None = None,
    remote: RemoteExtractor | None = None,
    config: Settings = settings,
) -> AssistantResponse:
    """
    Handle one chat message and return one of the three reply shapes.

    ``now`` is the current UTC instant (defaults to the wall clock). ``remote``
    overrides the model-backed extractor; without it the model is used only
    when an API key is configured. Never raises.
    """
    try:
        if not nlp.looks_like_event_request(payload.message):
            logger.info("message_not_actionable")
            return MessageResponse(message=USAGE_HINT)

        reference = local_now(payload.timezone_offset_minutes, now)
        if remote is None and config.OPENAI_API_KEY:
            remote = partial(llm.extract_event, config=config)

        draft = None
        if remote is not None:
            outcome = _remote_draft(payload, reference, remote)
            if isinstance(outcome, str):
                return MessageResponse(message=outcome or USAGE_HINT)
            draft = outcome

        if draft is None:
            draft = nlp.parse_event_draft(payload.message, reference)

        return build_response(draft, payload, config)
    except Exception:
        logger.exception("assistant_failed")
        return MessageResponse(message=USAGE_HINT)
