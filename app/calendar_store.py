from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import EventNotFoundError, EventValidationError, PermissionDeniedError
from app.models import Event, Member
from app.schemas import EventIn, EventUpdate, HouseholdMemberRef

logger = structlog.get_logger()


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def validate_event(title: str, start: datetime, end: datetime, max_hours: int | None = None) -> None:
    if max_hours is None:
        max_hours = settings.MAX_EVENT_DURATION_HOURS
    if not title.strip():
        raise EventValidationError("Title cannot be empty")
    if end <= start:
        raise EventValidationError("End time must be after start time")
    if end - start > timedelta(hours=max_hours):
        raise EventValidationError(f"Event duration cannot exceed {max_hours} hours")


def assert_write_access(member: Member) -> None:
    if member.household_id is None:
        raise PermissionDeniedError("You are not a member of this household.")
    if member.read_only:
        raise PermissionDeniedError("Your role is read-only for calendar edits.")


def household_roster(db: Session, household_id: str) -> list[HouseholdMemberRef]:
    members = db.scalars(
        select(Member).where(Member.household_id == household_id).order_by(Member.created_at)
    ).all()
    return [HouseholdMemberRef(id=m.id, name=m.name) for m in members]


def get_event(db: Session, member: Member, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None or event.household_id != member.household_id:
        raise EventNotFoundError("Event not found.")
    return event


def list_events(db: Session, household_id: str, range_start: datetime, range_end: datetime) -> list[Event]:
    """Events overlapping [range_start, range_end), ascending by start."""
    range_start, range_end = _naive_utc(range_start), _naive_utc(range_end)
    # anything overlapping the range started at most one max-length event earlier
    earliest = range_start - timedelta(hours=settings.MAX_EVENT_DURATION_HOURS)
    stmt = (
        select(Event)
        .where(
            Event.household_id == household_id,
            Event.start >= earliest,
            Event.start < range_end,
            Event.end > range_start,
        )
        .order_by(Event.start)
    )
    return list(db.scalars(stmt).all())


def _new_event(member: Member, payload: EventIn, recurrence_id: str | None = None) -> Event:
    return Event(
        household_id=member.household_id,
        title=payload.title.strip(),
        description=payload.description,
        start=_naive_utc(payload.start),
        end=_naive_utc(payload.end),
        location=payload.location,
        attendees=payload.attendees,
        member_ids=payload.member_ids or [member.id],
        recurrence_id=recurrence_id,
        created_by=member.id,
    )


def create_event(db: Session, member: Member, payload: EventIn) -> Event:
    validate_event(payload.title, payload.start, payload.end)
    assert_write_access(member)
    event = _new_event(member, payload)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("event_created", event_id=event.id, household_id=member.household_id)
    return event


def batch_create_events(
    db: Session,
    member: Member,
    payloads: Sequence[EventIn],
    recurrence_id: str | None = None,
) -> list[Event]:
    """Insert a recurring batch. Every element is validated before anything is written."""
    assert_write_access(member)
    for payload in payloads:
        validate_event(payload.title, payload.start, payload.end)
    events = [_new_event(member, payload, recurrence_id) for payload in payloads]
    db.add_all(events)
    db.commit()
    for event in events:
        db.refresh(event)
    logger.info("events_batch_created", count=len(events), recurrence_id=recurrence_id)
    return events


def update_event(db: Session, member: Member, event_id: str, changes: EventUpdate) -> Event:
    assert_write_access(member)
    event = get_event(db, member, event_id)
    fields = changes.model_dump(exclude_unset=True)
    title = fields["title"] if fields.get("title") is not None else event.title
    start = _naive_utc(fields["start"]) if fields.get("start") else event.start
    end = _naive_utc(fields["end"]) if fields.get("end") else event.end
    validate_event(title, start, end)

    event.title, event.start, event.end = title.strip(), start, end
    for name in ("location", "description", "member_ids"):
        if name in fields:
            setattr(event, name, fields[name])
    db.commit()
    db.refresh(event)
    logger.info("event_updated", event_id=event.id)
    return event


def delete_event(db: Session, member: Member, event_id: str) -> None:
    assert_write_access(member)
    event = get_event(db, member, event_id)
    db.delete(event)
    db.commit()
    logger.info("event_deleted", event_id=event_id)


def delete_events_by_recurrence(db: Session, member: Member, recurrence_id: str, from_start: datetime) -> int:
    """Delete the occurrences of a batch starting at or after ``from_start``."""
    assert_write_access(member)
    stmt = delete(Event).where(
        Event.household_id == member.household_id,
        Event.recurrence_id == recurrence_id,
        Event.start >= _naive_utc(from_start),
    )
    deleted = db.execute(stmt).rowcount
    db.commit()
    logger.info("recurring_events_deleted", recurrence_id=recurrence_id, deleted=deleted)
    return deleted
