from datetime import datetime

from fastapi import APIRouter, Query, status

from app import calendar_store
from app.schemas import BatchEventsIn, DeleteResult, EventIn, EventOut, EventUpdate, MemberOut
from app.security import DB, CurrentMember

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def get_events(
    db: DB,
    member: CurrentMember,
    start: datetime = Query(..., description="Range start (ISO 8601)"),
    end: datetime = Query(..., description="Range end (ISO 8601)"),
):
    return calendar_store.list_events(db, member.household_id, start, end)


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventIn, db: DB, member: CurrentMember):
    return calendar_store.create_event(db, member, payload)


@router.post("/batch", response_model=list[EventOut], status_code=status.HTTP_201_CREATED)
def batch_create_events(payload: BatchEventsIn, db: DB, member: CurrentMember):
    return calendar_store.batch_create_events(db, member, payload.events, payload.recurrence_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: str, payload: EventUpdate, db: DB, member: CurrentMember):
    return calendar_store.update_event(db, member, event_id, payload)


@router.delete("/recurrence/{recurrence_id}", response_model=DeleteResult)
def delete_recurring_events(
    recurrence_id: str,
    db: DB,
    member: CurrentMember,
    from_start: datetime = Query(..., description="Delete occurrences starting at or after this instant"),
):
    deleted = calendar_store.delete_events_by_recurrence(db, member, recurrence_id, from_start)
    return DeleteResult(deleted=deleted)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, db: DB, member: CurrentMember):
    calendar_store.delete_event(db, member, event_id)


@router.get("/members", response_model=list[MemberOut], tags=["household"])
def get_members(db: DB, member: CurrentMember):
    return member.household.members
