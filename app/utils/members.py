from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from app.schemas import HouseholdMemberRef
from app.utils.titles import capitalize_words


@dataclass
class Assignment:
    member_ids: list[str] | None = None
    attendees: list[str] = field(default_factory=list)


def _normalize(name: str) -> str:
    return " ".join(name.lower().split())


def resolve_assignment(
    mentions: Sequence[str],
    roster: Sequence[HouseholdMemberRef] | None,
    current_user_name: str | None = None,
    everyone: bool = False,
    assigned: Sequence[str] = (),
) -> Assignment:
    """
    Decide which household members an event is for.

    Mentions that match a roster name (case-insensitive, exact) become member
    ids; the rest stay external attendees. ``everyone`` is only set by an
    extractor that explicitly flagged family-wide scope. ``assigned`` names
    come from the remote extractor; unmatched ones are dropped, not turned
    into attendees. When nothing resolves, the event goes to the person
    chatting, or to the first roster member if that person is not on the
    roster.
    """
    by_name = {}
    for member in roster or ():
        by_name.setdefault(_normalize(member.name), member.id)

    matched: set[str] = set()
    attendees: list[str] = []
    for mention in mentions:
        key = _normalize(mention)
        if not key:
            continue
        if key in by_name:
            matched.add(by_name[key])
        elif capitalize_words(mention) not in attendees:
            attendees.append(capitalize_words(mention))
    for name in assigned:
        member_id = by_name.get(_normalize(name))
        if member_id is not None:
            matched.add(member_id)

    if not roster:
        return Assignment(member_ids=None, attendees=attendees)

    if everyone:
        matched = {member.id for member in roster}
    elif not matched:
        fallback = by_name.get(_normalize(current_user_name or ""), roster[0].id)
        matched = {fallback}

    ordered = []
    for member in roster:
        if member.id in matched and member.id not in ordered:
            ordered.append(member.id)
    return Assignment(member_ids=ordered, attendees=attendees)
