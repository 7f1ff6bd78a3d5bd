from __future__ import annotations

import re
from dataclasses import dataclass, field

from app.utils.timephrases import token_spans

PLACEHOLDER_TITLE = "New Event"

ACTION_VERB_RE = re.compile(r"^\s*(?:please\s+)?(?:add|create|schedule|set\s+up|book|make)\b\s*", re.IGNORECASE)
ARTICLE_RE = re.compile(r"^(?:a|an)\s+", re.IGNORECASE)

EVENT_KEYWORD_RE = re.compile(
    r"\b(?:coffee|lunch|drinks|breakfast|brunch|meeting|sync|standup|1:1|one-on-one|dinner|movie|"
    r"workout|gym|run|dentist|doctor|appointment|quick\s+(?:chat|call)|workshop|training|"
    r"preschool|school|daycare|camp|event|reminder|party|practice|class|lesson|game|recital)\b",
    re.IGNORECASE,
)

# Location: "at <place>" first, then the phrase trailing the last event keyword.
AT_LOCATION_RE = re.compile(
    r"(?:\bat\s+|@\s*)(?P<place>[^\d\s,;][^,;]*?)(?=\s+(?:with\b|w/)|\s*[,;]|\s*$)", re.IGNORECASE
)
WITH_RE = re.compile(
    r"(?:\bwith\s+|\bw/\s*)(?P<names>.+?)(?=\s+(?:at|on|in|for|about|to|re)\b|\s*[.;!?]|$)", re.IGNORECASE
)
# "w/" is shorthand for "with".
WITH_SHORTHAND_RE = re.compile(r"\bw/\s*", re.IGNORECASE)
WITH_CLAUSE_RE = re.compile(r"\b(?:with\b|w/)", re.IGNORECASE)
NAME_SPLIT_RE = re.compile(r"\s*(?:,|&|\band\b)\s*", re.IGNORECASE)
NAME_PREFIX_RE = re.compile(r"^(?:my|the|our)\s+", re.IGNORECASE)

# Words that describe the event itself rather than where it happens.
NON_LOCATION_WORDS = frozenset({
    "with", "for", "and", "about", "to", "on", "in", "re", "session", "class", "appointment",
    "meeting", "call", "chat", "date", "night", "time", "break", "prep", "pickup", "pick",
    "drop", "dropoff", "errands", "party", "practice", "lesson", "checkup", "cleaning",
    "reminder", "plans", "together",
})

_EDGE_CONNECTOR_RE = re.compile(
    r"^(?:[\s,;:\-–]|(?:at|on|for|from|with|and|to|in|by)\b)+|(?:[\s,;:\-–]|\b(?:at|on|for|from|with|and|to|in|by))+$",
    re.IGNORECASE,
)


@dataclass
class ExtractedAttributes:
    title: str
    location: str | None = None
    attendees: list[str] = field(default_factory=list)


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split())


def strip_action_verb(text: str) -> str:
    text = ACTION_VERB_RE.sub("", text, count=1)
    return ARTICLE_RE.sub("", text, count=1)


def strip_time_tokens(text: str) -> str:
    pieces, cursor = [], 0
    for start, end in token_spans(text):
        pieces.append(text[cursor:start])
        cursor = end
    pieces.append(text[cursor:])
    return " ".join("".join(pieces).split())


def _tidy(text: str) -> str:
    text = " ".join(text.split())
    return _EDGE_CONNECTOR_RE.sub("", text).strip()


def extract_location(text: str) -> tuple[str | None, str]:
    """Return (location, text with the location removed)."""
    match = AT_LOCATION_RE.search(text)
    if match:
        place = _tidy(match.group("place"))
        if place:
            return capitalize_words(place), text[:match.start()] + " " + text[match.end():]

    keywords = list(EVENT_KEYWORD_RE.finditer(text))
    if not keywords:
        return None, text
    tail_start = keywords[-1].end()
    tail = text[tail_start:]
    with_clause = WITH_CLAUSE_RE.search(tail)
    place_text = tail[:with_clause.start()] if with_clause else tail
    place = _tidy(place_text)
    if not place or place.split()[0].lower() in NON_LOCATION_WORDS or place[0].isdigit():
        return None, text
    rest = tail[with_clause.start():] if with_clause else ""
    return capitalize_words(place), text[:tail_start] + " " + rest


def extract_attendees(text: str) -> list[str]:
    match = WITH_RE.search(text)
    if not match:
        return []
    names = []
    for raw in NAME_SPLIT_RE.split(match.group("names")):
        name = _tidy(NAME_PREFIX_RE.sub("", raw.strip()))
        if name and name.lower() not in ("me", "us", "you"):
            names.append(capitalize_words(name))
    return names


def extract_attributes(message: str) -> ExtractedAttributes:
    """
    Split an utterance into title, location and attendee mentions.

    Date, time and recurrence tokens are removed first so they can never leak
    into the title or be mistaken for a place. Attendee mentions stay in the
    title ("Coffee With George"); the location is cut out of it.
    """
    text = strip_time_tokens(strip_action_verb(message))
    text = WITH_SHORTHAND_RE.sub("with ", text)
    location, text = extract_location(text)
    attendees = extract_attendees(text)

    title = _tidy(text)
    if len(title) < 3:
        title = PLACEHOLDER_TITLE
    return ExtractedAttributes(title=capitalize_words(title), location=location, attendees=attendees)
