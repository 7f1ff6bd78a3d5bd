from __future__ import annotations

import re
from datetime import date, datetime, time

DEFAULT_DURATION_MINUTES = 60

# Keyword rules, first match wins in this order.
DURATION_RULES = (
    (re.compile(r"\b(?:coffee|lunch|drinks)\b", re.IGNORECASE), 30),
    (re.compile(r"\b(?:meeting|sync|standup|1:1|one-on-one)\b", re.IGNORECASE), 30),
    (re.compile(r"\b(?:dinner|movie)\b", re.IGNORECASE), 90),
    (re.compile(r"\b(?:workout|gym|run)\b", re.IGNORECASE), 60),
    (re.compile(r"\b(?:dentist|doctor|appointment)\b", re.IGNORECASE), 60),
    (re.compile(r"\bquick\s+(?:chat|call)\b", re.IGNORECASE), 15),
    (re.compile(r"\b(?:workshop|training)\b", re.IGNORECASE), 120),
    # School-day blocks are deliberately long compared to the other rules.
    (re.compile(r"\b(?:preschool|school|daycare|camp)\b", re.IGNORECASE), 420),
)


def keyword_duration(text: str) -> int:
    for pattern, minutes in DURATION_RULES:
        if pattern.search(text):
            return minutes
    return DEFAULT_DURATION_MINUTES


def infer_duration(text: str, start: time | None = None, end: time | None = None) -> int:
    """
    Duration in minutes for an utterance.

    An explicit time range wins outright; otherwise the first keyword rule
    that matches, else one hour.
    """
    if start is not None and end is not None:
        span = datetime.combine(date.min, end) - datetime.combine(date.min, start)
        minutes = int(span.total_seconds() // 60)
        if minutes > 0:
            return minutes
    return keyword_duration(text)


def format_duration(minutes: int) -> str:
    """'45 min' below an hour, '2hr' or '1.5hr' from an hour up."""
    if minutes < 60:
        return f"{minutes} min"
    hours = minutes / 60
    if hours == int(hours):
        return f"{int(hours)}hr"
    return f"{hours:.1f}hr"
