"""Unit tests for the rule-based event extractor."""

from datetime import date, datetime, time

import pytest

from app.utils.nlp import looks_like_event_request, parse_event_draft


class TestLooksLikeEventRequest:
    """Classifying utterances."""

    @pytest.mark.parametrize(
        "text",
        [
            "add yoga",
            "Please schedule a haircut",
            "coffee with george tomorrow 3",
            "pick up the kids friday at 3",
            "book flights",
        ],
    )
    def test_event_requests(self, text: str) -> None:
        assert looks_like_event_request(text)

    @pytest.mark.parametrize("text", ["hello there", "what's the weather like?", "friday", "thanks!"])
    def test_other_messages(self, text: str) -> None:
        assert not looks_like_event_request(text)


class TestParseEventDraft:
    """Drafts built from free text."""

    def test_single_event(self, reference_local: datetime) -> None:
        draft = parse_event_draft("coffee with george tomorrow 3", reference_local)

        assert draft.title == "Coffee With George"
        assert draft.day == date(2024, 1, 2)
        assert draft.start == time(15, 0)
        assert draft.duration_minutes == 30
        assert draft.attendees == ["George"]
        assert draft.weekdays == ()

    def test_series(self, reference_local: datetime) -> None:
        draft = parse_event_draft("ellie preschool laurel hill m-f 9am-4pm for 8 weeks", reference_local)

        assert draft.title == "Ellie Preschool"
        assert draft.location == "Laurel Hill"
        assert draft.start == time(9, 0)
        assert draft.duration_minutes == 420
        assert set(draft.weekdays) == {1, 2, 3, 4, 5}
        assert draft.week_count == 8

    def test_worst_case_is_still_an_event(self, reference_local: datetime) -> None:
        draft = parse_event_draft("add", reference_local)

        assert draft.title == "New Event"
        assert draft.day == reference_local.date()
        assert draft.start == time(12, 0)
        assert draft.duration_minutes == 60
