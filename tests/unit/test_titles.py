"""Unit tests for title, location and attendee extraction."""

import time

from app.utils.titles import (
    PLACEHOLDER_TITLE,
    capitalize_words,
    extract_attendees,
    extract_attributes,
    extract_location,
    strip_action_verb,
    strip_time_tokens,
)


class TestCleanup:
    """Removing verbs and date/time tokens."""

    def test_strip_action_verb_and_article(self) -> None:
        assert strip_action_verb("schedule a dentist appointment") == "dentist appointment"
        assert strip_action_verb("please add soccer practice") == "soccer practice"
        assert strip_action_verb("address book review") == "address book review"

    def test_strip_time_tokens_takes_prepositions(self) -> None:
        assert strip_time_tokens("dentist on friday at 2pm") == "dentist"
        assert strip_time_tokens("swim m-f 9am-4pm for 8 weeks") == "swim"

    def test_capitalize_words(self) -> None:
        assert capitalize_words("team  sync") == "Team Sync"
        assert capitalize_words("coffee with George") == "Coffee With George"


class TestLocation:
    """'at <place>' and trailing-phrase locations."""

    def test_at_place_before_with(self) -> None:
        location, rest = extract_location("coffee at blue bottle with sam")

        assert location == "Blue Bottle"
        assert "blue bottle" not in rest
        assert "with sam" in rest

    def test_phrase_after_keyword(self) -> None:
        location, rest = extract_location("ellie preschool laurel hill")

        assert location == "Laurel Hill"
        assert rest.split() == ["ellie", "preschool"]

    def test_event_words_are_not_places(self) -> None:
        assert extract_location("dentist appointment")[0] is None
        assert extract_location("soccer practice")[0] is None

    def test_no_keyword_no_location(self) -> None:
        assert extract_location("pick up groceries") == (None, "pick up groceries")


class TestAttendees:
    """'with <names>' mentions."""

    def test_single_name(self) -> None:
        assert extract_attendees("coffee with george") == ["George"]

    def test_name_list(self) -> None:
        assert extract_attendees("lunch with mom and dad") == ["Mom", "Dad"]
        assert extract_attendees("dinner with Ana, Ben & Cy") == ["Ana", "Ben", "Cy"]

    def test_pronouns_are_skipped(self) -> None:
        assert extract_attendees("walk with me") == []

    def test_no_with_clause(self) -> None:
        assert extract_attendees("dentist") == []

    def test_with_shorthand(self) -> None:
        assert extract_attendees("lunch w/ mom & dad") == ["Mom", "Dad"]
        assert extract_location("lunch w/ sam")[0] is None


class TestExtractAttributes:
    """Whole-utterance attribute extraction."""

    def test_coffee_with_george(self) -> None:
        attributes = extract_attributes("coffee with george tomorrow 3")

        assert attributes.title == "Coffee With George"
        assert attributes.location is None
        assert attributes.attendees == ["George"]

    def test_preschool_series(self) -> None:
        attributes = extract_attributes("ellie preschool laurel hill m-f 9am-4pm for 8 weeks")

        assert attributes.title == "Ellie Preschool"
        assert attributes.location == "Laurel Hill"
        assert attributes.attendees == []

    def test_verb_location_and_attendee(self) -> None:
        attributes = extract_attributes("add coffee at blue bottle with sam tomorrow at 3pm")

        assert attributes.title == "Coffee With Sam"
        assert attributes.location == "Blue Bottle"
        assert attributes.attendees == ["Sam"]

    def test_no_time_words_in_title(self) -> None:
        attributes = extract_attributes("schedule a dentist appointment on friday at 2pm")

        assert attributes.title == "Dentist Appointment"
        assert attributes.location is None

    def test_placeholder_for_short_titles(self) -> None:
        assert extract_attributes("hi").title == PLACEHOLDER_TITLE
        assert extract_attributes("add tomorrow at 3").title == PLACEHOLDER_TITLE

    def test_weekly_bare_range_is_not_left_in_title(self) -> None:
        attributes = extract_attributes("ellie daycare m-f 9-4")

        assert attributes.title == "Ellie Daycare"
        assert attributes.location is None

    def test_with_shorthand(self) -> None:
        attributes = extract_attributes("lunch w/ sam tomorrow")

        assert attributes.title == "Lunch With Sam"
        assert attributes.location is None
        assert attributes.attendees == ["Sam"]

    def test_with_shorthand_after_place(self) -> None:
        attributes = extract_attributes("coffee at blue bottle w/sam friday 9am")

        assert attributes.location == "Blue Bottle"
        assert attributes.attendees == ["Sam"]


class TestLongInput:
    """Token stripping stays linear in the message length."""

    def test_many_time_tokens(self) -> None:
        text = "coffee" + " at 3" * 4000

        started = time.perf_counter()
        stripped = strip_time_tokens(text)

        assert stripped == "coffee"
        assert time.perf_counter() - started < 2.0

    def test_preposition_lookup_does_not_split_words(self) -> None:
        assert strip_time_tokens("quick chat" + " " * 14 + "3pm") == "quick chat"
