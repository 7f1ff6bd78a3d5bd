"""Unit tests for household member assignment."""

from app.schemas import HouseholdMemberRef
from app.utils.members import resolve_assignment


class TestResolveAssignment:
    """Mapping mentions to member ids and attendees."""

    def test_defaults_to_current_user(self, roster) -> None:
        assignment = resolve_assignment([], roster, "Jordan")

        assert assignment.member_ids == ["u1"]
        assert assignment.attendees == []

    def test_outsider_mention_stays_an_attendee(self, roster) -> None:
        assignment = resolve_assignment(["george"], roster, "Jordan")

        assert assignment.member_ids == ["u1"]
        assert assignment.attendees == ["George"]

    def test_member_mention_is_matched_case_insensitively(self, roster) -> None:
        assignment = resolve_assignment(["ELLIE"], roster, "Jordan")

        assert assignment.member_ids == ["u2"]
        assert assignment.attendees == []

    def test_ids_follow_roster_order(self, roster) -> None:
        assignment = resolve_assignment(["Ellie", "jordan"], roster, "Jordan")

        assert assignment.member_ids == ["u1", "u2"]

    def test_everyone_assigns_whole_roster(self, roster) -> None:
        assignment = resolve_assignment(["Sam"], roster, "Jordan", everyone=True)

        assert assignment.member_ids == ["u1", "u2"]
        assert assignment.attendees == ["Sam"]

    def test_current_user_missing_from_roster(self, roster) -> None:
        assert resolve_assignment([], roster, "Visitor").member_ids == ["u1"]
        assert resolve_assignment([], roster, None).member_ids == ["u1"]

    def test_no_roster(self) -> None:
        assignment = resolve_assignment(["george", "George"], None, "Jordan")

        assert assignment.member_ids is None
        assert assignment.attendees == ["George"]

    def test_assigned_names_from_model(self, roster) -> None:
        assert resolve_assignment([], roster, "Jordan", assigned=["ellie"]).member_ids == ["u2"]

    def test_unknown_assigned_names_are_dropped(self, roster) -> None:
        assignment = resolve_assignment([], roster, "Jordan", assigned=["Grandma"])

        assert assignment.member_ids == ["u1"]
        assert assignment.attendees == []

    def test_multi_word_names(self) -> None:
        roster = [HouseholdMemberRef(id="a", name="Mary  Jo"), HouseholdMemberRef(id="b", name="Pat")]

        assert resolve_assignment(["mary jo"], roster, "Pat").member_ids == ["a"]
