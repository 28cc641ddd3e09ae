"""Tests for suggestion models: status variant, transitions and tallies."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.models import (
    Clear,
    ClosedStatus,
    Decide,
    Decision,
    OPEN,
    Suggestion,
    SuggestionKind,
    VoteKind,
    VoteTally,
    next_status,
    parse_status_command,
    status_from_row,
    status_to_row,
)


BRISBANE = ZoneInfo("Australia/Brisbane")
NOTE_FORMAT = "%a, %d %b %Y, %I:%M:%S %p %Z"
AT = datetime(2026, 10, 19, 4, 5, 9, tzinfo=timezone.utc)


def _next(current, command, actor="bob"):
    return next_status(current, command, actor_name=actor, at=AT, tz=BRISBANE, date_format=NOTE_FORMAT)


class TestStatusRows:
    """Mapping between the status variant and the nullable columns."""

    def test_null_status_is_open(self):
        assert status_from_row(None, None) is OPEN

    def test_enum_value_is_closed(self):
        status = status_from_row("implemented", "note")
        assert status == ClosedStatus(Decision.IMPLEMENTED, "note")

    def test_legacy_free_text_value(self):
        status = status_from_row("Under Consideration", None)
        assert status.decision is Decision.UNDER_CONSIDERATION
        assert status.notes is None

    def test_unknown_value_reads_as_open(self):
        assert status_from_row("maybe later", "x") is OPEN

    def test_open_flattens_to_nulls(self):
        assert status_to_row(OPEN) == (None, None)

    def test_closed_flattens_to_value_and_notes(self):
        assert status_to_row(ClosedStatus(Decision.NOT_HAPPENING, "no")) == ("not_happening", "no")


class TestParseStatusCommand:

    def test_clear(self):
        assert parse_status_command("clear") == Clear()

    def test_clear_ignores_note(self):
        assert parse_status_command("Clear", "ignored") == Clear()

    def test_decision_with_note(self):
        assert parse_status_command("implemented", "Done") == Decide(Decision.IMPLEMENTED, "Done")

    def test_decision_label_form(self):
        assert parse_status_command("Not Happening").decision is Decision.NOT_HAPPENING

    def test_missing_note_is_empty(self):
        assert parse_status_command("implemented").note == ""

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            parse_status_command("approved")


class TestNextStatus:
    """Every (state, command) pair is defined."""

    def test_decide_from_open(self):
        status = _next(OPEN, Decide(Decision.IMPLEMENTED, "Shipped"))

        assert status.is_closed
        assert status.decision is Decision.IMPLEMENTED
        assert status.notes == "Mon, 19 Oct 2026, 02:05:09 PM AEST\nbob response:\nShipped"

    def test_decide_from_closed_overwrites_notes(self):
        previous = ClosedStatus(Decision.UNDER_CONSIDERATION, "old note")

        status = _next(previous, Decide(Decision.NOT_HAPPENING, "Nope"), actor="carol")

        assert status.decision is Decision.NOT_HAPPENING
        assert "old note" not in status.notes
        assert status.notes.endswith("carol response:\nNope")

    def test_note_kept_verbatim(self):
        note = "line one\n  **bold** <@123>"
        status = _next(OPEN, Decide(Decision.IMPLEMENTED, note))
        assert status.notes.endswith(note)

    def test_clear_from_closed(self):
        assert _next(ClosedStatus(Decision.IMPLEMENTED, "x"), Clear()) is OPEN

    def test_clear_from_open(self):
        assert _next(OPEN, Clear()) is OPEN

    def test_unknown_command_raises(self):
        with pytest.raises(TypeError):
            _next(OPEN, "implemented")


class TestVoteTally:

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            VoteTally(up=-1)

    def test_percentages(self):
        tally = VoteTally(up=2, down=1)
        assert tally.percentage(VoteKind.UP) == pytest.approx(66.666, rel=1e-3)
        assert tally.percentage(VoteKind.DOWN) == pytest.approx(33.333, rel=1e-3)

    def test_percentage_with_no_votes(self):
        assert VoteTally().percentage(VoteKind.UP) == 0.0

    def test_opinion(self):
        assert VoteTally(up=1, down=3).opinion == -2

    def test_from_snapshot_excludes_bot(self):
        tally = VoteTally.from_snapshot({1, 10, 11}, {1, 12}, exclude=1)
        assert tally == VoteTally(up=2, down=1)

    def test_from_snapshot_without_bot(self):
        assert VoteTally.from_snapshot({10}, set()) == VoteTally(up=1, down=0)

    def test_opposite(self):
        assert VoteKind.UP.opposite is VoteKind.DOWN
        assert VoteKind.DOWN.opposite is VoteKind.UP


class TestSuggestionNew:

    def test_game_suggestion(self, game_fields):
        record = Suggestion.new(SuggestionKind.GAME, 42, game_fields)

        assert record.id is None
        assert record.game_name == "Rust"
        assert record.title is None
        assert record.status is OPEN
        assert record.tally == VoteTally()
        assert record.message_id is None

    def test_community_suggestion(self, community_fields):
        record = Suggestion.new(SuggestionKind.COMMUNITY, 42, community_fields)

        assert record.title == "Movie night"
        assert record.game_name is None
        assert record.submitted_at.tzinfo is not None

    def test_cross_kind_fields_rejected(self):
        with pytest.raises(ValueError, match="game_name"):
            Suggestion.new(SuggestionKind.COMMUNITY, 42, {"title": "t", "game_name": "Rust"})

    def test_cross_kind_none_tolerated(self):
        record = Suggestion.new(SuggestionKind.COMMUNITY, 42, {"title": "t", "game_name": None})
        assert record.game_name is None

    def test_decision_and_notes_accessors(self, community_fields):
        record = Suggestion.new(SuggestionKind.COMMUNITY, 42, community_fields)
        closed = record.with_status(ClosedStatus(Decision.IMPLEMENTED, "n"))

        assert record.decision is None and record.notes is None
        assert closed.is_closed
        assert closed.decision is Decision.IMPLEMENTED
        assert closed.notes == "n"

    def test_labels(self):
        assert Decision.UNDER_CONSIDERATION.label == "Under Consideration"
        assert SuggestionKind.GAME.label == "Game"
