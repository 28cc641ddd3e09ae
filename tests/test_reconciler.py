"""Tests for reaction reconciliation: tallies, one vote per user, frozen decisions."""

import sqlite3
from unittest.mock import AsyncMock, MagicMock

import discord

from src.models import ClosedStatus, Decision, VoteTally
from src.services.suggestions.reconciler import (
    ReactionAction,
    ReactionEvent,
    ReactionReconciler,
    ReconcileOutcome,
)

from tests.conftest import BOT_ID, damage_row, http_error


USER_A = 10
USER_B = 11
USER_C = 12
USER_D = 13


def add(message_id, user_id, emoji):
    return ReactionEvent(message_id, user_id, emoji, ReactionAction.ADD)


def remove(message_id, user_id, emoji):
    return ReactionEvent(message_id, user_id, emoji, ReactionAction.REMOVE)


class TestReactionEvent:

    def test_from_add_payload(self):
        payload = MagicMock(event_type="REACTION_ADD", message_id=1, user_id=2, emoji="👍")

        event = ReactionEvent.from_payload(payload)

        assert event == ReactionEvent(1, 2, "👍", ReactionAction.ADD)

    def test_from_remove_payload(self):
        payload = MagicMock(event_type="REACTION_REMOVE", message_id=1, user_id=2, emoji="👍")
        assert ReactionEvent.from_payload(payload).action is ReactionAction.REMOVE


class TestOpenSuggestion:
    """Votes on an open suggestion recount both reactions."""

    async def test_switching_vote_moves_user(self, reconciler, gateway, db, make_suggestion, up, down):
        """A and B upvoted, C downvoted; A switching to down leaves (1, 2)."""
        record = make_suggestion(tally=VoteTally(up=2, down=1))
        gateway.react(record.message_id, up, USER_A, USER_B)
        gateway.react(record.message_id, down, USER_C)
        gateway.react(record.message_id, down, USER_A)

        outcome = await reconciler.handle(add(record.message_id, USER_A, down))

        assert outcome is ReconcileOutcome.TALLIED
        assert USER_A not in gateway.holders(record.message_id, up)
        assert db.get_suggestion(record.id).tally == VoteTally(up=1, down=2)
        assert "Upvotes: 1" in gateway.embeds[record.message_id].fields[-1].value

    async def test_first_vote(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)

        await reconciler.handle(add(record.message_id, USER_A, up))

        assert db.get_suggestion(record.id).tally == VoteTally(up=1, down=0)
        assert gateway.count_calls("remove_reaction") == 0

    async def test_removal_recounts(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion(tally=VoteTally(up=1))
        # Reaction already gone by the time the event arrives

        outcome = await reconciler.handle(remove(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.TALLIED
        assert db.get_suggestion(record.id).tally == VoteTally()

    async def test_recount_corrects_stale_tally(self, reconciler, gateway, db, make_suggestion, up, down):
        record = make_suggestion(tally=VoteTally(up=9, down=9))
        gateway.react(record.message_id, up, USER_A, USER_B)
        gateway.react(record.message_id, down, USER_C)

        await reconciler.handle(add(record.message_id, USER_B, up))

        assert db.get_suggestion(record.id).tally == VoteTally(up=2, down=1)

    async def test_repeated_event_is_idempotent(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)
        event = add(record.message_id, USER_A, up)

        await reconciler.handle(event)
        await reconciler.handle(event)

        assert db.get_suggestion(record.id).tally == VoteTally(up=1, down=0)

    async def test_user_never_counted_twice(self, reconciler, gateway, db, make_suggestion, up, down):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)
        await reconciler.handle(add(record.message_id, USER_A, up))
        gateway.react(record.message_id, down, USER_A)
        await reconciler.handle(add(record.message_id, USER_A, down))
        gateway.react(record.message_id, up, USER_A)
        await reconciler.handle(add(record.message_id, USER_A, up))

        assert db.get_suggestion(record.id).tally == VoteTally(up=1, down=0)
        assert USER_A not in gateway.holders(record.message_id, down)

    async def test_bot_seed_reactions_not_counted(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        assert BOT_ID in gateway.holders(record.message_id, up)
        gateway.react(record.message_id, up, USER_A)

        await reconciler.handle(add(record.message_id, USER_A, up))

        assert db.get_suggestion(record.id).tally.up == 1

    async def test_removed_opposite_discarded_if_still_reported(
        self, reconciler, gateway, db, make_suggestion, up, down, monkeypatch
    ):
        """Discord may still list the removed reaction in the recount."""
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)
        gateway.react(record.message_id, down, USER_A)
        monkeypatch.setattr(gateway, "remove_reaction", AsyncMock())

        await reconciler.handle(add(record.message_id, USER_A, down))

        gateway.remove_reaction.assert_awaited_once_with(record.message_id, up, USER_A)
        assert db.get_suggestion(record.id).tally == VoteTally(up=0, down=1)


class TestClosedSuggestion:
    """Decided suggestions are frozen."""

    async def test_stray_vote_removed(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion(
            status=ClosedStatus(Decision.IMPLEMENTED, "done"),
            tally=VoteTally(up=4, down=1),
            seed=False,
        )
        gateway.react(record.message_id, up, USER_D)

        outcome = await reconciler.handle(add(record.message_id, USER_D, up))

        assert outcome is ReconcileOutcome.REJECTED
        assert gateway.holders(record.message_id, up) == set()
        assert db.get_suggestion(record.id).tally == VoteTally(up=4, down=1)
        assert gateway.count_calls("edit") == 0

    async def test_removal_ignored(self, reconciler, gateway, db, make_suggestion, down):
        record = make_suggestion(status=ClosedStatus(Decision.NOT_HAPPENING), tally=VoteTally(down=3))

        outcome = await reconciler.handle(remove(record.message_id, USER_A, down))

        assert outcome is ReconcileOutcome.IGNORED
        assert db.get_suggestion(record.id).tally == VoteTally(down=3)
        assert gateway.calls == []

    async def test_failed_removal_still_rejected(self, reconciler, gateway, make_suggestion, up):
        record = make_suggestion(status=ClosedStatus(Decision.IMPLEMENTED), seed=False)
        gateway.react(record.message_id, up, USER_D)
        gateway.fail["remove_reaction"] = http_error(status=403, text="Missing Permissions")

        outcome = await reconciler.handle(add(record.message_id, USER_D, up))

        assert outcome is ReconcileOutcome.REJECTED


class TestIgnoredEvents:

    async def test_own_reaction(self, reconciler, gateway, make_suggestion, up):
        record = make_suggestion()

        outcome = await reconciler.handle(add(record.message_id, BOT_ID, up))

        assert outcome is ReconcileOutcome.IGNORED
        assert gateway.calls == []

    async def test_non_vote_emoji(self, reconciler, gateway, db, make_suggestion):
        record = make_suggestion(tally=VoteTally(up=1))

        outcome = await reconciler.handle(add(record.message_id, USER_A, "🎉"))

        assert outcome is ReconcileOutcome.IGNORED
        assert db.get_suggestion(record.id).tally == VoteTally(up=1)

    async def test_unknown_message(self, reconciler, gateway, up):
        outcome = await reconciler.handle(add(123456, USER_A, up))
        assert outcome is ReconcileOutcome.IGNORED

    async def test_partial_emoji_matches(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)

        outcome = await reconciler.handle(add(record.message_id, USER_A, discord.PartialEmoji(name="👍")))

        assert outcome is ReconcileOutcome.TALLIED
        assert db.get_suggestion(record.id).tally.up == 1


class TestFailures:
    """Failures are logged and the event dropped; nothing raises."""

    async def test_lookup_failure(self, reconciler, db, up, monkeypatch):
        monkeypatch.setattr(db, "get_suggestion_by_message_async",
                            AsyncMock(side_effect=sqlite3.OperationalError("locked")))

        outcome = await reconciler.handle(add(1, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED

    async def test_unreadable_submission_date(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        damage_row(db, record.id, "submitted_at", "19/10/2026, 14:05")
        gateway.react(record.message_id, up, USER_A)

        outcome = await reconciler.handle(add(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED
        assert gateway.count_calls("edit") == 0

    async def test_unknown_kind(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        damage_row(db, record.id, "type", "poll")

        outcome = await reconciler.handle(add(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED

    async def test_snapshot_failure_keeps_tally(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion(tally=VoteTally(up=2))
        gateway.fail["reaction_snapshot"] = http_error(status=500)

        outcome = await reconciler.handle(remove(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED
        assert db.get_suggestion(record.id).tally == VoteTally(up=2)

    async def test_deleted_message(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion(tally=VoteTally(up=2))
        del gateway.reactions[record.message_id]

        outcome = await reconciler.handle(remove(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED

    async def test_edit_failure_after_save(self, reconciler, gateway, db, make_suggestion, up):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)
        gateway.fail["edit"] = http_error(status=429, text="rate limited")

        outcome = await reconciler.handle(add(record.message_id, USER_A, up))

        assert outcome is ReconcileOutcome.FAILED
        assert db.get_suggestion(record.id).tally == VoteTally(up=1)

    async def test_opposite_removal_failure_still_recounts(
        self, reconciler, gateway, db, make_suggestion, up, down
    ):
        record = make_suggestion()
        gateway.react(record.message_id, up, USER_A)
        gateway.react(record.message_id, down, USER_A)
        gateway.fail["remove_reaction"] = http_error(status=403)

        outcome = await reconciler.handle(add(record.message_id, USER_A, down))

        assert outcome is ReconcileOutcome.TALLIED
        assert db.get_suggestion(record.id).tally == VoteTally(up=1, down=1)


async def test_recount_without_known_bot_user(db, emojis, make_suggestion, gateway):
    """Before login the bot ID is unknown and nothing is excluded."""
    record = make_suggestion()
    gateway.self_user_id = None

    tally = await ReactionReconciler(db, gateway, emojis).recount(record.message_id)

    assert tally == VoteTally(up=1, down=1)
