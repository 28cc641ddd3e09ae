"""
Suggestion Bot - Reaction Reconciler
====================================

Turns a single raw reaction add/remove event into a tally update.

Tallies are never incremented or decremented. Every accepted event recounts
both vote reactions from the live message and stores that count, so a missed
or out-of-order event is corrected by the next one on the same suggestion.

Event flow:
    own reaction / non-vote emoji / unknown message -> IGNORED
    closed + add     -> remove that reaction            -> REJECTED
    closed + remove  -> nothing                         -> IGNORED
    open + add       -> remove the user's opposite vote, recount -> TALLIED
    open + remove    -> recount                         -> TALLIED
    lookup, recount, save or edit failed                -> FAILED

Nothing here raises: failures are logged and the event is dropped.
"""

import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

import discord

from src.core.emojis import VoteEmojiConfig
from src.core.logger import logger
from src.models import Suggestion, VoteKind, VoteTally
from src.services.suggestions.db.suggestions import CorruptRowError
from src.services.suggestions.errors import SuggestionError
from src.services.suggestions.render import render_suggestion

if TYPE_CHECKING:
    from src.services.suggestions.db import SuggestionsDatabase
    from src.services.suggestions.gateway import DiscordArtifactGateway, ReactionEmoji


# Failures scoped to one event; anything else is a bug and propagates
RECONCILE_ERRORS = (discord.HTTPException, sqlite3.Error, SuggestionError)


# =============================================================================
# Event & Outcome
# =============================================================================

class ReactionAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class ReconcileOutcome(str, Enum):
    """Which branch handled an event."""
    IGNORED = "ignored"
    REJECTED = "rejected"
    TALLIED = "tallied"
    FAILED = "failed"


@dataclass(frozen=True)
class ReactionEvent:
    """A raw reaction add/remove on some message."""
    message_id: int
    user_id: int
    emoji: "ReactionEmoji"
    action: ReactionAction

    @classmethod
    def from_payload(cls, payload: discord.RawReactionActionEvent) -> "ReactionEvent":
        action = ReactionAction.ADD if payload.event_type == "REACTION_ADD" else ReactionAction.REMOVE
        return cls(
            message_id=payload.message_id,
            user_id=payload.user_id,
            emoji=payload.emoji,
            action=action,
        )


# =============================================================================
# Reconciler
# =============================================================================

class ReactionReconciler:
    """Keeps stored vote tallies consistent with live reactions."""

    def __init__(
        self,
        db: "SuggestionsDatabase",
        gateway: "DiscordArtifactGateway",
        emojis: VoteEmojiConfig,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.emojis = emojis

    async def handle(self, event: ReactionEvent) -> ReconcileOutcome:
        """Process one reaction event."""
        if event.user_id == self.gateway.self_user_id:
            return ReconcileOutcome.IGNORED

        kind = self.emojis.kind_of(event.emoji)
        if kind is None:
            return ReconcileOutcome.IGNORED

        try:
            record = await self.db.get_suggestion_by_message_async(event.message_id)
        except (sqlite3.Error, CorruptRowError) as e:
            logger.error("Vote Lookup Failed", [
                ("Message ID", str(event.message_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)),
            ])
            return ReconcileOutcome.FAILED

        if record is None:
            return ReconcileOutcome.IGNORED

        if record.is_closed:
            if event.action is ReactionAction.ADD:
                await self._reject(record, event.user_id, kind)
                return ReconcileOutcome.REJECTED
            return ReconcileOutcome.IGNORED

        removed_opposite = False
        if event.action is ReactionAction.ADD:
            removed_opposite = await self._remove_opposite_vote(record, event.user_id, kind)

        try:
            tally = await self.recount(
                record.message_id,
                discard=(kind.opposite, event.user_id) if removed_opposite else None,
            )
            await self.db.update_tally_async(record.id, tally)
            updated = record.with_tally(tally)
            embed = await render_suggestion(self.gateway, updated)
            await self.gateway.edit(record.message_id, embed)
        except RECONCILE_ERRORS as e:
            logger.error("Vote Reconciliation Failed", [
                ("Suggestion ID", str(record.id)),
                ("Message ID", str(record.message_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            return ReconcileOutcome.FAILED

        logger.info("🗳️ Vote Tallied", [
            ("Suggestion ID", str(record.id)),
            ("User ID", str(event.user_id)),
            ("Vote", f"{event.action.value} {kind.value}"),
            ("Tally", f"+{tally.up} / -{tally.down}"),
        ])
        return ReconcileOutcome.TALLIED

    async def recount(
        self,
        message_id: int,
        discard: Optional[tuple[VoteKind, int]] = None,
    ) -> VoteTally:
        """
        Count both vote reactions from the live message.

        Args:
            message_id: The suggestion message
            discard: (kind, user) whose reaction was just removed; dropped from
                the count in case Discord still reports it

        Returns:
            VoteTally excluding the bot's own seed reactions
        """
        holders = {
            kind: await self.gateway.reaction_snapshot(message_id, self.emojis.for_kind(kind))
            for kind in (VoteKind.UP, VoteKind.DOWN)
        }
        if discard is not None:
            discard_kind, discard_user = discard
            holders[discard_kind].discard(discard_user)
        return VoteTally.from_snapshot(
            holders[VoteKind.UP],
            holders[VoteKind.DOWN],
            exclude=self.gateway.self_user_id,
        )

    async def _reject(self, record: Suggestion, user_id: int, kind: VoteKind) -> None:
        """Undo a vote added to a closed suggestion."""
        try:
            await self.gateway.remove_reaction(record.message_id, self.emojis.for_kind(kind), user_id)
            logger.info("🔒 Vote On Closed Suggestion Removed", [
                ("Suggestion ID", str(record.id)),
                ("User ID", str(user_id)),
                ("Status", record.decision.label),
            ])
        except RECONCILE_ERRORS as e:
            logger.warning("Failed To Remove Vote On Closed Suggestion", [
                ("Suggestion ID", str(record.id)),
                ("User ID", str(user_id)),
                ("Error", str(e)[:100]),
            ])

    async def _remove_opposite_vote(self, record: Suggestion, user_id: int, kind: VoteKind) -> bool:
        """
        Remove the user's vote of the other kind, if they hold one.

        Best effort: on failure the recount still runs and a later event
        corrects the tally.

        Returns:
            True if a reaction was removed
        """
        opposite = self.emojis.for_kind(kind.opposite)
        try:
            holders = await self.gateway.reaction_snapshot(record.message_id, opposite)
            if user_id not in holders:
                return False
            await self.gateway.remove_reaction(record.message_id, opposite, user_id)
        except RECONCILE_ERRORS as e:
            logger.warning("Failed To Remove Opposite Vote", [
                ("Suggestion ID", str(record.id)),
                ("User ID", str(user_id)),
                ("Error", str(e)[:100]),
            ])
            return False

        logger.debug("Opposite Vote Removed", [
            ("Suggestion ID", str(record.id)),
            ("User ID", str(user_id)),
            ("Removed", kind.opposite.value),
        ])
        return True


__all__ = [
    "ReactionAction",
    "ReactionEvent",
    "ReactionReconciler",
    "ReconcileOutcome",
]
