"""
Suggestion Bot - Status Transition Manager
==========================================

Applies administrator decisions to a suggestion and brings its message in
line with the new status.

    OPEN      --Decide-->  CLOSED(decision)   reactions cleared
    CLOSED    --Decide-->  CLOSED(decision)   notes overwritten
    CLOSED    --Clear--->  OPEN               vote reactions restored
    OPEN      --Clear--->  OPEN               record unchanged

The status is saved before the message is touched. Message steps (reactions,
re-render) each run even if an earlier one failed; the saved status is kept
either way.
"""

import sqlite3
from datetime import datetime, timezone
from typing import Callable, Optional, TYPE_CHECKING
from zoneinfo import ZoneInfo

import discord

from src.core.config import BOT_TZ, NOTE_DATE_FORMAT
from src.core.emojis import VoteEmojiConfig
from src.core.logger import logger
from src.models import StatusCommand, Suggestion, next_status
from src.services.suggestions.db.suggestions import CorruptRowError
from src.services.suggestions.errors import (
    ArtifactSyncError,
    StorageError,
    SuggestionError,
    SuggestionNotFound,
)
from src.services.suggestions.render import render_suggestion

if TYPE_CHECKING:
    from src.services.suggestions.db import SuggestionsDatabase
    from src.services.suggestions.gateway import DiscordArtifactGateway


ARTIFACT_ERRORS = (discord.HTTPException, SuggestionError)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusTransitionManager:
    """Closes, re-closes and re-opens suggestions."""

    def __init__(
        self,
        db: "SuggestionsDatabase",
        gateway: "DiscordArtifactGateway",
        emojis: VoteEmojiConfig,
        tz: ZoneInfo = BOT_TZ,
        note_date_format: str = NOTE_DATE_FORMAT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.emojis = emojis
        self.tz = tz
        self.note_date_format = note_date_format
        self.clock = clock

    async def apply(self, suggestion_id: int, command: StatusCommand, actor_name: str) -> Suggestion:
        """
        Apply a status command to a suggestion.

        Args:
            suggestion_id: Target suggestion
            command: Decide(decision, note) or Clear()
            actor_name: Administrator name attributed in the note

        Returns:
            The updated suggestion

        Raises:
            StorageError: Lookup or save failed (nothing changed)
            SuggestionNotFound: No suggestion with that ID
            ArtifactSyncError: Status saved but the message could not be
                fully updated; carries the saved record
        """
        try:
            record = await self.db.get_suggestion_async(suggestion_id)
        except (sqlite3.Error, CorruptRowError) as e:
            raise StorageError(f"Lookup of suggestion {suggestion_id} failed: {e}",
                               user_message="Error fetching suggestion.") from e

        if record is None:
            raise SuggestionNotFound(f"Suggestion {suggestion_id} not found")

        new_status = next_status(
            record.status,
            command,
            actor_name=actor_name,
            at=self.clock(),
            tz=self.tz,
            date_format=self.note_date_format,
        )
        updated = record.with_status(new_status)

        if new_status != record.status:
            try:
                await self.db.update_status_async(record.id, new_status)
            except sqlite3.Error as e:
                raise StorageError(f"Saving status of suggestion {record.id} failed: {e}",
                                   user_message="Error updating suggestion.") from e

        logger.info("📋 Suggestion Status Changed", [
            ("Suggestion ID", str(record.id)),
            ("From", record.decision.label if record.decision else "Open"),
            ("To", updated.decision.label if updated.decision else "Open"),
            ("By", actor_name),
        ])

        failed_steps = await self._sync_message(updated)
        if failed_steps:
            raise ArtifactSyncError(
                f"Suggestion {record.id} saved but message sync failed: {', '.join(failed_steps)}",
                record=updated,
                failed_steps=failed_steps,
            )

        return updated

    async def ensure_vote_reactions(self, message_id: int) -> int:
        """
        Add whichever vote emoji is missing from a message.

        Returns:
            Number of reactions added
        """
        present = await self.gateway.present_reactions(message_id)
        added = 0
        for emoji in self.emojis.all():
            if any(emoji.matches(existing) for existing in present):
                continue
            await self.gateway.add_reaction(message_id, emoji)
            added += 1
        return added

    async def _sync_message(self, record: Suggestion) -> list[str]:
        """Run every message step; return the names of those that failed."""
        if record.message_id is None:
            logger.warning("Suggestion Has No Message", [
                ("Suggestion ID", str(record.id)),
            ])
            return ["no message"]

        failed: list[str] = []

        if record.is_closed:
            await self._step("clear reactions", record, failed,
                             self.gateway.clear_reactions(record.message_id))
        else:
            await self._step("restore reactions", record, failed,
                             self.ensure_vote_reactions(record.message_id))

        await self._step("edit message", record, failed, self._rerender(record))
        return failed

    async def _rerender(self, record: Suggestion) -> None:
        embed = await render_suggestion(self.gateway, record)
        await self.gateway.edit(record.message_id, embed)

    async def _step(self, name: str, record: Suggestion, failed: list[str], coro) -> None:
        try:
            await coro
        except ARTIFACT_ERRORS as e:
            logger.error("Suggestion Message Sync Failed", [
                ("Suggestion ID", str(record.id)),
                ("Step", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            failed.append(name)


__all__ = ["StatusTransitionManager"]
