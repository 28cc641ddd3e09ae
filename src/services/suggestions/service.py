"""
Suggestion Bot - Suggestion Service
===================================

Intake (submit a suggestion, post it, seed the vote reactions) and the
per-channel intake panel.
"""

import sqlite3
from dataclasses import replace
from typing import Optional, TYPE_CHECKING

import discord

from src.core.emojis import VoteEmojiConfig
from src.core.logger import logger
from src.models import Suggestion, SuggestionKind
from src.services.suggestions.errors import (
    ArtifactSyncError,
    StorageError,
    SuggestionError,
)
from src.services.suggestions.render import build_panel_embed, render_suggestion
from src.utils.discord_rate_limit import call_with_retry, delete_message_safe

if TYPE_CHECKING:
    from src.services.suggestions.db import SuggestionsDatabase
    from src.services.suggestions.gateway import DiscordArtifactGateway


class SuggestionService:
    """Creates suggestions and maintains intake panels."""

    def __init__(
        self,
        db: "SuggestionsDatabase",
        gateway: "DiscordArtifactGateway",
        emojis: VoteEmojiConfig,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.emojis = emojis

    # -------------------------------------------------------------------------
    # Intake
    # -------------------------------------------------------------------------

    async def submit(
        self,
        kind: SuggestionKind,
        author_id: int,
        fields: dict[str, Optional[str]],
    ) -> Suggestion:
        """
        Store a new suggestion and post it to the suggestion channel.

        Returns:
            The stored suggestion with its message ID

        Raises:
            SuggestionError: Fields do not belong to the kind
            StorageError: Insert failed
            SuggestionNotFound: Suggestion channel missing
            ArtifactSyncError: Post or reaction seeding failed
        """
        try:
            draft = Suggestion.new(kind, author_id, fields)
        except ValueError as e:
            raise SuggestionError(str(e), user_message="Invalid suggestion form.") from e

        try:
            suggestion_id = await self.db.insert_suggestion_async(draft)
        except sqlite3.Error as e:
            raise StorageError(f"Insert failed: {e}",
                               user_message="Error submitting suggestion to database.") from e

        record = replace(draft, id=suggestion_id)
        embed = await render_suggestion(self.gateway, record)

        try:
            message_id = await self.gateway.post(embed)
        except discord.HTTPException as e:
            raise ArtifactSyncError(
                f"Posting suggestion {suggestion_id} failed: {e}",
                record=record,
                failed_steps=["post"],
                user_message="Error posting suggestion to channel. Check bot permissions and channel access.",
            ) from e

        record = replace(record, message_id=message_id)
        await self._save_message_id(record)

        try:
            for emoji in self.emojis.all():
                await self.gateway.add_reaction(message_id, emoji)
        except discord.HTTPException as e:
            raise ArtifactSyncError(
                f"Seeding reactions on suggestion {suggestion_id} failed: {e}",
                record=record,
                failed_steps=["add reactions"],
                user_message="Your suggestion was posted, but the vote reactions could not be added.",
            ) from e

        logger.success("💡 Suggestion Submitted", [
            ("Suggestion ID", str(suggestion_id)),
            ("Type", kind.label),
            ("Author ID", str(author_id)),
            ("Message ID", str(message_id)),
        ])
        return record

    async def _save_message_id(self, record: Suggestion) -> None:
        """Attach the posted message; a failure here is logged only."""
        try:
            saved = await self.db.set_message_id_async(record.id, record.message_id)
        except sqlite3.Error as e:
            logger.error("Failed To Save Suggestion Message ID", [
                ("Suggestion ID", str(record.id)),
                ("Message ID", str(record.message_id)),
                ("Error", str(e)),
            ])
            return
        if not saved:
            logger.warning("Suggestion Message ID Not Saved", [
                ("Suggestion ID", str(record.id)),
                ("Message ID", str(record.message_id)),
                ("Reason", "Row missing or already linked to another message"),
            ])

    # -------------------------------------------------------------------------
    # Panel
    # -------------------------------------------------------------------------

    async def refresh_panel(
        self,
        channel: discord.TextChannel,
        view: Optional[discord.ui.View] = None,
    ) -> discord.Message:
        """
        Post the intake panel in a channel, replacing the previous one.

        Returns:
            The new panel message

        Raises:
            StorageError: Panel row could not be read or written
            discord.HTTPException: The panel could not be sent
        """
        try:
            previous = await self.db.get_panel_async(channel.id)
        except sqlite3.Error as e:
            raise StorageError(f"Panel lookup failed: {e}") from e

        if previous is not None:
            await delete_message_safe(channel.get_partial_message(previous.message_id))

        kwargs = {"embed": build_panel_embed()}
        if view is not None:
            kwargs["view"] = view
        message = await call_with_retry("Send Panel", lambda: channel.send(**kwargs))

        try:
            await self.db.set_panel_async(channel.id, message.id)
        except sqlite3.Error as e:
            raise StorageError(f"Panel save failed: {e}") from e

        logger.success("📝 Suggestion Panel Posted", [
            ("Channel", f"#{channel.name} ({channel.id})"),
            ("Message ID", str(message.id)),
            ("Replaced", str(previous.message_id) if previous else "None"),
        ])
        return message


__all__ = ["SuggestionService"]
