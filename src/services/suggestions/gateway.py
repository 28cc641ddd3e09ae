"""
Suggestion Bot - Discord Artifact Gateway
=========================================

The only code that talks to the Discord message API for suggestion messages.

The reconciler, transition manager and intake service depend on the methods
below rather than on discord.py directly, so tests substitute an in-memory
fake with the same surface.

Failures propagate as discord.HTTPException subclasses (NotFound, Forbidden);
callers decide whether to log or surface them.
"""

from typing import Optional, Union

import discord

from src.core.emojis import VoteEmoji
from src.core.logger import logger
from src.services.suggestions.errors import SuggestionNotFound
from src.utils.discord_rate_limit import call_with_retry


# Placeholder used when a user cannot be resolved
UNKNOWN_USER = "Unknown User"

ReactionEmoji = Union[str, discord.Emoji, discord.PartialEmoji]


class DiscordArtifactGateway:
    """Posts, edits and inspects suggestion messages in one channel."""

    def __init__(self, bot: discord.Client, channel_id: int) -> None:
        self.bot = bot
        self.channel_id = channel_id

    @property
    def self_user_id(self) -> Optional[int]:
        """The bot's own user ID (None before login)."""
        return self.bot.user.id if self.bot.user else None

    async def _channel(self) -> discord.abc.Messageable:
        channel = self.bot.get_channel(self.channel_id)
        if channel is not None:
            return channel
        try:
            return await self.bot.fetch_channel(self.channel_id)
        except (discord.NotFound, discord.Forbidden, discord.InvalidData) as e:
            logger.error("Suggestion Channel Unavailable", [
                ("Channel ID", str(self.channel_id)),
                ("Error", str(e)),
            ])
            raise SuggestionNotFound(
                f"Suggestion channel {self.channel_id} not found",
                user_message="Suggestion channel not found. Check CHANNEL_ID in .env.",
            ) from e

    async def _partial(self, message_id: int) -> discord.PartialMessage:
        channel = await self._channel()
        return channel.get_partial_message(message_id)

    async def _fetch(self, message_id: int) -> discord.Message:
        channel = await self._channel()
        return await call_with_retry(
            "Fetch Suggestion Message",
            lambda: channel.fetch_message(message_id),
        )

    # -------------------------------------------------------------------------
    # Message Content
    # -------------------------------------------------------------------------

    async def post(self, embed: discord.Embed) -> int:
        """Send a new suggestion message and return its ID."""
        channel = await self._channel()
        message = await call_with_retry(
            "Post Suggestion",
            lambda: channel.send(embed=embed),
        )
        return message.id

    async def edit(self, message_id: int, embed: discord.Embed) -> None:
        """Replace a suggestion message's embed in place."""
        message = await self._partial(message_id)
        await call_with_retry(
            "Edit Suggestion",
            lambda: message.edit(embed=embed),
        )

    # -------------------------------------------------------------------------
    # Reactions
    # -------------------------------------------------------------------------

    async def add_reaction(self, message_id: int, emoji: VoteEmoji) -> None:
        """Add the bot's own reaction."""
        message = await self._partial(message_id)
        await call_with_retry(
            "Add Vote Reaction",
            lambda: message.add_reaction(emoji.to_reaction()),
        )

    async def remove_reaction(self, message_id: int, emoji: VoteEmoji, user_id: int) -> None:
        """Remove one user's reaction."""
        message = await self._partial(message_id)
        await call_with_retry(
            "Remove Vote Reaction",
            lambda: message.remove_reaction(emoji.to_reaction(), discord.Object(id=user_id)),
        )

    async def clear_reactions(self, message_id: int) -> None:
        """Remove every reaction from a message."""
        message = await self._partial(message_id)
        await call_with_retry(
            "Clear Reactions",
            lambda: message.clear_reactions(),
        )

    async def present_reactions(self, message_id: int) -> list[ReactionEmoji]:
        """Emojis currently reacted on a message."""
        message = await self._fetch(message_id)
        return [reaction.emoji for reaction in message.reactions]

    async def reaction_snapshot(self, message_id: int, emoji: VoteEmoji) -> set[int]:
        """IDs of the users currently holding a reaction (empty if absent)."""
        message = await self._fetch(message_id)
        for reaction in message.reactions:
            if emoji.matches(reaction.emoji):
                return {user.id async for user in reaction.users()}
        return set()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def resolve_display_name(self, user_id: int) -> str:
        """Username for a user ID, or a placeholder when it cannot be resolved."""
        user = self.bot.get_user(user_id)
        if user is not None:
            return user.name
        try:
            user = await self.bot.fetch_user(user_id)
            return user.name
        except discord.HTTPException as e:
            logger.warning("Could Not Resolve Suggestion Author", [
                ("User ID", str(user_id)),
                ("Error", str(e)),
            ])
            return UNKNOWN_USER


__all__ = ["DiscordArtifactGateway", "UNKNOWN_USER"]
