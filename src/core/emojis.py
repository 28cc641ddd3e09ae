"""
Suggestion Bot - Vote Emoji Configuration
=========================================

The two vote emojis, resolved once on ready and passed by reference into the
reconciler and transition manager. Never mutated after startup.

Matching rules:
- Custom guild emoji match by their stable ID
- Standard unicode emoji match by their canonical symbol
"""

from dataclasses import dataclass
from typing import Optional, Union

import discord

from src.core.logger import logger
from src.models import VoteKind


# =============================================================================
# Default Vote Emojis
# =============================================================================

DEFAULT_UPVOTE_EMOJI = "👍"
DEFAULT_DOWNVOTE_EMOJI = "👎"


# =============================================================================
# Vote Emoji
# =============================================================================

@dataclass(frozen=True)
class VoteEmoji:
    """A single vote emoji: unicode (id is None) or custom (id set)."""
    name: str
    id: Optional[int] = None

    @property
    def is_custom(self) -> bool:
        return self.id is not None

    @classmethod
    def from_emoji(cls, emoji: Union[str, discord.Emoji, discord.PartialEmoji]) -> "VoteEmoji":
        if isinstance(emoji, str):
            return cls(name=emoji)
        return cls(name=emoji.name, id=emoji.id)

    def matches(self, emoji: Union[str, discord.Emoji, discord.PartialEmoji, "VoteEmoji"]) -> bool:
        """Exact match: by ID for custom emoji, by symbol for unicode emoji."""
        if isinstance(emoji, str):
            return not self.is_custom and emoji == self.name
        emoji_id = getattr(emoji, "id", None)
        if self.is_custom:
            return emoji_id == self.id
        return emoji_id is None and getattr(emoji, "name", None) == self.name

    def to_reaction(self) -> Union[str, discord.PartialEmoji]:
        """Value accepted by add_reaction / remove_reaction."""
        if self.is_custom:
            return discord.PartialEmoji(name=self.name, id=self.id)
        return self.name

    def __str__(self) -> str:
        if self.is_custom:
            return f"<:{self.name}:{self.id}>"
        return self.name


# =============================================================================
# Vote Emoji Config
# =============================================================================

@dataclass(frozen=True)
class VoteEmojiConfig:
    """The resolved up/down vote emoji pair."""
    up: VoteEmoji
    down: VoteEmoji

    def for_kind(self, kind: VoteKind) -> VoteEmoji:
        return self.up if kind is VoteKind.UP else self.down

    def kind_of(self, emoji: Union[str, discord.Emoji, discord.PartialEmoji]) -> Optional[VoteKind]:
        """Return which vote an emoji represents, or None when it is not a vote emoji."""
        if self.up.matches(emoji):
            return VoteKind.UP
        if self.down.matches(emoji):
            return VoteKind.DOWN
        return None

    def all(self) -> tuple[VoteEmoji, VoteEmoji]:
        return (self.up, self.down)


DEFAULT_VOTE_EMOJIS = VoteEmojiConfig(
    up=VoteEmoji(DEFAULT_UPVOTE_EMOJI),
    down=VoteEmoji(DEFAULT_DOWNVOTE_EMOJI),
)


def resolve_vote_emojis(
    guild: Optional[discord.Guild],
    up_name: Optional[str],
    down_name: Optional[str],
) -> VoteEmojiConfig:
    """
    Resolve the vote emoji pair from optional custom emoji names.

    Args:
        guild: Guild to look custom emojis up in (None skips the lookup)
        up_name: Custom upvote emoji name
        down_name: Custom downvote emoji name

    Returns:
        VoteEmojiConfig; any emoji that cannot be found falls back to 👍/👎
    """
    up = DEFAULT_VOTE_EMOJIS.up
    down = DEFAULT_VOTE_EMOJIS.down

    if guild is not None:
        if up_name:
            custom_up = discord.utils.get(guild.emojis, name=up_name)
            if custom_up:
                up = VoteEmoji.from_emoji(custom_up)
            else:
                logger.warning("Custom Upvote Emoji Not Found", [
                    ("Name", up_name),
                    ("Guild", f"{guild.name} ({guild.id})"),
                    ("Fallback", DEFAULT_UPVOTE_EMOJI),
                ])
        if down_name:
            custom_down = discord.utils.get(guild.emojis, name=down_name)
            if custom_down:
                down = VoteEmoji.from_emoji(custom_down)
            else:
                logger.warning("Custom Downvote Emoji Not Found", [
                    ("Name", down_name),
                    ("Guild", f"{guild.name} ({guild.id})"),
                    ("Fallback", DEFAULT_DOWNVOTE_EMOJI),
                ])

    config = VoteEmojiConfig(up=up, down=down)
    logger.info("Vote Emojis Resolved", [
        ("Upvote", str(config.up)),
        ("Downvote", str(config.down)),
    ])
    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "DEFAULT_UPVOTE_EMOJI",
    "DEFAULT_DOWNVOTE_EMOJI",
    "DEFAULT_VOTE_EMOJIS",
    "VoteEmoji",
    "VoteEmojiConfig",
    "resolve_vote_emojis",
]
