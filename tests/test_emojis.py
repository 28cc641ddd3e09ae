"""Tests for vote emoji matching and resolution."""

from unittest.mock import MagicMock

import discord

from src.core.emojis import (
    DEFAULT_VOTE_EMOJIS,
    VoteEmoji,
    VoteEmojiConfig,
    resolve_vote_emojis,
)
from src.models import VoteKind


def _guild(*emojis):
    guild = MagicMock(spec=discord.Guild)
    guild.id = 1
    guild.name = "Test Guild"
    guild.emojis = list(emojis)
    return guild


def _custom(name, emoji_id):
    emoji = MagicMock(spec=discord.Emoji)
    emoji.name = name
    emoji.id = emoji_id
    return emoji


class TestVoteEmoji:

    def test_unicode_matches_string(self):
        assert VoteEmoji("👍").matches("👍")
        assert not VoteEmoji("👍").matches("👎")

    def test_unicode_matches_partial(self):
        assert VoteEmoji("👍").matches(discord.PartialEmoji(name="👍"))

    def test_unicode_does_not_match_custom_with_same_name(self):
        assert not VoteEmoji("upvote").matches(discord.PartialEmoji(name="upvote", id=5))

    def test_custom_matches_by_id(self):
        emoji = VoteEmoji("upvote", 5)
        assert emoji.matches(discord.PartialEmoji(name="renamed", id=5))
        assert not emoji.matches(discord.PartialEmoji(name="upvote", id=6))
        assert not emoji.matches("upvote")

    def test_to_reaction(self):
        assert VoteEmoji("👍").to_reaction() == "👍"
        assert VoteEmoji("upvote", 5).to_reaction().id == 5

    def test_str(self):
        assert str(VoteEmoji("upvote", 5)) == "<:upvote:5>"


class TestVoteEmojiConfig:

    def test_kind_of(self):
        assert DEFAULT_VOTE_EMOJIS.kind_of("👍") is VoteKind.UP
        assert DEFAULT_VOTE_EMOJIS.kind_of("👎") is VoteKind.DOWN
        assert DEFAULT_VOTE_EMOJIS.kind_of("🎉") is None

    def test_for_kind(self):
        assert DEFAULT_VOTE_EMOJIS.for_kind(VoteKind.DOWN) == VoteEmoji("👎")


class TestResolveVoteEmojis:

    def test_no_guild_uses_defaults(self):
        assert resolve_vote_emojis(None, "upvote", "downvote") == DEFAULT_VOTE_EMOJIS

    def test_custom_emojis_found(self):
        guild = _guild(_custom("upvote", 11), _custom("downvote", 12))

        config = resolve_vote_emojis(guild, "upvote", "downvote")

        assert config == VoteEmojiConfig(VoteEmoji("upvote", 11), VoteEmoji("downvote", 12))

    def test_missing_custom_falls_back_per_emoji(self):
        guild = _guild(_custom("upvote", 11))

        config = resolve_vote_emojis(guild, "upvote", "downvote")

        assert config.up == VoteEmoji("upvote", 11)
        assert config.down == DEFAULT_VOTE_EMOJIS.down
