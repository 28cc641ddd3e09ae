"""Shared fixtures: temporary database, in-memory Discord gateway, workflow services."""

import os
import tempfile
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import MagicMock

# Keep test runs out of the repo-level logs/ folder; must precede src imports
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="suggestion-bot-logs-"))

import discord
import pytest

from src.core.emojis import DEFAULT_VOTE_EMOJIS, VoteEmoji
from src.models import (
    ClosedStatus,
    Decision,
    OPEN,
    Suggestion,
    SuggestionKind,
    SuggestionStatus,
    VoteTally,
)
from src.services.suggestions.db import SuggestionsDatabase
from src.services.suggestions.gateway import UNKNOWN_USER
from src.services.suggestions.reconciler import ReactionReconciler
from src.services.suggestions.service import SuggestionService
from src.services.suggestions.transitions import StatusTransitionManager


BOT_ID = 1
AUTHOR_ID = 500
FIXED_NOW = datetime(2026, 10, 19, 4, 5, 9, tzinfo=timezone.utc)


def http_error(cls: type = discord.HTTPException, status: int = 500, text: str = "boom") -> discord.HTTPException:
    """Build a discord.py HTTP error without a real response."""
    response = MagicMock()
    response.status = status
    response.reason = text
    return cls(response, text)


# ---------------------------------------------------------------------------
# In-memory gateway
# ---------------------------------------------------------------------------


class FakeGateway:
    """
    Stands in for DiscordArtifactGateway.

    Messages hold an insertion-ordered mapping of emoji -> user IDs. Any method
    name put in `fail` raises the given exception instead of running.
    """

    def __init__(self, self_user_id: Optional[int] = BOT_ID):
        self.self_user_id = self_user_id
        self.reactions: dict[int, dict[VoteEmoji, set[int]]] = {}
        self.embeds: dict[int, discord.Embed] = {}
        self.names: dict[int, str] = {AUTHOR_ID: "alice"}
        self.fail: dict[str, Exception] = {}
        self.calls: list[tuple] = []
        self._next_message_id = 9000

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail:
            raise self.fail[name]

    def _message(self, message_id: int) -> dict[VoteEmoji, set[int]]:
        if message_id not in self.reactions:
            raise http_error(discord.NotFound, 404, "Unknown Message")
        return self.reactions[message_id]

    # Test helpers

    def create_message(self) -> int:
        self._next_message_id += 1
        self.reactions[self._next_message_id] = {}
        return self._next_message_id

    def react(self, message_id: int, emoji: VoteEmoji, *user_ids: int) -> None:
        self.reactions[message_id].setdefault(emoji, set()).update(user_ids)

    def holders(self, message_id: int, emoji: VoteEmoji) -> set[int]:
        return set(self.reactions[message_id].get(emoji, set()))

    def count_calls(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    # Gateway surface

    async def post(self, embed: discord.Embed) -> int:
        self._record("post", embed)
        message_id = self.create_message()
        self.embeds[message_id] = embed
        return message_id

    async def edit(self, message_id: int, embed: discord.Embed) -> None:
        self._record("edit", message_id, embed)
        self._message(message_id)
        self.embeds[message_id] = embed

    async def add_reaction(self, message_id: int, emoji: VoteEmoji) -> None:
        self._record("add_reaction", message_id, emoji)
        self._message(message_id).setdefault(emoji, set()).add(self.self_user_id)

    async def remove_reaction(self, message_id: int, emoji: VoteEmoji, user_id: int) -> None:
        self._record("remove_reaction", message_id, emoji, user_id)
        reactions = self._message(message_id)
        holders = reactions.get(emoji)
        if holders is None:
            return
        holders.discard(user_id)
        if not holders:
            del reactions[emoji]

    async def clear_reactions(self, message_id: int) -> None:
        self._record("clear_reactions", message_id)
        self._message(message_id).clear()

    async def present_reactions(self, message_id: int) -> list[VoteEmoji]:
        self._record("present_reactions", message_id)
        return list(self._message(message_id))

    async def reaction_snapshot(self, message_id: int, emoji: VoteEmoji) -> set[int]:
        self._record("reaction_snapshot", message_id, emoji)
        return set(self._message(message_id).get(emoji, set()))

    async def resolve_display_name(self, user_id: int) -> str:
        self._record("resolve_display_name", user_id)
        return self.names.get(user_id, UNKNOWN_USER)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db(tmp_path):
    """SuggestionsDatabase with temporary DB."""
    database = SuggestionsDatabase(tmp_path / "suggestions.db")
    yield database
    database.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def emojis():
    return DEFAULT_VOTE_EMOJIS


@pytest.fixture
def up(emojis):
    return emojis.up


@pytest.fixture
def down(emojis):
    return emojis.down


@pytest.fixture
def reconciler(db, gateway, emojis):
    return ReactionReconciler(db, gateway, emojis)


@pytest.fixture
def manager(db, gateway, emojis):
    return StatusTransitionManager(db, gateway, emojis, clock=lambda: FIXED_NOW)


@pytest.fixture
def service(db, gateway, emojis):
    return SuggestionService(db, gateway, emojis)


@pytest.fixture
def game_fields():
    return {
        "game_name": "Rust",
        "map_name": "Procedural 4000",
        "suggestion": "Add a weekly wipe",
        "reason": "Servers get stale",
    }


@pytest.fixture
def community_fields():
    return {
        "title": "Movie night",
        "detail": "Host a movie night every Friday",
    }


@pytest.fixture
def make_suggestion(db, gateway, emojis):
    """
    Insert a suggestion with a posted message.

    The message starts with the bot's two seed reactions unless seed=False.
    """
    def _make(
        status: SuggestionStatus = OPEN,
        tally: VoteTally = VoteTally(),
        with_message: bool = True,
        seed: bool = True,
    ) -> Suggestion:
        draft = Suggestion.new(
            SuggestionKind.COMMUNITY,
            AUTHOR_ID,
            {"title": "Movie night", "detail": "Every Friday"},
            submitted_at=FIXED_NOW,
        )
        suggestion_id = db.insert_suggestion(draft.with_status(status).with_tally(tally))
        record = db.get_suggestion(suggestion_id)
        if not with_message:
            return record

        message_id = gateway.create_message()
        if seed:
            for emoji in emojis.all():
                gateway.react(message_id, emoji, BOT_ID)
        db.set_message_id(suggestion_id, message_id)
        return db.get_suggestion(suggestion_id)

    return _make


@pytest.fixture
def closed_implemented():
    return ClosedStatus(decision=Decision.IMPLEMENTED, notes="Mon, 19 Oct 2026\nbob response:\nDone")


def damage_row(db, suggestion_id: int, column: str, value) -> None:
    """Overwrite one stored column with a value the reader cannot parse."""
    conn = db._get_connection()
    conn.execute(f"UPDATE suggestions SET {column} = ? WHERE id = ?", (value, suggestion_id))
    conn.commit()
