"""
Suggestion Bot - Main Bot Class
===============================

Core Discord client for community suggestions.

ARCHITECTURE OVERVIEW:
======================

┌─────────────────────────────────────────────────────────────────┐
│                        BOT LAYER (bot.py)                        │
│  - Discord client setup and event routing                       │
│  - Service initialization and lifecycle management              │
└─────────────────────────────────────────────────────────────────┘
                              │
        ┌─────────────────────┼─────────────────────┐
        ▼                     ▼                     ▼
┌───────────────┐    ┌────────────────────┐  ┌───────────────┐
│   HANDLERS    │    │     SERVICES       │  │   COMMANDS    │
│ - ready.py    │    │ suggestions/       │  │ - suggest.py  │
│ - reactions.py│    │ - reconciler.py    │  │   (slash cmds)│
│ - shutdown.py │    │ - transitions.py   │  ├───────────────┤
└───────────────┘    │ - service.py       │  │    VIEWS      │
                     │ - gateway.py       │  │ - modals      │
                     │ - render.py        │  │ - panel menu  │
                     │ - db/              │  └───────────────┘
                     └────────────────────┘

KEY DESIGN DECISIONS:
=====================
1. VOTE TALLIES ARE RECOUNTED: every reaction event recounts both vote
   reactions from the live message instead of adding/subtracting, so a
   missed event is corrected by the next one

2. CLOSED SUGGESTIONS ARE FROZEN: a decided suggestion has its reactions
   cleared and any new vote is removed immediately

3. ONE VOTE PER USER: adding a vote removes the user's opposite vote

4. GRACEFUL SHUTDOWN: health server stopped, database WAL checkpointed
"""

from typing import Optional

import discord
from discord.ext import commands

from src.core.config import DB_PATH, SUGGESTION_CHANNEL_ID
from src.core.emojis import VoteEmojiConfig
from src.core.health import HealthCheckServer
from src.core.logger import logger
from src.handlers.ready import on_ready_handler
from src.handlers.reactions import on_raw_reaction_handler
from src.handlers.shutdown import shutdown_handler
from src.services.suggestions import (
    DiscordArtifactGateway,
    ReactionReconciler,
    StatusTransitionManager,
    SuggestionsDatabase,
    SuggestionService,
)
from src.views.suggestions import SuggestionPanelView


# =============================================================================
# SuggestionBot Class
# =============================================================================

class SuggestionBot(commands.Bot):
    """
    Main Discord bot class for the suggestion workflow.

    DESIGN: Central orchestrator that:
    - Routes Discord events to appropriate handlers
    - Holds references to all services
    - Manages bot lifecycle (startup, shutdown)

    SERVICE INITIALIZATION ORDER:
    1. Database, persistent panel view, /suggest cog (setup_hook)
    2. Vote emojis, gateway, reconciler, transition manager, service (on_ready)
    3. Health check server (on_ready)

    INTENTS REQUIRED:
    - guilds: Channel and custom emoji cache
    - guild_reactions: Raw reaction add/remove events
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, channel_id: Optional[int] = SUGGESTION_CHANNEL_ID) -> None:
        """Set intents and empty service slots; nothing touches Discord yet."""
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_reactions = True

        super().__init__(
            command_prefix="!",  # Not used - bot uses slash commands only
            intents=intents,
            help_command=None,
        )

        self.suggestion_channel_id: Optional[int] = channel_id

        # Filled by setup_hook (database) and on_ready (everything else)
        self.suggestions_db: Optional[SuggestionsDatabase] = None
        self.vote_emojis: Optional[VoteEmojiConfig] = None
        self.gateway: Optional[DiscordArtifactGateway] = None
        self.reconciler: Optional[ReactionReconciler] = None
        self.transition_manager: Optional[StatusTransitionManager] = None
        self.suggestion_service: Optional[SuggestionService] = None
        self.health_server: Optional[HealthCheckServer] = None

        # READY fires again after reconnects; wire services only once
        self._ready_initialized: bool = False

    # =========================================================================
    # Event Handlers
    # =========================================================================

    async def setup_hook(self) -> None:
        """Open the database and register the persistent view and /suggest cog."""
        self.suggestions_db = SuggestionsDatabase(DB_PATH)

        # Persistent panel select menu keeps working across restarts
        self.add_view(SuggestionPanelView())

        await self.load_extension("src.commands.suggest")

        logger.info("Setup Hook Complete", [
            ("Database", str(DB_PATH)),
            ("Command Sync", "Deferred to ready"),
        ])

    async def on_ready(self) -> None:
        """Run startup wiring on the first READY only."""
        if self._ready_initialized:
            logger.info("Bot Reconnected", [("Action", "Skipped re-initialization")])
            return

        self._ready_initialized = True
        await on_ready_handler(self)

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        """Event handler for reaction additions (cached or not)."""
        await on_raw_reaction_handler(self, payload)

    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        """Event handler for reaction removals (cached or not)."""
        await on_raw_reaction_handler(self, payload)

    async def on_resumed(self) -> None:
        """Event handler for bot resuming connection after disconnect."""
        logger.info("Bot Connection Resumed")

    async def close(self) -> None:
        """Cleanup when bot is shutting down."""
        await shutdown_handler(self)
        await super().close()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["SuggestionBot"]
