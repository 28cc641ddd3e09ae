"""
Suggestion Bot - Ready Handler
==============================

First-ready startup: slash command sync, suggestion workflow wiring and the
health server.

Vote emojis can be custom guild emojis, which are only in the cache once the
client is ready, so the workflow is wired here rather than in setup_hook.
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

import discord

from src.core.config import (
    DOWNVOTE_EMOJI_NAME,
    GUILD_ID,
    HEALTH_PORT,
    UPVOTE_EMOJI_NAME,
)
from src.core.emojis import resolve_vote_emojis
from src.core.health import HealthCheckServer
from src.core.logger import logger
from src.services.suggestions import (
    DiscordArtifactGateway,
    ReactionReconciler,
    StatusTransitionManager,
    SuggestionService,
)

if TYPE_CHECKING:
    from src.bot import SuggestionBot


STARTUP_STEP_TIMEOUT: float = 30.0  # seconds per startup step


async def _startup_step(
    name: str,
    step: Callable[["SuggestionBot"], Awaitable[None]],
    bot: "SuggestionBot",
) -> bool:
    """
    Run one startup step under a timeout.

    A failed or hung step is logged and skipped so the rest of startup
    still runs; the bot stays connected either way.
    """
    try:
        async with asyncio.timeout(STARTUP_STEP_TIMEOUT):
            await step(bot)
    except TimeoutError:
        logger.error("Startup Step Timed Out", [
            ("Step", name),
            ("Timeout", f"{STARTUP_STEP_TIMEOUT}s"),
        ])
        return False
    except Exception as e:
        logger.exception("Startup Step Failed", [
            ("Step", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)),
        ])
        return False
    return True


async def on_ready_handler(bot: "SuggestionBot") -> None:
    """Wire up services after the first READY event."""
    logger.tree(f"Bot Ready: {bot.user.name}", [
        ("Bot ID", str(bot.user.id)),
        ("Guilds", str(len(bot.guilds))),
        ("Suggestion Channel", str(bot.suggestion_channel_id)),
        ("Command Scope", f"Guild {GUILD_ID}" if GUILD_ID else "Global"),
    ], emoji="✅")

    steps: list[tuple[str, Callable[["SuggestionBot"], Awaitable[None]]]] = [
        ("Command Sync", _sync_commands),
        ("Suggestion Workflow", _init_suggestion_workflow),
    ]
    if HEALTH_PORT:
        steps.append(("Health Server", _start_health_server))

    failed = [name for name, step in steps if not await _startup_step(name, step, bot)]

    if failed:
        logger.warning("Startup Finished With Errors", [
            ("OK", str(len(steps) - len(failed))),
            ("Failed", ", ".join(failed)),
        ])
    else:
        logger.success("Startup Finished", [
            ("Steps", ", ".join(name for name, _ in steps)),
        ])


# =============================================================================
# Startup Steps
# =============================================================================

async def _sync_commands(bot: "SuggestionBot") -> None:
    """
    Register /suggest with Discord.

    With GUILD_ID the commands are copied to that guild, which applies
    immediately; a global sync can take up to an hour to propagate.
    """
    if GUILD_ID:
        guild = discord.Object(id=GUILD_ID)
        bot.tree.copy_global_to(guild=guild)
        synced = await bot.tree.sync(guild=guild)
    else:
        synced = await bot.tree.sync()

    logger.tree("Slash Commands Synced", [
        ("Scope", f"Guild {GUILD_ID}" if GUILD_ID else "Global"),
        ("Commands", ", ".join(f"/{command.name}" for command in synced) or "None"),
    ], emoji="⚡")


def _emoji_guild(bot: "SuggestionBot") -> Optional[discord.Guild]:
    """Guild holding the custom vote emojis: GUILD_ID, else the channel's guild."""
    if GUILD_ID:
        return bot.get_guild(GUILD_ID)
    channel = bot.get_channel(bot.suggestion_channel_id)
    return getattr(channel, "guild", None)


async def _init_suggestion_workflow(bot: "SuggestionBot") -> None:
    """Resolve the vote emojis once and build every component around them."""
    if bot.suggestions_db is None:
        raise RuntimeError("Suggestions database not initialized")

    emojis = resolve_vote_emojis(_emoji_guild(bot), UPVOTE_EMOJI_NAME, DOWNVOTE_EMOJI_NAME)
    gateway = DiscordArtifactGateway(bot, bot.suggestion_channel_id)

    bot.vote_emojis = emojis
    bot.gateway = gateway
    bot.reconciler = ReactionReconciler(bot.suggestions_db, gateway, emojis)
    bot.transition_manager = StatusTransitionManager(bot.suggestions_db, gateway, emojis)
    bot.suggestion_service = SuggestionService(bot.suggestions_db, gateway, emojis)

    logger.tree("Suggestion Workflow Ready", [
        ("Channel", str(bot.suggestion_channel_id)),
        ("Upvote", str(emojis.up)),
        ("Downvote", str(emojis.down)),
        ("Stored Suggestions", str(await bot.suggestions_db.count_suggestions_async())),
    ], emoji="💡")


async def _start_health_server(bot: "SuggestionBot") -> None:
    server = HealthCheckServer(bot, HEALTH_PORT)
    await server.start()
    bot.health_server = server


__all__ = ["on_ready_handler"]
