"""
Suggestion Bot - Reaction Handler
=================================

Route raw reaction add/remove events on suggestion messages to the
reaction reconciler.

Raw events are used so votes on messages posted before the last restart
(not in the message cache) are still counted.
"""

from typing import TYPE_CHECKING, Optional

import discord

from src.core.logger import logger
from src.services.suggestions.reconciler import ReactionEvent, ReconcileOutcome

if TYPE_CHECKING:
    from src.bot import SuggestionBot


def _is_bot_user(bot: "SuggestionBot", payload: discord.RawReactionActionEvent) -> bool:
    """True when the reacting user is known to be a bot account."""
    if payload.member is not None:
        return payload.member.bot
    user = bot.get_user(payload.user_id)
    return user is not None and user.bot


# =============================================================================
# Reaction Handler
# =============================================================================

async def on_raw_reaction_handler(
    bot: "SuggestionBot",
    payload: discord.RawReactionActionEvent
) -> Optional[ReconcileOutcome]:
    """
    Event handler for raw reaction add/remove.

    Args:
        bot: The SuggestionBot instance
        payload: The raw reaction event

    Returns:
        The reconcile outcome, or None when the event never reached it

    DESIGN: Background path - nothing is raised to discord.py
    Failures are logged and the event is dropped; the next vote on the
    same suggestion recounts from the live reactions.
    """
    if payload.channel_id != bot.suggestion_channel_id:
        return None

    if _is_bot_user(bot, payload):
        return None

    reconciler = bot.reconciler
    if reconciler is None:
        logger.debug("Reaction Ignored - Reconciler Not Ready", [
            ("Message ID", str(payload.message_id)),
        ])
        return None

    try:
        return await reconciler.handle(ReactionEvent.from_payload(payload))
    except Exception as e:
        logger.exception("Reaction Handler Failed", [
            ("Message ID", str(payload.message_id)),
            ("User ID", str(payload.user_id)),
            ("Event", payload.event_type),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:100]),
        ])
        return ReconcileOutcome.FAILED


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["on_raw_reaction_handler"]
