"""
Suggestion Bot - Centralized Colors
===================================

All colors used throughout the bot in one place.
"""

import discord

from src.models import Decision


# =============================================================================
# Base Color Values (Hex)
# =============================================================================

COLOR_OPEN = 0x0099FF           # Blue - no decision yet
COLOR_CONSIDERING = 0xFFA500    # Orange
COLOR_IMPLEMENTED = 0x00FF00    # Green
COLOR_NOT_HAPPENING = 0xFF0000  # Red

COLOR_PANEL = 0x5865F2          # Discord blurple


# =============================================================================
# Discord Embed Colors (discord.Color objects)
# =============================================================================

class EmbedColors:
    """Standardized color palette for suggestion embeds."""
    OPEN = discord.Color(COLOR_OPEN)
    PANEL = discord.Color(COLOR_PANEL)

    DECISIONS = {
        Decision.UNDER_CONSIDERATION: discord.Color(COLOR_CONSIDERING),
        Decision.IMPLEMENTED: discord.Color(COLOR_IMPLEMENTED),
        Decision.NOT_HAPPENING: discord.Color(COLOR_NOT_HAPPENING),
    }


class EmbedIcons:
    """Standardized emoji icons for embed titles and select options."""
    GAME = "🎮"
    COMMUNITY = "💬"
    PANEL = "📝"


# Standard "no value" placeholder
EMBED_NO_VALUE = "N/A"


def status_color(decision) -> discord.Color:
    """Embed color for a decision (None means open)."""
    if decision is None:
        return EmbedColors.OPEN
    return EmbedColors.DECISIONS.get(decision, EmbedColors.OPEN)


__all__ = [
    "COLOR_OPEN",
    "COLOR_CONSIDERING",
    "COLOR_IMPLEMENTED",
    "COLOR_NOT_HAPPENING",
    "COLOR_PANEL",
    "EmbedColors",
    "EmbedIcons",
    "EMBED_NO_VALUE",
    "status_color",
]
