"""
Suggestion Bot - Suggestion Embeds
==================================

Pure mapping from a suggestion record to the embed shown in the channel.

The embed is rebuilt from the stored record every time anything changes
(votes, status, notes), so it never accumulates state of its own.
"""

from typing import Optional, TYPE_CHECKING
from zoneinfo import ZoneInfo

import discord

from src.core.colors import EMBED_NO_VALUE, EmbedColors, EmbedIcons, status_color
from src.core.config import (
    BOT_TZ,
    DISCORD_EMBED_FIELD_LIMIT,
    DISCORD_EMBED_TITLE_LIMIT,
    SUBMISSION_DATE_FORMAT,
)
from src.models import Suggestion, SuggestionKind, VoteKind
from src.utils.helpers import truncate

if TYPE_CHECKING:
    from src.services.suggestions.gateway import DiscordArtifactGateway


def _field_value(value: Optional[str]) -> str:
    """Field value with the N/A placeholder, clipped to Discord's limit."""
    if not value or not value.strip():
        return EMBED_NO_VALUE
    return truncate(value, DISCORD_EMBED_FIELD_LIMIT)


def format_votes(record: Suggestion) -> str:
    """
    Votes field text.

    Open:
        Upvotes: 2 66.67%
        Downvotes: 1 33.33%

    Closed adds an opinion line first, e.g. "Opinion: +1".
    """
    tally = record.tally
    lines = [
        f"Upvotes: {tally.up} {tally.percentage(VoteKind.UP):.2f}%",
        f"Downvotes: {tally.down} {tally.percentage(VoteKind.DOWN):.2f}%",
    ]
    if record.is_closed:
        lines.insert(0, f"Opinion: {tally.opinion:+d}")
    return "\n".join(lines)


def build_suggestion_embed(
    record: Suggestion,
    author_name: str,
    timezone: ZoneInfo = BOT_TZ,
    date_format: str = SUBMISSION_DATE_FORMAT,
) -> discord.Embed:
    """
    Build the public embed for a suggestion.

    Args:
        record: The stored suggestion (must have an ID)
        author_name: Display name of the submitter
        timezone: Zone the submission date is rendered in
        date_format: strftime format for the footer date

    Returns:
        discord.Embed reflecting content, status, notes and tallies
    """
    embed = discord.Embed(
        title=truncate(f"Suggestion from {author_name}", DISCORD_EMBED_TITLE_LIMIT),
        color=status_color(record.decision),
    )

    if record.kind is SuggestionKind.GAME:
        embed.add_field(name="Game Name", value=_field_value(record.game_name), inline=True)
        embed.add_field(name="Map/Server Name", value=_field_value(record.map_name), inline=False)
        embed.add_field(name="Suggestion", value=_field_value(record.suggestion), inline=False)
        embed.add_field(name="Reason", value=_field_value(record.reason), inline=False)
    else:
        embed.add_field(name="Suggestion Title", value=_field_value(record.title), inline=False)
        embed.add_field(name="Suggestion in Detail", value=_field_value(record.detail), inline=False)

    if record.decision is not None:
        embed.add_field(name="Public Status", value=record.decision.label, inline=False)
        if record.notes:
            embed.add_field(name="Comment", value=_field_value(record.notes), inline=False)

    embed.add_field(name="Votes", value=format_votes(record), inline=False)

    submitted = record.submitted_at.astimezone(timezone).strftime(date_format)
    embed.set_footer(text=f"Suggestion ID: {record.id} | Submitted at • {submitted}")

    return embed


async def render_suggestion(gateway: "DiscordArtifactGateway", record: Suggestion) -> discord.Embed:
    """Resolve the author's name (placeholder on failure) and build the embed."""
    author_name = await gateway.resolve_display_name(record.author_id)
    return build_suggestion_embed(record, author_name)


def build_panel_embed() -> discord.Embed:
    """The standing intake panel message."""
    embed = discord.Embed(
        title=f"{EmbedIcons.PANEL} Suggestions",
        description=(
            "Have an idea for the server or one of our games?\n"
            "Pick a suggestion type from the menu below to open the form.\n\n"
            f"{EmbedIcons.GAME} **Game** - maps, servers and gameplay\n"
            f"{EmbedIcons.COMMUNITY} **Community** - everything else"
        ),
        color=EmbedColors.PANEL,
    )
    embed.set_footer(text="Vote on suggestions with the reactions below each post")
    return embed


__all__ = [
    "build_suggestion_embed",
    "build_panel_embed",
    "format_votes",
    "render_suggestion",
]
