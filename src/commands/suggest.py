"""
Suggestion Bot - Suggest Commands
=================================

Slash commands for suggestion intake and moderation.

Commands:
- /suggest create - Open the suggestion form for a type
- /suggest manage - Set or clear a suggestion's status (admin only)
- /suggest panel - Post or replace the intake panel here (admin only)
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import has_admin_role
from src.core.logger import logger
from src.models import SuggestionKind, parse_status_command
from src.services.suggestions.errors import SuggestionError, SuggestionForbidden
from src.utils.error_handler import handle_command_errors
from src.views.suggestions import NOT_READY_MESSAGE, SuggestionPanelView, build_suggestion_modal

if TYPE_CHECKING:
    from src.bot import SuggestionBot


UPDATED_MESSAGE = "Suggestion updated successfully."
PANEL_POSTED_MESSAGE = "Suggestion panel posted."

STATUS_CHOICES = [
    app_commands.Choice(name="Under Consideration", value="under_consideration"),
    app_commands.Choice(name="Implemented", value="implemented"),
    app_commands.Choice(name="Not Happening", value="not_happening"),
    app_commands.Choice(name="Clear", value="clear"),
]


def _require_admin(interaction: discord.Interaction, command: str) -> None:
    """Raise SuggestionForbidden unless the user holds an admin role."""
    if not has_admin_role(interaction.user):
        logger.warning(f"/suggest {command} Denied - Missing Role", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
        ])
        raise SuggestionForbidden(f"{interaction.user.id} lacks an admin role")


# =============================================================================
# Suggest Cog
# =============================================================================

class SuggestCog(commands.Cog):
    """Cog for /suggest commands."""

    suggest = app_commands.Group(name="suggest", description="Suggestion commands")

    def __init__(self, bot: "SuggestionBot") -> None:
        self.bot = bot

    @suggest.command(name="create", description="Create a new suggestion")
    @app_commands.describe(type="Type of suggestion")
    @app_commands.choices(type=[
        app_commands.Choice(name="Game", value=SuggestionKind.GAME.value),
        app_commands.Choice(name="Community", value=SuggestionKind.COMMUNITY.value),
    ])
    @handle_command_errors("Create Suggestion")
    async def create(
        self,
        interaction: discord.Interaction,
        type: app_commands.Choice[str],
    ) -> None:
        """Open the intake modal for the chosen type."""
        kind = SuggestionKind(type.value)
        logger.info("/suggest create Command Invoked", [
            ("Invoked By", f"{interaction.user.name} ({interaction.user.id})"),
            ("Type", kind.label),
        ])
        await interaction.response.send_modal(build_suggestion_modal(kind, self.bot))

    @suggest.command(name="manage", description="Manage a suggestion (admin only)")
    @app_commands.describe(
        id="Suggestion ID",
        status="Status to set",
        notes="Admin notes",
    )
    @app_commands.choices(status=STATUS_CHOICES)
    @handle_command_errors("Manage Suggestion")
    async def manage(
        self,
        interaction: discord.Interaction,
        id: int,
        status: app_commands.Choice[str],
        notes: Optional[str] = None,
    ) -> None:
        """Set or clear a suggestion's status."""
        logger.info("/suggest manage Command Invoked", [
            ("Invoked By", f"{interaction.user.name} ({interaction.user.id})"),
            ("Suggestion ID", str(id)),
            ("Status", status.name),
            ("Notes", (notes[:50] + "...") if notes and len(notes) > 50 else (notes or "None")),
        ])

        await interaction.response.defer(ephemeral=True)
        _require_admin(interaction, "manage")

        manager = self.bot.transition_manager
        if manager is None:
            await interaction.followup.send(NOT_READY_MESSAGE, ephemeral=True)
            return

        try:
            command = parse_status_command(status.value, notes)
        except ValueError as e:
            raise SuggestionError(str(e), user_message="Unknown status.") from e

        await manager.apply(id, command, interaction.user.name)
        await interaction.followup.send(UPDATED_MESSAGE, ephemeral=True)

    @suggest.command(name="panel", description="Post the suggestion panel in this channel (admin only)")
    @handle_command_errors("Post Suggestion Panel")
    async def panel(self, interaction: discord.Interaction) -> None:
        """Post or replace the intake panel in the current channel."""
        logger.info("/suggest panel Command Invoked", [
            ("Invoked By", f"{interaction.user.name} ({interaction.user.id})"),
            ("Channel", f"#{getattr(interaction.channel, 'name', 'Unknown')} ({interaction.channel_id})"),
        ])

        await interaction.response.defer(ephemeral=True)
        _require_admin(interaction, "panel")

        if not isinstance(interaction.channel, discord.TextChannel):
            await interaction.followup.send(
                "This command can only be used in a text channel.",
                ephemeral=True
            )
            return

        service = self.bot.suggestion_service
        if service is None:
            await interaction.followup.send(NOT_READY_MESSAGE, ephemeral=True)
            return

        await service.refresh_panel(interaction.channel, SuggestionPanelView())
        await interaction.followup.send(PANEL_POSTED_MESSAGE, ephemeral=True)


# =============================================================================
# Setup Function
# =============================================================================

async def setup(bot: "SuggestionBot") -> None:
    """Setup function for loading the cog."""
    await bot.add_cog(SuggestCog(bot))
    logger.info("Suggest Cog Loaded", [
        ("Commands", "/suggest create, /suggest manage, /suggest panel"),
    ])


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["SuggestCog", "setup"]
