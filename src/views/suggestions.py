"""
Suggestion Bot - Suggestion Views and Modals
============================================

Discord UI components for suggestion intake.

Components:
- GameSuggestionModal: Game Name, Map/Server Name, Suggestion, Reason
- CommunitySuggestionModal: Suggestion Title, Suggestion in Detail
- SuggestionPanelView: Persistent select menu that opens either modal

Custom ID Formats:
- Modals: suggest_modal_{kind}
- Panel select: suggestion_panel:type
"""

from typing import TYPE_CHECKING, Optional

import discord

from src.core.colors import EmbedIcons
from src.core.config import DISCORD_MODAL_PARAGRAPH_LIMIT, DISCORD_MODAL_SHORT_LIMIT
from src.core.logger import logger
from src.models import SuggestionKind
from src.utils.error_handler import handle_command_errors
from src.utils.helpers import sanitize_input

if TYPE_CHECKING:
    from src.bot import SuggestionBot


# =============================================================================
# Constants
# =============================================================================

PANEL_SELECT_CUSTOM_ID = "suggestion_panel:type"

SUBMITTED_MESSAGE = "Your suggestion has been submitted!"
NOT_READY_MESSAGE = "The suggestion system is still starting up. Please try again shortly."


# =============================================================================
# Modals
# =============================================================================

class SuggestionModal(discord.ui.Modal):
    """Shared submit handling; subclasses declare the inputs for one kind."""

    kind: SuggestionKind

    def __init__(self, bot: "SuggestionBot") -> None:
        super().__init__(
            title=f"{self.kind.label} Suggestion",
            custom_id=f"suggest_modal_{self.kind.value}",
        )
        self.bot = bot

    def collect_fields(self) -> dict[str, Optional[str]]:
        """Map each text input's custom_id to its sanitized value."""
        fields = {}
        for child in self.children:
            if isinstance(child, discord.ui.TextInput):
                fields[child.custom_id] = sanitize_input(child.value, DISCORD_MODAL_PARAGRAPH_LIMIT)
        return fields

    @handle_command_errors("Submit Suggestion")
    async def on_submit(self, interaction: discord.Interaction) -> None:
        """Handle modal submission."""
        logger.info("Suggestion Modal Submitted", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
            ("Type", self.kind.label),
        ])

        await interaction.response.defer(ephemeral=True)

        service = self.bot.suggestion_service
        if service is None:
            logger.error("Suggestion service not initialized")
            await interaction.followup.send(NOT_READY_MESSAGE, ephemeral=True)
            return

        await service.submit(self.kind, interaction.user.id, self.collect_fields())
        await interaction.followup.send(SUBMITTED_MESSAGE, ephemeral=True)

    async def on_error(
        self,
        interaction: discord.Interaction,
        error: Exception
    ) -> None:
        """Handle modal errors."""
        logger.error("Suggestion Modal Error", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
            ("Type", self.kind.label),
            ("Error", str(error)),
        ])

        try:
            if interaction.response.is_done():
                await interaction.followup.send(
                    "An error occurred while submitting your suggestion. Please try again.",
                    ephemeral=True
                )
            else:
                await interaction.response.send_message(
                    "An error occurred while submitting your suggestion. Please try again.",
                    ephemeral=True
                )
        except discord.HTTPException as e:
            logger.warning("Failed To Send Modal Error Response", [
                ("User ID", str(interaction.user.id)),
                ("Error", str(e)),
            ])


class GameSuggestionModal(SuggestionModal):
    """Suggestion about a game, map or server."""

    kind = SuggestionKind.GAME

    game_name = discord.ui.TextInput(
        label="Game Name",
        custom_id="game_name",
        style=discord.TextStyle.short,
        max_length=DISCORD_MODAL_SHORT_LIMIT,
    )

    map_name = discord.ui.TextInput(
        label="Map/Server Name",
        custom_id="map_name",
        style=discord.TextStyle.short,
        max_length=DISCORD_MODAL_SHORT_LIMIT,
    )

    suggestion = discord.ui.TextInput(
        label="Suggestion",
        custom_id="suggestion",
        style=discord.TextStyle.paragraph,
        max_length=DISCORD_MODAL_PARAGRAPH_LIMIT,
    )

    reason = discord.ui.TextInput(
        label="Reason",
        custom_id="reason",
        style=discord.TextStyle.paragraph,
        max_length=DISCORD_MODAL_PARAGRAPH_LIMIT,
    )


class CommunitySuggestionModal(SuggestionModal):
    """Suggestion about the community."""

    kind = SuggestionKind.COMMUNITY

    title_input = discord.ui.TextInput(
        label="Suggestion Title",
        custom_id="title",
        style=discord.TextStyle.short,
        max_length=DISCORD_MODAL_SHORT_LIMIT,
    )

    detail = discord.ui.TextInput(
        label="Suggestion in Detail",
        custom_id="detail",
        style=discord.TextStyle.paragraph,
        max_length=DISCORD_MODAL_PARAGRAPH_LIMIT,
    )


MODALS: dict[SuggestionKind, type[SuggestionModal]] = {
    SuggestionKind.GAME: GameSuggestionModal,
    SuggestionKind.COMMUNITY: CommunitySuggestionModal,
}


def build_suggestion_modal(kind: SuggestionKind, bot: "SuggestionBot") -> SuggestionModal:
    """Create the intake modal for a suggestion kind."""
    return MODALS[kind](bot)


# =============================================================================
# Panel View (Persistent)
# =============================================================================

class SuggestionTypeSelect(discord.ui.Select):
    """Select menu offering the two suggestion kinds."""

    def __init__(self) -> None:
        super().__init__(
            custom_id=PANEL_SELECT_CUSTOM_ID,
            placeholder="Choose a suggestion type...",
            min_values=1,
            max_values=1,
            options=[
                discord.SelectOption(
                    label="Game",
                    value=SuggestionKind.GAME.value,
                    description="Maps, servers and gameplay",
                    emoji=EmbedIcons.GAME,
                ),
                discord.SelectOption(
                    label="Community",
                    value=SuggestionKind.COMMUNITY.value,
                    description="Everything else about the community",
                    emoji=EmbedIcons.COMMUNITY,
                ),
            ],
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        kind = SuggestionKind(self.values[0])
        logger.info("Suggestion Panel Used", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
            ("Type", kind.label),
        ])
        await interaction.response.send_modal(build_suggestion_modal(kind, interaction.client))


class SuggestionPanelView(discord.ui.View):
    """
    Persistent intake panel.

    DESIGN: timeout=None plus a fixed custom_id lets the view keep working
    after a restart once registered with bot.add_view().
    """

    def __init__(self) -> None:
        super().__init__(timeout=None)
        self.add_item(SuggestionTypeSelect())


__all__ = [
    "PANEL_SELECT_CUSTOM_ID",
    "SUBMITTED_MESSAGE",
    "SuggestionModal",
    "GameSuggestionModal",
    "CommunitySuggestionModal",
    "SuggestionPanelView",
    "build_suggestion_modal",
]
