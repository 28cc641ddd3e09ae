"""
Suggestion Bot - Discord Error Handler Utility
==============================================

Reusable error handling for slash commands and modal submissions.

Every failure is converted into one short user-facing reply:
- SuggestionError subclasses carry their own message
- Discord and unexpected errors get a generic message
"""

import functools
from typing import Callable, Optional, TypeVar

import discord

from src.core.logger import logger
from src.services.suggestions.errors import ExternalServiceError, SuggestionError
from src.utils.discord_rate_limit import log_http_error


# =============================================================================
# Type Definitions
# =============================================================================

T = TypeVar('T')

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request."


# =============================================================================
# Error Response Helper
# =============================================================================

async def send_error_response(
    interaction: discord.Interaction,
    message: str = GENERIC_ERROR_MESSAGE,
    ephemeral: bool = True
) -> None:
    """Reply with message, as a followup when the interaction was already answered or deferred."""
    try:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=ephemeral)
        else:
            await interaction.response.send_message(message, ephemeral=ephemeral)
    except discord.HTTPException as e:
        logger.warning("Error Reply Not Delivered", [
            ("Reply", message[:50]),
            ("Status", str(e.status)),
        ])


def _user_details(interaction: Optional[discord.Interaction]) -> list[tuple[str, str]]:
    if interaction is None:
        return []
    return [
        ("User", f"{interaction.user.name} ({interaction.user.display_name})"),
        ("ID", str(interaction.user.id)),
    ]


# =============================================================================
# Error Handling Decorator
# =============================================================================

def handle_command_errors(
    operation_name: str,
    user_message: str = GENERIC_ERROR_MESSAGE,
) -> Callable:
    """
    Turn any failure of a command or modal callback into one ephemeral reply.

    SuggestionError subclasses reply with their own user_message; Discord
    and unexpected errors reply with user_message.

    Usage:
        @handle_command_errors("Manage Suggestion")
        async def manage(self, interaction, ...):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Optional[T]:
            interaction = next(
                (arg for arg in args if isinstance(arg, discord.Interaction)), None
            )

            try:
                return await func(*args, **kwargs)

            except SuggestionError as e:
                log_details = _user_details(interaction) + [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ]
                if isinstance(e, ExternalServiceError):
                    logger.error(f"{operation_name} Failed", log_details)
                else:
                    logger.warning(f"{operation_name} Rejected", log_details)

                if interaction:
                    await send_error_response(interaction, e.user_message)

            except discord.HTTPException as e:
                log_http_error(e, operation_name, _user_details(interaction))

                if interaction:
                    await send_error_response(interaction, user_message)

            except Exception as e:
                log_details = _user_details(interaction) + [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ]
                logger.exception(f"{operation_name} Failed (Unexpected)", log_details)

                if interaction:
                    await send_error_response(interaction, user_message)

            return None

        return wrapper
    return decorator


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "send_error_response",
    "handle_command_errors",
]
