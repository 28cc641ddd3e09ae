"""
Suggestion Bot - Discord Rate Limit Utilities
=============================================

Discord HTTP failures: one logging format for all of them, a retry
wrapper for 429 responses and a message delete that tolerates the message
already being gone.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar, Union

import discord

from src.core.logger import logger


T = TypeVar("T")


# =============================================================================
# Retry Settings
# =============================================================================

MAX_RETRIES: int = 3
BASE_DELAY: float = 1.0  # seconds
MAX_DELAY: float = 30.0  # seconds

HTTP_STATUS_NAMES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[list] = None,
) -> None:
    """
    Log a Discord HTTPException under a title naming the operation.

    429, 403 and 404 are expected in normal operation (vote spam, missing
    permissions, deleted messages) and log as warnings; anything else is
    an error.
    """
    status_name = HTTP_STATUS_NAMES.get(e.status, "Unknown")
    details = [
        ("Status", f"{e.status} ({status_name})"),
        ("Error", getattr(e, "text", None) or str(e)),
    ]
    retry_after = getattr(e, "retry_after", None)
    if retry_after:
        details.append(("Retry After", f"{retry_after:.1f}s"))
    details.extend(context or [])

    if e.status in (403, 404, 429):
        logger.warning(f"{operation}: {status_name}", details)
    else:
        logger.error(f"{operation} Failed", details)


def _retry_delay(e: discord.HTTPException, attempt: int) -> float:
    wait = getattr(e, "retry_after", None)
    if wait:
        return min(float(wait) + 0.5, MAX_DELAY)
    return min(BASE_DELAY * (2 ** attempt), MAX_DELAY)


async def call_with_retry(
    operation: str,
    call: Callable[[], Awaitable[T]],
    max_retries: int = MAX_RETRIES,
) -> T:
    """
    Run a Discord API call, retrying only when rate limited.

    Args:
        operation: Description for logging
        call: Zero-argument factory returning a fresh awaitable per attempt
        max_retries: Maximum attempts

    Returns:
        The call's result

    Raises:
        discord.HTTPException: Any non-429 error, or the last 429 after retries
    """
    for attempt in range(max_retries):
        try:
            return await call()
        except discord.HTTPException as e:
            if e.status != 429 or attempt >= max_retries - 1:
                raise
            delay = _retry_delay(e, attempt)
            logger.warning(f"Rate Limited on {operation}", [
                ("Attempt", f"{attempt + 1}/{max_retries}"),
                ("Retry After", f"{delay:.1f}s"),
            ])
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")


async def delete_message_safe(
    message: Union[discord.Message, discord.PartialMessage],
) -> bool:
    """Delete a message; True when it is gone afterwards, False when it is not."""
    try:
        await message.delete()
        return True
    except discord.NotFound:
        return True
    except discord.HTTPException as e:
        if e.status != 429:
            logger.warning("Message Delete Failed", [
                ("Message", str(message.id)),
                ("Error", str(e)),
            ])
        return False


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "MAX_RETRIES",
    "log_http_error",
    "call_with_retry",
    "delete_message_safe",
]
