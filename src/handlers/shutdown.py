"""
Suggestion Bot - Shutdown Handler
=================================

Stops the health server, then checkpoints and closes the database.
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable

from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import SuggestionBot


SHUTDOWN_TIMEOUT = 10.0  # seconds for all cleanup steps together


async def _run_step(name: str, step: Callable[[], Awaitable[None]]) -> bool:
    """Run one cleanup step; a failure is logged and the next step still runs."""
    try:
        await step()
    except Exception as e:
        logger.warning("Cleanup Step Failed", [
            ("Step", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)),
        ])
        return False
    logger.debug("Cleanup Step Done", [("Step", name)])
    return True


async def shutdown_handler(bot: "SuggestionBot") -> None:
    """
    Release the bot's resources before the Discord client closes.

    Order matters: the health server goes first so monitors stop reporting
    healthy, the database last so in-flight writes finish.
    """
    steps: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    if bot.health_server is not None:
        steps.append(("Health Server", bot.health_server.stop))
    if bot.suggestions_db is not None:
        steps.append(("Suggestions Database", bot.suggestions_db.close_async))

    if not steps:
        logger.info("Shutdown - Nothing To Clean Up")
        return

    logger.info("Shutting Down Suggestion Bot", [
        ("Steps", ", ".join(name for name, _ in steps)),
        ("Timeout", f"{SHUTDOWN_TIMEOUT}s"),
    ])

    done = 0
    try:
        async with asyncio.timeout(SHUTDOWN_TIMEOUT):
            for name, step in steps:
                done += await _run_step(name, step)
    except TimeoutError:
        logger.warning("Shutdown Timed Out", [
            ("Completed", f"{done}/{len(steps)}"),
            ("Timeout", f"{SHUTDOWN_TIMEOUT}s"),
        ])
        return

    logger.tree("Shutdown Complete", [
        ("Completed", f"{done}/{len(steps)}"),
    ], emoji="👋")


__all__ = ["shutdown_handler"]
