"""
Suggestion Bot - Handlers Package
=================================

Event handlers for bot lifecycle and Discord events.
"""

from src.handlers.ready import on_ready_handler
from src.handlers.reactions import on_raw_reaction_handler
from src.handlers.shutdown import shutdown_handler

__all__ = [
    "on_ready_handler",
    "on_raw_reaction_handler",
    "shutdown_handler",
]
