"""
Suggestion Bot - Slash Commands Package
=======================================

Discord slash commands for the suggestion workflow.

Available Commands:
- /suggest create - Open the suggestion form
- /suggest manage - Set or clear a suggestion's status (admin only)
- /suggest panel - Post or replace the intake panel (admin only)
"""

from src.commands.suggest import SuggestCog

__all__ = [
    "SuggestCog",
]
