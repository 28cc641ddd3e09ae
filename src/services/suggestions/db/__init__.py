"""
Suggestion Bot - Suggestions Database Package
=============================================

Modular SQLite database with mixins for different features.
"""

from src.services.suggestions.db.database import SuggestionsDatabase
from src.services.suggestions.db.suggestions import CorruptRowError, row_to_suggestion

__all__ = [
    "CorruptRowError",
    "SuggestionsDatabase",
    "row_to_suggestion",
]
