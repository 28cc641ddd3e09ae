"""
Suggestion Bot - Combined Suggestions Database
==============================================

SQLite database combining all mixins for suggestion management.
"""

from pathlib import Path
from typing import Union

from src.services.suggestions.db.core import DatabaseCore
from src.services.suggestions.db.suggestions import SuggestionsMixin
from src.services.suggestions.db.panels import PanelsMixin


class SuggestionsDatabase(
    SuggestionsMixin,
    PanelsMixin,
    DatabaseCore
):
    """
    Complete suggestions database with all functionality.

    Inherits from:
    - DatabaseCore: Connection handling, schema, migrations
    - SuggestionsMixin: Suggestion rows, status and tally updates
    - PanelsMixin: Per-channel panel message tracking
    """

    def __init__(self, db_path: Union[str, Path] = "data/suggestions.db") -> None:
        """Initialize database with all mixins."""
        super().__init__(db_path)


__all__ = ["SuggestionsDatabase"]
