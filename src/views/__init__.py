"""
Suggestion Bot - Views Package
==============================

Discord UI Views and Modals used across the bot.
"""

from .suggestions import (
    GameSuggestionModal,
    CommunitySuggestionModal,
    SuggestionPanelView,
    build_suggestion_modal,
)

__all__ = [
    "GameSuggestionModal",
    "CommunitySuggestionModal",
    "SuggestionPanelView",
    "build_suggestion_modal",
]
