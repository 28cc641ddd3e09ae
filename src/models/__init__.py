"""
Suggestion Bot - Data Models
============================

Shared data models used across the bot.
"""

from src.models.suggestion import (
    SuggestionKind,
    Decision,
    VoteKind,
    GAME_FIELDS,
    COMMUNITY_FIELDS,
    KIND_FIELDS,
    OpenStatus,
    ClosedStatus,
    SuggestionStatus,
    OPEN,
    status_from_row,
    status_to_row,
    Decide,
    Clear,
    StatusCommand,
    parse_status_command,
    format_decision_note,
    next_status,
    VoteTally,
    Suggestion,
    Panel,
)

__all__ = [
    # Enums
    "SuggestionKind",
    "Decision",
    "VoteKind",
    "GAME_FIELDS",
    "COMMUNITY_FIELDS",
    "KIND_FIELDS",
    # Status
    "OpenStatus",
    "ClosedStatus",
    "SuggestionStatus",
    "OPEN",
    "status_from_row",
    "status_to_row",
    # Transitions
    "Decide",
    "Clear",
    "StatusCommand",
    "parse_status_command",
    "format_decision_note",
    "next_status",
    # Records
    "VoteTally",
    "Suggestion",
    "Panel",
]
