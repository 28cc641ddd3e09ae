"""
Suggestion Bot - Suggestions Service Package
============================================

Storage, rendering, vote reconciliation and status transitions for
suggestions.
"""

from src.services.suggestions.db import SuggestionsDatabase
from src.services.suggestions.errors import (
    ArtifactSyncError,
    ExternalServiceError,
    StorageError,
    SuggestionError,
    SuggestionForbidden,
    SuggestionNotFound,
)
from src.services.suggestions.gateway import DiscordArtifactGateway
from src.services.suggestions.reconciler import (
    ReactionAction,
    ReactionEvent,
    ReactionReconciler,
    ReconcileOutcome,
)
from src.services.suggestions.render import (
    build_panel_embed,
    build_suggestion_embed,
    render_suggestion,
)
from src.services.suggestions.service import SuggestionService
from src.services.suggestions.transitions import StatusTransitionManager

__all__ = [
    # Storage
    "SuggestionsDatabase",
    # Errors
    "SuggestionError",
    "SuggestionNotFound",
    "SuggestionForbidden",
    "ExternalServiceError",
    "StorageError",
    "ArtifactSyncError",
    # Discord
    "DiscordArtifactGateway",
    "build_suggestion_embed",
    "build_panel_embed",
    "render_suggestion",
    # Workflow
    "ReactionAction",
    "ReactionEvent",
    "ReactionReconciler",
    "ReconcileOutcome",
    "StatusTransitionManager",
    "SuggestionService",
]
