"""
Suggestion Bot - Suggestion Errors
==================================

Error taxonomy for caller-initiated suggestion actions.

Each error carries the message shown to the invoking user, so commands can
surface a failure without leaking internal detail:

    SuggestionError
    ├── SuggestionNotFound      record, channel or message no longer exists
    ├── SuggestionForbidden     caller lacks the admin role
    └── ExternalServiceError    Discord or SQLite call failed
        ├── StorageError        database read/write failed
        └── ArtifactSyncError   record saved, public message not refreshed

Background reaction paths never raise these; they log and return.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from src.models import Suggestion


class SuggestionError(Exception):
    """Base class for errors surfaced to the invoking user."""

    default_message = "An error occurred while processing your request."

    def __init__(self, message: Optional[str] = None, *, user_message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class SuggestionNotFound(SuggestionError):
    """Referenced suggestion, channel or message does not exist."""
    default_message = "Suggestion not found."


class SuggestionForbidden(SuggestionError):
    """Caller lacks the required role."""
    default_message = "You do not have permission to use this command."


class ExternalServiceError(SuggestionError):
    """A Discord or storage call failed; not retried."""
    default_message = "An internal error occurred. Please try again later."


class StorageError(ExternalServiceError):
    """Database read or write failed."""
    default_message = "Error accessing the suggestion database."


class ArtifactSyncError(ExternalServiceError):
    """
    The record change was saved but the public message could not be updated.

    The record change is not rolled back; `record` holds the saved state.
    """
    default_message = "Suggestion saved, but the suggestion message could not be updated."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        record: Optional["Suggestion"] = None,
        failed_steps: Optional[list[str]] = None,
        user_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.record = record
        self.failed_steps = failed_steps or []


__all__ = [
    "SuggestionError",
    "SuggestionNotFound",
    "SuggestionForbidden",
    "ExternalServiceError",
    "StorageError",
    "ArtifactSyncError",
]
