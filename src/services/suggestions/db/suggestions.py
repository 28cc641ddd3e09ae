"""
Suggestion Bot - Suggestions Database Mixin
===========================================

Suggestion rows: insert, lookup by id or message, status and tally updates.
"""

import asyncio
import sqlite3
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from src.models import (
    Suggestion,
    SuggestionKind,
    SuggestionStatus,
    VoteTally,
    status_from_row,
    status_to_row,
)


# Rows written by the first version of the bot: local Brisbane wall time
LEGACY_DATE_FORMAT = "%d/%m/%Y %H:%M"
LEGACY_TIMEZONE = ZoneInfo("Australia/Brisbane")


class CorruptRowError(Exception):
    """A stored suggestion row cannot be turned into a Suggestion."""

    def __init__(self, row_id: object, reason: str) -> None:
        super().__init__(f"Suggestion row {row_id} is unreadable: {reason}")
        self.row_id = row_id


def _parse_submitted_at(value: str) -> datetime:
    """Parse a stored submission time (ISO UTC, or the legacy local format)."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = datetime.strptime(value, LEGACY_DATE_FORMAT).replace(tzinfo=LEGACY_TIMEZONE)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def row_to_suggestion(row: sqlite3.Row) -> Suggestion:
    """
    Convert a suggestions row to a Suggestion.

    Raises:
        CorruptRowError: A column is missing or holds a value that cannot be parsed
    """
    try:
        return Suggestion(
            id=row["id"],
            author_id=int(row["user_id"]),
            kind=SuggestionKind(row["type"]),
            submitted_at=_parse_submitted_at(row["submitted_at"]),
            game_name=row["game_name"],
            map_name=row["map_name"],
            suggestion=row["suggestion"],
            reason=row["reason"],
            title=row["title"],
            detail=row["detail"],
            status=status_from_row(row["status"], row["notes"]),
            tally=VoteTally(up=row["upvotes"] or 0, down=row["downvotes"] or 0),
            message_id=int(row["message_id"]) if row["message_id"] is not None else None,
        )
    except (ValueError, TypeError, KeyError, IndexError) as e:
        raise CorruptRowError(row["id"], str(e)) from e


class SuggestionsMixin:
    """Mixin for suggestion record operations."""

    def insert_suggestion(self, record: Suggestion) -> int:
        """Insert a new suggestion and return its assigned ID."""
        status, notes = status_to_row(record.status)
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                """INSERT INTO suggestions (
                       user_id, type, game_name, map_name, suggestion, reason,
                       title, detail, status, notes, submitted_at,
                       upvotes, downvotes, message_id
                   ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.author_id,
                    record.kind.value,
                    record.game_name,
                    record.map_name,
                    record.suggestion,
                    record.reason,
                    record.title,
                    record.detail,
                    status,
                    notes,
                    record.submitted_at.astimezone(timezone.utc).isoformat(),
                    record.tally.up,
                    record.tally.down,
                    record.message_id,
                )
            )
            conn.commit()
            return cursor.lastrowid

    async def insert_suggestion_async(self, record: Suggestion) -> int:
        """Async wrapper for insert_suggestion."""
        return await asyncio.to_thread(self.insert_suggestion, record)

    def get_suggestion(self, suggestion_id: int) -> Optional[Suggestion]:
        """Get a suggestion by ID."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM suggestions WHERE id = ?", (suggestion_id,))
            row = cursor.fetchone()
            return row_to_suggestion(row) if row else None

    async def get_suggestion_async(self, suggestion_id: int) -> Optional[Suggestion]:
        """Async wrapper for get_suggestion."""
        return await asyncio.to_thread(self.get_suggestion, suggestion_id)

    def get_suggestion_by_message(self, message_id: int) -> Optional[Suggestion]:
        """Get the suggestion rendered by a message."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM suggestions WHERE message_id = ?", (message_id,))
            row = cursor.fetchone()
            return row_to_suggestion(row) if row else None

    async def get_suggestion_by_message_async(self, message_id: int) -> Optional[Suggestion]:
        """Async wrapper for get_suggestion_by_message."""
        return await asyncio.to_thread(self.get_suggestion_by_message, message_id)

    def set_message_id(self, suggestion_id: int, message_id: int) -> bool:
        """
        Attach the posted message to a suggestion.

        The reference is set at most once: returns False if the row is missing
        or already points at a different message.
        """
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                """UPDATE suggestions SET message_id = ?
                   WHERE id = ? AND (message_id IS NULL OR message_id = ?)""",
                (message_id, suggestion_id, message_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    async def set_message_id_async(self, suggestion_id: int, message_id: int) -> bool:
        """Async wrapper for set_message_id."""
        return await asyncio.to_thread(self.set_message_id, suggestion_id, message_id)

    def update_status(self, suggestion_id: int, status: SuggestionStatus) -> bool:
        """Persist a suggestion's status and notes. Returns False if the row is missing."""
        status_value, notes = status_to_row(status)
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE suggestions SET status = ?, notes = ? WHERE id = ?",
                (status_value, notes, suggestion_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    async def update_status_async(self, suggestion_id: int, status: SuggestionStatus) -> bool:
        """Async wrapper for update_status."""
        return await asyncio.to_thread(self.update_status, suggestion_id, status)

    def update_tally(self, suggestion_id: int, tally: VoteTally) -> bool:
        """Persist a suggestion's cached vote counters."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE suggestions SET upvotes = ?, downvotes = ? WHERE id = ?",
                (tally.up, tally.down, suggestion_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    async def update_tally_async(self, suggestion_id: int, tally: VoteTally) -> bool:
        """Async wrapper for update_tally."""
        return await asyncio.to_thread(self.update_tally, suggestion_id, tally)

    def count_suggestions(self) -> int:
        """Total number of stored suggestions."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM suggestions")
            return cursor.fetchone()[0]

    async def count_suggestions_async(self) -> int:
        """Async wrapper for count_suggestions."""
        return await asyncio.to_thread(self.count_suggestions)
