"""
Suggestion Bot - Panels Database Mixin
======================================

One tracked intake panel message per channel.
"""

import asyncio
from typing import Optional

from src.models import Panel


class PanelsMixin:
    """Mixin for panel message tracking."""

    def get_panel(self, channel_id: int) -> Optional[Panel]:
        """Get the tracked panel for a channel."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                "SELECT channel_id, message_id, updated_at FROM panels WHERE channel_id = ?",
                (channel_id,)
            )
            row = cursor.fetchone()
            if not row:
                return None
            return Panel(channel_id=row[0], message_id=row[1], updated_at=row[2])

    async def get_panel_async(self, channel_id: int) -> Optional[Panel]:
        """Async wrapper for get_panel."""
        return await asyncio.to_thread(self.get_panel, channel_id)

    def set_panel(self, channel_id: int, message_id: int) -> None:
        """Track a panel message, replacing any previous one for the channel."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                """INSERT INTO panels (channel_id, message_id, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(channel_id) DO UPDATE SET
                       message_id = excluded.message_id,
                       updated_at = CURRENT_TIMESTAMP""",
                (channel_id, message_id)
            )
            conn.commit()

    async def set_panel_async(self, channel_id: int, message_id: int) -> None:
        """Async wrapper for set_panel."""
        await asyncio.to_thread(self.set_panel, channel_id, message_id)

    def delete_panel(self, channel_id: int) -> bool:
        """Stop tracking a channel's panel."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute("DELETE FROM panels WHERE channel_id = ?", (channel_id,))
            conn.commit()
            return cursor.rowcount > 0

    async def delete_panel_async(self, channel_id: int) -> bool:
        """Async wrapper for delete_panel."""
        return await asyncio.to_thread(self.delete_panel, channel_id)
