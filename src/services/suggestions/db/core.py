"""
Suggestion Bot - Database Core
==============================

Connection, schema and versioning shared by the database mixins.

One long-lived sqlite3 connection in WAL mode, guarded by a threading.Lock.
Mixins run their queries under that lock; the *_async twins push the call
onto a worker thread with asyncio.to_thread so the event loop never blocks.
"""

import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from src.core.logger import logger
from src.core.config import DATABASE_TIMEOUT


# =============================================================================
# Schema
# =============================================================================

# Bump when a step is added to MIGRATIONS
SCHEMA_VERSION = 3

SCHEMA = (
    """CREATE TABLE IF NOT EXISTS schema_version (
           id INTEGER PRIMARY KEY CHECK (id = 1),
           version INTEGER NOT NULL
       )""",
    # One row per submission; status/notes NULL while open
    """CREATE TABLE IF NOT EXISTS suggestions (
           id INTEGER PRIMARY KEY AUTOINCREMENT,
           user_id INTEGER NOT NULL,
           type TEXT NOT NULL,
           game_name TEXT,
           map_name TEXT,
           suggestion TEXT,
           reason TEXT,
           title TEXT,
           detail TEXT,
           status TEXT,
           notes TEXT,
           submitted_at TEXT NOT NULL,
           upvotes INTEGER NOT NULL DEFAULT 0,
           downvotes INTEGER NOT NULL DEFAULT 0,
           message_id INTEGER
       )""",
    # One tracked intake panel per channel
    """CREATE TABLE IF NOT EXISTS panels (
           channel_id INTEGER PRIMARY KEY,
           message_id INTEGER NOT NULL,
           updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
       )""",
)

Migration = Union[str, Callable[[sqlite3.Connection], None]]


def _adopt_legacy_columns(conn: sqlite3.Connection) -> None:
    """Rename the first version's submission_date column to submitted_at."""
    columns = {row[1] for row in conn.execute("PRAGMA table_info(suggestions)")}
    if "submission_date" in columns and "submitted_at" not in columns:
        conn.execute("ALTER TABLE suggestions RENAME COLUMN submission_date TO submitted_at")
        logger.info("Legacy Suggestions Table Adopted", [
            ("Renamed", "submission_date -> submitted_at"),
        ])


# version -> steps that bring a database from version - 1 up to it
MIGRATIONS: dict[int, tuple[Migration, ...]] = {
    2: ("CREATE INDEX IF NOT EXISTS idx_suggestions_message ON suggestions(message_id)",),
    3: (_adopt_legacy_columns,),
}


class DatabaseCore:
    """Connection handling and schema setup for SuggestionsDatabase."""

    SCHEMA_VERSION = SCHEMA_VERSION

    def __init__(self, db_path: Union[str, Path] = "data/suggestions.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._connection: Optional[sqlite3.Connection] = None

        self._connect()
        self._init_database()

    # =========================================================================
    # Connection
    # =========================================================================

    def _connect(self) -> None:
        connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=DATABASE_TIMEOUT,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        self._connection = connection

        logger.tree("Suggestions Database Opened", [
            ("Path", str(self.db_path)),
            ("Journal", "WAL"),
        ], emoji="🗄️")

    def _get_connection(self) -> sqlite3.Connection:
        """The shared connection, reopened if close() was called."""
        if self._connection is None:
            self._connect()
        return self._connection

    def close(self) -> None:
        """Checkpoint the WAL into the main file and close the connection."""
        with self._lock:
            connection, self._connection = self._connection, None
            if connection is None:
                return
            try:
                connection.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            except sqlite3.Error as e:
                logger.error("WAL Checkpoint Failed On Close", [
                    ("Path", str(self.db_path)),
                    ("Error", str(e)),
                ])
            finally:
                connection.close()

        logger.tree("Suggestions Database Closed", [
            ("Path", str(self.db_path)),
        ], emoji="🗄️")

    async def close_async(self) -> None:
        await asyncio.to_thread(self.close)

    def health_check(self) -> bool:
        """True if a trivial query succeeds."""
        with self._lock:
            try:
                self._get_connection().execute("SELECT 1").fetchone()
            except sqlite3.Error as e:
                logger.warning("Database Health Check Failed", [("Error", str(e))])
                return False
            return True

    async def health_check_async(self) -> bool:
        return await asyncio.to_thread(self.health_check)

    # =========================================================================
    # Schema
    # =========================================================================

    def _init_database(self) -> None:
        """Create tables if missing and apply pending migrations."""
        with self._lock:
            conn = self._get_connection()
            for statement in SCHEMA:
                conn.execute(statement)

            row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
            current = row[0] if row else 0

            applied = []
            for version in range(current + 1, SCHEMA_VERSION + 1):
                for step in MIGRATIONS.get(version, ()):
                    if callable(step):
                        step(conn)
                    else:
                        conn.execute(step)
                applied.append(version)

            if applied:
                conn.execute(
                    "INSERT INTO schema_version (id, version) VALUES (1, ?) "
                    "ON CONFLICT(id) DO UPDATE SET version = excluded.version",
                    (SCHEMA_VERSION,)
                )
            conn.commit()

        if applied:
            logger.tree("Database Schema Updated", [
                ("From Version", str(current)),
                ("To Version", str(SCHEMA_VERSION)),
            ], emoji="🗳️")
