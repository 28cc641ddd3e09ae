"""
Suggestion Bot - Logger
=======================

Tree-style console and file logger.

Every entry is a title line followed by (key, value) branches:

    [02:05:09 PM AEST] 🗳️ Vote Tallied
      ├─ Suggestion ID: 7
      ├─ Vote: add up
      └─ Tally: +2 / -1

Features:
- Short run ID per process, shown in the session header and /health
- Timestamps in the configured timezone (TIMEZONE env var)
- One folder per day holding a full log and an errors-only log
- Folders older than LOG_RETENTION_DAYS removed at startup

Log Structure:
    logs/
    └── 2026-10-19/
        ├── Suggestions-2026-10-19.log
        └── Suggestions-Errors-2026-10-19.log
"""

import os
import re
import shutil
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# =============================================================================
# Constants
# =============================================================================

LOG_RETENTION_DAYS = 7
LOG_FILE_PREFIX = "Suggestions"

# Emojis are stripped from titles; the level emoji is prepended instead
EMOJI_PATTERN = re.compile(
    "["
    "\U0001F300-\U0001F5FF"
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "\U00002300-\U000023FF"
    "\U00002600-\U000027BF"
    "]+"
)

Details = List[Tuple[str, Any]]


def _load_timezone() -> ZoneInfo:
    """Log timezone; UTC when TIMEZONE is not a known zone."""
    try:
        return ZoneInfo(os.getenv("TIMEZONE", "Australia/Brisbane"))
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


class TreeSymbols:
    """Box-drawing characters for tree branches."""
    BRANCH = "├─"
    LAST = "└─"


# =============================================================================
# MiniTreeLogger
# =============================================================================

class MiniTreeLogger:
    """Tree-formatted logger writing to stdout and daily log files."""

    def __init__(self, logs_dir: Optional[Path] = None) -> None:
        self.run_id: str = uuid.uuid4().hex[:8]
        self._timezone = _load_timezone()

        if logs_dir is None:
            env_dir = os.getenv("LOG_DIR")
            logs_dir = Path(env_dir) if env_dir else Path(__file__).resolve().parents[2] / "logs"
        self.logs_base_dir = logs_dir
        self.logs_base_dir.mkdir(parents=True, exist_ok=True)

        self.current_date = ""
        self._rotate()
        self._cleanup_old_logs()
        self._banner(f"NEW SESSION - RUN ID: {self.run_id}")

    # =========================================================================
    # Files
    # =========================================================================

    def _rotate(self) -> bool:
        """Point the log files at today's folder. Returns True if the date changed."""
        today = datetime.now(self._timezone).strftime("%Y-%m-%d")
        if today == self.current_date:
            return False

        self.current_date = today
        self.log_dir = self.logs_base_dir / today
        self.log_dir.mkdir(exist_ok=True)
        self.log_file = self.log_dir / f"{LOG_FILE_PREFIX}-{today}.log"
        self.error_file = self.log_dir / f"{LOG_FILE_PREFIX}-Errors-{today}.log"
        return True

    def _append(self, text: str, to_error: bool = False) -> None:
        """Append text to the day's log (and error log); file errors never reach callers."""
        targets = [self.log_file, self.error_file] if to_error else [self.log_file]
        for path in targets:
            try:
                with open(path, "a", encoding="utf-8") as f:
                    f.write(text)
            except OSError as e:
                print(f"[LOG WRITE ERROR] {path}: {e}")

    def _banner(self, line: str) -> None:
        bar = "=" * 60
        self._append(f"\n{bar}\n{line}\n{self._timestamp()}\n{bar}\n\n", to_error=True)

    def _cleanup_old_logs(self) -> None:
        """Delete dated folders older than the retention period."""
        now = datetime.now(self._timezone)
        deleted = 0
        try:
            for folder in self.logs_base_dir.iterdir():
                if not folder.is_dir():
                    continue
                try:
                    folder_date = datetime.strptime(folder.name, "%Y-%m-%d").replace(tzinfo=self._timezone)
                except ValueError:
                    continue
                if (now - folder_date).days > LOG_RETENTION_DAYS:
                    shutil.rmtree(folder)
                    deleted += 1
        except OSError as e:
            print(f"[LOG CLEANUP ERROR] {e}")
            return

        if deleted:
            print(f"[LOG CLEANUP] Deleted {deleted} log folders older than {LOG_RETENTION_DAYS} days")

    # =========================================================================
    # Formatting
    # =========================================================================

    def _timestamp(self) -> str:
        return datetime.now(self._timezone).strftime("[%I:%M:%S %p %Z]")

    def _emit(self, title: str, emoji: str, lines: Iterable[str], to_error: bool) -> None:
        """Print and persist one entry: a timestamped title plus its branch lines."""
        if self._rotate():
            self._banner(f"LOG ROTATION - Continuing session {self.run_id}")

        clean_title = EMOJI_PATTERN.sub("", title).strip()
        head = f"{self._timestamp()} {emoji} {clean_title}" if emoji else f"{self._timestamp()} {clean_title}"
        entry = "\n".join([head, *lines, ""])

        print(entry)
        self._append(entry + "\n", to_error=to_error)

    @staticmethod
    def _branches(items: Details) -> List[str]:
        last = len(items) - 1
        return [
            f"  {TreeSymbols.LAST if i == last else TreeSymbols.BRANCH} {key}: {value}"
            for i, (key, value) in enumerate(items)
        ]

    def _log(self, msg: str, details: Optional[Details], emoji: str, status: str, to_error: bool) -> None:
        items = details if details else [("Status", status)]
        self._emit(msg, emoji, self._branches(items), to_error)

    # =========================================================================
    # Public API
    # =========================================================================

    def info(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, details, "ℹ️", "OK", to_error=False)

    def success(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, details, "✅", "Complete", to_error=False)

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        """Warnings also go to the errors-only file."""
        self._log(msg, details, "⚠️", "Warning", to_error=True)

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, details, "❌", "Failed", to_error=True)

    def debug(self, msg: str, details: Optional[Details] = None) -> None:
        """Only logged when the DEBUG env var is truthy."""
        if os.getenv("DEBUG", "").lower() in ("1", "true", "yes"):
            self._log(msg, details, "🔍", "Debug", to_error=False)

    def exception(self, msg: str, details: Optional[Details] = None) -> None:
        """Log as an error, then append the active traceback to both files."""
        self._log(msg, details, "💥", "Exception", to_error=True)
        self._append(traceback.format_exc() + "\n", to_error=True)

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """Log a titled block of (key, value) pairs."""
        self._emit(title, emoji, self._branches(items), to_error=False)


# =============================================================================
# Module Export
# =============================================================================

logger = MiniTreeLogger()

__all__ = ["logger", "MiniTreeLogger", "TreeSymbols"]
