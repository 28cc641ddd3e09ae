"""
Suggestion Bot - Entry Point
============================

Starts the suggestion bot as a single process.

Startup order:
1. Load .env (config.py reads the environment at import time)
2. Take the instance lock so two bots never tally the same reactions
3. Validate configuration
4. Run the Discord client until SIGINT / SIGTERM / SIGHUP

Usage:
    python main.py

Environment Variables:
    DISCORD_TOKEN: Required. Bot token.
    CHANNEL_ID: Required. Channel suggestions are posted in.
"""

import fcntl
import os
import signal
import sys
import tempfile
from pathlib import Path
from typing import NoReturn

from dotenv import load_dotenv
load_dotenv()

from src.core.logger import logger
from src.core.config import (
    ConfigValidationError,
    DB_PATH,
    SUGGESTION_CHANNEL_ID,
    validate_and_log_config,
)
from src.bot import SuggestionBot


# =============================================================================
# Constants
# =============================================================================

LOCK_FILE_PATH = Path(tempfile.gettempdir()) / "suggestion_bot.lock"


# =============================================================================
# Instance Lock
# =============================================================================

def acquire_lock() -> int:
    """
    Hold an exclusive flock on LOCK_FILE_PATH for the life of the process.

    The kernel drops the lock when the process exits, crash included, so a
    stale lock file never blocks a restart.

    Returns:
        The open lock file descriptor.

    Raises:
        SystemExit: If the file cannot be opened or another bot holds the lock.
    """
    try:
        fd = os.open(LOCK_FILE_PATH, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as e:
        logger.error("Cannot Open Instance Lock", [
            ("Path", str(LOCK_FILE_PATH)),
            ("Error", str(e)),
        ])
        sys.exit(1)

    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        holder = _read_lock_holder(fd)
        os.close(fd)
        logger.error("🔒 Suggestion Bot Already Running", [
            ("Holder PID", holder),
            ("Lock File", str(LOCK_FILE_PATH)),
        ])
        sys.exit(1)

    os.ftruncate(fd, 0)
    os.write(fd, str(os.getpid()).encode())
    logger.info("🔒 Instance Lock Held", [
        ("PID", str(os.getpid())),
    ])
    return fd


def _read_lock_holder(fd: int) -> str:
    """PID written by the process holding the lock, or 'Unknown'."""
    try:
        os.lseek(fd, 0, os.SEEK_SET)
        return os.read(fd, 32).decode().strip() or "Unknown"
    except (OSError, UnicodeDecodeError):
        return "Unknown"


# =============================================================================
# Configuration
# =============================================================================

def load_configuration() -> str:
    """
    Validate the environment and return the bot token.

    Raises:
        SystemExit: If a required variable is missing or malformed.
    """
    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Startup Aborted - Invalid Configuration", [
            ("Error", str(e)),
            ("Fix", "Edit .env and restart"),
        ])
        sys.exit(1)
    return os.environ["DISCORD_TOKEN"]


# =============================================================================
# Signals
# =============================================================================

def _install_signal_handlers() -> None:
    """
    Turn SIGTERM / SIGHUP into SystemExit.

    Unwinding bot.run() closes the client, which runs the shutdown handler.
    SIGINT already arrives as KeyboardInterrupt.
    """
    def _exit(signum: int, frame) -> None:
        logger.info("Stop Signal Received", [
            ("Signal", signal.Signals(signum).name),
        ])
        sys.exit(0)

    for name in ("SIGTERM", "SIGHUP"):
        if hasattr(signal, name):
            signal.signal(getattr(signal, name), _exit)


# =============================================================================
# Main
# =============================================================================

def main() -> NoReturn:
    """Run the bot; always exits via SystemExit."""
    lock_fd = acquire_lock()
    token = load_configuration()
    _install_signal_handlers()

    logger.tree("Starting Suggestion Bot", [
        ("Channel", str(SUGGESTION_CHANNEL_ID)),
        ("Database", str(DB_PATH)),
        ("PID", str(os.getpid())),
        ("Run ID", logger.run_id),
    ], emoji="💡")

    exit_code = 0
    try:
        SuggestionBot().run(token)
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted From Keyboard")
    except Exception as e:
        logger.exception("💥 Bot Crashed", [
            ("Error Type", type(e).__name__),
            ("Error", str(e)),
        ])
        exit_code = 1
    finally:
        os.close(lock_fd)
        logger.info("🛑 Suggestion Bot Stopped")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
