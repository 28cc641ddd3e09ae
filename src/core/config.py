"""
Suggestion Bot - Configuration Module
=====================================

Environment configuration, startup validation and the admin role check.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.core.logger import logger


# =============================================================================
# Startup Validation
# =============================================================================

class ConfigValidationError(Exception):
    """The environment cannot run the bot; raised before connecting."""


@dataclass
class ConfigValidationResult:
    """Problems found in the environment, grouped by severity."""
    missing_required: list[str] = field(default_factory=list)
    missing_optional: list[str] = field(default_factory=list)
    invalid_format: list[tuple[str, str]] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.missing_required and not self.invalid_format

    def summary(self) -> str:
        parts = []
        if self.missing_required:
            parts.append(f"missing {', '.join(self.missing_required)}")
        if self.invalid_format:
            parts.append(f"malformed {', '.join(var for var, _ in self.invalid_format)}")
        return "; ".join(parts)


# The bot refuses to start without these
REQUIRED_ENV_VARS: tuple[str, ...] = ("DISCORD_TOKEN", "CHANNEL_ID")

# name -> what falls back to a default when unset
OPTIONAL_ENV_VARS: dict[str, str] = {
    "GUILD_ID": "Guild for instant command sync and custom vote emojis",
    "ADMIN_ROLE_IDS": "Roles allowed to manage suggestions",
    "UPVOTE_EMOJI_NAME": "Custom upvote emoji name",
    "DOWNVOTE_EMOJI_NAME": "Custom downvote emoji name",
    "DB_PATH": "SQLite database path",
    "TIMEZONE": "Timezone for submission and note dates",
    "HEALTH_PORT": "Health check server port (0 disables)",
}

NUMERIC_ID_VARS: tuple[str, ...] = ("CHANNEL_ID", "GUILD_ID")

MAX_PORT = 65535


def _format_problem(var: str) -> Optional[str]:
    """Why a set variable cannot be used, or None when it is fine."""
    value = os.getenv(var, "").strip()
    if not value:
        return None
    if var in NUMERIC_ID_VARS and not value.isdigit():
        return "Must be a numeric Discord ID"
    if var == "HEALTH_PORT" and not (value.isdigit() and int(value) <= MAX_PORT):
        return f"Must be a port number between 0 and {MAX_PORT}"
    if var == "TIMEZONE":
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            return f"Unknown timezone '{value}'"
    return None


def validate_config() -> ConfigValidationResult:
    """
    Check the environment without raising.

    Required variables must be set, numeric IDs must be digits, the admin
    role list must parse, TIMEZONE must name a known zone and HEALTH_PORT
    must be a port number. Unset optional
    variables are only reported.
    """
    result = ConfigValidationResult()

    result.missing_required = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    result.missing_optional = [var for var in OPTIONAL_ENV_VARS if not os.getenv(var)]

    for var in (*NUMERIC_ID_VARS, "TIMEZONE", "HEALTH_PORT"):
        problem = _format_problem(var)
        if problem:
            result.invalid_format.append((var, problem))

    if parse_id_list(_raw_admin_roles()) is None:
        result.invalid_format.append(("ADMIN_ROLE_IDS", "Must be comma-separated numeric role IDs"))

    return result


def validate_and_log_config() -> None:
    """
    Log every configuration problem, then fail if any is fatal.

    Raises:
        ConfigValidationError: A required variable is missing or a value is malformed.
    """
    result = validate_config()

    for var in result.missing_required:
        logger.error("Required Setting Missing", [
            ("Variable", var),
            ("Fix", f"Set {var} in .env"),
        ])
    for var, reason in result.invalid_format:
        logger.error("Setting Malformed", [
            ("Variable", var),
            ("Reason", reason),
        ])

    if not result.valid:
        raise ConfigValidationError(result.summary())

    if result.missing_optional:
        logger.info("Optional Settings Using Defaults", [
            ("Variables", ", ".join(result.missing_optional)),
        ])
    if not _raw_admin_roles():
        logger.warning("No Admin Roles Configured", [
            ("Impact", "Nobody can use /suggest manage or /suggest panel"),
            ("Fix", "Set ADMIN_ROLE_IDS in .env"),
        ])

    configured = len(OPTIONAL_ENV_VARS) - len(result.missing_optional)
    logger.success("Configuration Valid", [
        ("Required", ", ".join(REQUIRED_ENV_VARS)),
        ("Optional Set", f"{configured}/{len(OPTIONAL_ENV_VARS)}"),
    ])


# =============================================================================
# Loaders
# =============================================================================

def _raw_admin_roles() -> str:
    # ADMIN_ROLES is the older name of the same setting
    return os.getenv("ADMIN_ROLE_IDS") or os.getenv("ADMIN_ROLES") or ""


def parse_id_list(raw: str) -> Optional[list[int]]:
    """
    Parse a comma-separated list of Discord IDs.

    Returns:
        List of IDs (empty for blank input), or None if any entry is not numeric.
    """
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit():
            return None
        ids.append(int(part))
    return ids


def _load_optional_id(env_var: str) -> Optional[int]:
    """Numeric ID from env_var, or None when unset or malformed."""
    value = os.getenv(env_var, "").strip()
    return int(value) if value.isdigit() else None


def _load_port(env_var: str, default: int) -> int:
    """Port number from env_var; default when unset or unusable."""
    value = os.getenv(env_var, "").strip()
    if not value:
        return default
    if value.isdigit() and int(value) <= MAX_PORT:
        return int(value)
    logger.warning(f"Ignoring Malformed {env_var}", [
        ("Value", value),
        ("Default", str(default)),
    ])
    return default


def _load_admin_role_ids() -> frozenset[int]:
    ids = parse_id_list(_raw_admin_roles())
    if ids is None:
        logger.warning("Ignoring Malformed ADMIN_ROLE_IDS", [
            ("Expected", "Comma-separated role IDs"),
        ])
        return frozenset()
    return frozenset(ids)


def _load_timezone() -> ZoneInfo:
    name = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown TIMEZONE - falling back to default", [
            ("Value", name),
            ("Default", DEFAULT_TIMEZONE),
        ])
        return ZoneInfo(DEFAULT_TIMEZONE)


# =============================================================================
# Timezone & Date Formatting
# =============================================================================

DEFAULT_TIMEZONE = "Australia/Brisbane"

# Single source of truth for rendered dates across the codebase
BOT_TZ: ZoneInfo = _load_timezone()

# Footer date on suggestion embeds, e.g. "19/10/2026 14:05"
SUBMISSION_DATE_FORMAT: str = os.getenv("SUBMISSION_DATE_FORMAT", "%d/%m/%Y %H:%M")

# Header line of admin notes, e.g. "Mon, 19 Oct 2026, 02:05:09 PM AEST"
NOTE_DATE_FORMAT: str = os.getenv("NOTE_DATE_FORMAT", "%a, %d %b %Y, %I:%M:%S %p %Z")


# =============================================================================
# Discord IDs (loaded from environment)
# =============================================================================

GUILD_ID: Optional[int] = _load_optional_id("GUILD_ID")
SUGGESTION_CHANNEL_ID: Optional[int] = _load_optional_id("CHANNEL_ID")
ADMIN_ROLE_IDS: frozenset[int] = _load_admin_role_ids()

UPVOTE_EMOJI_NAME: Optional[str] = os.getenv("UPVOTE_EMOJI_NAME") or None
DOWNVOTE_EMOJI_NAME: Optional[str] = os.getenv("DOWNVOTE_EMOJI_NAME") or None


# =============================================================================
# Storage & Services
# =============================================================================

DB_PATH: Path = Path(os.getenv("DB_PATH", "data/suggestions.db"))
DATABASE_TIMEOUT: float = 30.0  # SQLite connection timeout (seconds)

DEFAULT_HEALTH_PORT = 8080
HEALTH_PORT: int = _load_port("HEALTH_PORT", DEFAULT_HEALTH_PORT)  # 0 disables the server


# =============================================================================
# Discord API Limits
# =============================================================================

DISCORD_EMBED_FIELD_LIMIT: int = 1024  # Max embed field value length
DISCORD_EMBED_TITLE_LIMIT: int = 256  # Max embed title length
DISCORD_MODAL_SHORT_LIMIT: int = 100  # Max length for short modal inputs
DISCORD_MODAL_PARAGRAPH_LIMIT: int = 1000  # Max length kept for paragraph inputs


# =============================================================================
# Role Check Helper
# =============================================================================

def has_admin_role(member, admin_role_ids: Optional[frozenset[int]] = None) -> bool:
    """
    Check if a member may manage suggestions.

    Args:
        member: Discord Member or User object
        admin_role_ids: Role IDs to accept (defaults to ADMIN_ROLE_IDS)

    Returns:
        True if the member holds one of the admin roles

    Role membership is the only gate; guild permissions such as
    Administrator are not consulted. Users outside a guild (DMs) never pass.
    """
    import discord

    if not isinstance(member, discord.Member):
        return False

    role_ids = ADMIN_ROLE_IDS if admin_role_ids is None else admin_role_ids
    return any(role.id in role_ids for role in member.roles)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Validation
    "ConfigValidationError",
    "ConfigValidationResult",
    "validate_config",
    "validate_and_log_config",
    "parse_id_list",
    # Timezone & formats
    "BOT_TZ",
    "DEFAULT_TIMEZONE",
    "SUBMISSION_DATE_FORMAT",
    "NOTE_DATE_FORMAT",
    # Discord IDs
    "GUILD_ID",
    "SUGGESTION_CHANNEL_ID",
    "ADMIN_ROLE_IDS",
    "UPVOTE_EMOJI_NAME",
    "DOWNVOTE_EMOJI_NAME",
    # Storage & services
    "DB_PATH",
    "DATABASE_TIMEOUT",
    "DEFAULT_HEALTH_PORT",
    "HEALTH_PORT",
    # Discord API limits
    "DISCORD_EMBED_FIELD_LIMIT",
    "DISCORD_EMBED_TITLE_LIMIT",
    "DISCORD_MODAL_SHORT_LIMIT",
    "DISCORD_MODAL_PARAGRAPH_LIMIT",
    # Role check
    "has_admin_role",
]
