"""
Suggestion Bot - Suggestion Models
==================================

Dataclass and enum definitions for suggestions, their status and votes.

The status of a suggestion is a tagged variant rather than a nullable string:

    OpenStatus()                      -> voting allowed, no decision yet
    ClosedStatus(decision, notes)     -> decided, voting frozen

Transitions between them are pure functions driven by a StatusCommand:

    Decide(decision, note)  : OPEN | CLOSED(any) -> CLOSED(decision)
    Clear()                 : OPEN | CLOSED(any) -> OPEN
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
from zoneinfo import ZoneInfo


# =============================================================================
# Enums
# =============================================================================

class SuggestionKind(str, Enum):
    """Kind of suggestion; picks which content fields are populated."""
    GAME = "game"
    COMMUNITY = "community"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Decision(str, Enum):
    """Administrator decision that closes a suggestion."""
    UNDER_CONSIDERATION = "under_consideration"
    IMPLEMENTED = "implemented"
    NOT_HAPPENING = "not_happening"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class VoteKind(str, Enum):
    """The two tracked vote reactions."""
    UP = "up"
    DOWN = "down"

    @property
    def opposite(self) -> "VoteKind":
        return VoteKind.DOWN if self is VoteKind.UP else VoteKind.UP


# Content fields per kind; the other kind's fields are always None
GAME_FIELDS: tuple[str, ...] = ("game_name", "map_name", "suggestion", "reason")
COMMUNITY_FIELDS: tuple[str, ...] = ("title", "detail")

KIND_FIELDS: dict[SuggestionKind, tuple[str, ...]] = {
    SuggestionKind.GAME: GAME_FIELDS,
    SuggestionKind.COMMUNITY: COMMUNITY_FIELDS,
}


# =============================================================================
# Status Variant
# =============================================================================

@dataclass(frozen=True)
class OpenStatus:
    """No decision yet; voting is open."""

    @property
    def is_closed(self) -> bool:
        return False


@dataclass(frozen=True)
class ClosedStatus:
    """Decided by an administrator; voting is frozen."""
    decision: Decision
    notes: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return True


SuggestionStatus = Union[OpenStatus, ClosedStatus]

OPEN = OpenStatus()


def status_from_row(status: Optional[str], notes: Optional[str]) -> SuggestionStatus:
    """
    Build a status from the nullable status/notes columns.

    Accepts the older free-text values ("under consideration", "Implemented")
    as well as the enum values. Unknown or "clear" values read as open.
    """
    if not status:
        return OPEN
    normalized = status.strip().lower().replace(" ", "_")
    try:
        decision = Decision(normalized)
    except ValueError:
        return OPEN
    return ClosedStatus(decision=decision, notes=notes or None)


def status_to_row(status: SuggestionStatus) -> tuple[Optional[str], Optional[str]]:
    """Flatten a status into (status, notes) column values."""
    if isinstance(status, ClosedStatus):
        return status.decision.value, status.notes
    return None, None


# =============================================================================
# Status Commands & Transitions
# =============================================================================

@dataclass(frozen=True)
class Decide:
    """Close (or re-close) a suggestion with a decision and public note."""
    decision: Decision
    note: str = ""


@dataclass(frozen=True)
class Clear:
    """Re-open a suggestion, dropping decision and notes."""


StatusCommand = Union[Decide, Clear]

CLEAR_VALUE = "clear"


def parse_status_command(value: str, note: Optional[str] = None) -> StatusCommand:
    """
    Parse a slash-command status choice into a StatusCommand.

    Raises:
        ValueError: If the value is neither a decision nor "clear".
    """
    normalized = value.strip().lower().replace(" ", "_")
    if normalized == CLEAR_VALUE:
        return Clear()
    return Decide(decision=Decision(normalized), note=note or "")


def format_decision_note(note: str, actor_name: str, at: datetime, tz: ZoneInfo, date_format: str) -> str:
    """Timestamp and attribute an admin note, stored verbatim after the header."""
    stamp = at.astimezone(tz).strftime(date_format)
    return f"{stamp}\n{actor_name} response:\n{note}"


def next_status(
    current: SuggestionStatus,
    command: StatusCommand,
    *,
    actor_name: str,
    at: datetime,
    tz: ZoneInfo,
    date_format: str,
) -> SuggestionStatus:
    """
    Compute the status that results from applying a command.

    Every (state, command) pair is defined: Decide always lands in CLOSED with
    fresh notes, Clear always lands in OPEN.
    """
    if isinstance(command, Decide):
        return ClosedStatus(
            decision=command.decision,
            notes=format_decision_note(command.note, actor_name, at, tz, date_format),
        )
    if isinstance(command, Clear):
        return OPEN
    raise TypeError(f"Unknown status command: {command!r}")


# =============================================================================
# Vote Tally
# =============================================================================

@dataclass(frozen=True)
class VoteTally:
    """Cached vote counters, derived from the live reaction snapshot."""
    up: int = 0
    down: int = 0

    def __post_init__(self) -> None:
        if self.up < 0 or self.down < 0:
            raise ValueError("Vote counts cannot be negative")

    @property
    def total(self) -> int:
        return self.up + self.down

    @property
    def opinion(self) -> int:
        return self.up - self.down

    def percentage(self, kind: VoteKind) -> float:
        if self.total == 0:
            return 0.0
        count = self.up if kind is VoteKind.UP else self.down
        return count / self.total * 100

    @classmethod
    def from_snapshot(cls, up_holders: set[int], down_holders: set[int], exclude: Optional[int] = None) -> "VoteTally":
        """Count holders of each reaction, leaving out the bot's own seed reaction."""
        return cls(
            up=len(up_holders - {exclude}),
            down=len(down_holders - {exclude}),
        )


# =============================================================================
# Suggestion Record
# =============================================================================

@dataclass(frozen=True)
class Suggestion:
    """A persisted suggestion."""
    id: Optional[int]
    author_id: int
    kind: SuggestionKind
    submitted_at: datetime
    game_name: Optional[str] = None
    map_name: Optional[str] = None
    suggestion: Optional[str] = None
    reason: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    status: SuggestionStatus = field(default=OPEN)
    tally: VoteTally = field(default_factory=VoteTally)
    message_id: Optional[int] = None

    @classmethod
    def new(
        cls,
        kind: SuggestionKind,
        author_id: int,
        fields: dict[str, Optional[str]],
        submitted_at: Optional[datetime] = None,
    ) -> "Suggestion":
        """
        Create an unsaved, open suggestion with zero votes and no artifact.

        Raises:
            ValueError: If fields from the other kind's group are supplied.
        """
        allowed = KIND_FIELDS[kind]
        unexpected = [name for name, value in fields.items() if name not in allowed and value is not None]
        if unexpected:
            raise ValueError(f"Fields not valid for {kind.value} suggestions: {', '.join(unexpected)}")

        return cls(
            id=None,
            author_id=author_id,
            kind=kind,
            submitted_at=submitted_at or datetime.now(timezone.utc),
            **{name: fields.get(name) for name in allowed},
        )

    @property
    def is_closed(self) -> bool:
        return self.status.is_closed

    @property
    def decision(self) -> Optional[Decision]:
        return self.status.decision if isinstance(self.status, ClosedStatus) else None

    @property
    def notes(self) -> Optional[str]:
        return self.status.notes if isinstance(self.status, ClosedStatus) else None

    def with_status(self, status: SuggestionStatus) -> "Suggestion":
        return replace(self, status=status)

    def with_tally(self, tally: VoteTally) -> "Suggestion":
        return replace(self, tally=tally)


# =============================================================================
# Panel
# =============================================================================

@dataclass(frozen=True)
class Panel:
    """The single tracked intake panel message of a channel."""
    channel_id: int
    message_id: int
    updated_at: Optional[str] = None
