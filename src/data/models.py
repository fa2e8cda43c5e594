"""
Family Chores: Data Models.

Chores and family members are plain immutable dataclasses. Every mutation
produces a new instance (via dataclasses.replace), so a list of chores held
by the orchestrator is a snapshot that nobody else can change underneath it.

Timestamps are epoch milliseconds, the unit the spreadsheet proxy stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNASSIGNED = "Unassigned"


class Frequency(str, Enum):
    """Recurrence rule of a chore. Values are the wire strings."""

    ONE_TIME = "One-time"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"


class SyncStatus(Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Chore:
    """A unit of recurring or one-off household work.

    weekly_days is only set for "advanced weekly" chores (WEEKLY with an
    explicit set of weekday indices, 0=Sunday..6=Saturday). Those chores
    are tracked through completion_history, one entry per completed day.
    """

    id: str
    title: str
    assignee: str = UNASSIGNED
    frequency: Frequency = Frequency.DAILY
    completed: bool = False
    created_at: int = 0
    last_completed_at: int | None = None
    completion_count: int = 0
    weekly_days: tuple[int, ...] | None = None
    due_date: int | None = None
    completion_history: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_advanced_weekly(self) -> bool:
        return self.frequency is Frequency.WEEKLY and bool(self.weekly_days)


@dataclass(frozen=True)
class FamilyMember:
    """A person chores can be assigned to. name is the join key."""

    name: str
    color: str
    avatar: str


@dataclass
class FamilyData:
    """Chores and members for one sharing code, plus where they came from."""

    chores: list[Chore] = field(default_factory=list)
    members: list[FamilyMember] = field(default_factory=list)
    source: str = "remote"            # "remote" | "cache"
    diagnostics: list[str] = field(default_factory=list)


@dataclass
class ConnectionResult:
    """Outcome of a proxy liveness probe."""

    success: bool
    message: str
