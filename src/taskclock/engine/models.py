"""
Engine Data Models

Plain dataclasses for utterances, parsed drafts, scheduled tasks and urgency
scores. Storage format belongs to whoever consumes the engine's events.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Optional
from uuid import uuid4


class Weekday(str, enum.Enum):
    """Symbolic day of the week, Sunday first."""
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @property
    def python_weekday(self) -> int:
        """Index as returned by date.weekday() (Monday == 0)."""
        return _PYTHON_WEEKDAYS.index(self)

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Weekday of a date or datetime."""
        return _PYTHON_WEEKDAYS[day.weekday()]


_PYTHON_WEEKDAYS = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)

ALL_WEEKDAYS: frozenset[Weekday] = frozenset(Weekday)
WORKWEEK: frozenset[Weekday] = frozenset(_PYTHON_WEEKDAYS[:5])
WEEKEND: frozenset[Weekday] = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})


def sorted_weekdays(days: Iterable[Weekday]) -> list[Weekday]:
    """Days in calendar order, Sunday first."""
    order = list(Weekday)
    return sorted(set(days), key=order.index)


class Priority(str, enum.Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Frequency(str, enum.Enum):
    """How often a task comes around."""
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class UrgencyBand(str, enum.Enum):
    """Coarse bucket over the continuous urgency score."""
    CRITICAL = "critical"      # 800+
    VERY_HIGH = "very_high"    # 500-799
    HIGH = "high"              # 300-499
    MEDIUM = "medium"          # 150-299
    LOW = "low"                # 50-149
    MINIMAL = "minimal"        # <50


class UrgencyLevel(str, enum.Enum):
    """Time-based urgency, independent of priority."""
    OVERDUE = "overdue"
    CRITICAL = "critical"  # < 15 min
    URGENT = "urgent"      # < 1 hour
    SOON = "soon"          # < 4 hours
    LATER = "later"
    NONE = "none"          # no due moment


@dataclass(frozen=True)
class RawUtterance:
    """A transcript as delivered by the speech recognizer."""
    text: str
    captured_at: datetime


@dataclass
class ParsedTaskDraft:
    """
    Intermediate result of parsing one utterance.

    Never persisted. The resolver turns it into a concrete due moment.
    """
    title_candidate: str
    time_of_day: Optional[time] = None
    time_specified: bool = False
    date_hint: Optional[date] = None
    day_of_month: Optional[int] = None
    is_recurring: bool = False
    recurrence_days: frozenset[Weekday] = frozenset()
    monthly: bool = False
    yearly: bool = False
    month_of_year: Optional[int] = None
    priority: Priority = Priority.MEDIUM
    source_text: str = ""

    @property
    def frequency(self) -> Frequency:
        if not self.is_recurring:
            return Frequency.ONCE
        # Monthly wins over any weekday signal in the same utterance
        if self.monthly:
            return Frequency.MONTHLY
        if self.yearly:
            return Frequency.YEARLY
        if self.recurrence_days == ALL_WEEKDAYS:
            return Frequency.DAILY
        return Frequency.WEEKLY


@dataclass
class ScheduledTask:
    """
    A task with a concrete due moment.

    Created once by the engine; afterwards only completion, uncompletion,
    edits and deletion change it.
    """
    title: str
    due_at: datetime
    is_recurring: bool = False
    recurrence_days: frozenset[Weekday] = frozenset()
    priority: Priority = Priority.MEDIUM
    frequency: Frequency = Frequency.ONCE
    day_of_month: Optional[int] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    source_utterance: Optional[str] = None
    created_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        self.recurrence_days = frozenset(self.recurrence_days)
        if bool(self.recurrence_days) != self.is_recurring:
            raise ValueError(
                "recurrence_days must be non-empty exactly when the task recurs"
            )
        if not self.is_recurring and self.frequency != Frequency.ONCE:
            raise ValueError(f"one-time task cannot have frequency {self.frequency.value}")
        if self.completed_at is not None and not self.is_completed:
            raise ValueError("completed_at is only valid on completed tasks")

    def __repr__(self) -> str:
        state = "completed" if self.is_completed else "pending"
        return f"<ScheduledTask {self.title!r} due {self.due_at:%Y-%m-%d %H:%M} [{state}]>"

    def seconds_remaining(self, now: datetime) -> float:
        """Seconds until due; negative once overdue."""
        return (self.due_at - now).total_seconds()

    def is_overdue(self, now: datetime) -> bool:
        return not self.is_completed and self.due_at < now

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for event payloads and the CLI."""
        return {
            "id": self.id,
            "title": self.title,
            "due_at": self.due_at.isoformat(),
            "is_recurring": self.is_recurring,
            "recurrence_days": [d.value for d in sorted_weekdays(self.recurrence_days)],
            "priority": self.priority.value,
            "frequency": self.frequency.value,
            "day_of_month": self.day_of_month,
            "is_completed": self.is_completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True)
class UrgencyScore:
    """Derived urgency of one task at one instant. Never persisted."""
    task_id: str
    value: float
    band: UrgencyBand
    computed_at: datetime
