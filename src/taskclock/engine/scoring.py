"""
Urgency Scorer

Dynamic priority score: base priority x frequency weight x urgency
multiplier. The multiplier climbs as the due moment approaches and keeps
climbing once it has passed. Every view ranks and colors tasks with this
one table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from taskclock.engine.models import (
    Frequency,
    Priority,
    ScheduledTask,
    UrgencyBand,
    UrgencyLevel,
    UrgencyScore,
)

BASE_PRIORITY_SCORES = {
    Priority.HIGH.value: 100.0,
    Priority.MEDIUM.value: 60.0,
    Priority.LOW.value: 30.0,
}
UNKNOWN_PRIORITY_SCORE = 50.0

# Less frequent tasks are a bigger deal to miss
FREQUENCY_WEIGHTS = {
    Frequency.DAILY.value: 0.7,
    Frequency.WEEKLY.value: 1.0,
    Frequency.MONTHLY.value: 1.3,
    Frequency.YEARLY.value: 1.5,
    Frequency.ONCE.value: 1.4,
}
UNKNOWN_FREQUENCY_WEIGHT = 1.0

# (minutes remaining upper bound, multiplier), checked in order
URGENCY_STEPS = [
    (5, 8.0),
    (15, 5.0),
    (30, 3.5),
    (60, 2.5),
    (120, 1.8),
    (240, 1.4),
    (1440, 1.1),
]
DISTANT_MULTIPLIER = 1.0
NO_DUE_MULTIPLIER = 0.5
OVERDUE_BASE = 10.0
OVERDUE_CAP = 20.0  # extra multiplier tops out 200 minutes past due

BAND_THRESHOLDS = [
    (800.0, UrgencyBand.CRITICAL),
    (500.0, UrgencyBand.VERY_HIGH),
    (300.0, UrgencyBand.HIGH),
    (150.0, UrgencyBand.MEDIUM),
    (50.0, UrgencyBand.LOW),
]

PriorityLike = Union[Priority, str, None]
FrequencyLike = Union[Frequency, str, None]


def _key(value: Union[Priority, Frequency, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, (Priority, Frequency)):
        return value.value
    return str(value).lower()


def base_priority_score(priority: PriorityLike) -> float:
    return BASE_PRIORITY_SCORES.get(_key(priority), UNKNOWN_PRIORITY_SCORE)


def frequency_weight(frequency: FrequencyLike) -> float:
    return FREQUENCY_WEIGHTS.get(_key(frequency), UNKNOWN_FREQUENCY_WEIGHT)


def urgency_multiplier(seconds_remaining: Optional[float]) -> float:
    """
    Multiplier for the time left until the due moment.

    Args:
        seconds_remaining: Seconds until due (negative when overdue), or
            None when the task has no due moment
    """
    if seconds_remaining is None:
        return NO_DUE_MULTIPLIER

    minutes = seconds_remaining / 60
    if minutes < 0:
        return OVERDUE_BASE + min(abs(minutes) / 10, OVERDUE_CAP)

    for bound, multiplier in URGENCY_STEPS:
        if minutes < bound:
            return multiplier
    return DISTANT_MULTIPLIER


def score(
    priority: PriorityLike,
    frequency: FrequencyLike,
    seconds_remaining: Optional[float],
) -> float:
    """Dynamic priority score. Pure: same inputs, same output."""
    return (
        base_priority_score(priority)
        * frequency_weight(frequency)
        * urgency_multiplier(seconds_remaining)
    )


def band_for(value: float) -> UrgencyBand:
    for threshold, band in BAND_THRESHOLDS:
        if value >= threshold:
            return band
    return UrgencyBand.MINIMAL


def score_task(task: ScheduledTask, now: datetime) -> UrgencyScore:
    """Score one task at one instant."""
    value = score(task.priority, task.frequency, task.seconds_remaining(now))
    return UrgencyScore(
        task_id=task.id,
        value=value,
        band=band_for(value),
        computed_at=now,
    )


def urgency_level(seconds_remaining: Optional[float]) -> UrgencyLevel:
    """Time-only urgency used for countdown coloring."""
    if seconds_remaining is None:
        return UrgencyLevel.NONE
    if seconds_remaining < 0:
        return UrgencyLevel.OVERDUE
    if seconds_remaining < 15 * 60:
        return UrgencyLevel.CRITICAL
    if seconds_remaining < 60 * 60:
        return UrgencyLevel.URGENT
    if seconds_remaining < 4 * 60 * 60:
        return UrgencyLevel.SOON
    return UrgencyLevel.LATER
