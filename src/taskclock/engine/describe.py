"""
Task Descriptions

Short human-readable strings for countdowns, recurrence summaries and
capture confirmations.
"""

from __future__ import annotations

from typing import Iterable, Optional

from taskclock.engine.models import (
    ALL_WEEKDAYS,
    WEEKEND,
    WORKWEEK,
    Frequency,
    ScheduledTask,
    Weekday,
    sorted_weekdays,
)

# (minutes remaining upper bound, comparison) for time-blindness hints
RELATIVE_DURATIONS = [
    (5, "Less than a song"),
    (15, "≈ 1 YouTube video"),
    (30, "≈ A quick shower"),
    (45, "≈ Half a TV episode"),
    (60, "≈ 1 TV episode"),
    (90, "≈ A workout session"),
    (120, "≈ A movie"),
    (180, "≈ A long movie"),
    (240, "≈ A short flight"),
]


def time_remaining_display(seconds_remaining: Optional[float]) -> str:
    """Countdown text, e.g. "45 min", "2h 5m", "3 days", "12m overdue"."""
    if seconds_remaining is None:
        return "No due date"

    if seconds_remaining < 0:
        overdue = abs(seconds_remaining)
        if overdue < 60:
            return "OVERDUE"
        if overdue < 3600:
            return f"{int(overdue // 60)}m overdue"
        if overdue < 86400:
            return f"{int(overdue // 3600)}h overdue"
        return f"{int(overdue // 86400)}d overdue"

    if seconds_remaining < 60:
        return "< 1 min"
    if seconds_remaining < 3600:
        return f"{int(seconds_remaining // 60)} min"
    if seconds_remaining < 86400:
        hours = int(seconds_remaining // 3600)
        minutes = int((seconds_remaining % 3600) // 60)
        return f"{hours}h" if minutes == 0 else f"{hours}h {minutes}m"

    days = int(seconds_remaining // 86400)
    return f"{days} day" if days == 1 else f"{days} days"


def relative_time_display(seconds_remaining: Optional[float]) -> Optional[str]:
    """Everyday comparison for the time left, or None past four hours."""
    if seconds_remaining is None or seconds_remaining <= 0:
        return None

    minutes = seconds_remaining / 60
    for bound, label in RELATIVE_DURATIONS:
        if minutes < bound:
            return label
    return None


def ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_recurring_days(
    days: Iterable[Weekday],
    frequency: Optional[Frequency] = None,
    day_of_month: Optional[int] = None,
) -> str:
    """
    Recurrence summary: "daily", "weekdays", "every Monday & Friday",
    "monthly on the 20th". Empty for one-time tasks.
    """
    if frequency == Frequency.MONTHLY:
        return f"monthly on the {ordinal(day_of_month)}" if day_of_month else "monthly"
    if frequency == Frequency.YEARLY:
        return "yearly"

    day_set = frozenset(days)
    if not day_set:
        return ""
    if day_set == ALL_WEEKDAYS:
        return "daily"
    if day_set == WORKWEEK:
        return "weekdays"
    if day_set == WEEKEND:
        return "weekends"

    names = [day.value.capitalize() for day in sorted_weekdays(day_set)]
    if len(names) == 2:
        return f"every {names[0]} & {names[1]}"
    return f"every {', '.join(names)}"


def confirmation_message(task: ScheduledTask) -> str:
    """What the user hears back after a capture, e.g. "Call Mom - every Sunday"."""
    if not task.is_recurring:
        return task.title
    summary = format_recurring_days(task.recurrence_days, task.frequency, task.day_of_month)
    return f"{task.title} - {summary}" if summary else task.title
