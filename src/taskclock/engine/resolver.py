"""
Next-Occurrence Resolver

Turns a parsed draft plus "now" into one concrete future due moment.

Branches, first applicable wins:
1. monthly   - this month's target day, or next month's once that day has begun
2. yearly    - this year's target date, or next year's once that day has begun
3. weekly    - nearest selected weekday; today only if its time is still ahead
4. daily     - always tomorrow, even if today's time is still ahead
5. date hint - e.g. "tomorrow", when strictly after now
6. fallback  - tomorrow
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable

from dateutil.relativedelta import relativedelta

from taskclock.engine.models import ALL_WEEKDAYS, ParsedTaskDraft, Weekday
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIME = time(12, 0)


def resolve(
    now: datetime,
    draft: ParsedTaskDraft,
    default_time: time = DEFAULT_TIME,
) -> datetime:
    """
    Compute the due moment for a freshly parsed draft.

    Args:
        now: Reference instant (naive or aware; the result matches it)
        draft: Parsed draft
        default_time: Time of day used when the draft has none

    Returns:
        A moment strictly after now
    """
    time_of_day = draft.time_of_day or default_time
    today = now.date()

    if draft.is_recurring and draft.monthly:
        branch = "monthly"
        due = _at(next_monthly_date(today, draft.day_of_month or 1), time_of_day, now)
    elif draft.is_recurring and draft.yearly:
        branch = "yearly"
        due = _at(
            next_yearly_date(today, draft.month_of_year or today.month, draft.day_of_month or 1),
            time_of_day,
            now,
        )
    elif draft.recurrence_days and draft.recurrence_days != ALL_WEEKDAYS:
        branch = "weekly"
        due = next_weekday_moment(now, draft.recurrence_days, time_of_day)
    elif draft.recurrence_days == ALL_WEEKDAYS:
        # TODO: reconcile with the weekly branch, which allows a same-day slot
        branch = "daily"
        due = _at(today + timedelta(days=1), time_of_day, now)
    elif draft.date_hint is not None and _at(draft.date_hint, time_of_day, now) > now:
        branch = "date_hint"
        due = _at(draft.date_hint, time_of_day, now)
    else:
        branch = "fallback"
        due = _at(today + timedelta(days=1), time_of_day, now)

    if due <= now:
        logger.warning("resolved_moment_not_in_future", branch=branch, due=due.isoformat())
        due = _at(today + timedelta(days=1), time_of_day, now)

    logger.debug("due_resolved", branch=branch, due=due.isoformat())
    return due


def next_monthly_date(today: date, day_of_month: int) -> date:
    """
    Next date carrying the given day of month.

    Days past the end of a short month clamp to its last day. A target
    that is today counts as already begun and rolls to next month.
    """
    candidate = today + relativedelta(day=day_of_month)
    if candidate <= today:
        candidate = today + relativedelta(months=1, day=day_of_month)
    return candidate


def next_yearly_date(today: date, month: int, day_of_month: int) -> date:
    """Next date falling on the given month and day."""
    candidate = date(today.year, month, 1) + relativedelta(day=day_of_month)
    if candidate <= today:
        candidate = date(today.year + 1, month, 1) + relativedelta(day=day_of_month)
    return candidate


def next_weekday_moment(
    now: datetime, days: Iterable[Weekday], time_of_day: time
) -> datetime:
    """
    Nearest moment on any of the given weekdays at time_of_day.

    A day matching today only counts when its moment is still ahead of now;
    otherwise that day is a week away.
    """
    today = now.date()
    offsets = []
    for day in days:
        offset = (day.python_weekday - today.weekday()) % 7
        if offset == 0 and _at(today, time_of_day, now) <= now:
            offset = 7
        offsets.append(offset)

    if not offsets:
        raise ValueError("next_weekday_moment needs at least one weekday")

    return _at(today + timedelta(days=min(offsets)), time_of_day, now)


def _at(day: date, time_of_day: time, like: datetime) -> datetime:
    """Combine a date and time, keeping the tzinfo of the reference instant."""
    return datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=like.tzinfo)
