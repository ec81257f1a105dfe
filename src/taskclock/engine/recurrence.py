"""
Recurrence Classifier

Decides whether a task repeats and on which days. Every rule is checked
independently and the matched day sets are unioned, so "every Monday and
Friday" yields both days. Monthly and weekly signals may both be present;
the resolver gives monthly precedence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from taskclock.engine.models import ALL_WEEKDAYS, WEEKEND, WORKWEEK, Weekday
from taskclock.engine.temporal import TemporalExtractor
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecurrenceResult:
    """Outcome of recurrence classification."""
    is_recurring: bool = False
    days: frozenset[Weekday] = frozenset()
    monthly: bool = False
    yearly: bool = False
    day_of_month: Optional[int] = None
    month_of_year: Optional[int] = None
    matched_rules: tuple[str, ...] = field(default=())


class RecurrenceClassifier:
    """Ordered pattern -> result tables for recurrence detection."""

    # Any of these marks the utterance as recurring
    TRIGGER_PATTERNS = [
        r"\bevery\b",
        r"\beveryday\b",
        r"\bdaily\b",
        r"\bweekly\b",
        r"\bmonthly\b",
        r"\byearly\b",
        r"\bannually\b",
    ]

    # pattern -> days contributed (unioned)
    DAY_RULES = [
        (r"\bevery ?day\b|\bdaily\b", ALL_WEEKDAYS),
        (r"\bweekdays?\b", WORKWEEK),
        (r"\bweekends?\b", WEEKEND),
    ] + [
        (rf"\b{day.value}s?\b", frozenset({day})) for day in Weekday
    ]

    MONTHLY_PATTERN = r"\bevery month\b|\bmonthly\b"
    YEARLY_PATTERN = r"\bevery year\b|\byearly\b|\bannually\b"

    def __init__(self, temporal: TemporalExtractor | None = None):
        self.temporal = temporal or TemporalExtractor()
        self._triggers = [re.compile(p) for p in self.TRIGGER_PATTERNS]
        self._day_rules = [(re.compile(p), days) for p, days in self.DAY_RULES]
        self._monthly = re.compile(self.MONTHLY_PATTERN)
        self._yearly = re.compile(self.YEARLY_PATTERN)

    def classify(self, text: str) -> RecurrenceResult:
        """Classify normalized text."""
        if not any(p.search(text) for p in self._triggers):
            return RecurrenceResult()

        days: set[Weekday] = set()
        matched: list[str] = []
        for pattern, rule_days in self._day_rules:
            if pattern.search(text):
                days |= rule_days
                matched.append(pattern.pattern)

        monthly = bool(self._monthly.search(text))
        yearly = bool(self._yearly.search(text))

        day_of_month = None
        month_of_year = None
        if monthly or yearly:
            day_of_month = self.temporal.day_of_month(text)
        if yearly:
            month_of_year = self.temporal.month_of_year(text)

        result = RecurrenceResult(
            is_recurring=True,
            days=frozenset(days),
            monthly=monthly,
            yearly=yearly,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            matched_rules=tuple(matched),
        )
        logger.debug(
            "recurrence_classified",
            days=sorted(d.value for d in result.days),
            monthly=monthly,
            yearly=yearly,
            day_of_month=day_of_month,
        )
        return result
