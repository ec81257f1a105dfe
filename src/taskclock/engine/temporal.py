"""
Temporal Expression Extractor

Finds the time of day, date hints, day-of-month and month references in a
normalized transcript. Pattern tables are ordered: earlier rows win.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Optional

from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TemporalHints:
    """What the extractor found. No time found is not an error."""
    time_of_day: Optional[time] = None
    time_specified: bool = False
    date_hint: Optional[date] = None


class TemporalExtractor:
    """
    Regex-table extraction of temporal expressions.

    Explicit clock times beat day-part keywords; the first row that yields a
    valid time wins and scanning stops.
    """

    # Explicit clock times, in precedence order
    TIME_PATTERNS = [
        (r"\b(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[ap])\.?m\b\.?", "meridiem"),
        (r"\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\b", "clock"),
        (r"\bat (?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\b", "at"),
        (r"\bby (?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\b", "by"),
    ]

    # Day-part keywords used when no clock time was spoken
    DAYPART_TIMES = [
        (r"\bmornings?\b", time(9, 0)),
        (r"\bnoon\b", time(12, 0)),
        (r"\bafternoons?\b", time(15, 0)),
        (r"\bevenings?\b", time(18, 0)),
        (r"\b(?:tonight|nights?)\b", time(21, 0)),
    ]

    # Context that disambiguates a bare "7:00"
    PM_CONTEXT = r"\b(?:afternoon|evening|tonight|night)\b"
    AM_CONTEXT = r"\bmorning\b"

    DATE_HINTS = [
        (r"\btomorrow\b", 1),
    ]

    SPELLED_ORDINALS = {
        "first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5,
        "sixth": 6, "seventh": 7, "eighth": 8, "ninth": 9, "tenth": 10,
        "eleventh": 11, "twelfth": 12, "thirteenth": 13, "fourteenth": 14,
        "fifteenth": 15, "sixteenth": 16, "seventeenth": 17, "eighteenth": 18,
        "nineteenth": 19, "twentieth": 20,
        "twenty-first": 21, "twenty first": 21,
        "twenty-second": 22, "twenty second": 22,
        "twenty-third": 23, "twenty third": 23,
        "twenty-fourth": 24, "twenty fourth": 24,
        "twenty-fifth": 25, "twenty fifth": 25,
        "twenty-sixth": 26, "twenty sixth": 26,
        "twenty-seventh": 27, "twenty seventh": 27,
        "twenty-eighth": 28, "twenty eighth": 28,
        "twenty-ninth": 29, "twenty ninth": 29,
        "thirtieth": 30,
        "thirty-first": 31, "thirty first": 31,
    }

    NUMERIC_ORDINAL = r"(?:\bon the |\bthe |\bof )?\b(?P<day>\d{1,2})(?:st|nd|rd|th)\b"

    MONTHS = (
        "january", "february", "march", "april", "may", "june",
        "july", "august", "september", "october", "november", "december",
    )

    def __init__(self):
        """Compile pattern tables."""
        self._time_patterns = [
            (re.compile(p), kind) for p, kind in self.TIME_PATTERNS
        ]
        self._daypart_patterns = [
            (re.compile(p), value) for p, value in self.DAYPART_TIMES
        ]
        self._pm_context = re.compile(self.PM_CONTEXT)
        self._am_context = re.compile(self.AM_CONTEXT)
        self._date_hints = [
            (re.compile(p), offset) for p, offset in self.DATE_HINTS
        ]

        # Longest alternatives first so "twenty-first" beats "first" at the same spot
        words = sorted(self.SPELLED_ORDINALS, key=len, reverse=True)
        self._spelled_ordinal = re.compile(
            r"\b(" + "|".join(re.escape(w) for w in words) + r")\b"
        )
        self._numeric_ordinal = re.compile(self.NUMERIC_ORDINAL)
        self._month = re.compile(r"\b(" + "|".join(self.MONTHS) + r")\b")

    def extract(self, text: str, today: date) -> TemporalHints:
        """
        Extract time-of-day and date hint from normalized text.

        Args:
            text: Normalized transcript
            today: Calendar date of "now", used to resolve "tomorrow"
        """
        time_of_day = self.find_time(text)
        date_hint = self.find_date_hint(text, today)
        return TemporalHints(
            time_of_day=time_of_day,
            time_specified=time_of_day is not None,
            date_hint=date_hint,
        )

    def find_time(self, text: str) -> Optional[time]:
        """Explicit clock time first, then the day-part table, else None."""
        for pattern, kind in self._time_patterns:
            for match in pattern.finditer(text):
                parsed = self._to_time(match, text)
                if parsed is not None:
                    logger.debug("time_matched", kind=kind, text=match.group(0), time=parsed.isoformat())
                    return parsed

        for pattern, value in self._daypart_patterns:
            if pattern.search(text):
                logger.debug("daypart_matched", keyword=pattern.pattern, time=value.isoformat())
                return value

        return None

    def _to_time(self, match: re.Match, text: str) -> Optional[time]:
        """Convert a clock match to 24-hour time, rejecting impossible values."""
        hour = int(match.group("hour"))
        minute = int(match.group("minute") or 0)
        if minute > 59:
            return None

        meridiem = match.groupdict().get("meridiem")
        if meridiem:
            if not 1 <= hour <= 12:
                return None
            if meridiem == "p" and hour < 12:
                hour += 12
            elif meridiem == "a" and hour == 12:
                hour = 0
        else:
            if hour > 23:
                return None
            if hour < 12 and self._pm_context.search(text):
                hour += 12
            elif hour == 12 and self._am_context.search(text):
                hour = 0

        return time(hour, minute)

    def find_date_hint(self, text: str, today: date) -> Optional[date]:
        """Calendar date implied by words like "tomorrow"."""
        for pattern, offset in self._date_hints:
            if pattern.search(text):
                return today + timedelta(days=offset)
        return None

    def day_of_month(self, text: str) -> Optional[int]:
        """
        Day of month mentioned in the text.

        Spelled ordinals ("the twentieth") take precedence over numeric ones
        ("the 20th"). Anything outside 1..31 is ignored.
        """
        match = self._spelled_ordinal.search(text)
        if match:
            day = self.SPELLED_ORDINALS[match.group(1)]
            logger.debug("day_of_month_spelled", word=match.group(1), day=day)
            return day

        for match in self._numeric_ordinal.finditer(text):
            day = int(match.group("day"))
            if 1 <= day <= 31:
                logger.debug("day_of_month_numeric", day=day)
                return day

        return None

    def month_of_year(self, text: str) -> Optional[int]:
        """Month number (1-12) of the first month name in the text."""
        match = self._month.search(text)
        if match:
            return self.MONTHS.index(match.group(1)) + 1
        return None
