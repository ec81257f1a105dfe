"""
Title Distiller

Strips temporal and filler vocabulary from a transcript to get a short
canonical task name: "pay the hvac bill every month on the 20th" becomes
"Pay Hvac Bill".
"""

from __future__ import annotations

import re

from taskclock.engine.models import Weekday
from taskclock.engine.temporal import TemporalExtractor

_NUMERIC_ORDINALS = frozenset(
    f"{n}{'th' if 11 <= n <= 13 else {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')}"
    for n in range(1, 32)
)


class TitleDistiller:
    """Keeps the first few meaningful words of an utterance."""

    MAX_WORDS = 3
    FALLBACK_TITLE = "Task"

    SEPARATORS = r"[.,;!?\n]"
    MERIDIEM = r"\b([ap])\.m\b\.?"
    SPACED_CLOCK = r"\b(\d{1,2}(?::\d{2})?)\s+([ap]m)\b"
    TIME_LITERAL = r"^(?:\d{3,4}|\d{1,2}(?::\d{2})?(?:[ap]\.?m\.?))$"

    STOP_WORDS = frozenset(
        {
            # articles and prepositions
            "the", "a", "an", "by", "at", "on", "in", "to", "from", "of",
            # clock words
            "am", "pm", "oclock", "o'clock",
            # day parts
            "morning", "afternoon", "evening", "night", "noon", "tonight",
            # relative dates
            "today", "tomorrow",
            # recurrence vocabulary
            "every", "everyday", "day", "days", "daily", "week", "weeks", "weekly",
            "weekday", "weekdays", "weekend", "weekends",
            "month", "months", "monthly", "year", "years", "yearly", "annually",
            "starting", "beginning", "repeat", "repeating", "recurring",
        }
        | {day.value for day in Weekday}
        | {f"{day.value}s" for day in Weekday}
        | set(TemporalExtractor.MONTHS)
        | {w for w in TemporalExtractor.SPELLED_ORDINALS if " " not in w}
        | _NUMERIC_ORDINALS
    )

    # Used only when every word above was filtered out
    FALLBACK_STOP_WORDS = frozenset({"the", "a", "an", "by", "at", "on", "in", "to", "every"})

    def __init__(self):
        self._separators = re.compile(self.SEPARATORS)
        self._meridiem = re.compile(self.MERIDIEM)
        self._spaced_clock = re.compile(self.SPACED_CLOCK)
        self._time_literal = re.compile(self.TIME_LITERAL)

    def tokens(self, text: str) -> list[str]:
        """Split normalized text into words, dropping sentence punctuation."""
        # "8 a.m." -> "8am" so the clock reading is one droppable token
        text = self._meridiem.sub(r"\1m", text)
        text = self._spaced_clock.sub(r"\1\2", text)
        words = self._separators.sub(" ", text).split()
        return [w.strip("\"'()") for w in words if w.strip("\"'()")]

    def is_time_literal(self, token: str) -> bool:
        return ":" in token or bool(self._time_literal.match(token))

    def distill(self, text: str) -> str:
        """Canonical title for normalized text."""
        words = self.tokens(text)
        kept = [
            w for w in words
            if not self.is_time_literal(w) and w not in self.STOP_WORDS
        ][: self.MAX_WORDS]

        if kept:
            return " ".join(w.capitalize() for w in kept)

        fallback = next((w for w in words if w not in self.FALLBACK_STOP_WORDS), None)
        return fallback.capitalize() if fallback else self.FALLBACK_TITLE
