"""
Capture Pipeline

Turns a finalized transcript into a ScheduledTask.

Parsing is synchronous and pure: the same text and the same "now" always
produce the same draft. The extractor and recurrence classifier feed the
resolver; the title distiller and priority classifier run on the
normalized text independently.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from taskclock.config import ParsingConfig
from taskclock.engine.errors import NoSpeechDetected
from taskclock.engine.models import (
    Frequency,
    ParsedTaskDraft,
    RawUtterance,
    ScheduledTask,
    Weekday,
)
from taskclock.engine.normalizer import normalize
from taskclock.engine.priority import PriorityClassifier
from taskclock.engine.recurrence import RecurrenceClassifier
from taskclock.engine.resolver import DEFAULT_TIME, resolve
from taskclock.engine.temporal import TemporalExtractor
from taskclock.engine.title import TitleDistiller
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


class CapturePipeline:
    """
    Parse transcripts and assemble scheduled tasks.

    Usage:
        pipeline = CapturePipeline()
        draft = pipeline.parse("call mom every sunday", now)
        task = pipeline.build_task(draft, now)
    """

    def __init__(self, default_time: time = DEFAULT_TIME):
        """
        Args:
            default_time: Time of day used when none was spoken
        """
        self.default_time = default_time
        self.temporal = TemporalExtractor()
        self.recurrence = RecurrenceClassifier(self.temporal)
        self.titles = TitleDistiller()
        self.priorities = PriorityClassifier()

    @classmethod
    def from_config(cls, config: ParsingConfig) -> "CapturePipeline":
        hour, minute = config.default_time_of_day
        return cls(default_time=time(hour, minute))

    def parse(self, text: str, now: datetime) -> ParsedTaskDraft:
        """
        Parse one transcript into a draft.

        Raises:
            NoSpeechDetected: The transcript holds no words
        """
        normalized = normalize(text or "")
        if not any(ch.isalnum() for ch in normalized):
            logger.info("no_speech_detected", length=len(text or ""))
            raise NoSpeechDetected()

        hints = self.temporal.extract(normalized, now.date())
        recurrence = self.recurrence.classify(normalized)

        draft = ParsedTaskDraft(
            title_candidate=self.titles.distill(normalized),
            time_of_day=hints.time_of_day,
            time_specified=hints.time_specified,
            date_hint=hints.date_hint,
            day_of_month=recurrence.day_of_month,
            is_recurring=recurrence.is_recurring,
            recurrence_days=recurrence.days,
            monthly=recurrence.monthly,
            yearly=recurrence.yearly,
            month_of_year=recurrence.month_of_year,
            priority=self.priorities.classify(normalized),
            source_text=text,
        )
        logger.debug(
            "draft_parsed",
            title=draft.title_candidate,
            time_specified=draft.time_specified,
            frequency=draft.frequency.value,
            priority=draft.priority.value,
        )
        return draft

    def build_task(self, draft: ParsedTaskDraft, now: datetime) -> ScheduledTask:
        """Resolve the due moment and assemble the task."""
        due_at = resolve(now, draft, self.default_time)
        frequency = draft.frequency

        days = draft.recurrence_days
        if draft.is_recurring and not days:
            # Monthly, yearly and bare "every week" carry no weekday of their own
            days = frozenset({Weekday.of(due_at)})

        day_of_month: Optional[int] = None
        if frequency in (Frequency.MONTHLY, Frequency.YEARLY):
            day_of_month = draft.day_of_month or 1

        return ScheduledTask(
            title=draft.title_candidate,
            due_at=due_at,
            is_recurring=draft.is_recurring,
            recurrence_days=days,
            priority=draft.priority,
            frequency=frequency,
            day_of_month=day_of_month,
            source_utterance=draft.source_text or None,
            created_at=now,
        )

    def capture(self, utterance: RawUtterance) -> ScheduledTask:
        """Parse and assemble in one step."""
        draft = self.parse(utterance.text, utterance.captured_at)
        return self.build_task(draft, utterance.captured_at)


def parse_utterance(text: str, now: datetime) -> ParsedTaskDraft:
    """Convenience function to parse one transcript with default settings."""
    return CapturePipeline().parse(text, now)
