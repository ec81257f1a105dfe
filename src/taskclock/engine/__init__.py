"""
Temporal Task Engine

Turns spoken transcripts into scheduled tasks, resolves their next due
moment, and ranks them by a decaying urgency score.
"""

from taskclock.engine.board import TaskBoard
from taskclock.engine.capture import CapturePipeline, parse_utterance
from taskclock.engine.describe import (
    confirmation_message,
    format_recurring_days,
    relative_time_display,
    time_remaining_display,
)
from taskclock.engine.engine import TaskEngine
from taskclock.engine.enhancer import (
    DraftEnhancer,
    EnhancedTaskData,
    EnhancerGateway,
    build_enhancer_prompt,
    parse_enhancer_payload,
)
from taskclock.engine.errors import (
    CaptureCancelled,
    CaptureStateError,
    InvalidTransition,
    NoSpeechDetected,
    TaskClockError,
    TaskNotFound,
)
from taskclock.engine.models import (
    Frequency,
    ParsedTaskDraft,
    Priority,
    RawUtterance,
    ScheduledTask,
    UrgencyBand,
    UrgencyLevel,
    UrgencyScore,
    Weekday,
)
from taskclock.engine.normalizer import normalize
from taskclock.engine.priority import PriorityClassifier
from taskclock.engine.ranking import RankedTask, Ranker, RankView
from taskclock.engine.recurrence import RecurrenceClassifier, RecurrenceResult
from taskclock.engine.resolver import resolve
from taskclock.engine.scheduler import RankingScheduler
from taskclock.engine.scoring import band_for, score, score_task, urgency_level
from taskclock.engine.temporal import TemporalExtractor, TemporalHints
from taskclock.engine.title import TitleDistiller
from taskclock.engine.transcript import CaptureState, TranscriptAccumulator

__all__ = [
    # Main engine
    "TaskEngine",
    "TaskBoard",
    # Models
    "Weekday",
    "Priority",
    "Frequency",
    "UrgencyBand",
    "UrgencyLevel",
    "RawUtterance",
    "ParsedTaskDraft",
    "ScheduledTask",
    "UrgencyScore",
    # Errors
    "TaskClockError",
    "NoSpeechDetected",
    "TaskNotFound",
    "InvalidTransition",
    "CaptureStateError",
    "CaptureCancelled",
    # Parsing
    "normalize",
    "TemporalExtractor",
    "TemporalHints",
    "RecurrenceClassifier",
    "RecurrenceResult",
    "resolve",
    "TitleDistiller",
    "PriorityClassifier",
    "CapturePipeline",
    "parse_utterance",
    "CaptureState",
    "TranscriptAccumulator",
    # Enhancer
    "DraftEnhancer",
    "EnhancedTaskData",
    "EnhancerGateway",
    "build_enhancer_prompt",
    "parse_enhancer_payload",
    # Scoring & ranking
    "score",
    "score_task",
    "band_for",
    "urgency_level",
    "Ranker",
    "RankedTask",
    "RankView",
    "RankingScheduler",
    # Descriptions
    "time_remaining_display",
    "relative_time_display",
    "format_recurring_days",
    "confirmation_message",
]
