"""
Priority Classifier

Ordered keyword tables, first containment match wins. The low table is
always consulted before the high table, so a phrase present in both lists
("brush" vs "appointment" in "brush teeth before appointment") is Low.
"""

from __future__ import annotations

from taskclock.engine.models import Priority
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


class PriorityClassifier:
    """Keyword-table priority lookup."""

    # Hygiene, leisure and low-stakes chores
    LOW_KEYWORDS = (
        "brush", "teeth", "floss", "mouthwash", "wash face", "skincare", "lotion",
        "shower", "bath", "shave", "deodorant", "comb", "hair", "bathroom",
        "make bed", "tidy", "organize", "declutter", "sort", "rearrange",
        "hobby", "game", "movie", "tv", "netflix", "streaming", "youtube",
        "social media", "scroll", "browse", "read book", "read article",
        "relax", "nap", "rest", "wind down", "leisure",
        "wash car", "clean garage", "dust", "polish", "decorate",
        "call friend", "text friend", "email personal", "journal", "meditate",
        "stretch", "yoga", "side project", "learn", "practice", "podcast",
        "trim", "water plant", "check weather", "charge phone", "dressed",
        "pajama", "wake up", "get up", "alarm",
    )

    # Medical, financial and deadline-bearing
    HIGH_KEYWORDS = (
        "doctor", "dentist", "hospital", "emergency", "surgery", "therapy", "treatment",
        "medication", "medicine", "prescription", "refill",
        "appointment", "meeting", "interview", "deadline", "urgent", "important",
        "pay rent", "mortgage", "pay bill", "tax", "insurance", "registration", "renewal",
        "drop off", "pick up", "flight", "travel", "vaccine", "shot", "checkup",
        "vet visit", "exam", "test result",
    )

    DEFAULT = Priority.MEDIUM

    def __init__(self):
        self._tables: list[tuple[tuple[str, ...], Priority]] = [
            (self.LOW_KEYWORDS, Priority.LOW),
            (self.HIGH_KEYWORDS, Priority.HIGH),
        ]

    def classify(self, text: str) -> Priority:
        """Priority for normalized text. Never fails."""
        for keywords, priority in self._tables:
            for keyword in keywords:
                if keyword in text:
                    logger.debug("priority_matched", keyword=keyword, priority=priority.value)
                    return priority
        return self.DEFAULT
