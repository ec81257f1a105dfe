"""
Transcript Accumulator

Assembles the final transcript of one capture session from the partial
results a streaming recognizer delivers.

Some recognizers silently restart mid-utterance: the partial text suddenly
shrinks and starts over. When a partial is shorter than the previous one by
more than the drop threshold, the previous text is committed as a finished
segment and the new text starts the next one. The final transcript joins
the segments with the configured separator.
"""

from __future__ import annotations

import enum
from typing import Optional

from taskclock.engine.errors import CaptureStateError
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


class CaptureState(str, enum.Enum):
    """Lifecycle of a capture session."""
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"
    CANCELLED = "cancelled"


class TranscriptAccumulator:
    """
    Accumulates partial transcripts for one capture session.

    Usage:
        acc = TranscriptAccumulator()
        for partial in recognizer_partials:
            acc.apply_delta(partial)
        text = acc.finalize()
    """

    def __init__(self, drop_threshold: int = 3, separator: str = ". "):
        """
        Args:
            drop_threshold: Characters a partial may shrink by before it is
                treated as a recognizer restart
            separator: Inserted between recovered segments
        """
        self.drop_threshold = drop_threshold
        self.separator = separator
        self.state = CaptureState.EMPTY
        self._segments: list[str] = []
        self._current = ""

    @property
    def segments(self) -> list[str]:
        """Committed segments, not including the in-progress one."""
        return list(self._segments)

    @property
    def text(self) -> str:
        """Transcript so far."""
        parts = self._segments + ([self._current] if self._current else [])
        return self.separator.join(parts)

    @property
    def is_open(self) -> bool:
        return self.state in (CaptureState.EMPTY, CaptureState.ACCUMULATING)

    def apply_delta(self, partial: str) -> str:
        """
        Feed the recognizer's latest partial result.

        Returns:
            The transcript so far

        Raises:
            CaptureStateError: The session is already finalized or cancelled
        """
        if not self.is_open:
            raise CaptureStateError(f"cannot apply a partial to a {self.state.value} capture")

        partial = partial.strip()
        if self._current and len(partial) < len(self._current) - self.drop_threshold:
            if self._current not in self.separator.join(self._segments):
                self._segments.append(self._current)
                logger.info(
                    "transcript_segment_recovered",
                    segment_count=len(self._segments),
                    dropped_chars=len(self._current) - len(partial),
                )

        self._current = partial
        if self.text:
            self.state = CaptureState.ACCUMULATING
        return self.text

    def finalize(self, final_text: Optional[str] = None) -> str:
        """
        Close the session and return the full transcript.

        Args:
            final_text: The recognizer's final result, if it sent one
        """
        if final_text is not None:
            self.apply_delta(final_text)
        elif not self.is_open:
            raise CaptureStateError(f"cannot finalize a {self.state.value} capture")

        self.state = CaptureState.FINALIZED
        logger.debug("transcript_finalized", length=len(self.text), segments=len(self._segments) + 1)
        return self.text

    def cancel(self) -> None:
        """Discard the session. Nothing accumulated is used."""
        self.state = CaptureState.CANCELLED
        self._segments.clear()
        self._current = ""

    def reset(self) -> None:
        """Start a fresh session."""
        self.state = CaptureState.EMPTY
        self._segments.clear()
        self._current = ""
