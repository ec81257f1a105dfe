"""
Tests for transcript accumulation across recognizer restarts.
"""

import pytest

from taskclock.engine.errors import CaptureStateError
from taskclock.engine.transcript import CaptureState, TranscriptAccumulator


def feed(acc: TranscriptAccumulator, partials: list[str]) -> str:
    for partial in partials:
        acc.apply_delta(partial)
    return acc.text


@pytest.fixture
def acc():
    return TranscriptAccumulator(drop_threshold=3, separator=". ")


class TestAccumulation:
    """Tests for scripted partial sequences."""

    def test_growing_partials(self, acc):
        text = feed(acc, ["call", "call mom", "call mom every sunday"])
        assert text == "call mom every sunday"
        assert acc.segments == []
        assert acc.state == CaptureState.ACCUMULATING

    def test_restart_keeps_earlier_text(self, acc):
        text = feed(acc, ["pay the", "pay the hvac bill", "every", "every month on the 20th"])
        assert text == "pay the hvac bill. every month on the 20th"
        assert acc.segments == ["pay the hvac bill"]

    def test_small_shrink_is_a_correction(self, acc):
        text = feed(acc, ["call mom at", "call mom a"])
        assert text == "call mom a"
        assert acc.segments == []

    def test_several_restarts(self, acc):
        text = feed(acc, ["buy milk", "and", "and eggs", "x", "then bread"])
        assert text == "buy milk. and eggs. then bread"

    def test_repeated_segment_not_duplicated(self, acc):
        text = feed(acc, ["buy milk and eggs", "b", "buy milk and eggs", "c"])
        assert text == "buy milk and eggs. c"
        assert acc.segments == ["buy milk and eggs"]

    def test_whitespace_trimmed(self, acc):
        assert feed(acc, ["  call mom  "]) == "call mom"

    def test_empty_partial_stays_empty(self, acc):
        acc.apply_delta("")
        assert acc.state == CaptureState.EMPTY
        assert acc.text == ""

    def test_custom_separator(self):
        acc = TranscriptAccumulator(drop_threshold=0, separator=" ")
        assert feed(acc, ["take out", "trash"]) == "take out trash"


class TestLifecycle:
    """Tests for the accumulator state machine."""

    def test_finalize_returns_text(self, acc):
        feed(acc, ["call mom"])
        assert acc.finalize() == "call mom"
        assert acc.state == CaptureState.FINALIZED

    def test_finalize_with_final_result(self, acc):
        feed(acc, ["call mom every"])
        assert acc.finalize("call mom every sunday") == "call mom every sunday"

    def test_delta_after_finalize_rejected(self, acc):
        acc.finalize("call mom")
        with pytest.raises(CaptureStateError):
            acc.apply_delta("more")

    def test_finalize_twice_rejected(self, acc):
        acc.finalize("call mom")
        with pytest.raises(CaptureStateError):
            acc.finalize()

    def test_cancel_discards(self, acc):
        feed(acc, ["pay the hvac bill", "every"])
        acc.cancel()
        assert acc.state == CaptureState.CANCELLED
        assert acc.text == ""
        assert not acc.is_open
        with pytest.raises(CaptureStateError):
            acc.apply_delta("again")

    def test_reset_reopens(self, acc):
        acc.finalize("call mom")
        acc.reset()
        assert acc.state == CaptureState.EMPTY
        assert acc.is_open
        assert feed(acc, ["new task"]) == "new task"
