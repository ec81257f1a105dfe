"""
Tests for title distillation and priority classification.
"""

import pytest

from taskclock.engine.models import Priority
from taskclock.engine.normalizer import normalize
from taskclock.engine.priority import PriorityClassifier
from taskclock.engine.title import TitleDistiller


@pytest.fixture
def distiller():
    return TitleDistiller()


@pytest.fixture
def priorities():
    return PriorityClassifier()


class TestTitleDistiller:
    """Tests for canonical titles."""

    @pytest.mark.parametrize(
        "spoken, title",
        [
            ("Pay the HVAC bill every month on the 20th", "Pay Hvac Bill"),
            ("Call mom every Sunday", "Call Mom"),
            ("Take medication at 8am", "Take Medication"),
            ("Brush teeth every day at 7:00 am", "Brush Teeth"),
            ("water the plants tomorrow morning at 0930", "Water Plants"),
            ("remind me at 8 a.m.", "Remind Me"),
            ("renew passport every year on march 3rd", "Renew Passport"),
            ("pay rent on the first of every month", "Pay Rent"),
        ],
    )
    def test_distill(self, distiller, spoken, title):
        assert distiller.distill(normalize(spoken)) == title

    def test_keeps_first_three_words(self, distiller):
        assert distiller.distill("buy groceries, milk and eggs") == "Buy Groceries Milk"

    def test_time_literals_dropped(self, distiller):
        assert distiller.is_time_literal("7:30")
        assert distiller.is_time_literal("0930")
        assert distiller.is_time_literal("8pm")
        assert not distiller.is_time_literal("42")

    def test_fallback_to_first_meaningful_word(self, distiller):
        assert distiller.distill("every monday") == "Monday"

    def test_fallback_title(self, distiller):
        assert distiller.distill("the") == "Task"
        assert distiller.distill("") == "Task"


class TestPriorityClassifier:
    """Tests for keyword-table priority."""

    def test_low_before_high(self, priorities):
        assert priorities.classify("brush teeth every day") == Priority.LOW

    def test_low_wins_when_both_lists_match(self, priorities):
        assert priorities.classify("brush teeth before dentist appointment") == Priority.LOW

    @pytest.mark.parametrize(
        "text",
        ["take medication at 8am", "doctor appointment friday", "pay rent monthly", "project deadline"],
    )
    def test_high(self, priorities, text):
        assert priorities.classify(text) == Priority.HIGH

    @pytest.mark.parametrize(
        "text",
        ["watch tv tonight", "meditate every morning", "water plants"],
    )
    def test_low(self, priorities, text):
        assert priorities.classify(text) == Priority.LOW

    @pytest.mark.parametrize(
        "text",
        ["finish the report", "call mom every sunday", ""],
    )
    def test_default_medium(self, priorities, text):
        assert priorities.classify(text) == Priority.MEDIUM
