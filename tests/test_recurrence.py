"""
Tests for recurrence classification.
"""

import pytest

from taskclock.engine.models import ALL_WEEKDAYS, WEEKEND, WORKWEEK, Weekday
from taskclock.engine.recurrence import RecurrenceClassifier


@pytest.fixture
def classifier():
    return RecurrenceClassifier()


class TestDailyAndGroups:
    """Tests for the day-set shortcuts."""

    @pytest.mark.parametrize(
        "text",
        ["brush teeth every day", "take vitamins daily", "stretch everyday"],
    )
    def test_daily_variants(self, classifier, text):
        result = classifier.classify(text)
        assert result.is_recurring is True
        assert result.days == ALL_WEEKDAYS

    def test_weekdays(self, classifier):
        result = classifier.classify("walk the dog every weekday")
        assert result.days == WORKWEEK

    def test_weekends(self, classifier):
        result = classifier.classify("sleep in every weekend")
        assert result.days == WEEKEND


class TestWeekdayNames:
    """Tests for individual weekday names."""

    def test_single_day(self, classifier):
        result = classifier.classify("call mom every sunday")
        assert result.is_recurring is True
        assert result.days == frozenset({Weekday.SUNDAY})

    def test_days_are_unioned(self, classifier):
        result = classifier.classify("gym every monday and friday")
        assert result.days == frozenset({Weekday.MONDAY, Weekday.FRIDAY})

    def test_plural_day(self, classifier):
        result = classifier.classify("piano lessons every tuesdays")
        assert result.days == frozenset({Weekday.TUESDAY})

    def test_weekday_name_without_trigger(self, classifier):
        result = classifier.classify("call mom on sunday")
        assert result.is_recurring is False
        assert result.days == frozenset()

    def test_every_without_days(self, classifier):
        result = classifier.classify("water the plants every week")
        assert result.is_recurring is True
        assert result.days == frozenset()

    def test_trigger_is_a_whole_word(self, classifier):
        result = classifier.classify("tell everyone about friday")
        assert result.is_recurring is False


class TestMonthlyAndYearly:
    """Tests for month- and year-based recurrence."""

    def test_monthly_with_day(self, classifier):
        result = classifier.classify("pay the hvac bill every month on the 20th")
        assert result.is_recurring is True
        assert result.monthly is True
        assert result.day_of_month == 20
        assert result.days == frozenset()

    def test_monthly_keyword(self, classifier):
        result = classifier.classify("monthly rent on the first")
        assert result.monthly is True
        assert result.day_of_month == 1

    def test_monthly_without_day(self, classifier):
        result = classifier.classify("review budget every month")
        assert result.monthly is True
        assert result.day_of_month is None

    def test_monthly_and_weekday_both_flagged(self, classifier):
        result = classifier.classify("every monday and every month on the 5th")
        assert result.monthly is True
        assert result.days == frozenset({Weekday.MONDAY})
        assert result.day_of_month == 5

    def test_yearly(self, classifier):
        result = classifier.classify("renew passport every year on march 3rd")
        assert result.is_recurring is True
        assert result.yearly is True
        assert result.monthly is False
        assert result.month_of_year == 3
        assert result.day_of_month == 3

    def test_annually(self, classifier):
        result = classifier.classify("file taxes annually")
        assert result.yearly is True
        assert result.month_of_year is None


class TestNoRecurrence:
    """Tests for one-time utterances."""

    def test_plain_task(self, classifier):
        result = classifier.classify("finish the report")
        assert result.is_recurring is False
        assert result.matched_rules == ()
