"""
Tests for accepting drafts from an external completion service.
"""

import asyncio
import json
from datetime import date, datetime, time

import pytest
from structlog.testing import capture_logs

from taskclock.engine.capture import CapturePipeline
from taskclock.engine.enhancer import (
    EnhancerGateway,
    build_enhancer_prompt,
    enhanced_to_draft,
    parse_enhancer_payload,
)
from taskclock.engine.models import Frequency, Priority, Weekday


class StaticEnhancer:
    """Service double returning a fixed answer."""

    name = "static"

    def __init__(self, answer: str):
        self.answer = answer
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


class FailingEnhancer:
    name = "failing"

    async def complete(self, prompt: str) -> str:
        raise ConnectionError("network unreachable")


class SlowEnhancer:
    name = "slow"

    async def complete(self, prompt: str) -> str:
        await asyncio.sleep(5)
        return "{}"


def envelope(**task_data) -> str:
    return json.dumps({"needsMoreInfo": False, "question": None, "taskData": task_data})


@pytest.fixture
def pipeline():
    return CapturePipeline()


class TestParsePayload:
    """Tests for payload extraction and validation."""

    def test_envelope(self):
        data = parse_enhancer_payload(envelope(title="Brush teeth", dueTime="07:00", priority="low"))
        assert data is not None
        assert data.title == "Brush teeth"
        assert data.due_time == time(7, 0)
        assert data.priority == Priority.LOW

    def test_bare_object(self):
        data = parse_enhancer_payload('{"title": "Call mom", "recurringDays": ["sunday"]}')
        assert data is not None
        assert data.weekdays == frozenset({Weekday.SUNDAY})

    def test_code_fences_stripped(self):
        text = "```json\n" + envelope(title="Trash", dueDate="2025-01-16") + "\n```"
        data = parse_enhancer_payload(text)
        assert data is not None
        assert data.due_date == date(2025, 1, 16)

    def test_surrounding_prose(self):
        text = 'Sure! Here it is: {"title": "Trash"} Let me know.'
        assert parse_enhancer_payload(text).title == "Trash"

    def test_single_digit_hour(self):
        assert parse_enhancer_payload('{"title": "Gym", "dueTime": "7:00"}').due_time == time(7, 0)

    def test_priority_case_insensitive(self):
        assert parse_enhancer_payload('{"title": "Rent", "priority": "High"}').priority == Priority.HIGH

    def test_monthly_marker(self):
        data = parse_enhancer_payload('{"title": "HVAC bill", "isRecurring": true, "recurringDays": ["monthly"]}')
        assert data.monthly is True
        assert data.weekdays == frozenset()

    def test_null_fields(self):
        data = parse_enhancer_payload('{"title": "Trash", "dueTime": "", "recurringDays": null, "dayOfMonth": null}')
        assert data.due_time is None
        assert data.recurring_days == []

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "I could not understand that.",
            "{not json}",
            "[1, 2, 3]",
            '{"dueTime": "07:00"}',
            '{"title": ""}',
            '{"title": "Gym", "dueTime": "25:99"}',
            '{"title": "Gym", "priority": "extreme"}',
            '{"title": "Rent", "dayOfMonth": 42}',
            '{"needsMoreInfo": true, "taskData": null}',
        ],
    )
    def test_unusable_answers(self, text):
        assert parse_enhancer_payload(text) is None

    def test_rejection_logged(self):
        with capture_logs() as logs:
            assert parse_enhancer_payload("sorry, no JSON today") is None

        assert logs[0]["event"] == "enhancer_payload_missing_json"
        assert logs[0]["log_level"] == "warning"


class TestEnhancedToDraft:
    """Tests for converting accepted payloads to drafts."""

    def test_title_is_distilled_again(self, pipeline):
        data = parse_enhancer_payload('{"title": "Pay the HVAC bill every month"}')
        draft = enhanced_to_draft(data, "pay the hvac bill every month", pipeline)
        assert draft.title_candidate == "Pay Hvac Bill"

    def test_monthly_day_read_from_transcript(self, pipeline):
        data = parse_enhancer_payload('{"title": "HVAC bill", "isRecurring": true, "recurringDays": ["monthly"]}')
        draft = enhanced_to_draft(data, "pay the hvac bill every month on the 20th", pipeline)
        assert draft.monthly is True
        assert draft.is_recurring is True
        assert draft.day_of_month == 20
        assert draft.frequency == Frequency.MONTHLY

    def test_missing_time_left_for_default(self, pipeline):
        data = parse_enhancer_payload('{"title": "Trash", "timeSpecified": false}')
        draft = enhanced_to_draft(data, "take out the trash", pipeline)
        assert draft.time_of_day is None
        assert draft.time_specified is False

    def test_missing_priority_classified_locally(self, pipeline):
        data = parse_enhancer_payload('{"title": "Meds"}')
        draft = enhanced_to_draft(data, "take medication", pipeline)
        assert draft.priority == Priority.HIGH

    def test_weekdays_make_it_recurring(self, pipeline):
        data = parse_enhancer_payload('{"title": "Trash", "recurringDays": ["tuesday"]}')
        draft = enhanced_to_draft(data, "trash out tuesday", pipeline)
        assert draft.is_recurring is True
        assert draft.recurrence_days == frozenset({Weekday.TUESDAY})


class TestPrompt:
    """Tests for the prompt builder."""

    def test_calendar_context(self, now):
        prompt = build_enhancer_prompt("call mom every sunday", now)
        assert "2025-01-15" in prompt
        assert "Wednesday" in prompt
        assert "2025-01-16" in prompt
        assert "January" in prompt
        assert "2025" in prompt
        assert '"call mom every sunday"' in prompt


class TestEnhancerGateway:
    """Tests for calling the service."""

    @pytest.mark.asyncio
    async def test_accepted_draft(self, pipeline, now):
        service = StaticEnhancer(envelope(title="Call mom", dueTime="18:00", isRecurring=True, recurringDays=["sunday"]))
        gateway = EnhancerGateway(service, pipeline, timeout=1.0)

        draft = await gateway.enhance("call mom every sunday evening", now)

        assert draft is not None
        assert draft.title_candidate == "Call Mom"
        assert draft.time_of_day == time(18, 0)
        assert draft.recurrence_days == frozenset({Weekday.SUNDAY})
        assert "call mom every sunday evening" in service.prompts[0]

    @pytest.mark.asyncio
    async def test_service_error_swallowed(self, pipeline, now):
        gateway = EnhancerGateway(FailingEnhancer(), pipeline, timeout=1.0)
        assert await gateway.enhance("call mom", now) is None

    @pytest.mark.asyncio
    async def test_timeout_swallowed(self, pipeline, now):
        gateway = EnhancerGateway(SlowEnhancer(), pipeline, timeout=0.05)
        assert await gateway.enhance("call mom", now) is None

    @pytest.mark.asyncio
    async def test_malformed_answer_swallowed(self, pipeline, now):
        gateway = EnhancerGateway(StaticEnhancer("sorry, no JSON today"), pipeline, timeout=1.0)
        assert await gateway.enhance("call mom", now) is None

    @pytest.mark.asyncio
    async def test_date_hint_for_one_time_task(self, pipeline, now):
        service = StaticEnhancer(envelope(title="Dentist", dueDate="2025-01-17", dueTime="15:00"))
        gateway = EnhancerGateway(service, pipeline, timeout=1.0)

        draft = await gateway.enhance("dentist friday at 3 pm", now)
        task = pipeline.build_task(draft, now)

        assert task.due_at == datetime(2025, 1, 17, 15, 0)
        assert task.is_recurring is False
