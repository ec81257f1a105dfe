"""
Draft Enhancer

Accepts an already-structured draft from an optional external completion
service. The service is fallible: timeouts, exceptions, malformed JSON and
schema violations all count as "no enhancement" and local parsing proceeds.

Even an accepted payload is not trusted for scheduling. Its title is run
through the title distiller again, a missing monthly day is re-read from
the transcript, and the due moment is always resolved locally.
"""

from __future__ import annotations

import asyncio
import json
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from taskclock.engine.capture import CapturePipeline
from taskclock.engine.models import ParsedTaskDraft, Priority, Weekday
from taskclock.engine.normalizer import normalize
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


class DraftEnhancer(Protocol):
    """Protocol for an external completion service."""

    name: str

    async def complete(self, prompt: str) -> str:
        """Return the service's raw text answer to the prompt."""
        ...


class EnhancedTaskData(BaseModel):
    """Task fields as the completion service returns them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    due_date: Optional[date] = Field(default=None, alias="dueDate")
    due_time: Optional[time] = Field(default=None, alias="dueTime")
    time_specified: Optional[bool] = Field(default=None, alias="timeSpecified")
    day_of_month: Optional[int] = Field(default=None, alias="dayOfMonth", ge=1, le=31)
    priority: Optional[Priority] = None
    is_recurring: bool = Field(default=False, alias="isRecurring")
    recurring_days: list[str] = Field(default_factory=list, alias="recurringDays")

    @field_validator("due_date", "due_time", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if re.fullmatch(r"\d:\d{2}", v):
                return "0" + v
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def lower_priority(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("recurring_days", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def monthly(self) -> bool:
        return any(d.lower() == "monthly" for d in self.recurring_days)

    @property
    def yearly(self) -> bool:
        return any(d.lower() in ("yearly", "annually") for d in self.recurring_days)

    @property
    def weekdays(self) -> frozenset[Weekday]:
        names = {d.lower() for d in self.recurring_days}
        return frozenset(day for day in Weekday if day.value in names)


class EnhancerResponse(BaseModel):
    """Envelope some services wrap the task in."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    needs_more_info: bool = Field(default=False, alias="needsMoreInfo")
    question: Optional[str] = None
    task_data: Optional[EnhancedTaskData] = Field(default=None, alias="taskData")
    confirmation_message: Optional[str] = Field(default=None, alias="confirmationMessage")


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def build_enhancer_prompt(transcript: str, now: datetime) -> str:
    """Prompt giving the service the calendar context it needs."""
    today = now.date()
    tomorrow = today + timedelta(days=1)
    return (
        "You turn messy speech-recognition output into one task.\n"
        f"TODAY: {today.isoformat()} ({today.strftime('%A')})\n"
        f"TOMORROW: {tomorrow.isoformat()}\n"
        f"CURRENT MONTH: {today.strftime('%B')}\n"
        f"CURRENT YEAR: {today.year}\n"
        f'The user said: "{transcript}"\n'
        "\n"
        "Use a short title of 1-3 words. Give times as 24-hour HH:MM; "
        "if no time was said use 12:00 with timeSpecified false. "
        'For "every day" list all seven weekdays in recurringDays; for '
        '"every month on the 20th" use ["monthly"] with dayOfMonth 20; for '
        '"every Tuesday" use ["tuesday"].\n'
        "Return ONLY JSON of the form:\n"
        '{"needsMoreInfo": false, "taskData": {"title": "Brush teeth", '
        f'"dueDate": "{tomorrow.isoformat()}", "dueTime": "07:00", '
        '"timeSpecified": true, "dayOfMonth": null, "priority": "low", '
        '"isRecurring": true, "recurringDays": ["monday", "tuesday", '
        '"wednesday", "thursday", "friday", "saturday", "sunday"]}}'
    )


def parse_enhancer_payload(text: str) -> Optional[EnhancedTaskData]:
    """
    Extract task data from a service answer.

    Code fences are stripped and the outermost {...} object is decoded.
    Both a bare task object and a {"taskData": ...} envelope are accepted.

    Returns:
        The validated task data, or None when the answer is unusable
    """
    cleaned = _FENCE.sub("", (text or "").strip())
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end < start:
        logger.warning("enhancer_payload_missing_json", length=len(cleaned))
        return None

    try:
        data = json.loads(cleaned[start : end + 1])
        if not isinstance(data, dict):
            logger.warning("enhancer_payload_not_object")
            return None
        if "taskData" in data or "task_data" in data:
            return EnhancerResponse.model_validate(data).task_data
        return EnhancedTaskData.model_validate(data)
    except json.JSONDecodeError as e:
        logger.warning("enhancer_payload_invalid_json", error=str(e))
    except ValidationError as e:
        logger.warning("enhancer_payload_invalid", errors=e.error_count())
    return None


def enhanced_to_draft(
    payload: EnhancedTaskData,
    transcript: str,
    pipeline: CapturePipeline,
) -> ParsedTaskDraft:
    """Convert accepted task data into a draft the local resolver can use."""
    normalized = normalize(transcript)
    days = payload.weekdays
    monthly = payload.monthly
    yearly = payload.yearly
    is_recurring = payload.is_recurring or bool(days) or monthly or yearly

    day_of_month = payload.day_of_month
    if (monthly or yearly) and day_of_month is None:
        day_of_month = pipeline.temporal.day_of_month(normalized)

    time_specified = payload.due_time is not None and payload.time_specified is not False
    return ParsedTaskDraft(
        title_candidate=pipeline.titles.distill(normalize(payload.title)),
        time_of_day=payload.due_time,
        time_specified=time_specified,
        date_hint=None if is_recurring else payload.due_date,
        day_of_month=day_of_month,
        is_recurring=is_recurring,
        recurrence_days=days,
        monthly=monthly,
        yearly=yearly,
        month_of_year=pipeline.temporal.month_of_year(normalized) if yearly else None,
        priority=payload.priority or pipeline.priorities.classify(normalized),
        source_text=transcript,
    )


class EnhancerGateway:
    """
    Calls the external service with a deadline and never raises.

    Usage:
        gateway = EnhancerGateway(service, pipeline, timeout=10.0)
        draft = await gateway.enhance(transcript, now)  # None -> parse locally
    """

    def __init__(
        self,
        enhancer: DraftEnhancer,
        pipeline: CapturePipeline,
        timeout: float = 10.0,
    ):
        self.enhancer = enhancer
        self.pipeline = pipeline
        self.timeout = timeout

    async def enhance(self, transcript: str, now: datetime) -> Optional[ParsedTaskDraft]:
        """Enhanced draft, or None when the service gave nothing usable."""
        prompt = build_enhancer_prompt(transcript, now)
        name = getattr(self.enhancer, "name", type(self.enhancer).__name__)

        try:
            answer = await asyncio.wait_for(self.enhancer.complete(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("enhancer_timeout", enhancer=name, timeout=self.timeout)
            return None
        except Exception as e:
            logger.warning("enhancer_failed", enhancer=name, error=str(e))
            return None

        payload = parse_enhancer_payload(answer)
        if payload is None:
            return None

        draft = enhanced_to_draft(payload, transcript, self.pipeline)
        logger.info("enhancer_draft_accepted", enhancer=name, title=draft.title_candidate)
        return draft
