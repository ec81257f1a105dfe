"""
Task Engine

Main coordinator: capture sessions, parsing, the task board, periodic
re-scoring and event emission.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

from taskclock.config import TaskClockConfig, get_config
from taskclock.engine.board import TaskBoard
from taskclock.engine.capture import CapturePipeline
from taskclock.engine.describe import confirmation_message
from taskclock.engine.enhancer import DraftEnhancer, EnhancerGateway
from taskclock.engine.errors import CaptureCancelled, CaptureStateError, NoSpeechDetected
from taskclock.engine.models import ScheduledTask
from taskclock.engine.ranking import RankedTask, Ranker, RankView
from taskclock.engine.scheduler import RankingScheduler
from taskclock.engine.transcript import CaptureState, TranscriptAccumulator
from taskclock.events import EventBus, TaskEvents, get_event_bus
from taskclock.utils.logging import bind_capture_context, clear_capture_context, get_logger

logger = get_logger(__name__)


class TaskEngine:
    """
    Temporal task engine.

    Provides:
    - Capture sessions fed by a streaming recognizer
    - Transcript parsing into scheduled tasks
    - Task lifecycle through a single owning board
    - Periodic urgency ranking
    - Lifecycle events for persistence and notification subscribers
    """

    def __init__(
        self,
        config: Optional[TaskClockConfig] = None,
        event_bus: Optional[EventBus] = None,
        enhancer: Optional[DraftEnhancer] = None,
        now_fn: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the engine.

        Args:
            config: Configuration (default: global config)
            event_bus: Bus for lifecycle events (default: global bus)
            enhancer: Optional external completion service
            now_fn: Clock, injectable for tests
        """
        self.config = config or get_config()
        self.event_bus = event_bus or get_event_bus()
        self.now_fn = now_fn

        self.capture = CapturePipeline.from_config(self.config.parsing)
        self.board = TaskBoard(
            Ranker(
                danger_zone_minutes=self.config.ranking.danger_zone_minutes,
                overdue_exclusion_hours=self.config.ranking.overdue_exclusion_hours,
            )
        )
        self.scheduler = RankingScheduler(
            self.board,
            on_update=self._on_ranking_updated,
            interval=self.config.scoring.refresh_interval,
            now_fn=now_fn,
        )

        self.enhancer: Optional[EnhancerGateway] = None
        if enhancer is not None and self.config.enhancer.enabled:
            self.enhancer = EnhancerGateway(enhancer, self.capture, timeout=self.config.enhancer.timeout)

        self._session: Optional[TranscriptAccumulator] = None
        self._finishing: list[TranscriptAccumulator] = []
        self._running = False

    async def start(self) -> None:
        """Start the engine (including the ranking scheduler)."""
        if self._running:
            return

        await self.scheduler.start()
        self._running = True
        logger.info("task_engine_started", enhancer=self.enhancer is not None)

    async def stop(self) -> None:
        """Stop the engine."""
        await self.scheduler.stop()
        self._running = False
        logger.info("task_engine_stopped")

    # =========================================================================
    # Capture sessions
    # =========================================================================

    def begin_capture(self, session_id: Optional[str] = None) -> TranscriptAccumulator:
        """Open a capture session, discarding any unfinished one."""
        if self._session is not None and self._session.is_open:
            logger.warning("capture_session_replaced")

        self._session = TranscriptAccumulator(
            drop_threshold=self.config.parsing.drop_threshold,
            separator=self.config.parsing.segment_separator,
        )
        bind_capture_context(session_id or uuid4().hex[:8])
        logger.debug("capture_started")
        return self._session

    def on_partial(self, text: str) -> str:
        """Feed a partial transcript to the open session."""
        return self._require_session().apply_delta(text)

    async def finish_capture(
        self, final_text: Optional[str] = None, now: Optional[datetime] = None
    ) -> ScheduledTask:
        """
        Close the session and turn its transcript into a task.

        Raises:
            CaptureStateError: No session is open
            NoSpeechDetected: Nothing was said
            CaptureCancelled: cancel_capture() ran while the transcript was
                being processed
        """
        session = self._require_session()
        self._finishing.append(session)
        try:
            text = session.finalize(final_text)
            # A new session may be opened while this one is being processed
            self._session = None
            return await self._process(text, now, session)
        finally:
            self._finishing.remove(session)
            if self._session is session:
                self._session = None
            if self._session is None:
                clear_capture_context()

    async def cancel_capture(self) -> None:
        """
        Abort the open session, or the sessions still being processed when
        none is open. No task is created for a cancelled session.
        """
        targets = [self._session] if self._session is not None else list(self._finishing)
        if not targets:
            return

        for session in targets:
            session.cancel()
        self._session = None
        logger.info("capture_cancelled", sessions=len(targets))
        clear_capture_context()
        await self.event_bus.emit(TaskEvents.CAPTURE_CANCELLED, {})

    @property
    def capturing(self) -> bool:
        return self._session is not None and self._session.is_open

    def _require_session(self) -> TranscriptAccumulator:
        if self._session is None:
            raise CaptureStateError("no capture session is open")
        return self._session

    # =========================================================================
    # Parsing
    # =========================================================================

    async def process(self, text: str, now: Optional[datetime] = None) -> ScheduledTask:
        """
        Turn a finalized transcript into a task on the board.

        This is the main entry point for the voice pipeline.

        Raises:
            NoSpeechDetected: The transcript was empty
        """
        return await self._process(text, now)

    async def _process(
        self,
        text: str,
        now: Optional[datetime] = None,
        session: Optional[TranscriptAccumulator] = None,
    ) -> ScheduledTask:
        now = now or self.now_fn()

        try:
            draft = self.capture.parse(text, now)
        except NoSpeechDetected:
            await self.event_bus.emit(TaskEvents.NO_SPEECH, {"text": text or ""})
            raise

        if self.enhancer is not None:
            enhanced = await self.enhancer.enhance(text, now)
            if enhanced is not None:
                draft = enhanced

        if session is not None and session.state is CaptureState.CANCELLED:
            logger.info("capture_cancelled_before_create", title=draft.title_candidate)
            raise CaptureCancelled()

        task = self.capture.build_task(draft, now)
        self.board.add(task)
        self.board.recalculate(now)

        logger.info(
            "task_created",
            task_id=task.id,
            title=task.title,
            due=task.due_at.isoformat(),
            frequency=task.frequency.value,
            priority=task.priority.value,
        )
        await self.event_bus.emit(
            TaskEvents.CREATED,
            {"task": task.to_dict(), "confirmation": confirmation_message(task)},
        )
        return task

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def complete_task(self, task_id: str, now: Optional[datetime] = None) -> ScheduledTask:
        now = now or self.now_fn()
        task = self.board.complete(task_id, now)
        self.board.recalculate(now)
        await self.event_bus.emit(TaskEvents.COMPLETED, {"task": task.to_dict()})
        return task

    async def uncomplete_task(self, task_id: str, now: Optional[datetime] = None) -> ScheduledTask:
        task = self.board.uncomplete(task_id)
        self.board.recalculate(now or self.now_fn())
        await self.event_bus.emit(TaskEvents.UNCOMPLETED, {"task": task.to_dict()})
        return task

    async def delete_task(self, task_id: str) -> ScheduledTask:
        task = self.board.delete(task_id)
        await self.event_bus.emit(TaskEvents.DELETED, {"task_id": task_id})
        return task

    async def update_task(
        self, task_id: str, now: Optional[datetime] = None, **changes: Any
    ) -> ScheduledTask:
        """Edit title, due_at, priority or recurrence_days of a task."""
        task = self.board.update(task_id, **changes)
        self.board.recalculate(now or self.now_fn())
        await self.event_bus.emit(
            TaskEvents.UPDATED,
            {"task": task.to_dict(), "fields": sorted(changes)},
        )
        return task

    # =========================================================================
    # Views
    # =========================================================================

    def list_tasks(self, include_completed: bool = False) -> list[ScheduledTask]:
        return self.board.tasks(include_completed=include_completed)

    def ranked(self, view: RankView = RankView.ALL) -> list[RankedTask]:
        return self.board.ranked(view)

    def danger_zone(self, now: Optional[datetime] = None) -> list[RankedTask]:
        return self.board.danger_zone(now or self.now_fn())

    def completed_today(self, now: Optional[datetime] = None) -> list[ScheduledTask]:
        return self.board.completed_today(now or self.now_fn())

    async def refresh(self) -> list[RankedTask]:
        """Re-score now instead of waiting for the next tick."""
        return await self.scheduler.refresh_now()

    async def _on_ranking_updated(self, ranked: list[RankedTask]) -> None:
        await self.event_bus.emit(
            TaskEvents.RANKING_UPDATED,
            {
                "ranking": [
                    {
                        "task_id": entry.task.id,
                        "rank": entry.rank,
                        "score": entry.value,
                        "band": entry.band.value,
                        "movement": entry.movement,
                    }
                    for entry in ranked
                ],
            },
        )
