"""
Ranking Scheduler

Background timer that re-scores the board every few seconds so urgency
climbs as due moments approach.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from taskclock.engine.ranking import RankedTask
from taskclock.utils.logging import get_logger

if TYPE_CHECKING:
    from taskclock.engine.board import TaskBoard

logger = get_logger(__name__)


class RankingScheduler:
    """
    Periodically recalculates the board's ranking.

    Scoring is side-effect free, so a refresh only replaces the board's
    cached ranking; it never touches task state.
    """

    def __init__(
        self,
        board: "TaskBoard",
        on_update: Optional[Callable[[list[RankedTask]], Awaitable[None]]] = None,
        interval: float = 5.0,
        now_fn: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the scheduler.

        Args:
            board: The owning task board
            on_update: Async callback receiving each fresh ranking
            interval: Seconds between refreshes
            now_fn: Clock, injectable for tests
        """
        self.board = board
        self.on_update = on_update
        self.interval = interval
        self.now_fn = now_fn

        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the refresh loop."""
        if self._running:
            logger.warning("ranking_scheduler_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("ranking_scheduler_started", interval=self.interval)

    async def stop(self) -> None:
        """Stop the refresh loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("ranking_scheduler_stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.refresh_now()
            except Exception as e:
                logger.error("ranking_refresh_failed", error=str(e))

            await asyncio.sleep(self.interval)

    async def refresh_now(self) -> list[RankedTask]:
        """Recalculate immediately and notify the callback."""
        ranked = self.board.recalculate(self.now_fn())

        if self.on_update:
            try:
                await self.on_update(ranked)
            except Exception as e:
                logger.error("ranking_callback_failed", error=str(e))

        return ranked
