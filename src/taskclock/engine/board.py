"""
Task Board

The single owning context for scheduled tasks. Every mutation
(add, complete, uncomplete, edit, delete) goes through the board, and the
board keeps the most recent ranking so views can be served without
re-scoring.

Lifecycle:
    pending -> completed      (sets completed_at)
    completed -> pending      (clears completed_at)
    pending/completed -> gone (delete; removed from every view)
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Iterable, Optional

from taskclock.engine.errors import InvalidTransition, TaskNotFound
from taskclock.engine.models import (
    ALL_WEEKDAYS,
    Frequency,
    Priority,
    ScheduledTask,
    Weekday,
)
from taskclock.engine.ranking import RankedTask, Ranker, RankView
from taskclock.utils.logging import get_logger

logger = get_logger(__name__)


class TaskBoard:
    """
    In-memory owner of tasks and their latest ranking.

    Storage belongs to whoever listens to the engine's events; the board
    only holds the live set.
    """

    def __init__(self, ranker: Optional[Ranker] = None, tasks: Iterable[ScheduledTask] = ()):
        self.ranker = ranker or Ranker()
        self._tasks: dict[str, ScheduledTask] = {}
        self._ranking: list[RankedTask] = []
        self._previous_ranks: dict[str, int] = {}
        self.ranked_at: Optional[datetime] = None
        for task in tasks:
            self.add(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, task: ScheduledTask) -> ScheduledTask:
        if task.id in self._tasks:
            raise InvalidTransition(f"Task already on the board: {task.id}")
        self._tasks[task.id] = task
        logger.info("task_added", task_id=task.id, title=task.title, due=task.due_at.isoformat())
        return task

    def get(self, task_id: str) -> ScheduledTask:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskNotFound(task_id) from None

    def complete(self, task_id: str, now: datetime) -> ScheduledTask:
        """Mark a pending task completed at now."""
        task = self.get(task_id)
        if task.is_completed:
            raise InvalidTransition(f"Task already completed: {task_id}")

        task.is_completed = True
        task.completed_at = now
        self._drop_from_ranking(task_id)
        logger.info("task_completed", task_id=task_id, title=task.title)
        return task

    def uncomplete(self, task_id: str) -> ScheduledTask:
        """Return a completed task to pending."""
        task = self.get(task_id)
        if not task.is_completed:
            raise InvalidTransition(f"Task is not completed: {task_id}")

        task.is_completed = False
        task.completed_at = None
        self._refresh_ranking()
        logger.info("task_uncompleted", task_id=task_id, title=task.title)
        return task

    def delete(self, task_id: str) -> ScheduledTask:
        """Remove a task for good."""
        task = self._tasks.pop(task_id, None)
        if task is None:
            raise TaskNotFound(task_id)
        self._drop_from_ranking(task_id)
        logger.info("task_deleted", task_id=task_id, title=task.title)
        return task

    def update(
        self,
        task_id: str,
        *,
        title: Optional[str] = None,
        due_at: Optional[datetime] = None,
        priority: Optional[Priority] = None,
        recurrence_days: Optional[Iterable[Weekday]] = None,
    ) -> ScheduledTask:
        """
        Edit a task in place. Fields left as None keep their value.

        Changing recurrence_days re-derives is_recurring and frequency; an
        empty set makes the task one-time.
        """
        task = self.get(task_id)
        changes: dict = {}
        if title is not None:
            if not title.strip():
                raise ValueError("title must not be empty")
            changes["title"] = title.strip()
        if due_at is not None:
            changes["due_at"] = due_at
        if priority is not None:
            changes["priority"] = Priority(priority)
        if recurrence_days is not None:
            days = frozenset(recurrence_days)
            changes.update(
                recurrence_days=days,
                is_recurring=bool(days),
                frequency=_frequency_for(days),
                day_of_month=None,
            )

        # replace() re-runs the model's invariant checks
        updated = dataclasses.replace(task, **changes)
        self._tasks[task_id] = updated
        self._refresh_ranking()
        logger.info("task_updated", task_id=task_id, fields=sorted(changes))
        return updated

    # =========================================================================
    # Views
    # =========================================================================

    def tasks(self, include_completed: bool = True) -> list[ScheduledTask]:
        return [t for t in self._tasks.values() if include_completed or not t.is_completed]

    def pending(self) -> list[ScheduledTask]:
        return self.tasks(include_completed=False)

    def recalculate(self, now: datetime) -> list[RankedTask]:
        """Re-score every pending task and remember the new order."""
        self._previous_ranks = {entry.task.id: entry.rank for entry in self._ranking}
        self._ranking = self.ranker.rank(self._tasks.values(), now, self._previous_ranks)
        self.ranked_at = now
        moved = sum(1 for entry in self._ranking if entry.movement)
        logger.debug("ranking_recalculated", tasks=len(self._ranking), moved=moved)
        return list(self._ranking)

    def ranked(self, view: RankView = RankView.ALL) -> list[RankedTask]:
        """Latest ranking, bounded by view."""
        return self.ranker.view(self._ranking, view)

    def top(self, n: int) -> list[RankedTask]:
        return list(self._ranking[:n])

    def danger_zone(self, now: datetime) -> list[RankedTask]:
        """Danger-zone subset of the latest ranking, judged at now."""
        return self.ranker.danger_zone(self._ranking, now)

    def completed_today(self, now: datetime) -> list[ScheduledTask]:
        """Tasks completed on now's calendar day, most recent first."""
        done = [
            t for t in self._tasks.values()
            if t.is_completed and t.completed_at and t.completed_at.date() == now.date()
        ]
        return sorted(done, key=lambda t: t.completed_at, reverse=True)

    def _drop_from_ranking(self, task_id: str) -> None:
        self._ranking = [entry for entry in self._ranking if entry.task.id != task_id]

    def _refresh_ranking(self) -> None:
        """Re-rank at the last ranking instant so cached entries see an edit."""
        if self.ranked_at is not None:
            self._ranking = self.ranker.rank(self._tasks.values(), self.ranked_at, self._previous_ranks)


def _frequency_for(days: frozenset[Weekday]) -> Frequency:
    if not days:
        return Frequency.ONCE
    if days == ALL_WEEKDAYS:
        return Frequency.DAILY
    return Frequency.WEEKLY
