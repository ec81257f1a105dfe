"""
Ranker

Orders pending tasks by urgency score and picks out the danger zone: tasks
due within a short window that are worth interrupting the user for.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from taskclock.engine.models import Priority, ScheduledTask, UrgencyBand, UrgencyScore
from taskclock.engine.scoring import score_task


class RankView(enum.Enum):
    """Bounded views over a ranking."""
    TOP_3 = 3
    TOP_10 = 10
    ALL = None

    @property
    def limit(self) -> Optional[int]:
        return self.value


@dataclass(frozen=True)
class RankedTask:
    """A task with its score and position."""
    task: ScheduledTask
    score: UrgencyScore
    rank: int
    movement: int = 0  # positive = moved up since the previous ranking

    @property
    def value(self) -> float:
        return self.score.value

    @property
    def band(self) -> UrgencyBand:
        return self.score.band


class Ranker:
    """
    Sorts tasks by score and builds the danger zone.

    Ranking never mutates tasks.
    """

    # Routine chores that never belong in the danger zone
    ROUTINE_KEYWORDS = (
        "bathroom", "brush teeth", "watch tv", "shower", "bath", "wash face",
        "floss", "use restroom", "get dressed", "wake up", "go to bed",
        "skincare", "meditate", "relax",
    )

    def __init__(
        self,
        danger_zone_minutes: float = 30.0,
        overdue_exclusion_hours: float = 24.0,
    ):
        """
        Args:
            danger_zone_minutes: Tasks due sooner than this are in danger
            overdue_exclusion_hours: Tasks overdue longer than this drop out
        """
        self.danger_zone_seconds = danger_zone_minutes * 60
        self.overdue_exclusion_seconds = overdue_exclusion_hours * 3600

    def rank(
        self,
        tasks: Iterable[ScheduledTask],
        now: datetime,
        previous_ranks: Optional[Mapping[str, int]] = None,
    ) -> list[RankedTask]:
        """
        Rank pending tasks, highest score first, ties by title.

        Args:
            tasks: Tasks to rank; completed ones are skipped
            now: Scoring instant
            previous_ranks: task id -> rank from the last ranking, for movement
        """
        previous_ranks = previous_ranks or {}
        scored = [(task, score_task(task, now)) for task in tasks if not task.is_completed]
        scored.sort(key=lambda item: (-item[1].value, item[0].title))

        ranked = []
        for position, (task, task_score) in enumerate(scored, start=1):
            previous = previous_ranks.get(task.id, position)
            ranked.append(
                RankedTask(
                    task=task,
                    score=task_score,
                    rank=position,
                    movement=previous - position,
                )
            )
        return ranked

    def is_danger_exempt(self, task: ScheduledTask) -> bool:
        """Low-priority recurring tasks and routine chores stay out of the danger zone."""
        if task.priority == Priority.LOW and task.is_recurring:
            return True
        title = task.title.lower()
        return any(keyword in title for keyword in self.ROUTINE_KEYWORDS)

    def in_danger_zone(self, task: ScheduledTask, now: datetime) -> bool:
        if task.is_completed or self.is_danger_exempt(task):
            return False
        remaining = task.seconds_remaining(now)
        return -self.overdue_exclusion_seconds < remaining < self.danger_zone_seconds

    def danger_zone(self, ranked: Sequence[RankedTask], now: datetime) -> list[RankedTask]:
        """Danger-zone subset of a ranking, in rank order."""
        return [entry for entry in ranked if self.in_danger_zone(entry.task, now)]

    @staticmethod
    def view(ranked: Sequence[RankedTask], view: RankView = RankView.ALL) -> list[RankedTask]:
        """Bounded slice of a ranking."""
        if view.limit is None:
            return list(ranked)
        return list(ranked[: view.limit])
