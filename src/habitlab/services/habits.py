"""Habit completion service: aggregation, toggles and statistics for one store.

Mutations are expected to run on a single writer; reads are pure over the rows
loaded from the repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from ..domain.repositories import HabitRepository
from ..errors import HabitNotFoundError, PersistenceError
from ..logging_config import get_logger
from ..models.habit import Completion, Habit
from . import completions as agg
from .completions import DayMutation
from .day_keys import DateLike, DateProvider
from .progress import UnitTracking, formatted_display
from .progress import progress_text as _progress_text
from .schedule import WeekdaySet, is_scheduled
from .streaks import StreakStats, calculate_streak_stats

logger = get_logger(__name__)


@dataclass(frozen=True)
class HabitSummary:
    """Everything a habit detail screen shows about its history."""

    stats: StreakStats
    total_completions: int
    completion_rate_text: str
    is_scheduled_today: bool
    today_progress_text: Optional[str]
    target_label: str
    target_summary: str


def percent_text(rate: float) -> str:
    percentage = int(Decimal(repr(rate * 100.0)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return f"{percentage}%"


class HabitService:
    """Entry points used by screens, shortcuts, widgets and the CLI."""

    def __init__(self, repo: HabitRepository, dates: Optional[DateProvider] = None):
        self.repo = repo
        self.dates = dates or DateProvider()

    # Lookups
    def get_habit(self, habit_id: int) -> Habit:
        habit = self.repo.get_by_id(habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    # Reads
    def aggregate(self, habit: Habit) -> dict[int, int]:
        return agg.completion_value_by_day_key(self.repo.list_completions(habit.id))

    def is_complete(self, habit: Habit, value: Union[int, Completion, None]) -> bool:
        if isinstance(value, Completion):
            value = value.value
        return agg.is_complete(habit.tracking, value)

    def completed_day_keys(self, habit: Habit) -> set[int]:
        return agg.completed_day_keys(habit.tracking, self.repo.list_completions(habit.id))

    def compute_streak_stats(self, habit: Habit, today: Optional[DateLike] = None) -> StreakStats:
        return calculate_streak_stats(
            self.aggregate(habit),
            habit.tracking,
            today if today is not None else self.dates.now(),
            self.dates.tz,
            schedule_mask=habit.schedule_mask,
            policy=habit.policy,
        )

    def progress_text(self, habit: Habit, current_value: Optional[int]) -> Optional[str]:
        return _progress_text(habit.tracking, current_value)

    def summary(self, habit: Habit) -> HabitSummary:
        values = self.aggregate(habit)
        tracking = habit.tracking
        stats = self.compute_streak_stats(habit)
        total = sum(1 for value in values.values() if agg.is_complete(tracking, value))

        if isinstance(tracking, UnitTracking) and tracking.unit.display_name:
            target_label = "Goal"
            target_summary = formatted_display(tracking.goal_base_value, tracking.unit)
        else:
            target_label = "Schedule"
            target_summary = f"{WeekdaySet(habit.schedule_mask).count}/week"

        return HabitSummary(
            stats=stats,
            total_completions=total,
            completion_rate_text=percent_text(stats.completion_rate_last_30_days),
            is_scheduled_today=is_scheduled(self.dates.today(), habit.schedule_mask),
            today_progress_text=_progress_text(tracking, values.get(self.dates.day_key())),
            target_label=target_label,
            target_summary=target_summary,
        )

    # Mutations
    def toggle(self, habit: Habit, day_key: int) -> Optional[Completion]:
        """Toggle ``day_key``; returns the surviving record or ``None`` if cleared."""
        day_records = self.repo.list_completions(habit.id, day_key=day_key)
        mutation = agg.plan_toggle(habit.tracking, day_key, day_records)
        return self._apply(habit, mutation, action="toggle")

    def set_value(self, habit: Habit, day_key: int, base_value: int) -> Optional[Completion]:
        day_records = self.repo.list_completions(habit.id, day_key=day_key)
        mutation = agg.plan_set_value(day_key, day_records, base_value)
        return self._apply(habit, mutation, action="set")

    def clear(self, habit: Habit, day_key: int) -> None:
        day_records = self.repo.list_completions(habit.id, day_key=day_key)
        self._apply(habit, agg.plan_clear(day_key, day_records), action="clear")

    def toggle_today(self, habit_id: int) -> bool:
        """Toggle today for a habit looked up by id; True when today ends complete."""
        habit = self.get_habit(habit_id)
        completion = self.toggle(habit, self.dates.day_key())
        return self.is_complete(habit, completion)

    def _apply(self, habit: Habit, mutation: DayMutation, *, action: str) -> Optional[Completion]:
        try:
            result = self.repo.apply_day_mutation(habit.id, mutation)
        except SQLAlchemyError as exc:
            logger.error(
                f"Failed to {action} completion for habit {habit.id}: {exc}",
                exc_info=True,
                extra={"habit_id": habit.id, "day_key": mutation.day_key},
            )
            raise PersistenceError(f"could not save {action} for habit {habit.id}") from exc

        logger.info(
            f"Habit {habit.id} {action} on {mutation.day_key}",
            extra={
                "habit_id": habit.id,
                "day_key": mutation.day_key,
                "value": mutation.value,
                "deleted_rows": len(mutation.delete_ids),
            },
        )
        return result


__all__ = ["HabitService", "HabitSummary", "percent_text"]
