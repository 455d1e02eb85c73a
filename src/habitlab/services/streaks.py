"""Streak and completion-rate statistics over a habit's day values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Mapping, Optional

from .completions import is_complete
from .day_keys import DateLike, DayKey, last_n_days, local_date
from .progress import Tracking
from .schedule import ExtraCompletionPolicy, WeekdaySet, counts_toward_streak

RATE_WINDOW_DAYS = 30


@dataclass(frozen=True)
class StreakStats:
    current_streak: int
    longest_streak: int
    completion_rate_last_30_days: float


class _DayClassifier:
    """Answers "complete?" and "counts?" for a calendar day.

    All three statistics share one instance so they classify days identically.
    """

    def __init__(
        self,
        values_by_day_key: Mapping[int, int],
        tracking: Tracking,
        schedule_mask: int,
        policy: ExtraCompletionPolicy,
        tz: tzinfo,
    ) -> None:
        self._values = values_by_day_key
        self._tracking = tracking
        self._mask = schedule_mask
        self._policy = policy
        self._tz = tz

    def is_complete(self, day: date) -> bool:
        return is_complete(self._tracking, self._values.get(DayKey.from_date(day, self._tz)))

    def classify(self, day: date) -> tuple[bool, bool]:
        """Return ``(counts, complete)`` for ``day``."""

        complete = self.is_complete(day)
        return counts_toward_streak(day, self._mask, self._policy, complete), complete

    def earliest_day(self) -> Optional[date]:
        days = [d for d in map(DayKey.to_calendar_date, self._values) if d is not None]
        return min(days) if days else None


def _current_streak(classifier: _DayClassifier, today: date, earliest: Optional[date]) -> int:
    if earliest is None:
        return 0
    streak = 0
    cursor = today
    while cursor >= earliest:
        counts, complete = classifier.classify(cursor)
        if counts:
            if not complete:
                break
            streak += 1
        cursor -= timedelta(days=1)
    return streak


def _longest_streak(classifier: _DayClassifier, today: date, earliest: Optional[date]) -> int:
    if earliest is None:
        return 0
    longest = 0
    run = 0
    cursor = earliest
    while cursor <= today:
        counts, complete = classifier.classify(cursor)
        if counts:
            if complete:
                run += 1
                longest = max(longest, run)
            else:
                run = 0
        cursor += timedelta(days=1)
    return longest


def _completion_rate(classifier: _DayClassifier, today: date, tz: tzinfo) -> float:
    counted = 0
    completed = 0
    for entry in last_n_days(today, RATE_WINDOW_DAYS, tz):
        counts, complete = classifier.classify(entry.date)
        if counts:
            counted += 1
            if complete:
                completed += 1
    if counted == 0:
        return 0.0
    return completed / counted


def calculate_streak_stats(
    values_by_day_key: Mapping[int, int],
    tracking: Tracking,
    today: DateLike,
    tz: tzinfo,
    *,
    schedule_mask: int = WeekdaySet.ALL_BITS,
    policy: ExtraCompletionPolicy = ExtraCompletionPolicy.TOTALS_ONLY,
) -> StreakStats:
    """Compute current streak, longest streak and the trailing 30-day rate.

    Days that do not count under the schedule and policy are skipped: they
    neither extend nor break a run. Scans never reach before the earliest
    recorded day or after ``today``.
    """

    classifier = _DayClassifier(values_by_day_key, tracking, schedule_mask, policy, tz)
    day = local_date(today, tz)
    earliest = classifier.earliest_day()

    current = _current_streak(classifier, day, earliest)
    longest = max(_longest_streak(classifier, day, earliest), current)
    return StreakStats(
        current_streak=current,
        longest_streak=longest,
        completion_rate_last_30_days=_completion_rate(classifier, day, tz),
    )


__all__ = ["RATE_WINDOW_DAYS", "StreakStats", "calculate_streak_stats"]
