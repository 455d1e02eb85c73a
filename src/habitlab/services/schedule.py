"""Weekly recurrence masks and the rule for which days count toward streaks."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Iterable


class ExtraCompletionPolicy(str, Enum):
    """How completions on unscheduled days affect streak math."""

    COUNT_TOWARD_STREAKS = "countTowardStreaks"
    TOTALS_ONLY = "totalsOnly"


class WeekdaySet(int):
    """Seven-bit weekday mask, Sunday = bit 0 through Saturday = bit 6.

    Calendar weekdays are numbered 1 (Sunday) to 7 (Saturday).
    """

    ALL_BITS = 0b1111111

    def __new__(cls, raw_value: int = 0) -> "WeekdaySet":
        return super().__new__(cls, raw_value & cls.ALL_BITS)

    @classmethod
    def all(cls) -> "WeekdaySet":
        return cls(cls.ALL_BITS)

    @classmethod
    def empty(cls) -> "WeekdaySet":
        return cls(0)

    @classmethod
    def from_calendar_weekday(cls, weekday: int) -> "WeekdaySet":
        if 1 <= weekday <= 7:
            return cls(1 << (weekday - 1))
        return cls(0)

    @classmethod
    def from_weekdays(cls, weekdays: Iterable[int]) -> "WeekdaySet":
        result = cls(0)
        for weekday in weekdays:
            result = result.union(cls.from_calendar_weekday(weekday))
        return result

    def union(self, other: int) -> "WeekdaySet":
        return WeekdaySet(int(self) | int(other))

    def contains(self, other: int) -> bool:
        """True when every bit of ``other`` is set here."""

        return int(self) & int(other) == int(other)

    def contains_weekday(self, weekday: int) -> bool:
        single = WeekdaySet.from_calendar_weekday(weekday)
        return bool(single) and self.contains(single)

    @property
    def count(self) -> int:
        return bin(int(self)).count("1")

    def __repr__(self) -> str:
        return f"WeekdaySet(0b{int(self):07b})"


def calendar_weekday(day: date) -> int:
    """Weekday of ``day`` numbered 1 (Sunday) to 7 (Saturday)."""

    return day.isoweekday() % 7 + 1


def is_scheduled(day: date, schedule_mask: int) -> bool:
    return WeekdaySet(schedule_mask).contains_weekday(calendar_weekday(day))


def counts_toward_streak(
    day: date,
    schedule_mask: int,
    policy: ExtraCompletionPolicy,
    is_complete: bool = False,
) -> bool:
    """Whether ``day`` takes part in streak and rate math.

    Scheduled days always count, completed or not. An off day counts only when
    it was completed and the policy lets extra completions count.
    """

    if is_scheduled(day, schedule_mask):
        return True
    if ExtraCompletionPolicy(policy) is ExtraCompletionPolicy.COUNT_TOWARD_STREAKS:
        return is_complete
    return False


__all__ = [
    "ExtraCompletionPolicy",
    "WeekdaySet",
    "calendar_weekday",
    "counts_toward_streak",
    "is_scheduled",
]
