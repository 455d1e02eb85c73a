"""Completion aggregation and day-level mutation planning.

Reads tolerate several rows per (habit, day) and keep the highest value.
Writes are planned here as a ``DayMutation`` and applied by the repository in
a single commit, which also collapses duplicate rows for that day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..models.habit import Completion
from .progress import Tracking, UnitTracking, is_goal_met


def completion_value_by_day_key(completions: Iterable[Completion]) -> dict[int, int]:
    """Fold completion rows into the highest value recorded per day."""

    values: dict[int, int] = {}
    for completion in completions:
        current = values.get(completion.day_key, 0)
        values[completion.day_key] = max(current, completion.value)
    return values


def is_complete(tracking: Tracking, value: Optional[int]) -> bool:
    value = value or 0
    if isinstance(tracking, UnitTracking):
        return is_goal_met(value, tracking.goal_base_value)
    return value > 0


def completed_day_keys(tracking: Tracking, completions: Iterable[Completion]) -> set[int]:
    values = completion_value_by_day_key(completions)
    return {day_key for day_key, value in values.items() if is_complete(tracking, value)}


@dataclass(frozen=True)
class DayMutation:
    """Record changes for one (habit, day).

    ``value`` is the resulting day value, or ``None`` when the day ends empty.
    ``keep_id`` names the row to update; when it is ``None`` and ``value`` is
    set, a new row is inserted.
    """

    day_key: int
    value: Optional[int]
    keep_id: Optional[int] = None
    delete_ids: tuple[int, ...] = field(default_factory=tuple)


def _canonical(day_records: Sequence[Completion]) -> tuple[Optional[Completion], tuple[int, ...]]:
    """Pick the row that survives and the duplicate ids to delete.

    The survivor is the highest-value row (lowest id on ties) so the day keeps
    the value reads already report.
    """

    if not day_records:
        return None, ()
    ordered = sorted(day_records, key=lambda c: (-c.value, c.id if c.id is not None else 0))
    keep, extras = ordered[0], ordered[1:]
    return keep, tuple(c.id for c in extras if c.id is not None)


def plan_toggle(tracking: Tracking, day_key: int, day_records: Sequence[Completion]) -> DayMutation:
    """Plan a toggle press on ``day_key``.

    Checkmark habits flip between empty and 1. Unit habits ratchet up by the
    default increment, capped at the goal, and a press on a day that already
    meets the goal clears it.
    """

    keep, duplicates = _canonical(day_records)

    if not isinstance(tracking, UnitTracking):
        if keep is not None:
            return DayMutation(day_key=day_key, value=None, delete_ids=_with(duplicates, keep))
        return DayMutation(day_key=day_key, value=1)

    goal = tracking.goal_base_value
    increment = tracking.default_increment_base_value
    if keep is None:
        return DayMutation(day_key=day_key, value=min(increment, goal))
    if is_goal_met(keep.value, goal):
        return DayMutation(day_key=day_key, value=None, delete_ids=_with(duplicates, keep))
    return DayMutation(
        day_key=day_key,
        value=min(keep.value + increment, goal),
        keep_id=keep.id,
        delete_ids=duplicates,
    )


def plan_set_value(day_key: int, day_records: Sequence[Completion], value: int) -> DayMutation:
    """Plan a direct entry; values <= 0 clear the day."""

    if value <= 0:
        return plan_clear(day_key, day_records)
    keep, duplicates = _canonical(day_records)
    return DayMutation(
        day_key=day_key,
        value=value,
        keep_id=keep.id if keep is not None else None,
        delete_ids=duplicates,
    )


def plan_clear(day_key: int, day_records: Sequence[Completion]) -> DayMutation:
    ids = tuple(c.id for c in day_records if c.id is not None)
    return DayMutation(day_key=day_key, value=None, delete_ids=ids)


def _with(ids: tuple[int, ...], record: Completion) -> tuple[int, ...]:
    if record.id is None:
        return ids
    return (record.id, *ids)


__all__ = [
    "DayMutation",
    "completed_day_keys",
    "completion_value_by_day_key",
    "is_complete",
    "plan_clear",
    "plan_set_value",
    "plan_toggle",
]
