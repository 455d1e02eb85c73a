"""Exceptions surfaced to callers of the habit services."""

from __future__ import annotations


class HabitLabError(Exception):
    pass


class PersistenceError(HabitLabError):
    """A save/commit failed while applying a completion change."""


class HabitNotFoundError(HabitLabError):
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"habit {habit_id} not found")


class ImportFormatError(HabitLabError):
    """An import payload did not match the export format."""


__all__ = ["HabitLabError", "HabitNotFoundError", "ImportFormatError", "PersistenceError"]
