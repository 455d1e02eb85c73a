"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import Completion, Habit
from ...services.completions import DayMutation


class HabitRepository(Protocol):
    """Repository for habits and their completion records."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, include_archived: bool = False) -> list[Habit]:
        """List habits in creation order, optionally including archived ones."""
        ...

    def list_active(self) -> list[Habit]:
        """List only habits that are not archived."""
        ...

    def search(self, query: str, limit: int = 10) -> list[Habit]:
        """Active habits whose name contains ``query``."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its completions."""
        ...

    # Completion operations
    def list_completions(self, habit_id: int, day_key: Optional[int] = None) -> list[Completion]:
        """All completion rows for a habit, or only those on ``day_key``."""
        ...

    def list_all_completions(self) -> list[Completion]:
        """Every completion row in the store."""
        ...

    def add_completion(self, completion: Completion) -> Completion:
        """Insert a completion row as-is, duplicates included."""
        ...

    def apply_day_mutation(self, habit_id: int, mutation: DayMutation) -> Optional[Completion]:
        """Apply a planned day change atomically; return the surviving row."""
        ...
