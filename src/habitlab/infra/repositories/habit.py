"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, col, select

from ...models.habit import Completion, Habit
from ...services.completions import DayMutation


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_archived: bool = False) -> list[Habit]:
        """List habits in creation order, optionally including archived ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.created_at, Habit.id)  # type: ignore[arg-type]

            if not include_archived:
                statement = statement.where(Habit.is_archived == False)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self) -> list[Habit]:
        """List only habits that are not archived."""
        return self.list_all(include_archived=False)

    def search(self, query: str, limit: int = 10) -> list[Habit]:
        """Active habits whose name contains ``query``; suggestions when blank."""
        trimmed = query.strip()
        with self.session_factory() as session:
            statement = select(Habit).where(Habit.is_archived == False)  # noqa: E712
            if trimmed:
                statement = statement.where(col(Habit.name).icontains(trimmed))
            statement = statement.order_by(Habit.created_at, Habit.id).limit(limit)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit.normalize())
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            merged = session.merge(habit.normalize())
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its completions."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit:
                for completion in session.exec(
                    select(Completion).where(Completion.habit_id == habit_id)
                ).all():
                    session.delete(completion)
                session.delete(habit)
                session.commit()

    # Completion operations
    def list_completions(self, habit_id: int, day_key: Optional[int] = None) -> list[Completion]:
        """All completion rows for a habit, or only those on ``day_key``."""
        with self.session_factory() as session:
            statement = select(Completion).where(Completion.habit_id == habit_id)
            if day_key is not None:
                statement = statement.where(Completion.day_key == day_key)
            statement = statement.order_by(Completion.day_key, Completion.id)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_all_completions(self) -> list[Completion]:
        """Every completion row in the store."""
        with self.session_factory() as session:
            statement = select(Completion).order_by(Completion.habit_id, Completion.day_key)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def add_completion(self, completion: Completion) -> Completion:
        """Insert a completion row as-is, duplicates included."""
        with self.session_factory() as session:
            session.add(completion)
            session.commit()
            session.refresh(completion)
            session.expunge(completion)
            return completion

    def apply_day_mutation(self, habit_id: int, mutation: DayMutation) -> Optional[Completion]:
        """Apply a planned day change in one commit.

        Duplicate deletes and the update/insert land together or not at all.
        """
        with self.session_factory() as session:
            for completion_id in mutation.delete_ids:
                row = session.get(Completion, completion_id)
                if row is not None and row.habit_id == habit_id:
                    session.delete(row)

            result: Optional[Completion] = None
            if mutation.value is not None:
                if mutation.keep_id is not None:
                    result = session.get(Completion, mutation.keep_id)
                if result is None:
                    result = Completion(habit_id=habit_id, day_key=mutation.day_key, value=mutation.value)
                else:
                    result.value = mutation.value
                session.add(result)

            session.commit()
            if result is not None:
                session.refresh(result)
                session.expunge(result)
            return result
