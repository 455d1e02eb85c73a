"""Pytest configuration and shared fixtures for HabitLab tests.

This module provides database fixtures, test data factories, and helper utilities
for testing domain logic, repositories, and services without touching the real app database.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitlab.models import Completion, Habit
from habitlab.infra.repositories import SQLModelHabitRepository
from habitlab.services.day_keys import DateProvider, DayKey
from habitlab.services.habits import HabitService

UTC = ZoneInfo("UTC")


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point config at a per-test data directory."""

    data_dir = tmp_path / "instance"
    monkeypatch.setenv("HABITLAB_DATA_DIR", str(data_dir))
    monkeypatch.setenv("HABITLAB_TIMEZONE", "UTC")
    monkeypatch.delenv("HABITLAB_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITLAB_CLOUD_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITLAB_SYNC_ENABLED", raising=False)
    return data_dir


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the Callable[[], Session] repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def tz():
    return UTC


@pytest.fixture
def frozen_dates():
    """DateProvider pinned to noon UTC on 2026-01-15 (a Thursday)."""

    return DateProvider.fixed(datetime(2026, 1, 15, 12, 0, tzinfo=UTC), UTC)


@pytest.fixture
def service(repo, frozen_dates) -> HabitService:
    return HabitService(repo, frozen_dates)


# =============================================================================
# Test Data Factories
# =============================================================================


def key(year: int, month: int, day: int) -> int:
    """Day key for a calendar date."""
    return DayKey.from_date(date(year, month, day), UTC)


@pytest.fixture
def habit_factory(session_factory):
    """Factory for creating test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(name: str = "Test Habit", **fields) -> Habit:
        habit = Habit(name=name, **fields)
        with session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def unit_habit_factory(habit_factory):
    """Factory for unit-tracked habits (defaults: minutes shown as hours)."""

    def _create_unit_habit(
        name: str = "Reading",
        goal: int = 1000,
        increment: int = 300,
        scale: int = 60,
        precision: int = 1,
        **fields,
    ) -> Habit:
        return habit_factory(
            name=name,
            tracking_mode="unit",
            unit_display_name="hours",
            unit_base_name="minutes",
            unit_base_scale=scale,
            unit_display_precision=precision,
            unit_goal_base_value=goal,
            unit_default_increment_base_value=increment,
            **fields,
        )

    return _create_unit_habit


@pytest.fixture
def completion_factory(session_factory):
    """Factory for raw completion rows, duplicates allowed."""

    def _create_completion(habit: Habit, day_key: int, value: int = 1) -> Completion:
        completion = Completion(habit_id=habit.id, day_key=day_key, value=value)
        with session_factory() as session:
            session.add(completion)
            session.commit()
            session.refresh(completion)
        return completion

    return _create_completion
