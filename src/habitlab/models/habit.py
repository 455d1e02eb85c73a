"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..services.progress import Checkmark, HabitUnit, Tracking, TrackingMode, UnitTracking
from ..services.schedule import ExtraCompletionPolicy, WeekdaySet


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A user-defined habit tracked per calendar day."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    icon_name: str = Field(default="checkmark", max_length=64)
    color_name: str = Field(default="blue", max_length=32)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    is_archived: bool = Field(default=False, nullable=False)

    tracking_mode: str = Field(default=TrackingMode.CHECKMARK.value, max_length=16)
    schedule_mask: int = Field(default=WeekdaySet.ALL_BITS, nullable=False)
    extra_completion_policy: str = Field(
        default=ExtraCompletionPolicy.TOTALS_ONLY.value, max_length=32
    )

    # Only meaningful when tracking_mode == "unit"
    unit_display_name: Optional[str] = Field(default=None, max_length=32)
    unit_base_name: Optional[str] = Field(default=None, max_length=32)
    unit_base_scale: int = Field(default=1, nullable=False)
    unit_display_precision: int = Field(default=0, nullable=False)
    unit_goal_base_value: Optional[int] = Field(default=None)
    unit_default_increment_base_value: Optional[int] = Field(default=None)

    @property
    def tracking(self) -> Tracking:
        """Tagged tracking variant with defaults and clamping applied."""

        if self.tracking_mode != TrackingMode.UNIT.value:
            return Checkmark()
        display_name = self.unit_display_name or self.unit_base_name or ""
        unit = HabitUnit(
            display_name=display_name,
            base_name=self.unit_base_name or display_name,
            base_scale=self.unit_base_scale,
            display_precision=self.unit_display_precision,
        )
        return UnitTracking(
            unit=unit,
            goal_base_value=self.unit_goal_base_value or 1,
            default_increment_base_value=self.unit_default_increment_base_value or 1,
        )

    @property
    def policy(self) -> ExtraCompletionPolicy:
        try:
            return ExtraCompletionPolicy(self.extra_completion_policy)
        except ValueError:
            return ExtraCompletionPolicy.TOTALS_ONLY

    def normalize(self) -> "Habit":
        """Clamp stored unit fields at the write boundary."""

        self.unit_base_scale = max(1, self.unit_base_scale or 1)
        self.unit_display_precision = max(0, self.unit_display_precision or 0)
        if self.unit_goal_base_value is not None:
            self.unit_goal_base_value = max(1, self.unit_goal_base_value)
        if self.unit_default_increment_base_value is not None:
            self.unit_default_increment_base_value = max(1, self.unit_default_increment_base_value)
        self.schedule_mask = int(WeekdaySet(self.schedule_mask))
        return self


class Completion(SQLModel, table=True):
    """A recorded value for a habit on one calendar day.

    Several rows may share (habit_id, day_key) in legacy or imported data.
    """

    __tablename__: ClassVar[str] = "completion"

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    day_key: int = Field(nullable=False, index=True)
    value: int = Field(default=1, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
