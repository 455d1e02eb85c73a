"""Unit configuration, base/display conversion and tracking variants."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Union


class TrackingMode(str, Enum):
    CHECKMARK = "checkmark"
    UNIT = "unit"


@dataclass(frozen=True)
class HabitUnit:
    """Display/base naming for a unit habit, e.g. hours shown, minutes stored.

    ``base_scale`` is how many base units make one display unit.
    """

    display_name: str
    base_name: str
    base_scale: int = 1
    display_precision: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_scale", max(1, int(self.base_scale)))
        object.__setattr__(self, "display_precision", max(0, int(self.display_precision)))


@dataclass(frozen=True)
class Checkmark:
    mode = TrackingMode.CHECKMARK


@dataclass(frozen=True)
class UnitTracking:
    unit: HabitUnit
    goal_base_value: int = 1
    default_increment_base_value: int = 1

    mode = TrackingMode.UNIT

    def __post_init__(self) -> None:
        object.__setattr__(self, "goal_base_value", max(1, int(self.goal_base_value)))
        object.__setattr__(
            self, "default_increment_base_value", max(1, int(self.default_increment_base_value))
        )


Tracking = Union[Checkmark, UnitTracking]


def base_value_from_display(display_value: float, unit: HabitUnit) -> int:
    """Scale a display quantity to base units, rounding half away from zero."""

    scaled = Decimal(display_value * unit.base_scale)
    rounded = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, rounded)


def display_value_from_base(base_value: int, unit: HabitUnit) -> float:
    return base_value / unit.base_scale


def is_goal_met(current_base: int, goal_base: int) -> bool:
    if goal_base <= 0:
        return False
    return current_base >= goal_base


def progress(current_base: int, goal_base: int) -> float:
    """Fraction of the goal reached, clamped to [0, 1]."""

    if goal_base <= 0:
        return 0.0
    return min(max(0, current_base) / goal_base, 1.0)


def _format_number(value: float, precision: int) -> str:
    quantized = Decimal(repr(value)).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    return f"{quantized:,.{precision}f}"


def formatted_display(base_value: int, unit: HabitUnit) -> str:
    value = display_value_from_base(base_value, unit)
    return f"{_format_number(value, unit.display_precision)} {unit.display_name}"


def formatted_progress(current_base: int, goal_base: int, unit: HabitUnit) -> str:
    current = _format_number(display_value_from_base(current_base, unit), unit.display_precision)
    goal = _format_number(display_value_from_base(goal_base, unit), unit.display_precision)
    return f"{current}/{goal} {unit.display_name}"


def progress_text(tracking: Tracking, current_base: Optional[int]) -> Optional[str]:
    """``"current/goal unit"`` for unit habits, ``None`` for checkmarks.

    Unit habits without a unit name have no text either.
    """

    if not isinstance(tracking, UnitTracking) or not tracking.unit.display_name:
        return None
    return formatted_progress(current_base or 0, tracking.goal_base_value, tracking.unit)


__all__ = [
    "Checkmark",
    "HabitUnit",
    "Tracking",
    "TrackingMode",
    "UnitTracking",
    "base_value_from_display",
    "display_value_from_base",
    "formatted_display",
    "formatted_progress",
    "is_goal_met",
    "progress",
    "progress_text",
]
