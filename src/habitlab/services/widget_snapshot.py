"""Home-screen widget snapshot and queued widget taps.

The widget only reads a JSON file; taps made while the app is closed are
queued in the same file and replayed through ``HabitService.toggle``.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..errors import HabitNotFoundError
from ..logging_config import get_logger
from .habits import HabitService

logger = get_logger(__name__)


@dataclass
class WidgetHabitSnapshot:
    id: int
    name: str
    icon_name: str
    color_name: str
    is_completed_today: bool
    tracking_mode: str
    completion_value_base: int
    unit_display_name: Optional[str]
    unit_base_scale: int
    unit_display_precision: int
    unit_goal_base_value: int
    unit_default_increment_base_value: int
    schedule_mask: int
    extra_completion_policy: str


@dataclass
class PendingToggle:
    habit_id: int
    day_key: int


@dataclass
class WidgetState:
    day_key: Optional[int] = None
    habits: list[WidgetHabitSnapshot] = field(default_factory=list)
    pending_toggles: list[PendingToggle] = field(default_factory=list)


def build_widget_snapshot(service: HabitService, day_key: int) -> list[WidgetHabitSnapshot]:
    """One entry per active habit with its value on ``day_key``."""

    snapshots = []
    for habit in service.repo.list_active():
        value = service.aggregate(habit).get(day_key, 0)
        snapshots.append(
            WidgetHabitSnapshot(
                id=habit.id,
                name=habit.name,
                icon_name=habit.icon_name,
                color_name=habit.color_name,
                is_completed_today=service.is_complete(habit, value),
                tracking_mode=habit.tracking_mode,
                completion_value_base=value,
                unit_display_name=habit.unit_display_name,
                unit_base_scale=habit.unit_base_scale,
                unit_display_precision=habit.unit_display_precision,
                unit_goal_base_value=max(habit.unit_goal_base_value or 1, 1),
                unit_default_increment_base_value=max(habit.unit_default_increment_base_value or 1, 1),
                schedule_mask=habit.schedule_mask,
                extra_completion_policy=habit.extra_completion_policy,
            )
        )
    return snapshots


class WidgetSnapshotStore:
    """JSON file shared between the app and the widget."""

    def __init__(self, path: Path):
        self.path = path

    def load_state(self) -> WidgetState:
        if not self.path.exists():
            return WidgetState()
        try:
            raw: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
            return WidgetState(
                day_key=raw.get("day_key"),
                habits=[WidgetHabitSnapshot(**h) for h in raw.get("habits", [])],
                pending_toggles=[PendingToggle(**t) for t in raw.get("pending_toggles", [])],
            )
        except (json.JSONDecodeError, TypeError) as exc:
            logger.warning(f"Discarding unreadable widget snapshot {self.path}: {exc}")
            return WidgetState()

    def save_state(self, state: WidgetState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(state), indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def enqueue_toggle(self, habit_id: int, day_key: int) -> None:
        state = self.load_state()
        state.pending_toggles.append(PendingToggle(habit_id=habit_id, day_key=day_key))
        self.save_state(state)

    def update_snapshot(self, service: HabitService, day_key: Optional[int] = None) -> WidgetState:
        state = self.load_state()
        state.day_key = day_key if day_key is not None else service.dates.day_key()
        state.habits = build_widget_snapshot(service, state.day_key)
        self.save_state(state)
        return state

    def apply_pending_toggles(self, service: HabitService) -> int:
        """Replay queued taps in order, then refresh the snapshot.

        Each tap leaves the saved queue as soon as it is committed.
        """

        state = self.load_state()
        if not state.pending_toggles:
            return 0

        applied = 0
        while state.pending_toggles:
            toggle = state.pending_toggles[0]
            try:
                habit = service.get_habit(toggle.habit_id)
            except HabitNotFoundError:
                logger.warning(f"Dropping widget toggle for missing habit {toggle.habit_id}")
            else:
                service.toggle(habit, toggle.day_key)
                applied += 1
            state.pending_toggles.pop(0)
            self.save_state(state)

        self.update_snapshot(service)
        return applied


__all__ = [
    "PendingToggle",
    "WidgetHabitSnapshot",
    "WidgetSnapshotStore",
    "WidgetState",
    "build_widget_snapshot",
]
