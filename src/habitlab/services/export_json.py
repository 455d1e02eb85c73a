"""JSON export/import of habits and completions."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from sqlmodel import Session, select

from ..errors import ImportFormatError
from ..logging_config import get_logger
from ..models.habit import Completion, Habit

logger = get_logger(__name__)

SessionFactory = Callable[[], Session]

# (export key, model attribute, default when missing on import)
_HABIT_FIELDS: tuple[tuple[str, str, Any], ...] = (
    ("name", "name", None),
    ("description", "description", ""),
    ("iconName", "icon_name", "checkmark"),
    ("colorName", "color_name", "blue"),
    ("isArchived", "is_archived", False),
    ("trackingMode", "tracking_mode", "checkmark"),
    ("scheduleMask", "schedule_mask", 127),
    ("extraCompletionPolicy", "extra_completion_policy", "totalsOnly"),
    ("unitDisplayName", "unit_display_name", None),
    ("unitBaseName", "unit_base_name", None),
    ("unitBaseScale", "unit_base_scale", 1),
    ("unitDisplayPrecision", "unit_display_precision", 0),
    ("unitGoalBaseValue", "unit_goal_base_value", None),
    ("unitDefaultIncrementBaseValue", "unit_default_increment_base_value", None),
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _parse_iso(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _habit_to_dict(habit: Habit) -> dict[str, Any]:
    data: dict[str, Any] = {"id": habit.id, "createdAt": _iso(habit.created_at)}
    for key, attr, _default in _HABIT_FIELDS:
        data[key] = getattr(habit, attr)
    return data


def _completion_to_dict(completion: Completion) -> dict[str, Any]:
    return {
        "id": completion.id,
        "habitId": completion.habit_id,
        "dayKey": completion.day_key,
        "value": completion.value,
        "createdAt": _iso(completion.created_at),
    }


def build_payload(session_factory: SessionFactory) -> dict[str, Any]:
    """Snapshot every habit and completion as a JSON-ready dict."""

    with session_factory() as session:
        habits = session.exec(select(Habit).order_by(Habit.id)).all()  # type: ignore[arg-type]
        completions = session.exec(select(Completion).order_by(Completion.id)).all()  # type: ignore[arg-type]
        return {
            "habits": [_habit_to_dict(h) for h in habits],
            "completions": [_completion_to_dict(c) for c in completions],
            "exportedAt": _iso(datetime.now(timezone.utc)),
        }


def export_json(session_factory: SessionFactory, output_path: Path) -> Path:
    """Write the payload pretty-printed with sorted keys and return the path."""

    payload = build_payload(session_factory)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True)
    logger.info(
        f"Exported {len(payload['habits'])} habits to {output_path}",
        extra={"completions": len(payload["completions"])},
    )
    return output_path


def _apply_habit(session: Session, data: dict[str, Any]) -> Habit:
    habit_id = int(data["id"])
    habit = session.get(Habit, habit_id) or Habit(id=habit_id, name=str(data["name"]))
    habit.name = str(data["name"])
    for key, attr, default in _HABIT_FIELDS[1:]:
        setattr(habit, attr, data.get(key, default))
    habit.created_at = _parse_iso(data.get("createdAt"))
    session.add(habit.normalize())
    return habit


def _apply_completion(session: Session, data: dict[str, Any]) -> Completion:
    completion_id = int(data["id"])
    completion = session.get(Completion, completion_id) or Completion(
        id=completion_id, habit_id=int(data["habitId"]), day_key=int(data["dayKey"])
    )
    completion.habit_id = int(data["habitId"])
    completion.day_key = int(data["dayKey"])
    completion.value = max(0, int(data.get("value", 1)))
    completion.created_at = _parse_iso(data.get("createdAt"))
    session.add(completion)
    return completion


def import_payload(session_factory: SessionFactory, payload: dict[str, Any]) -> tuple[int, int]:
    """Upsert habits and completions by id in one transaction.

    Completions pointing at habits absent from both the payload and the store
    are skipped. Returns (habits_applied, completions_applied).
    """

    try:
        habit_rows = list(payload["habits"])
        completion_rows = list(payload["completions"])
    except (KeyError, TypeError) as exc:
        raise ImportFormatError("payload must contain 'habits' and 'completions' lists") from exc

    with session_factory() as session:
        try:
            known_ids = {h.id for h in session.exec(select(Habit)).all()}
            for row in habit_rows:
                known_ids.add(_apply_habit(session, row).id)
                session.flush()

            applied = 0
            for row in completion_rows:
                if int(row["habitId"]) not in known_ids:
                    continue
                _apply_completion(session, row)
                session.flush()
                applied += 1
        except (KeyError, TypeError, ValueError) as exc:
            session.rollback()
            raise ImportFormatError(f"malformed import record: {exc}") from exc
        session.commit()

    logger.info(
        f"Imported {len(habit_rows)} habits",
        extra={"completions": applied, "skipped": len(completion_rows) - applied},
    )
    return len(habit_rows), applied


def import_json(session_factory: SessionFactory, input_path: Path) -> tuple[int, int]:
    try:
        with input_path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"{input_path} is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ImportFormatError("payload must be a JSON object")
    return import_payload(session_factory, payload)


__all__ = ["build_payload", "export_json", "import_json", "import_payload"]
