"""Command-line entry points for HabitLab (shortcut-style quick actions)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

import click
from sqlmodel import Session

from .config import BaseConfig
from .errors import HabitLabError
from .infra.database import create_store
from .infra.repositories import SQLModelHabitRepository
from .logging_config import get_logger, setup_logging
from .models.habit import Habit
from .services import export_json
from .services.day_keys import DateProvider, DayKey
from .services.habits import HabitService
from .services.progress import HabitUnit, TrackingMode, base_value_from_display
from .services.schedule import ExtraCompletionPolicy, WeekdaySet
from .services.sync import SyncSettings, migrate_sync
from .services.widget_snapshot import WidgetSnapshotStore

logger = get_logger(__name__)


@dataclass
class CliContext:
    config: BaseConfig
    session_factory: Callable[[], Session]
    sync: SyncSettings
    service: HabitService


def _build_context(config: Optional[BaseConfig] = None) -> CliContext:
    config = config or BaseConfig()
    setup_logging(config)
    _engine, local_factory = create_store(config, sync_enabled=False)
    sync = SyncSettings.from_config(config, local_factory)
    session_factory = local_factory
    if sync.is_enabled():
        _engine, session_factory = create_store(config, sync_enabled=True)
    service = HabitService(SQLModelHabitRepository(session_factory), DateProvider.live(config.TIMEZONE))
    # Widget taps made while nothing was running
    try:
        WidgetSnapshotStore(config.widget_snapshot_path).apply_pending_toggles(service)
    except HabitLabError as exc:
        logger.warning(f"Widget taps left queued: {exc}")
    return CliContext(config, session_factory, sync, service)


pass_context = click.make_pass_decorator(CliContext)


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Track habits and inspect streaks."""

    if ctx.obj is None:
        ctx.obj = _build_context()


def _refresh_widget(ctx: CliContext) -> None:
    WidgetSnapshotStore(ctx.config.widget_snapshot_path).update_snapshot(ctx.service)


@main.command("add")
@click.argument("name")
@click.option("--days", default="1234567", help="Scheduled weekdays, 1=Sunday .. 7=Saturday")
@click.option("--extra-counts", is_flag=True, default=False, help="Off-day completions count toward streaks")
@click.option("--unit", "unit_name", default=None, help="Display unit; makes this a unit habit")
@click.option("--base-unit", default=None, help="Stored base unit name")
@click.option("--scale", default=1, type=int, help="Base units per display unit")
@click.option("--precision", default=0, type=int, help="Display decimal places")
@click.option("--goal", default=1.0, type=float, help="Daily goal in display units")
@click.option("--increment", default=1.0, type=float, help="Toggle step in display units")
@pass_context
def add_habit(
    ctx: CliContext,
    name: str,
    days: str,
    extra_counts: bool,
    unit_name: Optional[str],
    base_unit: Optional[str],
    scale: int,
    precision: int,
    goal: float,
    increment: float,
) -> None:
    """Create a habit."""

    mask = WeekdaySet.from_weekdays(int(ch) for ch in days if ch.isdigit())
    habit = Habit(
        name=name,
        schedule_mask=int(mask) or WeekdaySet.ALL_BITS,
        extra_completion_policy=(
            ExtraCompletionPolicy.COUNT_TOWARD_STREAKS if extra_counts else ExtraCompletionPolicy.TOTALS_ONLY
        ).value,
    )
    if unit_name:
        unit = HabitUnit(
            display_name=unit_name,
            base_name=base_unit or unit_name,
            base_scale=scale,
            display_precision=precision,
        )
        habit.tracking_mode = TrackingMode.UNIT.value
        habit.unit_display_name = unit.display_name
        habit.unit_base_name = unit.base_name
        habit.unit_base_scale = unit.base_scale
        habit.unit_display_precision = unit.display_precision
        habit.unit_goal_base_value = base_value_from_display(goal, unit)
        habit.unit_default_increment_base_value = base_value_from_display(increment, unit)
    created = ctx.service.repo.create(habit)
    click.echo(f"Created habit {created.id}: {created.name}")


@main.command("list")
@click.option("--all", "include_archived", is_flag=True, default=False)
@pass_context
def list_habits(ctx: CliContext, include_archived: bool) -> None:
    """List habits with today's state."""

    today = ctx.service.dates.day_key()
    for habit in ctx.service.repo.list_all(include_archived=include_archived):
        value = ctx.service.aggregate(habit).get(today)
        mark = "x" if ctx.service.is_complete(habit, value) else " "
        detail = ctx.service.progress_text(habit, value)
        suffix = f"  {detail}" if detail else ""
        click.echo(f"[{mark}] {habit.id:>4}  {habit.name}{suffix}")


@main.command("toggle")
@click.argument("habit_id", type=int)
@click.option("--day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Day to toggle (default today)")
@pass_context
def toggle(ctx: CliContext, habit_id: int, day) -> None:
    """Toggle a habit's completion for a day."""

    try:
        if day is None:
            done = ctx.service.toggle_today(habit_id)
        else:
            habit = ctx.service.get_habit(habit_id)
            day_key = DayKey.from_date(date(day.year, day.month, day.day), ctx.config.TIMEZONE)
            completion = ctx.service.toggle(habit, day_key)
            done = ctx.service.is_complete(habit, completion)
    except HabitLabError as exc:
        raise click.ClickException(str(exc)) from exc
    _refresh_widget(ctx)
    click.echo("Marked completed." if done else "Marked not completed.")


@main.command("stats")
@click.argument("habit_id", type=int)
@pass_context
def stats(ctx: CliContext, habit_id: int) -> None:
    """Show streaks and the 30-day completion rate."""

    try:
        habit = ctx.service.get_habit(habit_id)
    except HabitLabError as exc:
        raise click.ClickException(str(exc)) from exc
    summary = ctx.service.summary(habit)
    click.echo(f"{habit.name}")
    click.echo(f"  Current streak: {summary.stats.current_streak}")
    click.echo(f"  Longest streak: {summary.stats.longest_streak}")
    click.echo(f"  Last 30 days:   {summary.completion_rate_text}")
    click.echo(f"  Total:          {summary.total_completions}")
    click.echo(f"  {summary.target_label}: {summary.target_summary}")
    if summary.today_progress_text:
        click.echo(f"  Today:          {summary.today_progress_text}")


@main.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@pass_context
def export_cmd(ctx: CliContext, path: Path) -> None:
    """Export habits and completions as JSON."""

    written = export_json.export_json(ctx.session_factory, path)
    click.echo(f"Export written: {written}")


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
def import_cmd(ctx: CliContext, path: Path) -> None:
    """Import a JSON export, upserting by id."""

    try:
        habits, completions = export_json.import_json(ctx.session_factory, path)
    except HabitLabError as exc:
        raise click.ClickException(str(exc)) from exc
    _refresh_widget(ctx)
    click.echo(f"Imported {habits} habits and {completions} completions.")


@main.command("sync")
@click.argument("state", type=click.Choice(["on", "off", "status"]))
@pass_context
def sync_cmd(ctx: CliContext, state: str) -> None:
    """Switch between the local and the synced store."""

    enabled = ctx.sync.is_enabled()
    if state == "status":
        click.echo(f"Sync is {'on' if enabled else 'off'}.")
        return
    target = state == "on"
    if target == enabled:
        click.echo(f"Sync already {state}.")
        return
    migrate_sync(target, config=ctx.config, source_factory=ctx.session_factory, settings=ctx.sync)
    click.echo(f"Sync turned {state}.")


if __name__ == "__main__":  # pragma: no cover
    main()
