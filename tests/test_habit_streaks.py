"""Comprehensive tests for habit streak calculations.

These tests pin down current streak, longest streak and the 30-day rate,
including edge cases like:
- Consecutive days ending today vs. ending earlier
- Gaps in habit completion
- Weekly schedules with off days under both extra-completion policies
- Unit habits measured against a goal
- Empty habit data
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from habitlab.services.day_keys import DayKey
from habitlab.services.progress import Checkmark, HabitUnit, UnitTracking
from habitlab.services.schedule import ExtraCompletionPolicy, WeekdaySet
from habitlab.services.streaks import StreakStats, calculate_streak_stats

UTC = ZoneInfo("UTC")
MON_WED_FRI = int(WeekdaySet.from_weekdays([2, 4, 6]))


def values_for(*days: date, value: int = 1) -> dict[int, int]:
    return {DayKey.from_date(d, UTC): value for d in days}


def jan(day: int) -> date:
    return date(2026, 1, day)


def stats_for(values, today, tracking=None, **kwargs) -> StreakStats:
    return calculate_streak_stats(values, tracking or Checkmark(), today, UTC, **kwargs)


class TestCurrentStreak:
    """Tests for calculating current consecutive day streaks."""

    def test_no_entries_returns_zero_streak(self):
        assert stats_for({}, jan(3)) == StreakStats(0, 0, 0.0)

    def test_consecutive_days_ending_today(self):
        stats = stats_for(values_for(jan(1), jan(2), jan(3)), jan(3))
        assert stats.current_streak == 3

    def test_missing_today_returns_zero(self):
        stats = stats_for(values_for(jan(1), jan(2), jan(3)), jan(4))
        assert stats.current_streak == 0
        assert stats.longest_streak == 3

    def test_gap_breaks_streak(self):
        stats = stats_for(values_for(jan(1), jan(2), jan(4), jan(5)), jan(5))
        assert stats.current_streak == 2

    def test_zero_value_breaks_streak(self):
        values = values_for(jan(1), jan(3))
        values[DayKey.from_date(jan(2), UTC)] = 0
        assert stats_for(values, jan(3)).current_streak == 1

    def test_off_day_today_is_skipped(self):
        # Mon 5 and Wed 7 done; Thursday 8 is an off day
        stats = stats_for(values_for(jan(5), jan(7)), jan(8), schedule_mask=MON_WED_FRI)
        assert stats.current_streak == 2

    def test_scheduled_day_today_not_done_returns_zero(self):
        stats = stats_for(values_for(jan(5), jan(7)), jan(9), schedule_mask=MON_WED_FRI)
        assert stats.current_streak == 0

    def test_accepts_aware_datetime_for_today(self):
        tz = ZoneInfo("America/New_York")
        values = {DayKey.from_date(jan(d), tz): 1 for d in (1, 2)}
        # 03:00 UTC on Jan 3 is still Jan 2 in New York
        today = datetime(2026, 1, 3, 3, 0, tzinfo=UTC)
        stats = calculate_streak_stats(values, Checkmark(), today, tz)
        assert stats.current_streak == 2


class TestLongestStreak:
    """Tests for calculating the longest historical streak."""

    def test_longest_streak_skips_gaps(self):
        stats = stats_for(values_for(jan(1), jan(2), jan(5), jan(6), jan(7)), jan(7))
        assert stats.longest_streak == 3
        assert stats.current_streak == 3

    def test_longest_outlives_broken_current(self):
        days = [jan(d) for d in range(1, 11)] + [jan(20)]
        stats = stats_for(values_for(*days), jan(20))
        assert stats.longest_streak == 10
        assert stats.current_streak == 1

    def test_off_days_do_not_reset_run(self):
        # Mon 5, Wed 7, Fri 9, Mon 12 done; Wed 14 missed; Fri 16 done
        values = values_for(jan(5), jan(7), jan(9), jan(12), jan(16))
        stats = stats_for(values, jan(16), schedule_mask=MON_WED_FRI)
        assert stats.longest_streak == 4
        assert stats.current_streak == 1

    def test_completions_after_today_are_ignored(self):
        stats = stats_for(values_for(jan(10), jan(11)), jan(5))
        assert stats == StreakStats(0, 0, 0.0)

    def test_longest_never_below_current(self):
        stats = stats_for(values_for(*(jan(d) for d in range(1, 6))), jan(5))
        assert stats.longest_streak >= stats.current_streak == 5


class TestExtraCompletionPolicy:
    """Mon/Wed/Fri habit with an extra Tuesday completion."""

    values = values_for(jan(5), jan(6), jan(7))

    def test_totals_only_ignores_tuesday(self):
        stats = stats_for(
            self.values, jan(7), schedule_mask=MON_WED_FRI, policy=ExtraCompletionPolicy.TOTALS_ONLY
        )
        assert stats.current_streak == 2
        assert stats.longest_streak == 2
        # 13 scheduled days between Dec 9 and Jan 7, two of them done
        assert stats.completion_rate_last_30_days == 2 / 13

    def test_count_toward_streaks_includes_tuesday(self):
        stats = stats_for(
            self.values,
            jan(7),
            schedule_mask=MON_WED_FRI,
            policy=ExtraCompletionPolicy.COUNT_TOWARD_STREAKS,
        )
        assert stats.current_streak == 3
        assert stats.longest_streak == 3
        assert stats.completion_rate_last_30_days == 3 / 14


class TestCompletionRate:
    def test_half_of_last_30_days(self):
        days = [jan(d) for d in range(1, 16)]
        stats = stats_for(values_for(*days), jan(30))
        assert stats.completion_rate_last_30_days == 0.5

    def test_window_includes_today_and_excludes_day_31(self):
        today = jan(31)
        outside = today - timedelta(days=30)
        stats = stats_for(values_for(outside, today), today)
        assert stats.completion_rate_last_30_days == 1 / 30

    def test_no_counted_days_gives_zero(self):
        stats = stats_for(
            values_for(jan(5), jan(6)), jan(7), schedule_mask=0, policy=ExtraCompletionPolicy.TOTALS_ONLY
        )
        assert stats == StreakStats(0, 0, 0.0)

    def test_full_month(self):
        days = [jan(d) for d in range(1, 31)]
        assert stats_for(values_for(*days), jan(30)).completion_rate_last_30_days == 1.0

    def test_window_is_local_calendar_days_across_dst(self):
        tz = ZoneInfo("America/New_York")
        values = {
            DayKey.from_date(date(2026, 2, 18), tz): 1,
            DayKey.from_date(date(2026, 2, 19), tz): 1,
        }
        # 22:00 on 2026-03-20 in New York, after the March 8 clock change
        today = datetime(2026, 3, 21, 2, 0, tzinfo=ZoneInfo("UTC"))

        stats = calculate_streak_stats(values, Checkmark(), today, tz)

        assert stats.completion_rate_last_30_days == 1 / 30


class TestUnitHabits:
    tracking = UnitTracking(
        unit=HabitUnit(display_name="ml", base_name="ml"),
        goal_base_value=1000,
        default_increment_base_value=250,
    )

    def test_goal_boundary_counts_as_complete(self):
        values = {
            DayKey.from_date(jan(1), UTC): 1000,
            DayKey.from_date(jan(2), UTC): 999,
            DayKey.from_date(jan(3), UTC): 1000,
        }
        stats = stats_for(values, jan(3), tracking=self.tracking)
        assert stats.current_streak == 1
        assert stats.longest_streak == 1

    def test_partial_progress_on_off_day_does_not_count(self):
        values = {
            DayKey.from_date(jan(5), UTC): 1000,
            DayKey.from_date(jan(6), UTC): 400,
            DayKey.from_date(jan(7), UTC): 1000,
        }
        stats = stats_for(
            values,
            jan(7),
            tracking=self.tracking,
            schedule_mask=MON_WED_FRI,
            policy=ExtraCompletionPolicy.COUNT_TOWARD_STREAKS,
        )
        assert stats.current_streak == 2
