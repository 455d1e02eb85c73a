"""Calendar-day keys, day ranges and the injectable clock.

A day key is the integer ``year * 10000 + month * 100 + day`` of a local
calendar day. Every "today" comparison goes through a time zone that the
caller fixes explicitly, so results do not drift when the host locale changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

DateLike = Union[date, datetime]


def local_date(value: DateLike, tz: tzinfo) -> date:
    """Return the calendar date ``value`` falls on in ``tz``.

    Aware datetimes are converted; naive datetimes are taken as wall-clock time
    in ``tz`` already; plain dates pass through.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz).date()
        return value.date()
    return value


class DayKey:
    """Codec between instants and integer calendar-day identifiers."""

    @staticmethod
    def from_date(value: DateLike, tz: tzinfo) -> int:
        day = local_date(value, tz)
        return day.year * 10000 + day.month * 100 + day.day

    @staticmethod
    def to_calendar_date(day_key: int) -> Optional[date]:
        """Decode a key into a date, or ``None`` when it is not a real day."""

        year, rest = divmod(day_key, 10000)
        month, day = divmod(rest, 100)
        try:
            return date(year, month, day)
        except ValueError:
            return None

    @staticmethod
    def to_date(day_key: int, tz: tzinfo) -> Optional[datetime]:
        """Local midnight of the keyed day in ``tz``."""

        day = DayKey.to_calendar_date(day_key)
        if day is None:
            return None
        return datetime(day.year, day.month, day.day, tzinfo=tz)


@dataclass(frozen=True)
class DayKeyEntry:
    date: date
    day_key: int


def last_n_days(end: DateLike, count: int, tz: tzinfo) -> list[DayKeyEntry]:
    """The ``count`` calendar days ending on ``end`` inclusive, oldest first."""

    if count <= 0:
        return []
    last = local_date(end, tz)
    start = last - timedelta(days=count - 1)
    entries = []
    for offset in range(count):
        day = start + timedelta(days=offset)
        entries.append(DayKeyEntry(date=day, day_key=DayKey.from_date(day, tz)))
    return entries


@dataclass
class DateProvider:
    """Source of "now" bound to the time zone day keys are computed in."""

    tz: tzinfo = field(default_factory=lambda: ZoneInfo("UTC"))
    now: Callable[[], datetime] = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.now is None:
            self.now = lambda: datetime.now(self.tz)

    @classmethod
    def live(cls, tz: tzinfo) -> "DateProvider":
        return cls(tz=tz)

    @classmethod
    def fixed(cls, moment: DateLike, tz: tzinfo) -> "DateProvider":
        """A provider frozen at ``moment``; used by tests and replay jobs."""

        if not isinstance(moment, datetime):
            moment = datetime(moment.year, moment.month, moment.day, tzinfo=tz)
        return cls(tz=tz, now=lambda: moment)

    def today(self) -> date:
        return local_date(self.now(), self.tz)

    def day_key(self) -> int:
        return DayKey.from_date(self.now(), self.tz)


__all__ = ["DateProvider", "DayKey", "DayKeyEntry", "last_n_days", "local_date"]
