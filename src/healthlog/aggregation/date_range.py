"""Inclusive day/week/month intervals shared by both stores.

The primary store filters on naive UTC datetimes while the device store
filters on integer epoch seconds. Both encodings are derived from the same
aware instants so the two halves of a merge agree on their boundaries.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

END_OF_DAY = time(23, 59, 59, 999999)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Map a configured zone name to a tzinfo; empty means host local time."""
    if not name:
        return None
    return ZoneInfo(name)


def _local(day: date, at: time, tz: tzinfo | None) -> datetime:
    naive = datetime.combine(day, at)
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values read back from the primary store."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> datetime:
    """Convert a datetime to the primary store's naive UTC convention.

    Naive input is taken to be UTC already.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def epoch_to_datetime(seconds: int | float | None) -> datetime | None:
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass(frozen=True)
class DateInterval:
    """Inclusive ``[start, end]`` range of aware datetimes."""

    start: datetime
    end: datetime

    @classmethod
    def for_days(cls, first: date, last: date, tz: tzinfo | None = None) -> "DateInterval":
        return cls(start=_local(first, time.min, tz), end=_local(last, END_OF_DAY, tz))

    @classmethod
    def for_month(cls, year: int, month: int) -> "DateInterval":
        """UTC calendar month, ``[first, first of next month)``."""
        start = datetime(year, month, 1, tzinfo=timezone.utc)
        if month == 12:
            following = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        else:
            following = datetime(year, month + 1, 1, tzinfo=timezone.utc)
        return cls(start=start, end=following - timedelta(microseconds=1))

    def primary_bounds(self) -> tuple[datetime, datetime]:
        return to_storage(self.start), to_storage(self.end)

    def epoch_bounds(self) -> tuple[int, int]:
        return math.floor(self.start.timestamp()), math.floor(self.end.timestamp())


def resolve_interval(
    date: date | None = None,
    week_start: date | None = None,
    week_end: date | None = None,
    tz: tzinfo | None = None,
) -> DateInterval | None:
    """Resolve a day or a week pair into an interval.

    ``date`` takes precedence over the week bounds; a week needs both bounds.
    Returns None when nothing usable is given. The week bounds are not checked
    for ordering, so an inverted pair yields an interval that matches nothing.
    """
    if date is not None:
        return DateInterval.for_days(date, date, tz)
    if week_start is not None and week_end is not None:
        return DateInterval.for_days(week_start, week_end, tz)
    return None
