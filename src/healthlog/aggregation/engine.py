"""Merge & aggregate engine: one view over user logs and device records.

A listing request resolves to exactly one mode (see ``resolve_mode``):

- SUM: calories over an interval become a single total row, primary store
  plus device store.
- AVERAGE: every numeric value in the interval from both stores is averaged
  into a single ``calculated`` row.
- LISTING: a page from the primary store concatenated with a page from the
  device store, re-sorted newest first.
"""

import asyncio
import logging
import math
from collections.abc import Coroutine
from datetime import date, datetime, timezone, tzinfo
from typing import Any, TypeVar

from healthlog.aggregation.cache import TTLCache, cache_key
from healthlog.aggregation.date_range import DateInterval, resolve_interval
from healthlog.aggregation.modes import LogQuery, RequestMode, resolve_mode
from healthlog.models.device import DEVICE_LOG_TYPES
from healthlog.schemas.health_log import CanonicalLogItem, LogPage, LogSource
from healthlog.sources.device.normalizer import VALUE_FIELDS
from healthlog.sources.device.source import AGGREGATE_FETCH_LIMIT, DeviceSource
from healthlog.sources.primary import LogFilter, PrimaryLogStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def round_half_up(value: float, digits: int = 2) -> float:
    """Round like ``Math.round(x * 100) / 100`` rather than banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and math.isfinite(value)


def _page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def _sort_key(item: CanonicalLogItem) -> datetime:
    occurred_at = item.occurred_at
    if isinstance(occurred_at, datetime):
        return occurred_at
    return _OLDEST


async def _read_both(
    primary: Coroutine[Any, Any, T], device: Coroutine[Any, Any, U]
) -> tuple[T, U]:
    """Run both store reads concurrently.

    If the primary read fails, the device read is cancelled before the error
    propagates, so it never outlives the request session.
    """
    try:
        async with asyncio.TaskGroup() as group:
            primary_task = group.create_task(primary)
            device_task = group.create_task(device)
    except ExceptionGroup as e:
        raise e.exceptions[0]
    return primary_task.result(), device_task.result()


def days_in_range(query: LogQuery) -> int:
    """Inclusive day count of the requested range, taken from the raw input."""
    first = query.week_start or query.day
    last = query.week_end or query.day
    if first is None or last is None:
        return 0
    return (last - first).days + 1


class LogAggregator:
    """Answers listing requests by merging the primary and device stores."""

    def __init__(
        self,
        primary: PrimaryLogStore,
        device: DeviceSource,
        cache: TTLCache | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._primary = primary
        self._device = device
        self._cache = cache
        self._tz = tz

    async def query(self, query: LogQuery) -> LogPage:
        key = cache_key(query.as_params())
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        interval = resolve_interval(query.day, query.week_start, query.week_end, self._tz)
        mode = resolve_mode(query, interval)
        logger.debug("Listing %s in %s mode over %s", query.activity_type, mode.value, interval)

        if mode is RequestMode.SUM:
            page = await self._sum(query, interval)
        elif mode is RequestMode.AVERAGE:
            page = await self._average(query, interval)
        else:
            page = await self._listing(query, interval)

        logger.info(
            "Listing %s (%s): %d items of %d",
            query.activity_type or "all",
            mode.value,
            len(page.items),
            page.total,
        )
        if self._cache is not None:
            self._cache.set(key, page)
        return page

    async def _sum(self, query: LogQuery, interval: DateInterval | None) -> LogPage:
        activity_type = query.activity_type or ""
        primary_sum, device_page = await _read_both(
            self._primary.sum(LogFilter(activity_type, interval)),
            self._device.fetch(activity_type, interval, 0, AGGREGATE_FETCH_LIMIT),
        )
        device_sum = sum(value for value in device_page.values if _is_number(value))

        requested: date | None = query.day or query.week_start or query.week_end
        item = CanonicalLogItem(
            activity_type=activity_type,
            value=primary_sum + device_sum,
            unit=VALUE_FIELDS.get(activity_type, ("", ""))[1],
            note=f"Total {activity_type} in range",
            occurred_at=requested,
            source=LogSource.TOTAL,
        )
        return LogPage(items=[item], total=1, page=1, pages=1, limit=query.limit)

    async def _average(self, query: LogQuery, interval: DateInterval | None) -> LogPage:
        activity_type = query.activity_type or ""
        primary_page, device_page = await _read_both(
            self._primary.list_all(LogFilter(activity_type, interval)),
            self._device.fetch(activity_type, interval, 0, AGGREGATE_FETCH_LIMIT),
        )
        values = [v for v in primary_page.values + device_page.values if _is_number(v)]
        if not values:
            return LogPage(items=[], total=0, page=1, pages=0, limit=query.limit)

        average = round_half_up(sum(values) / len(values))
        now = datetime.now(timezone.utc)

        unit = ""
        if primary_page.items and primary_page.items[0].unit:
            unit = primary_page.items[0].unit
        elif device_page.items and device_page.items[0].unit:
            unit = device_page.items[0].unit

        item = CanonicalLogItem(
            id=f"average_{int(now.timestamp() * 1000)}",
            activity_type=activity_type,
            value=average,
            unit=unit,
            note=f"Average of {len(values)} records over {days_in_range(query)} days",
            occurred_at=now,
            source=LogSource.CALCULATED,
            is_average=True,
        )
        return LogPage(items=[item], total=1, page=1, pages=1, limit=query.limit)

    async def _listing(self, query: LogQuery, interval: DateInterval | None) -> LogPage:
        # Each store is paged independently with the same skip/limit, so a
        # merged page may hold up to twice ``limit`` items.
        primary_page = await self._primary.list_page(
            LogFilter(query.activity_type, interval), query.skip, query.limit
        )
        items = list(primary_page.items)
        total = primary_page.total

        if query.activity_type in DEVICE_LOG_TYPES:
            device_page = await self._device.fetch(
                query.activity_type, interval, query.skip, query.limit
            )
            items.extend(device_page.items)
            total += device_page.total
            items.sort(key=_sort_key, reverse=True)

        return LogPage(
            items=items,
            total=total,
            page=query.page,
            pages=_page_count(total, query.limit),
            limit=query.limit,
        )
