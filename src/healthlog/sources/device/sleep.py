"""Sleep sessions straight from the device store.

Sleep records carry much more than a single value (stages, heart rate range,
bed and wake times), so they get their own listing instead of going through
the canonical merge.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.date_range import DateInterval, epoch_to_datetime
from healthlog.errors import SourceUnavailableError
from healthlog.models.device import device_table
from healthlog.models.health_log import ActivityType
from healthlog.schemas.device import SleepRecord

logger = logging.getLogger(__name__)

SLEEP_KEY = ActivityType.SLEEP.value

# Stage fields default to 0 so the dashboard can always compute percentages
STAGE_DEFAULTS: dict[str, Any] = {
    "sleep_light_duration": 0,
    "sleep_deep_duration": 0,
    "sleep_rem_duration": 0,
    "sleep_awake_duration": 0,
    "awake_count": 0,
    "bedtime": None,
    "wake_up_time": None,
    "device_bedtime": None,
    "device_wake_up_time": None,
}


@dataclass
class SleepResult:
    items: list[SleepRecord]
    total: int


@dataclass(frozen=True)
class SleepStages:
    light: int = 0
    deep: int = 0
    rem: int = 0
    awake: int = 0


def sleep_stage_percentages(
    duration: float | None,
    light: float = 0,
    deep: float = 0,
    rem: float = 0,
    awake: float = 0,
) -> SleepStages:
    """Share of each stage in the total duration, in whole percent."""
    if not duration:
        return SleepStages()

    def pct(part: float) -> int:
        return math.floor(part / duration * 100 + 0.5)

    return SleepStages(light=pct(light), deep=pct(deep), rem=pct(rem), awake=pct(awake))


def sleep_quality(duration_minutes: float, stages: SleepStages, awake_count: int) -> str:
    """Grade a night: at least 7h with 15% deep, 20% REM and under 5 wake-ups is good."""
    hours = duration_minutes / 60
    if hours >= 7 and stages.deep >= 15 and stages.rem >= 20 and awake_count < 5:
        return "good"
    if hours >= 6:
        return "fair"
    return "poor"


def _optional_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def map_sleep_record(row: Any) -> SleepRecord:
    blob = row["value"] if isinstance(row["value"], dict) else {}
    raw = {**blob}
    for field, default in STAGE_DEFAULTS.items():
        if raw.get(field) is None:
            raw[field] = default

    duration = _optional_number(blob.get("duration"))
    stages = sleep_stage_percentages(
        duration,
        light=_optional_number(raw["sleep_light_duration"]) or 0,
        deep=_optional_number(raw["sleep_deep_duration"]) or 0,
        rem=_optional_number(raw["sleep_rem_duration"]) or 0,
        awake=_optional_number(raw["sleep_awake_duration"]) or 0,
    )
    awake_count = _optional_number(raw["awake_count"]) or 0

    return SleepRecord(
        id=row["id"],
        uid=row["uid"],
        sid=row["sid"],
        time=row["time"],
        occurred_at=epoch_to_datetime(row["time"]),
        duration=duration,
        min_hr=_optional_number(blob.get("min_hr")),
        avg_hr=_optional_number(blob.get("avg_hr")),
        max_hr=_optional_number(blob.get("max_hr")),
        timezone=blob.get("timezone"),
        stages=asdict(stages),
        quality=sleep_quality(duration, stages, awake_count) if duration else None,
        raw=raw,
    )


async def list_sleep(
    session: AsyncSession | None,
    interval: DateInterval | None,
    skip: int,
    limit: int,
) -> SleepResult:
    """List sleep sessions, newest first.

    Raises:
        SourceUnavailableError: the device store is not connected or the
            query failed.
    """
    if session is None:
        raise SourceUnavailableError("Device store is not connected")

    table = device_table(SLEEP_KEY)
    conditions = [table.c.key == SLEEP_KEY]
    if interval is not None:
        start, end = interval.epoch_bounds()
        conditions.extend([table.c.time >= start, table.c.time <= end])

    try:
        total_result = await session.execute(
            select(func.count()).select_from(table).where(*conditions)
        )
        total = total_result.scalar_one()
        result = await session.execute(
            select(table)
            .where(*conditions)
            .order_by(table.c.time.desc(), table.c.id.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = list(result.mappings())
    except SQLAlchemyError as e:
        logger.warning("Sleep listing failed: %s", e)
        await session.rollback()
        raise SourceUnavailableError(str(e)) from e

    return SleepResult(items=[map_sleep_record(row) for row in rows], total=total)
