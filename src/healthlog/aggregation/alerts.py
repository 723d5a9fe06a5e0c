"""Rule-based health warnings for the dashboard's monthly view."""

import logging
from collections.abc import Sequence
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.date_range import DateInterval
from healthlog.aggregation.engine import LogAggregator
from healthlog.aggregation.modes import LogQuery
from healthlog.errors import SourceUnavailableError
from healthlog.models.health_log import ActivityType
from healthlog.schemas.device import DayOverview
from healthlog.sources.device.sleep import list_sleep

logger = logging.getLogger(__name__)

HEART_RATE_MAX = 120
HEART_RATE_MIN = 50
SPO2_MIN = 94
SLEEP_MIN_MINUTES = 360

ABNORMAL_HEART_RATE = "Abnormal heart rate"
LOW_SPO2 = "Low SpO2"
SHORT_SLEEP = "Short sleep (<6h)"

# Month-level warnings
HEART_RATE_OUT_OF_RANGE = "Heart rate out of range this month, consider a cardiac check-up"
LOW_SPO2_MONTH = "Low SpO2 this month, consider checking breathing or blood oxygen"
FREQUENT_SHORT_SLEEP = "Many nights under 6h, try to improve sleep"
SHORT_NIGHTS_MAX = 10

# Same page size the dashboard uses per day and metric
DAY_SAMPLE_LIMIT = 100
MONTH_SLEEP_LIMIT = 100


def detect_abnormalities(
    heart_rates: Sequence[float],
    spo2s: Sequence[float],
    sleep_minutes: float | None,
) -> list[str]:
    abnormal: list[str] = []
    if heart_rates and (max(heart_rates) > HEART_RATE_MAX or min(heart_rates) < HEART_RATE_MIN):
        abnormal.append(ABNORMAL_HEART_RATE)
    if spo2s and min(spo2s) < SPO2_MIN:
        abnormal.append(LOW_SPO2)
    if sleep_minutes is not None and sleep_minutes < SLEEP_MIN_MINUTES:
        abnormal.append(SHORT_SLEEP)
    return abnormal


def monthly_warnings(
    heart_rates: Sequence[float],
    spo2s: Sequence[float],
    sleep_minutes: Sequence[float],
) -> list[str]:
    """Warnings over a whole month; short sleep is flagged only past 10 nights."""
    warnings: list[str] = []
    if detect_abnormalities(heart_rates, [], None):
        warnings.append(HEART_RATE_OUT_OF_RANGE)
    if detect_abnormalities([], spo2s, None):
        warnings.append(LOW_SPO2_MONTH)
    short_nights = sum(1 for minutes in sleep_minutes if minutes < SLEEP_MIN_MINUTES)
    if short_nights > SHORT_NIGHTS_MAX:
        warnings.append(FREQUENT_SHORT_SLEEP)
    return warnings


def summarize_month(days: Sequence[DayOverview]) -> list[str]:
    return monthly_warnings(
        [hr for day in days for hr in day.heart_rates],
        [spo2 for day in days for spo2 in day.spo2s],
        [day.sleep_duration for day in days if day.sleep_duration is not None],
    )


async def _sleep_by_day(
    sleep_session: AsyncSession | None, year: int, month: int
) -> dict[date, float]:
    try:
        result = await list_sleep(
            sleep_session, DateInterval.for_month(year, month), 0, MONTH_SLEEP_LIMIT
        )
    except SourceUnavailableError as e:
        logger.warning("Sleep data unavailable for %d-%02d: %s", year, month, e)
        return {}

    totals: dict[date, float] = {}
    for record in result.items:
        if record.occurred_at is None:
            continue
        day = record.occurred_at.date()
        totals[day] = totals.get(day, 0) + (record.duration or 0)
    return totals


async def monthly_overview(
    aggregator: LogAggregator,
    sleep_session: AsyncSession | None,
    year: int,
    month: int,
) -> list[DayOverview]:
    """Per-day heart rate, SpO2 and sleep for a month, with warnings."""
    interval = DateInterval.for_month(year, month)
    first = interval.start.date()
    last = interval.end.date()
    sleep_totals = await _sleep_by_day(sleep_session, year, month)

    days: list[DayOverview] = []
    current = first
    while current <= last:
        hr_page = await aggregator.query(
            LogQuery(
                activity_type=ActivityType.HEART_RATE.value,
                day=current,
                limit=DAY_SAMPLE_LIMIT,
            )
        )
        spo2_page = await aggregator.query(
            LogQuery(activity_type=ActivityType.SPO2.value, day=current, limit=DAY_SAMPLE_LIMIT)
        )
        heart_rates = [item.value for item in hr_page.items]
        spo2s = [item.value for item in spo2_page.items]
        sleep_minutes = sleep_totals.get(current)

        days.append(
            DayOverview(
                day=current,
                heart_rates=heart_rates,
                spo2s=spo2s,
                sleep_duration=sleep_minutes,
                abnormal=detect_abnormalities(heart_rates, spo2s, sleep_minutes),
            )
        )
        current += timedelta(days=1)
    return days
