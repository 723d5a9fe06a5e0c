"""Device store endpoints: sleep sessions synced from the fitness tracker."""

import math
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.date_range import DateInterval, resolve_interval, resolve_timezone
from healthlog.config import get_settings
from healthlog.database import get_device_db
from healthlog.errors import SourceUnavailableError
from healthlog.schemas.device import SleepPage
from healthlog.sources.device.sleep import list_sleep

router = APIRouter(prefix="/api/device", tags=["device"])


@router.get("/sleep", response_model=SleepPage)
async def get_sleep(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    year: int | None = Query(default=None, ge=1970),
    month: int | None = Query(default=None, ge=1, le=12),
    day: date | None = Query(default=None, alias="date"),
    week_start: date | None = Query(default=None, alias="weekStart"),
    week_end: date | None = Query(default=None, alias="weekEnd"),
    session: AsyncSession | None = Depends(get_device_db),
) -> SleepPage:
    """List sleep sessions filtered by day, month or week, newest first."""
    settings = get_settings()
    page_size = min(limit or settings.sleep_page_size, settings.sleep_page_size_max)

    # A day wins over a month, which wins over a week
    if day is None and year and month:
        interval: DateInterval | None = DateInterval.for_month(year, month)
    else:
        interval = resolve_interval(
            day, week_start, week_end, tz=resolve_timezone(settings.timezone)
        )

    try:
        result = await list_sleep(session, interval, (page - 1) * page_size, page_size)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Device data unavailable: {e}") from e

    return SleepPage(
        items=result.items,
        total=result.total,
        page=page,
        pages=math.ceil(result.total / page_size),
        limit=page_size,
    )
