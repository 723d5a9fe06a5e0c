"""Health log endpoints: merged listing, CRUD and monthly statistics."""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.alerts import monthly_overview, summarize_month
from healthlog.aggregation.cache import TTLCache
from healthlog.aggregation.engine import LogAggregator
from healthlog.aggregation.modes import LogQuery
from healthlog.aggregation.monthly import monthly_stats
from healthlog.api.dependencies import get_aggregator, get_cache, get_primary_store
from healthlog.config import get_settings
from healthlog.database import get_device_db
from healthlog.errors import NotFoundError
from healthlog.models.health_log import ActivityType, HealthLog
from healthlog.schemas.device import DayOverview
from healthlog.schemas.health_log import (
    HealthLogCreate,
    HealthLogRead,
    HealthLogUpdate,
    LogPage,
    MonthlyStats,
    MonthlyWarnings,
)
from healthlog.sources.primary import PrimaryLogStore

router = APIRouter(prefix="/api/health-logs", tags=["health-logs"])


def _current_month(year: int | None, month: int | None) -> tuple[int, int]:
    now = datetime.now(timezone.utc)
    return year or now.year, month or now.month


@router.get("", response_model=LogPage, response_model_exclude_none=True)
async def list_health_logs(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    activity_type: ActivityType | None = Query(default=None, alias="activityType"),
    day: date | None = Query(default=None, alias="date"),
    week_start: date | None = Query(default=None, alias="weekStart"),
    week_end: date | None = Query(default=None, alias="weekEnd"),
    calculate_average: bool = Query(default=False, alias="calculateAverage"),
    aggregator: LogAggregator = Depends(get_aggregator),
) -> LogPage:
    """List logs merged with device data, or a total/average row for a range."""
    settings = get_settings()
    page_size = min(limit or settings.log_page_size, settings.log_page_size_max)
    query = LogQuery(
        activity_type=activity_type.value if activity_type else None,
        day=day,
        week_start=week_start,
        week_end=week_end,
        calculate_average=calculate_average,
        page=page,
        limit=page_size,
    )
    return await aggregator.query(query)


@router.post("", response_model=HealthLogRead, status_code=201)
async def create_health_log(
    data: HealthLogCreate,
    store: PrimaryLogStore = Depends(get_primary_store),
    cache: TTLCache | None = Depends(get_cache),
) -> HealthLog:
    log = await store.create(data)
    if cache is not None:
        cache.clear()
    return log


@router.get("/stats/monthly", response_model=MonthlyStats)
async def get_monthly_stats(
    year: int | None = Query(default=None, ge=1970),
    month: int | None = Query(default=None, ge=1, le=12),
    store: PrimaryLogStore = Depends(get_primary_store),
) -> MonthlyStats:
    """Count logged entries per activity type for a month (default: current)."""
    year, month = _current_month(year, month)
    return await monthly_stats(store, year, month)


@router.get("/stats/overview", response_model=list[DayOverview])
async def get_monthly_overview(
    year: int | None = Query(default=None, ge=1970),
    month: int | None = Query(default=None, ge=1, le=12),
    aggregator: LogAggregator = Depends(get_aggregator),
    device_session: AsyncSession | None = Depends(get_device_db),
) -> list[DayOverview]:
    """Per-day heart rate, SpO2 and sleep with abnormality warnings."""
    year, month = _current_month(year, month)
    return await monthly_overview(aggregator, device_session, year, month)


@router.get("/stats/warnings", response_model=MonthlyWarnings)
async def get_monthly_warnings(
    year: int | None = Query(default=None, ge=1970),
    month: int | None = Query(default=None, ge=1, le=12),
    aggregator: LogAggregator = Depends(get_aggregator),
    device_session: AsyncSession | None = Depends(get_device_db),
) -> MonthlyWarnings:
    """Month-wide heart rate, SpO2 and sleep warnings."""
    year, month = _current_month(year, month)
    days = await monthly_overview(aggregator, device_session, year, month)
    return MonthlyWarnings(year=year, month=month, warnings=summarize_month(days))


@router.get("/{log_id}", response_model=HealthLogRead)
async def get_health_log(
    log_id: int,
    store: PrimaryLogStore = Depends(get_primary_store),
) -> HealthLog:
    try:
        return await store.get(log_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.put("/{log_id}", response_model=HealthLogRead)
async def update_health_log(
    log_id: int,
    data: HealthLogUpdate,
    store: PrimaryLogStore = Depends(get_primary_store),
    cache: TTLCache | None = Depends(get_cache),
) -> HealthLog:
    """Partially update a log; fields absent from the body are left unchanged."""
    try:
        log = await store.update(log_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    if cache is not None:
        cache.clear()
    return log


@router.delete("/{log_id}")
async def delete_health_log(
    log_id: int,
    store: PrimaryLogStore = Depends(get_primary_store),
    cache: TTLCache | None = Depends(get_cache),
) -> dict[str, bool]:
    try:
        await store.delete(log_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    if cache is not None:
        cache.clear()
    return {"success": True}
