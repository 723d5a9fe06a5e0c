"""Request-scoped wiring of stores, the device source and the merge engine."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.cache import TTLCache
from healthlog.aggregation.date_range import resolve_timezone
from healthlog.aggregation.engine import LogAggregator
from healthlog.config import get_settings
from healthlog.database import get_db, get_device_db
from healthlog.sources.device.source import DeviceSource
from healthlog.sources.primary import PrimaryLogStore

settings = get_settings()

# Shared by all requests; None when caching is disabled
listing_cache = (
    TTLCache(ttl_seconds=settings.cache_ttl_seconds) if settings.cache_ttl_seconds > 0 else None
)


def get_cache() -> TTLCache | None:
    return listing_cache


def get_primary_store(session: AsyncSession = Depends(get_db)) -> PrimaryLogStore:
    return PrimaryLogStore(session)


def get_aggregator(
    primary: PrimaryLogStore = Depends(get_primary_store),
    device_session: AsyncSession | None = Depends(get_device_db),
    cache: TTLCache | None = Depends(get_cache),
) -> LogAggregator:
    return LogAggregator(
        primary,
        DeviceSource(device_session),
        cache=cache,
        tz=resolve_timezone(get_settings().timezone),
    )
