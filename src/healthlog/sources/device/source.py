"""Read-only adapter over the fitness-tracker device store."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.date_range import DateInterval, epoch_to_datetime
from healthlog.errors import SourceUnavailableError
from healthlog.models.device import device_table
from healthlog.schemas.health_log import CanonicalLogItem, LogSource
from healthlog.sources.base import SourcePage
from healthlog.sources.device.normalizer import normalize

logger = logging.getLogger(__name__)

# Upper bound on device records pulled in for a single sum or average
AGGREGATE_FETCH_LIMIT = 1000


class DeviceSource:
    """Fetches device records for one activity type as canonical log items.

    Failures never propagate: an unreachable or broken device store yields an
    empty page so the primary log experience keeps working.
    """

    def __init__(self, session: AsyncSession | None) -> None:
        self._session = session

    async def fetch(
        self,
        activity_type: str,
        interval: DateInterval | None,
        skip: int = 0,
        limit: int = AGGREGATE_FETCH_LIMIT,
    ) -> SourcePage:
        try:
            return await self._fetch(activity_type, interval, skip, limit)
        except Exception as e:
            logger.warning("Could not read device data for %s: %s", activity_type, e)
            if self._session is not None:
                await self._session.rollback()
            return SourcePage()

    async def _fetch(
        self,
        activity_type: str,
        interval: DateInterval | None,
        skip: int,
        limit: int,
    ) -> SourcePage:
        if self._session is None:
            raise SourceUnavailableError("Device store is not connected")

        table = device_table(activity_type)
        conditions = [table.c.key == activity_type]
        if interval is not None:
            start, end = interval.epoch_bounds()
            conditions.extend([table.c.time >= start, table.c.time <= end])

        total_result = await self._session.execute(
            select(func.count()).select_from(table).where(*conditions)
        )
        total = total_result.scalar_one()

        result = await self._session.execute(
            select(table)
            .where(*conditions)
            .order_by(table.c.time.desc(), table.c.id.desc())
            .offset(skip)
            .limit(limit)
        )

        items = []
        for row in result.mappings():
            normalized = normalize(activity_type, row["value"])
            items.append(
                CanonicalLogItem(
                    id=f"{activity_type}-{row['id']}",
                    activity_type=activity_type,
                    value=normalized.value,
                    unit=normalized.unit,
                    note=f"MiFit {activity_type}",
                    occurred_at=epoch_to_datetime(row["time"]),
                    source=LogSource.MIFIT,
                )
            )
        return SourcePage(items=items, total=total)
