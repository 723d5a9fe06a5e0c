"""Accessor for user-entered health logs in the primary store."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.aggregation.date_range import DateInterval, as_utc, to_storage
from healthlog.errors import NotFoundError, StoreError
from healthlog.models.health_log import HealthLog
from healthlog.schemas.health_log import (
    ActivityCount,
    CanonicalLogItem,
    HealthLogCreate,
    HealthLogUpdate,
    LogSource,
)
from healthlog.sources.base import SourcePage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogFilter:
    activity_type: str | None = None
    interval: DateInterval | None = None

    def conditions(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        if self.activity_type:
            clauses.append(HealthLog.activity_type == self.activity_type)
        if self.interval is not None:
            start, end = self.interval.primary_bounds()
            clauses.append(HealthLog.occurred_at >= start)
            clauses.append(HealthLog.occurred_at <= end)
        return clauses


def to_canonical(log: HealthLog) -> CanonicalLogItem:
    return CanonicalLogItem(
        id=log.id,
        activity_type=log.activity_type,
        value=log.value,
        unit=log.unit,
        note=log.note,
        occurred_at=as_utc(log.occurred_at),
        source=LogSource.HEALTHLOG,
    )


@asynccontextmanager
async def _store_errors(session: AsyncSession) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Primary store operation failed: %s", e)
        await session.rollback()
        raise StoreError(str(e)) from e


class PrimaryLogStore:
    """CRUD and aggregate reads over the ``health_logs`` table.

    Input is assumed validated at the API boundary. Database failures are
    raised as StoreError; missing ids as NotFoundError.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, data: HealthLogCreate) -> HealthLog:
        log = HealthLog(
            activity_type=data.activity_type.value,
            value=data.value,
            unit=data.unit,
            note=data.note,
            occurred_at=to_storage(data.occurred_at),
        )
        async with _store_errors(self._session):
            self._session.add(log)
            await self._session.commit()
            await self._session.refresh(log)
        logger.info("Created health log %s (%s)", log.id, log.activity_type)
        return log

    async def get(self, record_id: int) -> HealthLog:
        async with _store_errors(self._session):
            log = await self._session.get(HealthLog, record_id)
        if log is None:
            raise NotFoundError(record_id)
        return log

    async def update(self, record_id: int, data: HealthLogUpdate) -> HealthLog:
        log = await self.get(record_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field == "activity_type":
                value = value.value
            elif field == "occurred_at":
                value = to_storage(value)
            setattr(log, field, value)

        async with _store_errors(self._session):
            await self._session.commit()
            await self._session.refresh(log)
        logger.info("Updated health log %s: %s", record_id, sorted(changes))
        return log

    async def delete(self, record_id: int) -> None:
        log = await self.get(record_id)
        async with _store_errors(self._session):
            await self._session.delete(log)
            await self._session.commit()
        logger.info("Deleted health log %s", record_id)

    async def list_page(self, log_filter: LogFilter, skip: int, limit: int) -> SourcePage:
        """Newest first, ties broken by id so pages are stable."""
        conditions = log_filter.conditions()
        async with _store_errors(self._session):
            total_result = await self._session.execute(
                select(func.count(HealthLog.id)).where(*conditions)
            )
            total = total_result.scalar_one()
            result = await self._session.execute(
                select(HealthLog)
                .where(*conditions)
                .order_by(HealthLog.occurred_at.desc(), HealthLog.id.desc())
                .offset(skip)
                .limit(limit)
            )
            logs = list(result.scalars().all())
        return SourcePage(items=[to_canonical(log) for log in logs], total=total)

    async def list_all(self, log_filter: LogFilter) -> SourcePage:
        async with _store_errors(self._session):
            result = await self._session.execute(
                select(HealthLog)
                .where(*log_filter.conditions())
                .order_by(HealthLog.occurred_at.desc(), HealthLog.id.desc())
            )
            logs = list(result.scalars().all())
        return SourcePage(items=[to_canonical(log) for log in logs], total=len(logs))

    async def sum(self, log_filter: LogFilter) -> float:
        async with _store_errors(self._session):
            result = await self._session.execute(
                select(func.coalesce(func.sum(HealthLog.value), 0)).where(
                    *log_filter.conditions()
                )
            )
            return result.scalar_one()

    async def count_by_type(self, log_filter: LogFilter) -> list[ActivityCount]:
        async with _store_errors(self._session):
            result = await self._session.execute(
                select(HealthLog.activity_type, func.count(HealthLog.id))
                .where(*log_filter.conditions())
                .group_by(HealthLog.activity_type)
                .order_by(HealthLog.activity_type)
            )
            rows = result.all()
        return [ActivityCount(activity_type=row[0], count=row[1]) for row in rows]
