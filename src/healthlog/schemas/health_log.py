from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import FiniteFloat, field_validator

from healthlog.aggregation.date_range import as_utc
from healthlog.models.health_log import ActivityType
from healthlog.schemas.base import CamelModel


class LogSource(str, Enum):
    HEALTHLOG = "healthlog"
    MIFIT = "mifit"
    CALCULATED = "calculated"
    TOTAL = "tổng"


class HealthLogBase(CamelModel):
    activity_type: ActivityType
    value: FiniteFloat
    unit: str | None = None
    note: str | None = None
    occurred_at: datetime


class HealthLogCreate(HealthLogBase):
    pass


class HealthLogUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""

    activity_type: ActivityType | None = None
    value: FiniteFloat | None = None
    unit: str | None = None
    note: str | None = None
    occurred_at: datetime | None = None

    @field_validator("activity_type", "value", "occurred_at", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("field cannot be null")
        return v


class HealthLogRead(HealthLogBase):
    id: int
    created_at: datetime
    updated_at: datetime

    @field_validator("occurred_at", "created_at", "updated_at")
    @classmethod
    def _attach_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class CanonicalLogItem(CamelModel):
    """Source-tagged row returned by the merged listing, whatever its origin."""

    id: int | str | None = None
    activity_type: str
    value: float
    unit: str | None = None
    note: str | None = None
    # The sum row echoes the requested day back instead of a timestamp
    occurred_at: datetime | date | None = None
    source: LogSource
    is_average: bool | None = None


class LogPage(CamelModel):
    items: list[CanonicalLogItem]
    total: int
    page: int
    pages: int
    limit: int


class ActivityCount(CamelModel):
    activity_type: str
    count: int


class MonthlyStats(CamelModel):
    year: int
    month: int
    stats: list[ActivityCount]


class MonthlyWarnings(CamelModel):
    year: int
    month: int
    warnings: list[str]
