from datetime import date, datetime
from typing import Any

from pydantic import Field

from healthlog.schemas.base import CamelModel


class SleepRecord(CamelModel):
    id: int
    uid: str | None = None
    sid: str | None = None
    time: int
    occurred_at: datetime | None = None
    duration: float | None = None
    min_hr: float | None = None
    avg_hr: float | None = None
    max_hr: float | None = None
    timezone: Any = None
    stages: dict[str, int]
    quality: str | None = None
    raw: dict[str, Any]


class SleepPage(CamelModel):
    items: list[SleepRecord]
    total: int
    page: int
    pages: int
    limit: int


class DayOverview(CamelModel):
    day: date = Field(alias="date")
    heart_rates: list[float]
    # to_camel would turn this into "spo2S"
    spo2s: list[float] = Field(alias="spo2s")
    sleep_duration: float | None = None
    abnormal: list[str]
