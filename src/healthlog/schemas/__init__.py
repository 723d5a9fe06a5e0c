from healthlog.schemas.device import DayOverview, SleepPage, SleepRecord
from healthlog.schemas.health_log import (
    ActivityCount,
    CanonicalLogItem,
    HealthLogCreate,
    HealthLogRead,
    HealthLogUpdate,
    LogPage,
    LogSource,
    MonthlyStats,
    MonthlyWarnings,
)

__all__ = [
    "ActivityCount",
    "CanonicalLogItem",
    "DayOverview",
    "HealthLogCreate",
    "HealthLogRead",
    "HealthLogUpdate",
    "LogPage",
    "LogSource",
    "MonthlyStats",
    "MonthlyWarnings",
    "SleepPage",
    "SleepRecord",
]
