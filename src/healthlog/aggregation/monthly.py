from healthlog.aggregation.date_range import DateInterval
from healthlog.schemas.health_log import MonthlyStats
from healthlog.sources.primary import LogFilter, PrimaryLogStore


async def monthly_stats(primary: PrimaryLogStore, year: int, month: int) -> MonthlyStats:
    """Count user-entered logs per activity type within a UTC calendar month.

    Device records are left out on purpose: this measures how much the user
    logs, not how much the tracker syncs.
    """
    interval = DateInterval.for_month(year, month)
    stats = await primary.count_by_type(LogFilter(interval=interval))
    return MonthlyStats(year=year, month=month, stats=stats)
