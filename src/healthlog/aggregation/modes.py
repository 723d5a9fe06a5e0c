from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Any

from healthlog.aggregation.date_range import DateInterval
from healthlog.models.health_log import ActivityType


class RequestMode(str, Enum):
    """What a listing request asks for, in precedence order."""

    SUM = "sum"
    AVERAGE = "average"
    LISTING = "listing"


# Activity types reported as a total over the requested interval
SUMMED_TYPES: frozenset[str] = frozenset({ActivityType.CALORIES.value})


@dataclass(frozen=True)
class LogQuery:
    activity_type: str | None = None
    day: date | None = None
    week_start: date | None = None
    week_end: date | None = None
    calculate_average: bool = False
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def as_params(self) -> dict[str, Any]:
        return asdict(self)


def resolve_mode(query: LogQuery, interval: DateInterval | None) -> RequestMode:
    """Pick the aggregation mode once; sum beats average beats listing."""
    if interval is not None and query.activity_type in SUMMED_TYPES:
        return RequestMode.SUM
    if interval is not None and query.calculate_average and query.activity_type:
        return RequestMode.AVERAGE
    return RequestMode.LISTING
