from healthlog.sources.device.normalizer import NormalizedValue, normalize
from healthlog.sources.device.sleep import (
    SleepResult,
    SleepStages,
    list_sleep,
    sleep_quality,
    sleep_stage_percentages,
)
from healthlog.sources.device.source import AGGREGATE_FETCH_LIMIT, DeviceSource

__all__ = [
    "AGGREGATE_FETCH_LIMIT",
    "DeviceSource",
    "NormalizedValue",
    "SleepResult",
    "SleepStages",
    "list_sleep",
    "normalize",
    "sleep_quality",
    "sleep_stage_percentages",
]
