from healthlog.models.device import DEVICE_COLLECTIONS, DEVICE_LOG_TYPES, device_table
from healthlog.models.health_log import ActivityType, HealthLog

__all__ = [
    "DEVICE_COLLECTIONS",
    "DEVICE_LOG_TYPES",
    "ActivityType",
    "HealthLog",
    "device_table",
]
