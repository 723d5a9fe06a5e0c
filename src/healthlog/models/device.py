"""Device store tables, one per activity type.

The fitness-tracker sync writes each metric into its own table ("collection")
with the same layout: a string ``key`` tag, an epoch-seconds ``time`` and a
JSON ``value`` blob whose shape depends on the metric.
"""

from sqlalchemy import JSON, BigInteger, Column, Integer, String, Table

from healthlog.database import device_metadata
from healthlog.models.health_log import ActivityType

DEVICE_COLLECTIONS: tuple[str, ...] = tuple(t.value for t in ActivityType)

# Activity types whose device records are merged into raw listings. Sleep is
# only exposed through its dedicated listing.
DEVICE_LOG_TYPES: frozenset[str] = frozenset(
    {
        ActivityType.HEART_RATE.value,
        ActivityType.STEPS.value,
        ActivityType.CALORIES.value,
        ActivityType.STRESS.value,
        ActivityType.SPO2.value,
        ActivityType.RESTING_HEART_RATE.value,
    }
)


def device_table(collection: str) -> Table:
    """Return the table for a device collection, declaring it on first use."""
    existing = device_metadata.tables.get(collection)
    if existing is not None:
        return existing
    return Table(
        collection,
        device_metadata,
        Column("id", Integer, primary_key=True),
        Column("key", String(50), nullable=False, index=True),
        Column("time", BigInteger, nullable=False, index=True),
        Column("value", JSON),
        Column("uid", String(50)),
        Column("sid", String(50)),
    )


for _collection in DEVICE_COLLECTIONS:
    device_table(_collection)
