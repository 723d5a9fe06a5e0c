"""Map raw device value blobs to a canonical (value, unit) pair."""

import math
from dataclasses import dataclass
from typing import Any

SLEEP_UNIT = "min"

# activity type -> (preferred blob field, unit); "value" is always the fallback
VALUE_FIELDS: dict[str, tuple[str, str]] = {
    "heart_rate": ("bpm", "bpm"),
    "resting_heart_rate": ("bpm", "bpm"),
    "spo2": ("spo2", "%"),
    "stress": ("stress", "score"),
    "steps": ("steps", "steps"),
    "calories": ("calories", "kcal"),
    "sleep": ("duration", SLEEP_UNIT),
}


@dataclass(frozen=True)
class NormalizedValue:
    value: float
    unit: str


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return number


def _first_present(blob: dict[str, Any], *fields: str) -> Any:
    for field in fields:
        value = blob.get(field)
        if value is not None:
            return value
    return 0


def normalize(activity_type: str, blob: Any) -> NormalizedValue:
    """Pick the value field for ``activity_type`` out of a device blob.

    Missing fields and malformed blobs yield 0; this never raises.
    """
    if not isinstance(blob, dict):
        blob = {}

    mapping = VALUE_FIELDS.get(activity_type)
    if mapping is None:
        unit = blob.get("unit")
        return NormalizedValue(
            value=_number(_first_present(blob, "value")),
            unit=unit if isinstance(unit, str) else "",
        )

    field, unit = mapping
    return NormalizedValue(value=_number(_first_present(blob, field, "value")), unit=unit)
