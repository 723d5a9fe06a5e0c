"""Read-through cache for listing results, keyed by the serialized query."""

import json
import time
from collections.abc import Callable
from typing import Any

DEFAULT_TTL_SECONDS = 300


def cache_key(params: dict[str, Any]) -> str:
    return json.dumps(params, sort_keys=True, default=str)


class TTLCache:
    """In-process map whose entries expire ``ttl_seconds`` after being set."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, data = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return data

    def set(self, key: str, data: Any) -> None:
        now = self._clock()
        self._purge(now)
        self._entries[key] = (now, data)

    def _purge(self, now: float) -> None:
        expired = [
            k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
