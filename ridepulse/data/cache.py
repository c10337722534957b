"""Per-feed TTL cache of the last successfully fetched payload."""

from __future__ import annotations

from dataclasses import dataclass
import threading
import time
from typing import Any, Callable

DEFAULT_TTL_SECONDS = 30.0


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    timestamp: float


class TTLCache:
    """Map of feed key to its last payload; freshness is checked on every read."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def set(self, key: str, data: Any) -> None:
        entry = CacheEntry(data=data, timestamp=self._clock())
        with self._lock:
            self._store[key] = entry

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
        return entry.data if entry is not None else None

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def timestamp(self, key: str) -> float | None:
        with self._lock:
            entry = self._store.get(key)
        return entry.timestamp if entry is not None else None

    def is_fresh(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            return False
        return self._clock() - entry.timestamp < self._ttl_seconds


__all__ = ["CacheEntry", "DEFAULT_TTL_SECONDS", "TTLCache"]
