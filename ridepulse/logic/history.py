"""Bounded, persisted history of metrics snapshots (newest first)."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterator

from ridepulse.data.models import MetricsSnapshot
from ridepulse.data.storage import StateStorage

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


class SnapshotHistory:
    """Append-only ring of snapshots; the storage is flushed on every mutation."""

    def __init__(self, storage: StateStorage, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._storage = storage
        self._capacity = capacity
        self._lock = threading.Lock()
        self._snapshots: list[MetricsSnapshot] = []
        self._last_update: float | None = None
        self._restore()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def snapshots(self) -> tuple[MetricsSnapshot, ...]:
        with self._lock:
            return tuple(self._snapshots)

    @property
    def latest(self) -> MetricsSnapshot | None:
        with self._lock:
            return self._snapshots[0] if self._snapshots else None

    @property
    def last_update(self) -> float | None:
        """Epoch seconds of the last completed refresh, restored from storage."""
        with self._lock:
            return self._last_update

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def __iter__(self) -> Iterator[MetricsSnapshot]:
        return iter(self.snapshots)

    def add_snapshot(self, snapshot: MetricsSnapshot, last_update: float | None = None) -> None:
        """Prepend a snapshot, drop anything beyond capacity, then persist."""
        with self._lock:
            self._snapshots = [snapshot, *self._snapshots][: self._capacity]
            if last_update is not None:
                self._last_update = last_update
            state = self._state()
        self._storage.save(state)

    def _state(self) -> dict[str, Any]:
        return {
            "snapshots": [snapshot.to_dict() for snapshot in self._snapshots],
            "lastUpdate": self._last_update,
        }

    def _restore(self) -> None:
        state = self._storage.load()
        items = state.get("snapshots") or []
        if not isinstance(items, list):
            logger.warning("Ignoring persisted snapshots that are not a list: %r", type(items).__name__)
            items = []
        restored: list[MetricsSnapshot] = []
        for item in items:
            try:
                restored.append(MetricsSnapshot.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Dropping unreadable persisted snapshot: %s", exc)
        self._snapshots = restored[: self._capacity]

        last_update = state.get("lastUpdate")
        if isinstance(last_update, (int, float)) and not isinstance(last_update, bool):
            self._last_update = float(last_update)
        if self._snapshots:
            logger.info("Restored %d snapshots from storage", len(self._snapshots))


__all__ = ["DEFAULT_CAPACITY", "SnapshotHistory"]
