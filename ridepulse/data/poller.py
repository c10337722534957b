"""Threaded poller that periodically refreshes the GBFS feeds."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import threading
from typing import Callable

from ridepulse.data.feed_client import FeedClient
from ridepulse.data.models import EnrichedStation, MetricsSnapshot, StationCounters
from ridepulse.exceptions import RidePulseError
from ridepulse.logic import reconciler
from ridepulse.logic.history import SnapshotHistory

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 30.0

IDLE = "IDLE"
LOADING = "LOADING"
READY = "READY"
REFRESHING = "REFRESHING"
ERROR = "ERROR"

EMPTY_COUNTERS = StationCounters(total_stations=0, available_bikes=0, available_docks=0, active_stations=0)


@dataclass(frozen=True)
class DashboardState:
    """Everything a consumer reads; replaced wholesale at the end of each cycle."""

    poll_state: str = IDLE
    stations: tuple[EnrichedStation, ...] = ()
    counters: StationCounters = EMPTY_COUNTERS
    last_update: float | None = None
    error: str | None = None
    is_loading: bool = False
    blocking_error: bool = False
    snapshots: tuple[MetricsSnapshot, ...] = ()
    data_sources: dict[str, str] = field(default_factory=dict)


StateListener = Callable[[DashboardState], None]


class GBFSPoller:
    """Runs a foreground refresh on start, then silent background refreshes on a schedule."""

    def __init__(
        self,
        client: FeedClient,
        history: SnapshotHistory,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._client = client
        self._history = history
        self._poll_interval_seconds = poll_interval_seconds
        self._state = DashboardState(
            last_update=history.last_update,
            snapshots=history.snapshots,
        )
        self._listeners: list[StateListener] = []
        self._lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def get_state(self) -> DashboardState:
        """Return the most recently published state."""
        with self._lock:
            return self._state

    def subscribe(self, listener: StateListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def start(self) -> None:
        """Start the background polling thread.

        A thread that was stopped but is still finishing its cycle is left to
        exit on its own; a new thread with its own stop event takes over.
        """
        if self._thread and self._thread.is_alive() and not self._stop_event.is_set():
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop, args=(self._stop_event,), name="gbfs-poller", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop; an in-flight cycle is left to finish."""
        self._stop_event.set()

    def refresh(self, show_loading: bool = True) -> DashboardState:
        """Run one refresh cycle now; cycles never overlap."""
        with self._cycle_lock:
            return self._run_cycle(show_loading)

    def _run_loop(self, stop_event: threading.Event) -> None:
        show_loading = True
        while not stop_event.is_set():
            try:
                self.refresh(show_loading=show_loading)
            except Exception:
                logger.exception("Unexpected error during GBFS refresh")
            show_loading = False
            stop_event.wait(timeout=self._poll_interval_seconds)

    def _run_cycle(self, show_loading: bool) -> DashboardState:
        current = self.get_state()
        if show_loading:
            self._publish(
                replace(current, poll_state=LOADING, is_loading=True, error=None, blocking_error=False)
            )
        else:
            self._publish(replace(current, poll_state=REFRESHING))

        next_state = self.get_state()
        try:
            bundle = self._client.fetch_all()
            latest = self._history.latest
            snapshot = reconciler.create_snapshot(
                bundle.stations,
                bundle.status,
                now_ms=int(bundle.timestamp * 1000),
                previous_id=latest.id if latest is not None else None,
            )
            self._history.add_snapshot(snapshot, last_update=bundle.timestamp)
            next_state = replace(
                self.get_state(),
                poll_state=READY,
                stations=tuple(reconciler.join(bundle.stations, bundle.status)),
                counters=reconciler.station_counters(bundle.stations, bundle.status),
                last_update=bundle.timestamp,
                error=None,
                blocking_error=False,
                snapshots=self._history.snapshots,
                data_sources=dict(bundle.sources),
            )
            logger.info(
                "Data updated: %d stations, %d status records", len(bundle.stations), len(bundle.status)
            )
        except Exception as exc:
            if isinstance(exc, RidePulseError):
                logger.error("Failed to fetch GBFS data: %s", exc)
            else:
                logger.exception("Refresh cycle failed")
            current = self.get_state()
            blocking = current.blocking_error or (show_loading and not current.stations)
            next_state = replace(
                current,
                poll_state=ERROR,
                error=str(exc) or type(exc).__name__,
                blocking_error=blocking,
                snapshots=self._history.snapshots,
            )
        finally:
            if show_loading:
                next_state = replace(next_state, is_loading=False)
            self._publish(next_state)
        return next_state

    def _publish(self, state: DashboardState) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("State listener raised")


__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DashboardState",
    "ERROR",
    "GBFSPoller",
    "IDLE",
    "LOADING",
    "READY",
    "REFRESHING",
    "StateListener",
]
