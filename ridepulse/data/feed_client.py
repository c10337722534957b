"""GBFS feed client with a fresh-cache, live, stale-cache, fallback resolution chain."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable

from ridepulse.data import fallback
from ridepulse.data.cache import TTLCache
from ridepulse.data.fetcher import DEFAULT_TIMEOUT_SECONDS, fetch_json
from ridepulse.data.models import StationInfo, StationStatus
from ridepulse.exceptions import AllSourcesExhaustedError, FetchError, ParseError

logger = logging.getLogger(__name__)

STATION_INFORMATION = "station_information"
STATION_STATUS = "station_status"

SOURCE_CACHE = "cache"
SOURCE_LIVE = "live"
SOURCE_STALE = "stale"
SOURCE_FALLBACK = "fallback"

_RECORD_TYPES: dict[str, type] = {
    STATION_INFORMATION: StationInfo,
    STATION_STATUS: StationStatus,
}


@dataclass(frozen=True)
class FeedResult:
    """Records for one feed and where they came from."""

    records: tuple[Any, ...]
    source: str

    @property
    def is_stale(self) -> bool:
        return self.source == SOURCE_STALE


@dataclass(frozen=True)
class FeedBundle:
    """Both feeds resolved within one refresh cycle."""

    stations: list[StationInfo]
    status: list[StationStatus]
    timestamp: float
    sources: dict[str, str] = field(default_factory=dict)


def parse_records(feed_key: str, raw_records: list[Any]) -> tuple[Any, ...]:
    """Validate raw feed records; malformed and duplicate station ids are dropped."""
    record_type = _RECORD_TYPES[feed_key]
    parsed: list[Any] = []
    seen: set[str] = set()
    for raw in raw_records:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object %s record: %r", feed_key, raw)
            continue
        try:
            record = record_type.from_feed(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping malformed %s record: %s", feed_key, exc)
            continue
        if record.station_id in seen:
            logger.warning("Skipping duplicate %s record for station %s", feed_key, record.station_id)
            continue
        seen.add(record.station_id)
        parsed.append(record)
    return tuple(parsed)


def extract_stations(payload: Any) -> list[Any]:
    """Return ``data.stations`` from a GBFS payload or raise ParseError."""
    data = payload.get("data") if isinstance(payload, dict) else None
    stations = data.get("stations") if isinstance(data, dict) else None
    if not isinstance(stations, list):
        raise ParseError("Feed response missing data.stations list")
    return stations


class FeedClient:
    """Resolves each GBFS feed independently and never returns "no data"."""

    def __init__(
        self,
        station_information_url: str,
        station_status_url: str,
        cache: TTLCache | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        fetch: Callable[[str, float], Any] = fetch_json,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._urls = {
            STATION_INFORMATION: station_information_url,
            STATION_STATUS: station_status_url,
        }
        self._cache = cache if cache is not None else TTLCache(clock=clock)
        self._timeout_seconds = timeout_seconds
        self._fetch = fetch
        self._clock = clock

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def resolve(self, feed_key: str) -> FeedResult:
        """Resolve one feed through fresh cache, live fetch, stale cache, then fallback."""
        if feed_key not in self._urls:
            raise KeyError(f"Unknown feed: {feed_key}")

        if self._cache.is_fresh(feed_key):
            return FeedResult(records=self._cache.get(feed_key), source=SOURCE_CACHE)

        try:
            payload = self._fetch(self._urls[feed_key], self._timeout_seconds)
            records = parse_records(feed_key, extract_stations(payload))
        except FetchError as exc:
            logger.error("Error fetching %s: %s", feed_key, exc)
        else:
            self._cache.set(feed_key, records)
            return FeedResult(records=records, source=SOURCE_LIVE)

        cached = self._cache.get(feed_key)
        if cached is not None:
            logger.warning("Using stale %s data", feed_key)
            return FeedResult(records=cached, source=SOURCE_STALE)

        logger.warning("Using fallback %s data", feed_key)
        records = self._load_fallback(feed_key)
        self._cache.set(feed_key, records)
        return FeedResult(records=records, source=SOURCE_FALLBACK)

    def get_station_information(self) -> list[StationInfo]:
        return list(self.resolve(STATION_INFORMATION).records)

    def get_station_status(self) -> list[StationStatus]:
        return list(self.resolve(STATION_STATUS).records)

    def fetch_all(self) -> FeedBundle:
        """Resolve both feeds concurrently; both must finish before returning."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="gbfs-feed") as pool:
            info_future = pool.submit(self.resolve, STATION_INFORMATION)
            status_future = pool.submit(self.resolve, STATION_STATUS)
            info = info_future.result()
            status = status_future.result()

        return FeedBundle(
            stations=list(info.records),
            status=list(status.records),
            timestamp=self._clock(),
            sources={STATION_INFORMATION: info.source, STATION_STATUS: status.source},
        )

    def _load_fallback(self, feed_key: str) -> tuple[Any, ...]:
        try:
            if feed_key == STATION_INFORMATION:
                raw = fallback.station_information()
            else:
                raw = fallback.station_status(self._clock())
            records = parse_records(feed_key, raw)
        except Exception as exc:
            raise AllSourcesExhaustedError(f"Fallback {feed_key} data could not be loaded: {exc}") from exc
        if not records:
            raise AllSourcesExhaustedError(f"Fallback {feed_key} data is empty")
        return records


__all__ = [
    "FeedBundle",
    "FeedClient",
    "FeedResult",
    "SOURCE_CACHE",
    "SOURCE_FALLBACK",
    "SOURCE_LIVE",
    "SOURCE_STALE",
    "STATION_INFORMATION",
    "STATION_STATUS",
    "extract_stations",
    "parse_records",
]
