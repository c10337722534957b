"""Typed records for the GBFS station feeds and derived metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    return int(value)


def _count(value: Any, field_name: str) -> int:
    count = _as_int(value)
    if count < 0:
        raise ValueError(f"{field_name} must not be negative, got {count}")
    return count


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def _require_station_id(record: dict[str, Any]) -> str:
    station_id = record.get("station_id")
    if station_id is None or str(station_id) == "":
        raise ValueError("Feed record is missing station_id")
    return str(station_id)


@dataclass(frozen=True)
class StationInfo:
    """Static station attributes from the station_information feed."""

    station_id: str
    name: str
    lat: float
    lon: float
    capacity: int

    @classmethod
    def from_feed(cls, record: dict[str, Any]) -> StationInfo:
        """Build from a raw feed record, defaulting absent fields."""
        return cls(
            station_id=_require_station_id(record),
            name=str(record.get("name") or "Unknown Station"),
            lat=_as_float(record.get("lat")),
            lon=_as_float(record.get("lon")),
            capacity=_as_int(record.get("capacity")),
        )


@dataclass(frozen=True)
class StationStatus:
    """Volatile station attributes from the station_status feed."""

    station_id: str
    num_bikes_available: int
    num_docks_available: int
    is_renting: int
    is_returning: int
    last_reported: int

    @classmethod
    def from_feed(cls, record: dict[str, Any]) -> StationStatus:
        """Build from a raw feed record; booleans are normalized to 0/1.

        Negative bike or dock counts are rejected with ValueError.
        """
        return cls(
            station_id=_require_station_id(record),
            num_bikes_available=_count(record.get("num_bikes_available"), "num_bikes_available"),
            num_docks_available=_count(record.get("num_docks_available"), "num_docks_available"),
            is_renting=1 if _as_int(record.get("is_renting")) else 0,
            is_returning=1 if _as_int(record.get("is_returning")) else 0,
            last_reported=_as_int(record.get("last_reported")),
        )

    @property
    def is_active(self) -> bool:
        return self.is_renting == 1 and self.is_returning == 1


@dataclass(frozen=True)
class EnrichedStation:
    """Station metadata joined with its status, if the status feed has one."""

    station_id: str
    name: str
    lat: float
    lon: float
    capacity: int
    num_bikes_available: int | None = None
    num_docks_available: int | None = None
    is_renting: int | None = None
    is_returning: int | None = None
    last_reported: int | None = None

    @property
    def has_status(self) -> bool:
        return self.num_bikes_available is not None

    @property
    def is_active(self) -> bool:
        return self.is_renting == 1 and self.is_returning == 1


@dataclass(frozen=True)
class SystemMetrics:
    """System-wide aggregates for one observation."""

    total_stations: int
    active_stations: int
    total_bikes: int
    total_docks: int
    utilization: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalStations": self.total_stations,
            "activeStations": self.active_stations,
            "totalBikes": self.total_bikes,
            "totalDocks": self.total_docks,
            "utilization": self.utilization,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SystemMetrics:
        return cls(
            total_stations=int(data["totalStations"]),
            active_stations=int(data["activeStations"]),
            total_bikes=int(data["totalBikes"]),
            total_docks=int(data["totalDocks"]),
            utilization=float(data["utilization"]),
        )


@dataclass(frozen=True)
class StationSample:
    """Per-station availability kept inside a snapshot for trend lines."""

    station_id: str
    bikes: int
    docks: int
    is_active: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "station_id": self.station_id,
            "bikes": self.bikes,
            "docks": self.docks,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StationSample:
        return cls(
            station_id=str(data["station_id"]),
            bikes=int(data.get("bikes", 0)),
            docks=int(data.get("docks", 0)),
            is_active=bool(data.get("is_active", False)),
        )


@dataclass(frozen=True)
class MetricsSnapshot:
    """One recorded observation of the system metrics."""

    id: int
    timestamp: int  # epoch milliseconds
    metrics: SystemMetrics
    station_sample: tuple[StationSample, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "metrics": self.metrics.to_dict(),
            "stationSample": [sample.to_dict() for sample in self.station_sample],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricsSnapshot:
        return cls(
            id=int(data["id"]),
            timestamp=int(data["timestamp"]),
            metrics=SystemMetrics.from_dict(data["metrics"]),
            station_sample=tuple(
                StationSample.from_dict(item) for item in data.get("stationSample", []) or []
            ),
        )


@dataclass(frozen=True)
class StationCounters:
    """Aggregate counters shown alongside the station list."""

    total_stations: int
    available_bikes: int
    available_docks: int
    active_stations: int


__all__ = [
    "EnrichedStation",
    "MetricsSnapshot",
    "StationCounters",
    "StationInfo",
    "StationSample",
    "StationStatus",
    "SystemMetrics",
]
