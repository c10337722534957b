"""Join station metadata with status and derive system-wide metrics."""

from __future__ import annotations

import time
from typing import Sequence

from ridepulse.data.models import (
    EnrichedStation,
    MetricsSnapshot,
    StationCounters,
    StationInfo,
    StationSample,
    StationStatus,
    SystemMetrics,
)

SAMPLE_SIZE = 50


def join(stations: Sequence[StationInfo], status: Sequence[StationStatus]) -> list[EnrichedStation]:
    """Left-join metadata with status by station_id, keeping metadata order."""
    status_by_id = {record.station_id: record for record in status}
    enriched: list[EnrichedStation] = []
    for station in stations:
        match = status_by_id.get(station.station_id)
        if match is None:
            enriched.append(
                EnrichedStation(
                    station_id=station.station_id,
                    name=station.name,
                    lat=station.lat,
                    lon=station.lon,
                    capacity=station.capacity,
                )
            )
            continue
        enriched.append(
            EnrichedStation(
                station_id=station.station_id,
                name=station.name,
                lat=station.lat,
                lon=station.lon,
                capacity=station.capacity,
                num_bikes_available=match.num_bikes_available,
                num_docks_available=match.num_docks_available,
                is_renting=match.is_renting,
                is_returning=match.is_returning,
                last_reported=match.last_reported,
            )
        )
    return enriched


def utilization(total_bikes: int, total_docks: int) -> float:
    """Percentage of occupied slots; 0.0 when there is no capacity at all."""
    denominator = total_bikes + total_docks
    if denominator <= 0:
        return 0.0
    return total_bikes / denominator * 100


def compute_metrics(stations: Sequence[StationInfo], status: Sequence[StationStatus]) -> SystemMetrics:
    total_bikes = sum(record.num_bikes_available for record in status)
    total_docks = sum(record.num_docks_available for record in status)
    return SystemMetrics(
        total_stations=len(stations),
        active_stations=sum(1 for record in status if record.is_active),
        total_bikes=total_bikes,
        total_docks=total_docks,
        utilization=utilization(total_bikes, total_docks),
    )


def station_counters(stations: Sequence[StationInfo], status: Sequence[StationStatus]) -> StationCounters:
    metrics = compute_metrics(stations, status)
    return StationCounters(
        total_stations=metrics.total_stations,
        available_bikes=metrics.total_bikes,
        available_docks=metrics.total_docks,
        active_stations=metrics.active_stations,
    )


def create_snapshot(
    stations: Sequence[StationInfo],
    status: Sequence[StationStatus],
    now_ms: int | None = None,
    previous_id: int | None = None,
) -> MetricsSnapshot:
    """Record the current metrics plus a bounded sample of station availability.

    The id doubles as the timestamp in epoch milliseconds. If the clock has not
    advanced past ``previous_id`` the id is bumped so ids stay strictly increasing.
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    snapshot_id = timestamp
    if previous_id is not None and snapshot_id <= previous_id:
        snapshot_id = previous_id + 1

    sample = tuple(
        StationSample(
            station_id=record.station_id,
            bikes=record.num_bikes_available,
            docks=record.num_docks_available,
            is_active=record.is_active,
        )
        for record in status[:SAMPLE_SIZE]
    )
    return MetricsSnapshot(
        id=snapshot_id,
        timestamp=timestamp,
        metrics=compute_metrics(stations, status),
        station_sample=sample,
    )


__all__ = [
    "SAMPLE_SIZE",
    "compute_metrics",
    "create_snapshot",
    "join",
    "station_counters",
    "utilization",
]
