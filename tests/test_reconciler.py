from __future__ import annotations

import math

import pytest

from ridepulse.data.models import StationInfo, StationStatus
from ridepulse.logic.reconciler import (
    SAMPLE_SIZE,
    compute_metrics,
    create_snapshot,
    join,
    station_counters,
    utilization,
)


def _info(station_id: str, capacity: int = 39) -> StationInfo:
    return StationInfo(station_id=station_id, name=f"Station {station_id}", lat=40.7, lon=-74.0, capacity=capacity)


def _status(
    station_id: str,
    bikes: int = 0,
    docks: int = 0,
    is_renting: int = 1,
    is_returning: int = 1,
) -> StationStatus:
    return StationStatus(
        station_id=station_id,
        num_bikes_available=bikes,
        num_docks_available=docks,
        is_renting=is_renting,
        is_returning=is_returning,
        last_reported=1_700_000_000,
    )


def test_single_station_join_and_metrics() -> None:
    stations = [_info("72")]
    status = [_status("72", bikes=17, docks=21)]

    enriched = join(stations, status)
    metrics = compute_metrics(stations, status)

    assert len(enriched) == 1
    assert enriched[0].num_bikes_available == 17
    assert enriched[0].is_active
    assert metrics.active_stations == 1
    assert metrics.total_bikes == 17
    assert metrics.total_docks == 21
    assert metrics.utilization == pytest.approx(44.74, abs=0.01)


def test_station_without_status_is_kept_and_not_active() -> None:
    stations = [_info("72"), _info("79")]
    status = [_status("72", bikes=5, docks=5)]

    enriched = join(stations, status)
    metrics = compute_metrics(stations, status)

    assert [s.station_id for s in enriched] == ["72", "79"]
    missing = enriched[1]
    assert not missing.has_status
    assert missing.num_bikes_available is None
    assert missing.num_docks_available is None
    assert not missing.is_active
    assert metrics.total_stations == 2
    assert metrics.active_stations == 1


def test_status_without_metadata_is_ignored_in_join() -> None:
    enriched = join([_info("72")], [_status("72"), _status("999", bikes=4)])

    assert [s.station_id for s in enriched] == ["72"]


def test_inactive_stations_are_not_counted() -> None:
    status = [
        _status("1", is_renting=1, is_returning=0),
        _status("2", is_renting=0, is_returning=1),
        _status("3"),
    ]

    assert compute_metrics([], status).active_stations == 1


def test_zero_capacity_utilization_is_zero() -> None:
    metrics = compute_metrics([_info("72")], [_status("72", bikes=0, docks=0)])

    assert metrics.utilization == 0.0
    assert not math.isnan(metrics.utilization)
    assert utilization(0, 0) == 0.0


def test_utilization_stays_within_bounds() -> None:
    assert utilization(10, 0) == 100.0
    assert utilization(0, 10) == 0.0
    assert 0.0 <= utilization(3, 7) <= 100.0


def test_station_counters_match_metrics() -> None:
    stations = [_info("72"), _info("79")]
    status = [_status("72", bikes=17, docks=21), _status("79", bikes=12, docks=21, is_renting=0)]

    counters = station_counters(stations, status)

    assert counters.total_stations == 2
    assert counters.available_bikes == 29
    assert counters.available_docks == 42
    assert counters.active_stations == 1


def test_create_snapshot_uses_timestamp_as_id_and_samples() -> None:
    status = [_status(str(i), bikes=i, docks=1) for i in range(SAMPLE_SIZE + 10)]

    snapshot = create_snapshot([_info("0")], status, now_ms=1_700_000_000_000)

    assert snapshot.id == snapshot.timestamp == 1_700_000_000_000
    assert len(snapshot.station_sample) == SAMPLE_SIZE
    assert snapshot.station_sample[3].bikes == 3
    assert snapshot.station_sample[3].is_active
    assert snapshot.metrics.total_bikes == sum(range(SAMPLE_SIZE + 10))


def test_create_snapshot_keeps_ids_increasing() -> None:
    snapshot = create_snapshot([], [], now_ms=5_000, previous_id=5_000)

    assert snapshot.id == 5_001
    assert snapshot.timestamp == 5_000
