from __future__ import annotations

from ridepulse.data.models import MetricsSnapshot, SystemMetrics
from ridepulse.data.storage import JsonFileStorage, MemoryStorage
from ridepulse.logic.history import DEFAULT_CAPACITY, SnapshotHistory


def _snapshot(snapshot_id: int, bikes: int = 1) -> MetricsSnapshot:
    return MetricsSnapshot(
        id=snapshot_id,
        timestamp=snapshot_id,
        metrics=SystemMetrics(
            total_stations=1,
            active_stations=1,
            total_bikes=bikes,
            total_docks=1,
            utilization=bikes / (bikes + 1) * 100,
        ),
    )


def test_history_is_bounded_and_newest_first() -> None:
    history = SnapshotHistory(MemoryStorage())

    for snapshot_id in range(1, 51):
        history.add_snapshot(_snapshot(snapshot_id))
        assert len(history) <= DEFAULT_CAPACITY
        assert history.latest is not None
        assert history.latest.id == snapshot_id

    ids = [snapshot.id for snapshot in history]
    assert ids == list(range(50, 30, -1))


def test_every_add_flushes_storage() -> None:
    storage = MemoryStorage()
    history = SnapshotHistory(storage, capacity=3)

    history.add_snapshot(_snapshot(1), last_update=10.0)
    history.add_snapshot(_snapshot(2), last_update=20.0)

    assert storage.save_count == 2
    saved = storage.load()
    assert [item["id"] for item in saved["snapshots"]] == [2, 1]
    assert saved["lastUpdate"] == 20.0


def test_history_restores_from_storage() -> None:
    storage = MemoryStorage()
    first = SnapshotHistory(storage, capacity=5)
    for snapshot_id in range(1, 8):
        first.add_snapshot(_snapshot(snapshot_id), last_update=float(snapshot_id))

    restored = SnapshotHistory(storage, capacity=5)

    assert restored.snapshots == first.snapshots
    assert restored.last_update == 7.0


def test_restore_truncates_to_capacity_and_skips_bad_entries() -> None:
    storage = MemoryStorage(
        {
            "snapshots": [_snapshot(5).to_dict(), {"id": "bad"}, _snapshot(4).to_dict(), _snapshot(3).to_dict()],
            "lastUpdate": "yesterday",
        }
    )

    history = SnapshotHistory(storage, capacity=2)

    assert [snapshot.id for snapshot in history] == [5, 4]
    assert history.last_update is None


def test_history_round_trips_through_json_file(tmp_path) -> None:
    path = tmp_path / "state" / "ridepulse.json"
    history = SnapshotHistory(JsonFileStorage(path), capacity=20)
    for snapshot_id in range(1, 26):
        history.add_snapshot(_snapshot(snapshot_id, bikes=snapshot_id), last_update=123.5)

    restored = SnapshotHistory(JsonFileStorage(path), capacity=20)

    assert len(restored) == 20
    assert restored.snapshots == history.snapshots
    assert restored.latest is not None
    assert restored.latest.id == 25
    assert restored.last_update == 123.5


def test_restore_ignores_snapshots_that_are_not_a_list() -> None:
    history = SnapshotHistory(MemoryStorage({"snapshots": 5, "lastUpdate": 42.0}))

    assert len(history) == 0
    assert history.latest is None
    assert history.last_update == 42.0
