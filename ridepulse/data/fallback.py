"""Built-in offline snapshot of both feeds, used only when nothing else is available."""

from __future__ import annotations

import time
from typing import Any

STATION_INFORMATION: tuple[dict[str, Any], ...] = (
    {"station_id": "72", "name": "W 52 St & 11 Ave", "lat": 40.76727216, "lon": -73.99392888, "capacity": 39},
    {"station_id": "79", "name": "Franklin St & W Broadway", "lat": 40.71911552, "lon": -74.00666661, "capacity": 33},
    {"station_id": "82", "name": "St James Pl & Pearl St", "lat": 40.71117416, "lon": -74.00016545, "capacity": 27},
    {"station_id": "83", "name": "Atlantic Ave & Fort Greene Pl", "lat": 40.68382604, "lon": -73.97632328, "capacity": 62},
    {"station_id": "116", "name": "W 17 St & 8 Ave", "lat": 40.74177603, "lon": -74.00149746, "capacity": 39},
)

# (station_id, bikes, docks, seconds since last report)
_STATUS_ROWS: tuple[tuple[str, int, int, int], ...] = (
    ("72", 17, 21, 60),
    ("79", 12, 21, 120),
    ("82", 3, 23, 180),
    ("83", 25, 35, 90),
    ("116", 0, 39, 45),
)


def station_information() -> list[dict[str, Any]]:
    """Return raw station_information records."""
    return [dict(record) for record in STATION_INFORMATION]


def station_status(now: float | None = None) -> list[dict[str, Any]]:
    """Return raw station_status records reported shortly before ``now``."""
    reference = int(now if now is not None else time.time())
    return [
        {
            "station_id": station_id,
            "num_bikes_available": bikes,
            "num_docks_available": docks,
            "is_installed": 1,
            "is_renting": 1,
            "is_returning": 1,
            "last_reported": reference - age_seconds,
        }
        for station_id, bikes, docks, age_seconds in _STATUS_ROWS
    ]


__all__ = ["STATION_INFORMATION", "station_information", "station_status"]
