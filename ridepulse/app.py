"""Command-line entry point that wires the feed pipeline together."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import time

from ridepulse.config import AppConfig, LoggingConfig, load_config
from ridepulse.data.cache import TTLCache
from ridepulse.data.feed_client import FeedClient
from ridepulse.data.poller import ERROR, READY, DashboardState, GBFSPoller
from ridepulse.data.storage import JsonFileStorage
from ridepulse.logic.history import SnapshotHistory

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_FILENAME = "ridepulse.log"

logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig) -> None:
    """Log to the console and to a file under the configured log directory."""
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=config.level.upper(),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8"),
        ],
        force=True,
    )


def build_poller(config: AppConfig) -> GBFSPoller:
    """Construct the single feed client, history and poller for this process."""
    client = FeedClient(
        station_information_url=config.feeds.station_information_url,
        station_status_url=config.feeds.station_status_url,
        cache=TTLCache(ttl_seconds=config.feeds.cache_ttl_seconds),
        timeout_seconds=config.feeds.timeout_seconds,
    )
    history = SnapshotHistory(
        JsonFileStorage(config.history.storage_path, namespace=config.history.namespace),
        capacity=config.history.capacity,
    )
    return GBFSPoller(client, history, poll_interval_seconds=config.poll.interval_seconds)


def format_summary(state: DashboardState) -> str:
    counters = state.counters
    parts = [
        state.poll_state,
        f"stations={counters.total_stations}",
        f"active={counters.active_stations}",
        f"bikes={counters.available_bikes}",
        f"docks={counters.available_docks}",
    ]
    if state.snapshots:
        parts.append(f"utilization={state.snapshots[0].metrics.utilization:.1f}%")
    parts.append(f"history={len(state.snapshots)}")
    if state.data_sources:
        sources = ",".join(f"{key}:{value}" for key, value in sorted(state.data_sources.items()))
        parts.append(f"sources={sources}")
    if state.error:
        parts.append(f"error={state.error!r}")
    return " ".join(parts)


def _print_settled(state: DashboardState) -> None:
    if state.poll_state in {READY, ERROR}:
        print(format_summary(state), flush=True)


def main() -> int:
    parser = argparse.ArgumentParser(description="Poll GBFS bike-share feeds")
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to the YAML config file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single foreground refresh and exit",
    )
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.log)
    poller = build_poller(config)

    if args.once:
        state = poller.refresh(show_loading=True)
        print(format_summary(state), flush=True)
        return 1 if state.blocking_error else 0

    poller.subscribe(_print_settled)
    poller.start()
    logger.info("Polling every %ss", config.poll.interval_seconds)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
