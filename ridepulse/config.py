"""Configuration loader for the RidePulse feed pipeline."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml

from ridepulse.exceptions import ConfigError


@dataclass(frozen=True)
class FeedConfig:
    """GBFS feed endpoints and request/cache timing."""

    station_information_url: str
    station_status_url: str
    timeout_seconds: float
    cache_ttl_seconds: float


@dataclass(frozen=True)
class PollConfig:
    """Background refresh schedule."""

    interval_seconds: float


@dataclass(frozen=True)
class HistoryConfig:
    """Snapshot history retention and persistence."""

    capacity: int
    storage_path: str
    namespace: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    feeds: FeedConfig
    poll: PollConfig
    history: HistoryConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ConfigError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' config must be a mapping")
    return section


def _positive_number(value: Any, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be a number") from exc
    if number <= 0:
        raise ConfigError(f"'{key}' must be positive")
    return number


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file is not valid YAML: {path}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    feeds_section = _require_section(data, "feeds")
    poll_section = _require_section(data, "poll")
    history_section = _require_section(data, "history")
    logging_section = _require_section(data, "logging")

    feeds = FeedConfig(
        station_information_url=os.environ.get(
            "GBFS_STATION_INFORMATION_URL",
            _require_key(feeds_section, "station_information_url", "feeds"),
        ),
        station_status_url=os.environ.get(
            "GBFS_STATION_STATUS_URL",
            _require_key(feeds_section, "station_status_url", "feeds"),
        ),
        timeout_seconds=_positive_number(feeds_section.get("timeout_seconds", 10), "timeout_seconds"),
        cache_ttl_seconds=_positive_number(feeds_section.get("cache_ttl_seconds", 30), "cache_ttl_seconds"),
    )

    poll = PollConfig(
        interval_seconds=_positive_number(
            _require_key(poll_section, "interval_seconds", "poll"), "interval_seconds"
        ),
    )

    capacity = _require_key(history_section, "capacity", "history")
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
        raise ConfigError("'capacity' must be a positive integer")
    history = HistoryConfig(
        capacity=capacity,
        storage_path=_require_key(history_section, "storage_path", "history"),
        namespace=history_section.get("namespace", "ridepulse-storage"),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(feeds=feeds, poll=poll, history=history, log=logging)
