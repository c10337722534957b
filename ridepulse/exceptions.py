"""Exception hierarchy for the RidePulse feed pipeline."""

from __future__ import annotations


class RidePulseError(Exception):
    """Base class for all RidePulse errors."""


class ConfigError(RidePulseError, ValueError):
    """Raised when the configuration file is missing or malformed."""


class FetchError(RidePulseError):
    """Raised when a feed request fails before usable JSON is obtained."""


class FetchTimeoutError(FetchError):
    """Raised when a feed does not respond within the request timeout."""


class HttpStatusError(FetchError):
    """Raised when a feed responds with a non-2xx status code."""

    def __init__(self, status: int, detail: str = "") -> None:
        message = f"HTTP error, status {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status = status


class ParseError(FetchError):
    """Raised when a feed body is not valid JSON or lacks the station list."""


class AllSourcesExhaustedError(RidePulseError):
    """Raised when live, cached and fallback data are all unavailable."""


__all__ = [
    "AllSourcesExhaustedError",
    "ConfigError",
    "FetchError",
    "FetchTimeoutError",
    "HttpStatusError",
    "ParseError",
    "RidePulseError",
]
