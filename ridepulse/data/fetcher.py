"""Single-shot JSON fetcher for the GBFS feeds."""

from __future__ import annotations

from typing import Any

import requests

from ridepulse.exceptions import FetchError, FetchTimeoutError, HttpStatusError, ParseError

DEFAULT_TIMEOUT_SECONDS = 10.0


def fetch_json(url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> Any:
    """GET a feed and return the decoded JSON body. No retries.

    ``timeout_seconds`` is handed to requests as its connect and per-read
    socket timeout, not a deadline for the whole response: a server that keeps
    trickling bytes can take longer than ``timeout_seconds`` in total.
    """
    headers = {"Accept": "application/json"}
    try:
        response = requests.get(url, headers=headers, timeout=timeout_seconds)
    except requests.Timeout as exc:
        raise FetchTimeoutError(f"No response from {url} within {timeout_seconds}s") from exc
    except requests.RequestException as exc:
        raise FetchError(f"Feed request failed: {exc}") from exc

    if not 200 <= response.status_code < 300:
        raise HttpStatusError(response.status_code, response.text.strip()[:200])

    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(f"Feed response from {url} was not valid JSON") from exc


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "fetch_json"]
