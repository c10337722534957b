from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from ridepulse.data.fetcher import fetch_json
from ridepulse.exceptions import FetchError, FetchTimeoutError, HttpStatusError, ParseError

URL = "https://example.test/station_status.json"


def _mock_response(status_code: int, json_data: dict[str, Any] | None = None, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("Invalid JSON")
    return response


def test_fetch_json_returns_body_and_sends_accept_header() -> None:
    response = _mock_response(200, {"data": {"stations": []}})
    with patch("requests.get", return_value=response) as mock_get:
        body = fetch_json(URL, timeout_seconds=2.5)

    assert body == {"data": {"stations": []}}
    mock_get.assert_called_once()
    _, kwargs = mock_get.call_args
    assert kwargs["headers"]["Accept"] == "application/json"
    assert kwargs["timeout"] == 2.5


def test_timeout_raises_fetch_timeout_error() -> None:
    with patch("requests.get", side_effect=requests.exceptions.ReadTimeout("slow")):
        with pytest.raises(FetchTimeoutError):
            fetch_json(URL)


def test_non_2xx_raises_http_status_error() -> None:
    response = _mock_response(503, {"error": "down"}, text="Service Unavailable")
    with patch("requests.get", return_value=response):
        with pytest.raises(HttpStatusError) as exc_info:
            fetch_json(URL)

    assert exc_info.value.status == 503
    assert "503" in str(exc_info.value)


def test_invalid_json_raises_parse_error() -> None:
    response = _mock_response(200, None)
    with patch("requests.get", return_value=response):
        with pytest.raises(ParseError):
            fetch_json(URL)


def test_connection_error_raises_fetch_error() -> None:
    with patch("requests.get", side_effect=requests.exceptions.ConnectionError("boom")):
        with pytest.raises(FetchError) as exc_info:
            fetch_json(URL)

    assert not isinstance(exc_info.value, FetchTimeoutError)
