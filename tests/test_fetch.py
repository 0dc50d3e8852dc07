"""Tests for the HTTP JSON source."""

import httpx
import pytest

from api_playground.config import FetchConfig
from api_playground.datasources import FetchError, HttpJsonSource, validate_url


def _source(handler, **config):
    return HttpJsonSource(FetchConfig(**config), transport=httpx.MockTransport(handler))


def test_fetch_json_array():
    """A JSON response is decoded and returned with its metadata."""
    seen = {}

    def handler(request):
        seen["accept"] = request.headers["Accept"]
        seen["agent"] = request.headers["User-Agent"]
        return httpx.Response(200, json=[{"id": 1}, {"id": 2}])

    result = _source(handler).fetch("https://api.example.com/items")

    assert result.success
    assert result.data == [{"id": 1}, {"id": 2}]
    assert result.status == 200
    assert result.headers["content-type"] == "application/json"
    assert result.error is None
    assert result.timestamp
    assert seen == {"accept": "application/json", "agent": "API-Data-Playground/1.0"}


def test_fetch_http_error_status():
    """Non-2xx responses become an HTTP error message."""
    result = _source(lambda request: httpx.Response(404)).fetch("https://api.example.com/x")

    assert not result.success
    assert result.error == "HTTP 404: Not Found"
    assert result.data is None


def test_fetch_rejects_non_json_content():
    """Only JSON content types are accepted."""
    def handler(request):
        return httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"})

    result = _source(handler).fetch("https://api.example.com/page")

    assert result.error == "API must return JSON data"


def test_fetch_rejects_invalid_json():
    """Undecodable bodies are reported."""
    def handler(request):
        return httpx.Response(
            200, content=b"{not json", headers={"content-type": "application/json"}
        )

    result = _source(handler).fetch("https://api.example.com/broken")

    assert result.error == "API returned invalid JSON"


def test_fetch_rejects_null_body():
    """A JSON null is treated as no data."""
    def handler(request):
        return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})

    result = _source(handler).fetch("https://api.example.com/null")

    assert result.error == "API returned empty or null data"


def test_fetch_timeout():
    """Timeouts report the configured limit."""
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = _source(handler, timeout_seconds=2.5).fetch("https://api.example.com/slow")

    assert result.error == "Request timed out after 2.5 seconds"


def test_fetch_connection_error():
    """Transport failures are wrapped."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = _source(handler).fetch("https://api.example.com/down")

    assert result.error == "Request failed: connection refused"


def test_fetch_blocked_url_never_sends_request():
    """Rejected URLs fail before any request is made."""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    result = _source(handler).fetch("http://localhost:8000/admin")

    assert not result.success
    assert result.error == "Private/localhost URLs are not allowed for security reasons"
    assert calls == []


@pytest.mark.parametrize(
    "url,message",
    [
        ("", "Please provide a valid URL"),
        (None, "Please provide a valid URL"),
        ("not a url", "Invalid URL format"),
        ("ftp://example.com/file.json", "Only HTTP and HTTPS URLs are allowed"),
        ("http://127.0.0.1/data", "Private/localhost URLs are not allowed for security reasons"),
        ("https://192.168.1.10/api", "Private/localhost URLs are not allowed for security reasons"),
        ("https://10.0.0.5/api", "Private/localhost URLs are not allowed for security reasons"),
    ],
)
def test_validate_url_rejections(url, message):
    """Invalid and private URLs are rejected with a display message."""
    with pytest.raises(FetchError) as exc_info:
        validate_url(url, FetchConfig())

    assert str(exc_info.value) == message


def test_validate_url_accepts_public_https():
    """Public HTTP(S) URLs pass unchanged."""
    url = "https://jsonplaceholder.typicode.com/users"

    assert validate_url(url, FetchConfig()) == url
