from __future__ import annotations

import pytest
import requests

from dvf.common.constants import USER_AGENT
from dvf.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError, TimeoutConfig


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b""):
        self.status_code = status_code
        self.content = content


def test_http_get_bytes_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, b"payload"))

    assert client.get_bytes("https://example.com/a.json.gz") == b"payload"


def test_http_request_uses_client_headers_and_timeouts(monkeypatch):
    client = HttpClient(timeout=TimeoutConfig(connect=3.0, read=9.0), retry=RetryConfig(max_attempts=1))
    seen = {}

    def _request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, b"ok")

    monkeypatch.setattr(client.session, "request", _request)
    client.get_bytes("https://example.com/a.json.gz")

    assert seen["method"] == "GET"
    assert seen["headers"]["User-Agent"] == USER_AGENT
    assert seen["timeout"] == (3.0, 9.0)
    assert "params" not in seen


def test_http_missing_resource(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(404))

    assert client.get_bytes("https://example.com/a.json.gz", missing_ok=True) is None
    with pytest.raises(HttpRequestError):
        client.get_bytes("https://example.com/a.json.gz")


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503))

    with pytest.raises(RetryableHttpError):
        client.get_bytes("https://example.com")


def test_http_retries_until_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.01, max_wait=0.01))
    responses = [FakeResponse(502), FakeResponse(200, b"ok")]
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: responses.pop(0))

    assert client.get_bytes("https://example.com") == b"ok"


def test_http_connection_error_is_retryable(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    def _raise(**_kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(client.session, "request", _raise)

    with pytest.raises(RetryableHttpError):
        client.get_bytes("https://example.com")
