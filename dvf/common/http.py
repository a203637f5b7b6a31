"""HTTP client with retries, timeouts, and host-aware rate limiting."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from types import TracebackType
from urllib.parse import urlparse

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from dvf.common.constants import USER_AGENT
from dvf.common.errors import StageError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 5
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class TokenBucket:
    def __init__(self, rate_per_sec: float, capacity: float | None = None) -> None:
        self.rate_per_sec = rate_per_sec
        self.capacity = capacity if capacity is not None else rate_per_sec
        self.tokens = self.capacity
        self.updated_at = time.monotonic()
        self.lock = threading.Lock()

    def acquire(self, tokens: float = 1.0) -> None:
        while True:
            with self.lock:
                now = time.monotonic()
                elapsed = now - self.updated_at
                self.tokens = min(self.capacity, self.tokens + elapsed * self.rate_per_sec)
                self.updated_at = now
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                deficit = tokens - self.tokens
                wait_for = max(deficit / self.rate_per_sec, 0.01)
            time.sleep(wait_for)


class HostRateLimiter:
    def __init__(self, default_rate_per_sec: float) -> None:
        self.default_rate_per_sec = default_rate_per_sec
        self.buckets: dict[str, TokenBucket] = {}
        self.lock = threading.Lock()

    def acquire(self, host: str, tokens: float = 1.0) -> None:
        with self.lock:
            bucket = self.buckets.get(host)
            if bucket is None:
                bucket = TokenBucket(rate_per_sec=self.default_rate_per_sec)
                self.buckets[host] = bucket
        bucket.acquire(tokens=tokens)


class HttpClient:
    """Shared by concurrent geometry fetches; rate limiting is thread-safe."""

    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        rate_per_sec: float = 10.0,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()
        self.limiter = HostRateLimiter(default_rate_per_sec=rate_per_sec)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _host(self, url: str) -> str:
        return urlparse(url).netloc

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT, "Accept": "*/*"}

    def _raise_for_status_or_retry(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status {status} for {url}")
        if status >= 400:
            raise HttpRequestError(f"HTTP status {status} for {url}")

    def _request_bytes(self, url: str, *, missing_ok: bool) -> bytes | None:
        self.limiter.acquire(self._host(url))

        try:
            response = self.session.request(
                method="GET",
                url=url,
                headers=self._headers(),
                timeout=(self.timeout.connect, self.timeout.read),
            )
        except requests.RequestException as exc:
            raise RetryableHttpError(f"Request to {url} failed: {exc}") from exc

        if missing_ok and response.status_code == 404:
            return None
        self._raise_for_status_or_retry(response, url)
        return response.content

    def get_bytes(self, url: str, *, missing_ok: bool = False) -> bytes | None:
        """GET ``url`` and return the raw body; ``None`` on 404 when ``missing_ok``."""

        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _wrapped() -> bytes | None:
            return self._request_bytes(url, missing_ok=missing_ok)

        return _wrapped()
