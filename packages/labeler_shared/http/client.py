"""Shared synchronous HTTP client over httpx, with bounded retry helpers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from random import random
from time import sleep
from typing import Any, TypeVar

import httpx

from .errors import HttpClientError, HttpJsonDecodeError, HttpRequestError, HttpStatusError

T = TypeVar("T")


def _response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except Exception:  # noqa: BLE001
        return ""


def _status_error(response: httpx.Response) -> HttpStatusError:
    status_code = response.status_code
    return HttpStatusError(
        message=f"HTTP {status_code} for {response.request.method} {response.request.url}",
        method=response.request.method,
        url=str(response.request.url),
        retryable=status_code >= 500 or status_code == 429,
        status_code=status_code,
        response_body=_response_text(response),
        response_headers=dict(response.headers.items()),
    )


class HttpClient:
    """Thin synchronous wrapper over ``httpx.Client``."""

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            transport=transport,
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request and map transport/status failures to typed errors."""
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            request = exc.request if _has_request(exc) else None
            request_url = str(request.url) if request is not None else url
            request_method = request.method if request is not None else method.upper()
            raise HttpRequestError(
                message=f"HTTP request failed for {request_method} {request_url}",
                method=request_method,
                url=request_url,
                retryable=True,
                cause=exc,
            ) from exc

        if raise_for_status and response.is_error:
            raise _status_error(response)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one POST request."""
        return self.request("POST", url, **kwargs)

    def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Issue one request and decode JSON from a successful response."""
        response = self.request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise HttpJsonDecodeError(
                message=f"Invalid JSON response for {response.request.method} {response.request.url}",
                method=response.request.method,
                url=str(response.request.url),
                retryable=False,
                status_code=response.status_code,
                response_body=_response_text(response),
                cause=exc,
            ) from exc

    def get_json(self, url: str, **kwargs: Any) -> Any:
        """Issue one GET request and decode JSON."""
        return self.request_json("GET", url, **kwargs)

    def post_json(self, url: str, *, json: Any, **kwargs: Any) -> Any:
        """Issue one POST request with a JSON body and decode the JSON response."""
        return self.request_json("POST", url, json=json, **kwargs)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule for one outbound call."""

    max_retries: int = 2
    initial_backoff_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 8.0
    jitter_ratio: float = 0.2

    def delay_for(self, attempt: int) -> float:
        """Return jittered delay before retry number ``attempt`` (0-based)."""
        base = min(
            self.initial_backoff_seconds * (self.backoff_multiplier**attempt),
            self.max_backoff_seconds,
        )
        jitter = base * self.jitter_ratio * (random() * 2 - 1)
        return max(0.0, base + jitter)


def with_retries(
    call: Callable[[], T],
    *,
    policy: RetryPolicy,
    sleep_fn: Callable[[float], None] = sleep,
) -> T:
    """Run ``call`` and retry retryable HTTP failures per ``policy``.

    Non-retryable failures (4xx other than 429, JSON decode errors) propagate
    on the first attempt.
    """
    for attempt in range(policy.max_retries + 1):
        try:
            return call()
        except HttpClientError as exc:
            if not exc.retryable or attempt >= policy.max_retries:
                raise
            sleep_fn(policy.delay_for(attempt))
    raise RuntimeError("unreachable retry state")


def _has_request(exc: httpx.RequestError) -> bool:
    # ``RequestError.request`` raises when the error was built without one.
    try:
        exc.request
    except RuntimeError:
        return False
    return True
