"""Unit tests for the shared HTTP client wrapper and retry helper."""

from __future__ import annotations

import httpx
import pytest

from packages.labeler_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
    RetryPolicy,
    with_retries,
)

_NO_JITTER = RetryPolicy(
    max_retries=2,
    initial_backoff_seconds=0.5,
    backoff_multiplier=2.0,
    max_backoff_seconds=8.0,
    jitter_ratio=0.0,
)


def _client(handler) -> HttpClient:
    return HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    )


def test_http_client_get_json_returns_decoded_payload() -> None:
    """HttpClient.get_json should decode and return JSON content."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True}, request=request)

    with _client(handler) as client:
        assert client.get_json("/health") == {"ok": True}


def test_http_client_maps_status_failure_to_typed_error() -> None:
    """Non-2xx responses should raise HttpStatusError with retryability."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.get("/health")

    error = exc_info.value
    assert error.method == "GET"
    assert error.status_code == 503
    assert error.retryable is True
    assert error.response_body == "unavailable"


def test_http_client_maps_transport_failure_to_typed_error() -> None:
    """Transport failures should raise HttpRequestError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection failed", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpRequestError) as exc_info:
            client.get("/health")

    error = exc_info.value
    assert error.url == "https://example.test/health"
    assert error.retryable is True
    assert isinstance(error.cause, httpx.ConnectError)


def test_http_client_maps_json_decode_failure_to_typed_error() -> None:
    """Invalid JSON bodies should raise a non-retryable decode error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not-json", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpJsonDecodeError) as exc_info:
            client.get_json("/health")

    assert exc_info.value.retryable is False
    assert exc_info.value.response_body == "not-json"


def test_with_retries_retries_retryable_status_then_succeeds() -> None:
    """A 503 followed by success should sleep once on the first backoff step."""
    responses = iter([503, 200])
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(responses), json={"n": 1}, request=request)

    with _client(handler) as client:
        result = with_retries(
            lambda: client.get_json("/x"), policy=_NO_JITTER, sleep_fn=sleeps.append
        )

    assert result == {"n": 1}
    assert sleeps == [0.5]


def test_with_retries_gives_up_after_max_retries() -> None:
    """Persistent retryable failures should raise after the retry budget."""
    calls: list[str] = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(429, request=request)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError):
            with_retries(
                lambda: client.get("/x"), policy=_NO_JITTER, sleep_fn=sleeps.append
            )

    assert len(calls) == 3
    assert sleeps == [0.5, 1.0]


def test_with_retries_does_not_retry_client_errors() -> None:
    """A 404 should propagate on the first attempt."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(404, request=request)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError):
            with_retries(
                lambda: client.get("/x"), policy=_NO_JITTER, sleep_fn=lambda _: None
            )

    assert len(calls) == 1


def test_retry_policy_delay_is_capped() -> None:
    """Backoff should grow geometrically and stop at the cap."""
    policy = RetryPolicy(
        initial_backoff_seconds=1.0,
        backoff_multiplier=10.0,
        max_backoff_seconds=8.0,
        jitter_ratio=0.0,
    )

    assert [policy.delay_for(attempt) for attempt in range(3)] == [1.0, 8.0, 8.0]
