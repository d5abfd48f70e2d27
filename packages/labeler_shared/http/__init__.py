"""Public shared HTTP API for labeler packages."""

from .client import HttpClient, RetryPolicy, with_retries
from .errors import (
    HttpClientError,
    HttpError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "HttpStatusError",
    "RetryPolicy",
    "with_retries",
]
