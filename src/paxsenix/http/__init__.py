"""HTTP request/response layer."""

from paxsenix.http.client import HttpClient, HttpClientConfig, create_http_client
from paxsenix.http.models import (
    BufferedResponse,
    Request,
    StreamHandle,
    StreamingResponse,
    TextStream,
)
from paxsenix.http.retry import (
    ExponentialBackoff,
    LinearBackoff,
    RetryPolicy,
    execute_with_retry,
)
from paxsenix.http.transport import Transport

__all__ = [
    "BufferedResponse",
    "ExponentialBackoff",
    "HttpClient",
    "HttpClientConfig",
    "LinearBackoff",
    "Request",
    "RetryPolicy",
    "StreamHandle",
    "StreamingResponse",
    "TextStream",
    "Transport",
    "create_http_client",
    "execute_with_retry",
]
