"""
client.py

PURPOSE: Verb-level HTTP client with linear retry.
DEPENDENCIES: httpx (via Transport)

ARCHITECTURE NOTES:
HttpClient = LinearBackoff around Transport. Each attempt builds nothing new:
the same immutable Request is replayed. Streaming requests go through the
same retry loop up to the point where a 2xx status is received; once a
StreamHandle exists the exchange is never retried.
"""

import itertools
from dataclasses import dataclass, field
from typing import Any, Literal, overload

import httpx

from paxsenix.http.models import BufferedResponse, Request, StreamingResponse
from paxsenix.http.retry import LinearBackoff, execute_with_retry
from paxsenix.http.transport import DEFAULT_TIMEOUT, Transport


@dataclass
class HttpClientConfig:
    """Connection and retry settings for an HttpClient."""

    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT  # seconds
    retries: int = 0
    retry_delay: float = 1.0  # seconds; linear base
    transport: httpx.AsyncBaseTransport | None = None


class HttpClient:
    """Sends JSON requests to the service, retrying transient failures."""

    def __init__(self, config: HttpClientConfig | None = None):
        self.config = config or HttpClientConfig()
        self.retry_policy = LinearBackoff(
            max_retries=self.config.retries,
            base_delay=self.config.retry_delay,
        )
        self._transport = Transport(
            base_url=self.config.base_url,
            headers=self.config.headers,
            timeout=self.config.timeout,
            transport=self.config.transport,
        )

    @property
    def timeout(self) -> float:
        return self._transport.timeout

    @overload
    async def request(
        self,
        method: str,
        path: str,
        data: Any = ...,
        *,
        headers: dict[str, str] | None = ...,
        timeout: float | None = ...,
        stream: Literal[False] = ...,
    ) -> BufferedResponse: ...

    @overload
    async def request(
        self,
        method: str,
        path: str,
        data: Any = ...,
        *,
        headers: dict[str, str] | None = ...,
        timeout: float | None = ...,
        stream: Literal[True],
    ) -> StreamingResponse: ...

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        stream: bool = False,
    ) -> BufferedResponse | StreamingResponse:
        """
        Send a request, retrying per the client's LinearBackoff policy.

        Args:
            method: HTTP method.
            path: Path relative to base_url.
            data: JSON-serializable body, or None for no body.
            headers: Per-request header overrides.
            timeout: Per-request timeout in seconds.
            stream: Return a StreamingResponse instead of buffering.
        """
        request = Request(
            method=method.upper(),
            path=path,
            body=data,
            headers=dict(headers or {}),
            timeout=timeout,
            stream=stream,
        )
        attempts = itertools.count()
        return await execute_with_retry(
            lambda: self._transport.execute(request, next(attempts)),
            self.retry_policy,
        )

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, None, **kwargs)

    async def post(self, path: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, data, **kwargs)

    async def put(self, path: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, data, **kwargs)

    async def patch(self, path: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, data, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, None, **kwargs)

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_http_client(config: HttpClientConfig | None = None) -> HttpClient:
    """Factory function to create an HttpClient."""
    return HttpClient(config)
