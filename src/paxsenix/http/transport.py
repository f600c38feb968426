"""
transport.py

PURPOSE: One request/response exchange with the service.
DEPENDENCIES: httpx

ARCHITECTURE NOTES:
Transport.execute() performs exactly one attempt; retrying is the caller's
business (see retry.py). Every request is sent with stream=True so the
status line can be inspected before the body is touched:
- buffered requests, and streaming requests with a non-2xx status, read the
  whole body, release the connection and parse it
- 2xx streaming requests hand the open response to a StreamHandle

httpx failures are translated into the library taxonomy here and nowhere
else. Connection pooling, TLS and HTTP version are httpx's concern.
"""

import json
import logging
from typing import Any

import httpx

from paxsenix.errors import APIConnectionError, APITimeoutError, HttpStatusError
from paxsenix.http.models import BufferedResponse, Request, StreamHandle, StreamingResponse
from paxsenix.observability import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

DEFAULT_TIMEOUT = 30.0


def parse_body(text: str) -> tuple[Any, bool]:
    """
    Parse a response body as JSON.

    Returns:
        (value, True) on success, (None, True) for an empty body and
        (text, False) when the body is not JSON.
    """
    if not text:
        return None, True
    try:
        return json.loads(text), True
    except json.JSONDecodeError:
        return text, False


class Transport:
    """Sends single requests over a shared httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Origin that request paths are resolved against.
            headers: Headers sent with every request.
            timeout: Default timeout in seconds.
            transport: Optional httpx transport (used by tests to mock I/O).
        """
        self._headers = dict(headers or {})
        self._timeout = timeout
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    @property
    def timeout(self) -> float:
        return self._timeout

    async def execute(
        self, request: Request, attempt: int = 0
    ) -> BufferedResponse | StreamingResponse:
        """
        Run one exchange.

        `attempt` is the zero-based retry index, recorded on the span.

        Raises:
            APIConnectionError: The service could not be reached.
            APITimeoutError: No response within the timeout.
            HttpStatusError: The status was outside 200-299.
        """
        timeout = request.timeout if request.timeout is not None else self._timeout
        http_request = self._client.build_request(
            request.method.upper(),
            request.path,
            json=request.body,
            headers={**self._headers, **request.headers},
            timeout=httpx.Timeout(timeout),
        )

        with tracer.start_as_current_span("http.request") as span:
            span.set_attribute("http.method", http_request.method)
            span.set_attribute("http.path", request.path)
            span.set_attribute("http.stream", request.stream)
            span.set_attribute("http.attempt", attempt)

            logger.debug(f"{http_request.method} {http_request.url}")

            try:
                response = await self._client.send(http_request, stream=True)
            except httpx.HTTPError as e:
                span.record_exception(e)
                raise _translate(e) from e

            span.set_attribute("http.status_code", response.status_code)
            headers = dict(response.headers)

            if request.stream and response.is_success:
                return StreamingResponse(
                    status=response.status_code,
                    stream=StreamHandle(response),
                    headers=headers,
                )

            try:
                await response.aread()
            except httpx.HTTPError as e:
                span.record_exception(e)
                raise _translate(e) from e
            finally:
                await response.aclose()

            data, is_json = parse_body(response.text)
            if not response.is_success:
                error = HttpStatusError(response.status_code, data, headers)
                span.record_exception(error)
                raise error

            if not is_json:
                logger.debug(f"Response from {request.path} is not JSON, returning raw text")

            return BufferedResponse(
                status=response.status_code,
                data=data,
                headers=headers,
                is_json=is_json,
            )

    async def aclose(self) -> None:
        await self._client.aclose()


def _translate(error: httpx.HTTPError) -> Exception:
    if isinstance(error, httpx.TimeoutException):
        return APITimeoutError(f"Request timeout: {error}")
    return APIConnectionError(str(error) or type(error).__name__)
