"""
models.py

PURPOSE: Request and response value types for the HTTP layer.
DEPENDENCIES: httpx

ARCHITECTURE NOTES:
A Request is immutable once built, so the retry loop can hand the same
object to every attempt. Responses come in two shapes:
- BufferedResponse: body fully read and (if possible) parsed as JSON
- StreamingResponse: body left on the wire behind a StreamHandle

A StreamHandle may be iterated once. The adapter that iterates it owns it
and is responsible for closing it.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from paxsenix.errors import StreamError


@dataclass(frozen=True)
class Request:
    """A single request to the service."""

    method: str
    path: str
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None  # seconds; None uses the client default
    stream: bool = False


@dataclass
class BufferedResponse:
    """A response whose body has been read completely."""

    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)
    is_json: bool = True  # False when data holds raw text that failed to parse


class TextStream(Protocol):
    """What the stream adapters need from a live response body."""

    def chunks(self) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...


class StreamHandle:
    """
    Exclusive handle on a live streaming response body.

    Wraps an httpx response opened with ``stream=True``. Decoded text is
    yielded chunk by chunk; transport failures while reading are raised as
    StreamError.
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._consumed = False

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    async def chunks(self) -> AsyncIterator[str]:
        """Yield decoded text chunks as they arrive."""
        if self._consumed:
            raise StreamError("Stream handle has already been consumed")
        self._consumed = True

        try:
            async for text in self._response.aiter_text():
                if text:
                    yield text
        except httpx.HTTPError as e:
            raise StreamError(f"Stream interrupted: {e}") from e

    async def aclose(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        await self._response.aclose()


@dataclass
class StreamingResponse:
    """A 2xx response whose body is still streaming."""

    status: int
    stream: StreamHandle
    headers: dict[str, str] = field(default_factory=dict)
