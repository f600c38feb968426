"""
conftest.py

Shared pytest fixtures for paxsenix tests.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from paxsenix.errors import StreamError
from paxsenix.streaming.decoder import Frame


class FakeStream:
    """
    In-memory TextStream.

    Yields the given chunks in order, optionally pausing between them, then
    optionally raises `error` as a mid-stream failure.
    """

    def __init__(
        self,
        chunks: list[str],
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self._chunks = chunks
        self._error = error
        self._delay = delay
        self.closed = False
        self.chunks_sent = 0

    async def chunks(self) -> AsyncIterator[str]:
        for chunk in self._chunks:
            if self._delay:
                await asyncio.sleep(self._delay)
            self.chunks_sent += 1
            yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.closed = True


class RecordingObserver:
    """StreamObserver that keeps everything it is told."""

    def __init__(self) -> None:
        self.malformed: list[Frame] = []
        self.callback_errors: list[Exception] = []

    def on_malformed(self, frame: Frame) -> None:
        self.malformed.append(frame)

    def on_callback_error(self, error: Exception) -> None:
        self.callback_errors.append(error)


def sse(*events: Any, done: bool = True) -> str:
    """Render events as `data:` lines, JSON-encoding anything that is not a str."""
    lines = []
    for event in events:
        payload = event if isinstance(event, str) else json.dumps(event)
        lines.append(f"data: {payload}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines)


@pytest.fixture
def make_stream() -> Callable[..., FakeStream]:
    """Factory for in-memory streams."""
    return FakeStream


@pytest.fixture
def observer() -> RecordingObserver:
    """An observer recording malformed frames and callback errors."""
    return RecordingObserver()


@pytest.fixture
def sse_body() -> Callable[..., str]:
    """Factory rendering events as an event-stream body."""
    return sse


@pytest.fixture
def stream_error() -> StreamError:
    """A mid-stream transport failure."""
    return StreamError("Stream interrupted: connection reset")


@pytest.fixture
def chunk_events() -> list[dict[str, Any]]:
    """Three streamed completion chunks spelling "Hello, world!"."""
    return [
        {"id": "c1", "choices": [{"index": 0, "delta": {"content": "Hello"}}]},
        {"id": "c1", "choices": [{"index": 0, "delta": {"content": ", "}}]},
        {"id": "c1", "choices": [{"index": 0, "delta": {"content": "world!"}}]},
    ]


@pytest.fixture
def completion_response() -> dict[str, Any]:
    """A buffered chat completion body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "Paris."},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 2, "total_tokens": 14},
    }


class RecordingSpan:
    """Span that keeps its attributes and exceptions."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.attributes: dict[str, Any] = {}
        self.exceptions: list[BaseException] = []

    def __enter__(self) -> "RecordingSpan":
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def record_exception(self, exception: BaseException) -> None:
        self.exceptions.append(exception)


class RecordingTracer:
    """Tracer handing out RecordingSpans, newest last."""

    def __init__(self) -> None:
        self.spans: list[RecordingSpan] = []

    def start_as_current_span(self, name: str, **kwargs: object) -> RecordingSpan:
        span = RecordingSpan(name)
        self.spans.append(span)
        return span


@pytest.fixture
def tracer() -> RecordingTracer:
    """A tracer recording spans; patch it over a module's `tracer`."""
    return RecordingTracer()
