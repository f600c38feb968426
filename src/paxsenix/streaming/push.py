"""
push.py

PURPOSE: Callback-driven consumption of an event stream.
DEPENDENCIES: None (asyncio)

ARCHITECTURE NOTES:
PushStreamAdapter pumps a TextStream through a FrameDecoder and calls
on_data for every DATA frame, in order, synchronously. The run ends in
exactly one of two ways, guarded by a CompletionLatch:
- on_end: DONE sentinel or natural end of the stream
- on_error: transport failure, or the watchdog expiring

The watchdog is a single deadline measured from the start of run(). It
bounds the total lifetime of the stream, not the gap between chunks, so a
slow stream that keeps trickling data is still cut off at the deadline.

There is no cancel handle besides the watchdog. Whatever happens, the
stream is closed before run() returns.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from paxsenix.errors import APITimeoutError, PaxSenixError, StreamError
from paxsenix.http.models import TextStream
from paxsenix.observability import get_tracer
from paxsenix.streaming.decoder import Frame, FrameDecoder, FrameKind
from paxsenix.streaming.observer import LoggingStreamObserver, StreamObserver

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

DEFAULT_STREAM_TIMEOUT = 30.0


@dataclass(frozen=True)
class StreamCallbacks:
    """Caller hooks for a push-driven stream."""

    on_data: Callable[[Any], None]
    on_error: Callable[[Exception], None] | None = None
    on_end: Callable[[], None] | None = None


class CompletionLatch:
    """Lets exactly one terminal callback through, exactly once."""

    def __init__(self, callbacks: StreamCallbacks):
        self._callbacks = callbacks
        self.outcome: str | None = None  # "end" or "error"

    @property
    def fired(self) -> bool:
        return self.outcome is not None

    def end(self) -> bool:
        """Fire on_end unless a terminal callback already fired."""
        if self.fired:
            return False
        self.outcome = "end"
        if self._callbacks.on_end is not None:
            self._callbacks.on_end()
        return True

    def error(self, error: Exception) -> bool:
        """Fire on_error unless a terminal callback already fired."""
        if self.fired:
            return False
        self.outcome = "error"
        if self._callbacks.on_error is not None:
            self._callbacks.on_error(error)
        return True


class PushStreamAdapter:
    """Drives a stream to completion, delivering events through callbacks."""

    def __init__(
        self,
        callbacks: StreamCallbacks,
        timeout: float = DEFAULT_STREAM_TIMEOUT,
        observer: StreamObserver | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            callbacks: on_data plus optional on_error/on_end.
            timeout: Watchdog deadline in seconds, measured from run().
            observer: Sink for malformed frames and on_data failures.
        """
        self.callbacks = callbacks
        self.timeout = timeout
        self.observer = observer or LoggingStreamObserver()
        self.events_delivered = 0
        self.malformed_skipped = 0

    async def run(self, stream: TextStream) -> None:
        """
        Consume `stream` until DONE, end of stream, failure or timeout.

        Raises:
            PaxSenixError: The terminal failure, only when no on_error
                callback was supplied.
        """
        latch = CompletionLatch(self.callbacks)

        with tracer.start_as_current_span("stream.push") as span:
            span.set_attribute("stream.timeout", self.timeout)
            failure: PaxSenixError | None = None

            try:
                await asyncio.wait_for(self._pump(stream), timeout=self.timeout)
            except PaxSenixError as e:
                failure = e
            except asyncio.TimeoutError:
                failure = APITimeoutError("Stream timeout")
            except Exception as e:
                failure = StreamError(f"Stream processing error: {e}")
                failure.__cause__ = e

            span.set_attribute("stream.events", self.events_delivered)
            span.set_attribute("stream.malformed", self.malformed_skipped)

            if failure is None:
                span.set_attribute("stream.outcome", "end")
                latch.end()
                return

            span.set_attribute("stream.outcome", "error")
            span.record_exception(failure)
            logger.debug(f"Stream failed after {self.events_delivered} events: {failure}")

            if self.callbacks.on_error is None:
                raise failure
            latch.error(failure)

    async def _pump(self, stream: TextStream) -> None:
        decoder = FrameDecoder()
        try:
            async with contextlib.aclosing(stream.chunks()) as chunks:
                async for chunk in chunks:
                    if self._deliver(decoder.feed(chunk)):
                        return
            self._deliver(decoder.flush())
        finally:
            await stream.aclose()

    def _deliver(self, frames: list[Frame]) -> bool:
        """Hand frames to the caller. Returns True when DONE was seen."""
        for frame in frames:
            if frame.kind is FrameKind.DONE:
                return True
            if frame.kind is FrameKind.MALFORMED:
                self.malformed_skipped += 1
                self.observer.on_malformed(frame)
                continue

            try:
                self.callbacks.on_data(frame.value)
            except Exception as e:
                self.observer.on_callback_error(e)
            self.events_delivered += 1
        return False


async def run_push(
    stream: TextStream,
    on_data: Callable[[Any], None],
    *,
    on_error: Callable[[Exception], None] | None = None,
    on_end: Callable[[], None] | None = None,
    timeout: float = DEFAULT_STREAM_TIMEOUT,
    observer: StreamObserver | None = None,
) -> None:
    """Convenience wrapper: build a PushStreamAdapter and run it."""
    adapter = PushStreamAdapter(
        StreamCallbacks(on_data=on_data, on_error=on_error, on_end=on_end),
        timeout=timeout,
        observer=observer,
    )
    await adapter.run(stream)
