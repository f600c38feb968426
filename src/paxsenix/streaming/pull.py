"""
pull.py

PURPOSE: Async-iterator consumption of an event stream.
DEPENDENCIES: None (asyncio)

ARCHITECTURE NOTES:
iter_events() is an async generator over the DATA values of a stream. It
suspends between chunks instead of calling back, and is single-use like the
stream it wraps. Transport failures surface as StreamError from the
`async for`. Closing the generator early (aclose(), or leaving an
`async with contextlib.aclosing(...)` block) closes the stream.
"""

import contextlib
from collections.abc import AsyncIterator
from typing import Any

from paxsenix.http.models import TextStream
from paxsenix.streaming.decoder import FrameDecoder, FrameKind
from paxsenix.streaming.observer import LoggingStreamObserver, StreamObserver


async def iter_events(
    stream: TextStream,
    observer: StreamObserver | None = None,
) -> AsyncIterator[Any]:
    """
    Yield decoded DATA values from `stream` in arrival order.

    Iteration stops at the [DONE] sentinel or at the end of the stream.
    Malformed frames are reported to `observer` and skipped.
    """
    observer = observer or LoggingStreamObserver()
    decoder = FrameDecoder()

    try:
        async with contextlib.aclosing(stream.chunks()) as chunks:
            async for chunk in chunks:
                for frame in decoder.feed(chunk):
                    if frame.kind is FrameKind.DONE:
                        return
                    if frame.kind is FrameKind.MALFORMED:
                        observer.on_malformed(frame)
                        continue
                    yield frame.value

        for frame in decoder.flush():
            if frame.kind is FrameKind.DONE:
                return
            if frame.kind is FrameKind.MALFORMED:
                observer.on_malformed(frame)
                continue
            yield frame.value
    finally:
        await stream.aclose()
