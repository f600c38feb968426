"""Event-stream decoding and the push/pull adapters built on it."""

from paxsenix.streaming.decoder import (
    DATA_PREFIX,
    DONE_SENTINEL,
    Frame,
    FrameDecoder,
    FrameKind,
    classify_line,
)
from paxsenix.streaming.observer import LoggingStreamObserver, StreamObserver
from paxsenix.streaming.pull import iter_events
from paxsenix.streaming.push import (
    DEFAULT_STREAM_TIMEOUT,
    CompletionLatch,
    PushStreamAdapter,
    StreamCallbacks,
    run_push,
)

__all__ = [
    "CompletionLatch",
    "DATA_PREFIX",
    "DEFAULT_STREAM_TIMEOUT",
    "DONE_SENTINEL",
    "Frame",
    "FrameDecoder",
    "FrameKind",
    "LoggingStreamObserver",
    "PushStreamAdapter",
    "StreamCallbacks",
    "StreamObserver",
    "classify_line",
    "iter_events",
    "run_push",
]
