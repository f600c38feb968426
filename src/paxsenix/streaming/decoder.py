"""
decoder.py

PURPOSE: Incremental decoder for `data: <json>` event streams.
DEPENDENCIES: None (pure Python + json)

ARCHITECTURE NOTES:
FrameDecoder is a plain state object: text goes in through feed(), frames
come out. It knows nothing about callbacks or iterators, so the push and
pull adapters share one implementation of the line handling.

Wire format, one event per line:

    data: {"choices": [...]}
    <blank separator>
    data: [DONE]

Lines are split on "\\n" and trimmed, so "\\r\\n" endings are accepted.
Anything that does not start with the literal "data: " (comments,
keep-alives, "event:" lines, blank separators) is ignored.
"""

import json
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from paxsenix.errors import DecodeError

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class FrameKind(Enum):
    """Classification of one line of stream input."""

    DATA = auto()
    DONE = auto()
    IGNORABLE = auto()
    MALFORMED = auto()


@dataclass(frozen=True)
class Frame:
    """One classified line."""

    kind: FrameKind
    value: Any = None  # parsed JSON for DATA
    raw: str = ""  # payload text for MALFORMED
    error: str | None = None  # JSON error message for MALFORMED

    @classmethod
    def data(cls, value: Any) -> "Frame":
        return cls(FrameKind.DATA, value=value)

    @classmethod
    def done(cls) -> "Frame":
        return cls(FrameKind.DONE)

    @classmethod
    def ignorable(cls, raw: str = "") -> "Frame":
        return cls(FrameKind.IGNORABLE, raw=raw)

    @classmethod
    def malformed(cls, raw: str, error: str) -> "Frame":
        return cls(FrameKind.MALFORMED, raw=raw, error=error)


def classify_line(line: str) -> Frame:
    """Classify a single complete line of input."""
    trimmed = line.strip()
    if not trimmed.startswith(DATA_PREFIX):
        return Frame.ignorable(trimmed)

    payload = trimmed[len(DATA_PREFIX) :].strip()
    if payload == DONE_SENTINEL:
        return Frame.done()

    # json.loads also raises plain ValueError (int digit limit) and RecursionError (deep nesting)
    try:
        return Frame.data(json.loads(payload))
    except (ValueError, RecursionError) as e:
        return Frame.malformed(payload, str(e))


class FrameDecoder:
    """
    Turns arbitrarily-chunked stream text into DATA/DONE/MALFORMED frames.

    Ignorable lines are dropped, not returned. After a DONE frame the
    decoder is spent: further input produces nothing. After flush() it is
    closed and feeding it raises DecodeError.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._done = False
        self._closed = False

    @property
    def done(self) -> bool:
        """True once the [DONE] sentinel has been decoded."""
        return self._done

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> str:
        """Text of the incomplete trailing line, if any."""
        return self._buffer

    def feed(self, chunk: str) -> list[Frame]:
        """
        Consume a chunk of text and return the frames it completes.

        A partial line at the end of the chunk is kept until a later chunk
        (or flush) completes it.

        Raises:
            DecodeError: If the decoder has already been flushed.
        """
        if self._closed:
            raise DecodeError("Cannot feed a decoder that has been flushed")
        if self._done:
            return []

        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return self._decode_lines(lines)

    def flush(self) -> list[Frame]:
        """Decode any unterminated trailing line, then close the decoder."""
        if self._closed:
            return []

        frames: list[Frame] = []
        if not self._done and self._buffer.strip():
            frames = self._decode_lines([self._buffer])

        self._buffer = ""
        self._closed = True
        return frames

    def _decode_lines(self, lines: list[str]) -> list[Frame]:
        frames: list[Frame] = []
        for line in lines:
            frame = classify_line(line)
            if frame.kind is FrameKind.IGNORABLE:
                continue
            frames.append(frame)
            if frame.kind is FrameKind.DONE:
                self._done = True
                self._buffer = ""
                break
        return frames
