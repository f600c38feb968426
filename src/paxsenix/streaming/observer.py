"""
observer.py

PURPOSE: Diagnostics sink for recoverable stream problems.
DEPENDENCIES: None (pure Python + logging)

ARCHITECTURE NOTES:
Malformed frames and exceptions raised by caller callbacks do not end a
stream. They are reported to a StreamObserver instead. The default observer
logs a warning and keeps counts; tests and applications can pass their own.
"""

import logging
from typing import Protocol, runtime_checkable

from paxsenix.streaming.decoder import Frame

logger = logging.getLogger(__name__)


@runtime_checkable
class StreamObserver(Protocol):
    """Receives problems that were swallowed to keep a stream alive."""

    def on_malformed(self, frame: Frame) -> None: ...

    def on_callback_error(self, error: Exception) -> None: ...


class LoggingStreamObserver:
    """Logs swallowed problems and counts them."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger
        self.malformed_count = 0
        self.callback_error_count = 0

    def on_malformed(self, frame: Frame) -> None:
        self.malformed_count += 1
        self._log.warning(f"Skipping malformed stream frame ({frame.error}): {frame.raw!r}")

    def on_callback_error(self, error: Exception) -> None:
        self.callback_error_count += 1
        self._log.warning(f"Error in on_data callback: {error!r}")
