"""
errors.py

PURPOSE: Error taxonomy shared by the transport, retry and streaming layers.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
Every failure the library surfaces is a PaxSenixError subclass:
- APIConnectionError: connection refused, DNS failure, broken exchange
- APITimeoutError: no response headers within the timeout, or a stream
  outliving its watchdog
- HttpStatusError: non-2xx response (4xx client error, 5xx server error)
- DecodeError: decoder misuse (feeding a closed decoder)
- StreamError: transport failure after streaming has started

Malformed stream frames are NOT errors here: the decoder reports them to a
StreamObserver and keeps going.
"""

import json
from typing import Any


class PaxSenixError(Exception):
    """Base class for all errors raised by the client."""

    pass


class APIConnectionError(PaxSenixError, ConnectionError):
    """The service could not be reached."""

    def __init__(self, message: str):
        super().__init__(f"PaxSenix API connection error: {message}")


class APITimeoutError(PaxSenixError, TimeoutError):
    """A request or stream exceeded its time budget."""

    pass


class HttpStatusError(PaxSenixError):
    """
    The service answered with a status outside 200-299.

    Attributes:
        status: HTTP status code
        data: Parsed JSON body, or the raw text when it was not JSON
        headers: Response headers
    """

    def __init__(self, status: int, data: Any = None, headers: dict[str, str] | None = None):
        self.status = status
        self.data = data
        self.headers = dict(headers or {})
        super().__init__(f"PaxSenix API error: {status} - {_describe_body(data)}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


class DecodeError(PaxSenixError):
    """The frame decoder was used outside its lifecycle."""

    pass


class StreamError(PaxSenixError):
    """The byte stream failed after the response started."""

    pass


def _describe_body(data: Any) -> str:
    """Pick the most useful human-readable part of an error body."""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    if isinstance(data, str):
        return data
    return json.dumps(data, default=str)


def is_retryable(error: BaseException) -> bool:
    """
    Whether a failed attempt may be retried by the HTTP client.

    Connection failures, timeouts and 5xx responses are transient.
    Everything else, 4xx responses included, is final.
    """
    if isinstance(error, (APIConnectionError, APITimeoutError)):
        return True
    if isinstance(error, HttpStatusError):
        return error.is_server_error
    return False
