"""
PaxSenix AI - Async Python client for the PaxSenix chat-completion service.

This package provides:
- Buffered chat completions, model listing, images and embeddings
- Streamed completions through callbacks or an async iterator
- Bounded retry with linear or exponential backoff
"""

__version__ = "0.1.2"

from paxsenix.client import PaxSenixAI, create_client  # noqa: E402
from paxsenix.errors import (  # noqa: E402
    APIConnectionError,
    APITimeoutError,
    DecodeError,
    HttpStatusError,
    PaxSenixError,
    StreamError,
)

__all__ = [
    "APIConnectionError",
    "APITimeoutError",
    "DecodeError",
    "HttpStatusError",
    "PaxSenixAI",
    "PaxSenixError",
    "StreamError",
    "__version__",
    "create_client",
]
