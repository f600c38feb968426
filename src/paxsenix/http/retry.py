"""
retry.py

PURPOSE: Retry policies and the loop that applies them.
DEPENDENCIES: None (asyncio)

ARCHITECTURE NOTES:
Two policies coexist and are chosen explicitly by the caller:
- LinearBackoff: used by HttpClient for every request. Retries connection
  failures, timeouts and 5xx responses; waits base_delay * n before
  attempt n.
- ExponentialBackoff: used by Chat.create_completion_with_retry. Retries
  anything but a 4xx response; waits 2 ** (n - 1) * base_delay before
  attempt n.

Attempts are numbered 0..max_retries, so max_retries=2 means up to three
attempts. Attempts never overlap. The last failure is re-raised as is.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from paxsenix.errors import HttpStatusError, PaxSenixError, is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy(ABC):
    """How many times to retry, which failures qualify, and how long to wait."""

    max_retries: int = 0
    base_delay: float = 1.0  # seconds

    @abstractmethod
    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before attempt number `attempt` (1-based retry index)."""
        ...

    @abstractmethod
    def should_retry(self, error: BaseException) -> bool:
        """Whether `error` is worth another attempt."""
        ...


@dataclass(frozen=True)
class LinearBackoff(RetryPolicy):
    """base_delay * n before attempt n; transient failures only."""

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt

    def should_retry(self, error: BaseException) -> bool:
        return is_retryable(error)


@dataclass(frozen=True)
class ExponentialBackoff(RetryPolicy):
    """2 ** (n - 1) * base_delay before attempt n; everything but 4xx."""

    max_retries: int = 3

    def delay_for(self, attempt: int) -> float:
        return (2 ** (attempt - 1)) * self.base_delay

    def should_retry(self, error: BaseException) -> bool:
        if isinstance(error, HttpStatusError) and error.is_client_error:
            return False
        return isinstance(error, PaxSenixError)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` until it succeeds or the policy gives up.

    Args:
        operation: Zero-argument factory producing a fresh awaitable per attempt.
        policy: Retry policy to apply.
        sleep: Awaitable delay function (injected by tests).

    Returns:
        The first successful result.

    Raises:
        The last failure, unchanged.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_retries or not policy.should_retry(e):
                if attempt > 0:
                    logger.error(f"Attempt {attempt + 1} failed, giving up: {e}")
                raise

            attempt += 1
            delay = policy.delay_for(attempt)
            logger.debug(f"Attempt {attempt} failed ({e}), retrying in {delay:.2f}s")
            await sleep(delay)
