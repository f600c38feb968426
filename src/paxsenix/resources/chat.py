"""
chat.py

PURPOSE: Chat-completion endpoint: buffered, push-streamed and pull-streamed.
DEPENDENCIES: httpx (via HttpClient)

ARCHITECTURE NOTES:
Chat is a thin caller of the core. It fills in the default model, forces
`stream: true` for streaming calls, and hands the resulting StreamHandle to
one of the two adapters:
- stream_completion: PushStreamAdapter (callbacks)
- stream_completion_async: iter_events (async iterator)

create_completion_with_retry layers ExponentialBackoff on top of the
HttpClient's own LinearBackoff. The two policies are independent.
"""

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from paxsenix.config import DEFAULT_MODEL
from paxsenix.errors import PaxSenixError
from paxsenix.http.client import HttpClient
from paxsenix.http.retry import ExponentialBackoff, execute_with_retry
from paxsenix.observability import get_tracer
from paxsenix.streaming.observer import StreamObserver
from paxsenix.streaming.pull import iter_events
from paxsenix.streaming.push import PushStreamAdapter, StreamCallbacks

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

COMPLETIONS_PATH = "/v1/chat/completions"

VALID_ROLES = frozenset({"system", "user", "assistant", "function"})

COMPLETION_DEFAULTS: dict[str, Any] = {
    "model": DEFAULT_MODEL,
    "temperature": 0.7,
    "max_tokens": None,
    "top_p": 1,
    "frequency_penalty": 0,
    "presence_penalty": 0,
}


class Chat:
    """Chat-completion resource."""

    def __init__(
        self,
        client: HttpClient,
        default_model: str = DEFAULT_MODEL,
        observer: StreamObserver | None = None,
    ):
        """
        Initialize the resource.

        Args:
            client: HTTP client used for every request.
            default_model: Model filled in when params carry none.
            observer: Sink for malformed frames; a logging observer per
                stream when None.
        """
        self._client = client
        self._default_model = default_model
        self._observer = observer

    def _with_model(self, params: dict[str, Any], **extra: Any) -> dict[str, Any]:
        return {**params, "model": params.get("model") or self._default_model, **extra}

    async def create_completion(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Create a chat completion and return the parsed response body.

        Args:
            params: Request body: messages, model, temperature, max_tokens, ...
            timeout: Per-request timeout in seconds.
            headers: Extra request headers.

        Returns:
            The service's JSON response.
        """
        with tracer.start_as_current_span("chat.completion") as span:
            body = self._with_model(params)
            span.set_attribute("chat.model", body["model"])
            span.set_attribute("chat.message_count", len(body.get("messages") or []))

            response = await self._client.post(
                COMPLETIONS_PATH, body, timeout=timeout, headers=headers
            )
            return response.data

    async def stream_completion(
        self,
        params: dict[str, Any],
        on_data: Callable[[Any], None],
        *,
        on_error: Callable[[Exception], None] | None = None,
        on_end: Callable[[], None] | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Stream a chat completion, calling on_data for every chunk.

        Exactly one of on_end/on_error is called. Without on_error, the
        failure is raised instead. `timeout` (seconds) is both the request
        timeout and the total lifetime allowed for the stream.
        """
        body = self._with_model(params, stream=True)
        stream_timeout = timeout if timeout is not None else self._client.timeout

        try:
            response = await self._client.post(
                COMPLETIONS_PATH, body, timeout=timeout, headers=headers, stream=True
            )
        except PaxSenixError as e:
            if on_error is None:
                raise
            on_error(e)
            return

        adapter = PushStreamAdapter(
            StreamCallbacks(on_data=on_data, on_error=on_error, on_end=on_end),
            timeout=stream_timeout,
            observer=self._observer,
        )
        await adapter.run(response.stream)

    async def stream_completion_async(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[Any]:
        """
        Stream a chat completion as an async iterator of chunks.

        The request is sent on first iteration. Stop early with aclose().
        """
        body = self._with_model(params, stream=True)
        response = await self._client.post(
            COMPLETIONS_PATH, body, timeout=timeout, headers=headers, stream=True
        )

        events = iter_events(response.stream, observer=self._observer)
        try:
            async for event in events:
                yield event
        finally:
            await events.aclose()

    async def create_completion_with_config(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Create a completion with the standard sampling defaults filled in."""
        merged = {**COMPLETION_DEFAULTS, "model": self._default_model, **params}
        return await self.create_completion(merged, timeout=timeout, headers=headers)

    @staticmethod
    def validate_messages(messages: Any) -> bool:
        """Check that messages is a non-empty list of {role, content} dicts."""
        if not isinstance(messages, list) or not messages:
            return False

        return all(
            isinstance(msg, dict)
            and isinstance(msg.get("role"), str)
            and isinstance(msg.get("content"), str)
            and msg["role"] in VALID_ROLES
            for msg in messages
        )

    async def create_completion_with_retry(
        self,
        params: dict[str, Any],
        max_retries: int = 3,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Create a completion, retrying with exponential backoff (1s, 2s, 4s, ...).

        4xx responses are not retried.

        Raises:
            ValueError: If params["messages"] is not a valid message list.
        """
        if not self.validate_messages(params.get("messages")):
            raise ValueError("Invalid messages format")

        return await execute_with_retry(
            lambda: self.create_completion(params, timeout=timeout, headers=headers),
            ExponentialBackoff(max_retries=max_retries),
        )
