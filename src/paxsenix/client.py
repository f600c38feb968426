"""
client.py

PURPOSE: Top-level PaxSenix API client.
DEPENDENCIES: httpx, pydantic-settings (for defaults)

ARCHITECTURE NOTES:
PaxSenixAI wires an HttpClient (auth headers, timeout, linear retry) to
the resources and exposes the common calls directly. Defaults come from
ClientSettings (environment), overridden by constructor arguments.

Use it as an async context manager, or call aclose() when done:

    async with PaxSenixAI("sk-...") as ai:
        async for chunk in ai.stream_completion_async({"messages": [...]}):
            ...
"""

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from paxsenix import __version__
from paxsenix.config import ClientSettings
from paxsenix.http.client import HttpClient, HttpClientConfig
from paxsenix.resources.chat import Chat
from paxsenix.streaming.observer import StreamObserver

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"


class PaxSenixAI:
    """
    Async client for the PaxSenix chat-completion service.

    Attributes:
        chat: The chat-completion resource.
        http: The underlying HttpClient.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        retry_delay: float | None = None,
        version: str = __version__,
        settings: ClientSettings | None = None,
        observer: StreamObserver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key. If None, uses PAXSENIX_API_KEY.
            base_url: Service origin override.
            timeout: Request timeout / stream watchdog in seconds.
            retries: Retries after the first attempt for transient failures.
            retry_delay: Linear backoff base in seconds.
            version: Version reported in the User-Agent header.
            settings: Base settings; read from the environment when None.
            observer: Sink for malformed stream frames.
            transport: Optional httpx transport (tests, proxies).
        """
        settings = settings or ClientSettings()
        self.api_key = api_key if api_key is not None else settings.api_key
        self.base_url = base_url or settings.base_url
        self.timeout = timeout if timeout is not None else settings.timeout
        self.retries = retries if retries is not None else settings.retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay

        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"PaxSenixAI-Python/{version}",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        self.http = HttpClient(
            HttpClientConfig(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                retries=self.retries,
                retry_delay=self.retry_delay,
                transport=transport,
            )
        )
        self.chat = Chat(self.http, default_model=settings.default_model, observer=observer)

    async def __aenter__(self) -> "PaxSenixAI":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release network resources."""
        await self.http.aclose()

    async def create_chat_completion(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Create a chat completion. See Chat.create_completion."""
        return await self.chat.create_completion(params, timeout=timeout, headers=headers)

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
        """Stream a chat completion through callbacks. See Chat.stream_completion."""
        await self.chat.stream_completion(
            params,
            on_data,
            on_error=on_error,
            on_end=on_end,
            timeout=timeout,
            headers=headers,
        )

    def stream_completion_async(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[Any]:
        """Stream a chat completion as an async iterator. See Chat.stream_completion_async."""
        return self.chat.stream_completion_async(params, timeout=timeout, headers=headers)

    async def create_image(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Generate images from a prompt (params: prompt, n, size)."""
        response = await self.http.post(
            "/v1/images/generations", params, timeout=timeout, headers=headers
        )
        return response.data

    async def create_embedding(
        self,
        params: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Embed one or more input strings."""
        body = {**params, "model": params.get("model") or DEFAULT_EMBEDDING_MODEL}
        response = await self.http.post("/v1/embeddings", body, timeout=timeout, headers=headers)
        return response.data

    async def list_models(
        self,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """List the models the service offers."""
        response = await self.http.get("/v1/models", timeout=timeout, headers=headers)
        return response.data


def create_client(api_key: str | None = None, **kwargs: Any) -> PaxSenixAI:
    """Factory function to create a PaxSenixAI client."""
    return PaxSenixAI(api_key, **kwargs)
