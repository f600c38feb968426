"""
TEST DOC: PaxSenixAI Client

WHAT: End-to-end tests for the public client surface
WHY: Ensure requests, streaming and errors work together with mocked responses
HOW: Use respx to mock HTTP calls to the PaxSenix API

CASES:
- Chat completion with model default
- Pull streaming (async iterator)
- Push streaming (callbacks)
- List models, images, embeddings
- Completion with config defaults and with exponential retry

EDGE CASES:
- HTTP errors before the stream starts go to on_error / raise
- Malformed frames mid-stream
- Invalid messages rejected before any request
"""

import contextlib
import json

import pytest
import respx
from httpx import Response

from paxsenix import HttpStatusError, PaxSenixAI
from paxsenix.config import ClientSettings
from paxsenix.http import retry

BASE_URL = "https://api.test.paxsenix"
MESSAGES = [{"role": "user", "content": "hi"}]


@pytest.fixture
def mock_api():
    """Set up respx mock for the PaxSenix API."""
    with respx.mock(base_url=BASE_URL) as respx_mock:
        yield respx_mock


@pytest.fixture
def client(observer):
    """A client whose stream diagnostics go to the recording observer."""
    return PaxSenixAI(
        "test-api-key",
        base_url=BASE_URL,
        retry_delay=0.0,
        settings=ClientSettings(),
        observer=observer,
    )


def event_stream(body: str) -> Response:
    return Response(200, text=body, headers={"Content-Type": "text/event-stream"})


class TestChatCompletion:
    """Tests for buffered chat completions."""

    @pytest.mark.asyncio
    async def test_create_chat_completion(self, mock_api, client, completion_response):
        """Returns the parsed body and fills in the default model."""
        route = mock_api.post("/v1/chat/completions").mock(
            return_value=Response(200, json=completion_response)
        )

        result = await client.create_chat_completion({"messages": MESSAGES})

        assert result["choices"][0]["message"]["content"] == "Paris."
        request = route.calls.last.request
        assert json.loads(request.content) == {"messages": MESSAGES, "model": "gpt-3.5-turbo"}
        assert request.headers["Authorization"] == "Bearer test-api-key"
        assert request.headers["User-Agent"].startswith("PaxSenixAI-Python/")

    @pytest.mark.asyncio
    async def test_explicit_model_kept(self, mock_api, client, completion_response):
        """A model in params is not overridden."""
        route = mock_api.post("/v1/chat/completions").mock(
            return_value=Response(200, json=completion_response)
        )

        await client.create_chat_completion({"messages": MESSAGES, "model": "gpt-4o"})

        assert json.loads(route.calls.last.request.content)["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_http_error(self, mock_api, client):
        """HTTP errors carry status, data and headers."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=Response(
                429, json={"error": {"message": "slow down"}}, headers={"Retry-After": "3"}
            )
        )

        with pytest.raises(HttpStatusError) as exc_info:
            await client.create_chat_completion({"messages": MESSAGES})

        assert exc_info.value.status == 429
        assert exc_info.value.data["error"]["message"] == "slow down"
        assert exc_info.value.headers["retry-after"] == "3"
        assert str(exc_info.value) == "PaxSenix API error: 429 - slow down"

    @pytest.mark.asyncio
    async def test_with_config_defaults(self, mock_api, client, completion_response):
        """Sampling defaults are merged under the caller's params."""
        route = mock_api.post("/v1/chat/completions").mock(
            return_value=Response(200, json=completion_response)
        )

        await client.chat.create_completion_with_config({"messages": MESSAGES, "top_p": 0.5})

        body = json.loads(route.calls.last.request.content)
        assert body["model"] == "gpt-3.5-turbo"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] is None
        assert body["top_p"] == 0.5
        assert body["frequency_penalty"] == 0
        assert body["presence_penalty"] == 0


class TestCompletionWithRetry:
    """Tests for Chat.create_completion_with_retry."""

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, mock_api, client, completion_response, monkeypatch):
        """5xx responses are retried with exponential delays."""
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        def no_wait_retry(operation, policy):
            return retry.execute_with_retry(operation, policy, sleep=fake_sleep)

        monkeypatch.setattr("paxsenix.resources.chat.execute_with_retry", no_wait_retry)
        route = mock_api.post("/v1/chat/completions").mock(
            side_effect=[Response(500), Response(502), Response(200, json=completion_response)]
        )

        result = await client.chat.create_completion_with_retry({"messages": MESSAGES})

        assert result == completion_response
        assert route.call_count == 3
        assert delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, mock_api, client):
        """4xx responses fail immediately."""
        route = mock_api.post("/v1/chat/completions").mock(return_value=Response(400, json={}))

        with pytest.raises(HttpStatusError):
            await client.chat.create_completion_with_retry({"messages": MESSAGES})

        assert route.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "messages",
        [
            None,
            [],
            [{"role": "robot", "content": "hi"}],
            [{"role": "user", "content": 42}],
            ["hi"],
        ],
    )
    async def test_invalid_messages(self, mock_api, client, messages):
        """Invalid message lists are rejected before any request."""
        with pytest.raises(ValueError, match="Invalid messages format"):
            await client.chat.create_completion_with_retry({"messages": messages})

        assert mock_api.calls.call_count == 0


class TestPullStreaming:
    """Tests for stream_completion_async."""

    @pytest.mark.asyncio
    async def test_three_events_in_order(self, mock_api, client, sse_body, chunk_events):
        """Three data frames then DONE yield exactly three values, in order."""
        route = mock_api.post("/v1/chat/completions").mock(
            return_value=event_stream(sse_body(*chunk_events))
        )

        values = [
            value async for value in client.stream_completion_async({"messages": MESSAGES})
        ]

        assert values == chunk_events
        body = json.loads(route.calls.last.request.content)
        assert body == {"messages": MESSAGES, "model": "gpt-3.5-turbo", "stream": True}

    @pytest.mark.asyncio
    async def test_malformed_frame_skipped(self, mock_api, client, observer, sse_body):
        """A malformed frame is skipped and observed."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=event_stream(sse_body("{not json", {"a": 1}))
        )

        values = [
            value async for value in client.stream_completion_async({"messages": MESSAGES})
        ]

        assert values == [{"a": 1}]
        assert len(observer.malformed) == 1

    @pytest.mark.asyncio
    async def test_early_exit(self, mock_api, client, sse_body, chunk_events):
        """Stopping after the first value is clean."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=event_stream(sse_body(*chunk_events))
        )

        stream = client.stream_completion_async({"messages": MESSAGES})
        async with contextlib.aclosing(stream) as events:
            async for value in events:
                assert value == chunk_events[0]
                break

    @pytest.mark.asyncio
    async def test_http_error_raised(self, mock_api, client):
        """An error status raises from the first iteration."""
        mock_api.post("/v1/chat/completions").mock(return_value=Response(404, json={}))

        with pytest.raises(HttpStatusError):
            async for _ in client.stream_completion_async({"messages": MESSAGES}):
                pass


class TestPushStreaming:
    """Tests for stream_completion."""

    @pytest.mark.asyncio
    async def test_callbacks(self, mock_api, client, sse_body, chunk_events):
        """on_data gets every event; on_end fires once."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=event_stream(sse_body(*chunk_events))
        )
        events, errors, ends = [], [], []

        await client.stream_completion(
            {"messages": MESSAGES},
            events.append,
            on_error=errors.append,
            on_end=lambda: ends.append(True),
        )

        assert events == chunk_events
        assert errors == []
        assert ends == [True]

    @pytest.mark.asyncio
    async def test_on_data_only(self, mock_api, client, sse_body, chunk_events):
        """on_error and on_end are optional."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=event_stream(sse_body(*chunk_events))
        )
        events = []

        await client.stream_completion({"messages": MESSAGES}, events.append)

        assert len(events) == 3

    @pytest.mark.asyncio
    async def test_request_error_to_on_error(self, mock_api, client):
        """A failing request goes to on_error; on_end never fires."""
        mock_api.post("/v1/chat/completions").mock(
            return_value=Response(401, json={"error": {"message": "bad key"}})
        )
        errors, ends = [], []

        await client.stream_completion(
            {"messages": MESSAGES},
            lambda value: None,
            on_error=errors.append,
            on_end=lambda: ends.append(True),
        )

        assert len(errors) == 1
        assert isinstance(errors[0], HttpStatusError)
        assert errors[0].status == 401
        assert ends == []

    @pytest.mark.asyncio
    async def test_request_error_raised(self, mock_api, client):
        """Without on_error, the request failure is raised."""
        mock_api.post("/v1/chat/completions").mock(return_value=Response(500, json={}))

        with pytest.raises(HttpStatusError):
            await client.stream_completion({"messages": MESSAGES}, lambda value: None)


class TestOtherEndpoints:
    """Tests for models, images and embeddings."""

    @pytest.mark.asyncio
    async def test_list_models(self, mock_api, client):
        """Returns the models list."""
        mock_api.get("/v1/models").mock(
            return_value=Response(200, json={"data": [{"id": "gpt-4o"}, {"id": "gpt-3.5-turbo"}]})
        )

        models = await client.list_models()

        assert [m["id"] for m in models["data"]] == ["gpt-4o", "gpt-3.5-turbo"]

    @pytest.mark.asyncio
    async def test_create_image(self, mock_api, client):
        """Posts the prompt to the images endpoint."""
        route = mock_api.post("/v1/images/generations").mock(
            return_value=Response(200, json={"data": [{"url": "https://img/1.png"}]})
        )

        result = await client.create_image({"prompt": "a city", "n": 1})

        assert result["data"][0]["url"] == "https://img/1.png"
        assert json.loads(route.calls.last.request.content) == {"prompt": "a city", "n": 1}

    @pytest.mark.asyncio
    async def test_create_embedding_default_model(self, mock_api, client):
        """Embeddings default to text-embedding-ada-002."""
        route = mock_api.post("/v1/embeddings").mock(
            return_value=Response(200, json={"data": [{"embedding": [0.1, 0.2]}]})
        )

        await client.create_embedding({"input": ["hello"]})

        body = json.loads(route.calls.last.request.content)
        assert body["model"] == "text-embedding-ada-002"

    @pytest.mark.asyncio
    async def test_context_manager(self, mock_api):
        """The client closes cleanly as an async context manager."""
        mock_api.get("/v1/models").mock(return_value=Response(200, json={"data": []}))

        async with PaxSenixAI(base_url=BASE_URL, settings=ClientSettings()) as ai:
            assert await ai.list_models() == {"data": []}
