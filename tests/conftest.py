"""Pytest configuration and shared fixtures."""
import json
import os
from collections.abc import Callable

import httpx
import pytest

from chatagent.chat import ChatService, SettingsService
from chatagent.llm import OpenRouterProvider, ProviderManager, create_default_manager
from chatagent.store import InMemoryStore

MODELS_PAYLOAD = {
    "data": [
        {
            "id": "openai/gpt-4o-mini",
            "name": "GPT-4o mini",
            "context_length": 128000,
            "pricing": {"prompt": "0.00000015"},
        },
        {"id": "meta/llama-3-8b"},
    ]
}


def sse_record(content: str) -> bytes:
    """Encode one chat-completion delta as a ``data:`` line."""
    payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n".encode()


DONE = b"data: [DONE]\n"


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered as separate network chunks."""

    def __init__(self, chunks: list[bytes]):
        self._chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class FakeBackend:
    """Scripted OpenAI-compatible backend behind an httpx.MockTransport."""

    def __init__(
        self,
        chunks: list[bytes] | None = None,
        models: dict | None = None,
        status: int = 200,
        error: Exception | None = None,
        content_type: str = "text/event-stream; charset=utf-8",
    ):
        self.chunks = chunks if chunks is not None else [sse_record("Hi"), DONE]
        self.models = models if models is not None else MODELS_PAYLOAD
        self.status = status
        self.error = error
        self.content_type = content_type
        self.requests: list[httpx.Request] = []
        self.streams: list[ChunkStream] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status != 200:
            return httpx.Response(
                self.status,
                json={"error": {"message": "upstream says no"}},
            )
        if request.url.path.endswith("/models"):
            return httpx.Response(200, json=self.models)
        stream = ChunkStream(list(self.chunks))
        self.streams.append(stream)
        return httpx.Response(
            200,
            headers={"content-type": self.content_type},
            stream=stream,
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/chat/completions")]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_provider(backend: FakeBackend) -> Callable[..., OpenRouterProvider]:
    def _make(config: dict | None = None) -> OpenRouterProvider:
        return OpenRouterProvider(config, transport=backend.transport)
    return _make


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def manager(backend: FakeBackend) -> ProviderManager:
    return create_default_manager(transport=backend.transport)


@pytest.fixture
def settings_service(store: InMemoryStore) -> SettingsService:
    return SettingsService(store)


@pytest.fixture
def chat_service(store, manager, settings_service) -> ChatService:
    return ChatService(store, manager, settings_service)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openrouter": os.getenv("OPENROUTER_API_KEY"),
        "guiji": os.getenv("GUIJI_API_KEY"),
    }
