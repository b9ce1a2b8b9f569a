import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.dependencies import get_completion_gateway, get_conversation_store
from app.main import app
from llm.gateway import CompletionGateway, CompletionOptions
from memory.redis_store import RedisConversationStore
from memory.session_store import InMemoryConversationStore


UPSTREAM_BASE_URL = "http://upstream.test/v1"


def completion_body(text: str, model: str = "gpt-4o-mini") -> Dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": model,
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}
        ],
    }


def sse_bytes(chunks: List[str]) -> bytes:
    """Encode chunks as the upstream's chat.completion.chunk event stream."""
    lines = []
    for text in chunks:
        event = {
            "id": "chatcmpl-test",
            "object": "chat.completion.chunk",
            "created": 0,
            "model": "gpt-4o-mini",
            "choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}],
        }
        lines.append(f"data: {json.dumps(event, ensure_ascii=False)}\n\n")
    lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def split_bytes(data: bytes, size: int) -> List[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


class StubCompletionAPI:
    """
    Deterministic stand-in for the completion API.

    Buffered requests get `reply`; streamed requests get `reply` cut into
    `stream_chunks` (or the explicit chunk list), delivered as byte
    fragments of `fragment_size`.
    """

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.reply = "4"
        self.chunks: Optional[List[str]] = None
        self.fragment_size = 7
        self.status = 200
        self.error_body: Dict[str, Any] = {"error": {"message": "upstream exploded"}}

    @property
    def calls(self) -> int:
        return len(self.requests)

    def stream_chunks(self) -> List[str]:
        if self.chunks is not None:
            return self.chunks
        return [self.reply[i:i + 3] for i in range(0, len(self.reply), 3)]

    async def _fragments(self):
        for fragment in split_bytes(sse_bytes(self.stream_chunks()), self.fragment_size):
            yield fragment

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.status != 200:
            return httpx.Response(self.status, json=self.error_body)
        if body.get("stream"):
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=self._fragments(),
            )
        return httpx.Response(200, json=completion_body(self.reply, body.get("model", "gpt-4o-mini")))


class FakeAsyncRedis:
    """The subset of redis.asyncio.Redis list commands the store uses."""

    def __init__(self):
        self.lists: Dict[str, List[str]] = {}
        self.fail = False
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    @staticmethod
    def _bounds(length: int, start: int, end: int):
        start = start if start >= 0 else max(length + start, 0)
        end = end if end >= 0 else length + end
        return start, end + 1

    async def rpush(self, key, *values):
        self._check()
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    async def llen(self, key):
        self._check()
        return len(self.lists.get(key, []))

    async def lrange(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        lo, hi = self._bounds(len(items), start, end)
        return list(items[lo:hi])

    async def ltrim(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        lo, hi = self._bounds(len(items), start, end)
        self.lists[key] = items[lo:hi]
        return True

    async def delete(self, key):
        self._check()
        return 1 if self.lists.pop(key, None) is not None else 0

    async def aclose(self):
        self.closed = True


@pytest.fixture
def run():
    """Run a store coroutine from a synchronous test."""
    return asyncio.run


@pytest.fixture
def upstream() -> StubCompletionAPI:
    return StubCompletionAPI()


@pytest.fixture
def gateway(upstream) -> CompletionGateway:
    return CompletionGateway(
        api_key="test-key",
        base_url=UPSTREAM_BASE_URL,
        default_options=CompletionOptions(model="gpt-4o-mini"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)),
    )


@pytest.fixture
def fake_redis() -> FakeAsyncRedis:
    return FakeAsyncRedis()


@pytest.fixture(params=["memory", "redis"])
def any_store(request, fake_redis):
    """Both backends, same cap, for behaviour that must not differ."""
    if request.param == "redis":
        return RedisConversationStore(fake_redis, history_cap=8)
    return InMemoryConversationStore(history_cap=8)


@pytest.fixture
def store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def client(store, gateway):
    app.dependency_overrides[get_conversation_store] = lambda: store
    app.dependency_overrides[get_completion_gateway] = lambda: gateway
    app.state.rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
