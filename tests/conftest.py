"""Shared test fixtures for all tests."""

import json

import httpx
import pytest

from legalswami.credentials.pool import CredentialPool
from legalswami.exceptions import UpstreamError
from legalswami.providers.base import CompletionClient
from legalswami.providers.groq import GroqCompletionClient
from legalswami.routing.dispatcher import ModelDispatcher
from legalswami.storage.memory import ChatStore

TEST_API_URL = "https://api.groq.test/openai/v1/chat/completions"


def make_key(suffix: str) -> str:
    """Build a syntactically valid credential; suffix must be alphanumeric."""
    return "gsk_" + suffix.ljust(40, "x")


def completion_body(content: str, model: str = "test-model") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeUpstream:
    """
    httpx.MockTransport handler that answers per requested model.

    Each entry in `responses` is either a (status_code, payload) tuple, where
    payload is a dict (sent as JSON) or a str (sent as text), or an exception
    instance to raise instead of responding.
    """

    def __init__(self, responses: dict):
        self.responses = responses
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(
            {
                "model": body["model"],
                "authorization": request.headers["Authorization"],
                "path": request.url.path,
                "body": body,
            }
        )

        result = self.responses[body["model"]]
        if isinstance(result, Exception):
            raise result

        status_code, payload = result
        if isinstance(payload, dict):
            return httpx.Response(status_code, json=payload)
        return httpx.Response(status_code, text=payload)

    @property
    def models_called(self) -> list[str]:
        return [r["model"] for r in self.requests]

    @property
    def credentials_used(self) -> list[str]:
        return [r["authorization"].removeprefix("Bearer ") for r in self.requests]


def make_groq_client(upstream: FakeUpstream) -> GroqCompletionClient:
    return GroqCompletionClient(
        api_url=TEST_API_URL,
        timeout_s=5.0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
    )


class ScriptedClient(CompletionClient):
    """
    CompletionClient double that answers from a per-model script.

    A str value is returned as the completion; an UpstreamError instance is raised.
    """

    def __init__(self, script: dict):
        super().__init__("scripted")
        self.script = script
        self.calls: list[tuple[str, str]] = []

    async def complete(self, messages, model, credential):
        self.calls.append((model, credential))
        result = self.script[model]
        if isinstance(result, UpstreamError):
            raise result
        return result

    @property
    def models_called(self) -> list[str]:
        return [model for model, _ in self.calls]


@pytest.fixture
def keys() -> list[str]:
    return [make_key("alpha"), make_key("beta"), make_key("gamma")]


@pytest.fixture
def credential_pool(keys):
    """
    Create a fresh CredentialPool holding three valid credentials.
    """
    return CredentialPool(keys)


@pytest.fixture
def make_dispatcher(credential_pool):
    """
    Factory fixture: build a ModelDispatcher without inter-attempt delay.

    Usage:
        dispatcher = make_dispatcher(client, ["m1", "m2"])
    """

    def _make(client: CompletionClient, models: list[str], pool: CredentialPool = None, **kwargs):
        kwargs.setdefault("retry_delay_s", 0)
        return ModelDispatcher(
            client=client,
            pool=credential_pool if pool is None else pool,
            models=models,
            **kwargs,
        )

    return _make


@pytest.fixture
async def chat_store():
    """
    Create a fresh ChatStore for testing.
    """
    store = ChatStore()
    await store.reset()
    return store
