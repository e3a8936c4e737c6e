"""Tests for legalswami/providers/groq.py: the upstream completion client."""

import httpx
import pytest

from conftest import FakeUpstream, completion_body, make_groq_client, make_key
from legalswami.exceptions import (
    MalformedResponseError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamTransportError,
)
from legalswami.providers.groq import base_url_for

MESSAGES = [
    {"role": "system", "content": "You are a legal assistant."},
    {"role": "user", "content": "What is a tort?"},
]


def test_base_url_for():
    assert base_url_for("https://api.groq.com/openai/v1/chat/completions") == "https://api.groq.com/openai/v1"
    assert base_url_for("https://proxy.local/v1/") == "https://proxy.local/v1"


class TestGroqCompletionClient:

    async def test_success_sends_expected_request(self):
        upstream = FakeUpstream({"m1": (200, completion_body("A tort is a civil wrong."))})
        client = make_groq_client(upstream)
        key = make_key("request")

        content = await client.complete(MESSAGES, "m1", key)

        assert content == "A tort is a civil wrong."
        sent = upstream.requests[0]
        assert sent["path"] == "/openai/v1/chat/completions"
        assert sent["authorization"] == f"Bearer {key}"
        assert sent["body"]["model"] == "m1"
        assert sent["body"]["messages"] == MESSAGES
        assert sent["body"]["temperature"] == 0.7
        assert sent["body"]["max_tokens"] == 4000
        assert sent["body"]["stream"] is False

    async def test_each_call_uses_its_own_credential(self):
        upstream = FakeUpstream({"m1": (200, completion_body("ok"))})
        client = make_groq_client(upstream)

        await client.complete(MESSAGES, "m1", make_key("first"))
        await client.complete(MESSAGES, "m1", make_key("second"))

        assert upstream.credentials_used == [make_key("first"), make_key("second")]

    async def test_401_raises_auth_error(self):
        upstream = FakeUpstream({"m1": (401, {"error": {"message": "Invalid API Key"}})})
        client = make_groq_client(upstream)

        with pytest.raises(UpstreamAuthError) as exc_info:
            await client.complete(MESSAGES, "m1", make_key("expired"))
        assert exc_info.value.status_code == 401
        # Exactly one request: retries are left to the dispatcher
        assert len(upstream.requests) == 1

    async def test_500_keeps_status_and_body(self):
        body = {"error": {"code": "model_decommissioned", "message": "gone"}}
        upstream = FakeUpstream({"m1": (500, body)})
        client = make_groq_client(upstream)

        with pytest.raises(UpstreamError) as exc_info:
            await client.complete(MESSAGES, "m1", make_key("k"))
        assert exc_info.value.status_code == 500
        assert "model_decommissioned" in exc_info.value.body
        assert not isinstance(exc_info.value, UpstreamAuthError)

    async def test_timeout_raises_transport_error(self):
        upstream = FakeUpstream({"m1": httpx.ReadTimeout("Timed out")})
        client = make_groq_client(upstream)

        with pytest.raises(UpstreamTransportError):
            await client.complete(MESSAGES, "m1", make_key("k"))

    async def test_connect_error_raises_transport_error(self):
        upstream = FakeUpstream({"m1": httpx.ConnectError("Connection refused")})
        client = make_groq_client(upstream)

        with pytest.raises(UpstreamTransportError):
            await client.complete(MESSAGES, "m1", make_key("k"))

    async def test_missing_choices_is_malformed(self):
        upstream = FakeUpstream({"m1": (200, {"id": "chatcmpl-test", "object": "chat.completion"})})
        client = make_groq_client(upstream)

        with pytest.raises(MalformedResponseError):
            await client.complete(MESSAGES, "m1", make_key("k"))

    async def test_empty_choices_is_malformed(self):
        body = completion_body("unused")
        body["choices"] = []
        upstream = FakeUpstream({"m1": (200, body)})
        client = make_groq_client(upstream)

        with pytest.raises(MalformedResponseError):
            await client.complete(MESSAGES, "m1", make_key("k"))

    async def test_close(self):
        client = make_groq_client(FakeUpstream({}))
        await client.close()
        assert client.client.is_closed()
