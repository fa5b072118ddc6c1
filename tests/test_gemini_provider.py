"""Tests for GeminiClient against a local aiohttp server."""
from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from lumina.engine.errors import (
    MalformedResponseError,
    MissingApiKeyError,
    ModelAuthError,
    ModelTransportError,
)
from lumina.engine.providers.gemini_provider import GeminiClient, extract_text
from lumina.shared.formatters.history import HistoryEntry

API_ENV = "LUMINA_TEST_GEMINI_KEY"


def _reply(text: str) -> dict:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}},
        ],
        "usageMetadata": {"totalTokenCount": 7},
    }


class _FakeGemini:
    """Records requests and answers with a fixed status/body."""

    def __init__(self, status: int = 200, body=None, raw: str | None = None) -> None:
        self.status = status
        self.body = body
        self.raw = raw
        self.requests: list[dict] = []

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append({
            "path": request.path,
            "key": request.headers.get("x-goog-api-key"),
            "json": await request.json(),
        })
        if self.raw is not None:
            return web.Response(status=self.status, text=self.raw)
        return web.json_response(self.body, status=self.status)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1beta/models/{model}", self.handle)
        return app


async def _client_for(server: TestServer, **kwargs) -> GeminiClient:
    base_url = f"http://{server.host}:{server.port}"
    return GeminiClient(
        model="gemini-test", api_key_env=API_ENV, base_url=base_url, **kwargs,
    )


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv(API_ENV, "secret-key")


@pytest.mark.asyncio
async def test_send_message_success(api_key):
    fake = _FakeGemini(body=_reply("Hi there"))
    async with TestServer(fake.app()) as server:
        client = await _client_for(server, system_instruction="Be brief.")
        try:
            history = [HistoryEntry("user", "Hello"), HistoryEntry("model", "Hi")]
            reply = await client.send_message(history, "How are you?")
        finally:
            await client.aclose()

    assert reply.text == "Hi there"
    assert reply.model == "gemini-test"
    assert reply.metadata["usage"] == {"totalTokenCount": 7}

    sent = fake.requests[0]
    assert sent["path"] == "/v1beta/models/gemini-test:generateContent"
    assert sent["key"] == "secret-key"
    assert sent["json"]["contents"] == [
        {"role": "user", "parts": [{"text": "Hello"}]},
        {"role": "model", "parts": [{"text": "Hi"}]},
        {"role": "user", "parts": [{"text": "How are you?"}]},
    ]
    assert sent["json"]["systemInstruction"] == {"parts": [{"text": "Be brief."}]}


@pytest.mark.asyncio
async def test_auth_failure(api_key):
    fake = _FakeGemini(status=401, body={"error": {"message": "API key not valid"}})
    async with TestServer(fake.app()) as server:
        client = await _client_for(server)
        try:
            with pytest.raises(ModelAuthError) as exc_info:
                await client.send_message([], "Hello")
        finally:
            await client.aclose()

    assert exc_info.value.status == 401
    assert "API key not valid" in str(exc_info.value)


@pytest.mark.asyncio
async def test_server_error(api_key):
    fake = _FakeGemini(status=500, raw="upstream exploded")
    async with TestServer(fake.app()) as server:
        client = await _client_for(server)
        try:
            with pytest.raises(ModelTransportError) as exc_info:
                await client.send_message([], "Hello")
        finally:
            await client.aclose()

    assert exc_info.value.status == 500
    assert not isinstance(exc_info.value, ModelAuthError)


@pytest.mark.asyncio
async def test_invalid_json_body(api_key):
    fake = _FakeGemini(raw="<html>not json</html>")
    async with TestServer(fake.app()) as server:
        client = await _client_for(server)
        try:
            with pytest.raises(MalformedResponseError):
                await client.send_message([], "Hello")
        finally:
            await client.aclose()


@pytest.mark.asyncio
async def test_no_candidates(api_key):
    fake = _FakeGemini(body={"promptFeedback": {"blockReason": "SAFETY"}})
    async with TestServer(fake.app()) as server:
        client = await _client_for(server)
        try:
            with pytest.raises(MalformedResponseError, match="SAFETY"):
                await client.send_message([], "Hello")
        finally:
            await client.aclose()


@pytest.mark.asyncio
async def test_connection_refused(api_key):
    client = GeminiClient(
        model="gemini-test", api_key_env=API_ENV, base_url="http://127.0.0.1:9",
    )
    try:
        with pytest.raises(ModelTransportError):
            await client.send_message([], "Hello")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_missing_api_key(monkeypatch):
    monkeypatch.delenv(API_ENV, raising=False)
    client = GeminiClient(model="gemini-test", api_key_env=API_ENV)
    with pytest.raises(MissingApiKeyError) as exc_info:
        await client.send_message([], "Hello")
    assert exc_info.value.env_var == API_ENV
    await client.aclose()


def test_extract_text_joins_parts():
    payload = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    assert extract_text(payload) == "ab"


def test_extract_text_rejects_non_object():
    with pytest.raises(MalformedResponseError):
        extract_text(["not", "a", "dict"])


def test_extract_text_missing_parts():
    payload = {"candidates": [{"finishReason": "MAX_TOKENS"}]}
    with pytest.raises(MalformedResponseError, match="MAX_TOKENS"):
        extract_text(payload)


def test_endpoint_and_name():
    client = GeminiClient(model="gemini-2.5-flash", base_url="https://example.test/")
    assert client.name == "gemini"
    assert client.model == "gemini-2.5-flash"
    assert client.endpoint == (
        "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
    )
