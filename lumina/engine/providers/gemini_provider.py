"""Gemini REST client.

Calls ``models/{model}:generateContent`` over HTTPS with ``aiohttp``. The
system instruction travels with every request; prior turns go in
``contents`` followed by the new user message.
"""
from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from typing import Any

import aiohttp

from lumina.engine.errors import (
    MalformedResponseError,
    MissingApiKeyError,
    ModelAuthError,
    ModelTransportError,
)
from lumina.shared.formatters.history import HistoryEntry, to_gemini_contents

from .base import ModelClient, ModelReply

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash"

_AUTH_STATUSES = {401, 403}


def extract_text(payload: Any) -> str:
    """Join the text parts of the first candidate.

    Raises MalformedResponseError when the payload has no usable text.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("response body is not a JSON object")

    candidates = payload.get("candidates")
    if not candidates:
        feedback = payload.get("promptFeedback") or {}
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if reason:
            raise MalformedResponseError(f"prompt blocked: {reason}")
        raise MalformedResponseError("response has no candidates")

    first = candidates[0] if isinstance(candidates, list) else None
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        finish = first.get("finishReason") if isinstance(first, dict) else None
        raise MalformedResponseError(
            f"candidate has no content parts (finishReason={finish})"
        )

    texts = [
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts)


class GeminiClient(ModelClient):
    """Model client backed by the Gemini ``generateContent`` endpoint.

    Auth: API key read from ``api_key_env`` at call time and sent as the
    ``x-goog-api-key`` header.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        api_key_env: str = "GEMINI_API_KEY",
        base_url: str = DEFAULT_BASE_URL,
        system_instruction: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._model = model
        self._api_key_env = api_key_env
        self._base_url = base_url.rstrip("/")
        self._system_instruction = system_instruction
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1beta/models/{self._model}:generateContent"

    def _api_key(self) -> str:
        key = os.environ.get(self._api_key_env, "").strip()
        if not key:
            raise MissingApiKeyError(self._api_key_env)
        return key

    def build_payload(
        self, history: Sequence[HistoryEntry], message: str,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": to_gemini_contents(history, message),
        }
        if self._system_instruction:
            payload["systemInstruction"] = {
                "parts": [{"text": self._system_instruction}],
            }
        return payload

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def send_message(
        self,
        history: Sequence[HistoryEntry],
        message: str,
    ) -> ModelReply:
        headers = {
            "x-goog-api-key": self._api_key(),
            "Content-Type": "application/json",
        }
        payload = self.build_payload(history, message)
        logger.debug(
            "Gemini request model=%s history=%d chars=%d",
            self._model, len(history), len(message),
        )

        session = self._get_session()
        try:
            async with session.post(
                self.endpoint, json=payload, headers=headers,
            ) as resp:
                body = await resp.text()
                if resp.status in _AUTH_STATUSES:
                    raise ModelAuthError(_error_message(body), status=resp.status)
                if resp.status >= 400:
                    raise ModelTransportError(_error_message(body), status=resp.status)
        except aiohttp.ClientError as exc:
            raise ModelTransportError(f"{type(exc).__name__}: {exc}") from exc

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"invalid JSON: {exc}") from exc

        text = extract_text(data)
        usage = data.get("usageMetadata") or {}
        return ModelReply(text=text, model=self._model, metadata={"usage": usage})

    async def aclose(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


def _error_message(body: str) -> str:
    """Best-effort message from a Google API error body."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body[:200] or "empty error body"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return body[:200]
