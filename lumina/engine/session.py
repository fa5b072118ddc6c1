"""Chat session engine — turn history and single-flight model calls.

Owns the conversation and its status. A submission is accepted only when
its trimmed text is non-empty and no request is outstanding; otherwise it is
a silent no-op. Accepted submissions append the user turn immediately, send
the *prior* turns as history, and always end with exactly one assistant turn:
the model's reply, or a fixed apology when the call fails for any reason.

State machine:
    IDLE --submit(valid)--> SENDING --reply--> IDLE
    SENDING --failure--> IDLE (apology turn appended)
    IDLE --submit(empty) / SENDING --submit(any)--> unchanged
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Callable

from lumina.engine.config import EngineConfig
from lumina.engine.errors import (
    MalformedResponseError,
    ModelClientError,
    ModelTimeoutError,
)
from lumina.engine.prompts import APOLOGY_TEXT
from lumina.engine.providers.base import ModelClient, ModelReply
from lumina.shared.formatters.history import HistoryEntry, format_history
from lumina.shared.models.message import Turn, TurnRole
from lumina.shared.models.session import Conversation, SessionStatus

logger = logging.getLogger(__name__)

SessionListener = Callable[["ChatSession"], None]


class ChatSession:
    """Single conversation with the remote model."""

    def __init__(
        self,
        client: ModelClient,
        config: EngineConfig | None = None,
        *,
        apology_text: str = APOLOGY_TEXT,
    ) -> None:
        self.client = client
        self.config = config or EngineConfig()
        self.apology_text = apology_text
        self.conversation = Conversation()
        self.last_error: BaseException | None = None
        self._status = SessionStatus.IDLE
        self._listeners: list[SessionListener] = []
        self._task: asyncio.Task | None = None

    # ── Observation ──

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_sending(self) -> bool:
        return self._status is SessionStatus.SENDING

    @property
    def turns(self) -> tuple[Turn, ...]:
        return self.conversation.snapshot()

    @property
    def pending_task(self) -> asyncio.Task | None:
        """The in-flight exchange started by ``submit``, if any."""
        return self._task

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener(session)`` after every state change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener %r failed", listener)

    # ── Submission ──

    def _accept(self, text: str) -> tuple[list[HistoryEntry], str] | None:
        message = text.strip() if isinstance(text, str) else ""
        if not message:
            logger.debug("Ignoring empty submission")
            return None
        if self._status is SessionStatus.SENDING:
            logger.debug("Ignoring submission while a request is in flight")
            return None

        prior = self.conversation.snapshot()
        self.conversation.append(TurnRole.USER, message)
        self._status = SessionStatus.SENDING
        self._notify()
        return format_history(self._window(prior)), message

    def submit(self, text: str) -> asyncio.Task | None:
        """Fire-and-forget submission on the running event loop.

        Returns the scheduled task, or None when the submission was rejected.
        Completion is observed through listeners, ``status`` and ``turns``.
        """
        loop = asyncio.get_running_loop()
        request = self._accept(text)
        if request is None:
            return None
        history, message = request
        task = loop.create_task(self._exchange(history, message))
        self._task = task
        task.add_done_callback(self._on_task_done)
        return task

    async def send(self, text: str) -> bool:
        """Submit and wait for the exchange to settle.

        Returns False when the submission was rejected.
        """
        request = self._accept(text)
        if request is None:
            return False
        await self._exchange(*request)
        return True

    async def wait_idle(self) -> None:
        """Wait for the outstanding ``submit`` exchange, if any."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if self._task is task:
            self._task = None

    # ── Exchange ──

    def _window(self, prior: Sequence[Turn]) -> Sequence[Turn]:
        if self.config.window_enabled:
            return prior[-self.config.history_window_turns:]
        return prior

    async def _call_model(
        self, history: list[HistoryEntry], message: str,
    ) -> ModelReply:
        call = self.client.send_message(history, message)
        if not self.config.timeout_enabled:
            return await call
        timeout = self.config.request_timeout_seconds
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ModelTimeoutError(timeout) from exc

    async def _exchange(self, history: list[HistoryEntry], message: str) -> None:
        logger.info(
            "Sending message to %s (history=%d turns, %d chars)",
            self.client.name, len(history), len(message),
        )
        try:
            reply = await self._call_model(history, message)
            text = reply.text if isinstance(reply, ModelReply) else None
            if not isinstance(text, str) or not text.strip():
                raise MalformedResponseError("model returned empty text")
        except asyncio.CancelledError:
            self._status = SessionStatus.IDLE
            self._notify()
            raise
        except ModelClientError as exc:
            logger.error("Error communicating with model: %s", exc)
            self._fail(exc)
        except Exception as exc:
            logger.exception("Unexpected error communicating with model")
            self._fail(exc)
        else:
            self.last_error = None
            self.conversation.append(TurnRole.ASSISTANT, text)
            self._status = SessionStatus.IDLE
            logger.info("Received reply (%d chars)", len(text))
            self._notify()

    def _fail(self, exc: BaseException) -> None:
        self.last_error = exc
        self.conversation.append(TurnRole.ASSISTANT, self.apology_text)
        self._status = SessionStatus.IDLE
        self._notify()

    async def aclose(self) -> None:
        await self.client.aclose()
