"""Abstract base for model clients.

A model client takes the formatted prior history plus the new user message
and returns the model's reply text. Clients raise ``ModelClientError``
subclasses on failure; containing those errors is the session engine's job.
"""
from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from lumina.shared.formatters.history import HistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class ModelReply:
    """Result of a single model call."""
    text: str
    model: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ModelClient(abc.ABC):
    """Request/response contract with the remote conversational model."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short client name (e.g. 'gemini', 'demo')."""

    @property
    def model(self) -> str:
        return self.name

    @abc.abstractmethod
    async def send_message(
        self,
        history: Sequence[HistoryEntry],
        message: str,
    ) -> ModelReply:
        """Send ``message`` with ``history`` as prior context.

        ``history`` holds only the turns that precede ``message``.
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call more than once."""
