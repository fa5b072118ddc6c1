"""Conversation state — append-only turn history and session status."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from lumina.shared.models.message import Turn, TurnRole


class SessionStatus(Enum):
    IDLE = "idle"
    SENDING = "sending"
    # Reserved for observers; the session engine always settles on IDLE.
    ERROR = "error"


class Conversation:
    """Ordered, append-only sequence of turns.

    Turns are immutable and there is no API to remove or reorder them.
    Readers take a ``snapshot()`` so rendering never observes a turn being
    appended halfway through.
    """

    def __init__(self, turns: list[Turn] | None = None) -> None:
        self._turns: list[Turn] = list(turns or [])

    def append(self, role: TurnRole, text: str) -> Turn:
        turn = Turn(role=role, text=text)
        self._turns.append(turn)
        return turn

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"Conversation(turns={len(self._turns)})"
