"""History formatting — maps conversation turns onto the model wire shape.

The mapping is one entry per turn, order preserved, text verbatim. No
truncation happens here; callers that need a context window apply it before
calling ``format_history``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from lumina.shared.models.message import Turn, TurnRole

WireRole = Literal["user", "model"]

_ROLE_LABELS: dict[TurnRole, WireRole] = {
    TurnRole.USER: "user",
    TurnRole.ASSISTANT: "model",
}


@dataclass(frozen=True)
class HistoryEntry:
    """One prior turn as the remote model expects it."""
    role: WireRole
    text: str


def format_turn(turn: Turn) -> HistoryEntry:
    return HistoryEntry(role=_ROLE_LABELS[turn.role], text=turn.text)


def format_history(turns: Iterable[Turn]) -> list[HistoryEntry]:
    """Translate turns into history entries (``ASSISTANT`` -> ``"model"``)."""
    return [format_turn(turn) for turn in turns]


def to_gemini_contents(
    history: Sequence[HistoryEntry], message: str,
) -> list[dict[str, Any]]:
    """Build the Gemini ``contents`` array: prior history plus the new message."""
    contents = [
        {"role": entry.role, "parts": [{"text": entry.text}]}
        for entry in history
    ]
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents
