"""Turn model — one message exchanged in a conversation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TurnRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    role: TurnRole
    text: str
    # Display metadata only; never sent to the model.
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    @property
    def is_user(self) -> bool:
        return self.role is TurnRole.USER
