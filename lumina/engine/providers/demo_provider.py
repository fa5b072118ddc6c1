"""Offline demo client — canned markdown replies, no network.

Lets the TUI be explored without an API key. Replies cycle through a few
fixed answers that exercise headings, lists, quotes and code fences.
"""
from __future__ import annotations

import asyncio
import itertools
from collections.abc import Sequence

from lumina.shared.formatters.history import HistoryEntry

from .base import ModelClient, ModelReply

DEMO_REPLIES: tuple[str, ...] = (
    "## Hello\n\n"
    "This is **demo mode**, so nothing leaves your machine.\n\n"
    "- Press `Enter` to send\n"
    "- Press `Shift+Enter` for a new line\n"
    "- Press `Ctrl+D` to switch themes\n",

    "Here's a tiny example:\n\n"
    "```python\n"
    "def greet(name: str) -> str:\n"
    "    # Friendly and short\n"
    "    return f\"Hello, {name}!\"\n"
    "```\n\n"
    "Click **copy** on the block to put it on your clipboard.",

    "> Simplicity is prerequisite for reliability.\n\n"
    "---\n\n"
    "1. Keep turns short\n"
    "2. Use [links](https://example.com) sparingly\n",
)


class DemoClient(ModelClient):
    """Replies from ``DEMO_REPLIES`` after a short delay."""

    def __init__(self, delay_seconds: float = 0.6) -> None:
        self._delay = delay_seconds
        self._replies = itertools.cycle(DEMO_REPLIES)

    @property
    def name(self) -> str:
        return "demo"

    async def send_message(
        self,
        history: Sequence[HistoryEntry],
        message: str,
    ) -> ModelReply:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        return ModelReply(text=next(self._replies), model="demo")
