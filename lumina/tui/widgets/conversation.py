"""Conversation view — scrollable message area with greeting and thinking state."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widget import Widget
from textual.widgets import Static

from lumina.shared.formatters.code_block import RenderedCodeBlock
from lumina.shared.formatters.render import (
    RenderedBlock,
    RenderedTurn,
    blocks_to_rich,
    render_turn,
    user_turn_rich,
)
from lumina.shared.models.message import Turn
from lumina.shared.models.session import SessionStatus
from lumina.tui.widgets.code_block import CodeBlockWidget
from lumina.tui.widgets.thinking import ThinkingIndicator

logger = logging.getLogger(__name__)


def greeting_for_hour(hour: int) -> str:
    if 5 <= hour < 12:
        return "Good morning"
    if 12 <= hour < 18:
        return "Good afternoon"
    if 0 <= hour < 5:
        return "Moonlit chat?"
    return "Good evening"


def _group_blocks(
    blocks: Sequence[RenderedBlock],
) -> list[RenderedCodeBlock | list[RenderedBlock]]:
    """Split blocks into runs of prose separated by code blocks."""
    groups: list[RenderedCodeBlock | list[RenderedBlock]] = []
    for block in blocks:
        if isinstance(block, RenderedCodeBlock):
            groups.append(block)
        elif groups and isinstance(groups[-1], list):
            groups[-1].append(block)
        else:
            groups.append([block])
    return groups


class MessageWidget(Widget):
    """A single turn: user bubble or assistant markdown."""

    DEFAULT_CSS = """
    MessageWidget {
        height: auto;
        margin: 1 0;
    }
    MessageWidget.user {
        padding: 0 1;
        margin: 1 0 1 8;
        background: $boost;
        border-left: thick $accent;
    }
    MessageWidget.assistant {
        padding: 0 1;
    }
    MessageWidget .prose {
        height: auto;
    }
    """

    def __init__(self, rendered: RenderedTurn, is_dark: bool, **kwargs) -> None:
        role = "user" if rendered.is_user else "assistant"
        super().__init__(classes=role, **kwargs)
        self.rendered = rendered
        self.is_dark = is_dark

    def compose(self) -> ComposeResult:
        if self.rendered.is_user:
            yield Static(user_turn_rich(self.rendered.turn, self.is_dark), classes="prose")
            return
        for group in _group_blocks(self.rendered.blocks):
            if isinstance(group, RenderedCodeBlock):
                yield CodeBlockWidget(group)
            else:
                yield Static(blocks_to_rich(group, self.is_dark), classes="prose")


class ConversationView(Widget):
    """Scrollable list of turns.

    Turns are append-only, so ``sync`` mounts only the new ones; a theme
    change rebuilds everything.
    """

    DEFAULT_CSS = """
    ConversationView {
        height: 1fr;
    }
    ConversationView #message-container {
        height: 1fr;
        padding: 0 2;
    }
    ConversationView .greeting {
        width: 100%;
        content-align: center middle;
        text-style: bold;
        margin: 4 0 0 0;
    }
    ConversationView .thinking-indicator {
        margin: 1 0;
        padding: 0 1;
    }
    """

    def __init__(self, show_greeting: bool = True, **kwargs) -> None:
        super().__init__(**kwargs)
        self.show_greeting = show_greeting
        self._rendered_count: int = 0
        self._is_dark: bool | None = None
        self._thinking: ThinkingIndicator | None = None
        self._greeting: Static | None = None

    def compose(self) -> ComposeResult:
        yield VerticalScroll(id="message-container")

    @property
    def message_count(self) -> int:
        return self._rendered_count

    def _container(self) -> VerticalScroll:
        return self.query_one("#message-container", VerticalScroll)

    def sync(
        self,
        turns: Sequence[Turn],
        status: SessionStatus,
        is_dark: bool,
    ) -> None:
        """Bring the view in line with a session snapshot."""
        container = self._container()
        if is_dark != self._is_dark or len(turns) < self._rendered_count:
            logger.debug("Rebuilding conversation view (dark=%s)", is_dark)
            container.remove_children()
            self._thinking = None
            self._greeting = None
            self._rendered_count = 0
            self._is_dark = is_dark

        if turns and self._greeting is not None:
            self._greeting.remove()
            self._greeting = None
        elif not turns and self.show_greeting and self._greeting is None:
            text = greeting_for_hour(datetime.now().hour)
            self._greeting = Static(text, classes="greeting")
            container.mount(self._greeting)

        new_turns = turns[self._rendered_count:]
        if new_turns and self._thinking is not None:
            self._thinking.remove()
            self._thinking = None
        for turn in new_turns:
            container.mount(MessageWidget(render_turn(turn, is_dark), is_dark))
        self._rendered_count = len(turns)

        sending = status is SessionStatus.SENDING
        if sending and self._thinking is None:
            self._thinking = ThinkingIndicator()
            container.mount(self._thinking)
        elif not sending and self._thinking is not None:
            self._thinking.remove()
            self._thinking = None

        if new_turns or sending:
            container.scroll_end(animate=False)
