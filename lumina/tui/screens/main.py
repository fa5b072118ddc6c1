"""Main screen — conversation, prompt input and status."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Static

from lumina.engine.prompts import DISCLAIMER_TEXT
from lumina.engine.session import ChatSession
from lumina.shared.models.session import SessionStatus
from lumina.tui.widgets.conversation import ConversationView
from lumina.tui.widgets.input_bar import InputBar
from lumina.tui.widgets.status_bar import StatusBar

logger = logging.getLogger(__name__)


class MainScreen(Screen):
    """Single-pane chat workspace bound to one ``ChatSession``."""

    DEFAULT_CSS = """
    MainScreen #disclaimer {
        height: 1;
        width: 100%;
        content-align: center middle;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        session: ChatSession,
        *,
        is_dark: bool = True,
        show_greeting: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.is_dark = is_dark
        self._show_greeting = show_greeting
        self._remove_listener = None

    def compose(self) -> ComposeResult:
        yield ConversationView(show_greeting=self._show_greeting, id="conversation")
        yield InputBar(id="input-bar")
        yield Static(DISCLAIMER_TEXT, id="disclaimer")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        self._remove_listener = self.session.add_listener(self._on_session_changed)
        self.query_one("#status-bar", StatusBar).model = self.session.client.model or "—"
        self.refresh_view()
        self.query_one("#input-bar", InputBar).focus_input()

    def on_unmount(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    # ── Session binding ──

    def _on_session_changed(self, session: ChatSession) -> None:
        self.refresh_view()

    def refresh_view(self) -> None:
        session = self.session
        turns = session.turns
        self.query_one("#conversation", ConversationView).sync(
            turns, session.status, self.is_dark,
        )
        input_bar = self.query_one("#input-bar", InputBar)
        input_bar.set_placeholder(bool(turns))
        input_bar.set_busy(session.status is SessionStatus.SENDING)

        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.status = session.status.value
        status_bar.turns = len(turns)
        status_bar.dark = self.is_dark

    def set_dark(self, is_dark: bool) -> None:
        self.is_dark = is_dark
        self.refresh_view()

    def on_input_bar_submitted(self, event: InputBar.Submitted) -> None:
        event.stop()
        task = self.session.submit(event.text)
        if task is None:
            logger.debug("Submission rejected (empty or request in flight)")
            return
        self.query_one("#input-bar", InputBar).clear()
