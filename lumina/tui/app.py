"""Lumina TUI — Textual application class."""

from __future__ import annotations

import logging

from textual.app import App
from textual.binding import Binding

from lumina.engine.session import ChatSession
from lumina.shared.services.preferences import UserPreferences
from lumina.tui.screens.main import MainScreen

logger = logging.getLogger(__name__)


class LuminaApp(App):
    """Terminal chat client."""

    TITLE = "Lumina"
    SUB_TITLE = "Chat"

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        # TextArea binds ctrl+d to delete-right.
        Binding("ctrl+d", "toggle_dark_mode", "Theme", priority=True),
    ]

    def __init__(
        self,
        session: ChatSession,
        *,
        dark_mode: bool | None = None,
        preferences: UserPreferences | None = None,
        persist_preferences: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.preferences = preferences or UserPreferences.load()
        self._persist = persist_preferences
        self.dark_mode = self.preferences.dark_mode if dark_mode is None else dark_mode

    def on_mount(self) -> None:
        self._apply_theme()
        self.push_screen(
            MainScreen(
                self.session,
                is_dark=self.dark_mode,
                show_greeting=self.preferences.show_greeting,
            )
        )

    def _apply_theme(self) -> None:
        self.theme = "textual-dark" if self.dark_mode else "textual-light"

    def action_toggle_dark_mode(self) -> None:
        self.dark_mode = not self.dark_mode
        self._apply_theme()
        logger.info("Theme switched to %s", "dark" if self.dark_mode else "light")
        screen = self.screen
        if isinstance(screen, MainScreen):
            screen.set_dark(self.dark_mode)
        if self._persist:
            self.preferences.dark_mode = self.dark_mode
            self.preferences.save()

    async def action_quit(self) -> None:
        task = self.session.pending_task
        if task is not None and not task.done():
            task.cancel()
        await self.session.aclose()
        self.exit()
