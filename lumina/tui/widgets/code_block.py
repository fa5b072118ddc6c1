"""Code block widget — highlighted code with a copy button."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Button, Static

from lumina.shared.formatters.code_block import (
    CodeBlockView,
    RenderedCodeBlock,
)


class _TimerHandle:
    """Adapts a Textual Timer to the ``cancel()`` protocol."""

    def __init__(self, timer: Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class CodeBlockWidget(Widget):
    """One fenced code block: language label, copy button, coloured body.

    The widget owns its ``CodeBlockView``; a re-render of the message builds
    a new widget and therefore fresh copy state.
    """

    DEFAULT_CSS = """
    CodeBlockWidget {
        height: auto;
        margin: 1 0;
        border: round $panel-lighten-2;
    }
    CodeBlockWidget .code-header {
        height: 1;
        padding: 0 1;
    }
    CodeBlockWidget .code-label {
        width: 1fr;
        color: $text-muted;
    }
    CodeBlockWidget .copy-btn {
        min-width: 9;
        height: 1;
        border: none;
        background: transparent;
        color: $text-muted;
    }
    CodeBlockWidget .copy-btn:hover {
        color: $text;
    }
    CodeBlockWidget .code-body {
        height: auto;
        padding: 0 1;
        overflow-x: auto;
    }
    """

    def __init__(
        self,
        block: RenderedCodeBlock,
        clipboard: Callable[[str], object] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.block = block
        self._clipboard = clipboard
        self.view: CodeBlockView | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(classes="code-header"):
            yield Static(self.block.label, classes="code-label")
            yield Button("copy", classes="copy-btn")
        yield Static(self.block.to_rich_text(), classes="code-body")

    def on_mount(self) -> None:
        self.view = CodeBlockView(
            self.block.code,
            self.block.node.language,
            clipboard=self._clipboard or self._copy_to_app_clipboard,
            schedule=self._schedule,
            on_change=self._on_copied_changed,
        )

    def on_unmount(self) -> None:
        if self.view is not None:
            self.view.dispose()

    def _schedule(self, delay: float, callback: Callable[[], None]) -> _TimerHandle:
        return _TimerHandle(self.set_timer(delay, callback))

    def _copy_to_app_clipboard(self, text: str) -> bool:
        self.app.copy_to_clipboard(text)
        return True

    def _on_copied_changed(self, copied: bool) -> None:
        button = self.query_one(".copy-btn", Button)
        button.label = "copied!" if copied else "copy"

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if self.view is not None:
            self.view.copy()
