"""Input bar — prompt input with submit handling."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, TextArea

EMPTY_PLACEHOLDER = "How can I help you today?"
REPLY_PLACEHOLDER = "Reply..."


class PromptInput(TextArea):
    """TextArea that fires SubmitRequested on Enter (Shift+Enter for newlines)."""

    class SubmitRequested(Message):
        """Fired when bare Enter is pressed."""

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            event.stop()
            event.prevent_default()
            self.post_message(self.SubmitRequested())
            return
        if event.key == "shift+enter":
            event.stop()
            event.prevent_default()
            self._replace_via_keyboard("\n", *self.selection)
            return
        await super()._on_key(event)


class InputBar(Widget):
    """Prompt input area with send button.

    The bar never clears itself: the owner decides whether a submission
    was accepted and calls ``clear()``.
    """

    class Submitted(Message):
        """Posted when user submits a prompt."""

        def __init__(self, text: str) -> None:
            self.text = text
            super().__init__()

    DEFAULT_CSS = """
    InputBar {
        height: auto;
        max-height: 10;
        padding: 0 1;
    }
    InputBar Horizontal {
        height: auto;
    }
    InputBar #prompt-input {
        width: 1fr;
        height: auto;
        min-height: 3;
        max-height: 8;
    }
    InputBar #send-btn {
        min-width: 8;
        height: 3;
        margin: 0 0 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield PromptInput(
                id="prompt-input",
                placeholder=EMPTY_PLACEHOLDER,
                soft_wrap=True,
                show_line_numbers=False,
            )
            yield Button("Send", id="send-btn", variant="primary")

    @property
    def text(self) -> str:
        return self.query_one("#prompt-input", PromptInput).text

    def focus_input(self) -> None:
        self.query_one("#prompt-input", PromptInput).focus()

    def clear(self) -> None:
        self.query_one("#prompt-input", PromptInput).clear()

    def set_placeholder(self, has_turns: bool) -> None:
        editor = self.query_one("#prompt-input", PromptInput)
        editor.placeholder = REPLY_PLACEHOLDER if has_turns else EMPTY_PLACEHOLDER

    def set_busy(self, busy: bool) -> None:
        """Disable the send button while a reply is pending."""
        self.query_one("#send-btn", Button).disabled = busy

    def _submit(self) -> None:
        self.post_message(self.Submitted(self.text))

    def on_prompt_input_submit_requested(
        self, event: PromptInput.SubmitRequested,
    ) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()
