"""Tests for code block highlighting, themes and the copy acknowledgement."""
from __future__ import annotations

import asyncio

import pytest
from pygments.token import Comment, Keyword, Name, String, Text

from lumina.engine.errors import ThemeError
from lumina.shared.formatters.code_block import (
    COPY_RESET_SECONDS,
    CodeBlockRenderer,
    CodeBlockView,
    CopyAcknowledgement,
    highlight_code,
    token_category,
)
from lumina.shared.formatters.markdown import FencedCode
from lumina.shared.formatters.theme import (
    DARK_THEME,
    LIGHT_THEME,
    TOKEN_CATEGORIES,
    _build,
    get_theme,
)


class FakeTimer:
    def __init__(self, delay, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    """Records scheduled callbacks so tests can fire them by hand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]


# ── Themes ──


@pytest.mark.parametrize("is_dark", [True, False])
def test_theme_covers_every_category(is_dark):
    theme = get_theme(is_dark)
    assert theme.is_dark is is_dark
    for category in TOKEN_CATEGORIES:
        assert theme.color_for(category).startswith("#")


def test_dark_and_light_differ():
    assert DARK_THEME.base != LIGHT_THEME.base
    assert get_theme(True) is DARK_THEME
    assert get_theme(False) is LIGHT_THEME


def test_comment_style_is_italic():
    assert DARK_THEME.style_for("comment").startswith("italic ")
    assert DARK_THEME.style_for(None) == DARK_THEME.base


def test_incomplete_palette_is_rejected():
    swatches = {"base": "#000000"}
    with pytest.raises(ThemeError):
        _build("broken", True, swatches)


# ── Highlighting ──


def test_token_category_walks_hierarchy():
    assert token_category(Keyword.Namespace) == "keyword"
    assert token_category(Keyword.Constant) == "constant"
    assert token_category(String.Double) == "string"
    assert token_category(String.Regex) == "regex"
    assert token_category(Comment.Single) == "comment"
    assert token_category(Name.Function) == "function"
    assert token_category(Text) is None


def test_python_block_is_highlighted():
    node = FencedCode("python", "def f():\n    return 1  # one")
    block = highlight_code(node, is_dark=True)

    assert block.highlighted is True
    assert block.label == "python"
    assert "".join(t.text for t in block.tokens) == node.text
    categories = {t.category for t in block.tokens}
    assert {"keyword", "function", "number", "comment"} <= categories


def test_unknown_language_renders_plain():
    node = FencedCode("no-such-lang", "just text")
    block = highlight_code(node, is_dark=False)

    assert block.highlighted is False
    assert [(t.text, t.style) for t in block.tokens] == [
        ("just text", LIGHT_THEME.base),
    ]
    assert block.label == "no-such-lang"


def test_untagged_block_uses_default_label():
    block = highlight_code(FencedCode("", "a\nb"), is_dark=True)
    assert block.label == "code"
    assert block.highlighted is False


def test_rich_text_keeps_payload():
    node = FencedCode("python", "x = 1\ny = 2")
    text = highlight_code(node, is_dark=True).to_rich_text()
    assert text.plain == node.text


def test_same_input_same_tokens():
    node = FencedCode("rust", "fn main() {}")
    assert highlight_code(node, True) == highlight_code(node, True)


# ── Copy acknowledgement ──


def test_copy_writes_raw_text_and_sets_flag():
    copied: list[str] = []
    scheduler = FakeScheduler()
    view = CodeBlockView(
        "print(1)", "python", clipboard=copied.append, schedule=scheduler,
    )

    assert view.copied is False
    assert view.button_label == "copy"
    view.copy()

    assert copied == ["print(1)"]
    assert view.copied is True
    assert view.button_label == "copied!"
    assert scheduler.timers[0].delay == COPY_RESET_SECONDS

    scheduler.timers[0].fire()
    assert view.copied is False


def test_second_copy_restarts_timer():
    scheduler = FakeScheduler()
    view = CodeBlockView("x", "", clipboard=lambda _: True, schedule=scheduler)

    view.copy()
    first = scheduler.timers[0]
    view.copy()

    assert first.cancelled is True
    assert len(scheduler.live) == 1
    assert view.copied is True

    first.fire()
    assert view.copied is True
    scheduler.live[0].fire()
    assert view.copied is False


def test_clipboard_failure_still_acknowledges():
    def _broken(_text):
        raise OSError("no clipboard")

    scheduler = FakeScheduler()
    view = CodeBlockView("x", "", clipboard=_broken, schedule=scheduler)
    view.copy()
    assert view.copied is True


def test_on_change_called_on_transitions_only():
    changes: list[bool] = []
    scheduler = FakeScheduler()
    ack = CopyAcknowledgement(schedule=scheduler, on_change=changes.append)
    ack.trigger()
    ack.trigger()
    scheduler.live[0].fire()
    assert changes == [True, False]
    assert ack.pending is False


def test_dispose_cancels_pending_reset():
    scheduler = FakeScheduler()
    view = CodeBlockView("x", "", clipboard=lambda _: True, schedule=scheduler)
    view.copy()
    view.dispose()
    assert scheduler.timers[0].cancelled is True
    assert view.copied is False


def test_views_are_independent():
    scheduler = FakeScheduler()
    renderer = CodeBlockRenderer(clipboard=lambda _: True, schedule=scheduler)
    node = FencedCode("python", "x = 1")
    _, first = renderer.render(node, True)
    _, second = renderer.render(node, True)

    first.copy()
    assert first.copied is True
    assert second.copied is False


def test_default_scheduler_resets_on_event_loop():
    async def _run() -> None:
        ack = CopyAcknowledgement(reset_after=0.01)
        ack.trigger()
        assert ack.copied is True
        await asyncio.sleep(0.05)
        assert ack.copied is False

    asyncio.run(_run())
