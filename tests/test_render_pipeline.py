"""Tests for the conversation render pipeline."""
from __future__ import annotations

from rich.console import Console

from lumina.shared.formatters.code_block import RenderedCodeBlock
from lumina.shared.formatters.markdown import Paragraph, TextSpan
from lumina.shared.formatters.render import (
    blocks_to_rich,
    render_conversation,
    render_turn,
    render_turn_rich,
)
from lumina.shared.models.message import Turn, TurnRole
from lumina.shared.models.session import SessionStatus


def _plain(renderable) -> str:
    console = Console(width=80, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_empty_conversation():
    rendered = render_conversation((), SessionStatus.IDLE, True)
    assert rendered.empty is True
    assert rendered.loading is False


def test_sending_status_marks_loading():
    turns = (Turn(TurnRole.USER, "Hello"),)
    rendered = render_conversation(turns, SessionStatus.SENDING, True)
    assert rendered.loading is True
    assert rendered.turns[0].is_user


def test_user_turn_is_not_parsed():
    turn = Turn(TurnRole.USER, "**not bold** `x`")
    rendered = render_turn(turn, is_dark=True)
    assert rendered.blocks == ()
    assert "**not bold** `x`" in _plain(render_turn_rich(rendered, True))


def test_assistant_turn_parsed_and_highlighted():
    turn = Turn(TurnRole.ASSISTANT, "Try this:\n\n```python\nprint('hi')\n```")
    rendered = render_turn(turn, is_dark=False)

    assert rendered.blocks[0] == Paragraph((TextSpan("Try this:"),))
    code = rendered.code_blocks
    assert len(code) == 1
    assert isinstance(code[0], RenderedCodeBlock)
    assert code[0].code == "print('hi')"
    assert code[0].theme.is_dark is False


def test_render_is_pure():
    turns = (
        Turn(TurnRole.USER, "Hello"),
        Turn(TurnRole.ASSISTANT, "# Hi\n\n- one\n- two"),
    )
    first = render_conversation(turns, SessionStatus.IDLE, True)
    second = render_conversation(turns, SessionStatus.IDLE, True)
    assert first == second


def test_theme_flag_changes_code_colours_only():
    turns = (Turn(TurnRole.ASSISTANT, "```python\nx = 1\n```"),)
    dark = render_conversation(turns, SessionStatus.IDLE, True)
    light = render_conversation(turns, SessionStatus.IDLE, False)

    dark_block = dark.turns[0].code_blocks[0]
    light_block = light.turns[0].code_blocks[0]
    assert dark_block.code == light_block.code
    assert [t.text for t in dark_block.tokens] == [t.text for t in light_block.tokens]
    assert dark_block.tokens != light_block.tokens


def test_rich_output_contains_prose_and_code():
    turn = Turn(
        TurnRole.ASSISTANT,
        "## Steps\n\n1. first\n2. second\n\n> note\n\n```sh\necho hi\n```",
    )
    rendered = render_turn(turn, is_dark=True)
    text = _plain(render_turn_rich(rendered, True))

    assert "Steps" in text
    assert "1. first" in text
    assert "2. second" in text
    assert "note" in text
    assert "echo hi" in text
    assert "sh" in text
    assert "copy" in text


def test_blocks_to_rich_handles_empty():
    assert _plain(blocks_to_rich((), True)).strip() == ""
