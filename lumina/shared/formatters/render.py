"""Render pipeline — conversation snapshot to displayable structure.

``render_conversation`` is a pure projection of
``(turns, status, is_dark)``: assistant turns are parsed into block nodes
and every fenced code block is highlighted; user turns stay plain text.
Nothing here holds state; copy buttons and their timers belong to the
widgets that display the result.

The ``*_rich`` helpers turn the projection into Rich renderables. The TUI
and the one-shot ``--print`` mode share them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule as RichRule
from rich.style import Style
from rich.text import Text

from lumina.shared.formatters.code_block import RenderedCodeBlock, highlight_code
from lumina.shared.formatters.markdown import (
    Blockquote,
    FencedCode,
    Heading,
    InlineCode,
    InlineNode,
    Link,
    ListItem,
    Paragraph,
    Rule,
    TextSpan,
    parse_markdown,
)
from lumina.shared.models.message import Turn, TurnRole
from lumina.shared.models.session import SessionStatus

RenderedBlock = Union[Paragraph, Heading, ListItem, Blockquote, Rule, RenderedCodeBlock]


# ── Projection ──


@dataclass(frozen=True)
class RenderedTurn:
    turn: Turn
    # Empty for user turns, which display their raw text.
    blocks: tuple[RenderedBlock, ...] = ()

    @property
    def is_user(self) -> bool:
        return self.turn.role is TurnRole.USER

    @property
    def code_blocks(self) -> tuple[RenderedCodeBlock, ...]:
        return tuple(b for b in self.blocks if isinstance(b, RenderedCodeBlock))


@dataclass(frozen=True)
class RenderedConversation:
    turns: tuple[RenderedTurn, ...]
    status: SessionStatus
    is_dark: bool

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.SENDING

    @property
    def empty(self) -> bool:
        return not self.turns


def render_blocks(text: str, is_dark: bool) -> tuple[RenderedBlock, ...]:
    """Parse assistant text and highlight its code blocks."""
    return tuple(
        highlight_code(node, is_dark) if isinstance(node, FencedCode) else node
        for node in parse_markdown(text)
    )


def render_turn(turn: Turn, is_dark: bool) -> RenderedTurn:
    if turn.role is TurnRole.USER:
        return RenderedTurn(turn)
    return RenderedTurn(turn, render_blocks(turn.text, is_dark))


def render_conversation(
    turns: Sequence[Turn],
    status: SessionStatus,
    is_dark: bool,
) -> RenderedConversation:
    return RenderedConversation(
        turns=tuple(render_turn(turn, is_dark) for turn in turns),
        status=status,
        is_dark=is_dark,
    )


# ── Rich renderables ──


@dataclass(frozen=True)
class _Palette:
    text: str
    muted: str
    accent: str
    inline_fg: str
    inline_bg: str
    border: str
    user_bg: str


_DARK_PALETTE = _Palette(
    text="#e6e4df",
    muted="#8a8880",
    accent="#7ec8e3",
    inline_fg="#ec7882",
    inline_bg="#30302e",
    border="#3e3d3a",
    user_bg="#2c2a27",
)
_LIGHT_PALETTE = _Palette(
    text="#2d2b29",
    muted="#888880",
    accent="#2a7a9d",
    inline_fg="#c0404a",
    inline_bg="#f0eee6",
    border="#d8d5cc",
    user_bg="#eeece4",
)


def _palette(is_dark: bool) -> _Palette:
    return _DARK_PALETTE if is_dark else _LIGHT_PALETTE


def inline_to_text(
    children: Sequence[InlineNode], is_dark: bool, base_style: str = "",
) -> Text:
    """Inline spans as a Rich Text; links stay clickable in terminals."""
    pal = _palette(is_dark)
    text = Text(style=base_style or pal.text)
    for child in children:
        if isinstance(child, TextSpan):
            style = Style(bold=child.bold or None, italic=child.italic or None)
            text.append(child.text, style=style)
        elif isinstance(child, InlineCode):
            text.append(
                f" {child.text} ",
                style=Style(color=pal.inline_fg, bgcolor=pal.inline_bg),
            )
        elif isinstance(child, Link):
            text.append(
                child.text or child.href,
                style=Style(color=pal.accent, underline=True, link=child.href or None),
            )
    return text


def code_block_rich(block: RenderedCodeBlock, copied: bool = False) -> Panel:
    pal = _palette(block.theme.is_dark)
    return Panel(
        block.to_rich_text(),
        title=Text(block.label, style=pal.muted),
        title_align="left",
        subtitle=Text("copied!" if copied else "copy", style=pal.muted),
        subtitle_align="right",
        box=box.ROUNDED,
        border_style=pal.border,
        padding=(0, 1),
    )


def block_to_rich(block: RenderedBlock, is_dark: bool) -> RenderableType:
    pal = _palette(is_dark)
    if isinstance(block, RenderedCodeBlock):
        return code_block_rich(block)
    if isinstance(block, Heading):
        style = {1: "bold underline", 2: "bold", 3: "bold italic"}.get(block.level, "bold")
        return inline_to_text(block.children, is_dark, f"{style} {pal.text}")
    if isinstance(block, ListItem):
        marker = f"{block.number}. " if block.ordered and block.number else (
            "   " if block.ordered else "•  "
        )
        line = Text(f"  {marker}", style=pal.muted)
        line.append_text(inline_to_text(block.children, is_dark))
        return line
    if isinstance(block, Blockquote):
        line = Text("▌ ", style=pal.border)
        line.append_text(inline_to_text(block.children, is_dark, f"italic {pal.muted}"))
        return line
    if isinstance(block, Rule):
        return RichRule(style=pal.border)
    return inline_to_text(block.children, is_dark)


def blocks_to_rich(blocks: Sequence[RenderedBlock], is_dark: bool) -> Group:
    """Blocks separated by blank lines; consecutive list items stay tight."""
    parts: list[RenderableType] = []
    prev: RenderedBlock | None = None
    for block in blocks:
        if prev is not None and not (
            isinstance(prev, ListItem) and isinstance(block, ListItem)
        ):
            parts.append(Text(""))
        parts.append(block_to_rich(block, is_dark))
        prev = block
    return Group(*parts)


def user_turn_rich(turn: Turn, is_dark: bool) -> Text:
    pal = _palette(is_dark)
    return Text(turn.text, style=Style(color=pal.text, bgcolor=pal.user_bg))


def render_turn_rich(rendered: RenderedTurn, is_dark: bool) -> RenderableType:
    if rendered.is_user:
        return user_turn_rich(rendered.turn, is_dark)
    return blocks_to_rich(rendered.blocks, is_dark)
