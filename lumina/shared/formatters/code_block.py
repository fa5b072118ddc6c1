"""Code block rendering — syntax colouring and the copy affordance.

Tokenization is delegated to Pygments, keyed by the block's language tag.
Pygments token types are folded onto the theme's categories by walking up
the token hierarchy, so ``String.Regex`` resolves to ``regex`` while
``String.Double`` falls back to ``string``. Unknown languages render as a
single run in the theme's base colour.

Each visible block owns a ``CodeBlockView`` holding its ephemeral state
(``language``, ``copied``). ``copied`` reverts two seconds after the last
copy; copying again restarts the window rather than stacking timers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Protocol

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import (
    Comment,
    Generic,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Token,
    _TokenType,
)
from pygments.util import ClassNotFound
from rich.text import Text

from lumina.shared.formatters.markdown import FencedCode
from lumina.shared.formatters.theme import TokenTheme, get_theme

logger = logging.getLogger(__name__)

COPY_RESET_SECONDS = 2.0
DEFAULT_LABEL = "code"

_CATEGORY_BY_TOKEN: dict[_TokenType, str] = {
    Comment: "comment",
    String: "string",
    String.Regex: "regex",
    Number: "number",
    Keyword: "keyword",
    Keyword.Constant: "constant",
    Name.Function: "function",
    Name.Decorator: "function",
    Name.Class: "class-name",
    Name.Exception: "class-name",
    Name.Builtin: "builtin",
    Name.Constant: "constant",
    Name.Tag: "tag",
    Name.Attribute: "attr-name",
    Name.Property: "property",
    Name.Entity: "property",
    Name.Variable: "variable",
    Operator: "operator",
    Operator.Word: "keyword",
    Punctuation: "punctuation",
    Generic.Inserted: "inserted",
    Generic.Deleted: "deleted",
    Generic.Strong: "important",
}


def token_category(ttype: _TokenType) -> str | None:
    """Theme category for a Pygments token type, or None for plain text."""
    while ttype is not Token:
        category = _CATEGORY_BY_TOKEN.get(ttype)
        if category is not None:
            return category
        ttype = ttype.parent
    return None


@lru_cache(maxsize=64)
def _lexer_for(language: str) -> Lexer | None:
    if not language:
        return None
    try:
        # Keep the payload byte-for-byte: no newline stripping or padding.
        return get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        logger.debug("No lexer for language %r; rendering unstyled", language)
        return None


# ── Rendered output ──


@dataclass(frozen=True)
class StyledToken:
    text: str
    category: str | None
    style: str


@dataclass(frozen=True)
class RenderedCodeBlock:
    """A highlighted code block, ready for display."""

    node: FencedCode
    label: str
    tokens: tuple[StyledToken, ...]
    highlighted: bool
    theme: TokenTheme

    @property
    def code(self) -> str:
        """The original payload, pre-theme and pre-tokenization."""
        return self.node.text

    def to_rich_text(self) -> Text:
        text = Text(style=self.theme.base, no_wrap=True)
        for token in self.tokens:
            text.append(token.text, style=token.style)
        return text


def highlight_code(node: FencedCode, is_dark: bool) -> RenderedCodeBlock:
    """Tokenize and colour a code block; never raises for unknown languages."""
    theme = get_theme(is_dark)
    label = (node.language or DEFAULT_LABEL).lower()
    lexer = _lexer_for(node.language)

    if lexer is None or not node.text:
        tokens: tuple[StyledToken, ...] = ()
        if node.text:
            tokens = (StyledToken(node.text, None, theme.base),)
        return RenderedCodeBlock(node, label, tokens, False, theme)

    runs: list[StyledToken] = []
    for ttype, value in lexer.get_tokens(node.text):
        if not value:
            continue
        category = token_category(ttype)
        if runs and runs[-1].category == category:
            prev = runs[-1]
            runs[-1] = StyledToken(prev.text + value, category, prev.style)
        else:
            runs.append(StyledToken(value, category, theme.style_for(category)))
    return RenderedCodeBlock(node, label, tuple(runs), True, theme)


# ── Copy affordance ──


class Cancellable(Protocol):
    def cancel(self) -> object: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]
Clipboard = Callable[[str], object]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Schedule on the running asyncio loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class CopyAcknowledgement:
    """Timed ``copied`` flag with at most one pending reset."""

    def __init__(
        self,
        *,
        schedule: Scheduler | None = None,
        reset_after: float = COPY_RESET_SECONDS,
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self._schedule = schedule or loop_scheduler
        self._reset_after = reset_after
        self._on_change = on_change
        self._pending: Cancellable | None = None
        self._copied = False

    @property
    def copied(self) -> bool:
        return self._copied

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._set(True)
        self._pending = self._schedule(self._reset_after, self._reset)

    def cancel(self) -> None:
        """Drop any pending reset and clear the flag (block going away)."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._copied = False

    def _reset(self) -> None:
        self._pending = None
        self._set(False)

    def _set(self, value: bool) -> None:
        changed = value != self._copied
        self._copied = value
        if changed and self._on_change is not None:
            self._on_change(value)


class CodeBlockView:
    """Per-instance view state of one rendered code block."""

    def __init__(
        self,
        code: str,
        language: str,
        *,
        clipboard: Clipboard,
        schedule: Scheduler | None = None,
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.code = code
        self.language = language
        self._clipboard = clipboard
        self._ack = CopyAcknowledgement(schedule=schedule, on_change=on_change)

    @property
    def copied(self) -> bool:
        return self._ack.copied

    @property
    def button_label(self) -> str:
        return "copied!" if self.copied else "copy"

    def copy(self) -> None:
        """Copy the raw payload; the acknowledgement is shown regardless."""
        try:
            ok = self._clipboard(self.code)
        except Exception:
            logger.warning("Clipboard write failed", exc_info=True)
        else:
            if ok is False:
                logger.debug("Clipboard reported failure for %d chars", len(self.code))
        self._ack.trigger()

    def dispose(self) -> None:
        self._ack.cancel()


class CodeBlockRenderer:
    """Binds highlighting to a clipboard and timer source."""

    def __init__(
        self,
        clipboard: Clipboard,
        schedule: Scheduler | None = None,
    ) -> None:
        self._clipboard = clipboard
        self._schedule = schedule

    def highlight(self, node: FencedCode, is_dark: bool) -> RenderedCodeBlock:
        return highlight_code(node, is_dark)

    def render(
        self,
        node: FencedCode,
        is_dark: bool,
        on_change: Callable[[bool], None] | None = None,
    ) -> tuple[RenderedCodeBlock, CodeBlockView]:
        """Highlighted tokens plus a fresh view exposing the copy action."""
        view = CodeBlockView(
            node.text,
            node.language,
            clipboard=self._clipboard,
            schedule=self._schedule,
            on_change=on_change,
        )
        return highlight_code(node, is_dark), view
