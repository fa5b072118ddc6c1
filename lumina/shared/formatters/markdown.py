"""Markdown block parsing — model output to typed render nodes.

Parses text with ``markdown-it-py`` (CommonMark rules) and flattens the token
stream into a sequence of frozen ``RenderNode`` dataclasses that carry no
styling. Renderers (Rich, Textual) decide how each node looks.

Block nodes:
    Paragraph, Heading(level 1..3), ListItem(ordered, number), Blockquote,
    Rule, FencedCode(language, text)

Inline nodes (children of text-bearing blocks):
    TextSpan(text, bold, italic), Link(href, text), InlineCode(text)

Parsing never raises on malformed input. An unterminated fence comes back as
a plain paragraph holding the raw source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Union

from markdown_it import MarkdownIt
from markdown_it.token import Token


# ── Inline nodes ──


@dataclass(frozen=True)
class TextSpan:
    text: str
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class Link:
    href: str
    text: str


@dataclass(frozen=True)
class InlineCode:
    text: str


InlineNode = Union[TextSpan, Link, InlineCode]


# ── Block nodes ──


@dataclass(frozen=True)
class Paragraph:
    children: tuple[InlineNode, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int
    children: tuple[InlineNode, ...] = ()


@dataclass(frozen=True)
class ListItem:
    ordered: bool
    children: tuple[InlineNode, ...] = ()
    number: int | None = None


@dataclass(frozen=True)
class Blockquote:
    children: tuple[InlineNode, ...] = ()


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class FencedCode:
    language: str
    text: str


BlockNode = Union[Paragraph, Heading, ListItem, Blockquote, Rule, FencedCode]
RenderNode = Union[BlockNode, InlineNode]

MAX_HEADING_LEVEL = 3

_md = MarkdownIt("commonmark", {"html": False})

_LANGUAGE_CLASS_PREFIX = "language-"
_QUOTE_PREFIX_RE = re.compile(r"^[\s>]*")


# ── Code classification ──


def resolve_language(info: str) -> str:
    """Language tag from a fence info string; empty when absent.

    Accepts both ``python`` and the class-style ``language-python``.
    """
    words = info.strip().split()
    if not words:
        return ""
    tag = words[0]
    if tag.startswith(_LANGUAGE_CLASS_PREFIX):
        tag = tag[len(_LANGUAGE_CLASS_PREFIX):]
    return tag.lower()


def _strip_closing_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def classify_code(
    text: str, language: str = "", *, fenced: bool = False,
) -> FencedCode | InlineCode:
    """Decide whether a code payload renders as a block or inline.

    Fenced or language-tagged payloads are always blocks. Without a fence, a
    payload containing a newline is still treated as a block so multi-line
    snippets never render inline.
    """
    if fenced or language or "\n" in text:
        return FencedCode(language=language, text=_strip_closing_newline(text))
    return InlineCode(text)


# ── Inline flattening ──


def _merge_spans(nodes: list[InlineNode]) -> tuple[InlineNode, ...]:
    merged: list[InlineNode] = []
    for node in nodes:
        prev = merged[-1] if merged else None
        if (
            isinstance(node, TextSpan)
            and isinstance(prev, TextSpan)
            and (prev.bold, prev.italic) == (node.bold, node.italic)
        ):
            merged[-1] = TextSpan(prev.text + node.text, prev.bold, prev.italic)
        elif not (isinstance(node, TextSpan) and not node.text):
            merged.append(node)
    return tuple(merged)


def _flatten_inline(
    token: Token, deferred: list[FencedCode],
) -> tuple[InlineNode, ...]:
    """Flatten an ``inline`` token's children into inline nodes.

    Code spans that classify as blocks are appended to ``deferred`` and
    emitted after the enclosing block.
    """
    nodes: list[InlineNode] = []
    bold = 0
    italic = 0
    link_href: str | None = None
    link_text: list[str] = []

    for child in token.children or []:
        kind = child.type
        if link_href is not None and kind not in ("link_close",):
            if kind in ("text", "code_inline", "image"):
                link_text.append(child.content)
            elif kind in ("softbreak", "hardbreak"):
                link_text.append(" ")
            continue
        if kind == "text":
            nodes.append(TextSpan(child.content, bool(bold), bool(italic)))
        elif kind == "strong_open":
            bold += 1
        elif kind == "strong_close":
            bold = max(0, bold - 1)
        elif kind == "em_open":
            italic += 1
        elif kind == "em_close":
            italic = max(0, italic - 1)
        elif kind == "softbreak":
            nodes.append(TextSpan(" ", bool(bold), bool(italic)))
        elif kind == "hardbreak":
            nodes.append(TextSpan("\n", bool(bold), bool(italic)))
        elif kind == "code_inline":
            code = classify_code(child.content)
            if isinstance(code, FencedCode):
                deferred.append(code)
            else:
                nodes.append(code)
        elif kind == "link_open":
            link_href = str(child.attrGet("href") or "")
            link_text = []
        elif kind == "link_close":
            if link_href is not None:
                nodes.append(Link(href=link_href, text="".join(link_text)))
            link_href = None
        elif kind == "image":
            nodes.append(TextSpan(child.content, bool(bold), bool(italic)))
        else:
            nodes.append(TextSpan(child.content, bool(bold), bool(italic)))

    if link_href is not None:
        nodes.append(Link(href=link_href, text="".join(link_text)))
    return _merge_spans(nodes)


# ── Block flattening ──


def _source_lines(text: str) -> list[str]:
    """Split source lines the way markdown-it does, so token maps index them."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def _fence_is_closed(token: Token, lines: list[str]) -> bool:
    if not token.map:
        return True
    start, end = token.map
    if end - start < 2 or end > len(lines):
        return False
    closing = _QUOTE_PREFIX_RE.sub("", lines[end - 1]).rstrip()
    marker = token.markup[:1]
    return (
        len(closing) >= len(token.markup)
        and set(closing) == {marker}
    )


@dataclass
class _ListFrame:
    ordered: bool
    next_number: int


@dataclass
class _ItemFrame:
    ordered: bool
    number: int | None
    quote_depth: int
    # Inline content not yet emitted; None once flushed.
    pending: list[InlineNode] | None = field(default_factory=list)
    emitted: bool = False


@dataclass
class _BlockState:
    nodes: list[BlockNode] = field(default_factory=list)
    lists: list[_ListFrame] = field(default_factory=list)
    items: list[_ItemFrame] = field(default_factory=list)
    quote_depth: int = 0
    heading_level: int | None = None

    def flush_item(self) -> None:
        if not self.items:
            return
        item = self.items[-1]
        if item.pending is not None and (item.pending or not item.emitted):
            self.nodes.append(ListItem(
                ordered=item.ordered,
                children=_merge_spans(item.pending),
                number=item.number if not item.emitted else None,
            ))
            item.emitted = True
        item.pending = None

    def current_item(self) -> _ItemFrame | None:
        if self.items and self.items[-1].quote_depth == self.quote_depth:
            return self.items[-1]
        return None


def parse_markdown(text: str) -> tuple[BlockNode, ...]:
    """Parse raw turn text into an ordered tuple of block nodes.

    Parsing the same text twice yields equal tuples.
    """
    if not text:
        return ()

    tokens = _md.parse(text)
    lines = _source_lines(text)
    state = _BlockState()

    for token in tokens:
        kind = token.type

        if kind in ("bullet_list_open", "ordered_list_open"):
            state.flush_item()
            start = token.attrGet("start") if kind == "ordered_list_open" else None
            state.lists.append(_ListFrame(
                ordered=kind == "ordered_list_open",
                next_number=int(start) if start is not None else 1,
            ))
        elif kind in ("bullet_list_close", "ordered_list_close"):
            if state.lists:
                state.lists.pop()
        elif kind == "list_item_open":
            state.flush_item()
            frame = state.lists[-1] if state.lists else _ListFrame(False, 1)
            state.items.append(_ItemFrame(
                ordered=frame.ordered,
                number=frame.next_number if frame.ordered else None,
                quote_depth=state.quote_depth,
            ))
            frame.next_number += 1
        elif kind == "list_item_close":
            state.flush_item()
            if state.items:
                state.items.pop()
        elif kind == "blockquote_open":
            state.flush_item()
            state.quote_depth += 1
        elif kind == "blockquote_close":
            state.quote_depth = max(0, state.quote_depth - 1)
        elif kind == "heading_open":
            level = int(token.tag[1:]) if token.tag[1:].isdigit() else 1
            state.heading_level = min(level, MAX_HEADING_LEVEL)
        elif kind == "heading_close":
            state.heading_level = None
        elif kind == "hr":
            state.flush_item()
            state.nodes.append(Rule())
        elif kind == "fence":
            state.flush_item()
            if _fence_is_closed(token, lines):
                state.nodes.append(classify_code(
                    token.content, resolve_language(token.info), fenced=True,
                ))
            else:
                raw = f"{token.markup}{token.info}\n{token.content}"
                state.nodes.append(Paragraph((TextSpan(raw.rstrip("\n")),)))
        elif kind == "code_block":
            state.flush_item()
            # Indented code always ends in a newline, so it is always a block.
            state.nodes.append(FencedCode("", _strip_closing_newline(token.content)))
        elif kind == "html_block":
            state.flush_item()
            state.nodes.append(Paragraph((TextSpan(token.content.rstrip("\n")),)))
        elif kind == "inline":
            deferred: list[FencedCode] = []
            children = _flatten_inline(token, deferred)
            item = state.current_item()
            if item is not None:
                if item.pending is None:
                    item.pending = []
                elif item.pending:
                    item.pending.append(TextSpan("\n"))
                item.pending.extend(children)
                if deferred:
                    state.flush_item()
            elif state.quote_depth:
                if children:
                    state.nodes.append(Blockquote(children))
            elif state.heading_level is not None:
                state.nodes.append(Heading(state.heading_level, children))
            elif children:
                state.nodes.append(Paragraph(children))
            state.nodes.extend(deferred)

    while state.items:
        state.flush_item()
        state.items.pop()
    return tuple(state.nodes)


def plain_text(children: tuple[InlineNode, ...]) -> str:
    """Concatenate the visible text of inline nodes."""
    return "".join(child.text for child in children)
