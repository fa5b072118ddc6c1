"""Token colour themes for code blocks.

A fixed mapping from the dark/light flag to a complete palette. Every
category in ``TOKEN_CATEGORIES`` must resolve to a colour for both flag
values; an incomplete palette is a programming error and fails at import.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from lumina.engine.errors import ThemeError

TOKEN_CATEGORIES: tuple[str, ...] = (
    "base",
    "comment",
    "string",
    "keyword",
    "number",
    "function",
    "operator",
    "punctuation",
    "property",
    "constant",
    "tag",
    "attr-name",
    "builtin",
    "class-name",
    "variable",
    "regex",
    "inserted",
    "deleted",
    "important",
)

# Categories that carry a text attribute on top of their colour.
_CATEGORY_ATTRIBUTES: dict[str, str] = {
    "comment": "italic",
    "important": "bold",
}

_DARK = {
    "base": "#9be963",
    "tag": "#ec7882",
    "string": "#9be963",
    "keyword": "#cc7bf4",
    "number": "#5de7e7",
    "comment": "#6e6e68",
    "function": "#7ec8e3",
    "operator": "#e6e4df",
    "punctuation": "#d3d7de",
    "property": "#f47b85",
    "constant": "#5de7e7",
    "builtin": "#cc7bf4",
    "attr": "#ec7882",
}

_LIGHT = {
    "base": "#2d2b29",
    "tag": "#c0404a",
    "string": "#5a8a2e",
    "keyword": "#8b4dbf",
    "number": "#2a9d9d",
    "comment": "#888880",
    "function": "#2a7a9d",
    "operator": "#2d2b29",
    "punctuation": "#666660",
    "property": "#bb1421",
    "constant": "#2a9d9d",
    "builtin": "#8b4dbf",
    "attr": "#c0404a",
}


def _expand(c: Mapping[str, str]) -> dict[str, str | None]:
    """Spread the base swatches over every token category."""
    return {
        "base": c.get("base"),
        "comment": c.get("comment"),
        "string": c.get("string"),
        "keyword": c.get("keyword"),
        "number": c.get("number"),
        "function": c.get("function"),
        "operator": c.get("operator"),
        "punctuation": c.get("punctuation"),
        "property": c.get("property"),
        "constant": c.get("constant"),
        "tag": c.get("tag"),
        "attr-name": c.get("attr"),
        "builtin": c.get("builtin"),
        "class-name": c.get("function"),
        "variable": c.get("base"),
        "regex": c.get("string"),
        "inserted": c.get("string"),
        "deleted": c.get("tag"),
        "important": c.get("keyword"),
    }


@dataclass(frozen=True)
class TokenTheme:
    name: str
    is_dark: bool
    colors: Mapping[str, str]

    def color_for(self, category: str | None) -> str:
        """Colour for a category; ``None`` or unmapped categories use base."""
        if category is None:
            return self.colors["base"]
        return self.colors.get(category, self.colors["base"])

    def style_for(self, category: str | None) -> str:
        """Rich style string (colour plus attribute) for a category."""
        color = self.color_for(category)
        attribute = _CATEGORY_ATTRIBUTES.get(category or "")
        return f"{attribute} {color}" if attribute else color

    @property
    def base(self) -> str:
        return self.colors["base"]


def _build(name: str, is_dark: bool, swatches: Mapping[str, str]) -> TokenTheme:
    colors = _expand(swatches)
    missing = [cat for cat in TOKEN_CATEGORIES if not colors.get(cat)]
    if missing:
        raise ThemeError(name, missing)
    return TokenTheme(name=name, is_dark=is_dark, colors=MappingProxyType(colors))


DARK_THEME = _build("lumina-dark", True, _DARK)
LIGHT_THEME = _build("lumina-light", False, _LIGHT)


def get_theme(is_dark: bool) -> TokenTheme:
    return DARK_THEME if is_dark else LIGHT_THEME
