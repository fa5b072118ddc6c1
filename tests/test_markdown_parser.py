"""Tests for markdown parsing into render nodes."""
from __future__ import annotations

from lumina.shared.formatters.markdown import (
    Blockquote,
    FencedCode,
    Heading,
    InlineCode,
    Link,
    ListItem,
    Paragraph,
    Rule,
    TextSpan,
    classify_code,
    parse_markdown,
    plain_text,
    resolve_language,
)


# ── Code classification ──


def test_fenced_python_block():
    nodes = parse_markdown("```python\nprint(1)\n```")
    assert nodes == (FencedCode(language="python", text="print(1)"),)


def test_fence_without_language_is_still_a_block():
    nodes = parse_markdown("```\nplain text\n```")
    assert nodes == (FencedCode(language="", text="plain text"),)


def test_fence_keeps_inner_whitespace():
    nodes = parse_markdown("```js\n  let a = 1;\n\n  let b = 2;\n```")
    assert nodes == (FencedCode("js", "  let a = 1;\n\n  let b = 2;"),)


def test_classify_multiline_untagged_is_block():
    assert classify_code("a\nb") == FencedCode(language="", text="a\nb")


def test_classify_single_line_untagged_is_inline():
    assert classify_code("a") == InlineCode("a")


def test_classify_tagged_single_line_is_block():
    assert classify_code("x = 1", "python") == FencedCode("python", "x = 1")


def test_resolve_language_variants():
    assert resolve_language("python") == "python"
    assert resolve_language("language-Rust") == "rust"
    assert resolve_language("  ts  {linenos} ") == "ts"
    assert resolve_language("") == ""


def test_inline_code_span():
    nodes = parse_markdown("Run `ls -la` now")
    assert nodes == (
        Paragraph((TextSpan("Run "), InlineCode("ls -la"), TextSpan(" now"))),
    )


def test_unterminated_fence_renders_as_text():
    nodes = parse_markdown("```js\nlet x")
    assert nodes == (Paragraph((TextSpan("```js\nlet x"),)),)


def test_form_feed_inside_fence_stays_in_code():
    nodes = parse_markdown("```python\nx = 1\x0cy = 2\n```")
    assert nodes == (FencedCode("python", "x = 1\x0cy = 2"),)


def test_line_separator_in_prose_keeps_following_fence_aligned():
    nodes = parse_markdown("intro\u2028more\n\n```js\nlet a\n```")
    assert nodes[-1] == FencedCode("js", "let a")
    paragraphs = [n for n in nodes if isinstance(n, Paragraph)]
    assert all("```" not in plain_text(p.children) for p in paragraphs)


def test_indented_code_is_always_a_block():
    assert parse_markdown("    x = 1\n") == (FencedCode("", "x = 1"),)
    nodes = parse_markdown("text\n\n    one line")
    assert nodes == (
        Paragraph((TextSpan("text"),)),
        FencedCode("", "one line"),
    )


# ── Block structure ──


def test_headings_clamp_to_three_levels():
    nodes = parse_markdown("# One\n\n## Two\n\n#### Four")
    assert [n.level for n in nodes] == [1, 2, 3]
    assert all(isinstance(n, Heading) for n in nodes)
    assert plain_text(nodes[2].children) == "Four"


def test_bullet_list():
    nodes = parse_markdown("- apples\n- pears")
    assert nodes == (
        ListItem(ordered=False, children=(TextSpan("apples"),)),
        ListItem(ordered=False, children=(TextSpan("pears"),)),
    )


def test_ordered_list_numbers():
    nodes = parse_markdown("1. one\n2. two\n3. three")
    assert [(n.ordered, n.number) for n in nodes] == [
        (True, 1), (True, 2), (True, 3),
    ]


def test_ordered_list_custom_start():
    nodes = parse_markdown("4. four\n5. five")
    assert [n.number for n in nodes] == [4, 5]


def test_blockquote():
    nodes = parse_markdown("> stay curious")
    assert nodes == (Blockquote((TextSpan("stay curious"),)),)


def test_nested_bullets_flatten_in_order():
    nodes = parse_markdown("- a\n  - b\n- c")
    assert nodes == (
        ListItem(ordered=False, children=(TextSpan("a"),)),
        ListItem(ordered=False, children=(TextSpan("b"),)),
        ListItem(ordered=False, children=(TextSpan("c"),)),
    )


def test_fence_inside_ordered_item_keeps_numbering():
    nodes = parse_markdown("1. step\n   ```sh\n   ls\n   ```\n2. next")
    assert nodes == (
        ListItem(ordered=True, children=(TextSpan("step"),), number=1),
        FencedCode("sh", "ls"),
        ListItem(ordered=True, children=(TextSpan("next"),), number=2),
    )


def test_list_inside_blockquote():
    nodes = parse_markdown("> - q1\n> - q2")
    assert nodes == (
        ListItem(ordered=False, children=(TextSpan("q1"),)),
        ListItem(ordered=False, children=(TextSpan("q2"),)),
    )


def test_horizontal_rule_between_paragraphs():
    nodes = parse_markdown("above\n\n---\n\nbelow")
    assert nodes == (
        Paragraph((TextSpan("above"),)),
        Rule(),
        Paragraph((TextSpan("below"),)),
    )


def test_bold_italic_and_link():
    nodes = parse_markdown("**bold** and *soft* see [docs](https://example.com)")
    assert nodes == (
        Paragraph((
            TextSpan("bold", bold=True),
            TextSpan(" and "),
            TextSpan("soft", italic=True),
            TextSpan(" see "),
            Link(href="https://example.com", text="docs"),
        )),
    )


def test_mixed_prose_and_code_keep_order():
    text = "Intro\n\n```python\nx = 1\n```\n\nOutro"
    nodes = parse_markdown(text)
    assert nodes == (
        Paragraph((TextSpan("Intro"),)),
        FencedCode("python", "x = 1"),
        Paragraph((TextSpan("Outro"),)),
    )


def test_raw_html_is_not_interpreted():
    nodes = parse_markdown("<b>hi</b>")
    assert "<b>" in plain_text(nodes[0].children)


def test_empty_text():
    assert parse_markdown("") == ()


def test_parsing_is_deterministic():
    text = "# Title\n\n- a\n- b\n\n> q\n\n```go\nfunc main() {}\n```"
    assert parse_markdown(text) == parse_markdown(text)
