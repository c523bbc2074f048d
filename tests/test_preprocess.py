"""Unit tests for the line-oriented Markdown rewrites."""

from __future__ import annotations

from mdmanual.converter.preprocess import (
    preprocess_alerts,
    preprocess_emoji,
    preprocess_highlight,
    preprocess_markdown,
)


def test_prefix_callouts_continue_until_blank_line() -> None:
    """``!>`` and ``?>`` open alerts that absorb following non-blank lines."""
    source = "!> Back up first\nthen upgrade\n\n?> Tip here\nafter"
    assert preprocess_alerts(source) == (
        "> [!IMPORTANT] Back up first\n> then upgrade\n\n> [!TIP] Tip here\n> after"
    )


def test_directive_with_title_and_blank_interior_line() -> None:
    """Docusaurus blocks become blockquotes; blank lines keep paragraph breaks."""
    source = ":::danger[Hot surface]\nDo not touch.\n\nReally.\n:::\nAfter"
    assert preprocess_alerts(source) == (
        "> [!CAUTION] **Hot surface**\n> Do not touch.\n>\n> Really.\n\nAfter"
    )


def test_directive_info_maps_to_note() -> None:
    """``info`` directives use the NOTE alert type."""
    assert preprocess_alerts(":::info\nBody\n:::").startswith("> [!NOTE]\n> Body")


def test_unknown_directive_passes_through() -> None:
    """Unrecognized directive types stay literal text."""
    source = ":::details\nBody\n:::"
    assert preprocess_alerts(source) == source


def test_highlight_spans_become_mark_tags() -> None:
    """``==text==`` turns into a highlight tag."""
    assert preprocess_highlight("a ==key== b") == "a <mark>key</mark> b"


def test_emoji_known_and_unknown_tokens() -> None:
    """Known shortcodes are replaced, unknown ones are kept verbatim."""
    assert preprocess_emoji(":rocket: :not_an_emoji:") == "\U0001f680 :not_an_emoji:"


def test_preprocess_markdown_applies_every_rewrite() -> None:
    """The combined pre-pass handles alerts, highlights, and emoji together."""
    result = preprocess_markdown("?> ==Fast== :zap:")
    assert result == "> [!TIP] <mark>Fast</mark> ⚡"
