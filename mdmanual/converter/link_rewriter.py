"""Helpers for rewriting links between Markdown files into in-document anchors.

When every source file is merged into one printable document, a link such as
``./02_setup.md`` or ``guide.md#Quick Start`` must point at an anchor inside
that document instead. The PDF pass installs :class:`InternalAnchorExtension`
on the Markdown converter to perform the rewrite on the parsed tree.
"""

from __future__ import annotations

import re
import typing as typ
from urllib.parse import unquote_plus, urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .sources import generate_id

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

MARKDOWN_TARGET = re.compile(r"^\.?/?(?P<path>[^#]*\.md)(?P<fragment>#.*)?$")


def normalize_anchor(fragment: str) -> str:
    """Normalize a link fragment into the ASCII anchor form used by headings.

    The fragment is URL-decoded and stripped of its leading ``#``; spaces and
    underscores become hyphens, ASCII letters, digits, and hyphens are kept,
    and everything else (including non-Latin scripts) is dropped.

    Examples
    --------
    >>> normalize_anchor("#Quick%20Start_Guide")
    '#quick-start-guide'
    """
    decoded = unquote_plus(fragment)
    if decoded.startswith("#"):
        decoded = decoded[1:]
    kept: list[str] = []
    for char in decoded:
        if char.isascii() and (char.isalnum() or char == "-"):
            kept.append(char)
        elif char in (" ", "_"):
            kept.append("-")
    return "#" + "".join(kept).lower()


def rewrite_internal_link(target: str | None) -> str | None:
    """Return the in-document anchor for a Markdown link, or None to keep it.

    Links carrying a fragment resolve to the normalized fragment; links to a
    bare ``.md`` file resolve to that file's section id. External URLs and
    non-Markdown targets are left alone.
    """
    if not target:
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or target.startswith("//"):
        return None
    match = MARKDOWN_TARGET.match(target)
    if match is None:
        return None
    fragment = match.group("fragment")
    if fragment:
        return normalize_anchor(fragment)
    return f"#{generate_id(match.group('path'))}"


class InternalAnchorExtension(Extension):
    """Rewrite links between source Markdown files to in-document anchors."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the internal-anchor treeprocessor on the Markdown instance."""
        md.treeprocessors.register(
            InternalAnchorTreeprocessor(md), "mdmanual_internal_anchors", 15
        )


class InternalAnchorTreeprocessor(Treeprocessor):
    """Point ``*.md`` links at anchors inside the merged document."""

    def run(self, root: Element) -> Element:
        """Rewrite Markdown-file anchors in the parsed tree."""
        for element in root.iter("a"):
            rewritten = rewrite_internal_link(element.get("href"))
            if rewritten:
                element.set("href", rewritten)
        return root


__all__ = [
    "InternalAnchorExtension",
    "InternalAnchorTreeprocessor",
    "normalize_anchor",
    "rewrite_internal_link",
]
