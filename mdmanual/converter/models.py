"""Shared dataclasses used by the converter pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(slots=True)
class SubHeading:
    """Second-level heading tracked for the two-level table of contents.

    Attributes
    ----------
    id : str
        Anchor id assigned to the ``<h2>`` element.
    title : str
        Plain-text heading with tags stripped and entities decoded.
    level : int
        Heading level; always ``2`` for extracted sub-headings.
    page_number : int
        Page relative to the first body page; ``0`` until analyzed.
    """

    id: str
    title: str
    level: int = 2
    page_number: int = 0

    def to_manifest(self) -> dict[str, typ.Any]:
        """Return the manifest representation consumed by the analyzer."""
        return {"id": self.id, "title": self.title, "level": self.level}


@dc.dataclass(slots=True)
class Section:
    """One published section of the manual.

    Attributes
    ----------
    id : str
        Stable slug derived from the source filename; the join key between
        Markdown, HTML, the draft PDF, and page-number injection.
    title : str
        First heading found in the source file.
    level : int
        ``1`` for top-level sections, ``2`` when the leading heading was
        second-level, ``0`` when untitled.
    content : str
        Processed HTML body (excluded from the manifest).
    subheadings : list[SubHeading]
        Ordered sub-headings, including those merged from later files.
    page_number : int
        Page relative to the first body page; ``0`` until analyzed.
    """

    id: str
    title: str
    level: int
    content: str
    subheadings: list[SubHeading] = dc.field(default_factory=list)
    page_number: int = 0

    def merge(self, section_id: str, html: str, subheadings: list[SubHeading]) -> None:
        """Append a second-level file's body and outline to this section."""
        self.content += f'\n<div id="{section_id}"></div>\n{html}'
        self.subheadings.extend(subheadings)

    def to_manifest(self) -> dict[str, typ.Any]:
        """Return the manifest representation (body HTML excluded)."""
        return {
            "id": self.id,
            "title": self.title,
            "level": self.level,
            "subheadings": [sub.to_manifest() for sub in self.subheadings],
        }


@dc.dataclass(slots=True)
class ManualContext:
    """Record handed to the document template."""

    title: str
    subtitle: str
    version: str
    date: str
    author: str
    header: str
    footer: str
    copyright: str
    sections: list[Section]


__all__ = ["ManualContext", "Section", "SubHeading"]
