"""Locate section headings on the pages of a rendered PDF.

The browser engine reports nothing about where each HTML element lands, so
page numbers are recovered from the draft PDF itself: every page's plain text
is extracted and searched for the titles listed in the sections manifest.
Cover and table-of-contents pages are skipped first, either by a caller
supplied count or by a text-density heuristic that tells TOC pages (many
short titles, dot leaders) from body pages (prose under a few headings).

Page numbers in the result are relative to the first body page, which is
page 1 no matter how many cover and TOC pages precede it; ``0`` means the
title was not found.

Example
-------
>>> from pathlib import Path
>>> from mdmanual.pdf.analyzer import analyze_pdf
>>> result = analyze_pdf(Path("draft.pdf"), Path("sections.json"))  # doctest: +SKIP
>>> result.total_pages  # doctest: +SKIP
42
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import json
import logging
import re
import typing as typ
from pathlib import Path

import pymupdf

from mdmanual.config import PageHeuristics
from mdmanual.errors import AnalysisError, OutputWriteError

logger = logging.getLogger(__name__)

DOT_LEADER_PATTERN = re.compile(r"\.{2,}|·{2,}|…+")
TITLE_NOISE_PATTERN = re.compile(r"[^\w\s\[\]()\-]")
NUMBER_PREFIX_PATTERN = re.compile(r"^\s*\d+\.\s*")
WHITESPACE_PATTERN = re.compile(r"\s+")


@dc.dataclass(slots=True)
class SectionPage:
    """One searchable title and the page it was found on (``0`` = not found)."""

    id: str
    title: str
    page: int = 0


@dc.dataclass(slots=True)
class AnalysisResult:
    """Page-location result handed from the analyzer to the second pass.

    Attributes
    ----------
    total_pages : int
        Physical page count of the analyzed PDF.
    sections : list[SectionPage]
        Sections and sub-headings in manifest order.
    """

    total_pages: int
    sections: list[SectionPage]

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the page-map JSON payload."""
        return {
            "total_pages": self.total_pages,
            "sections": [dc.asdict(entry) for entry in self.sections],
        }

    def page_map(self) -> dict[str, int]:
        """Return ``{id: page}`` for every entry."""
        return {entry.id: entry.page for entry in self.sections}

    def save(self, path: Path) -> None:
        """Write the page-map JSON to ``path``.

        Raises
        ------
        OutputWriteError
            If the file cannot be written.
        """
        try:
            path.write_text(
                json.dumps(self.to_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            msg = f"failed to write analysis result {path}: {exc}"
            raise OutputWriteError(msg) from exc
        logger.info("Analysis saved to %s", path)


def _clean(text: str) -> str:
    """Keep letters (any script), digits, whitespace, brackets, ``-`` and ``_``."""
    return TITLE_NOISE_PATTERN.sub("", text.strip())


def contains_title(text: str, title: str) -> bool:
    """Return True when ``title`` appears in the page ``text``.

    Both sides are stripped of emoji and punctuation that PDF extraction
    tends to mangle. A title with a leading ordinal (``"2. Setup"``) also
    matches its unnumbered form. A title that cleans down to nothing never
    matches.
    """
    clean_text = _clean(text)
    clean_title = _clean(title).strip()
    if not clean_title:
        return False
    if clean_title in clean_text:
        return True
    unnumbered = _clean(NUMBER_PREFIX_PATTERN.sub("", title, count=1)).strip()
    return bool(unnumbered) and unnumbered != clean_title and unnumbered in clean_text


def count_dot_leaders(text: str) -> int:
    """Return the number of dot-leader runs (``..``, ``··``, ``…``) in ``text``."""
    return len(DOT_LEADER_PATTERN.findall(text))


def is_body_page(
    text: str,
    sections: cabc.Sequence[SectionPage],
    heuristics: PageHeuristics | None = None,
) -> bool:
    """Classify a page as body content (True) or table of contents (False).

    Parameters
    ----------
    text : str
        Extracted plain text of the page.
    sections : Sequence[SectionPage]
        Every section and sub-heading title of the document.
    heuristics : PageHeuristics, optional
        Thresholds; the defaults are tuned against real manuals.

    Returns
    -------
    bool
        ``True`` for a body page, ``False`` for a TOC page.
    """
    limits = heuristics or PageHeuristics()
    dot_count = count_dot_leaders(text)
    title_count = sum(1 for entry in sections if contains_title(text, entry.title))
    text_length = len(WHITESPACE_PATTERN.sub("", text))

    if title_count > limits.max_toc_titles:
        return False
    if text_length < limits.min_body_chars:
        return False
    if title_count == 0:
        # untitled narrative page, e.g. an unlabeled introduction
        return True
    per_title = text_length // title_count
    return per_title >= limits.min_chars_per_title and dot_count <= limits.max_dot_leaders


def _page_text(document: pymupdf.Document, page_number: int) -> str | None:
    """Return the plain text of a 1-based page, or None when extraction fails."""
    try:
        return document[page_number - 1].get_text("text")
    except (RuntimeError, ValueError, IndexError) as exc:
        logger.debug("Text extraction failed on page %d: %s", page_number, exc)
        return None


def detect_toc_end_page(
    document: pymupdf.Document,
    sections: cabc.Sequence[SectionPage],
    heuristics: PageHeuristics | None = None,
) -> int:
    """Return the last cover/TOC page number, or ``0`` when undetectable.

    Scanning starts after the cover. Pages containing the first section's
    title are classified with :func:`is_body_page`; the first body page ends
    the front matter.
    """
    if not sections:
        return 0
    limits = heuristics or PageHeuristics()
    first_title = sections[0].title
    for page_number in range(limits.first_scan_page, document.page_count + 1):
        text = _page_text(document, page_number)
        if text is None or not contains_title(text, first_title):
            continue
        if is_body_page(text, sections, limits):
            logger.info(
                "Content starts at page %d (first section: '%s'); skipping %d pages",
                page_number,
                first_title,
                page_number - 1,
            )
            return page_number - 1
        logger.debug("Page %d looks like TOC (contains '%s')", page_number, first_title)
    logger.warning("Could not detect TOC end page (content start not found)")
    return 0


def load_manifest_entries(path: Path) -> list[SectionPage]:
    """Flatten a sections manifest into searchable entries with ``page = 0``.

    Raises
    ------
    AnalysisError
        If the manifest cannot be read or is not a list of section objects.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        msg = f"failed to read sections manifest {path}: {exc}"
        raise AnalysisError(msg) from exc
    if not isinstance(payload, list):
        msg = f"sections manifest {path} must contain a JSON array"
        raise AnalysisError(msg)

    entries: list[SectionPage] = []
    for item in payload:
        try:
            entries.append(SectionPage(id=str(item["id"]), title=str(item["title"])))
            entries.extend(
                SectionPage(id=str(sub["id"]), title=str(sub["title"]))
                for sub in item.get("subheadings") or []
            )
        except (KeyError, TypeError, AttributeError) as exc:
            msg = f"malformed entry in sections manifest {path}: {item!r}"
            raise AnalysisError(msg) from exc
    logger.info("Loaded %d sections (including sub-headings)", len(entries))
    return entries


def locate_sections(
    document: pymupdf.Document,
    sections: list[SectionPage],
    skip_pages: int,
) -> None:
    """Record the first body page on which each unmatched title appears."""
    for page_number in range(skip_pages + 1, document.page_count + 1):
        text = _page_text(document, page_number)
        if text is None:
            continue
        for entry in sections:
            if entry.page == 0 and contains_title(text, entry.title):
                entry.page = page_number - skip_pages
                logger.debug(
                    "Found '%s' on page %d (physical %d)",
                    entry.title,
                    entry.page,
                    page_number,
                )


def analyze_pdf(
    pdf_path: Path,
    sections_json: Path | None = None,
    skip_pages: int = 0,
    heuristics: PageHeuristics | None = None,
) -> AnalysisResult:
    """Find the body page on which every section and sub-heading starts.

    Parameters
    ----------
    pdf_path : Path
        Draft PDF rendered from the first pass.
    sections_json : Path, optional
        Sections manifest written by the converter. Without it the result
        only carries the page count.
    skip_pages : int, optional
        Cover + TOC pages to skip. ``0`` or negative auto-detects them.
    heuristics : PageHeuristics, optional
        Thresholds for auto-detection.

    Returns
    -------
    AnalysisResult
        Page count and entries; titles never found keep ``page = 0``.

    Raises
    ------
    AnalysisError
        If the PDF cannot be opened or the manifest cannot be parsed.
    """
    limits = heuristics or PageHeuristics()
    sections = load_manifest_entries(sections_json) if sections_json else []

    try:
        document = pymupdf.open(pdf_path)
    except (OSError, RuntimeError, ValueError) as exc:
        msg = f"failed to open PDF {pdf_path}: {exc}"
        raise AnalysisError(msg) from exc

    with document:
        total_pages = document.page_count
        logger.info("PDF has %d pages", total_pages)
        if skip_pages > 0:
            effective_skip = skip_pages
            logger.info("Using manual skip pages: %d", effective_skip)
        else:
            effective_skip = detect_toc_end_page(document, sections, limits)
            if effective_skip <= 0:
                effective_skip = limits.default_skip_pages
                logger.info("Using default skip pages: %d", effective_skip)
        locate_sections(document, sections, effective_skip)

    for entry in sections:
        if entry.page == 0:
            logger.warning("Title not found in PDF: '%s'", entry.title)
    return AnalysisResult(total_pages=total_pages, sections=sections)


__all__ = [
    "AnalysisResult",
    "SectionPage",
    "analyze_pdf",
    "contains_title",
    "count_dot_leaders",
    "detect_toc_end_page",
    "is_body_page",
    "load_manifest_entries",
    "locate_sections",
]
