r"""Discover Markdown sources and derive per-file identity.

This module resolves the ordered list of Markdown files for a manual (from a
``_sidebar.md`` manifest when present, otherwise a recursive scan), and
derives the values that identify each file across passes: its section id and
its leading heading.

Example
-------
>>> from mdmanual.converter.sources import extract_title, generate_id
>>> extract_title("## Setup\n# Install\n")
('Install', 1)
>>> generate_id("docs/02 Getting Started.md")
'02-getting-started'
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePath

from mdmanual._constants import (
    LANDING_PAGE_FILENAME,
    SIDEBAR_FILENAME,
    UNTITLED_SECTION,
)
from mdmanual.errors import InputNotFoundError

logger = logging.getLogger(__name__)

SIDEBAR_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(/?([^)]+\.md)\)")
FENCE_PATTERN = re.compile(r"^(`{3,}|~{3,})")


def generate_id(file_path: str | PurePath) -> str:
    """Return the section id for a Markdown file.

    The id is the base filename without its ``.md`` extension, lowercased,
    with spaces replaced by hyphens. Applying it to its own output is a
    no-op.
    """
    base = PurePath(file_path).name
    if base.lower().endswith(".md"):
        base = base[:-3]
    return base.replace(" ", "-").lower()


def extract_title(content: str) -> tuple[str, int]:
    """Return ``(title, level)`` for the leading heading of a Markdown file.

    The first ``#`` heading outside fenced code wins immediately; otherwise
    the first ``##`` heading is used. Files without either heading produce
    the placeholder title and level ``0``.
    """
    second_choice = ""
    fence: str | None = None
    for raw_line in content.splitlines():
        line = raw_line.strip()
        match = FENCE_PATTERN.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker[0] * 3
            elif marker.startswith(fence):
                fence = None
            continue
        if fence is not None:
            continue
        if line.startswith("# "):
            return line[2:].strip(), 1
        if not second_choice and line.startswith("## "):
            second_choice = line[3:].strip()
    if second_choice:
        return second_choice, 2
    return UNTITLED_SECTION, 0


def parse_sidebar(sidebar_path: Path, base_dir: Path) -> list[Path]:
    """Return existing Markdown files linked from ``sidebar_path`` in order.

    Raises
    ------
    OSError
        If the sidebar file cannot be read.
    """
    content = sidebar_path.read_text(encoding="utf-8")
    files: list[Path] = []
    for match in SIDEBAR_LINK_PATTERN.finditer(content):
        candidate = base_dir / match.group(2)
        if candidate.is_file():
            files.append(candidate)
        else:
            logger.warning("Sidebar entry not found: %s", candidate)
    return files


def scan_markdown_files(directory: Path) -> list[Path]:
    """Return every ``.md`` file under ``directory`` not starting with ``_``.

    Files are sorted by their path relative to ``directory`` so the document
    order is deterministic.
    """
    return sorted(
        (
            path
            for path in directory.rglob("*.md")
            if path.is_file() and not path.name.startswith("_")
        ),
        key=lambda path: path.relative_to(directory).as_posix(),
    )


def is_landing_page(path: Path) -> bool:
    """Return True when ``path`` is the web landing page (``README.md``)."""
    return path.name.lower() == LANDING_PAGE_FILENAME


def discover_sources(input_path: Path) -> list[Path]:
    """Resolve the ordered Markdown files for a manual.

    Parameters
    ----------
    input_path : Path
        Directory containing Markdown files, or a single Markdown file.

    Returns
    -------
    list[Path]
        Files in document order. The landing page is dropped whenever more
        than one file is present.

    Raises
    ------
    InputNotFoundError
        If ``input_path`` does not exist or cannot be listed.
    """
    if not input_path.exists():
        msg = f"input path not found: {input_path}"
        raise InputNotFoundError(msg)
    if input_path.is_file():
        return [input_path]

    sidebar = input_path / SIDEBAR_FILENAME
    files: list[Path] = []
    if sidebar.is_file():
        try:
            files = parse_sidebar(sidebar, input_path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not parse sidebar, scanning directory: %s", exc)
        if not files:
            logger.warning("Sidebar %s lists no files, scanning directory", sidebar)
    if not files:
        try:
            files = scan_markdown_files(input_path)
        except OSError as exc:
            msg = f"could not read input directory {input_path}: {exc}"
            raise InputNotFoundError(msg) from exc

    if len(files) > 1:
        for path in files:
            if is_landing_page(path):
                logger.info("Skipping %s (web landing page)", path.name)
        files = [path for path in files if not is_landing_page(path)]
    return files


__all__ = [
    "discover_sources",
    "extract_title",
    "generate_id",
    "is_landing_page",
    "parse_sidebar",
    "scan_markdown_files",
]
