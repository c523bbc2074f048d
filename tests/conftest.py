"""Shared fixtures for the mdmanual test suite.

``pdf_factory`` writes small synthetic PDFs with PyMuPDF so the analyzer can be
exercised against real extracted page text; ``manual_dir`` lays out the
three-file manual used by the converter, pipeline, and BDD tests.
"""

from __future__ import annotations

import json
import textwrap
import typing as typ
from pathlib import Path

import pymupdf
import pytest

PROSE = (
    "This chapter walks through the installation of the control software on a "
    "fresh workstation and explains every prompt the installer shows along the "
    "way so that operators can follow along without prior experience with the "
    "tool chain or its configuration files and without calling support for help "
    "when the wizard asks for network credentials or licence keys during setup"
)


@pytest.fixture
def prose() -> str:
    """Return a paragraph of body text that mentions no section title."""
    return PROSE


def write_pdf(path: Path, pages: typ.Sequence[str]) -> Path:
    """Write a PDF with one page per entry of ``pages`` (lines wrapped at 70)."""
    document = pymupdf.open()
    for text in pages:
        page = document.new_page()
        lines: list[str] = []
        for paragraph in text.split("\n"):
            lines.extend(textwrap.wrap(paragraph, 70) or [""])
        page.insert_text((56, 72), "\n".join(lines), fontsize=10)
    document.save(path)
    document.close()
    return path


@pytest.fixture
def pdf_factory(tmp_path: Path) -> typ.Callable[..., Path]:
    """Return a callable writing a synthetic PDF under ``tmp_path`` or at an absolute path."""

    def _make(pages: typ.Sequence[str], name: str | Path = "draft.pdf") -> Path:
        return write_pdf(tmp_path / name, pages)

    return _make


@pytest.fixture
def manifest_factory(tmp_path: Path) -> typ.Callable[..., Path]:
    """Return a callable that writes a sections manifest JSON file."""

    def _make(entries: list[dict[str, typ.Any]], name: str = "sections.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def manual_dir(tmp_path: Path) -> Path:
    """Create a three-file manual ordered by ``_sidebar.md``."""
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "_sidebar.md").write_text(
        "- [Intro](01_intro.md)\n"
        "- [Setup](02_setup.md)\n"
        "  - [Advanced](02a_setup_advanced.md)\n",
        encoding="utf-8",
    )
    (docs / "01_intro.md").write_text(
        "# Introduction\n\nWelcome to the manual.\n\n## Overview\n\nWhat is inside.\n",
        encoding="utf-8",
    )
    (docs / "02_setup.md").write_text(
        "# Setup\n\nInstall the tool. See [the intro](01_intro.md).\n\n"
        "## Requirements\n\nA workstation.\n\n## Q. Is Windows supported?\n\nYes.\n",
        encoding="utf-8",
    )
    (docs / "02a_setup_advanced.md").write_text(
        "## Advanced Options\n\nTuning flags.\n", encoding="utf-8"
    )
    return docs
