"""Unit tests for source discovery, section ids, and title extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdmanual._constants import UNTITLED_SECTION
from mdmanual.converter.sources import (
    discover_sources,
    extract_title,
    generate_id,
    parse_sidebar,
    scan_markdown_files,
)
from mdmanual.errors import InputNotFoundError


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("01_intro.md", "01_intro"),
        ("docs/Getting Started.md", "getting-started"),
        ("API Reference.MD", "api-reference"),
        ("already-an-id", "already-an-id"),
    ],
)
def test_generate_id(filename: str, expected: str) -> None:
    """Ids are the lowercased base name with spaces turned into hyphens."""
    assert generate_id(filename) == expected


def test_generate_id_is_idempotent() -> None:
    """Applying generate_id to its own output changes nothing."""
    first = generate_id("chapters/My Chapter.md")
    assert generate_id(first) == first


def test_extract_title_prefers_level_one_regardless_of_order() -> None:
    """A level-1 heading wins even when a level-2 heading comes first."""
    assert extract_title("## Setup\n\ntext\n\n# Install\n") == ("Install", 1)


def test_extract_title_ignores_headings_inside_fenced_code() -> None:
    """A level-1 heading inside a fence is ignored in favour of the level-2 one."""
    source = "```bash\n# not a heading\n```\n\n## Real Title\n"
    assert extract_title(source) == ("Real Title", 2)


def test_extract_title_handles_tilde_fences() -> None:
    """Tilde fences hide headings just like backtick fences."""
    source = "~~~\n# hidden\n~~~\n"
    assert extract_title(source) == (UNTITLED_SECTION, 0)


def test_extract_title_placeholder_when_no_heading() -> None:
    """Files without headings get the placeholder title and level 0."""
    assert extract_title("just prose\n") == (UNTITLED_SECTION, 0)


def test_parse_sidebar_keeps_order_and_drops_missing(tmp_path: Path) -> None:
    """Sidebar links resolve in listed order; missing targets are skipped."""
    (tmp_path / "b.md").write_text("# B\n", encoding="utf-8")
    (tmp_path / "a.md").write_text("# A\n", encoding="utf-8")
    sidebar = tmp_path / "_sidebar.md"
    sidebar.write_text(
        "- [B](b.md)\n- [Gone](gone.md)\n- [A](/a.md)\n", encoding="utf-8"
    )
    assert parse_sidebar(sidebar, tmp_path) == [tmp_path / "b.md", tmp_path / "a.md"]


def test_scan_excludes_underscore_files(tmp_path: Path) -> None:
    """Recursive scans skip files whose name starts with an underscore."""
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "02.md").write_text("# Two\n", encoding="utf-8")
    (tmp_path / "01.md").write_text("# One\n", encoding="utf-8")
    (tmp_path / "_draft.md").write_text("# Draft\n", encoding="utf-8")
    assert scan_markdown_files(tmp_path) == [tmp_path / "01.md", tmp_path / "sub" / "02.md"]


def test_discover_skips_readme_when_several_files(tmp_path: Path) -> None:
    """The landing page is dropped whenever other Markdown files exist."""
    (tmp_path / "README.md").write_text("# Home\n", encoding="utf-8")
    (tmp_path / "guide.md").write_text("# Guide\n", encoding="utf-8")
    assert discover_sources(tmp_path) == [tmp_path / "guide.md"]


def test_discover_keeps_single_readme(tmp_path: Path) -> None:
    """A lone README is still converted."""
    readme = tmp_path / "readme.md"
    readme.write_text("# Home\n", encoding="utf-8")
    assert discover_sources(tmp_path) == [readme]


def test_discover_accepts_single_file(manual_dir: Path) -> None:
    """A file input yields just that file."""
    target = manual_dir / "02_setup.md"
    assert discover_sources(target) == [target]


def test_discover_uses_sidebar_order(manual_dir: Path) -> None:
    """The sidebar determines document order."""
    names = [path.name for path in discover_sources(manual_dir)]
    assert names == ["01_intro.md", "02_setup.md", "02a_setup_advanced.md"]


def test_discover_missing_input_is_fatal(tmp_path: Path) -> None:
    """A missing input path raises InputNotFoundError."""
    with pytest.raises(InputNotFoundError):
        discover_sources(tmp_path / "nope")
