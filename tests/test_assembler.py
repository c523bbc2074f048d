"""Tests for merging sources into sections and rendering the manual."""

from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from mdmanual.config import ConvertOptions, DocumentConfig, DocumentMeta
from mdmanual.converter import (
    DocumentAssembler,
    SubHeading,
    convert_to_html,
    extract_subheadings,
    load_page_map,
)
from mdmanual.converter.assembler import css_string
from mdmanual.errors import InputNotFoundError, TemplateError


def _options(input_path: Path, output: Path, **overrides: object) -> ConvertOptions:
    return ConvertOptions(input_path=input_path, output_file=output, **overrides)  # type: ignore[arg-type]


def test_second_level_file_merges_into_previous_section(
    manual_dir: Path, tmp_path: Path
) -> None:
    """A file led by ``##`` joins the preceding section with an anchor div."""
    sections = convert_to_html(_options(manual_dir, tmp_path / "manual.html"))

    assert [section.id for section in sections] == ["01_intro", "02_setup"]
    assert [section.title for section in sections] == ["Introduction", "Setup"]
    setup = sections[1]
    assert [sub.title for sub in setup.subheadings] == ["Requirements", "Advanced Options"]
    assert '<div id="02a_setup_advanced"></div>' in setup.content
    assert "Tuning flags." in setup.content


def test_faq_headings_stay_out_of_the_outline(manual_dir: Path, tmp_path: Path) -> None:
    """``Q.`` headings are rendered but not listed as sub-headings."""
    sections = convert_to_html(_options(manual_dir, tmp_path / "manual.html"))
    assert "Is Windows supported?" in sections[1].content
    assert all(not sub.title.startswith("Q") for sub in sections[1].subheadings)


def test_extract_subheadings_strips_markup() -> None:
    """Sub-heading titles are plain text; headings without ids are ignored."""
    html = (
        '<h2 id="a">Use <code>init</code> &amp; go</h2>'
        "<h2>No id</h2>"
        '<h2 id="q">Q. Why?</h2>'
        '<h3 id="deep">Deep</h3>'
    )
    assert extract_subheadings(html) == [SubHeading(id="a", title="Use init & go")]


def test_sections_manifest_lists_outline_without_bodies(
    manual_dir: Path, tmp_path: Path
) -> None:
    """The manifest carries ids, titles, levels, and sub-headings only."""
    manifest = tmp_path / "sections.json"
    convert_to_html(
        _options(manual_dir, tmp_path / "manual.html", sections_json=manifest)
    )
    payload = json.loads(manifest.read_text(encoding="utf-8"))
    assert payload == [
        {
            "id": "01_intro",
            "title": "Introduction",
            "level": 1,
            "subheadings": [{"id": "overview", "title": "Overview", "level": 2}],
        },
        {
            "id": "02_setup",
            "title": "Setup",
            "level": 1,
            "subheadings": [
                {"id": "requirements", "title": "Requirements", "level": 2},
                {"id": "advanced-options", "title": "Advanced Options", "level": 2},
            ],
        },
    ]


def test_page_map_fills_the_table_of_contents(manual_dir: Path, tmp_path: Path) -> None:
    """Page numbers from the analyzer appear next to TOC entries."""
    pages = tmp_path / "pages.json"
    pages.write_text(
        json.dumps(
            {
                "total_pages": 6,
                "sections": [
                    {"id": "01_intro", "title": "Introduction", "page": 1},
                    {"id": "requirements", "title": "Requirements", "page": 3},
                    {"id": "02_setup", "title": "Setup", "page": 0},
                ],
            }
        ),
        encoding="utf-8",
    )
    output = tmp_path / "manual.html"
    sections = convert_to_html(_options(manual_dir, output, pages_json=pages))

    assert sections[0].page_number == 1
    assert sections[1].subheadings[0].page_number == 3
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")

    def _toc_page(anchor: str) -> str:
        link = soup.select_one(f'nav.toc a[href="#{anchor}"]')
        assert link is not None
        return link.parent.select_one("span.page").get_text().strip()

    assert _toc_page("01_intro") == "1"
    assert _toc_page("requirements") == "3"
    assert _toc_page("02_setup") == ""
    assert _toc_page("overview") == ""


def test_load_page_map_degrades_to_empty(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """A malformed page map is logged and treated as empty."""
    path = tmp_path / "pages.json"
    path.write_text("[1, 2", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="mdmanual"):
        assert load_page_map(path) == {}
    assert "Could not read pages JSON" in caplog.text


def test_load_page_map_skips_bad_entries(tmp_path: Path) -> None:
    """Entries without a string id and integer page are ignored."""
    path = tmp_path / "pages.json"
    path.write_text(
        json.dumps(
            {"sections": [{"id": "a", "page": 2}, {"id": "b", "page": "x"}, {"page": 1}]}
        ),
        encoding="utf-8",
    )
    assert load_page_map(path) == {"a": 2}


def test_pdf_mode_rewrites_links_to_anchors(manual_dir: Path, tmp_path: Path) -> None:
    """Links between source files point at sections in the merged document."""
    sections = convert_to_html(
        _options(manual_dir, tmp_path / "manual.html", pdf_mode=True)
    )
    assert 'href="#01_intro"' in sections[1].content


def test_web_mode_keeps_file_links(manual_dir: Path, tmp_path: Path) -> None:
    """Without PDF mode links keep pointing at the Markdown files."""
    sections = convert_to_html(_options(manual_dir, tmp_path / "manual.html"))
    assert 'href="01_intro.md"' in sections[1].content


def test_unreadable_file_is_skipped(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """A file that cannot be decoded is logged and left out."""
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "a.md").write_text("# Alpha\n\nBody.\n", encoding="utf-8")
    (docs / "b.md").write_bytes(b"# Beta\n\xff\xfe\xfa broken\n")
    with caplog.at_level(logging.WARNING, logger="mdmanual"):
        sections = convert_to_html(_options(docs, tmp_path / "manual.html"))
    assert [section.id for section in sections] == ["a"]
    assert "Could not read" in caplog.text


def test_untitled_and_leading_level_two_files_stand_alone(tmp_path: Path) -> None:
    """A ``##`` file with nothing before it and an untitled file both become sections."""
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "01_first.md").write_text("## Early Bird\n\nText.\n", encoding="utf-8")
    (docs / "02_notes.md").write_text("Plain notes only.\n", encoding="utf-8")
    sections = convert_to_html(_options(docs, tmp_path / "manual.html"))
    assert [(s.id, s.title, s.level) for s in sections] == [
        ("01_first", "Early Bird", 2),
        ("02_notes", "Untitled", 0),
    ]


def test_output_parent_directories_are_created(manual_dir: Path, tmp_path: Path) -> None:
    """The HTML document is written even when its directory does not exist."""
    output = tmp_path / "dist" / "nested" / "manual.html"
    convert_to_html(_options(manual_dir, output))
    assert output.is_file()


def test_default_template_renders(manual_dir: Path, tmp_path: Path) -> None:
    """The plain layout lists every section in its table of contents."""
    output = tmp_path / "manual.html"
    convert_to_html(_options(manual_dir, output, template="default"))
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    assert [a["href"] for a in soup.select("nav.toc > ul > li > a")] == [
        "#01_intro",
        "#02_setup",
    ]


def test_unknown_template_is_fatal(manual_dir: Path, tmp_path: Path) -> None:
    """Asking for a template that does not exist raises TemplateError."""
    with pytest.raises(TemplateError):
        convert_to_html(_options(manual_dir, tmp_path / "manual.html", template="nope"))


def test_missing_input_is_fatal(tmp_path: Path) -> None:
    """A missing input directory raises InputNotFoundError."""
    with pytest.raises(InputNotFoundError):
        convert_to_html(_options(tmp_path / "absent", tmp_path / "manual.html"))


def test_metadata_falls_back_to_config(tmp_path: Path) -> None:
    """Title, author, header, and footer resolve through config fallbacks."""
    config = DocumentConfig(
        project_name="Widget",
        organization="Acme Ltd",
        document=DocumentMeta(subtitle="Operator Guide"),
    )
    assembler = DocumentAssembler(_options(tmp_path, tmp_path / "m.html"), config)
    context = assembler.build_context([])
    assert context.title == "Widget"
    assert context.author == "Acme Ltd"
    assert context.header == "Widget - Operator Guide"
    assert context.footer == "Acme Ltd"
    assert context.copyright == "Acme Ltd"
    assert context.version == "1.0.0"
    assert context.date == dt.date.today().isoformat()


def test_metadata_overrides_win(tmp_path: Path) -> None:
    """Explicit options beat the config file."""
    config = DocumentConfig(
        project_name="Widget",
        document=DocumentMeta(title="Config Title", footer="Config footer"),
    )
    options = _options(
        tmp_path,
        tmp_path / "m.html",
        title="CLI Title",
        version="2.1.0",
        footer="CLI footer",
    )
    context = DocumentAssembler(options, config).build_context([])
    assert context.title == "CLI Title"
    assert context.header == "CLI Title"
    assert context.footer == "CLI footer"
    assert context.version == "2.1.0"


def test_metadata_defaults_without_config(tmp_path: Path) -> None:
    """With no config at all the title falls back to a placeholder."""
    context = DocumentAssembler(_options(tmp_path, tmp_path / "m.html")).build_context([])
    assert context.title == "Document"
    assert context.author == ""
    assert context.footer == ""


def test_css_string_escapes_quotes_and_backslashes() -> None:
    """Quotes, backslashes, newlines, and ``<`` are CSS-escaped; ``&`` is kept."""
    assert str(css_string('R&D "Ops"\\x\nnext</style>')) == (
        'R&D \\"Ops\\"\\\\x\\A next\\3C /style>'
    )


def test_page_margins_carry_unescaped_header_and_footer(
    manual_dir: Path, tmp_path: Path
) -> None:
    """Header and footer text reaches the CSS margin boxes without HTML entities."""
    output = tmp_path / "manual.html"
    convert_to_html(
        _options(
            manual_dir,
            output,
            title="R&D Manual",
            subtitle='The "Ops" Guide',
            footer="Tom & Jerry",
        )
    )
    html = output.read_text(encoding="utf-8")
    assert '@top-left { content: "R&D Manual - The \\"Ops\\" Guide";' in html
    assert '@bottom-left { content: "Tom & Jerry";' in html
    assert "R&amp;D Manual - " not in html


def test_duplicate_section_ids_are_reported(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Files sharing a basename in different folders trigger a warning."""
    docs = tmp_path / "docs"
    (docs / "a").mkdir(parents=True)
    (docs / "b").mkdir()
    (docs / "a" / "index.md").write_text("# Alpha\n", encoding="utf-8")
    (docs / "b" / "index.md").write_text("# Bravo\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="mdmanual"):
        sections = convert_to_html(_options(docs, tmp_path / "manual.html"))
    assert [section.id for section in sections] == ["index", "index"]
    assert "Duplicate section id 'index'" in caplog.text
