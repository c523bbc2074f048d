"""High-level orchestration for converting Markdown sources into one manual.

This module coordinates discovering the source files, normalizing and
converting each one, merging second-level files into the preceding section,
extracting the two-level outline, and rendering the whole manual with a
Jinja template. It exposes :class:`DocumentAssembler` (and the
:func:`convert_to_html` shortcut), which consumes a
:class:`~mdmanual.config.ConvertOptions` and returns the published
:class:`~mdmanual.converter.models.Section` list.

Between the two PDF passes the assembler also writes the sections manifest
(titles and ids, no body HTML) and applies the page map produced by the
analyzer.

Example
-------
>>> from pathlib import Path
>>> from mdmanual.config import ConvertOptions
>>> from mdmanual.converter import DocumentAssembler
>>> options = ConvertOptions(Path("docs"), Path("manual.html"))  # doctest: +SKIP
>>> sections = DocumentAssembler(options).run()  # doctest: +SKIP
>>> [section.id for section in sections]  # doctest: +SKIP
['01_intro', '02_setup']
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, TemplateError as JinjaTemplateError
from jinja2 import select_autoescape
from markupsafe import Markup

from mdmanual._constants import (
    DEFAULT_TEMPLATE,
    DEFAULT_TEMPLATE_FILENAME,
    DEFAULT_TITLE,
    DEFAULT_VERSION,
    FAQ_PREFIXES,
    TEMPLATE_FILENAME,
)
from mdmanual.config import ConvertOptions, DocumentConfig, resolve_value
from mdmanual.errors import OutputWriteError, TemplateError

from .link_rewriter import InternalAnchorExtension
from .models import ManualContext, Section, SubHeading
from .postprocess import postprocess_html
from .preprocess import preprocess_markdown
from .renderer import HtmlContentRenderer
from .sources import discover_sources, extract_title, generate_id

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
CSS_STRING_ESCAPES = str.maketrans(
    {"\\": "\\\\", '"': '\\"', "\n": "\\A ", "<": "\\3C "}
)


def css_string(value: object) -> Markup:
    """Escape ``value`` for use inside a double-quoted CSS string.

    Page headers and footers live in ``<style>`` blocks, where HTML entities
    are not decoded, so they bypass HTML autoescaping.

    Examples
    --------
    >>> str(css_string('R&D "Ops"'))
    'R&D \\\\"Ops\\\\"'
    """
    return Markup(str(value).translate(CSS_STRING_ESCAPES))  # noqa: S704


def extract_subheadings(html: str) -> list[SubHeading]:
    """Return the ``<h2 id=...>`` outline of ``html``, excluding FAQ entries.

    Inner tags are stripped and entities decoded; headings whose text starts
    with ``"Q."`` or ``"Q "`` are left out of the table of contents.
    """
    soup = BeautifulSoup(html, "html.parser")
    subheadings: list[SubHeading] = []
    for heading in soup.find_all("h2", id=True):
        title = heading.get_text().strip()
        if title.startswith(FAQ_PREFIXES):
            continue
        subheadings.append(SubHeading(id=heading["id"], title=title, level=2))
    return subheadings


def write_sections_manifest(sections: list[Section], path: Path) -> None:
    """Serialize the section outline (no body HTML) for the analyzer.

    Raises
    ------
    OutputWriteError
        If the manifest cannot be written.
    """
    payload = [section.to_manifest() for section in sections]
    try:
        path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
    except OSError as exc:
        msg = f"failed to write sections JSON {path}: {exc}"
        raise OutputWriteError(msg) from exc
    logger.info("Sections JSON saved: %s", path)


def load_page_map(path: Path) -> dict[str, int]:
    """Return the ``{id: page}`` map from an analysis result file.

    An unreadable or malformed file yields an empty map with a warning; the
    document then renders without page numbers.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read pages JSON %s: %s", path, exc)
        return {}
    entries = payload.get("sections") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        logger.warning("Pages JSON %s has no 'sections' list", path)
        return {}
    page_map: dict[str, int] = {}
    for entry in entries:
        match entry:
            case {"id": str() as section_id, "page": int() as page}:
                page_map[section_id] = page
            case _:
                continue
    return page_map


def apply_page_numbers(sections: list[Section], page_map: typ.Mapping[str, int]) -> None:
    """Copy page numbers onto matching sections and sub-headings by id."""
    for section in sections:
        if section.id in page_map:
            section.page_number = page_map[section.id]
            logger.info("Section '%s' -> page %d", section.title, section.page_number)
        for sub in section.subheadings:
            if sub.id in page_map:
                sub.page_number = page_map[sub.id]
                logger.debug("  Sub-heading '%s' -> page %d", sub.title, sub.page_number)


class DocumentAssembler:
    """Convert a directory of Markdown files into one themed HTML document."""

    def __init__(
        self,
        options: ConvertOptions,
        config: DocumentConfig | None = None,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the assembler with conversion options and metadata.

        Parameters
        ----------
        options : ConvertOptions
            Input/output paths, overrides, and pass-specific switches.
        config : DocumentConfig, optional
            Parsed ``AUTHORS.yml``; defaults apply when omitted.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        """
        self.options = options
        self.config = config or DocumentConfig()
        self.templates_dir = templates_dir or TEMPLATES_DIR
        link_extension = InternalAnchorExtension() if options.pdf_mode else None
        self.renderer = HtmlContentRenderer(link_extension=link_extension)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["css_string"] = css_string

    def run(self) -> list[Section]:
        """Convert every source file and write the rendered document.

        Returns
        -------
        list[Section]
            Published sections in document order.

        Raises
        ------
        InputNotFoundError
            If the input path does not exist.
        TemplateError
            If the template is missing or fails to render.
        OutputWriteError
            If the manifest or the HTML document cannot be written.
        """
        files = discover_sources(self.options.input_path)
        logger.info("Found %d markdown files", len(files))
        sections = self.build_sections(files)

        if self.options.sections_json:
            write_sections_manifest(sections, self.options.sections_json)
        if self.options.pages_json:
            apply_page_numbers(sections, load_page_map(self.options.pages_json))

        html = self.render_document(sections)
        try:
            self.options.output_file.parent.mkdir(parents=True, exist_ok=True)
            self.options.output_file.write_text(html, encoding="utf-8")
        except OSError as exc:
            msg = f"failed to write output {self.options.output_file}: {exc}"
            raise OutputWriteError(msg) from exc
        logger.info("Generated HTML: %s", self.options.output_file)
        return sections

    def build_sections(self, files: list[Path]) -> list[Section]:
        """Convert ``files`` in order, merging second-level files into their parent."""
        sections: list[Section] = []
        seen_ids: dict[str, Path] = {}
        for path in files:
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Could not read %s: %s", path, exc)
                continue

            html = self.convert_file(source, path)
            title, level = extract_title(source)
            section_id = generate_id(path)
            if section_id in seen_ids:
                logger.warning(
                    "Duplicate section id '%s' from %s (already used by %s)",
                    section_id,
                    path,
                    seen_ids[section_id],
                )
            else:
                seen_ids[section_id] = path
            subheadings = extract_subheadings(html)

            if level == 2 and sections:
                previous = sections[-1]
                previous.merge(section_id, html, subheadings)
                logger.info("Merged %s into previous section '%s'", path, previous.title)
                continue

            sections.append(
                Section(
                    id=section_id,
                    title=title,
                    level=level,
                    content=html,
                    subheadings=subheadings,
                )
            )
        return sections

    def convert_file(self, source: str, path: Path) -> str:
        """Normalize, convert, and post-process one Markdown file."""
        html = self.renderer.markdown(preprocess_markdown(source))
        return postprocess_html(html, path, embed_assets=self.options.embed_images)

    def build_context(self, sections: list[Section]) -> ManualContext:
        """Resolve document metadata (CLI over config over fallbacks)."""
        opts = self.options
        cfg = self.config
        meta = cfg.document
        title = resolve_value(opts.title, meta.title, cfg.project_name, default=DEFAULT_TITLE)
        subtitle = resolve_value(opts.subtitle, meta.subtitle)
        author = resolve_value(opts.author, meta.author, cfg.organization)
        default_header = f"{title} - {subtitle}" if subtitle else title
        return ManualContext(
            title=title,
            subtitle=subtitle,
            version=resolve_value(opts.version, default=DEFAULT_VERSION),
            date=dt.date.today().strftime(meta.date_format),
            author=author,
            header=resolve_value(opts.header, meta.header, default=default_header),
            footer=resolve_value(opts.footer, meta.footer, default=author),
            copyright=resolve_value(cfg.copyright, cfg.organization),
            sections=sections,
        )

    def render_document(self, sections: list[Section]) -> str:
        """Render the manual template for ``sections``.

        Raises
        ------
        TemplateError
            If the named template cannot be loaded or rendered.
        """
        name = self.options.template or DEFAULT_TEMPLATE
        filename = (
            DEFAULT_TEMPLATE_FILENAME
            if name == "default"
            else TEMPLATE_FILENAME.format(name=name)
        )
        context = self.build_context(sections)
        try:
            template = self.env.get_template(filename)
            return template.render(manual=context, pygments_css=self.renderer.stylesheet)
        except JinjaTemplateError as exc:
            msg = f"failed to render template '{name}': {exc}"
            raise TemplateError(msg) from exc


def convert_to_html(
    options: ConvertOptions, config: DocumentConfig | None = None
) -> list[Section]:
    """Run one converter pass; see :meth:`DocumentAssembler.run`."""
    return DocumentAssembler(options, config).run()


__all__ = [
    "DocumentAssembler",
    "apply_page_numbers",
    "convert_to_html",
    "extract_subheadings",
    "load_page_map",
    "write_sections_manifest",
]
