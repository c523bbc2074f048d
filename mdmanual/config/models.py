"""Typed dataclasses describing mdmanual document configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from mdmanual._constants import DEFAULT_TEMPLATE


class ConfigError(ValueError):
    """Raised when the document configuration contains invalid values."""


@dc.dataclass(slots=True)
class DocumentMeta:
    """Per-document metadata from the ``document`` block of ``AUTHORS.yml``."""

    title: str = ""
    subtitle: str = ""
    author: str = ""
    header: str = ""
    footer: str = ""
    date_format: str = "%Y-%m-%d"


@dc.dataclass(slots=True)
class PageHeuristics:
    """Tunable constants for telling TOC pages from body pages.

    Attributes
    ----------
    max_toc_titles : int
        A page listing more distinct titles than this is a TOC page.
    min_body_chars : int
        Pages with fewer non-whitespace characters are never body pages.
    min_chars_per_title : int
        Body pages carry at least this much text per matched title.
    max_dot_leaders : int
        More dot leaders than this on a titled page marks it as TOC.
    default_skip_pages : int
        Pages skipped when auto-detection finds no body page (cover + TOC).
    first_scan_page : int
        Physical page where auto-detection starts (page 1 is the cover).
    """

    max_toc_titles: int = 5
    min_body_chars: int = 100
    min_chars_per_title: int = 80
    max_dot_leaders: int = 3
    default_skip_pages: int = 3
    first_scan_page: int = 2


@dc.dataclass(slots=True)
class RenderOptions:
    """Browser print settings used by the page renderer.

    Attributes
    ----------
    landscape : bool
        Print in landscape orientation.
    scale : float
        Print scale passed to the engine; must lie within 0.1-2.0.
    timeout : float
        Overall deadline in seconds for one render, including settle waits.
    settle_seconds : float
        Wait after the DOM is ready so fonts and images finish loading.
    diagram_settle_seconds : float
        Extra wait when the page contains client-side diagrams.
    """

    landscape: bool = False
    scale: float = 1.0
    timeout: float = 300.0
    settle_seconds: float = 3.0
    diagram_settle_seconds: float = 5.0


@dc.dataclass(slots=True)
class DocumentConfig:
    """Parsed ``AUTHORS.yml`` style configuration."""

    project_name: str = ""
    organization: str = ""
    copyright: str = ""
    document: DocumentMeta = dc.field(default_factory=DocumentMeta)
    analysis: PageHeuristics = dc.field(default_factory=PageHeuristics)
    render: RenderOptions = dc.field(default_factory=RenderOptions)


@dc.dataclass(slots=True)
class ConvertOptions:
    """Inputs for one converter pass.

    Attributes
    ----------
    input_path : Path
        Directory of Markdown files, or a single Markdown file.
    output_file : Path
        Where the rendered HTML document is written.
    title, subtitle, version, author, header, footer : str
        CLI overrides; empty strings defer to the config file.
    template : str
        Template name (``"default"`` or a ``layout_<name>`` suffix).
    embed_images : bool
        Inline local images and stylesheets as data URIs / style blocks.
    pdf_mode : bool
        Rewrite links between Markdown files into in-document anchors.
    sections_json : Path or None
        When set, the sections manifest is written here.
    pages_json : Path or None
        When set, page numbers are loaded from this analysis result.
    """

    input_path: Path
    output_file: Path
    title: str = ""
    subtitle: str = ""
    version: str = ""
    author: str = ""
    header: str = ""
    footer: str = ""
    template: str = DEFAULT_TEMPLATE
    embed_images: bool = True
    pdf_mode: bool = False
    sections_json: Path | None = None
    pages_json: Path | None = None


__all__ = [
    "ConfigError",
    "ConvertOptions",
    "DocumentConfig",
    "DocumentMeta",
    "PageHeuristics",
    "RenderOptions",
]
