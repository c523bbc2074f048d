"""Cyclopts CLI entrypoint for building manuals from Markdown.

The ``mdmanual`` console script defined here turns a directory of Markdown
files into a single styled HTML document and, by default, a paginated PDF
whose table of contents carries real page numbers (found by rendering a draft,
locating every heading in it, and rendering again). The ``analyze`` and
``render`` sub-commands expose the two PDF stages on their own.

Examples
--------
Build the PDF manual for a docs folder:

>>> from mdmanual.cli import app
>>> app(["build", "-i", "docs", "-o", "dist/manual.pdf"])  # doctest: +SKIP

Generate the HTML document only:

>>> app(["html", "-i", "docs", "-o", "dist/manual.html"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from ._constants import DEFAULT_TEMPLATE
from ._logging import setup_logging
from .config import (
    ConfigError,
    ConvertOptions,
    RenderOptions,
    load_document_config,
)
from .errors import ManualError
from .pdf import analyze_pdf, render_to_pdf
from .pipeline import build_html, build_pdf

logger = logging.getLogger(__name__)

app = App(name="mdmanual", help="Build HTML/PDF manuals with accurate TOC page numbers.")


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Convert Markdown into a PDF (or HTML with --html-only).")
def build(
    *,
    input_path: typ.Annotated[
        Path, Parameter(name=["--input", "-i"], help="Markdown directory or file")
    ],
    output: typ.Annotated[
        Path, Parameter(name=["--output", "-o"], help="Output PDF or HTML path")
    ],
    config: typ.Annotated[
        Path | None,
        Parameter(name=["--config", "-c"], help="Config file path (AUTHORS.yml)"),
    ] = None,
    title: typ.Annotated[str, Parameter(help="Main title (overrides config)")] = "",
    subtitle: typ.Annotated[str, Parameter(help="Subtitle (overrides config)")] = "",
    version: typ.Annotated[str, Parameter(help="Document version")] = "",
    author: typ.Annotated[str, Parameter(help="Author or company name")] = "",
    header: typ.Annotated[str, Parameter(help="Header text for printed pages")] = "",
    footer: typ.Annotated[str, Parameter(help="Footer text for printed pages")] = "",
    template: typ.Annotated[str, Parameter(help="Template name")] = DEFAULT_TEMPLATE,
    embed_images: typ.Annotated[
        bool,
        Parameter(help="Inline local images and stylesheets (PDF builds always do)"),
    ] = True,
    html_only: typ.Annotated[
        bool, Parameter(help="Generate HTML only (no PDF conversion)")
    ] = False,
    skip: typ.Annotated[
        int, Parameter(help="Cover + TOC pages to skip during analysis (0 = auto)")
    ] = 0,
    verbose: bool = False,
    debug: bool = False,
) -> Path:
    """Build the manual for ``input_path``.

    Parameters
    ----------
    input_path : Path
        Directory of Markdown files (ordered by ``_sidebar.md`` when present)
        or a single Markdown file.
    output : Path
        Destination; ``.pdf`` is appended in PDF mode and the suffix becomes
        ``.html`` in HTML-only mode.
    config : Path or None, optional
        YAML file with project, organization, and document metadata.
    title, subtitle, version, author, header, footer : str, optional
        Metadata overrides that win over the config file.
    template : str, optional
        Template name; ``"default"`` or any shipped ``layout_<name>``.
    embed_images : bool, optional
        Inline local images and stylesheets. Only ``--html-only`` builds honour
        ``--no-embed-images``; PDF builds always inline and log a warning.
    html_only : bool, optional
        Stop after the HTML document.
    skip : int, optional
        Manual skip-page count for the analyzer; ``0`` auto-detects.
    verbose, debug : bool, optional
        Raise the log level to INFO or DEBUG.

    Returns
    -------
    Path
        The written artifact.
    """
    setup_logging(verbose=verbose, debug=debug)
    document_config = load_document_config(config)
    options = ConvertOptions(
        input_path=input_path,
        output_file=output,
        title=title,
        subtitle=subtitle,
        version=version,
        author=author,
        header=header,
        footer=footer,
        template=template,
        embed_images=embed_images,
    )
    if html_only:
        written = build_html(options, document_config)
    else:
        written = build_pdf(options, document_config, skip_pages=skip)
    print(f"wrote {_format_path(written)}")
    return written


@app.command(help="Convert Markdown into a single HTML document.")
def html(
    *,
    input_path: typ.Annotated[
        Path, Parameter(name=["--input", "-i"], help="Markdown directory or file")
    ],
    output: typ.Annotated[
        Path, Parameter(name=["--output", "-o"], help="Output HTML path")
    ],
    config: typ.Annotated[
        Path | None,
        Parameter(name=["--config", "-c"], help="Config file path (AUTHORS.yml)"),
    ] = None,
    template: typ.Annotated[str, Parameter(help="Template name")] = DEFAULT_TEMPLATE,
    embed_images: typ.Annotated[
        bool, Parameter(help="Inline local images and stylesheets")
    ] = True,
    verbose: bool = False,
) -> Path:
    """Shortcut for ``build --html-only``."""
    return build(
        input_path=input_path,
        output=output,
        config=config,
        template=template,
        embed_images=embed_images,
        html_only=True,
        verbose=verbose,
    )


@app.command(help="Locate section titles on the pages of a rendered PDF.")
def analyze(
    pdf: Path,
    *,
    sections: typ.Annotated[
        Path | None, Parameter(help="Sections manifest JSON from the converter")
    ] = None,
    skip: typ.Annotated[
        int, Parameter(help="Cover + TOC pages to skip (0 = auto-detect)")
    ] = 0,
    output: typ.Annotated[
        Path | None, Parameter(name=["--output", "-o"], help="Write the page map here")
    ] = None,
    config: typ.Annotated[
        Path | None,
        Parameter(name=["--config", "-c"], help="Config file with analysis thresholds"),
    ] = None,
    verbose: bool = False,
    debug: bool = False,
) -> None:
    """Print (or save) the page map for ``pdf``."""
    setup_logging(verbose=verbose, debug=debug)
    document_config = load_document_config(config)
    result = analyze_pdf(pdf, sections, skip, document_config.analysis)
    if output:
        result.save(output)
        print(f"wrote {_format_path(output)}")
        return
    print(f"total pages: {result.total_pages}")
    for entry in result.sections:
        page = entry.page if entry.page else "-"
        print(f"{page:>4}  {entry.title}")


@app.command(help="Render an HTML file to PDF with headless Chromium.")
def render(
    html_file: Path,
    *,
    output: typ.Annotated[
        Path | None, Parameter(name=["--output", "-o"], help="Output PDF path")
    ] = None,
    landscape: bool = False,
    scale: typ.Annotated[float, Parameter(help="Print scale (0.1-2.0)")] = 1.0,
    timeout: typ.Annotated[float, Parameter(help="Overall timeout in seconds")] = 300.0,
    verbose: bool = False,
) -> None:
    """Print ``html_file`` to PDF."""
    setup_logging(verbose=verbose)
    options = RenderOptions(landscape=landscape, scale=scale, timeout=timeout)
    written = render_to_pdf(html_file, output, options)
    print(f"wrote {_format_path(written)}")


def main(tokens: list[str] | None = None) -> int:
    """Invoke the Cyclopts application that powers the ``mdmanual`` command.

    Parameters
    ----------
    tokens : list[str] or None, optional
        Command-line arguments; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        ``0`` on success, ``1`` when a fatal build error occurred.

    Examples
    --------
    >>> main(["build", "-i", "docs", "-o", "manual.pdf"])  # doctest: +SKIP
    0
    """
    try:
        app(tokens)
    except (ManualError, ConfigError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    sys.exit(main())
