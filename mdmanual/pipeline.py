"""Two-pass orchestration that yields a PDF with correct TOC page numbers.

Page breaks are only known after layout, so the manual is rendered twice::

    pass1-convert  Markdown -> HTML (no page numbers) + sections manifest
    pass1-render   HTML -> draft PDF
    analyze        draft PDF + manifest -> {id: page} map
    pass2-convert  Markdown -> HTML with the page map applied
    pass2-render   HTML -> final PDF

Stages run strictly in order inside a private temporary directory that is
removed on every exit path; the first failing stage aborts the build with a
:class:`~mdmanual.errors.PipelineError` naming it.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import tempfile
import typing as typ
from pathlib import Path

from mdmanual._constants import (
    PAGES_JSON,
    PASS1_HTML,
    PASS1_PDF,
    PASS2_HTML,
    SECTIONS_JSON,
    TEMP_DIR_PREFIX,
)
from mdmanual.config import ConfigError, ConvertOptions, DocumentConfig
from mdmanual.converter import convert_to_html
from mdmanual.errors import ManualError, PipelineError
from mdmanual.pdf import analyze_pdf, render_to_pdf

logger = logging.getLogger(__name__)

T = typ.TypeVar("T")


def ensure_suffix(path: Path, suffix: str) -> Path:
    """Return ``path`` with ``suffix``; ``.html`` replaces, ``.pdf`` appends.

    Examples
    --------
    >>> ensure_suffix(Path("manual"), ".pdf")
    PosixPath('manual.pdf')
    >>> ensure_suffix(Path("manual.pdf"), ".html")
    PosixPath('manual.html')
    """
    if path.suffix.lower() == suffix:
        return path
    if suffix == ".html":
        return path.with_suffix(suffix)
    return path.with_name(path.name + suffix)


def _run_stage(stage: str, action: typ.Callable[[], T]) -> T:
    """Run one stage, wrapping fatal errors with the stage name."""
    logger.info("[%s] starting", stage)
    try:
        return action()
    except (ManualError, ConfigError) as exc:
        raise PipelineError(stage, str(exc)) from exc


def build_html(options: ConvertOptions, config: DocumentConfig | None = None) -> Path:
    """Generate the HTML manual only (no PDF link rewriting).

    Local images and stylesheets are inlined unless ``options.embed_images``
    is off, in which case they keep their relative paths.
    """
    html_options = dc.replace(
        options,
        output_file=ensure_suffix(options.output_file, ".html"),
        pdf_mode=False,
        sections_json=None,
        pages_json=None,
    )
    _run_stage("html-convert", lambda: convert_to_html(html_options, config))
    return html_options.output_file


def build_pdf(
    options: ConvertOptions,
    config: DocumentConfig | None = None,
    *,
    skip_pages: int = 0,
) -> Path:
    """Run the two-pass pipeline and write the final PDF.

    Parameters
    ----------
    options : ConvertOptions
        Converter options; ``output_file`` is the final PDF path (``.pdf`` is
        appended when missing). ``embed_images`` is ignored: the draft
        lives in a temporary directory, so local assets are always inlined.
    config : DocumentConfig, optional
        Document metadata, analyzer heuristics, and render settings.
    skip_pages : int, optional
        Cover + TOC pages to skip during analysis; ``0`` auto-detects.

    Returns
    -------
    Path
        The final PDF path.

    Raises
    ------
    PipelineError
        If any stage fails; ``stage`` names it and the cause is chained.
    """
    cfg = config or DocumentConfig()
    output_pdf = ensure_suffix(options.output_file, ".pdf")
    if not options.embed_images:
        # the draft HTML lives in a temporary directory, so relative assets
        # would not resolve there
        logger.warning(
            "PDF builds always embed local images; ignoring --no-embed-images"
        )

    with tempfile.TemporaryDirectory(prefix=TEMP_DIR_PREFIX) as tmp:
        work = Path(tmp)
        sections_json = work / SECTIONS_JSON
        pages_json = work / PAGES_JSON
        draft_pdf = work / PASS1_PDF

        pass1 = dc.replace(
            options,
            output_file=work / PASS1_HTML,
            embed_images=True,
            pdf_mode=True,
            sections_json=sections_json,
            pages_json=None,
        )
        _run_stage("pass1-convert", lambda: convert_to_html(pass1, cfg))
        _run_stage(
            "pass1-render",
            lambda: render_to_pdf(pass1.output_file, draft_pdf, cfg.render),
        )

        result = _run_stage(
            "analyze",
            lambda: analyze_pdf(draft_pdf, sections_json, skip_pages, cfg.analysis),
        )
        _run_stage("analyze", lambda: result.save(pages_json))

        pass2 = dc.replace(
            pass1,
            output_file=work / PASS2_HTML,
            sections_json=None,
            pages_json=pages_json,
        )
        _run_stage("pass2-convert", lambda: convert_to_html(pass2, cfg))
        _run_stage(
            "pass2-render",
            lambda: render_to_pdf(pass2.output_file, output_pdf, cfg.render),
        )

    logger.info("PDF generated: %s", output_pdf)
    return output_pdf


__all__ = ["build_html", "build_pdf", "ensure_suffix"]
