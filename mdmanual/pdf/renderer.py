"""Render a complete HTML document to PDF with headless Chromium.

The document is opened from a ``file://`` URL so relative assets resolve,
given fixed settle periods for fonts, images, and client-side diagrams, and
printed with the engine's native print-to-PDF: backgrounds on, CSS page size
preferred, zero engine margins (the template draws its own margins, headers,
and footers).

One deadline bounds the whole render. Launch, navigation, and settle waits
are cut short when it expires. The print call itself accepts no timeout, so a
slow print is allowed to finish but its output is discarded when it arrives
after the deadline. Nothing is written unless the engine returns a complete
byte buffer in time.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from mdmanual.config import RenderOptions
from mdmanual.errors import OutputWriteError, RenderError, RenderTimeoutError

logger = logging.getLogger(__name__)

DIAGRAM_SELECTOR = ".mermaid"
BROWSER_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-background-networking",
]
MIN_SCALE = 0.1
MAX_SCALE = 2.0
ZERO_MARGINS = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


class _Deadline:
    """Remaining-time bookkeeping for one render."""

    def __init__(self, seconds: float) -> None:
        self._expires = time.monotonic() + seconds
        self.seconds = seconds

    def remaining_ms(self) -> float:
        """Return the milliseconds left, raising once the deadline has passed."""
        remaining = (self._expires - time.monotonic()) * 1000
        if remaining <= 0:
            msg = f"rendering exceeded the {self.seconds:g}s timeout"
            raise RenderTimeoutError(msg)
        return remaining

    def sleep_ms(self, milliseconds: float) -> float:
        """Return a settle duration clipped to the remaining time."""
        return min(milliseconds, self.remaining_ms())


def _validate(options: RenderOptions) -> None:
    if not MIN_SCALE <= options.scale <= MAX_SCALE:
        msg = f"scale must be between {MIN_SCALE} and {MAX_SCALE}, got {options.scale}"
        raise RenderError(msg)
    if options.timeout <= 0:
        msg = f"timeout must be positive, got {options.timeout}"
        raise RenderError(msg)


def _print_pdf(file_url: str, options: RenderOptions, deadline: _Deadline) -> bytes:
    """Drive the browser and return the printed PDF bytes."""
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(
            headless=True, args=BROWSER_ARGS, timeout=deadline.remaining_ms()
        )
        try:
            page = browser.new_page()
            page.goto(
                file_url, wait_until="domcontentloaded", timeout=deadline.remaining_ms()
            )
            page.wait_for_selector("body", state="attached", timeout=deadline.remaining_ms())
            page.wait_for_timeout(deadline.sleep_ms(options.settle_seconds * 1000))

            if page.query_selector(DIAGRAM_SELECTOR) is not None:
                logger.info("Waiting for diagrams to render...")
                page.wait_for_timeout(
                    deadline.sleep_ms(options.diagram_settle_seconds * 1000)
                )

            page.set_default_timeout(deadline.remaining_ms())
            payload = page.pdf(
                print_background=True,
                prefer_css_page_size=True,
                scale=options.scale,
                landscape=options.landscape,
                margin=ZERO_MARGINS,
            )
            # page.pdf takes no timeout; a late result is discarded unwritten
            deadline.remaining_ms()
            return payload
        finally:
            browser.close()


def render_to_pdf(
    input_html: Path,
    output_pdf: Path | None = None,
    options: RenderOptions | None = None,
) -> Path:
    """Print ``input_html`` to a PDF file.

    Parameters
    ----------
    input_html : Path
        Complete HTML document to render.
    output_pdf : Path, optional
        Destination; defaults to ``input_html`` with a ``.pdf`` suffix. Parent
        directories are created as needed.
    options : RenderOptions, optional
        Scale, orientation, timeout, and settle durations.

    Returns
    -------
    Path
        The written PDF path.

    Raises
    ------
    RenderError
        If the input is missing, the options are invalid, or the engine fails
        to launch, load, or print.
    RenderTimeoutError
        If the overall deadline passes before the PDF is complete.
    OutputWriteError
        If the PDF bytes cannot be written.
    """
    opts = options or RenderOptions()
    _validate(opts)
    source = input_html.resolve()
    if not source.is_file():
        msg = f"input HTML not found: {input_html}"
        raise RenderError(msg)
    target = output_pdf or input_html.with_suffix(".pdf")

    logger.info("Converting: %s", source)
    deadline = _Deadline(opts.timeout)
    try:
        payload = _print_pdf(source.as_uri(), opts, deadline)
    except PlaywrightTimeoutError as exc:
        msg = f"rendering {input_html} timed out: {exc}"
        raise RenderTimeoutError(msg) from exc
    except PlaywrightError as exc:
        msg = f"browser engine failed on {input_html}: {exc}"
        raise RenderError(msg) from exc

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
    except OSError as exc:
        msg = f"failed to write PDF {target}: {exc}"
        raise OutputWriteError(msg) from exc
    logger.info("Generated PDF: %s (%.1f MB)", target, len(payload) / (1024 * 1024))
    return target


__all__ = ["BROWSER_ARGS", "render_to_pdf"]
