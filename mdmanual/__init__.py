"""Build styled HTML and paginated PDF manuals from Markdown directories.

This package exposes the CLI entry points used by the ``mdmanual`` console
script to convert Markdown into a single HTML document and, through a
two-pass render, into a PDF whose table of contents carries the real page
numbers.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from mdmanual import main
>>> main(["build", "-i", "docs", "-o", "manual.pdf"])  # doctest: +SKIP
0
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
