"""Logging setup shared by the CLI entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(levelname)s: %(message)s"


def _resolve_level(verbose: bool, debug: bool) -> int:
    return logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)


def setup_logging(*, verbose: bool = False, debug: bool = False) -> None:
    """Configure root logging level and format from the CLI flags.

    Warnings (skipped files, missing assets, unmatched titles) are always
    shown; ``verbose`` adds stage progress and ``debug`` adds per-page
    analyzer traces.
    """
    level = _resolve_level(verbose, debug)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("mdmanual").setLevel(level)


__all__ = ["LOG_FORMAT", "setup_logging"]
