"""Load and validate document configuration for mdmanual builds.

This subpackage parses the optional ``AUTHORS.yml`` file, resolves document
metadata (title, author, header, footer), analyzer heuristics, and renderer
settings, and produces typed dataclasses (:class:`DocumentConfig`,
:class:`ConvertOptions`, etc.) that the converter and the PDF pipeline
consume.

Examples
--------
>>> from pathlib import Path
>>> from mdmanual.config import load_document_config
>>> config = load_document_config(None)
>>> config.analysis.max_toc_titles
5
"""

from .helpers import resolve_value
from .loader import load_document_config
from .models import (
    ConfigError,
    ConvertOptions,
    DocumentConfig,
    DocumentMeta,
    PageHeuristics,
    RenderOptions,
)

__all__ = [
    "ConfigError",
    "ConvertOptions",
    "DocumentConfig",
    "DocumentMeta",
    "PageHeuristics",
    "RenderOptions",
    "load_document_config",
    "resolve_value",
]
