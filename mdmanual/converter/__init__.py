"""Utilities for normalizing, converting, and assembling Markdown manuals."""

from .assembler import (
    DocumentAssembler,
    apply_page_numbers,
    convert_to_html,
    extract_subheadings,
    load_page_map,
    write_sections_manifest,
)
from .link_rewriter import InternalAnchorExtension
from .models import ManualContext, Section, SubHeading
from .renderer import HtmlContentRenderer
from .sources import discover_sources, extract_title, generate_id

__all__ = [
    "DocumentAssembler",
    "HtmlContentRenderer",
    "InternalAnchorExtension",
    "ManualContext",
    "Section",
    "SubHeading",
    "apply_page_numbers",
    "convert_to_html",
    "discover_sources",
    "extract_subheadings",
    "generate_id",
    "load_page_map",
    "write_sections_manifest",
]
