"""Render HTML manuals to PDF and recover section page numbers from them."""

from .analyzer import AnalysisResult, SectionPage, analyze_pdf
from .renderer import render_to_pdf

__all__ = ["AnalysisResult", "SectionPage", "analyze_pdf", "render_to_pdf"]
