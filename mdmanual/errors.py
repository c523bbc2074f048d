"""Exception hierarchy for fatal mdmanual failures.

Degraded conditions (a missing image, an unreadable Markdown file, an unmatched
title) are logged and never raised; everything here aborts the build and maps
to exit code 1 in the CLI.
"""

from __future__ import annotations


class ManualError(RuntimeError):
    """Base class for errors that abort a document build."""


class InputNotFoundError(ManualError):
    """Raised when the input directory or file cannot be found."""


class TemplateError(ManualError):
    """Raised when the requested document template is missing or fails."""


class OutputWriteError(ManualError):
    """Raised when an output artifact cannot be written to disk."""


class RenderError(ManualError):
    """Raised when the browser engine fails to produce a PDF."""


class RenderTimeoutError(RenderError):
    """Raised when rendering exceeds its overall deadline."""


class AnalysisError(ManualError):
    """Raised when the draft PDF or the sections manifest cannot be read."""


class PipelineError(ManualError):
    """Raised when a two-pass pipeline stage fails.

    Attributes
    ----------
    stage : str
        Name of the stage that failed (for example ``"pass1-render"``).
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage


__all__ = [
    "AnalysisError",
    "InputNotFoundError",
    "ManualError",
    "OutputWriteError",
    "PipelineError",
    "RenderError",
    "RenderTimeoutError",
    "TemplateError",
]
