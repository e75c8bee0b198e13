"""Exception hierarchy raised by the PDF generation pipeline."""
from __future__ import annotations


class DeclarativePdfError(Exception):
    """Base class for every error raised while generating a document."""


class TemplateParsingError(DeclarativePdfError, ValueError):
    """The HTML template describes pages the engine cannot lay out."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Template parsing error: {message}")


class LayoutError(DeclarativePdfError, ValueError):
    """Computed page geometry violates a layout invariant."""


class ResourceStateError(DeclarativePdfError, RuntimeError):
    """The browser or tab is not in a state that allows the requested call."""


class SectionIsolationError(DeclarativePdfError, RuntimeError):
    """A resolved section could not be isolated in the rendered document."""
