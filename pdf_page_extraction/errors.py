"""Errors raised by an extraction run.

Every error is fatal to the run. When a step fails because of an underlying
fault, the fault is chained as ``__cause__``.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for all extraction errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "PDF extraction failed."


class PreconditionError(ExtractionError):
    """Raised when the output directory is not readable and writable."""

    @property
    def default_message(self) -> str:
        return "Output directory is not accessible."


class DocumentLoadError(ExtractionError):
    """Raised when the PDF bytes cannot be opened as a document."""

    @property
    def default_message(self) -> str:
        return "Invalid or unreadable PDF document."


class PageFetchError(ExtractionError):
    """Raised when a page cannot be retrieved from the document."""

    def __init__(self, page_number: int, message: str = "") -> None:
        self.page_number = page_number
        super().__init__(message or f"Cannot fetch page {page_number}.")


class RenderError(ExtractionError):
    """Raised when a renderer fails on a page or on the whole document."""

    def __init__(self, renderer: str, page_number: int | None = None, message: str = "") -> None:
        self.renderer = renderer
        self.page_number = page_number
        if not message:
            where = f"page {page_number}" if page_number is not None else "document"
            message = f"Renderer {renderer} failed on {where}."
        super().__init__(message)


class MetadataFetchError(ExtractionError):
    """Raised when one of the document metadata fetches fails."""

    def __init__(self, field: str, message: str = "") -> None:
        self.field = field
        super().__init__(message or f"Cannot fetch document {field}.")
