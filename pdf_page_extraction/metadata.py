from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DOCUMENT_FIELDS = ("pdf_meta_data", "pdf_outline", "pdf_page_labels", "pdf_destinations")


class PageEntry(BaseModel):
    """Summary of one processed page as stored in the aggregate metadata file."""

    page_number: int
    width: float
    height: float
    rotation: int = 0
    scale: float = 1.0
    label: Optional[str] = None
    text_items: int = 0
    annotations: int = 0
    artifacts: Dict[str, str] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    @field_validator("page_number")
    @classmethod
    def validate_page_number(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Page numbers start at 1")
        return value


class ExtractionInfo(BaseModel):
    """JSON mirror of everything collected during one extraction run."""

    version: str
    pages: List[PageEntry] = Field(default_factory=list)
    pdf_meta_data: Optional[Dict[str, Any]] = None
    pdf_outline: Optional[List[Dict[str, Any]]] = None
    pdf_page_labels: Optional[List[str]] = None
    pdf_destinations: Optional[Dict[str, Any]] = None

    model_config = {"extra": "forbid"}


class MetaDataHandler:
    """
    Aggregate built up while a document is extracted.

    Page entries are appended in traversal order by the JSON renderer; later
    renderers may attach their artifacts to the entry of the current page.
    The four document fields are set once each after the last page, then
    :meth:`finalize` writes the whole aggregate.
    """

    def __init__(self, version: str):
        self.version = version
        self.pdf_meta_data: Optional[Dict[str, Any]] = None
        self.pdf_outline: Optional[List[Dict[str, Any]]] = None
        self.pdf_page_labels: Optional[List[str]] = None
        self.pdf_destinations: Optional[Dict[str, Any]] = None
        self.json_data = ExtractionInfo(version=version)
        self._document_fields_set: set[str] = set()
        self._pages_by_number: Dict[int, PageEntry] = {}

    @property
    def pages(self) -> List[PageEntry]:
        return self.json_data.pages

    def record_page(self, page_number: int, entry: PageEntry) -> None:
        """Append the entry for ``page_number``; pages must arrive in increasing order."""
        if entry.page_number != page_number:
            raise ValueError(
                f"Entry for page {entry.page_number} recorded as page {page_number}"
            )
        if self.pages and page_number <= self.pages[-1].page_number:
            raise ValueError(
                f"Page {page_number} recorded after page {self.pages[-1].page_number}"
            )
        self.pages.append(entry)
        self._pages_by_number[page_number] = entry

    def get_page(self, page_number: int) -> PageEntry:
        try:
            return self._pages_by_number[page_number]
        except KeyError:
            raise KeyError(f"No entry recorded for page {page_number}") from None

    def add_page_artifact(self, page_number: int, kind: str, filename: str) -> None:
        self.get_page(page_number).artifacts[kind] = filename

    def set_document_field(self, name: str, value: Any) -> None:
        """Store one of the document-level fields; each may be set only once."""
        if name not in DOCUMENT_FIELDS:
            raise ValueError(f"Unknown document field: {name}")
        if name in self._document_fields_set:
            raise ValueError(f"Document field {name} is already set")
        setattr(self, name, value)
        setattr(self.json_data, name, value)
        self._document_fields_set.add(name)

    def set_metadata(self, value: Dict[str, Any]) -> None:
        self.set_document_field("pdf_meta_data", value)

    def set_outline(self, value: Optional[List[Dict[str, Any]]]) -> None:
        self.set_document_field("pdf_outline", value)

    def set_page_labels(self, value: Optional[List[str]]) -> None:
        self.set_document_field("pdf_page_labels", value)

    def set_destinations(self, value: Optional[Dict[str, Any]]) -> None:
        self.set_document_field("pdf_destinations", value)

    def is_document_field_set(self, name: str) -> bool:
        return name in self._document_fields_set

    def to_json(self) -> str:
        return self.json_data.model_dump_json(indent=2)

    def finalize(self, output_path: Path) -> Path:
        """
        Write the aggregate to ``output_path``.

        Must only be called once every page has been recorded and every
        document field has been set.
        """
        output_path = Path(output_path)
        output_path.write_text(self.to_json(), encoding="utf-8")
        logger.info("Wrote metadata for %d pages to %s", len(self.pages), output_path)
        return output_path
