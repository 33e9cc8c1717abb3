from __future__ import annotations

import enum
import logging
import math
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from . import __version__
from .engine import PdfDocument, PdfPage, install_environment, load_document
from .errors import (
    DocumentLoadError,
    MetadataFetchError,
    PageFetchError,
    PreconditionError,
    RenderError,
)
from .metadata import MetaDataHandler
from .renderers import (
    JsonRenderer,
    RasterRenderer,
    Renderer,
    RendererConfig,
    VectorRenderer,
    renders_document,
)
from .renderers.base import ScaleFunction, renderer_name

logger = logging.getLogger(__name__)

PageRange = Tuple[int, Optional[int]]


class ExtractionState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    PER_PAGE = "per_page"
    COLLECTING_METADATA = "collecting_metadata"
    FINALIZING_DOCUMENT = "finalizing_document"
    DONE = "done"
    FAILED = "failed"


def _normalize_page_range(page_range: Sequence[Any]) -> PageRange:
    if len(page_range) != 2:
        raise ValueError("Page range must be a (start, end) pair")
    start, end = page_range
    if end is not None and isinstance(end, float) and math.isinf(end):
        end = None
    return int(start), None if end is None else int(end)


class ExtractionOrchestrator:
    """
    Walks a PDF page by page and feeds every page through the renderers.

    Everything runs strictly in sequence: for each page the JSON renderer runs
    first, then the configured renderers in list order, and the next page is
    only fetched once all of them returned. Document metadata is collected
    after the last page, then the document-level renderers run and the JSON
    renderer writes the aggregate metadata file.

    Any fault aborts the run; files already written stay on disk.
    """

    def __init__(
        self,
        output_dir: Path | str,
        *,
        page_range: Sequence[Any] = (1, None),
        viewport_scale: float | ScaleFunction | None = None,
        renderers: Optional[List[Renderer]] = None,
        options: Optional[Dict[str, Any]] = None,
        json_renderer: Optional[Renderer] = None,
        document_loader: Callable[[bytes], PdfDocument] = load_document,
        version: str = __version__,
    ):
        self.output_dir = Path(output_dir)
        if not self.output_dir.is_dir() or not os.access(self.output_dir, os.R_OK | os.W_OK):
            raise PreconditionError(
                f"Output directory {self.output_dir} must exist and be readable and writable."
            )

        self.page_range = _normalize_page_range(page_range)
        self.options = dict(options or {})
        self.config = RendererConfig(self.output_dir, viewport_scale, self.options)
        self.renderers: List[Renderer] = (
            list(renderers)
            if renderers is not None
            else [RasterRenderer(self.config), VectorRenderer(self.config)]
        )
        self.json_renderer: Renderer = json_renderer or JsonRenderer(self.config)
        self.document_loader = document_loader
        self.version = version

        self.state = ExtractionState.IDLE
        self.processed_pages: List[int] = []
        self.metadata_handler = MetaDataHandler(version)
        self._attach_handler()

    def _attach_handler(self) -> None:
        self.json_renderer.set_metadata_handler(self.metadata_handler)
        for renderer in self.renderers:
            renderer.set_metadata_handler(self.metadata_handler)

    def _begin_run(self) -> None:
        self.metadata_handler = MetaDataHandler(self.version)
        self._attach_handler()
        self.processed_pages = []
        self.state = ExtractionState.IDLE

    def _transition(self, state: ExtractionState, detail: Any = None) -> None:
        self.state = state
        if state is ExtractionState.PER_PAGE:
            logger.debug("Processing page %s", detail)
        else:
            logger.info("Extraction state: %s", state.value)

    def page_numbers(self, num_pages: int) -> range:
        """Requested page range clamped to ``1..num_pages``."""
        start, end = self.page_range
        first = max(1, start)
        last = num_pages if end is None else min(end, num_pages)
        return range(first, last + 1)

    def parse(self, pdf_path: Path | str) -> MetaDataHandler:
        return self.parse_from_bytes(Path(pdf_path).read_bytes())

    def parse_from_bytes(self, data: bytes) -> MetaDataHandler:
        self._begin_run()
        self._transition(ExtractionState.LOADING)
        try:
            install_environment()
            doc = self.document_loader(data)
        except DocumentLoadError:
            self._transition(ExtractionState.FAILED)
            raise
        except Exception as exc:
            self._transition(ExtractionState.FAILED)
            raise DocumentLoadError(f"Cannot load PDF: {exc}") from exc

        try:
            return self._extract(doc)
        finally:
            doc.close()

    def parse_document(self, doc: PdfDocument) -> MetaDataHandler:
        """Run the extraction on an already loaded document."""
        self._begin_run()
        return self._extract(doc)

    def _extract(self, doc: PdfDocument) -> MetaDataHandler:
        try:
            num_pages = doc.num_pages
            pages = self.page_numbers(num_pages)
            logger.info(
                "Extracting pages %d-%d of %d to %s",
                pages.start,
                pages.stop - 1,
                num_pages,
                self.output_dir,
            )
            for page_number in pages:
                self._transition(ExtractionState.PER_PAGE, page_number)
                page = self._fetch_page(doc, page_number)
                self.render_page_data(page)
                self.processed_pages.append(page_number)

            self._transition(ExtractionState.COLLECTING_METADATA)
            self.render_metadata(doc)

            self._transition(ExtractionState.FINALIZING_DOCUMENT)
            self.render_document_data(doc)
        except Exception:
            self._transition(ExtractionState.FAILED)
            raise

        self._transition(ExtractionState.DONE)
        return self.metadata_handler

    def _fetch_page(self, doc: PdfDocument, page_number: int) -> PdfPage:
        try:
            return doc.get_page(page_number)
        except Exception as exc:
            logger.exception("Fetching page %d failed", page_number)
            raise PageFetchError(page_number, f"Cannot fetch page {page_number}: {exc}") from exc

    def _run_renderer(self, renderer: Renderer, step: Callable[[], None], page_number: int | None) -> None:
        try:
            step()
        except Exception as exc:
            name = renderer_name(renderer)
            where = f"page {page_number}" if page_number is not None else "document"
            logger.exception("Renderer %s failed on %s", name, where)
            raise RenderError(name, page_number, f"Renderer {name} failed on {where}: {exc}") from exc

    def render_page_data(self, page: PdfPage) -> None:
        for renderer in [self.json_renderer, *self.renderers]:
            self._run_renderer(renderer, lambda: renderer.render_page(page), page.page_number)

    def render_metadata(self, doc: PdfDocument) -> None:
        handler = self.metadata_handler
        steps: Iterable[Tuple[str, Callable[[], Any], Callable[[Any], None]]] = (
            ("metadata", doc.get_metadata, handler.set_metadata),
            ("outline", doc.get_outline, handler.set_outline),
            ("page labels", doc.get_page_labels, handler.set_page_labels),
            ("destinations", doc.get_destinations, handler.set_destinations),
        )
        for field, fetch, store in steps:
            try:
                value = fetch()
            except Exception as exc:
                logger.exception("Fetching document %s failed", field)
                raise MetadataFetchError(field, f"Cannot fetch document {field}: {exc}") from exc
            store(value)

    def render_document_data(self, doc: PdfDocument) -> None:
        for renderer in self.renderers:
            if renders_document(renderer):
                self._run_renderer(renderer, lambda: renderer.render_document(doc), None)
        self._run_renderer(self.json_renderer, lambda: self.json_renderer.render_document(doc), None)

    def to_dataframe(self, handler: Optional[MetaDataHandler] = None) -> pd.DataFrame:
        """
        Flatten the page entries into a DataFrame.

        Columns: page_number, label, width, height, rotation, scale,
        text_items, annotations, <artifact kinds...>
        """
        handler = handler or self.metadata_handler
        rows: List[Dict[str, Any]] = []
        for entry in handler.pages:
            row = entry.model_dump(exclude={"artifacts"})
            row.update(entry.artifacts)
            rows.append(row)
        return pd.DataFrame(rows)

    def to_excel(self, output_path: Path, handler: Optional[MetaDataHandler] = None) -> None:
        """
        Write the page summary to an Excel file with sheet 'pages'.
        """
        df = self.to_dataframe(handler)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing page summary to %s", output_path)
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="pages", index=False)
