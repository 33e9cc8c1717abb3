from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple
from xml.sax.saxutils import quoteattr

from ..engine import PdfDocument, PdfPage
from ..metadata import MetaDataHandler
from .base import RendererConfig

logger = logging.getLogger(__name__)

DOCUMENT_FILENAME = "document.svg"


class VectorRenderer:
    """
    Writes one SVG per page and a combined SVG for the whole document.

    The combined file stacks the page SVGs vertically and references them by
    file name, so it stays valid only next to the page files.
    """

    name = "vector"

    def __init__(self, config: RendererConfig):
        self.config = config
        self.metadata_handler: Optional[MetaDataHandler] = None
        self.text_as_path = bool(config.options.get("text_as_path", False))
        self._rendered: Dict[int, Tuple[str, float, float]] = {}

    def set_metadata_handler(self, handler: MetaDataHandler) -> None:
        # a new handler starts a new run
        self.metadata_handler = handler
        self._rendered.clear()

    def render_page(self, page: PdfPage) -> None:
        scale = self.config.scale_for(page)
        viewport = page.get_viewport(scale)
        svg = page.render_svg(scale, text_as_path=self.text_as_path)
        filename = self.config.page_filename(page.page_number, "svg")
        self.config.path_for(filename).write_text(svg, encoding="utf-8")
        self._rendered[page.page_number] = (filename, viewport.width, viewport.height)
        logger.debug("Wrote %s", filename)

        if self.metadata_handler is not None:
            self.metadata_handler.add_page_artifact(page.page_number, self.name, filename)

    def document_svg(self) -> str:
        width = max((w for _, w, _ in self._rendered.values()), default=0)
        height = sum(h for _, _, h in self._rendered.values())
        parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{width:g}" height="{height:g}" viewBox="0 0 {width:g} {height:g}">',
        ]
        offset = 0.0
        for page_number in sorted(self._rendered):
            filename, w, h = self._rendered[page_number]
            parts.append(
                f'  <image id="page-{page_number}" x="0" y="{offset:g}" '
                f'width="{w:g}" height="{h:g}" xlink:href={quoteattr(filename)}/>'
            )
            offset += h
        parts.append("</svg>")
        return "\n".join(parts) + "\n"

    def render_document(self, doc: PdfDocument) -> None:
        path = self.config.path_for(DOCUMENT_FILENAME)
        path.write_text(self.document_svg(), encoding="utf-8")
        logger.info("Wrote %s with %d pages", DOCUMENT_FILENAME, len(self._rendered))
        self._rendered.clear()
