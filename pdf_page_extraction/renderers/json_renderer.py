from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from ..engine import PdfDocument, PdfPage
from ..metadata import MetaDataHandler, PageEntry
from .base import RendererConfig

logger = logging.getLogger(__name__)

INFO_FILENAME = "info.json"


class JsonRenderer:
    """
    Writes structured page data and owns the aggregate metadata file.

    Always runs first for every page, so the entry it records is available to
    the renderers that follow.
    """

    name = "json"

    def __init__(self, config: RendererConfig):
        self.config = config
        self.metadata_handler: Optional[MetaDataHandler] = None

    def set_metadata_handler(self, handler: MetaDataHandler) -> None:
        self.metadata_handler = handler

    def page_data(self, page: PdfPage, scale: float) -> Dict[str, Any]:
        viewport = page.get_viewport(scale)
        return {
            "page_number": page.page_number,
            "label": page.label,
            "width": page.width,
            "height": page.height,
            "rotation": page.rotation,
            "view": page.view,
            "viewport": {
                "width": viewport.width,
                "height": viewport.height,
                "scale": viewport.scale,
            },
            "text": page.get_text_content(),
            "annotations": page.get_annotations(),
        }

    def render_page(self, page: PdfPage) -> None:
        scale = self.config.scale_for(page)
        data = self.page_data(page, scale)
        filename = self.config.page_filename(page.page_number, "json")
        with self.config.path_for(filename).open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=self.config.options.get("json_indent"))
        logger.debug("Wrote %s", filename)

        if self.metadata_handler is not None:
            self.metadata_handler.record_page(
                page.page_number,
                PageEntry(
                    page_number=page.page_number,
                    width=data["width"],
                    height=data["height"],
                    rotation=data["rotation"],
                    scale=scale,
                    label=data["label"],
                    text_items=len(data["text"]),
                    annotations=len(data["annotations"]),
                    artifacts={self.name: filename},
                ),
            )

    def render_document(self, doc: PdfDocument) -> None:
        if self.metadata_handler is None:
            raise RuntimeError("JsonRenderer has no metadata handler")
        self.metadata_handler.finalize(self.config.path_for(INFO_FILENAME))
