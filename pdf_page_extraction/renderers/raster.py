from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from ..engine import PdfPage
from ..metadata import MetaDataHandler
from .base import RendererConfig

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG"}


class RasterRenderer:
    """Renders each page to a bitmap image file."""

    name = "raster"

    def __init__(self, config: RendererConfig):
        self.config = config
        self.metadata_handler: Optional[MetaDataHandler] = None
        self.image_format = str(config.options.get("image_format", "png")).lower()
        if self.image_format not in IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format: {self.image_format}")
        self.jpeg_quality = int(config.options.get("jpeg_quality", 90))

    def set_metadata_handler(self, handler: MetaDataHandler) -> None:
        self.metadata_handler = handler

    def render_image(self, page: PdfPage) -> Image.Image:
        pix = page.render_pixmap(self.config.scale_for(page))
        return Image.frombytes("RGB", [pix.width, pix.height], pix.samples)

    def render_page(self, page: PdfPage) -> None:
        img = self.render_image(page)
        filename = self.config.page_filename(page.page_number, self.image_format)
        save_kwargs = {}
        if IMAGE_FORMATS[self.image_format] == "JPEG":
            save_kwargs["quality"] = self.jpeg_quality
        img.save(self.config.path_for(filename), IMAGE_FORMATS[self.image_format], **save_kwargs)
        logger.debug("Wrote %s (%dx%d)", filename, img.width, img.height)

        if self.metadata_handler is not None:
            self.metadata_handler.add_page_artifact(page.page_number, self.name, filename)
