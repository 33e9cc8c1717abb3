"""
pdf_page_extraction walks a PDF page by page and writes structured data,
raster images and vector images for every page into an output directory.

The layout separates the PyMuPDF binding, the renderers producing the
artifacts, the aggregate metadata handler and the orchestrator sequencing
them.
"""

__version__ = "0.1.0"

from .errors import (  # noqa: E402
    DocumentLoadError,
    ExtractionError,
    MetadataFetchError,
    PageFetchError,
    PreconditionError,
    RenderError,
)
from .metadata import MetaDataHandler  # noqa: E402
from .orchestrator import ExtractionOrchestrator, ExtractionState  # noqa: E402

__all__ = [
    "DocumentLoadError",
    "ExtractionError",
    "ExtractionOrchestrator",
    "ExtractionState",
    "MetaDataHandler",
    "MetadataFetchError",
    "PageFetchError",
    "PreconditionError",
    "RenderError",
    "__version__",
]
