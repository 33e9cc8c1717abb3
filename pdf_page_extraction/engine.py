"""PyMuPDF binding for the document and page handles used during extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import fitz  # PyMuPDF

from .errors import DocumentLoadError

logger = logging.getLogger(__name__)

_ENVIRONMENT_INSTALLED = False


def install_environment() -> bool:
    """
    Configure the process-wide engine state once.

    MuPDF echoes its diagnostics straight to stderr by default; they are
    silenced here and collected from ``fitz.TOOLS`` into the log instead.
    Returns True on the call that performed the installation, False on every
    later call.
    """
    global _ENVIRONMENT_INSTALLED
    if _ENVIRONMENT_INSTALLED:
        return False
    fitz.TOOLS.mupdf_display_errors(False)
    fitz.TOOLS.mupdf_display_warnings(False)
    fitz.TOOLS.reset_mupdf_warnings()
    _ENVIRONMENT_INSTALLED = True
    logger.debug("Installed PyMuPDF %s environment", fitz.VersionBind)
    return True


def environment_installed() -> bool:
    return _ENVIRONMENT_INSTALLED


def load_document(data: bytes) -> "PdfDocument":
    """
    Open PDF bytes and return a document handle.

    Raises DocumentLoadError for empty, malformed or encrypted input.
    """
    if not data:
        raise DocumentLoadError("PDF data is empty.")
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise DocumentLoadError(f"Cannot open PDF: {exc}") from exc

    warnings = fitz.TOOLS.mupdf_warnings()
    if warnings:
        logger.debug("MuPDF warnings while loading: %s", warnings)

    if doc.needs_pass:
        doc.close()
        raise DocumentLoadError("PDF is encrypted and cannot be processed without a password.")
    if doc.page_count == 0:
        doc.close()
        raise DocumentLoadError("PDF has no pages.")
    return PdfDocument(doc)


def _rect(rect: fitz.Rect) -> List[float]:
    return [round(rect.x0, 3), round(rect.y0, 3), round(rect.x1, 3), round(rect.y1, 3)]


def _color(value: int) -> str:
    return f"#{value:06x}"


@dataclass(frozen=True)
class Viewport:
    """Page geometry at a given scale."""

    width: float
    height: float
    scale: float
    rotation: int

    @property
    def matrix(self) -> fitz.Matrix:
        return fitz.Matrix(self.scale, self.scale)


class PdfPage:
    """One page of a loaded document, numbered from 1."""

    def __init__(self, page: fitz.Page, page_number: int):
        self._page = page
        self.page_number = page_number

    @property
    def width(self) -> float:
        return self._page.rect.width

    @property
    def height(self) -> float:
        return self._page.rect.height

    @property
    def rotation(self) -> int:
        return self._page.rotation

    @property
    def view(self) -> List[float]:
        return _rect(self._page.mediabox)

    @property
    def label(self) -> Optional[str]:
        return self._page.get_label() or None

    def get_viewport(self, scale: float) -> Viewport:
        return Viewport(
            width=self.width * scale,
            height=self.height * scale,
            scale=scale,
            rotation=self.rotation,
        )

    def get_text_content(self) -> List[Dict[str, Any]]:
        """Text spans in reading order with their bounding boxes and fonts."""
        items: List[Dict[str, Any]] = []
        blocks = self._page.get_text("dict", sort=True).get("blocks", [])
        for block in blocks:
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    if not span["text"].strip():
                        continue
                    items.append(
                        {
                            "text": span["text"],
                            "bbox": [round(v, 3) for v in span["bbox"]],
                            "font": span["font"],
                            "size": round(span["size"], 3),
                            "color": _color(span["color"]),
                            "direction": "rtl" if line.get("dir", (1, 0))[0] < 0 else "ltr",
                        }
                    )
        return items

    def get_annotations(self) -> List[Dict[str, Any]]:
        """Link and markup annotations with normalized rectangles."""
        annotations: List[Dict[str, Any]] = []
        for link in self._page.get_links():
            entry: Dict[str, Any] = {"subtype": "Link", "rect": _rect(link["from"])}
            if link.get("uri"):
                entry["url"] = link["uri"]
            if link.get("nameddest"):
                entry["dest"] = link["nameddest"]
            if link.get("kind") == fitz.LINK_GOTO and link.get("page", -1) >= 0:
                entry["page"] = link["page"] + 1
            annotations.append(entry)
        for annot in self._page.annots():
            annotations.append(
                {
                    "subtype": annot.type[1],
                    "rect": _rect(annot.rect),
                    "contents": annot.info.get("content", ""),
                }
            )
        return annotations

    def render_pixmap(self, scale: float) -> fitz.Pixmap:
        return self._page.get_pixmap(matrix=self.get_viewport(scale).matrix, alpha=False)

    def render_svg(self, scale: float, *, text_as_path: bool = False) -> str:
        return self._page.get_svg_image(
            matrix=self.get_viewport(scale).matrix, text_as_path=text_as_path
        )


class PdfDocument:
    """Loaded PDF document exposing 1-based page access and document metadata."""

    def __init__(self, doc: fitz.Document):
        self._doc = doc

    @property
    def num_pages(self) -> int:
        return self._doc.page_count

    def get_page(self, page_number: int) -> PdfPage:
        if not 1 <= page_number <= self.num_pages:
            raise IndexError(f"Page {page_number} outside 1..{self.num_pages}")
        return PdfPage(self._doc.load_page(page_number - 1), page_number)

    def get_metadata(self) -> Dict[str, Any]:
        info = {key: value for key, value in self._doc.metadata.items() if value}
        return {"info": info, "xmp": self._doc.get_xml_metadata() or None}

    def get_outline(self) -> Optional[List[Dict[str, Any]]]:
        """
        Outline as a nested tree, or None when the document has no outline.

        Each node is ``{"title", "destination", "page", "children"}``.
        """
        toc = self._doc.get_toc(simple=False)
        if not toc:
            return None

        root: List[Dict[str, Any]] = []
        # stack[i] holds the children list for level i + 1
        stack: List[List[Dict[str, Any]]] = [root]
        for level, title, page, dest in toc:
            node = {
                "title": title,
                "destination": dest.get("nameddest") or dest.get("uri") or None,
                "page": page if page > 0 else None,
                "children": [],
            }
            del stack[level:]
            stack[-1].append(node)
            stack.append(node["children"])
        return root

    def get_page_labels(self) -> Optional[List[str]]:
        """One label per page, or None when no labels are defined."""
        if not self._doc.get_page_labels():
            return None
        return [page.get_label() for page in self._doc]

    def get_destinations(self) -> Dict[str, Dict[str, Any]]:
        destinations: Dict[str, Dict[str, Any]] = {}
        for name, target in sorted(self._doc.resolve_names().items()):
            page = target.get("page", -1)
            to = target.get("to")
            destinations[name] = {
                "page": page + 1 if page >= 0 else None,
                "to": [round(float(v), 3) for v in to] if to else None,
                "zoom": target.get("zoom"),
            }
        return destinations

    def close(self) -> None:
        self._doc.close()
