"""Renderer capability set and shared renderer configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Protocol, Union, runtime_checkable

from ..engine import PdfDocument, PdfPage
from ..metadata import MetaDataHandler

ScaleFunction = Callable[[float, float], float]

DEFAULT_VIEWPORT_SCALE = 1.5


def constant_scale(scale: float) -> ScaleFunction:
    if scale <= 0:
        raise ValueError("Viewport scale must be positive")
    return lambda width, height: scale


def fit_width_scale(landscape_width: float, portrait_width: float) -> ScaleFunction:
    """Scale landscape pages to ``landscape_width`` and the others to ``portrait_width``."""

    def scale(width: float, height: float) -> float:
        if width > height:
            return landscape_width / width
        return portrait_width / width

    return scale


def resolve_scale(value: Union[float, ScaleFunction, None]) -> ScaleFunction:
    if value is None:
        return constant_scale(DEFAULT_VIEWPORT_SCALE)
    if callable(value):
        return value
    return constant_scale(float(value))


@dataclass
class RendererConfig:
    """Settings shared by every renderer of a run."""

    output_dir: Path
    viewport_scale: ScaleFunction = field(default_factory=lambda: resolve_scale(None))
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        self.viewport_scale = resolve_scale(self.viewport_scale)

    def scale_for(self, page: PdfPage) -> float:
        return self.viewport_scale(page.width, page.height)

    def page_filename(self, page_number: int, extension: str) -> str:
        return f"page-{page_number}.{extension}"

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename


@runtime_checkable
class Renderer(Protocol):
    """Turns one page into this renderer's artifacts."""

    def set_metadata_handler(self, handler: MetaDataHandler) -> None:
        ...

    def render_page(self, page: PdfPage) -> None:
        ...


@runtime_checkable
class DocumentRenderer(Renderer, Protocol):
    """Renderer that also produces one artifact for the whole document."""

    def render_document(self, doc: PdfDocument) -> None:
        ...


def renders_document(renderer: Renderer) -> bool:
    return callable(getattr(renderer, "render_document", None))


def renderer_name(renderer: Renderer) -> str:
    return getattr(renderer, "name", type(renderer).__name__)
