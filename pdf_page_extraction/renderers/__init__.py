"""Renderers turning document pages into output artifacts."""

from .base import (
    DocumentRenderer,
    Renderer,
    RendererConfig,
    constant_scale,
    fit_width_scale,
    renders_document,
    resolve_scale,
)
from .json_renderer import JsonRenderer
from .raster import RasterRenderer
from .vector import VectorRenderer

RENDERERS = {
    RasterRenderer.name: RasterRenderer,
    VectorRenderer.name: VectorRenderer,
}

__all__ = [
    "DocumentRenderer",
    "JsonRenderer",
    "RENDERERS",
    "RasterRenderer",
    "Renderer",
    "RendererConfig",
    "VectorRenderer",
    "constant_scale",
    "fit_width_scale",
    "renders_document",
    "resolve_scale",
]
