from __future__ import annotations

import json

import pytest
from PIL import Image

from pdf_page_extraction.engine import load_document
from pdf_page_extraction.metadata import MetaDataHandler
from pdf_page_extraction.renderers import (
    JsonRenderer,
    RasterRenderer,
    RendererConfig,
    VectorRenderer,
    constant_scale,
    fit_width_scale,
    renders_document,
    resolve_scale,
)


@pytest.fixture()
def document(sample_pdf_bytes):
    doc = load_document(sample_pdf_bytes)
    yield doc
    doc.close()


@pytest.fixture()
def handler():
    return MetaDataHandler("test")


def render_with_json(config, handler, page, *renderers):
    json_renderer = JsonRenderer(config)
    json_renderer.set_metadata_handler(handler)
    json_renderer.render_page(page)
    for renderer in renderers:
        renderer.set_metadata_handler(handler)
        renderer.render_page(page)
    return json_renderer


def test_scale_helpers():
    assert resolve_scale(None)(100, 100) == 1.5
    assert resolve_scale(2)(100, 100) == 2.0
    assert constant_scale(0.5)(10, 20) == 0.5
    fit = fit_width_scale(1100, 800)
    assert fit(550, 400) == pytest.approx(2.0)
    assert fit(400, 550) == pytest.approx(2.0)
    with pytest.raises(ValueError):
        constant_scale(0)


def test_json_renderer_records_page_and_finalizes(output_dir, document, handler):
    config = RendererConfig(output_dir, 1.0)
    json_renderer = render_with_json(config, handler, document.get_page(1))

    entry = handler.get_page(1)
    assert entry.label == "p-1"
    assert entry.text_items == 1
    assert entry.annotations == 2
    assert entry.artifacts == {"json": "page-1.json"}

    handler.set_metadata(document.get_metadata())
    handler.set_outline(document.get_outline())
    handler.set_page_labels(document.get_page_labels())
    handler.set_destinations(document.get_destinations())
    json_renderer.render_document(document)
    info = json.loads((output_dir / "info.json").read_text(encoding="utf-8"))
    assert info["version"] == "test"
    assert len(info["pages"]) == 1


def test_json_renderer_needs_handler_to_finalize(output_dir, document):
    with pytest.raises(RuntimeError):
        JsonRenderer(RendererConfig(output_dir)).render_document(document)


def test_raster_renderer_png(output_dir, document, handler):
    config = RendererConfig(output_dir, 2.0)
    render_with_json(config, handler, document.get_page(1), RasterRenderer(config))

    with Image.open(output_dir / "page-1.png") as img:
        assert img.format == "PNG"
        assert img.size == (600, 800)
    assert handler.get_page(1).artifacts["raster"] == "page-1.png"


def test_raster_renderer_jpeg(output_dir, document, handler):
    config = RendererConfig(output_dir, 1.0, {"image_format": "jpeg", "jpeg_quality": 70})
    render_with_json(config, handler, document.get_page(2), RasterRenderer(config))

    with Image.open(output_dir / "page-2.jpeg") as img:
        assert img.format == "JPEG"
        assert img.size == (300, 400)


def test_raster_renderer_rejects_unknown_format(output_dir):
    with pytest.raises(ValueError):
        RasterRenderer(RendererConfig(output_dir, 1.0, {"image_format": "bmp"}))


def test_vector_renderer_pages_and_document(output_dir, document, handler):
    config = RendererConfig(output_dir, 1.0)
    vector = VectorRenderer(config)
    for page_number in (1, 2):
        render_with_json(config, handler, document.get_page(page_number), vector)

    assert "<svg" in (output_dir / "page-1.svg").read_text(encoding="utf-8")
    assert handler.get_page(1).artifacts["vector"] == "page-1.svg"

    vector.render_document(document)
    combined = (output_dir / "document.svg").read_text(encoding="utf-8")
    assert 'height="800"' in combined
    assert 'xlink:href="page-1.svg"' in combined
    assert 'y="400"' in combined
    assert 'xlink:href="page-2.svg"' in combined


def test_document_stage_detection(output_dir):
    config = RendererConfig(output_dir)
    assert renders_document(VectorRenderer(config))
    assert renders_document(JsonRenderer(config))
    assert not renders_document(RasterRenderer(config))
