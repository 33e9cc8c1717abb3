from __future__ import annotations

from pathlib import Path

import fitz
import pytest


def build_pdf(num_pages: int = 3, *, with_structure: bool = True) -> bytes:
    """Build a portrait PDF (300x400pt) with one line of text per page."""
    doc = fitz.open()
    for index in range(num_pages):
        page = doc.new_page(width=300, height=400)
        page.insert_text((50, 72), f"Page {index + 1}", fontsize=14)

    if with_structure:
        doc[0].insert_link(
            {
                "kind": fitz.LINK_URI,
                "from": fitz.Rect(50, 100, 150, 120),
                "uri": "https://example.com/",
            }
        )
        doc[0].add_text_annot((200, 200), "Review this page")
        doc.set_metadata(
            {"title": "Sample", "author": "Extraction Tests", "producer": "pdf-page-extraction-tests"}
        )
        toc = [[1, "Chapter 1", 1]]
        if num_pages > 1:
            toc.append([2, "Section 1.1", 2])
        if num_pages > 2:
            toc.append([1, "Chapter 2", 3])
        doc.set_toc(toc)
        doc.set_page_labels([{"startpage": 0, "prefix": "p-", "style": "D", "firstpagenum": 1}])

    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    return build_pdf(3)


@pytest.fixture()
def sample_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(sample_pdf_bytes)
    return pdf_path


@pytest.fixture()
def five_page_pdf_bytes() -> bytes:
    return build_pdf(5, with_structure=False)


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture()
def events() -> list:
    return []
