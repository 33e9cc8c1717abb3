from __future__ import annotations

import json

import pandas as pd
from typer.testing import CliRunner

from main import app

runner = CliRunner()


def test_extract_command(tmp_path, sample_pdf):
    out = tmp_path / "nested" / "out"

    result = runner.invoke(app, [str(sample_pdf), str(out), "--last-page", "2", "--scale", "1"])

    assert result.exit_code == 0, result.output
    assert "# End of Document" in result.output
    info = json.loads((out / "info.json").read_text(encoding="utf-8"))
    assert [page["page_number"] for page in info["pages"]] == [1, 2]
    assert (out / "page-2.png").exists()
    assert (out / "document.svg").exists()
    assert (tmp_path / "nested" / "out.extraction.log").exists()


def test_extract_command_with_summary(tmp_path, sample_pdf):
    out = tmp_path / "out"
    summary = tmp_path / "pages.xlsx"

    result = runner.invoke(
        app,
        [str(sample_pdf), str(out), "-r", "raster", "--image-format", "jpeg", "--summary", str(summary)],
    )

    assert result.exit_code == 0, result.output
    assert not (out / "page-1.svg").exists()
    df = pd.read_excel(summary, sheet_name="pages")
    assert list(df["page_number"]) == [1, 2, 3]
    assert list(df["raster"]) == ["page-1.jpeg", "page-2.jpeg", "page-3.jpeg"]
    assert list(df["label"]) == ["p-1", "p-2", "p-3"]


def test_unknown_renderer(tmp_path, sample_pdf):
    result = runner.invoke(app, [str(sample_pdf), str(tmp_path / "out"), "-r", "html"])

    assert result.exit_code != 0


def test_invalid_pdf_reports_error(tmp_path):
    bogus = tmp_path / "bogus.pdf"
    bogus.write_bytes(b"not a pdf")

    result = runner.invoke(app, [str(bogus), str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Error:" in result.output
