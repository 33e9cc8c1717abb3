import hashlib
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
import typer

from pdf_page_extraction.errors import ExtractionError
from pdf_page_extraction.orchestrator import ExtractionOrchestrator
from pdf_page_extraction.renderers import RENDERERS, RendererConfig, fit_width_scale

load_dotenv()


app = typer.Typer(add_completion=False)


@app.command()
def extract(
    pdf_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF file to extract"),
    output_dir: Path = typer.Argument(Path("."), help="Directory receiving the artifacts"),
    first_page: int = typer.Option(1, "--first-page", help="First page to extract (1-based)"),
    last_page: Optional[int] = typer.Option(
        None, "--last-page", "--max-pages", "-n", help="Last page to extract (default: all)"
    ),
    scale: float = typer.Option(
        1.5, "--scale", envvar="PDF_EXTRACT_SCALE", help="Viewport scale factor"
    ),
    fit_width: Optional[int] = typer.Option(
        None,
        "--fit-width",
        help="Scale pages to this width in pixels (landscape pages to 11/8 of it)",
    ),
    renderer_names: List[str] = typer.Option(
        ["raster", "vector"],
        "--renderer",
        "-r",
        help=f"Renderers to run after the JSON renderer ({', '.join(RENDERERS)})",
    ),
    image_format: str = typer.Option(
        "png", "--image-format", envvar="PDF_EXTRACT_IMAGE_FORMAT", help="png or jpeg"
    ),
    summary: Optional[Path] = typer.Option(
        None, "--summary", help="Optional Excel file receiving a per-page summary"
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="PDF_EXTRACT_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """
    Extract text, metadata, page images and vector drawings from a PDF.
    """
    output_dir = output_dir.resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir.with_name(f"{output_dir.name}.extraction.log")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path),
        ],
        force=True,
    )
    logger = logging.getLogger(__name__)
    logger.info("Logging to %s", log_path)

    unknown = [name for name in renderer_names if name not in RENDERERS]
    if unknown:
        raise typer.BadParameter(f"Unknown renderer(s): {', '.join(unknown)}", param_hint="--renderer")

    data = pdf_path.read_bytes()
    logger.info("input: %s (md5 %s) output: %s", pdf_path, hashlib.md5(data).hexdigest(), output_dir)

    viewport_scale = fit_width_scale(fit_width * 11 / 8, fit_width) if fit_width else scale
    options = {"image_format": image_format}
    config = RendererConfig(output_dir, viewport_scale, options)

    try:
        orchestrator = ExtractionOrchestrator(
            output_dir,
            page_range=(first_page, last_page),
            viewport_scale=viewport_scale,
            renderers=[RENDERERS[name](config) for name in renderer_names],
            options=options,
        )
        handler = orchestrator.parse_from_bytes(data)
    except (ExtractionError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("# End of Document")
    typer.echo(f"Extracted {len(handler.pages)} pages to {output_dir}")
    if summary is not None:
        orchestrator.to_excel(summary, handler)
        typer.echo(f"Wrote page summary to {summary}")


def main():
    app()


if __name__ == "__main__":
    main()
