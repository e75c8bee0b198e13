"""Entry-point for the HTML template to PDF pipeline."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from playwright.sync_api import sync_playwright

from declarative_pdf.config import GeneratorOptions
from declarative_pdf.generator import DeclarativePdf
from declarative_pdf.model.document_model import DocumentMetadata
from declarative_pdf.model.paper_model import PaperDefaults
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)


def render_html(
    html: str,
    options: Optional[GeneratorOptions] = None,
    metadata: Optional[DocumentMetadata] = None,
) -> bytes:
    """Launch headless Chromium, generate the PDF for ``html`` and shut the browser down."""
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True)
        try:
            return DeclarativePdf.from_browser(browser, options).generate(html, metadata)
        finally:
            browser.close()


def main(template_file: str, output_file: Optional[str] = None, options: Optional[GeneratorOptions] = None,
         metadata: Optional[DocumentMetadata] = None) -> Path:
    """Run the template → layout → PDF pipeline and write the result next to the template by default."""
    template_path = Path(template_file).resolve()
    if not template_path.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")

    output_path = Path(output_file).resolve() if output_file else template_path.with_suffix(".pdf")

    LOGGER.info("Generating PDF for %s", template_path.name)
    pdf_bytes = render_html(template_path.read_text(encoding="utf-8"), options, metadata)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    LOGGER.info("Wrote %d bytes into %s", len(pdf_bytes), output_path)
    return output_path


def cli(argv: Optional[List[str]] = None) -> Path:
    import argparse

    parser = argparse.ArgumentParser(description="Render declarative HTML templates into paginated PDFs")
    parser.add_argument("template_file", help="Path to the HTML template")
    parser.add_argument("--output", help="Path of the PDF to write")
    parser.add_argument("--format", help="Default paper format (a4, letter, ...)")
    parser.add_argument("--ppi", type=float, help="Pixels per inch used to convert paper formats")
    parser.add_argument("--width", type=int, help="Default page width in pixels")
    parser.add_argument("--height", type=int, help="Default page height in pixels")
    parser.add_argument("--title", help="Document title metadata")
    parser.add_argument("--author", help="Document author metadata")

    args = parser.parse_args(argv)
    paper = PaperDefaults.from_options(ppi=args.ppi, format=args.format, width=args.width, height=args.height)
    doc_metadata = DocumentMetadata(title=args.title, author=args.author)
    return main(args.template_file, args.output, GeneratorOptions.from_env(paper), doc_metadata)


if __name__ == "__main__":  # pragma: no cover
    cli()
