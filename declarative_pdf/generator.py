"""Pipeline orchestrator: HTML template in, paginated PDF bytes out."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Union

from declarative_pdf.config import GeneratorOptions
from declarative_pdf.errors import LayoutError, TemplateParsingError
from declarative_pdf.model.document_model import DocumentMetadata, DocumentPage, PageCountTable
from declarative_pdf.model.elements import BodyElement, IsolationRequest
from declarative_pdf.parser.layout_calculator import LayoutCalculator
from declarative_pdf.parser.section_parser import SectionParser
from declarative_pdf.parser.template_parser import TemplateParser
from declarative_pdf.renderer.html_adapter import HtmlAdapter
from declarative_pdf.renderer.pdf_primitives import create_pdf, load_pdf, save_pdf, set_document_metadata
from declarative_pdf.renderer.pdf_renderer import PageAssembler
from declarative_pdf.utils.logger import get_logger

if TYPE_CHECKING:
    from playwright.sync_api import Browser, Page

LOGGER = get_logger(__name__)


class DeclarativePdf:
    """Generate PDFs from templates marked up with ``document-page`` and its sections.

    One instance drives one browser tab at a time. Every ``generate`` call starts
    from an empty document page list, so a failed call leaves nothing behind for
    the next one.
    """

    def __init__(self, html: HtmlAdapter, options: Optional[GeneratorOptions] = None) -> None:
        self.html = html
        self.options = options or GeneratorOptions()
        self.document_pages: List[DocumentPage] = []
        self.page_counts: Optional[PageCountTable] = None
        self._layout_calculator = LayoutCalculator(self.options.min_body_height_factor)

    @classmethod
    def from_browser(cls, browser: "Browser", options: Optional[GeneratorOptions] = None) -> "DeclarativePdf":
        options = options or GeneratorOptions.from_env()
        return cls(HtmlAdapter(browser, timeout_ms=options.render_timeout_ms), options)

    # ------------------------------------------------------------------
    # Public API
    def generate(self, template: Union[str, "Page"], metadata: Optional[DocumentMetadata] = None) -> bytes:
        """Render ``template`` (HTML source or an already loaded page) to PDF bytes.

        A borrowed page gets its visibility reset before it is handed back.
        """
        self.document_pages = []
        self.page_counts = None
        live_page = None if isinstance(template, str) else template

        with self.html.session(live_page):
            try:
                if live_page is None:
                    self.html.set_content(template)
                if self.options.normalize:
                    self.html.normalize()

                self.document_pages = self._discover_document_pages()
                self._build_layout_and_bodies()
                self.page_counts = PageCountTable.from_pages(self.document_pages)
                LOGGER.info(
                    "Laid out %d document page(s) into %d output page(s)",
                    len(self.document_pages),
                    self.page_counts.total,
                )

                if self._can_return_body(metadata):
                    LOGGER.info("Single document page without sections; returning body as is")
                    return self.document_pages[0].require_body().data

                return self._build_pdf(self.page_counts, metadata)
            finally:
                self._close_bodies()
                if live_page is not None:
                    self.html.reset_visibility()

    @property
    def total_pages_number(self) -> int:
        return self.page_counts.total if self.page_counts is not None else 0

    # ------------------------------------------------------------------
    # Phase 1: discovery
    def _discover_document_pages(self) -> List[DocumentPage]:
        records = self.html.template_settings(self.options.paper)
        pages = TemplateParser().parse(records)
        LOGGER.info("Found %d document page(s)", len(pages))
        return pages

    # ------------------------------------------------------------------
    # Phase 2: layout and body per document page
    def _build_layout_and_bodies(self) -> None:
        if not self.document_pages:
            raise TemplateParsingError("No document pages found")

        for page in self.document_pages:
            self.html.set_viewport(**page.viewport)

            settings = None
            if page.has_sections:
                settings = SectionParser(page.index).parse(self.html.section_settings(page.index))

            page.layout = self._layout_calculator.calculate(settings, page.width, page.height)
            page.body = self._render_body(page)
            LOGGER.debug(
                "Document page %d body has %d page(s), page numbers: %s",
                page.index,
                page.page_count,
                page.has_page_numbers,
            )

    def _render_body(self, page: DocumentPage) -> BodyElement:
        layout = page.require_layout()
        if not self.html.prepare_section(IsolationRequest(document_page_index=page.index)):
            LOGGER.debug("Document page %d has no page-body; printing its visible content", page.index)

        data = self.html.pdf(
            page.width,
            layout.body.height,
            margin_top=page.body_margin_top,
            margin_bottom=page.body_margin_bottom,
            transparent_bg=layout.body.transparent_bg,
        )
        body = BodyElement(data=data, pdf=load_pdf(data))
        self.html.reset_visibility()
        return body

    # ------------------------------------------------------------------
    # Phase 3: numbered sections and assembly
    def _can_return_body(self, metadata: Optional[DocumentMetadata]) -> bool:
        if len(self.document_pages) != 1 or self.document_pages[0].needs_layouting:
            return False
        return metadata is None or metadata.is_empty

    def _build_pdf(self, page_counts: PageCountTable, metadata: Optional[DocumentMetadata]) -> bytes:
        target = create_pdf()
        try:
            assembler = PageAssembler(self.html, target)
            emitted = 0
            for position, page in enumerate(self.document_pages):
                emitted += assembler.assemble(page, page_counts.offset_for(position), page_counts.total)

            if emitted != page_counts.total:
                raise LayoutError(f"Emitted {emitted} page(s) but the document has {page_counts.total}")

            set_document_metadata(target, metadata)
            return save_pdf(target)
        finally:
            target.close()

    def _close_bodies(self) -> None:
        for page in self.document_pages:
            if page.body is not None and not page.body.pdf.is_closed:
                page.body.pdf.close()
