"""Assemble output PDF pages from rendered bodies and section fragments."""
from __future__ import annotations

from functools import partial
from typing import Dict, List, TYPE_CHECKING

import fitz  # pymupdf

from declarative_pdf.errors import LayoutError, SectionIsolationError
from declarative_pdf.model.document_model import DocumentPage
from declarative_pdf.model.elements import (
    BACKGROUND,
    FOOTER,
    HEADER,
    IsolationRequest,
    LayoutPage,
    SectionElement,
    SectionKey,
    SectionSetting,
)
from declarative_pdf.parser.physical_pages import select_section
from declarative_pdf.renderer.pdf_primitives import add_page, copy_pages, draw_page, embed_page, load_pdf
from declarative_pdf.renderer.section_cache import SectionCache
from declarative_pdf.utils.logger import get_logger

if TYPE_CHECKING:
    from declarative_pdf.renderer.html_adapter import HtmlAdapter

LOGGER = get_logger(__name__)

# Later entries are drawn on top of earlier ones; the body is always drawn last.
SECTION_DRAW_ORDER = (BACKGROUND, HEADER, FOOTER)


def build_layout_pages(page: DocumentPage, offset: int, total: int) -> List[LayoutPage]:
    """Resolve, for every output page of ``page``, which section variants apply."""
    layout = page.require_layout()
    count = page.page_count
    if offset < 0:
        raise LayoutError(f"Invalid page count offset {offset} for document page {page.index}")
    if total < count + offset:
        raise LayoutError(f"Invalid total page number {total} for document page {page.index}")

    headers = layout.settings_for(HEADER)
    footers = layout.settings_for(FOOTER)
    backgrounds = layout.settings_for(BACKGROUND)

    return [
        LayoutPage(
            page_index=page_index,
            current_page_number=page_index + 1 + offset,
            total_pages_number=total,
            header=select_section(headers, page_index, offset, count),
            footer=select_section(footers, page_index, offset, count),
            background=select_section(backgrounds, page_index, offset, count),
        )
        for page_index in range(count)
    ]


class PageAssembler:
    """Append the output pages of each document page to a target PDF."""

    def __init__(self, html: "HtmlAdapter", target: fitz.Document) -> None:
        self._html = html
        self._target = target

    def assemble(self, page: DocumentPage, offset: int, total: int) -> int:
        """Emit every output page of ``page`` and return how many were appended."""
        layout = page.require_layout()
        body = page.require_body()

        if not layout.has_any_section:
            copied = copy_pages(self._target, body.pdf)
            LOGGER.debug("Document page %d has no sections; copied %d body page(s)", page.index, copied)
            return copied

        self._html.set_viewport(**page.viewport)
        cache = SectionCache()
        created: List[SectionElement] = []
        layout_pages = build_layout_pages(page, offset, total)
        try:
            for layout_page in layout_pages:
                self._compose_page(page, layout_page, cache, created)
        finally:
            cache.clear()
            for element in created:
                element.pdf.close()

        LOGGER.debug(
            "Document page %d: composed %d page(s), %d section render(s), %d reuse(s)",
            page.index,
            len(layout_pages),
            cache.renders,
            cache.hits,
        )
        return len(layout_pages)

    # ------------------------------------------------------------------
    # Page composition
    def _compose_page(
        self,
        page: DocumentPage,
        layout_page: LayoutPage,
        cache: SectionCache,
        created: List[SectionElement],
    ) -> None:
        layout = page.require_layout()
        body = page.require_body()

        elements: Dict[str, SectionElement] = {}
        for section_type in SECTION_DRAW_ORDER:
            setting = layout_page.setting_for(section_type)
            if setting is None:
                continue
            key = SectionKey.for_setting(page.index, section_type, setting)
            factory = partial(self._render_section, page, section_type, setting, layout_page, key, created)
            elements[section_type] = cache.get_or_create(key, setting, factory)

        target_page = add_page(self._target, page.width, page.height)

        for section_type in SECTION_DRAW_ORDER:
            element = elements.get(section_type)
            if element is None:
                continue
            section = layout.section(section_type)
            if not element.is_embedded:
                element.embedded = embed_page(element.pdf)
            draw_page(target_page, element.embedded, 0, section.y, page.width, section.height)

        body_page = embed_page(body.pdf, layout_page.page_index)
        draw_page(target_page, body_page, 0, layout.body.y, page.width, layout.body.height)

    def _render_section(
        self,
        page: DocumentPage,
        section_type: str,
        setting: SectionSetting,
        layout_page: LayoutPage,
        key: SectionKey,
        created: List[SectionElement],
    ) -> SectionElement:
        section = page.require_layout().section(section_type)
        request = IsolationRequest(
            document_page_index=page.index,
            section_type=section_type,
            physical_page_index=setting.physical_page_index,
            current_page_number=layout_page.current_page_number if setting.has_current_page_number else None,
            total_pages_number=layout_page.total_pages_number if setting.has_total_pages_number else None,
        )
        if not self._html.prepare_section(request):
            raise SectionIsolationError(
                f"Unable to isolate {section_type} (physical page {setting.physical_page_index}) "
                f"on document page {page.index}"
            )

        data = self._html.pdf(page.width, section.height, transparent_bg=section.transparent_bg)
        pdf = load_pdf(data)
        if pdf.page_count != 1:
            LOGGER.warning(
                "Printing %s with %dpx height produced %d pages instead of one; using the first",
                section_type,
                section.height,
                pdf.page_count,
            )

        element = SectionElement(key=key, setting=setting, data=data, pdf=pdf)
        created.append(element)
        LOGGER.debug("Rendered %s for page %d", key, layout_page.current_page_number)
        return element
