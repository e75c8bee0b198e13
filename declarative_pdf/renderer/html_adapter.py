"""Browser collaborator: measures and prints template regions through Playwright."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from playwright.sync_api import Browser, Page

from declarative_pdf.config import DEFAULT_RENDER_TIMEOUT_MS
from declarative_pdf.errors import ResourceStateError
from declarative_pdf.model.elements import IsolationRequest
from declarative_pdf.model.paper_model import PaperDefaults, paper_sizes_as_payload
from declarative_pdf.renderer.pdf_primitives import resize_pages
from declarative_pdf.renderer.scripts import (
    NORMALIZE_TEMPLATE,
    PREPARE_SECTION,
    RESET_VISIBILITY,
    SECTION_SETTINGS,
    TEMPLATE_SETTINGS,
)
from declarative_pdf.renderer.utils import to_css_px, vertical_margins
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)

_TRANSPARENT = {"r": 0, "g": 0, "b": 0, "a": 0}
_BACKGROUND_OVERRIDE = "Emulation.setDefaultBackgroundColorOverride"


class HtmlAdapter:
    """Wraps a single browser tab; only one call may be in flight at a time."""

    def __init__(self, browser: Optional[Browser] = None, timeout_ms: int = DEFAULT_RENDER_TIMEOUT_MS) -> None:
        self._browser = browser
        self._page: Optional[Page] = None
        self._owns_page = False
        self._timeout_ms = timeout_ms

    @property
    def browser(self) -> Browser:
        if self._browser is None:
            raise ResourceStateError("Browser not set")
        if not self._browser.is_connected():
            raise ResourceStateError("Browser not connected")
        return self._browser

    @property
    def page(self) -> Page:
        if self._page is None:
            raise ResourceStateError("Page not set")
        if self._page.is_closed():
            raise ResourceStateError("Page is closed")
        return self._page

    # ------------------------------------------------------------------
    # Lifecycle
    def new_page(self) -> None:
        if self._page is not None and not self._page.is_closed():
            raise ResourceStateError("Page already set")
        self._page = self.browser.new_page()
        self._page.set_default_timeout(self._timeout_ms)
        self._owns_page = True

    def attach(self, page: Page) -> None:
        """Use an already loaded page; it stays open when the session ends."""
        if self._page is not None and not self._page.is_closed():
            raise ResourceStateError("Page already set")
        if page.is_closed():
            raise ResourceStateError("Page is closed")
        self._page = page
        self._owns_page = False

    def close(self) -> None:
        page, owns_page = self._page, self._owns_page
        self._page = None
        self._owns_page = False
        if page is not None and owns_page and not page.is_closed():
            page.close()

    @contextmanager
    def session(self, page: Optional[Page] = None) -> Iterator["HtmlAdapter"]:
        """Acquire a tab (new or borrowed) and release it on every exit path."""
        if page is None:
            self.new_page()
        else:
            self.attach(page)
        try:
            yield self
        finally:
            self.close()

    # ------------------------------------------------------------------
    # Content and measurement
    def set_content(self, html: str) -> None:
        self.page.set_content(html, wait_until="networkidle")

    def set_viewport(self, width: int, height: int) -> None:
        self.page.set_viewport_size({"width": int(width), "height": int(height)})

    def normalize(self) -> None:
        self.page.evaluate(NORMALIZE_TEMPLATE)

    def template_settings(self, paper: PaperDefaults) -> List[Dict[str, Any]]:
        return self.page.evaluate(TEMPLATE_SETTINGS, {"default": paper.to_payload(), "size": paper_sizes_as_payload()})

    def section_settings(self, document_page_index: int) -> Dict[str, Any]:
        return self.page.evaluate(SECTION_SETTINGS, document_page_index)

    def prepare_section(self, request: IsolationRequest) -> bool:
        """Hide everything except the requested region and inject page numbers into it."""
        return bool(self.page.evaluate(PREPARE_SECTION, request.to_payload()))

    def reset_visibility(self) -> None:
        self.page.evaluate(RESET_VISIBILITY)

    # ------------------------------------------------------------------
    # Printing
    def pdf(
        self,
        width: float,
        height: float,
        margin_top: float = 0,
        margin_bottom: float = 0,
        transparent_bg: bool = False,
    ) -> bytes:
        """Print the visible regions to PDF pages of exactly ``width`` x ``height`` points."""
        if transparent_bg:
            with self._transparent_background():
                data = self._print(width, height, margin_top, margin_bottom)
        else:
            data = self._print(width, height, margin_top, margin_bottom)
        # Chromium prints CSS pixels at 96 per inch; stretch back to one point per pixel.
        return resize_pages(data, width, height)

    def _print(self, width: float, height: float, margin_top: float, margin_bottom: float) -> bytes:
        return self.page.pdf(
            width=to_css_px(width),
            height=to_css_px(height),
            margin=vertical_margins(margin_top, margin_bottom),
            print_background=True,
        )

    @contextmanager
    def _transparent_background(self) -> Iterator[None]:
        """Clear the default canvas colour for the duration of a print.

        The override lives only as long as its CDP session, so the session stays
        attached until the print has finished.
        """
        cdp = self.page.context.new_cdp_session(self.page)
        try:
            cdp.send(_BACKGROUND_OVERRIDE, {"color": _TRANSPARENT})
            try:
                yield
            finally:
                cdp.send(_BACKGROUND_OVERRIDE)
        finally:
            cdp.detach()
