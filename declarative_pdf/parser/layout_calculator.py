"""Compute header, footer, body and background geometry for a document page."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from declarative_pdf.errors import LayoutError
from declarative_pdf.model.elements import (
    BACKGROUND,
    BODY,
    FOOTER,
    HEADER,
    BodyLayout,
    PageLayout,
    RegionGeometry,
    SectionLayout,
    SectionSetting,
    SectionSettings,
)
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)

MIN_BODY_HEIGHT_FACTOR = 1 / 3
# The body is placed one pixel above the footer so adjacent regions overlap instead of leaving a seam.
BODY_Y_OVERLAP_PX = 1


def get_max_height(settings: Iterable[SectionSetting]) -> int:
    """Tallest candidate of a section, or 0 when the section is absent."""
    return max((setting.height for setting in settings), default=0)


def calculate_page_layout(
    page_height: int,
    header_height: int = 0,
    footer_height: int = 0,
    min_body_factor: float = MIN_BODY_HEIGHT_FACTOR,
) -> Dict[str, RegionGeometry]:
    """Return region geometry with a bottom-left origin.

    Raises ``LayoutError`` when the body would be shorter than
    ``page_height * min_body_factor``.
    """
    body_height = page_height - header_height - footer_height

    if body_height < page_height * min_body_factor:
        raise LayoutError(
            f"Header/footer too big. Page height: {page_height}px, header: {header_height}px, "
            f"footer: {footer_height}px, body: {body_height}px."
        )

    return {
        HEADER: RegionGeometry(height=header_height, y=page_height - header_height),
        FOOTER: RegionGeometry(height=footer_height, y=0),
        BODY: RegionGeometry(height=body_height, y=footer_height + BODY_Y_OVERLAP_PX),
        BACKGROUND: RegionGeometry(height=page_height, y=0),
    }


class LayoutCalculator:
    """Transform section settings into a ``PageLayout``."""

    def __init__(self, min_body_factor: float = MIN_BODY_HEIGHT_FACTOR) -> None:
        self._min_body_factor = min_body_factor

    # ------------------------------------------------------------------
    # Public API
    def calculate(self, settings: Optional[SectionSettings], page_width: int, page_height: int) -> PageLayout:
        """Return the layout of a page; variants of a section share one height."""
        settings = settings or SectionSettings()

        geometry = calculate_page_layout(
            page_height,
            header_height=get_max_height(settings.headers),
            footer_height=get_max_height(settings.footers),
            min_body_factor=self._min_body_factor,
        )
        # With a background, everything drawn over it must let it show through.
        transparent_bg = bool(settings.backgrounds)

        layout = PageLayout(
            width=page_width,
            height=page_height,
            body=BodyLayout(height=geometry[BODY].height, y=geometry[BODY].y, transparent_bg=transparent_bg),
            header=self._create_section(settings.headers, geometry[HEADER], transparent_bg),
            footer=self._create_section(settings.footers, geometry[FOOTER], transparent_bg),
            background=self._create_section(settings.backgrounds, geometry[BACKGROUND], False),
            has_page_numbers=settings.has_page_numbers,
        )
        LOGGER.debug(
            "Layout %dx%d: header=%d footer=%d body=%d@%d background=%s",
            page_width,
            page_height,
            geometry[HEADER].height,
            geometry[FOOTER].height,
            geometry[BODY].height,
            geometry[BODY].y,
            layout.background is not None,
        )
        return layout

    # ------------------------------------------------------------------
    # Section helpers
    def _create_section(
        self,
        settings: List[SectionSetting],
        geometry: RegionGeometry,
        transparent_bg: bool,
    ) -> Optional[SectionLayout]:
        if not settings:
            return None
        return SectionLayout(
            height=geometry.height,
            y=geometry.y,
            transparent_bg=transparent_bg,
            has_page_numbers=any(setting.has_page_numbers for setting in settings),
            settings=list(settings),
        )
