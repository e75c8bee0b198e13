"""Document page model and the page-count bookkeeping shared across document pages."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from declarative_pdf.errors import LayoutError
from declarative_pdf.model.elements import BodyElement, PageLayout, TemplateSetting


@dataclass(slots=True)
class DocumentPage:
    """One ``document-page`` element, possibly spanning many output pages."""

    index: int
    width: int
    height: int
    body_margin_top: int = 0
    body_margin_bottom: int = 0
    has_sections: bool = False
    layout: Optional[PageLayout] = None
    body: Optional[BodyElement] = None

    @classmethod
    def from_setting(cls, setting: TemplateSetting) -> "DocumentPage":
        return cls(
            index=setting.index,
            width=setting.width,
            height=setting.height,
            body_margin_top=setting.body_margin_top,
            body_margin_bottom=setting.body_margin_bottom,
            has_sections=setting.has_sections,
        )

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}

    @property
    def has_page_numbers(self) -> bool:
        return bool(self.layout and self.layout.has_page_numbers)

    @property
    def needs_layouting(self) -> bool:
        """True when headers, footers or backgrounds must be composed around the body."""
        return bool(self.layout and self.layout.has_any_section)

    @property
    def page_count(self) -> int:
        if self.body is None or self.body.page_count < 1:
            raise LayoutError(f"Body generated for document page {self.index} has no pages")
        return self.body.page_count

    def require_layout(self) -> PageLayout:
        if self.layout is None:
            raise LayoutError(f"Layout for document page {self.index} is not initialized")
        return self.layout

    def require_body(self) -> BodyElement:
        if self.body is None:
            raise LayoutError(f"Body for document page {self.index} is not rendered")
        return self.body


@dataclass(frozen=True, slots=True)
class PageCountTable:
    """Immutable page counts and offsets, built once every body has been rendered."""

    counts: Tuple[int, ...]
    offsets: Tuple[int, ...]

    @classmethod
    def from_pages(cls, pages: Sequence[DocumentPage]) -> "PageCountTable":
        counts: List[int] = []
        offsets: List[int] = []
        running = 0
        for position, page in enumerate(pages):
            if running < position:
                raise LayoutError("Page count offset is less than number of document pages")
            offsets.append(running)
            count = page.page_count
            counts.append(count)
            running += count
        return cls(counts=tuple(counts), offsets=tuple(offsets))

    @property
    def total(self) -> int:
        return sum(self.counts)

    def offset_for(self, position: int) -> int:
        """Number of output pages contributed by all document pages before ``position``."""
        return self.offsets[position]


@dataclass(slots=True)
class DocumentMetadata:
    """Optional document information applied to the generated PDF."""

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[List[str]] = None
    producer: Optional[str] = None
    creator: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.title,
                self.author,
                self.subject,
                self.keywords,
                self.producer,
                self.creator,
                self.creation_date,
                self.modification_date,
            )
        )
