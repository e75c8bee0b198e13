"""In-memory representation of section settings, page layout and rendered fragments."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    import fitz

    from declarative_pdf.renderer.pdf_primitives import EmbeddedPage

HEADER = "header"
FOOTER = "footer"
BACKGROUND = "background"
BODY = "body"

FIRST = "first"
LAST = "last"
EVEN = "even"
ODD = "odd"
DEFAULT = "default"
PHYSICAL_PAGE_TYPES = (FIRST, LAST, EVEN, ODD, DEFAULT)


@dataclass(frozen=True, slots=True)
class TemplateSetting:
    """Discovery record for one ``document-page`` element."""

    index: int
    width: int
    height: int
    body_margin_top: int = 0
    body_margin_bottom: int = 0
    has_sections: bool = False


@dataclass(frozen=True, slots=True)
class SectionSetting:
    """One candidate rendering of a header, footer or background region."""

    height: int
    has_current_page_number: bool = False
    has_total_pages_number: bool = False
    physical_page_index: Optional[int] = None
    physical_page_type: Optional[str] = None

    @property
    def is_variant(self) -> bool:
        return self.physical_page_type is not None

    @property
    def has_page_numbers(self) -> bool:
        return self.has_current_page_number or self.has_total_pages_number

    @property
    def is_reusable(self) -> bool:
        """Total-only numbering is constant for a document, current page numbering is not."""
        return not self.has_current_page_number


@dataclass(slots=True)
class SectionSettings:
    """Header, footer and background candidates collected for a document page."""

    headers: List[SectionSetting] = field(default_factory=list)
    footers: List[SectionSetting] = field(default_factory=list)
    backgrounds: List[SectionSetting] = field(default_factory=list)

    @property
    def has_any_section(self) -> bool:
        return bool(self.headers or self.footers or self.backgrounds)

    @property
    def has_page_numbers(self) -> bool:
        return any(setting.has_page_numbers for setting in self.headers + self.footers + self.backgrounds)


@dataclass(frozen=True, slots=True)
class RegionGeometry:
    """Height and bottom-left based y offset of a region on the page."""

    height: int
    y: int


@dataclass(slots=True)
class BodyLayout:
    height: int
    y: int
    transparent_bg: bool = False


@dataclass(slots=True)
class SectionLayout:
    """Geometry shared by every variant of a section plus its candidate settings."""

    height: int
    y: int
    transparent_bg: bool
    has_page_numbers: bool
    settings: List[SectionSetting] = field(default_factory=list)


@dataclass(slots=True)
class PageLayout:
    """Geometry of every region of a document page, computed once from its settings."""

    width: int
    height: int
    body: BodyLayout
    header: Optional[SectionLayout] = None
    footer: Optional[SectionLayout] = None
    background: Optional[SectionLayout] = None
    has_page_numbers: bool = False

    @property
    def has_any_section(self) -> bool:
        return self.header is not None or self.footer is not None or self.background is not None

    def section(self, section_type: str) -> Optional[SectionLayout]:
        if section_type == HEADER:
            return self.header
        if section_type == FOOTER:
            return self.footer
        if section_type == BACKGROUND:
            return self.background
        raise KeyError(f"Unknown section type: {section_type}")

    def settings_for(self, section_type: str) -> List[SectionSetting]:
        section = self.section(section_type)
        return section.settings if section is not None else []


@dataclass(frozen=True, slots=True)
class SectionKey:
    """Reproducible identity of a resolved section rendering."""

    document_page_index: int
    section_type: str
    physical_page_index: Optional[int] = None
    physical_page_type: Optional[str] = None

    @classmethod
    def for_setting(cls, document_page_index: int, section_type: str, setting: SectionSetting) -> "SectionKey":
        return cls(
            document_page_index=document_page_index,
            section_type=section_type,
            physical_page_index=setting.physical_page_index,
            physical_page_type=setting.physical_page_type,
        )


@dataclass(frozen=True, slots=True)
class IsolationRequest:
    """Which region of the template the browser should leave visible, and which numbers to inject."""

    document_page_index: int
    section_type: Optional[str] = None
    physical_page_index: Optional[int] = None
    current_page_number: Optional[int] = None
    total_pages_number: Optional[int] = None

    def to_payload(self) -> Dict[str, object]:
        return {
            "documentPageIndex": self.document_page_index,
            "sectionType": self.section_type,
            "physicalPageIndex": self.physical_page_index,
            "currentPageNumber": self.current_page_number,
            "totalPagesNumber": self.total_pages_number,
        }


@dataclass(slots=True)
class LayoutPage:
    """One physical output page within a document page's span."""

    page_index: int
    current_page_number: int
    total_pages_number: int
    header: Optional[SectionSetting] = None
    footer: Optional[SectionSetting] = None
    background: Optional[SectionSetting] = None

    def setting_for(self, section_type: str) -> Optional[SectionSetting]:
        if section_type == HEADER:
            return self.header
        if section_type == FOOTER:
            return self.footer
        if section_type == BACKGROUND:
            return self.background
        raise KeyError(f"Unknown section type: {section_type}")


@dataclass(slots=True)
class BodyElement:
    """Rendered body of a document page, one PDF page per output page."""

    data: bytes
    pdf: "fitz.Document"

    @property
    def page_count(self) -> int:
        return self.pdf.page_count


@dataclass(slots=True)
class SectionElement:
    """A rendered and loaded fragment for one resolved section setting."""

    key: SectionKey
    setting: SectionSetting
    data: bytes
    pdf: "fitz.Document"
    embedded: Optional["EmbeddedPage"] = None

    @property
    def is_embedded(self) -> bool:
        return self.embedded is not None
