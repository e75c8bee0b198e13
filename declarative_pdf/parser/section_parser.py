"""Parser for header, footer and background settings collected from a document page."""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence

from declarative_pdf.errors import TemplateParsingError
from declarative_pdf.model.elements import (
    BACKGROUND,
    DEFAULT,
    FOOTER,
    HEADER,
    PHYSICAL_PAGE_TYPES,
    SectionSetting,
    SectionSettings,
)
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)

_PAYLOAD_KEYS = {HEADER: "headers", FOOTER: "footers", BACKGROUND: "backgrounds"}


class SectionParser:
    """Build ``SectionSettings`` from the browser's per-page section payload."""

    def __init__(self, document_page_index: int) -> None:
        self._document_page_index = document_page_index

    def parse(self, payload: Optional[Mapping[str, Any]]) -> SectionSettings:
        """Parse headers, footers and backgrounds, dropping empty regions."""
        if not payload:
            return SectionSettings()

        settings = SectionSettings(
            headers=self._parse_section(HEADER, payload.get(_PAYLOAD_KEYS[HEADER])),
            footers=self._parse_section(FOOTER, payload.get(_PAYLOAD_KEYS[FOOTER])),
            backgrounds=self._parse_section(BACKGROUND, payload.get(_PAYLOAD_KEYS[BACKGROUND])),
        )
        LOGGER.debug(
            "Document page %d sections: %d header(s), %d footer(s), %d background(s)",
            self._document_page_index,
            len(settings.headers),
            len(settings.footers),
            len(settings.backgrounds),
        )
        return settings

    def _parse_section(self, section_type: str, entries: Optional[Sequence[Any]]) -> List[SectionSetting]:
        if not entries:
            return []

        parsed: List[SectionSetting] = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise TemplateParsingError(
                    f"{section_type} setting on document page {self._document_page_index} is malformed"
                )
            setting = self._parse_setting(entry)
            if setting.height > 0:
                parsed.append(setting)
            else:
                LOGGER.debug("Skipping empty %s on document page %d", section_type, self._document_page_index)

        self._validate_variants(section_type, parsed)
        return parsed

    def _parse_setting(self, entry: Mapping[str, Any]) -> SectionSetting:
        physical_page_index = self._get_index(entry.get("physicalPageIndex"))
        physical_page_type = None
        if physical_page_index is not None:
            physical_page_type = entry.get("physicalPageType")
            if physical_page_type not in PHYSICAL_PAGE_TYPES:
                physical_page_type = DEFAULT

        return SectionSetting(
            height=self._get_height(entry.get("height")),
            has_current_page_number=bool(entry.get("hasCurrentPageNumber", False)),
            has_total_pages_number=bool(entry.get("hasTotalPagesNumber", False)),
            physical_page_index=physical_page_index,
            physical_page_type=physical_page_type,
        )

    def _validate_variants(self, section_type: str, settings: Sequence[SectionSetting]) -> None:
        variants = [setting for setting in settings if setting.is_variant]
        if variants and len(variants) != len(settings):
            raise TemplateParsingError(
                f"{section_type} on document page {self._document_page_index} mixes physical-page variants "
                "with plain content"
            )
        if not variants and len(settings) > 1:
            raise TemplateParsingError(
                f"More than one setting for a regular {section_type} on document page {self._document_page_index}"
            )

    @staticmethod
    def _get_height(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return 0
        return max(0, math.ceil(value))

    @staticmethod
    def _get_index(value: Any) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
        return value
