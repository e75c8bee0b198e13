"""Select which physical-page variant of a section applies to an output page."""
from __future__ import annotations

from typing import Optional, Sequence

from declarative_pdf.model.elements import DEFAULT, EVEN, FIRST, LAST, ODD, SectionSetting


def are_section_variants(settings: Sequence[SectionSetting]) -> bool:
    """True when every candidate came from a ``physical-page`` element."""
    return bool(settings) and all(setting.is_variant for setting in settings)


def _find_variant(settings: Sequence[SectionSetting], physical_page_type: str) -> Optional[SectionSetting]:
    for setting in settings:
        if setting.physical_page_type == physical_page_type:
            return setting
    return None


def _find_default(settings: Sequence[SectionSetting]) -> Optional[SectionSetting]:
    for setting in settings:
        if setting.physical_page_type in (DEFAULT, None):
            return setting
    return None


def select_section(
    settings: Sequence[SectionSetting],
    page_index: int,
    offset: int,
    count: int,
) -> Optional[SectionSetting]:
    """Resolve the setting for one output page, or ``None`` when the section is blank there.

    ``page_index`` is local to the document page, ``offset`` is the number of pages
    produced by earlier document pages and ``count`` is this document page's page count.
    First and last outrank odd and even, which outrank default; parity uses the
    absolute 1-based page number.
    """
    if not settings:
        return None
    if not are_section_variants(settings):
        return settings[0]

    is_first = page_index == 0
    is_last = page_index == count - 1
    is_odd = (page_index + 1 + offset) % 2 == 1

    if is_last or is_first:
        positional = _find_variant(settings, LAST if is_last else FIRST)
        if positional is not None:
            return positional

    parity = _find_variant(settings, ODD if is_odd else EVEN)
    if parity is not None:
        return parity

    return _find_default(settings)
