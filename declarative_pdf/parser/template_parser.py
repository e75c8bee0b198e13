"""Parse ``document-page`` discovery records into validated document page models."""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence

from declarative_pdf.errors import TemplateParsingError
from declarative_pdf.model.document_model import DocumentPage
from declarative_pdf.model.elements import TemplateSetting
from declarative_pdf.model.paper_model import DEFAULT_HEIGHT, DEFAULT_WIDTH
from declarative_pdf.utils.logger import get_logger
from declarative_pdf.utils.units import clamp

LOGGER = get_logger(__name__)

MAX_DOCUMENT_PAGE_INDEX = 10
MIN_PAGE_SIZE_PX = 42
MAX_PAGE_SIZE_PX = 42_000

# Bounds applied while normalizing, wider than the validation bounds above.
MIN_NORMALIZED_SIZE_PX = 1
MAX_NORMALIZED_PX = 420_000


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_template_setting(setting: Any) -> None:
    """Raise ``TemplateParsingError`` naming the first offending field of a discovery record."""
    if not isinstance(setting, Mapping) or not all(key in setting for key in ("index", "width", "height")):
        raise TemplateParsingError("setting is malformed")

    index = setting["index"]
    if not _is_number(index):
        raise TemplateParsingError("setting.index is not a number")
    if index < 0:
        raise TemplateParsingError(f"setting.index is negative ({index})")
    if index > MAX_DOCUMENT_PAGE_INDEX:
        raise TemplateParsingError(f"setting.index is too large ({index})")

    for name in ("width", "height"):
        value = setting[name]
        if not _is_number(value):
            raise TemplateParsingError(f"setting.{name} is not a number ({value!r})")
        if value <= 0:
            raise TemplateParsingError(f"setting.{name} is not positive ({value})")
        if value < MIN_PAGE_SIZE_PX:
            raise TemplateParsingError(f"setting.{name} is too small ({value})")
        if value > MAX_PAGE_SIZE_PX:
            raise TemplateParsingError(f"setting.{name} is too large ({value})")


def _normalize_number(value: Any, fallback: int, lower: int, upper: int) -> int:
    if not _is_number(value) or math.isinf(value):
        return fallback
    return int(clamp(math.ceil(value), lower, upper))


def normalize_setting(setting: Mapping[str, Any]) -> TemplateSetting:
    """Clamp a discovery record to sane bounds, falling back to A4 at 72 ppi for unusable sizes."""
    index = setting.get("index")
    return TemplateSetting(
        index=int(index) if _is_number(index) else 0,
        width=_normalize_number(setting.get("width"), DEFAULT_WIDTH, MIN_NORMALIZED_SIZE_PX, MAX_NORMALIZED_PX),
        height=_normalize_number(setting.get("height"), DEFAULT_HEIGHT, MIN_NORMALIZED_SIZE_PX, MAX_NORMALIZED_PX),
        body_margin_top=_normalize_number(setting.get("bodyMarginTop"), 0, 0, MAX_NORMALIZED_PX),
        body_margin_bottom=_normalize_number(setting.get("bodyMarginBottom"), 0, 0, MAX_NORMALIZED_PX),
        has_sections=bool(setting.get("hasSections", False)),
    )


class TemplateParser:
    """Turn the browser's discovery payload into ordered ``DocumentPage`` models."""

    def parse(self, records: Optional[Sequence[Mapping[str, Any]]]) -> List[DocumentPage]:
        if not records:
            raise TemplateParsingError("No document pages found")

        pages: List[DocumentPage] = []
        for record in records:
            validate_template_setting(record)
            setting = normalize_setting(record)
            LOGGER.debug(
                "Document page %d: %dx%d px, body margins %d/%d, sections=%s",
                setting.index,
                setting.width,
                setting.height,
                setting.body_margin_top,
                setting.body_margin_bottom,
                setting.has_sections,
            )
            pages.append(DocumentPage.from_setting(setting))
        return pages
