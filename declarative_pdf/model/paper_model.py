"""Paper model resolves the default page size used when a template does not set one."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from declarative_pdf.utils.units import mm_to_px

# Known formats in millimetres (width, height).
PAPER_SIZE: Mapping[str, Tuple[int, int]] = {
    "a0": (841, 1189),
    "a1": (594, 841),
    "a2": (420, 594),
    "a3": (297, 420),
    "a4": (210, 297),
    "a5": (148, 210),
    "a6": (105, 148),
    "letter": (216, 279),
    "legal": (216, 356),
    "tabloid": (279, 432),
    "ledger": (432, 279),
}

DEFAULT_FORMAT = "a4"
DEFAULT_PPI = 72
DEFAULT_WIDTH = 595
DEFAULT_HEIGHT = 842
MIN_PPI = 42
MAX_PPI = 1642


def is_format(value: object) -> bool:
    return isinstance(value, str) and value in PAPER_SIZE


def is_ppi(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return MIN_PPI < value < MAX_PPI


def paper_sizes_as_payload() -> Dict[str, Dict[str, int]]:
    """Return the format table in the shape the template evaluators expect."""
    return {name: {"width": width, "height": height} for name, (width, height) in PAPER_SIZE.items()}


@dataclass(frozen=True, slots=True)
class PaperDefaults:
    """Resolved paper size in pixels at a given density."""

    ppi: int = DEFAULT_PPI
    format: Optional[str] = DEFAULT_FORMAT
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    @classmethod
    def from_options(
        cls,
        ppi: Optional[float] = None,
        format: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> "PaperDefaults":
        """Resolve a named format, explicit dimensions, or the A4 fallback."""
        resolved_ppi = ppi if is_ppi(ppi) else DEFAULT_PPI

        if is_format(format):
            mm_width, mm_height = PAPER_SIZE[format]
            return cls(
                ppi=resolved_ppi,
                format=format,
                width=mm_to_px(mm_width, resolved_ppi),
                height=mm_to_px(mm_height, resolved_ppi),
            )
        if width and height:
            return cls(ppi=resolved_ppi, format=None, width=width, height=height)
        if width or height:
            return cls(ppi=resolved_ppi, format=None, width=width or DEFAULT_WIDTH, height=height or DEFAULT_HEIGHT)
        return cls(ppi=resolved_ppi)

    def to_payload(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height, "ppi": self.ppi}
