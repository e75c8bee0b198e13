"""Common helpers shared by renderer implementations."""
from __future__ import annotations

from typing import Dict


def to_css_px(value: float) -> str:
    """Format a pixel measurement the way the browser print API expects it."""
    if float(value).is_integer():
        return f"{int(value)}px"
    return f"{value}px"


def vertical_margins(top: float = 0, bottom: float = 0) -> Dict[str, str]:
    """Print margins with only top and bottom set."""
    return {"top": to_css_px(top), "bottom": to_css_px(bottom), "left": "0px", "right": "0px"}
