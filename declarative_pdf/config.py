"""Generator options and their environment overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from declarative_pdf.model.paper_model import PaperDefaults
from declarative_pdf.parser.layout_calculator import MIN_BODY_HEIGHT_FACTOR
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_RENDER_TIMEOUT_MS = 30_000


def _env_flag(name: str) -> bool:
    val = os.environ.get(name)
    return bool(val and val.strip().lower() in {"1", "true", "yes", "y"})


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    val = os.environ.get(name)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        LOGGER.warning("Ignoring invalid integer for %s=%r", name, val)
        return default


@dataclass(frozen=True, slots=True)
class GeneratorOptions:
    """Settings for one ``DeclarativePdf`` instance."""

    paper: PaperDefaults = field(default_factory=PaperDefaults)
    normalize: bool = True
    min_body_height_factor: float = MIN_BODY_HEIGHT_FACTOR
    render_timeout_ms: int = DEFAULT_RENDER_TIMEOUT_MS

    @classmethod
    def from_env(cls, paper: Optional[PaperDefaults] = None) -> "GeneratorOptions":
        """Build options honouring ``DECLARATIVE_PDF_*`` environment variables."""
        timeout = _env_int("DECLARATIVE_PDF_RENDER_TIMEOUT_MS", DEFAULT_RENDER_TIMEOUT_MS)
        return cls(
            paper=paper or PaperDefaults(),
            normalize=not _env_flag("DECLARATIVE_PDF_NO_NORMALIZE"),
            render_timeout_ms=timeout if timeout and timeout > 0 else DEFAULT_RENDER_TIMEOUT_MS,
        )
