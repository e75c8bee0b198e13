"""Reuse rendered section fragments across the output pages of one document page."""
from __future__ import annotations

import threading
from typing import Callable, Dict

from declarative_pdf.model.elements import SectionElement, SectionKey, SectionSetting
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)


class SectionCache:
    """Keyed store of reusable ``SectionElement`` objects.

    Only settings without a current page number are stored; anything else is
    rendered fresh for every page. The lock is held while a slot is filled, so a
    second caller for the same key waits for the first render instead of
    starting its own.
    """

    def __init__(self) -> None:
        self._elements: Dict[SectionKey, SectionElement] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.renders = 0

    def __len__(self) -> int:
        return len(self._elements)

    def get_or_create(
        self,
        key: SectionKey,
        setting: SectionSetting,
        factory: Callable[[], SectionElement],
    ) -> SectionElement:
        if not setting.is_reusable:
            element = factory()
            with self._lock:
                self.renders += 1
            return element

        with self._lock:
            element = self._elements.get(key)
            if element is not None:
                self.hits += 1
                LOGGER.debug("Reusing %s section element for %s", key.section_type, key)
                return element
            element = factory()
            self.renders += 1
            self._elements[key] = element
            return element

    def clear(self) -> None:
        with self._lock:
            self._elements.clear()
