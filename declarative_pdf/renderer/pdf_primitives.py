"""Thin PDF helpers built on PyMuPDF: loading, page copy, embedding, drawing and metadata."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import fitz  # pymupdf

from declarative_pdf.model.document_model import DocumentMetadata
from declarative_pdf.utils.logger import get_logger

LOGGER = get_logger(__name__)

# Page size differences below this many points are treated as equal.
SIZE_TOLERANCE_PT = 0.5


@dataclass(frozen=True, slots=True)
class EmbeddedPage:
    """A page of a source PDF that can be drawn into pages of another document.

    PyMuPDF turns the source page into a form XObject on the first draw and
    reuses that XObject for later draws of the same page into the same target.
    """

    source: fitz.Document
    page_index: int
    width: float
    height: float


def load_pdf(data: bytes) -> fitz.Document:
    return fitz.open(stream=data, filetype="pdf")


def create_pdf() -> fitz.Document:
    return fitz.open()


def save_pdf(document: fitz.Document) -> bytes:
    return document.tobytes(garbage=3, deflate=True)


def copy_pages(target: fitz.Document, source: fitz.Document, indices: Optional[Sequence[int]] = None) -> int:
    """Append pages of ``source`` to ``target`` in the given order; all pages when ``indices`` is omitted."""
    if indices is None:
        if source.page_count:
            target.insert_pdf(source, from_page=0, to_page=source.page_count - 1)
        return source.page_count

    for index in indices:
        target.insert_pdf(source, from_page=index, to_page=index)
    return len(indices)


def add_page(target: fitz.Document, width: float, height: float) -> fitz.Page:
    """Append a blank page of the given size."""
    return target.new_page(width=width, height=height)


def embed_pages(source: fitz.Document, indices: Optional[Sequence[int]] = None) -> List[EmbeddedPage]:
    """Return drawable handles for ``indices`` of ``source``; the first page when omitted."""
    selected = [0] if indices is None else list(indices)
    embedded: List[EmbeddedPage] = []
    for index in selected:
        if index < 0 or index >= source.page_count:
            raise IndexError(f"Cannot embed page {index} of a document with {source.page_count} page(s)")
        rect = source[index].rect
        embedded.append(EmbeddedPage(source=source, page_index=index, width=rect.width, height=rect.height))
    return embedded


def embed_page(source: fitz.Document, index: int = 0) -> EmbeddedPage:
    return embed_pages(source, [index])[0]


def draw_page(target_page: fitz.Page, embedded: EmbeddedPage, x: float, y: float, width: float, height: float) -> None:
    """Draw an embedded page into a rectangle given with a bottom-left origin."""
    top = target_page.rect.height - y - height
    rect = fitz.Rect(x, top, x + width, top + height)
    target_page.show_pdf_page(rect, embedded.source, embedded.page_index, keep_proportion=False)


def resize_pages(data: bytes, width: float, height: float) -> bytes:
    """Stretch every page of ``data`` onto a ``width`` x ``height`` page, returning new PDF bytes.

    Pages already at the requested size are returned untouched.
    """
    source = load_pdf(data)
    try:
        if all(
            abs(page.rect.width - width) < SIZE_TOLERANCE_PT and abs(page.rect.height - height) < SIZE_TOLERANCE_PT
            for page in source
        ):
            return data

        resized = create_pdf()
        try:
            for index in range(source.page_count):
                page = add_page(resized, width, height)
                page.show_pdf_page(page.rect, source, index, keep_proportion=False)
            return save_pdf(resized)
        finally:
            resized.close()
    finally:
        source.close()


def _pdf_date(value: datetime) -> str:
    stamp = value.strftime("D:%Y%m%d%H%M%S")
    offset = value.utcoffset()
    if offset is None:
        return stamp
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{stamp}{sign}{minutes // 60:02d}'{minutes % 60:02d}'"


def _is_valid_keywords(value: object) -> bool:
    return isinstance(value, (list, tuple)) and bool(value) and all(isinstance(item, str) for item in value)


def set_document_metadata(document: fitz.Document, metadata: Optional[DocumentMetadata]) -> None:
    """Apply each provided metadata field; invalid values are skipped individually."""
    if metadata is None or metadata.is_empty:
        return

    updates: Dict[str, str] = {}
    for key, value in (
        ("title", metadata.title),
        ("author", metadata.author),
        ("subject", metadata.subject),
        ("producer", metadata.producer),
        ("creator", metadata.creator),
    ):
        if isinstance(value, str):
            updates[key] = value
        elif value is not None:
            LOGGER.debug("Ignoring non-string metadata %s=%r", key, value)

    if _is_valid_keywords(metadata.keywords):
        updates["keywords"] = ", ".join(metadata.keywords)
    elif metadata.keywords is not None:
        LOGGER.debug("Ignoring invalid keywords metadata %r", metadata.keywords)

    for key, value in (("creationDate", metadata.creation_date), ("modDate", metadata.modification_date)):
        if isinstance(value, datetime):
            updates[key] = _pdf_date(value)
        elif value is not None:
            LOGGER.debug("Ignoring invalid date metadata %s=%r", key, value)

    if not updates:
        return

    current = {key: value for key, value in (document.metadata or {}).items() if key not in ("format", "encryption")}
    current.update(updates)
    document.set_metadata(current)
