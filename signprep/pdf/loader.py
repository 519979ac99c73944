"""PDF loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import fitz

from signprep.model.document import PdfDocument

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF"


class PdfLoadError(RuntimeError):
    """Raised when a PDF cannot be opened."""


class UnsupportedFormat(PdfLoadError):
    """Raised when the bytes are not a PDF at all."""


class CorruptDocument(PdfLoadError):
    """Raised when the bytes look like a PDF but cannot be opened."""


def load_document(data: bytes, path: Path | None = None) -> PdfDocument:
    label = str(path) if path is not None else "<memory>"
    # Some producers prepend junk before the header; PDF readers allow 1 KiB.
    if _PDF_MAGIC not in data[:1024]:
        raise UnsupportedFormat(f"Not a PDF document: {label}")

    try:
        handle = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise CorruptDocument(f"Failed to open PDF: {label}") from exc

    if handle.page_count < 1:
        handle.close()
        raise CorruptDocument(f"PDF has no pages: {label}")

    logger.info("Loaded %s (%d page(s))", label, handle.page_count)
    return PdfDocument(data=data, handle=handle, path=path)


def load_document_file(path: str | Path) -> PdfDocument:
    source_path = Path(path)
    try:
        data = source_path.read_bytes()
    except OSError as exc:
        raise PdfLoadError(f"File not found: {source_path}") from exc
    return load_document(data, path=source_path)
