"""PDF rendering helpers using PyMuPDF."""

from __future__ import annotations

import fitz
from PySide6.QtGui import QImage


class PdfRenderError(RuntimeError):
    """Raised when a page cannot be rendered."""


def render_page_image(document: fitz.Document, page_number: int, target_width: int) -> QImage:
    """Render a 1-based page scaled so the raster is ``target_width`` pixels wide."""
    if page_number < 1 or page_number > document.page_count:
        raise PdfRenderError(f"Page number out of range: {page_number}")
    if target_width <= 0:
        raise PdfRenderError(f"Target width must be positive: {target_width}")

    try:
        page = document.load_page(page_number - 1)
        zoom = target_width / float(page.rect.width)
        matrix = fitz.Matrix(zoom, zoom)
        pix = page.get_pixmap(matrix=matrix, alpha=False, annots=False)
    except Exception as exc:  # pragma: no cover - defensive for PyMuPDF errors
        raise PdfRenderError(f"Failed to render page {page_number}") from exc

    image_format = QImage.Format_RGB888
    image = QImage(pix.samples, pix.width, pix.height, pix.stride, image_format)
    return image.copy()
