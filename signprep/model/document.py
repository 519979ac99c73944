"""Document model for a PDF loaded from bytes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import fitz


@dataclass(slots=True)
class PdfDocument:
    data: bytes
    handle: fitz.Document
    path: Path | None = None

    @property
    def page_count(self) -> int:
        return self.handle.page_count

    @property
    def display_name(self) -> str:
        return self.path.name if self.path is not None else "document.pdf"

    def page_size_pt(self, page_number: int) -> tuple[float, float]:
        rect = self.handle.load_page(page_number - 1).rect
        return float(rect.width), float(rect.height)

    def close(self) -> None:
        if not self.handle.is_closed:
            self.handle.close()
