"""Prepared-PDF export: stamp placed fields as form widgets using reportlab + pypdf."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from io import BytesIO
import logging
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, BooleanObject, DictionaryObject, NameObject
from reportlab.lib import colors
from reportlab.pdfgen import canvas

from signprep.config import DEFAULT_FIELD_SIZE_PT, FIELD_SIZES_PT
from signprep.state.assignment import PayloadField, SendPayload

logger = logging.getLogger(__name__)


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


@dataclass(frozen=True, slots=True)
class WidgetPlacement:
    name: str
    tooltip: str
    x: float
    y: float
    width: float
    height: float


def widget_placement(
    field: PayloadField,
    name: str,
    tooltip: str,
    page_box: tuple[float, float, float, float],
) -> WidgetPlacement:
    """Convert a top-left percentage anchor into a bottom-left PDF rectangle."""
    origin_x, origin_y, page_w, page_h = page_box
    width, height = FIELD_SIZES_PT.get(field.field_type, DEFAULT_FIELD_SIZE_PT)
    width = min(width, page_w)
    height = min(height, page_h)

    x = field.left / 100.0 * page_w
    y_from_top = field.top / 100.0 * page_h
    x = max(0.0, min(x, page_w - width))
    y = max(0.0, page_h - y_from_top - height)
    return WidgetPlacement(
        name=name,
        tooltip=tooltip,
        x=origin_x + x,
        y=origin_y + y,
        width=width,
        height=height,
    )


def write_prepared_pdf(
    source: bytes | str | Path,
    output_path: str | Path,
    payload: SendPayload,
) -> None:
    output = Path(output_path)

    try:
        reader = PdfReader(BytesIO(source) if isinstance(source, bytes) else str(source))
        placements = _placements_by_page(reader, payload)

        writer = PdfWriter()
        for page in reader.pages:
            _drop_form_widgets(writer.add_page(page))
        if "/AcroForm" in writer._root_object:
            del writer._root_object["/AcroForm"]

        if placements:
            overlay_reader = PdfReader(_build_overlay_pdf(reader, placements))
            _attach_placed_widgets(overlay_reader, writer, placements)

        with output.open("wb") as handle:
            writer.write(handle)
    except Exception as exc:
        raise PdfWriteError(f"Failed to write output PDF: {output}") from exc

    logger.info("Wrote prepared PDF with %d field(s) to %s", len(payload.fields), output)


def _placements_by_page(reader: PdfReader, payload: SendPayload) -> dict[int, list[WidgetPlacement]]:
    emails = {recipient.id: recipient.email for recipient in payload.recipients}
    counters: dict[str, int] = defaultdict(int)
    grouped: dict[int, list[WidgetPlacement]] = defaultdict(list)

    for field in payload.fields:
        page_index = field.page_number - 1
        if page_index < 0 or page_index >= len(reader.pages):
            raise PdfWriteError(f"Field refers to missing page {field.page_number}")
        mediabox = reader.pages[page_index].mediabox
        page_box = (
            float(mediabox.left),
            float(mediabox.bottom),
            float(mediabox.width),
            float(mediabox.height),
        )

        prefix = field.field_type.lower()
        counters[prefix] += 1
        tooltip = f"{field.field_type} for {emails.get(field.assigned_to, 'unassigned')}"
        grouped[page_index].append(
            widget_placement(field, f"{prefix}_{counters[prefix]}", tooltip, page_box)
        )
    return dict(grouped)



def _build_overlay_pdf(reader: PdfReader, placements: dict[int, list[WidgetPlacement]]) -> BytesIO:
    buffer = BytesIO()

    first_page = reader.pages[0]
    report = canvas.Canvas(
        buffer,
        pagesize=(float(first_page.mediabox.width), float(first_page.mediabox.height)),
    )

    for page_index, page in enumerate(reader.pages):
        report.setPageSize((float(page.mediabox.width), float(page.mediabox.height)))

        for placement in placements.get(page_index, []):
            report.acroForm.textfield(
                name=placement.name,
                tooltip=placement.tooltip,
                x=placement.x,
                y=placement.y,
                width=placement.width,
                height=placement.height,
                value="",
                forceBorder=True,
                borderWidth=1,
                fillColor=colors.Color(1, 1, 0.8),
                borderColor=colors.grey,
                textColor=colors.black,
            )

        report.showPage()

    report.save()
    buffer.seek(0)
    return buffer


def _drop_form_widgets(page) -> None:
    """Remove existing form widgets so only placed fields end up in the form."""
    annots = page.get("/Annots")
    if not annots:
        return

    kept = ArrayObject(ref for ref in annots if ref.get_object().get("/Subtype") != "/Widget")
    if kept:
        page[NameObject("/Annots")] = kept
    else:
        del page["/Annots"]


def _attach_placed_widgets(
    overlay_reader: PdfReader,
    writer: PdfWriter,
    placements: dict[int, list[WidgetPlacement]],
) -> None:
    """Move the overlay's widgets onto the matching output pages and register them as form fields."""
    form_fields = ArrayObject()

    for page_index, page_placements in sorted(placements.items()):
        wanted = {placement.name for placement in page_placements}
        target_page = writer.pages[page_index]
        existing = target_page.get("/Annots")
        annots = ArrayObject() if existing is None else existing.get_object()
        attached_count = 0

        for annot_ref in overlay_reader.pages[page_index].get("/Annots") or []:
            widget = annot_ref.get_object()
            if str(widget.get("/T", "")) not in wanted:
                continue
            attached = widget.clone(writer)
            if target_page.indirect_reference is not None:
                attached.get_object()[NameObject("/P")] = target_page.indirect_reference
            annots.append(attached)
            form_fields.append(attached)
            attached_count += 1

        if attached_count != len(page_placements):
            raise PdfWriteError(f"Missing widgets for page {page_index + 1}")
        target_page[NameObject("/Annots")] = annots

    acroform = DictionaryObject(
        {
            NameObject("/Fields"): form_fields,
            NameObject("/NeedAppearances"): BooleanObject(True),
        }
    )
    writer._root_object[NameObject("/AcroForm")] = writer._add_object(acroform)
