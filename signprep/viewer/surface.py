"""Per-page bridge between rendered page geometry and the document session."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from signprep.model.field import Field, FieldType
from signprep.state.errors import LayoutNotReady
from signprep.state.session import DocumentSession
from signprep.viewer.coordinates import PointPx, SurfaceBox, move_existing, place_new, to_pixels

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NewFieldDrag:
    field_type: FieldType | str


@dataclass(frozen=True, slots=True)
class ExistingFieldDrag:
    field_id: int
    left: float
    top: float


DragPayload = NewFieldDrag | ExistingFieldDrag


@dataclass(frozen=True, slots=True)
class RenderTicket:
    session_id: str
    page_number: int
    width: int
    sequence: int


class PageSurfaceAdapter:
    def __init__(self, session: DocumentSession, page_number: int) -> None:
        self._session = session
        self.page_number = page_number
        self._offset = PointPx(0.0, 0.0)
        self._rendered_width = 0
        self._rendered_height = 0
        self._requested_width = 0
        self._sequence = 0

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def box(self) -> SurfaceBox:
        return SurfaceBox(
            left=self._offset.x,
            top=self._offset.y,
            width=float(self._rendered_width),
            height=float(self._rendered_height),
        )

    def set_offset(self, left: float, top: float) -> None:
        self._offset = PointPx(float(left), float(top))

    def request_render(self, container_width: int) -> RenderTicket | None:
        """Return a render request if the container width differs from the last one."""
        if container_width <= 0:
            return None
        if container_width == self._requested_width:
            return None
        self._requested_width = container_width
        self._sequence += 1
        return RenderTicket(
            session_id=self._session.session_id,
            page_number=self.page_number,
            width=container_width,
            sequence=self._sequence,
        )

    def abandon_render(self, ticket: RenderTicket) -> None:
        """Forget a failed request so the same width can be asked for again."""
        if ticket.sequence == self._sequence and ticket.page_number == self.page_number:
            self._requested_width = 0

    def complete_render(
        self,
        ticket: RenderTicket,
        raster_height: int,
        raster_width: int | None = None,
    ) -> bool:
        if ticket.page_number != self.page_number:
            logger.debug("Render for page %d delivered to page %d", ticket.page_number, self.page_number)
            return False
        if self._session.closed or ticket.session_id != self._session.session_id:
            logger.debug("Dropping render of page %d from a previous document", ticket.page_number)
            return False
        if ticket.sequence != self._sequence:
            logger.debug("Dropping superseded render of page %d", ticket.page_number)
            return False
        self._rendered_width = ticket.width if raster_width is None else raster_width
        self._rendered_height = raster_height
        return True

    def handle_drop(self, payload: DragPayload, pointer_offset: PointPx, delta: PointPx) -> int | None:
        try:
            if isinstance(payload, ExistingFieldDrag):
                left, top = move_existing(payload.left, payload.top, delta, self.box)
                if not self._session.move_field(payload.field_id, left, top):
                    return None
                return payload.field_id
            left, top = place_new(pointer_offset, self.box)
        except LayoutNotReady as exc:
            logger.debug("Skipping drop on page %d: %s", self.page_number, exc)
            return None
        return self._session.add_field(payload.field_type, self.page_number, left, top)

    def overlay_positions(self) -> list[tuple[Field, PointPx]]:
        box = self.box
        if not box.is_ready:
            return []
        return [
            (field, to_pixels(field.left, field.top, box))
            for field in self._session.fields.fields_for_page(self.page_number)
        ]
