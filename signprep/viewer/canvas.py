"""Interactive page canvas: renders one PDF page and hosts its field overlays."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QApplication, QMenu, QWidget

from signprep.config import FIELD_MIME_TYPE, AppConfig
from signprep.model.field import Field
from signprep.pdf.renderer import PdfRenderError, render_page_image
from signprep.state.assignment import recipient_color
from signprep.state.errors import UnresolvedReference
from signprep.state.session import DocumentSession
from signprep.viewer.coordinates import PointPx
from signprep.viewer.surface import ExistingFieldDrag, NewFieldDrag, PageSurfaceAdapter, RenderTicket

logger = logging.getLogger(__name__)

OVERLAY_WIDTH_PX = 120.0
OVERLAY_HEIGHT_PX = 40.0


@dataclass(slots=True)
class _ActiveMove:
    payload: ExistingFieldDrag
    start: QPointF
    current: QPointF


class PdfPageCanvas(QWidget):
    render_failed = Signal(str)

    def __init__(self, session: DocumentSession, page_number: int, config: AppConfig) -> None:
        super().__init__()
        self._session = session
        self._config = config
        self.adapter = PageSurfaceAdapter(session, page_number)
        self._pixmap: QPixmap | None = None
        self._move: _ActiveMove | None = None

        self.setAcceptDrops(True)
        self.setMinimumWidth(config.min_page_width)
        self.setMinimumHeight(200)

    @property
    def page_number(self) -> int:
        return self.adapter.page_number

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        target_width = max(self._config.min_page_width, min(self.width(), self._config.max_page_width))
        self.adapter.set_offset((self.width() - target_width) / 2.0, 0.0)
        ticket = self.adapter.request_render(target_width)
        if ticket is not None:
            QTimer.singleShot(0, self, lambda: self._complete_render(ticket))
        self.update()

    def _complete_render(self, ticket: RenderTicket) -> None:
        document = self._session.document
        if document is None or self._session.closed:
            return
        try:
            image = render_page_image(document.handle, ticket.page_number, ticket.width)
        except PdfRenderError as exc:
            logger.error("%s", exc)
            self.adapter.abandon_render(ticket)
            self.render_failed.emit(str(exc))
            return

        if not self.adapter.complete_render(ticket, image.height(), image.width()):
            return
        self._pixmap = QPixmap.fromImage(image)
        self.setFixedHeight(image.height())
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        del event
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#e9eaee"))

        if self._pixmap is None:
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, f"Page {self.page_number}")
            return

        box = self.adapter.box
        painter.drawPixmap(int(box.left), int(box.top), self._pixmap)

        recipients = self._session.recipients.all()
        for field, anchor in self.adapter.overlay_positions():
            rect = self._overlay_rect(anchor)
            if self._move is not None and self._move.payload.field_id == field.id:
                painter.setOpacity(0.5)
                painter.fillRect(rect.translated(self._move.current - self._move.start), QColor("#90caf9"))
                painter.setOpacity(1.0)
            self._paint_field(painter, field, rect, recipient_color(field.assigned_to, recipients))

    def _paint_field(self, painter: QPainter, field: Field, rect: QRectF, color: str) -> None:
        painter.fillRect(rect, QColor(color))
        pen = QPen(QColor("#424242"))
        pen.setWidth(2)
        painter.setPen(pen)
        painter.drawRect(rect)

        recipient = self._session.recipients.get(field.assigned_to) if field.assigned_to else None
        label = f"{field.field_type}\n{recipient.email if recipient else 'Unassigned'}"
        painter.drawText(rect.adjusted(4, 2, -4, -2), Qt.AlignmentFlag.AlignLeft, label)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(FIELD_MIME_TYPE):
            event.acceptProposedAction()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(FIELD_MIME_TYPE):
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        mime = event.mimeData()
        if not mime.hasFormat(FIELD_MIME_TYPE):
            return
        field_type = bytes(mime.data(FIELD_MIME_TYPE)).decode("utf-8")
        pos = event.position()
        field_id = self.adapter.handle_drop(
            NewFieldDrag(field_type),
            PointPx(pos.x(), pos.y()),
            PointPx(0.0, 0.0),
        )
        if field_id is not None:
            event.acceptProposedAction()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return
        field = self._field_at(event.position())
        if field is None:
            return
        self._move = _ActiveMove(
            payload=ExistingFieldDrag(field_id=field.id, left=field.left, top=field.top),
            start=event.position(),
            current=event.position(),
        )

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._move is None:
            return
        self._move.current = event.position()
        self.update()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        move, self._move = self._move, None
        if move is None:
            return

        travel = event.position() - move.start
        if travel.manhattanLength() < QApplication.startDragDistance():
            self._show_assignment_menu(move.payload.field_id, event.globalPosition().toPoint())
            self.update()
            return

        pos = event.position()
        self.adapter.handle_drop(
            move.payload,
            PointPx(pos.x(), pos.y()),
            PointPx(travel.x(), travel.y()),
        )
        self.update()

    def contextMenuEvent(self, event) -> None:  # type: ignore[override]
        field = self._field_at(QPointF(event.pos()))
        if field is not None:
            self._show_assignment_menu(field.id, event.globalPos())

    def _show_assignment_menu(self, field_id: int, global_pos) -> None:
        menu = QMenu(self)
        unassign = menu.addAction("Unassigned")
        unassign.setData("")
        for recipient in self._session.recipients.all():
            action = menu.addAction(recipient.email)
            action.setData(recipient.id)

        chosen = menu.exec(global_pos)
        if chosen is None:
            return
        try:
            self._session.assign_field(field_id, chosen.data() or None)
        except UnresolvedReference as exc:
            # Menu built from a recipient list that changed underneath it.
            logger.warning("%s", exc)

    def _field_at(self, pos: QPointF) -> Field | None:
        for field, anchor in reversed(self.adapter.overlay_positions()):
            if self._overlay_rect(anchor).contains(pos):
                return field
        return None

    @staticmethod
    def _overlay_rect(anchor: PointPx) -> QRectF:
        return QRectF(anchor.x, anchor.y, OVERLAY_WIDTH_PX, OVERLAY_HEIGHT_PX)
