"""Main application window: document pages, field palette, recipients and send."""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QMimeData, Qt
from PySide6.QtGui import QAction, QDrag
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSplitter,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from signprep.config import FIELD_MIME_TYPE, AppConfig
from signprep.model.field import FieldType
from signprep.pdf.loader import PdfLoadError, load_document_file
from signprep.pdf.writer import PdfWriteError, write_prepared_pdf
from signprep.state.assignment import BLOCKER_MESSAGES
from signprep.state.errors import InvalidRecipient, NotReadyToSend, RecipientRejection
from signprep.state.session import DocumentSession, SessionSnapshot
from signprep.viewer.canvas import PdfPageCanvas

logger = logging.getLogger(__name__)

_PALETTE = (
    (FieldType.SIGNATURE, "Signature"),
    (FieldType.TEXT, "Text Input"),
    (FieldType.DATE, "Date"),
)

_REJECTION_MESSAGES = {
    RecipientRejection.EMPTY: "Enter an email address.",
    RecipientRejection.MALFORMED: "That does not look like an email address.",
    RecipientRejection.DUPLICATE: "That filler has already been added.",
}


class FieldPaletteButton(QPushButton):
    """Palette entry that starts a drag carrying its field type."""

    def __init__(self, field_type: FieldType, label: str) -> None:
        super().__init__(label)
        self._field_type = field_type
        self._press_pos = None
        self.setCursor(Qt.CursorShape.OpenHandCursor)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._press_pos = event.position()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._press_pos is None or not (event.buttons() & Qt.MouseButton.LeftButton):
            return
        if (event.position() - self._press_pos).manhattanLength() < QApplication.startDragDistance():
            return

        mime = QMimeData()
        mime.setData(FIELD_MIME_TYPE, self._field_type.value.encode("utf-8"))
        drag = QDrag(self)
        drag.setMimeData(mime)
        self._press_pos = None
        drag.exec(Qt.DropAction.CopyAction)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        self._press_pos = None
        super().mouseReleaseEvent(event)


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig) -> None:
        super().__init__()
        self.setWindowTitle("E-Signature Field Placement")
        self.resize(1300, 850)

        self._config = config
        self._session = DocumentSession()
        self._unsubscribe = self._session.subscribe(self._on_session_changed)
        self._canvases: list[PdfPageCanvas] = []

        self.palette_buttons = [FieldPaletteButton(field_type, label) for field_type, label in _PALETTE]

        self.email_input = QLineEdit()
        self.email_input.setPlaceholderText("filler@example.com")
        self.email_input.returnPressed.connect(self.add_recipient)
        add_button = QPushButton("Add")
        add_button.clicked.connect(self.add_recipient)

        self.recipient_list = QListWidget()
        remove_button = QPushButton("Remove Filler")
        remove_button.clicked.connect(self.remove_selected_recipient)

        self.send_button = QPushButton("Send Document")
        self.send_button.clicked.connect(self.send_document)

        sidebar = QWidget()
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.addWidget(QLabel("Add Fields (drag onto the document)"))
        for button in self.palette_buttons:
            sidebar_layout.addWidget(button)
        sidebar_layout.addWidget(QLabel("Add Fillers"))
        email_row = QHBoxLayout()
        email_row.addWidget(self.email_input)
        email_row.addWidget(add_button)
        sidebar_layout.addLayout(email_row)
        sidebar_layout.addWidget(self.recipient_list, stretch=1)
        sidebar_layout.addWidget(remove_button)
        sidebar_layout.addWidget(self.send_button)
        self._sidebar_controls = [add_button, remove_button, self.email_input, *self.palette_buttons]

        self.pages_widget = QWidget()
        self.pages_layout = QVBoxLayout(self.pages_widget)
        self.pages_layout.setSpacing(self._config.page_margin)
        self.pages_layout.setContentsMargins(
            self._config.page_margin,
            self._config.page_margin,
            self._config.page_margin,
            self._config.page_margin,
        )
        self.pages_layout.addStretch(1)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setWidget(self.pages_widget)

        splitter = QSplitter()
        splitter.addWidget(sidebar)
        splitter.addWidget(self.scroll_area)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 4)
        self.setCentralWidget(splitter)

        self._build_toolbar()
        self._on_session_changed(self._session.snapshot())
        self.statusBar().showMessage("Open a PDF to begin.")

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        open_action = QAction("Open PDF", self)
        open_action.triggered.connect(self.open_pdf)
        toolbar.addAction(open_action)

        send_action = QAction("Send Document", self)
        send_action.triggered.connect(self.send_document)
        toolbar.addAction(send_action)

    @property
    def session(self) -> DocumentSession:
        return self._session

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._unsubscribe()
        self._session.close()
        super().closeEvent(event)

    def open_pdf(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Open PDF",
            str(Path.home()),
            "PDF Files (*.pdf)",
        )
        if not file_path:
            return

        try:
            document = load_document_file(file_path)
        except PdfLoadError as exc:
            QMessageBox.critical(self, "Open Failed", str(exc))
            return

        self._replace_session(DocumentSession(page_count=document.page_count, document=document))
        self.statusBar().showMessage(f"Loaded: {file_path} ({document.page_count} page(s))")

    def add_recipient(self) -> None:
        try:
            recipient = self._session.add_recipient(self.email_input.text())
        except InvalidRecipient as exc:
            self.statusBar().showMessage(_REJECTION_MESSAGES[exc.reason])
            return
        self.email_input.clear()
        self.statusBar().showMessage(f"Added filler: {recipient.email}")

    def remove_selected_recipient(self) -> None:
        item = self.recipient_list.currentItem()
        if item is None:
            self.statusBar().showMessage("No filler selected.")
            return
        affected = self._session.remove_recipient(item.data(Qt.ItemDataRole.UserRole))
        self.statusBar().showMessage(f"Removed filler; {len(affected)} field(s) now unassigned.")

    def send_document(self) -> None:
        try:
            payload = self._session.build_payload()
        except NotReadyToSend as exc:
            QMessageBox.warning(self, "Not Ready", "\n".join(exc.messages))
            return

        payload_json = payload.to_json()
        logger.info("Prepared payload:\n%s", payload_json)

        document = self._session.document
        if document is None:
            return
        default_path = (document.path or Path.home() / document.display_name).with_suffix("")
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Prepared PDF",
            f"{default_path}_prepared.pdf",
            "PDF Files (*.pdf)",
        )
        if not output_path:
            self.statusBar().showMessage("Payload prepared (see log).")
            return

        try:
            write_prepared_pdf(document.data, output_path, payload)
            if self._config.save_payload_json:
                Path(output_path).with_suffix(".json").write_text(payload_json, encoding="utf-8")
        except (PdfWriteError, OSError) as exc:
            QMessageBox.critical(self, "Save Failed", str(exc))
            return
        self.statusBar().showMessage(f"Saved: {output_path}")

    def _replace_session(self, session: DocumentSession) -> None:
        self._unsubscribe()
        self._session.close()
        self._clear_pages()

        self._session = session
        self._unsubscribe = session.subscribe(self._on_session_changed)
        self.email_input.clear()
        for page_number in range(1, session.page_count + 1):
            canvas = PdfPageCanvas(session, page_number, self._config)
            canvas.render_failed.connect(self._on_render_failed)
            self.pages_layout.insertWidget(self.pages_layout.count() - 1, canvas)
            self._canvases.append(canvas)
        self._on_session_changed(session.snapshot())

    def _clear_pages(self) -> None:
        for canvas in self._canvases:
            self.pages_layout.removeWidget(canvas)
            canvas.deleteLater()
        self._canvases = []

    def _on_session_changed(self, snapshot: SessionSnapshot) -> None:
        has_document = self._session.document is not None
        for control in self._sidebar_controls:
            control.setEnabled(has_document)

        self.recipient_list.clear()
        for recipient in snapshot.recipients:
            item = QListWidgetItem(recipient.email)
            item.setData(Qt.ItemDataRole.UserRole, recipient.id)
            self.recipient_list.addItem(item)

        self.send_button.setEnabled(snapshot.ready_to_send)
        if has_document and not snapshot.ready_to_send:
            hints = [BLOCKER_MESSAGES[blocker] for blocker in self._session.blockers()]
            self.send_button.setToolTip("\n".join(hints))
        else:
            self.send_button.setToolTip("")

        for canvas in self._canvases:
            canvas.update()

    def _on_render_failed(self, message: str) -> None:
        self.statusBar().showMessage(message)
