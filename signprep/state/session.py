"""In-memory session state for one loaded document."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import uuid

from signprep.model.document import PdfDocument
from signprep.model.field import Field, FieldType
from signprep.model.recipient import Recipient
from signprep.state.assignment import AssignmentCoordinator, SendBlocker, SendPayload
from signprep.state.errors import InvalidRecipient
from signprep.state.fields import FieldStore
from signprep.state.recipients import RecipientStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    session_id: str
    page_count: int
    fields: tuple[Field, ...]
    recipients: tuple[Recipient, ...]
    ready_to_send: bool

    def fields_for_page(self, page_number: int) -> tuple[Field, ...]:
        return tuple(field for field in self.fields if field.page_number == page_number)


SessionListener = Callable[[SessionSnapshot], None]


class DocumentSession:
    """Owns the field and recipient stores for a single document.

    Loading another document means constructing a new session; nothing is
    carried over. Every mutating call notifies subscribers with a fresh
    immutable snapshot.
    """

    def __init__(self, page_count: int = 0, document: PdfDocument | None = None) -> None:
        self.session_id = uuid.uuid4().hex
        self.page_count = page_count
        self.document = document
        self.fields = FieldStore()
        self.recipients = RecipientStore()
        self.coordinator = AssignmentCoordinator(self.fields, self.recipients)
        self.closed = False
        self._listeners: list[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            page_count=self.page_count,
            fields=self.fields.all_fields(),
            recipients=self.recipients.all(),
            ready_to_send=self.coordinator.is_ready_to_send(),
        )

    def add_field(self, field_type: FieldType | str, page_number: int, left: float, top: float) -> int:
        if self.page_count > 0 and page_number > self.page_count:
            raise ValueError(f"Page {page_number} is outside a {self.page_count}-page document")
        field_id = self.fields.add_field(field_type, page_number, left, top)
        self._notify()
        return field_id

    def move_field(self, field_id: int, left: float, top: float) -> bool:
        moved = self.fields.move_field(field_id, left, top)
        if moved:
            self._notify()
        return moved

    def assign_field(self, field_id: int, recipient_id: str | None) -> bool:
        assigned = self.coordinator.assign(field_id, recipient_id)
        if assigned:
            self._notify()
        return assigned

    def add_recipient(self, email: str) -> Recipient:
        recipient = self.recipients.add_recipient(email)
        self._notify()
        return recipient

    def try_add_recipient(self, email: str) -> str | None:
        try:
            return self.add_recipient(email).id
        except InvalidRecipient as exc:
            logger.debug("%s", exc)
            return None

    def remove_recipient(self, recipient_id: str) -> list[int]:
        known = self.recipients.contains(recipient_id)
        affected = self.coordinator.remove_recipient(recipient_id)
        if known:
            self._notify()
        return affected

    def is_ready_to_send(self) -> bool:
        return self.coordinator.is_ready_to_send()

    def blockers(self) -> list[SendBlocker]:
        return self.coordinator.blockers()

    def build_payload(self) -> SendPayload:
        return self.coordinator.build_payload()

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()
        self.fields.clear_all()
        self.recipients.clear_all()
        if self.document is not None:
            self.document.close()
            self.document = None

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
