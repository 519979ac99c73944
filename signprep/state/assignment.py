"""Cross-store consistency between fields and recipients, and the send payload."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
import json
import logging

from signprep.model.field import Field
from signprep.model.recipient import Recipient
from signprep.state.errors import NotReadyToSend, UnresolvedReference
from signprep.state.fields import FieldStore
from signprep.state.recipients import RecipientStore

logger = logging.getLogger(__name__)

RECIPIENT_COLORS = ("#f8bbd0", "#e1bee7", "#c8e6c9", "#c5cae9")
UNASSIGNED_COLOR = "#fff59d"
UNKNOWN_RECIPIENT_COLOR = "#e0e0e0"


class SendBlocker(str, Enum):
    NO_FIELDS = "no_fields"
    UNASSIGNED_FIELDS = "unassigned_fields"
    NO_RECIPIENTS = "no_recipients"


BLOCKER_MESSAGES = {
    SendBlocker.NO_FIELDS: "Please place at least one field on the document.",
    SendBlocker.UNASSIGNED_FIELDS: "Please assign all placed fields to a filler.",
    SendBlocker.NO_RECIPIENTS: "Please add at least one filler.",
}


@dataclass(frozen=True, slots=True)
class PayloadField:
    page_number: int
    left: float
    top: float
    field_type: str
    assigned_to: str | None

    def to_dict(self) -> dict:
        return {
            "pageNumber": self.page_number,
            "left": self.left,
            "top": self.top,
            "type": self.field_type,
            "assignedTo": self.assigned_to,
        }


@dataclass(frozen=True, slots=True)
class SendPayload:
    recipients: tuple[Recipient, ...]
    fields: tuple[PayloadField, ...]

    def to_dict(self) -> dict:
        return {
            "recipients": [recipient.to_dict() for recipient in self.recipients],
            "fields": [field.to_dict() for field in self.fields],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def readiness(fields: Sequence[Field], recipients: Sequence[Recipient]) -> list[SendBlocker]:
    blockers: list[SendBlocker] = []
    if not fields:
        blockers.append(SendBlocker.NO_FIELDS)
    elif any(field.assigned_to is None for field in fields):
        blockers.append(SendBlocker.UNASSIGNED_FIELDS)
    if not recipients:
        blockers.append(SendBlocker.NO_RECIPIENTS)
    return blockers


def is_ready_to_send(fields: Sequence[Field], recipients: Sequence[Recipient]) -> bool:
    return not readiness(fields, recipients)


def build_payload(fields: Sequence[Field], recipients: Sequence[Recipient]) -> SendPayload:
    blockers = readiness(fields, recipients)
    if blockers:
        raise NotReadyToSend(blockers, [BLOCKER_MESSAGES[blocker] for blocker in blockers])

    return SendPayload(
        recipients=tuple(recipients),
        fields=tuple(
            PayloadField(
                page_number=field.page_number,
                left=field.left,
                top=field.top,
                field_type=field.field_type,
                assigned_to=field.assigned_to,
            )
            for field in fields
        ),
    )


def recipient_color(recipient_id: str | None, recipients: Sequence[Recipient]) -> str:
    if recipient_id is None:
        return UNASSIGNED_COLOR
    for index, recipient in enumerate(recipients):
        if recipient.id == recipient_id:
            return RECIPIENT_COLORS[index % len(RECIPIENT_COLORS)]
    return UNKNOWN_RECIPIENT_COLOR


class AssignmentCoordinator:
    """Keeps every field assignment pointing at a live recipient."""

    def __init__(self, fields: FieldStore, recipients: RecipientStore) -> None:
        self._fields = fields
        self._recipients = recipients

    def assign(self, field_id: int, recipient_id: str | None) -> bool:
        if not recipient_id:
            return self._fields.assign_field(field_id, None)
        if not self._recipients.contains(recipient_id):
            raise UnresolvedReference(recipient_id)
        return self._fields.assign_field(field_id, recipient_id)

    def remove_recipient(self, recipient_id: str) -> list[int]:
        if not self._recipients.remove_recipient(recipient_id):
            return []
        return self.on_recipient_removed(recipient_id)

    def on_recipient_removed(self, recipient_id: str) -> list[int]:
        affected = self._fields.unassign_recipient(recipient_id)
        if affected:
            logger.info("Unassigned %d field(s) from removed recipient %s", len(affected), recipient_id)
        return affected

    def blockers(self) -> list[SendBlocker]:
        return readiness(self._fields.all_fields(), self._recipients.all())

    def is_ready_to_send(self) -> bool:
        return is_ready_to_send(self._fields.all_fields(), self._recipients.all())

    def build_payload(self) -> SendPayload:
        return build_payload(self._fields.all_fields(), self._recipients.all())
