"""Authoritative collection of recipients (fillers)."""

from __future__ import annotations

import logging
import re

from signprep.model.recipient import Recipient
from signprep.state.errors import InvalidRecipient, RecipientRejection

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.search(email))


class RecipientStore:
    def __init__(self) -> None:
        self._recipients: list[Recipient] = []
        self._counter = 0

    def __len__(self) -> int:
        return len(self._recipients)

    def add_recipient(self, email: str) -> Recipient:
        email = (email or "").strip()
        if not email:
            raise InvalidRecipient(email, RecipientRejection.EMPTY)
        if not is_valid_email(email):
            raise InvalidRecipient(email, RecipientRejection.MALFORMED)
        if any(recipient.email == email for recipient in self._recipients):
            raise InvalidRecipient(email, RecipientRejection.DUPLICATE)

        self._counter += 1
        recipient = Recipient(id=f"filler_{self._counter}", email=email)
        self._recipients.append(recipient)
        logger.debug("Added recipient %s <%s>", recipient.id, email)
        return recipient

    def remove_recipient(self, recipient_id: str) -> bool:
        for index, recipient in enumerate(self._recipients):
            if recipient.id == recipient_id:
                del self._recipients[index]
                logger.debug("Removed recipient %s", recipient_id)
                return True
        return False

    def get(self, recipient_id: str) -> Recipient | None:
        for recipient in self._recipients:
            if recipient.id == recipient_id:
                return recipient
        return None

    def contains(self, recipient_id: str) -> bool:
        return self.get(recipient_id) is not None

    def all(self) -> tuple[Recipient, ...]:
        return tuple(self._recipients)

    def clear_all(self) -> None:
        self._recipients.clear()
        self._counter = 0
