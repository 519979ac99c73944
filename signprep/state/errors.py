"""Error types raised by the field placement and assignment engine."""

from __future__ import annotations

from enum import Enum


class SignPrepError(RuntimeError):
    """Base class for recoverable engine errors."""


class InvalidInput(SignPrepError, ValueError):
    """Raised when user-supplied input is rejected."""


class RecipientRejection(str, Enum):
    EMPTY = "empty"
    MALFORMED = "malformed"
    DUPLICATE = "duplicate"


class InvalidRecipient(InvalidInput):
    """Raised when a recipient email cannot be added."""

    def __init__(self, email: str, reason: RecipientRejection) -> None:
        self.email = email
        self.reason = reason
        super().__init__(f"Recipient rejected ({reason.value}): {email!r}")


class UnresolvedReference(SignPrepError, LookupError):
    """Raised when a field would be assigned to an unknown recipient."""

    def __init__(self, recipient_id: str) -> None:
        self.recipient_id = recipient_id
        super().__init__(f"Unknown recipient: {recipient_id}")


class LayoutNotReady(SignPrepError):
    """Raised when a page surface has no measurable size yet."""


class NotReadyToSend(SignPrepError):
    """Raised when a payload is requested before every field is assigned."""

    def __init__(self, blockers: list, messages: list[str]) -> None:
        self.blockers = blockers
        self.messages = messages
        super().__init__(" ".join(messages))
