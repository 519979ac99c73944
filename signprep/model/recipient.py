"""Recipient (filler) model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Recipient:
    id: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "email": self.email}
