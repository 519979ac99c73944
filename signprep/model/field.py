"""Signature request field model definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    SIGNATURE = "Signature"
    TEXT = "Text"
    DATE = "Date"


def field_type_name(field_type: FieldType | str) -> str:
    if isinstance(field_type, FieldType):
        return field_type.value
    return str(field_type)


@dataclass(frozen=True, slots=True)
class Field:
    id: int
    page_number: int
    left: float
    top: float
    field_type: str
    assigned_to: str | None = None
