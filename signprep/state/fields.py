"""Authoritative collection of placed fields for one document session."""

from __future__ import annotations

from dataclasses import replace
import logging
import math

from signprep.model.field import Field, FieldType, field_type_name
from signprep.viewer.coordinates import clamp_percent

logger = logging.getLogger(__name__)


def _checked_position(left: float, top: float) -> tuple[float, float]:
    left, top = float(left), float(top)
    if not (math.isfinite(left) and math.isfinite(top)):
        raise ValueError(f"Field position must be finite: ({left}, {top})")
    return clamp_percent(left), clamp_percent(top)


class FieldStore:
    def __init__(self) -> None:
        self._fields: list[Field] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._fields)

    def add_field(
        self,
        field_type: FieldType | str,
        page_number: int,
        left: float,
        top: float,
    ) -> int:
        type_name = field_type_name(field_type)
        if not type_name:
            raise ValueError("Field type must not be empty")
        if page_number < 1:
            raise ValueError(f"Page numbers start at 1: {page_number}")
        left, top = _checked_position(left, top)

        field_id = self._next_id
        self._next_id += 1
        self._fields.append(
            Field(
                id=field_id,
                page_number=page_number,
                left=left,
                top=top,
                field_type=type_name,
            )
        )
        logger.debug("Added %s field %d on page %d", type_name, field_id, page_number)
        return field_id

    def move_field(self, field_id: int, left: float, top: float) -> bool:
        left, top = _checked_position(left, top)
        index = self._index_of(field_id)
        if index is None:
            # Drag sources can outlive a document reload.
            logger.debug("Ignoring move of unknown field %s", field_id)
            return False
        self._fields[index] = replace(self._fields[index], left=left, top=top)
        return True

    def assign_field(self, field_id: int, recipient_id: str | None) -> bool:
        index = self._index_of(field_id)
        if index is None:
            logger.debug("Ignoring assignment of unknown field %s", field_id)
            return False
        self._fields[index] = replace(self._fields[index], assigned_to=recipient_id)
        return True

    def unassign_recipient(self, recipient_id: str) -> list[int]:
        affected: list[int] = []
        for index, field in enumerate(self._fields):
            if field.assigned_to == recipient_id:
                self._fields[index] = replace(field, assigned_to=None)
                affected.append(field.id)
        return affected

    def get(self, field_id: int) -> Field | None:
        index = self._index_of(field_id)
        return None if index is None else self._fields[index]

    def fields_for_page(self, page_number: int) -> tuple[Field, ...]:
        return tuple(field for field in self._fields if field.page_number == page_number)

    def all_fields(self) -> tuple[Field, ...]:
        return tuple(self._fields)

    def clear_all(self) -> None:
        self._fields.clear()
        self._next_id = 0

    def _index_of(self, field_id: int) -> int | None:
        for index, field in enumerate(self._fields):
            if field.id == field_id:
                return index
        return None
