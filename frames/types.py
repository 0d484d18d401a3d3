"""
Column model shared by every frame flavour.

A Field is one named, typed column; its values live in a Vector owned by
that field alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from frames.vector import Vector


class FieldType(str, Enum):
    """Semantic column type."""

    time = "time"
    number = "number"
    string = "string"
    boolean = "boolean"
    other = "other"


def to_field_type(value: Any) -> FieldType:
    """Coerce a DTO type entry (``"number"``, ``FieldType.number``, None) to FieldType."""
    if isinstance(value, FieldType):
        return value
    if not value:
        return FieldType.other
    try:
        return FieldType(value)
    except ValueError:
        return FieldType.other


@dataclass(eq=False)
class Field:
    """A single column of a frame.

    Attributes:
        name: Column name (unique within a frame by convention only).
        type: Semantic type; ``other`` until it can be inferred.
        config: Display configuration in DTO shape (unit, decimals, thresholds...).
        values: Backing vector.
        parse: Memoized text-to-value parser, built on first row append.
    """

    name: str
    type: FieldType
    values: Vector
    config: dict = field(default_factory=dict)
    parse: Callable[[Any], Any] | None = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.values)

    def to_dto(self) -> dict:
        return {
            "name": self.name,
            "type": self.type.value,
            "config": self.config,
            "values": self.values.to_array(),
        }
