"""
Value mappings: replace a display value with fixed text.

A value mapping matches one exact value; a range mapping matches any number
inside ``[from, to]``. When several mappings match, the last one wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional


class MappingType(IntEnum):
    value_to_text = 1
    range_to_text = 2


@dataclass
class ValueMapping:
    text: str
    type: MappingType = MappingType.value_to_text
    id: int = 0
    operator: str = ""
    value: Optional[str] = None
    from_: Optional[str] = None
    to: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ValueMapping":
        return cls(
            id=int(data.get("id", 0) or 0),
            text=str(data.get("text", "")),
            type=MappingType(int(data.get("type", MappingType.value_to_text))),
            operator=data.get("operator", "") or "",
            value=data.get("value"),
            from_=data.get("from", data.get("from_")),
            to=data.get("to"),
        )

    def to_dict(self) -> dict:
        d = {"id": self.id, "text": self.text, "type": int(self.type), "operator": self.operator}
        if self.type == MappingType.value_to_text:
            d["value"] = self.value
        else:
            d["from"] = self.from_
            d["to"] = self.to
        return d


def _to_float(value: Any) -> float:
    if value is None or isinstance(value, bool) or value == "":
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _is_null(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _matches_value(mapping: ValueMapping, value: Any) -> bool:
    if mapping.value is None:
        return False
    if mapping.value == "null":
        return _is_null(value)
    if _is_null(value):
        return False
    mapped = _to_float(mapping.value)
    number = _to_float(value)
    if not math.isnan(mapped) and not math.isnan(number):
        return mapped == number
    return str(mapping.value) == str(value)


def _matches_range(mapping: ValueMapping, value: Any) -> bool:
    # "null" bounds only match a null value
    if mapping.from_ == "null" and mapping.to == "null":
        return _is_null(value)
    low = _to_float(mapping.from_)
    high = _to_float(mapping.to)
    number = _to_float(value)
    if math.isnan(low) or math.isnan(high) or math.isnan(number):
        return False
    return low <= number <= high


def get_mapped_value(mappings: list[ValueMapping], value: Any) -> Optional[ValueMapping]:
    """Last mapping matching ``value``, or None."""
    found = None
    for mapping in mappings or []:
        if mapping.type == MappingType.value_to_text:
            if _matches_value(mapping, value):
                found = mapping
        elif mapping.type == MappingType.range_to_text:
            if _matches_range(mapping, value):
                found = mapping
    return found
