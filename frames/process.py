"""
Type inference and DTO conversion for frames.

All functions here are pure: the same input always yields the same type.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from numbers import Number
from typing import Any

import numpy as np
import pandas as pd

from frames.types import Field, FieldType

_NUMBER = re.compile(r"^\s*(-?(\d+\.?\d*)|(\.\d+))(e[+-]?\d+)?\s*$", re.IGNORECASE)
_BOOLEAN_TEXT = frozenset({"true", "TRUE", "True", "false", "FALSE", "False"})
_ISO_DATE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$"
)


def _is_iso_date(text: str) -> bool:
    if not _ISO_DATE.match(text.strip()):
        return False
    try:
        pd.Timestamp(text.strip())
    except (ValueError, OverflowError):
        return False
    return True


def guess_field_type_from_value(v: Any) -> FieldType:
    """Guess the semantic type of a single raw value.

    Numeric literals (including numeric strings) are numbers, ``true``/``false``
    spellings and bools are booleans, datetimes and ISO-8601 strings are time,
    other strings are string. Anything else (None included) is ``other``.
    """
    if isinstance(v, (bool, np.bool_)):
        return FieldType.boolean
    if isinstance(v, Number):
        return FieldType.number
    if isinstance(v, str):
        if _NUMBER.match(v):
            return FieldType.number
        if v in _BOOLEAN_TEXT:
            return FieldType.boolean
        if _is_iso_date(v):
            return FieldType.time
        return FieldType.string
    if isinstance(v, (datetime, date, pd.Timestamp, np.datetime64)):
        return FieldType.time
    return FieldType.other


def guess_field_type_for_field(field: Field) -> FieldType | None:
    """Guess a column's type from its name, then from its first non-null value.

    Returns:
        The guessed type, or None when the column holds no non-null value.
    """
    if field.name:
        name = field.name.lower()
        if name in ("date", "time"):
            return FieldType.time

    for v in field.values:
        if v is not None:
            return guess_field_type_from_value(v)

    return None


def parse_float(value: Any) -> float:
    """Leading-number parse: ``"12px"`` → 12.0, ``"abc"`` / None → nan."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, Number):
        return float(value)
    text = str(value).strip()
    m = re.match(r"^[+-]?(Infinity|(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)", text)
    if not m:
        return math.nan
    try:
        return float(m.group(0))
    except ValueError:
        return math.nan


def to_data_frame_dto(data) -> dict:
    """Plain DTO for any frame: ``{name, ref_id, labels, meta, fields}``."""
    return {
        "name": data.name,
        "ref_id": data.ref_id,
        "labels": data.labels,
        "meta": data.meta,
        "fields": [f.to_dto() for f in data.fields],
    }


def read_dto(source: dict) -> tuple[dict, list]:
    """Split a DTO into (frame metadata, field list).

    Accepts both ``ref_id`` and ``refId`` spellings for the query reference.
    """
    meta = {
        "name": source.get("name"),
        "ref_id": source.get("ref_id", source.get("refId")),
        "labels": source.get("labels"),
        "meta": source.get("meta"),
    }
    return meta, list(source.get("fields") or [])
