"""
Append-oriented columnar frame.

DataFrame owns an ordered list of Fields plus two indexes (by name and by
type) that are kept up to date as fields are added. All fields always have
the same length: whenever a column would be shorter it is padded with None
at the tail.

Usage:
    frame = DataFrame({"name": "cpu", "fields": [{"name": "time", "type": "time"}]})
    frame.append_row([1700000000000, "0.42"])
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import numpy as np

from frames.process import (
    guess_field_type_for_field,
    guess_field_type_from_value,
    parse_float,
    read_dto,
    to_data_frame_dto,
)
from frames.types import Field, FieldType, to_field_type
from frames.vector import ArrayVector, Vector

logger = logging.getLogger("dashframe")


# ---------------------------------------------------------------------------
# Cell parsers
# ---------------------------------------------------------------------------

def _parse_boolean(value: Any) -> bool | None:
    # Anything not starting with F, f or 0 is true
    if value is None:
        return None
    text = str(value)
    return not (text[:1] in ("F", "f", "0"))


def _identity(value: Any) -> Any:
    return value


def make_field_parser(value: Any, field: Field) -> Callable[[Any], Any]:
    """Pick the text-to-value parser for a field, based on its type.

    A field that still has no type is resolved first: ``time``/``Time`` names
    become time columns, otherwise the sample ``value`` decides.
    """
    if field.type is None:
        if field.name in ("time", "Time"):
            field.type = FieldType.time
        else:
            field.type = guess_field_type_from_value(value)

    if field.type == FieldType.number:
        return parse_float
    if field.type == FieldType.boolean:
        return _parse_boolean
    return _identity


def _pad(vector: Vector, length: int) -> None:
    # Stops early for bounded vectors that can no longer grow
    while vector.length < length:
        before = vector.length
        vector.add(None)
        if vector.length == before:
            break


def _to_vector(values: Any) -> Vector:
    if isinstance(values, Vector):
        return values
    if values is None:
        return ArrayVector()
    if isinstance(values, np.ndarray):
        return ArrayVector(values.tolist())
    return ArrayVector(values)


# ---------------------------------------------------------------------------
# DataFrame
# ---------------------------------------------------------------------------

class DataFrame:
    """Named, typed columns of equal length.

    Attributes:
        name: Optional frame name (shown as the series name).
        ref_id: Id of the query that produced the frame.
        labels: Key/value tags.
        meta: Free-form execution metadata (notices, stats...).
        fields: Columns in insertion order.
        length: Number of rows; every field has exactly this many values.
    """

    def __init__(self, source: dict | Any | None = None):
        if source is None:
            source = {"fields": []}
        if isinstance(source, dict):
            meta, fields = read_dto(source)
        else:
            meta = {
                "name": getattr(source, "name", None),
                "ref_id": getattr(source, "ref_id", None),
                "labels": getattr(source, "labels", None),
                "meta": getattr(source, "meta", None),
            }
            fields = [f.to_dto() for f in source.fields]

        self.name: str | None = meta["name"]
        self.ref_id: str | None = meta["ref_id"]
        self.labels: dict | None = meta["labels"]
        self.meta: dict | None = meta["meta"]
        self.fields: list[Field] = []
        self.length = 0

        self._field_by_name: dict[str, Field] = {}
        self._field_by_type: dict[FieldType, list[Field]] = {}

        for f in fields:
            self.add_field(f)

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        names = ", ".join(f.name for f in self.fields)
        return f"DataFrame(name={self.name!r}, length={self.length}, fields=[{names}])"

    def add_field_for(self, value: Any, name: str | None = None) -> Field:
        """Add an empty column whose type is guessed from a sample value."""
        return self.add_field({
            "name": name,
            "type": guess_field_type_from_value(value),
        })

    def reverse(self) -> None:
        """Reverse every column in place; row i becomes row length-1-i."""
        for f in self.fields:
            f.values.reverse()

    def _update_type_index(self, field: Field) -> None:
        if field.type == FieldType.other:
            t = guess_field_type_for_field(field)
            if t:
                field.type = t
        self._field_by_type.setdefault(field.type, []).append(field)

    def add_field(self, f: Field | dict) -> Field:
        """Add a column from a Field or a field DTO.

        Missing names become ``Time N`` / ``Column N``. Lengths are reconciled
        by padding with None at the tail: a longer new field pads every
        existing field, a shorter one is padded itself.

        Returns:
            The Field stored in the frame.
        """
        if isinstance(f, Field):
            name, type_, config, values = f.name, f.type, f.config, f.values
        else:
            name = f.get("name")
            type_ = f.get("type")
            config = f.get("config")
            values = f.get("values")

        type_ = to_field_type(type_)
        if not name:
            if type_ == FieldType.time:
                name = f"Time {len(self.fields) + 1}"
            else:
                name = f"Column {len(self.fields) + 1}"

        field = Field(
            name=name,
            type=type_,
            config=config or {},
            values=_to_vector(values),
        )
        self._update_type_index(field)

        if field.name in self._field_by_name:
            logger.warning(f"Duplicate field names in DataFrame: {field.name}")
        else:
            self._field_by_name[field.name] = field

        if field.values.length != self.length:
            if field.values.length > self.length:
                newlen = field.values.length
                for fx in self.fields:
                    _pad(fx.values, newlen)
                self.length = newlen
            else:
                _pad(field.values, self.length)

        self.fields.append(field)
        return field

    def append_row(self, row: list) -> None:
        """Append one value to every column, by position.

        Cells beyond the current column count create new columns. The first
        row decides the type of columns that were declared without one.
        Short rows leave None in the trailing columns.
        """
        for i in range(len(self.fields), len(row)):
            self.add_field_for(row[i])

        if self.length < 1:
            self._field_by_type = {}
            for i, f in enumerate(self.fields):
                if f.type is None or f.type == FieldType.other:
                    f.type = guess_field_type_from_value(row[i] if i < len(row) else None)
                self._update_type_index(f)

        for i, f in enumerate(self.fields):
            v = row[i] if i < len(row) else None
            if f.parse is None:
                f.parse = make_field_parser(v, f)
            f.values.add(f.parse(v))
        self.length += 1

    def append_row_from(self, obj: dict) -> None:
        """Append one value to every column, looked up by column name."""
        for f in self.fields:
            v = obj.get(f.name)
            if f.parse is None:
                f.parse = make_field_parser(v, f)
            f.values.add(f.parse(v))
        self.length += 1

    def get_fields(self, type: FieldType | None = None) -> list[Field]:
        """Snapshot of all fields, or of the fields of one type (column order kept)."""
        if not type:
            return list(self.fields)
        return list(self._field_by_type.get(to_field_type(type), []))

    def has_field_of_type(self, type: FieldType) -> bool:
        return len(self._field_by_type.get(to_field_type(type), [])) > 0

    def get_first_field_of_type(self, type: FieldType) -> Field | None:
        fields = self._field_by_type.get(to_field_type(type))
        if fields:
            return fields[0]
        return None

    def has_field_named(self, name: str) -> bool:
        return name in self._field_by_name

    def get_field_by_name(self, name: str) -> Field | None:
        """Returns the first field with the given name."""
        return self._field_by_name.get(name)

    def to_json(self) -> dict:
        return to_data_frame_dto(self)


def data_frames_from_dtos(sources: Iterable[dict]) -> list[DataFrame]:
    """Build one DataFrame per DTO."""
    return [DataFrame(s) for s in sources]
