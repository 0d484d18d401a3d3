"""
Record-oriented frames.

MutableDataFrame reads and writes whole rows as dicts keyed by field name.
The storage for each column comes from a ``creator`` callable, so the same
class backs both unbounded frames (ArrayVector) and bounded streaming
frames (CircularDataFrame, built on CircularVector).
"""

from __future__ import annotations

from typing import Any, Callable, Iterator

import config
from frames.process import guess_field_type_from_value, read_dto, to_data_frame_dto
from frames.types import Field, FieldType, to_field_type
from frames.vector import ArrayVector, CircularVector, Vector

VectorCreator = Callable[[list | None], Vector]


def _array_creator(buffer: list | None = None) -> Vector:
    return ArrayVector(buffer)


class MutableDataFrame:
    """Frame whose rows can be added, overwritten and read back as dicts.

    Attributes:
        fields: Columns in insertion order.
        values: Column vectors keyed by field name.
    """

    def __init__(self, source: dict | Any | None = None, creator: VectorCreator | None = None):
        self.name: str | None = None
        self.labels: dict | None = None
        self.ref_id: str | None = None
        self.meta: dict | None = None
        self.fields: list[Field] = []
        self.values: dict[str, Vector] = {}
        self._creator: VectorCreator = creator or _array_creator

        if source is None:
            return
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

        for key in ("name", "labels", "ref_id", "meta"):
            if meta[key]:
                setattr(self, key, meta[key])
        for f in fields:
            self.add_field(f)

    @property
    def length(self) -> int:
        """Length of the first column (0 when there are no columns)."""
        if not self.fields:
            return 0
        return self.fields[0].values.length

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[dict]:
        for i in range(self.length):
            yield self.get(i)

    def __repr__(self) -> str:
        names = ", ".join(f.name for f in self.fields)
        return f"{type(self).__name__}(name={self.name!r}, length={self.length}, fields=[{names}])"

    def add_field(self, f: Field | dict) -> Field | None:
        """Add a column unless one with the same name already exists.

        Every column is then padded (through its vector's own ``add``) up to
        the longest column.

        Returns:
            The new Field, or None when the name was already taken.
        """
        if isinstance(f, Field):
            name, type_, field_config, values = f.name, f.type, f.config, f.values
        else:
            name = f.get("name")
            type_ = f.get("type")
            field_config = f.get("config")
            values = f.get("values")

        buffer: list | None = None
        if values is not None:
            buffer = values.to_array() if isinstance(values, Vector) else list(values)

        type_ = to_field_type(type_)
        if type_ == FieldType.other and buffer:
            type_ = guess_field_type_from_value(buffer[0])

        if not name:
            if type_ == FieldType.time:
                name = f"Time {len(self.fields) + 1}" if "Time" in self.values else "Time"
            else:
                name = f"Field {len(self.fields) + 1}"
        if name in self.values:
            return None

        field = Field(
            name=name,
            type=type_,
            config=field_config or {},
            values=self._creator(buffer),
        )
        self.values[name] = field.values
        self.fields.append(field)

        length = max(fx.values.length for fx in self.fields)
        for fx in self.fields:
            while fx.values.length < length:
                before = fx.values.length
                fx.values.add(None)
                if fx.values.length == before:
                    break
        return field

    def _add_missing_fields_for(self, value: dict) -> None:
        for key, v in value.items():
            if key not in self.values:
                self.add_field({
                    "name": key,
                    "type": guess_field_type_from_value(v),
                })

    def add(self, value: dict, add_missing_fields: bool = False) -> None:
        """Append one row; fields missing from ``value`` get None."""
        if add_missing_fields:
            self._add_missing_fields_for(value)
        for field in self.fields:
            field.values.add(value.get(field.name))

    def set(self, index: int, value: dict | None, add_missing_fields: bool = False) -> None:
        """Overwrite row ``index``.

        Raises:
            ValueError: If index is beyond the current length.
        """
        if index > self.length:
            raise ValueError(
                f"Unable to set value beyond current length (index {index}, length {self.length})"
            )

        obj = value or {}
        if add_missing_fields:
            self._add_missing_fields_for(obj)

        for field in self.fields:
            field.values.set(index, obj.get(field.name))

    def get(self, index: int) -> dict:
        """Row ``index`` as a dict with one entry per field."""
        return {field.name: field.values.get(index) for field in self.fields}

    def to_array(self) -> list[dict]:
        return [self.get(i) for i in range(self.length)]

    def to_json(self) -> dict:
        return to_data_frame_dto(self)


class CircularDataFrame(MutableDataFrame):
    """MutableDataFrame that never holds more than ``capacity`` rows.

    Args:
        capacity: Maximum number of rows kept (config ``frames.circular_capacity``
            when omitted).
        append: ``"tail"`` drops the oldest row once full; ``"head"`` keeps
            the newest row first.
    """

    def __init__(self, capacity: int | None = None, append: str = "tail"):
        if capacity is None:
            capacity = config.CIRCULAR_CAPACITY
        if append not in ("head", "tail"):
            raise ValueError(f"append must be 'head' or 'tail', got '{append}'")
        self.capacity = capacity
        self.append_mode = append

        def creator(buffer: list | None = None) -> Vector:
            return CircularVector(capacity=capacity, append=append, buffer=buffer)

        super().__init__(None, creator)
