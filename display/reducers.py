"""
Field reducers: aggregate functions over a field's value sequence.

Most reducers come out of ``do_standard_calcs``, which works on the values
as a float array (numpy, NaN for skipped cells); a few cheap
ones (first, last, ...) have their own function so a single-reducer request
does not pay for the full pass.

Null handling follows ``null_value_mode`` (the argument to ``reduce_field``,
else the field config):
    "null"         nulls and unparseable cells are skipped by the numeric stats (default)
    "connected"    nulls are ignored entirely
    "null as zero" nulls count as 0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Number
from typing import Any, Callable, Optional

import numpy as np

from display.registry import Registry
from frames.types import Field


class ReducerID:
    sum = "sum"
    max = "max"
    min = "min"
    logmin = "logmin"
    mean = "mean"
    last = "last"
    first = "first"
    count = "count"
    range = "range"
    diff = "diff"
    delta = "delta"
    step = "step"

    first_not_null = "firstNotNull"
    last_not_null = "lastNotNull"

    change_count = "changeCount"
    distinct_count = "distinctCount"

    all_is_zero = "allIsZero"
    all_is_null = "allIsNull"


class NullValueMode:
    null = "null"
    ignore = "connected"
    as_zero = "null as zero"


FieldCalcs = dict[str, Any]
FieldReducer = Callable[[Field, bool, bool], FieldCalcs]


@dataclass
class FieldReducerInfo:
    """One registered reducer.

    Attributes:
        id: Reducer id used in display options.
        name: Human-readable name.
        description: One-line description.
        alias_ids: Other ids resolving to this reducer.
        reduce: Dedicated function; None means "from the standard calcs".
        empty_input_result: Value reported for an empty field.
        standard: Listed among the standard calcs.
    """

    id: str
    name: str
    description: str
    alias_ids: list[str] = field(default_factory=list)
    reduce: Optional[FieldReducer] = None
    empty_input_result: Any = None
    standard: bool = True


def _as_number(value: Any) -> Any:
    """Numbers pass through, numeric strings are converted, the rest is None."""
    if value is None or isinstance(value, bool):
        return None if value is None else float(value)
    if isinstance(value, Number):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _null_policy(value: Any, ignore_nulls: bool, null_as_zero: bool) -> tuple[Any, bool]:
    """Apply the null mode. Returns (value, skip)."""
    if value is None:
        if ignore_nulls:
            return None, True
        if null_as_zero:
            return 0, False
    return value, False


def _numeric_values(field: Field, ignore_nulls: bool, null_as_zero: bool) -> np.ndarray:
    """Field values as floats, one per row; skipped or non-numeric cells are NaN."""
    out = []
    for raw in field.values.to_numpy(dtype=object):
        current, skip = _null_policy(raw, ignore_nulls, null_as_zero)
        current = None if skip else _as_number(current)
        out.append(np.nan if current is None else current)
    return np.asarray(out, dtype=float)


def _delta(values: np.ndarray) -> float:
    """Cumulative increase, treating a drop as a counter reset."""
    delta = 0.0
    previous = None
    previous_delta_up = True
    last_index = len(values) - 1
    for i, current in enumerate(values):
        if np.isnan(current):
            continue
        if previous is not None:
            if previous > current:
                # counter reset
                previous_delta_up = False
                if i == last_index:
                    # reset on last
                    delta += current
            else:
                if previous_delta_up:
                    delta += current - previous  # normal increment
                else:
                    delta += current  # account for counter reset
                previous_delta_up = True
        previous = current
    return float(delta)


# ---------------------------------------------------------------------------
# Reducer functions
# ---------------------------------------------------------------------------

def do_standard_calcs(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    """Compute every standard stat over the field at once."""
    data = field.values
    calcs: FieldCalcs = {
        "sum": 0,
        "max": None,
        "min": None,
        "logmin": None,
        "mean": None,
        "last": data.get(data.length - 1) if data.length else None,
        "first": data.get(0) if data.length else None,
        "lastNotNull": None,
        "firstNotNull": None,
        "count": data.length,
        "nonNullCount": 0,
        "allIsNull": True,
        "allIsZero": False,
        "range": None,
        "diff": None,
        "delta": 0,
        "step": None,
    }

    values = _numeric_values(field, ignore_nulls, null_as_zero)
    valid = values[~np.isnan(values)]

    if valid.size:
        calcs["sum"] = float(np.nansum(values))
        calcs["max"] = float(np.nanmax(values))
        calcs["min"] = float(np.nanmin(values))
        calcs["mean"] = float(np.nanmean(values))
        calcs["range"] = calcs["max"] - calcs["min"]
        calcs["firstNotNull"] = float(valid[0])
        calcs["lastNotNull"] = float(valid[-1])
        calcs["nonNullCount"] = int(valid.size)
        calcs["allIsNull"] = False
        calcs["allIsZero"] = bool(np.all(valid == 0))

        positive = valid[valid > 0]
        if positive.size:
            calcs["logmin"] = float(positive.min())
        if valid.size > 1:
            calcs["step"] = float(np.diff(valid).min())
        calcs["delta"] = _delta(values)

    first = _as_number(calcs["first"])
    last = _as_number(calcs["last"])
    if first is not None and last is not None:
        calcs["diff"] = last - first

    return calcs


def calculate_first(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    return {"first": field.values.get(0)}


def calculate_last(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    data = field.values
    return {"last": data.get(data.length - 1)}


def calculate_first_not_null(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    for v in field.values:
        if v is not None:
            return {"firstNotNull": v}
    return {"firstNotNull": None}


def calculate_last_not_null(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    data = field.values
    for i in range(data.length - 1, -1, -1):
        v = data.get(i)
        if v is not None:
            return {"lastNotNull": v}
    return {"lastNotNull": None}


def calculate_change_count(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    first = True
    last = None
    count = 0
    for raw in field.values:
        current, skip = _null_policy(raw, ignore_nulls, null_as_zero)
        if skip:
            continue
        if not first and last != current:
            count += 1
        first = False
        last = current
    return {"changeCount": count}


def calculate_distinct_count(field: Field, ignore_nulls: bool, null_as_zero: bool) -> FieldCalcs:
    distinct = set()
    for raw in field.values:
        current, skip = _null_policy(raw, ignore_nulls, null_as_zero)
        if skip:
            continue
        try:
            distinct.add(current)
        except TypeError:
            distinct.add(repr(current))
    return {"distinctCount": len(distinct)}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def _reducer_list() -> list[FieldReducerInfo]:
    return [
        FieldReducerInfo(
            id=ReducerID.last_not_null, name="Last (not null)",
            description="Last non-null value", reduce=calculate_last_not_null),
        FieldReducerInfo(
            id=ReducerID.last, name="Last", description="Last Value",
            alias_ids=["current"], reduce=calculate_last),
        FieldReducerInfo(
            id=ReducerID.first, name="First", description="First Value",
            reduce=calculate_first),
        FieldReducerInfo(
            id=ReducerID.first_not_null, name="First (not null)",
            description="First non-null value", reduce=calculate_first_not_null),
        FieldReducerInfo(
            id=ReducerID.min, name="Min", description="Minimum Value"),
        FieldReducerInfo(
            id=ReducerID.max, name="Max", description="Maximum Value"),
        FieldReducerInfo(
            id=ReducerID.mean, name="Mean", description="Average Value",
            alias_ids=["avg"]),
        FieldReducerInfo(
            id=ReducerID.sum, name="Total", description="The sum of all values",
            alias_ids=["total"], empty_input_result=0),
        FieldReducerInfo(
            id=ReducerID.count, name="Count",
            description="Number of values in response", empty_input_result=0),
        FieldReducerInfo(
            id=ReducerID.range, name="Range",
            description="Difference between minimum and maximum values"),
        FieldReducerInfo(
            id=ReducerID.delta, name="Delta",
            description="Cumulative change in value", empty_input_result=0),
        FieldReducerInfo(
            id=ReducerID.step, name="Step",
            description="Minimum interval between values"),
        FieldReducerInfo(
            id=ReducerID.diff, name="Difference",
            description="Difference between first and last values"),
        FieldReducerInfo(
            id=ReducerID.logmin, name="Min (above zero)",
            description="Used for log min scale", standard=False),
        FieldReducerInfo(
            id=ReducerID.change_count, name="Change Count",
            description="Number of times the value changes", standard=False,
            reduce=calculate_change_count, empty_input_result=0),
        FieldReducerInfo(
            id=ReducerID.distinct_count, name="Distinct Count",
            description="Number of distinct values", standard=False,
            reduce=calculate_distinct_count, empty_input_result=0),
        FieldReducerInfo(
            id=ReducerID.all_is_zero, name="All Zeros",
            description="All values are zero", standard=False,
            empty_input_result=False),
        FieldReducerInfo(
            id=ReducerID.all_is_null, name="All Nulls",
            description="All values are null", standard=False,
            empty_input_result=True),
    ]


field_reducers: Registry[FieldReducerInfo] = Registry(_reducer_list)


def get_field_reducers(ids: list[str] | None = None) -> list[FieldReducerInfo]:
    """Reducer infos for ``ids`` (aliases allowed, unknown ids skipped)."""
    return field_reducers.list(ids)


def reduce_field(
    field: Field,
    reducers: list[str],
    null_value_mode: Optional[str] = None,
) -> FieldCalcs:
    """Apply reducers to a field.

    Args:
        field: Field to reduce.
        reducers: Reducer ids (aliases allowed).
        null_value_mode: Resolved null mode; falls back to the field's
            ``null_value_mode`` (or ``nullValueMode``) config.

    Returns:
        Dict keyed by both the canonical reducer id and the requested id.
    """
    if field is None or not reducers:
        return {}

    queue = field_reducers.list(reducers)
    data = field.values

    if data.length < 1:
        calcs: FieldCalcs = {}
        for reducer in queue:
            calcs[reducer.id] = reducer.empty_input_result
        return _with_requested_ids(calcs, reducers)

    field_config = field.config or {}
    mode = null_value_mode or field_config.get("null_value_mode") or field_config.get("nullValueMode")
    ignore_nulls = mode == NullValueMode.ignore
    null_as_zero = mode == NullValueMode.as_zero

    if len(queue) == 1 and queue[0].reduce:
        values = queue[0].reduce(field, ignore_nulls, null_as_zero)
        return _with_requested_ids(values, reducers)

    values = do_standard_calcs(field, ignore_nulls, null_as_zero)
    for reducer in queue:
        if reducer.id not in values and reducer.reduce:
            values.update(reducer.reduce(field, ignore_nulls, null_as_zero))
    return _with_requested_ids(values, reducers)


def _with_requested_ids(calcs: FieldCalcs, requested: list[str]) -> FieldCalcs:
    for rid in requested:
        if rid not in calcs:
            info = field_reducers.get_if_exists(rid)
            if info is not None and info.id in calcs:
                calcs[rid] = calcs[info.id]
    return calcs
