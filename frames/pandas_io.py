"""
pandas interop for frames.

A DatetimeIndex becomes a leading ``time`` field holding epoch milliseconds;
column dtypes decide the field types (datetime → time, bool → boolean,
numeric → number, anything else is guessed from the first non-null value).
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from frames.dataframe import DataFrame
from frames.process import guess_field_type_from_value
from frames.types import FieldType

_EPOCH = pd.Timestamp("1970-01-01")


def _datetime_to_ms(series: pd.Series) -> list:
    """Epoch milliseconds for a datetime-like series; NaT becomes None."""
    values = pd.to_datetime(series)
    if getattr(values.dt, "tz", None) is not None:
        values = values.dt.tz_convert("UTC").dt.tz_localize(None)
    return [None if pd.isna(t) else int((t - _EPOCH) // pd.Timedelta(milliseconds=1)) for t in values]


def _field_type_for(series: pd.Series) -> FieldType:
    if pd.api.types.is_datetime64_any_dtype(series):
        return FieldType.time
    if pd.api.types.is_bool_dtype(series):
        return FieldType.boolean
    if pd.api.types.is_numeric_dtype(series):
        return FieldType.number
    for v in series:
        if v is not None and not (isinstance(v, float) and np.isnan(v)):
            return guess_field_type_from_value(v)
    return FieldType.other


def _plain(values) -> list:
    """Python scalars with NaN/NaT replaced by None."""
    out = []
    for v in values:
        if v is None or (not isinstance(v, str) and pd.isna(v)):
            out.append(None)
        elif isinstance(v, np.generic):
            out.append(v.item())
        else:
            out.append(v)
    return out


def data_frame_from_pandas(df: pd.DataFrame, name: str | None = None, ref_id: str | None = None) -> DataFrame:
    """Build a DataFrame from a pandas DataFrame.

    Args:
        df: Source table. A DatetimeIndex is kept as the first field.
        name: Frame name.
        ref_id: Query reference id.

    Returns:
        A new DataFrame with copies of the values.
    """
    fields = []
    if isinstance(df.index, pd.DatetimeIndex):
        fields.append({
            "name": df.index.name or "time",
            "type": FieldType.time,
            "values": _datetime_to_ms(df.index.to_series()),
        })

    for column in df.columns:
        series = df[column]
        field_type = _field_type_for(series)
        if field_type == FieldType.time and pd.api.types.is_datetime64_any_dtype(series):
            values = _datetime_to_ms(series)
        else:
            values = _plain(series.tolist())
        fields.append({"name": str(column), "type": field_type, "values": values})

    return DataFrame({"name": name, "ref_id": ref_id, "fields": fields})


def data_frame_to_pandas(frame) -> pd.DataFrame:
    """Convert any frame to a pandas DataFrame.

    Time fields holding epoch milliseconds become datetime64 columns; the
    first time field is used as the index.
    """
    columns: dict[str, pd.Series] = {}
    index = None
    for field in frame.fields:
        values = field.values.to_array()
        if field.type == FieldType.time:
            numeric = all(v is None or isinstance(v, (int, float)) for v in values)
            series = pd.to_datetime(pd.Series(values, dtype="float64" if numeric else None),
                                    unit="ms" if numeric else None)
            if index is None:
                index = pd.DatetimeIndex(series, name=field.name)
                continue
        elif field.type == FieldType.number:
            series = pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce")
        else:
            series = pd.Series(values, dtype="object")
        columns[field.name] = series.reset_index(drop=True)

    result = pd.DataFrame(columns)
    if index is not None:
        if not columns:
            result = pd.DataFrame(index=index)
        else:
            result.index = index
    return result
