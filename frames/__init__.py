"""
Columnar data frames.

Provides typed, named columns over pluggable vector storage: an
append-oriented DataFrame, the record-oriented MutableDataFrame and the
capacity-bounded CircularDataFrame for streaming ingestion.
"""

from .vector import Vector, ArrayVector, CircularVector
from .types import Field, FieldType
from .process import guess_field_type_from_value, guess_field_type_for_field, to_data_frame_dto
from .dataframe import DataFrame
from .mutable import MutableDataFrame, CircularDataFrame

__all__ = [
    "Vector",
    "ArrayVector",
    "CircularVector",
    "Field",
    "FieldType",
    "guess_field_type_from_value",
    "guess_field_type_for_field",
    "to_data_frame_dto",
    "DataFrame",
    "MutableDataFrame",
    "CircularDataFrame",
]
