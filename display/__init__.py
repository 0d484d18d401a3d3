"""
Display layer: value formatting, reducers and the field display pipeline.
"""

from .value_formats import get_value_format, get_value_formats, get_decimals_for_value, to_fixed
from .reducers import ReducerID, get_field_reducers, reduce_field
from .display_value import DisplayValue, Threshold, get_display_processor, get_color_from_threshold
from .value_mappings import MappingType, ValueMapping
from .links import DataLink, LinkModel, LinkOptions, LinkSrv
from .field_display import (
    FieldConfig,
    FieldDisplay,
    FieldDisplayOptions,
    FieldOverride,
    get_field_display_values,
    get_field_properties,
)

__all__ = [
    "get_value_format",
    "get_value_formats",
    "get_decimals_for_value",
    "to_fixed",
    "ReducerID",
    "get_field_reducers",
    "reduce_field",
    "DisplayValue",
    "Threshold",
    "get_display_processor",
    "get_color_from_threshold",
    "MappingType",
    "ValueMapping",
    "DataLink",
    "LinkModel",
    "LinkOptions",
    "LinkSrv",
    "FieldConfig",
    "FieldDisplay",
    "FieldDisplayOptions",
    "FieldOverride",
    "get_field_display_values",
    "get_field_properties",
]
