"""
Single-value display: value -> (text, numeric, color).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from numbers import Number
from typing import Any, Callable, Optional, TYPE_CHECKING

import config
from display.value_formats import get_decimals_for_value, get_value_format
from display.value_mappings import get_mapped_value
from frames.types import FieldType

if TYPE_CHECKING:
    from display.field_display import FieldConfig


@dataclass
class Threshold:
    value: float
    color: str

    @classmethod
    def from_dict(cls, data: dict) -> "Threshold":
        return cls(value=data.get("value"), color=data.get("color", ""))

    def to_dict(self) -> dict:
        return {"value": self.value, "color": self.color}


@dataclass
class DisplayValue:
    """Formatted value ready to render.

    Attributes:
        text: Display text (already formatted/mapped).
        numeric: Numeric interpretation of the value (``nan`` if none).
        color: Threshold color, if thresholds are configured.
        title: Resolved title, set by the field display pipeline.
    """

    text: str
    numeric: float
    color: Optional[str] = None
    title: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"text": self.text, "numeric": self.numeric}
        if self.color is not None:
            d["color"] = self.color
        if self.title is not None:
            d["title"] = self.title
        return d


DisplayProcessor = Callable[[Any], DisplayValue]


# Numeric text accepted by JS Number(): decimal/exponent, Infinity, 0x/0o/0b
_DECIMAL = re.compile(r"[+-]?(Infinity|(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")
_RADIX = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def to_number(value: Any) -> float:
    """Loose numeric coercion: '' -> 0, None -> nan, unparseable -> nan.

    Text follows the JS ``Number()`` rules, so Python-only spellings such as
    ``"inf"``, ``"nan"`` or ``"1_000"`` are not numbers.
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, Number):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL.fullmatch(text):
            return float(text)
        if _RADIX.fullmatch(text):
            return float(int(text, 0))
        return math.nan
    return math.nan


def to_display_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_color_from_threshold(value: float, thresholds: list[Threshold]) -> str:
    """Color of the highest threshold whose value is <= ``value``.

    Falls back to the lowest threshold, or to ``display.fallback_color``
    when there are no thresholds at all.
    """
    if not thresholds:
        return config.FALLBACK_COLOR

    ordered = sorted(thresholds, key=lambda t: -math.inf if t.value is None else t.value)
    for t in reversed(ordered):
        base = -math.inf if t.value is None else t.value
        if value >= base:
            return t.color
    return ordered[0].color


def _to_string_processor(value: Any) -> DisplayValue:
    return DisplayValue(text=to_display_string(value), numeric=to_number(value))


def get_display_processor(
    field_config: Optional["FieldConfig"] = None,
    field_type: Optional[FieldType] = None,
    is_utc: bool = False,
) -> DisplayProcessor:
    """Build the value -> DisplayValue function for one field.

    Value mappings apply first (last match wins) and disable unit
    formatting. Booleans are never unit formatted. Time fields without a
    unit use ``dateTimeAsIso``.

    Args:
        field_config: Resolved field config; None gives a plain
            string processor.
        field_type: Type of the source field.
        is_utc: Passed through to date formatters.

    Returns:
        A processor function.
    """
    if field_config is None:
        return _to_string_processor

    unit = field_config.unit
    if not unit and field_type == FieldType.time:
        unit = "dateTimeAsIso"
    format_fn = get_value_format(unit or "none") or get_value_format("none")

    def _process(value: Any) -> DisplayValue:
        mappings = field_config.mappings
        thresholds = field_config.thresholds

        text = to_display_string(value)
        numeric = to_number(value)
        color = None
        should_format = True

        if mappings:
            mapped = get_mapped_value(mappings, value)
            if mapped is not None:
                text = mapped.text
                v = to_number(text)
                if not math.isnan(v):
                    numeric = v
                should_format = False

        if not math.isnan(numeric):
            if should_format and not isinstance(value, bool):
                counts = get_decimals_for_value(value if isinstance(value, Number) else numeric,
                                                field_config.decimals)
                text = format_fn(numeric, counts.decimals, counts.scaled_decimals, is_utc)
            if thresholds:
                color = get_color_from_threshold(numeric, thresholds)

        if not text:
            text = field_config.no_value or ""

        return DisplayValue(text=text, numeric=numeric, color=color)

    return _process
