"""
Numeric value formatting.

A formatter is a pure function ``(value, decimals=None, scaled_decimals=None,
is_utc=False) -> str``. The primitives here build the unit formatters listed
in ``display.categories``; the registry indexing them by id is built once,
on first use, and is read-only afterwards.

Usage:
    fmt = get_value_format("bytes")
    fmt(2048)          # '2 KiB'
    to_fixed(1.2345, 3)  # '1.235'
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from numbers import Number
from typing import Callable, Optional

import numpy as np

DecimalCount = Optional[int]
ValueFormatter = Callable[..., str]


@dataclass
class ValueFormat:
    name: str
    id: str
    fn: ValueFormatter


@dataclass
class ValueFormatCategory:
    name: str
    formats: list[ValueFormat]


@dataclass
class DecimalCounts:
    decimals: DecimalCount
    scaled_decimals: DecimalCount


# ---------------------------------------------------------------------------
# Number → text
# ---------------------------------------------------------------------------

def _round_half_up(x: float) -> float:
    return math.floor(x + 0.5)


def number_to_string(x: float) -> str:
    """Shortest round-trip text for a number, using JavaScript's notation rules.

    Positional between 1e-6 and 1e21, otherwise ``1.5e-7`` / ``1e+21``.
    """
    if isinstance(x, bool):
        return "true" if x else "false"
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x == 0:
        return "0"
    ax = abs(x)
    if 1e-6 <= ax < 1e21:
        if float(x).is_integer():
            return str(int(x))
        return np.format_float_positional(x, trim="-")
    return np.format_float_scientific(x, trim="-", exp_digits=1)


def _is_number(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def get_decimals_for_value(value: float, decimal_override: DecimalCount = None) -> DecimalCounts:
    """Pick a "nice" decimal count for a value from its magnitude.

    The step table per decade is 1, 2, 2.5, 5, 10; 2.5 needs one extra
    decimal. Integers never get decimals. ``scaled_decimals`` is the count to
    use once the value has been divided down by a unit scaler.
    """
    if _is_number(decimal_override):
        return DecimalCounts(decimals=int(decimal_override), scaled_decimals=None)

    if value is None or not _is_number(value) or not math.isfinite(value) or value == 0:
        return DecimalCounts(decimals=0, scaled_decimals=0)

    delta = abs(value) / 2
    dec = -math.floor(math.log10(delta))

    magn = 10 ** -dec
    norm = delta / magn  # norm is between 1.0 and 10.0

    if norm < 1.5:
        size = 1.0
    elif norm < 3:
        size = 2.0
        if norm > 2.25:
            size = 2.5
            dec += 1
    elif norm < 7.5:
        size = 5.0
    else:
        size = 10.0

    size *= magn

    if math.floor(value) == value:
        dec = 0

    decimals = max(0, dec)
    scaled_decimals = decimals - math.floor(math.log10(size)) + 2
    return DecimalCounts(decimals=decimals, scaled_decimals=scaled_decimals)


def to_fixed(value: float, decimals: DecimalCount = None) -> str:
    """Round to ``decimals`` fractional digits and pad to exactly that many.

    Without ``decimals`` the count comes from ``get_decimals_for_value``.
    Exponential results and exact zero are returned as is.
    """
    if value is None:
        return ""
    if not math.isfinite(value):
        return number_to_string(value)

    if decimals is None:
        decimals = get_decimals_for_value(value).decimals

    factor = 10 ** max(0, decimals) if decimals else 1
    formatted = number_to_string(_round_half_up(value * factor) / factor)

    if "e" in formatted or value == 0:
        return formatted

    if decimals is not None:
        decimal_pos = formatted.find(".")
        precision = 0 if decimal_pos == -1 else len(formatted) - decimal_pos - 1
        if precision < decimals:
            return (formatted if precision else formatted + ".") + "0" * (decimals - precision)

    return formatted


def to_fixed_scaled(
    value: float,
    decimals: DecimalCount = None,
    scaled_decimals: DecimalCount = None,
    additional_decimals: DecimalCount = None,
    ext: str = "",
) -> str:
    if not _is_number(decimals):
        info = get_decimals_for_value(value)
        decimals = info.decimals
        scaled_decimals = info.scaled_decimals

    if scaled_decimals:
        if additional_decimals:
            return to_fixed(value, max(0, scaled_decimals + additional_decimals)) + ext
        return to_fixed(value, max(0, scaled_decimals)) + ext

    return to_fixed(value, decimals) + ext


def to_fixed_unit(unit: str) -> ValueFormatter:
    def fmt(size, decimals=None, scaled_decimals=None, is_utc=False):
        if size is None:
            return ""
        text = to_fixed(size, decimals)
        return f"{text} {unit}" if unit else text
    return fmt


def scaled_units(factor: float, ext_array: list[str]) -> ValueFormatter:
    """Formatter that divides by ``factor`` until the value drops below it.

    The suffix is picked by the number of divisions; running past the end
    of ``ext_array`` gives ``'NA'``. With ``scaled_decimals`` supplied, each
    division adds three decimals.
    """
    def fmt(size, decimals=None, scaled_decimals=None, is_utc=False):
        if size is None:
            return ""

        steps = 0
        limit = len(ext_array)

        while abs(size) >= factor:
            steps += 1
            size /= factor

            if steps >= limit:
                return "NA"

        if steps > 0 and scaled_decimals is not None:
            decimals = scaled_decimals + 3 * steps

        return to_fixed(size, decimals) + ext_array[steps]
    return fmt


def decimal_si_prefix(unit: str, offset: int = 0) -> ValueFormatter:
    prefixes = ["f", "p", "n", "µ", "m", "", "k", "M", "G", "T", "P", "E", "Z", "Y"]
    prefixes = prefixes[5 + offset:]
    return scaled_units(1000, [f" {p}{unit}" for p in prefixes])


def binary_si_prefix(unit: str, offset: int = 0) -> ValueFormatter:
    prefixes = ["", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi", "Yi"][offset:]
    return scaled_units(1024, [f" {p}{unit}" for p in prefixes])


def simple_count_unit(symbol: str) -> ValueFormatter:
    scaler = scaled_units(1000, ["", "K", "M", "B", "T"])

    def fmt(size, decimals=None, scaled_decimals=None, is_utc=False):
        if size is None:
            return ""
        return f"{scaler(size, decimals, scaled_decimals)} {symbol}"
    return fmt


def currency(symbol: str) -> ValueFormatter:
    scaler = scaled_units(1000, ["", "K", "M", "B", "T"])

    def fmt(size, decimals=None, scaled_decimals=None, is_utc=False):
        if size is None:
            return ""
        return symbol + scaler(size, decimals, scaled_decimals)
    return fmt


def locale(value, decimals=None, scaled_decimals=None, is_utc=False) -> str:
    """Thousands separators, at most ``decimals`` (default 3) fraction digits."""
    if value is None:
        return ""
    digits = 3 if decimals is None else max(0, int(decimals))
    text = f"{value:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_categories: list[ValueFormatCategory] = []
_index: dict[str, ValueFormatter] = {}
_has_built_index = False
_build_lock = threading.Lock()


def _build_formats() -> None:
    global _categories, _has_built_index
    with _build_lock:
        if _has_built_index:
            return
        from display.categories import get_categories

        categories = get_categories()
        for cat in categories:
            for fmt in cat.formats:
                _index[fmt.id] = fmt.fn
        _categories = categories
        _has_built_index = True


def get_value_format(id: str) -> ValueFormatter | None:
    """Formatter for a unit id, or None if the id is unknown."""
    if not _has_built_index:
        _build_formats()
    return _index.get(id)


def get_value_formatter_index() -> dict[str, ValueFormatter]:
    if not _has_built_index:
        _build_formats()
    return _index


def get_value_formats() -> list[dict]:
    """Menu tree: ``[{text: category, submenu: [{text, value}]}]``."""
    if not _has_built_index:
        _build_formats()
    return [
        {
            "text": cat.name,
            "submenu": [{"text": f.name, "value": f.id} for f in cat.formats],
        }
        for cat in _categories
    ]
