"""
Unit categories for the value format registry.

Each category is a display name plus its formatters. Time-duration and
date formatters live here too since nothing else uses them.
"""

from __future__ import annotations

import math
from datetime import datetime

import numpy as np
import pandas as pd

from display.value_formats import (
    ValueFormat,
    ValueFormatCategory,
    binary_si_prefix,
    currency,
    decimal_si_prefix,
    locale,
    scaled_units,
    simple_count_unit,
    to_fixed,
    to_fixed_scaled,
    to_fixed_unit,
)


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

def to_percent(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    return to_fixed(size, decimals) + "%"


def to_percent_unit(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    return to_fixed(100 * size, decimals) + "%"


def _hex_digits(value: float) -> str:
    """Base-16 text of a non-negative number, fraction included."""
    integer = int(value)
    text = format(integer, "X")
    fraction = value - integer
    if fraction:
        digits = []
        while fraction and len(digits) < 20:
            fraction *= 16
            digit = int(fraction)
            digits.append(format(digit, "X"))
            fraction -= digit
        text += "." + "".join(digits)
    return text


def to_hex(value, decimals=None, scaled_decimals=None, is_utc=False):
    if value is None:
        return ""
    rounded = float(to_fixed(value, decimals))
    if rounded < 0:
        return "-" + _hex_digits(-rounded)
    return _hex_digits(rounded)


def to_hex0x(value, decimals=None, scaled_decimals=None, is_utc=False):
    if value is None:
        return ""
    hexvalue = to_hex(value, decimals)
    if hexvalue.startswith("-"):
        return "-0x" + hexvalue[1:]
    return "0x" + hexvalue


def sci(value, decimals=None, scaled_decimals=None, is_utc=False):
    if value is None:
        return ""
    if decimals is None:
        return np.format_float_scientific(value, trim="-", exp_digits=1)
    return np.format_float_scientific(value, precision=int(decimals), unique=False, exp_digits=1)


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

def _sub(a, b):
    if a is None or b is None:
        return None
    return a - b


def to_nano_seconds(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 1000:
        return to_fixed(size, decimals) + " ns"
    elif abs(size) < 1000000:
        return to_fixed_scaled(size / 1000, decimals, scaled_decimals, 3, " µs")
    elif abs(size) < 1000000000:
        return to_fixed_scaled(size / 1000000, decimals, scaled_decimals, 6, " ms")
    elif abs(size) < 60000000000:
        return to_fixed_scaled(size / 1000000000, decimals, scaled_decimals, 9, " s")
    return to_fixed_scaled(size / 60000000000, decimals, scaled_decimals, 12, " min")


def to_micro_seconds(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 1000:
        return to_fixed(size, decimals) + " µs"
    elif abs(size) < 1000000:
        return to_fixed_scaled(size / 1000, decimals, scaled_decimals, 3, " ms")
    return to_fixed_scaled(size / 1000000, decimals, scaled_decimals, 6, " s")


def to_milli_seconds(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 1000:
        return to_fixed(size, decimals) + " ms"
    elif abs(size) < 60000:
        return to_fixed_scaled(size / 1000, decimals, scaled_decimals, 3, " s")
    elif abs(size) < 3600000:
        return to_fixed_scaled(size / 60000, decimals, scaled_decimals, 5, " min")
    elif abs(size) < 86400000:
        return to_fixed_scaled(size / 3600000, decimals, scaled_decimals, 7, " hour")
    elif abs(size) < 31536000000:
        return to_fixed_scaled(size / 86400000, decimals, scaled_decimals, 8, " day")
    return to_fixed_scaled(size / 31536000000, decimals, scaled_decimals, 10, " year")


def to_seconds(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    # Below one second the value is re-expressed in a smaller unit
    if size != 0 and abs(size) < 0.000001:
        return to_fixed_scaled(size * 1e9, decimals, _sub(scaled_decimals, decimals), -9, " ns")
    if size != 0 and abs(size) < 0.001:
        return to_fixed_scaled(size * 1e6, decimals, _sub(scaled_decimals, decimals), -6, " µs")
    if size != 0 and abs(size) < 1:
        return to_fixed_scaled(size * 1e3, decimals, _sub(scaled_decimals, decimals), -3, " ms")

    if abs(size) < 60:
        return to_fixed(size, decimals) + " s"
    elif abs(size) < 3600:
        return to_fixed_scaled(size / 60, decimals, scaled_decimals, 1, " min")
    elif abs(size) < 86400:
        return to_fixed_scaled(size / 3600, decimals, scaled_decimals, 4, " hour")
    elif abs(size) < 604800:
        return to_fixed_scaled(size / 86400, decimals, scaled_decimals, 5, " day")
    elif abs(size) < 31536000:
        return to_fixed_scaled(size / 604800, decimals, scaled_decimals, 6, " week")
    return to_fixed_scaled(size / 3.15569e7, decimals, scaled_decimals, 7, " year")


def to_minutes(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 60:
        return to_fixed(size, decimals) + " min"
    elif abs(size) < 1440:
        return to_fixed_scaled(size / 60, decimals, scaled_decimals, 2, " hour")
    elif abs(size) < 10080:
        return to_fixed_scaled(size / 1440, decimals, scaled_decimals, 3, " day")
    elif abs(size) < 604800:
        return to_fixed_scaled(size / 10080, decimals, scaled_decimals, 4, " week")
    return to_fixed_scaled(size / 5.25948e5, decimals, scaled_decimals, 5, " year")


def to_hours(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 24:
        return to_fixed(size, decimals) + " hour"
    elif abs(size) < 168:
        return to_fixed_scaled(size / 24, decimals, scaled_decimals, 2, " day")
    elif abs(size) < 8760:
        return to_fixed_scaled(size / 168, decimals, scaled_decimals, 3, " week")
    return to_fixed_scaled(size / 8760, decimals, scaled_decimals, 4, " year")


def to_days(size, decimals=None, scaled_decimals=None, is_utc=False):
    if size is None:
        return ""
    if abs(size) < 7:
        return to_fixed(size, decimals) + " day"
    elif abs(size) < 365:
        return to_fixed_scaled(size / 7, decimals, scaled_decimals, 2, " week")
    return to_fixed_scaled(size / 365, decimals, scaled_decimals, 3, " year")


# ---------------------------------------------------------------------------
# Dates (epoch milliseconds)
# ---------------------------------------------------------------------------

def _to_timestamp(value, is_utc: bool) -> pd.Timestamp:
    ts = pd.Timestamp(value, unit="ms", tz="UTC")
    if not is_utc:
        ts = ts.tz_convert(datetime.now().astimezone().tzinfo)
    return ts


def _is_today(ts: pd.Timestamp) -> bool:
    now = pd.Timestamp.now(tz=ts.tz)
    return ts.date() == now.date()


def date_time_as_iso(value, decimals=None, scaled_decimals=None, is_utc=False):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    ts = _to_timestamp(value, is_utc)
    if _is_today(ts):
        return ts.strftime("%H:%M:%S")
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def date_time_as_us(value, decimals=None, scaled_decimals=None, is_utc=False):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    ts = _to_timestamp(value, is_utc)
    hour = ts.hour % 12 or 12
    clock = f"{hour}:{ts.minute:02d}:{ts.second:02d} {'am' if ts.hour < 12 else 'pm'}"
    if _is_today(ts):
        return clock
    return f"{ts.month:02d}/{ts.day:02d}/{ts.year} {clock}"


# ---------------------------------------------------------------------------
# Category table
# ---------------------------------------------------------------------------

def get_categories() -> list[ValueFormatCategory]:
    """The fixed set of unit categories, in menu order."""
    return [
        ValueFormatCategory("Misc", [
            ValueFormat("none", "none", to_fixed_unit("")),
            ValueFormat("short", "short", scaled_units(
                1000, ["", " K", " Mil", " Bil", " Tri", " Quadr", " Quint", " Sext", " Sept"])),
            ValueFormat("percent (0-100)", "percent", to_percent),
            ValueFormat("percent (0.0-1.0)", "percentunit", to_percent_unit),
            ValueFormat("Humidity (%H)", "humidity", to_fixed_unit("%H")),
            ValueFormat("decibel", "dB", to_fixed_unit("dB")),
            ValueFormat("hexadecimal (0x)", "hex0x", to_hex0x),
            ValueFormat("hexadecimal", "hex", to_hex),
            ValueFormat("scientific notation", "sci", sci),
            ValueFormat("locale format", "locale", locale),
        ]),
        ValueFormatCategory("Currency", [
            ValueFormat("Dollars ($)", "currencyUSD", currency("$")),
            ValueFormat("Pounds (£)", "currencyGBP", currency("£")),
            ValueFormat("Euro (€)", "currencyEUR", currency("€")),
            ValueFormat("Yen (¥)", "currencyJPY", currency("¥")),
        ]),
        ValueFormatCategory("Data (IEC)", [
            ValueFormat("bits", "bits", binary_si_prefix("b")),
            ValueFormat("bytes", "bytes", binary_si_prefix("B")),
            ValueFormat("kibibytes", "kbytes", binary_si_prefix("B", 1)),
            ValueFormat("mebibytes", "mbytes", binary_si_prefix("B", 2)),
            ValueFormat("gibibytes", "gbytes", binary_si_prefix("B", 3)),
        ]),
        ValueFormatCategory("Data (Metric)", [
            ValueFormat("bits", "decbits", decimal_si_prefix("b")),
            ValueFormat("bytes", "decbytes", decimal_si_prefix("B")),
            ValueFormat("kilobytes", "deckbytes", decimal_si_prefix("B", 1)),
            ValueFormat("megabytes", "decmbytes", decimal_si_prefix("B", 2)),
            ValueFormat("gigabytes", "decgbytes", decimal_si_prefix("B", 3)),
        ]),
        ValueFormatCategory("Data rate", [
            ValueFormat("packets/sec", "pps", decimal_si_prefix("pps")),
            ValueFormat("bits/sec", "bps", decimal_si_prefix("bps")),
            ValueFormat("bytes/sec", "Bps", decimal_si_prefix("B/s")),
            ValueFormat("kilobytes/sec", "KBs", decimal_si_prefix("Bs", 1)),
            ValueFormat("megabytes/sec", "MBs", decimal_si_prefix("Bs", 2)),
        ]),
        ValueFormatCategory("Date & time", [
            ValueFormat("YYYY-MM-DD HH:mm:ss", "dateTimeAsIso", date_time_as_iso),
            ValueFormat("MM/DD/YYYY h:mm:ss a", "dateTimeAsUS", date_time_as_us),
        ]),
        ValueFormatCategory("Energy", [
            ValueFormat("Watt (W)", "watt", decimal_si_prefix("W")),
            ValueFormat("Kilowatt (kW)", "kwatt", decimal_si_prefix("W", 1)),
            ValueFormat("Milliwatt (mW)", "mwatt", decimal_si_prefix("W", -1)),
            ValueFormat("Volt (V)", "volt", decimal_si_prefix("V")),
            ValueFormat("Ampere (A)", "amp", decimal_si_prefix("A")),
        ]),
        ValueFormatCategory("Length", [
            ValueFormat("millimeter (mm)", "lengthmm", decimal_si_prefix("m", -1)),
            ValueFormat("meter (m)", "lengthm", decimal_si_prefix("m")),
            ValueFormat("kilometer (km)", "lengthkm", decimal_si_prefix("m", 1)),
            ValueFormat("feet (ft)", "lengthft", to_fixed_unit("ft")),
            ValueFormat("mile (mi)", "lengthmi", to_fixed_unit("mi")),
        ]),
        ValueFormatCategory("Mass", [
            ValueFormat("milligram (mg)", "massmg", decimal_si_prefix("g", -1)),
            ValueFormat("gram (g)", "massg", decimal_si_prefix("g")),
            ValueFormat("kilogram (kg)", "masskg", decimal_si_prefix("g", 1)),
            ValueFormat("metric ton (t)", "masst", to_fixed_unit("t")),
        ]),
        ValueFormatCategory("Temperature", [
            ValueFormat("Celsius (°C)", "celsius", to_fixed_unit("°C")),
            ValueFormat("Fahrenheit (°F)", "fahrenheit", to_fixed_unit("°F")),
            ValueFormat("Kelvin (K)", "kelvin", to_fixed_unit("K")),
        ]),
        ValueFormatCategory("Throughput", [
            ValueFormat("ops/sec (ops)", "ops", simple_count_unit("ops")),
            ValueFormat("requests/sec (rps)", "reqps", simple_count_unit("req/s")),
            ValueFormat("reads/sec (rps)", "rps", simple_count_unit("rd/s")),
            ValueFormat("writes/sec (wps)", "wps", simple_count_unit("wr/s")),
            ValueFormat("I/O ops/sec (iops)", "iops", simple_count_unit("io/s")),
            ValueFormat("ops/min (opm)", "opm", simple_count_unit("ops/min")),
        ]),
        ValueFormatCategory("Time", [
            ValueFormat("Hertz (1/s)", "hertz", decimal_si_prefix("Hz")),
            ValueFormat("nanoseconds (ns)", "ns", to_nano_seconds),
            ValueFormat("microseconds (µs)", "µs", to_micro_seconds),
            ValueFormat("milliseconds (ms)", "ms", to_milli_seconds),
            ValueFormat("seconds (s)", "s", to_seconds),
            ValueFormat("minutes (m)", "m", to_minutes),
            ValueFormat("hours (h)", "h", to_hours),
            ValueFormat("days (d)", "d", to_days),
        ]),
    ]
