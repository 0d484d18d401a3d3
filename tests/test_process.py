"""
Tests for frames.process — type inference, float parsing, DTO helpers.

Run with: python -m pytest tests/test_process.py
"""

import math
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from frames.process import (
    guess_field_type_for_field,
    guess_field_type_from_value,
    parse_float,
    read_dto,
)
from frames.types import Field, FieldType, to_field_type
from frames.vector import ArrayVector


class TestGuessFromValue:
    @pytest.mark.parametrize("value,expected", [
        (1, FieldType.number),
        (2.5, FieldType.number),
        (np.float64(1.0), FieldType.number),
        ("1.5", FieldType.number),
        ("-3e5", FieldType.number),
        (" 42 ", FieldType.number),
        (True, FieldType.boolean),
        (np.bool_(False), FieldType.boolean),
        ("true", FieldType.boolean),
        ("FALSE", FieldType.boolean),
        ("2024-01-01", FieldType.time),
        ("2024-01-01T12:30:00Z", FieldType.time),
        (datetime(2024, 1, 1), FieldType.time),
        (pd.Timestamp("2024-01-01"), FieldType.time),
        ("hello", FieldType.string),
        ("2024-13-45", FieldType.string),
        (None, FieldType.other),
        ({"a": 1}, FieldType.other),
    ])
    def test_guess(self, value, expected):
        assert guess_field_type_from_value(value) == expected


class TestGuessForField:
    def test_name_wins(self):
        f = Field(name="Date", type=FieldType.other, values=ArrayVector(["x"]))
        assert guess_field_type_for_field(f) == FieldType.time

    def test_first_non_null_value(self):
        f = Field(name="v", type=FieldType.other, values=ArrayVector([None, "a", 1]))
        assert guess_field_type_for_field(f) == FieldType.string

    def test_no_values(self):
        f = Field(name="v", type=FieldType.other, values=ArrayVector([None]))
        assert guess_field_type_for_field(f) is None


class TestParseFloat:
    @pytest.mark.parametrize("text,expected", [
        ("12", 12.0),
        ("12px", 12.0),
        ("-1.5e3", -1500.0),
        (".5", 0.5),
        ("-Infinity", -math.inf),
        (7, 7.0),
    ])
    def test_parses_leading_number(self, text, expected):
        assert parse_float(text) == expected

    @pytest.mark.parametrize("text", ["abc", "", None, True, "inf", "nan"])
    def test_nan(self, text):
        assert math.isnan(parse_float(text))


class TestDto:
    def test_read_dto(self):
        meta, fields = read_dto({"name": "a", "refId": "Q", "fields": [{"name": "x"}]})
        assert meta == {"name": "a", "ref_id": "Q", "labels": None, "meta": None}
        assert fields == [{"name": "x"}]

    def test_missing_fields(self):
        _, fields = read_dto({})
        assert fields == []

    def test_to_field_type(self):
        assert to_field_type("number") == FieldType.number
        assert to_field_type(FieldType.time) == FieldType.time
        assert to_field_type(None) == FieldType.other
        assert to_field_type("weird") == FieldType.other
