"""
Tests for display.reducers — standard calcs, fast paths, null modes, aliases.

Run with: python -m pytest tests/test_reducers.py
"""

import pytest

from display.reducers import (
    ReducerID,
    do_standard_calcs,
    field_reducers,
    get_field_reducers,
    reduce_field,
)
from frames.types import Field, FieldType
from frames.vector import ArrayVector


def _field(values, **config):
    return Field(name="v", type=FieldType.number, values=ArrayVector(values), config=config)


class TestStandardCalcs:
    def test_basic_stats(self):
        calcs = reduce_field(_field([10, 20, 30]), ["sum", "max", "min", "mean", "count"])
        assert calcs["sum"] == 60
        assert calcs["max"] == 30
        assert calcs["min"] == 10
        assert calcs["mean"] == 20
        assert calcs["count"] == 3

    def test_range_diff_delta_step(self):
        calcs = do_standard_calcs(_field([10, 20, 30]), False, False)
        assert calcs["range"] == 20
        assert calcs["diff"] == 20
        assert calcs["delta"] == 20
        assert calcs["step"] == 10

    def test_counter_reset_delta(self):
        calcs = do_standard_calcs(_field([1, 2, 1, 3]), False, False)
        assert calcs["delta"] == 4

    def test_logmin_skips_non_positive(self):
        calcs = reduce_field(_field([0, 5, 2]), ["logmin", "max"])
        assert calcs["logmin"] == 2

    def test_numeric_strings(self):
        calcs = reduce_field(_field(["1", "2", "x"]), ["sum", "max"])
        assert calcs["sum"] == 3.0
        assert calcs["max"] == 2.0

    def test_all_null(self):
        calcs = reduce_field(_field([None, None]), ["allIsNull", "allIsZero", "mean"])
        assert calcs["allIsNull"] is True
        assert calcs["allIsZero"] is False
        assert calcs["mean"] is None

    def test_all_zero(self):
        calcs = reduce_field(_field([0, 0]), ["allIsZero", "sum"])
        assert calcs["allIsZero"] is True

    def test_nan_cells_skipped(self):
        calcs = reduce_field(_field([1, float("nan"), 3]), ["sum", "mean", "max", "count"])
        assert calcs["sum"] == 4
        assert calcs["mean"] == 2
        assert calcs["max"] == 3
        assert calcs["count"] == 3

    def test_step_and_not_null_ends(self):
        calcs = do_standard_calcs(_field([None, 4, 10, 7, None]), False, False)
        assert calcs["step"] == -3
        assert calcs["firstNotNull"] == 4
        assert calcs["lastNotNull"] == 7
        assert calcs["first"] is None
        assert calcs["diff"] is None


class TestNullModes:
    def test_default_skips_nulls_in_stats(self):
        calcs = reduce_field(_field([1, None, 3]), ["mean", "min", "count"])
        assert calcs["mean"] == 2
        assert calcs["min"] == 1
        assert calcs["count"] == 3

    def test_null_as_zero(self):
        calcs = reduce_field(_field([1, None, 3], null_value_mode="null as zero"), ["mean", "min"])
        assert calcs["mean"] == pytest.approx(4 / 3)
        assert calcs["min"] == 0

    def test_connected_ignores_nulls(self):
        f = _field([1, 1, None, 2], null_value_mode="connected")
        assert reduce_field(f, ["distinctCount"])["distinctCount"] == 2

    def test_mode_argument_beats_field_config(self):
        f = _field([None, 5], null_value_mode="connected")
        assert reduce_field(f, ["min"], null_value_mode="null as zero")["min"] == 0

    def test_camel_case_field_config(self):
        f = Field(name="v", type=FieldType.number, values=ArrayVector([None, 5]),
                  config={"nullValueMode": "null as zero"})
        assert reduce_field(f, ["min"])["min"] == 0


class TestFastPath:
    def test_single_reducer_with_own_function(self):
        assert reduce_field(_field([10, 20, 30]), ["last"]) == {"last": 30}
        assert reduce_field(_field([10, 20, 30]), ["first"]) == {"first": 10}

    def test_not_null_variants(self):
        f = _field([None, 5, 7, None])
        assert reduce_field(f, ["firstNotNull"])["firstNotNull"] == 5
        assert reduce_field(f, ["lastNotNull"])["lastNotNull"] == 7
        assert reduce_field(f, ["last"])["last"] is None

    def test_change_count(self):
        assert reduce_field(_field([1, 1, 2, 2, 3]), ["changeCount"])["changeCount"] == 2

    def test_mixed_standard_and_dedicated(self):
        calcs = reduce_field(_field([1, 1, 2]), ["sum", "distinctCount"])
        assert calcs["sum"] == 4
        assert calcs["distinctCount"] == 2


class TestEmptyAndAliases:
    def test_empty_input_results(self):
        calcs = reduce_field(_field([]), ["sum", "count", "mean", "allIsNull"])
        assert calcs == {"sum": 0, "count": 0, "mean": None, "allIsNull": True}

    def test_aliases(self):
        calcs = reduce_field(_field([2, 4]), ["avg", "total"])
        assert calcs["avg"] == 3
        assert calcs["total"] == 6

    def test_alias_on_fast_path(self):
        calcs = reduce_field(_field([2, 4]), ["current"])
        assert calcs["current"] == 4

    def test_no_reducers(self):
        assert reduce_field(_field([1]), []) == {}

    def test_get_field_reducers_skips_unknown(self):
        infos = get_field_reducers(["mean", "nope", "avg"])
        assert [i.id for i in infos] == ["mean", "mean"]

    def test_registry_contents(self):
        ids = field_reducers.ids()
        for rid in (ReducerID.sum, ReducerID.last_not_null, ReducerID.change_count):
            assert rid in ids
        assert "avg" in field_reducers
        assert field_reducers.get("total").id == "sum"

    def test_unknown_get_raises(self):
        with pytest.raises(KeyError):
            field_reducers.get("median")

    def test_select_options(self):
        options = field_reducers.select_options()
        assert {"value": "mean", "label": "Mean", "description": "Average Value"} in options
