"""
Tests for display.field_display — property merging and the display pipeline.

Run with: python -m pytest tests/test_field_display.py
"""

import math
from unittest import mock

import pytest

from display.display_value import Threshold
from display.field_display import (
    FieldConfig,
    FieldDisplayOptions,
    FieldOverride,
    get_field_display_values,
    get_field_properties,
    get_title_template,
)
from display.links import DataLink, LinkModel, LinkOptions
from frames.dataframe import DataFrame
from frames.mutable import MutableDataFrame
from frames.types import FieldType


def simple_linker(options: LinkOptions) -> list[LinkModel]:
    return [
        LinkModel(
            href=link.url,
            title=link.title,
            target="_blank" if link.target_blank else "_self",
        )
        for link in options.links
    ]


def unchanged(template, scoped_vars=None):
    return template


@pytest.fixture
def series():
    return [
        DataFrame({
            "name": "Series Name",
            "fields": [
                {"name": "Field 1", "values": ["a", "b", "c"]},
                {"name": "Field 2", "values": [1, 3, 5]},
                {"name": "Field 3", "values": [2, 4, 6]},
            ],
        })
    ]


class TestGetFieldProperties:
    def test_merge_and_swap(self):
        f0 = {"min": 0, "max": 100}
        f1 = {"unit": "ms", "dateFormat": "", "max": float("nan"), "min": None}
        field = get_field_properties(f0, f1)
        assert field.min == 0
        assert field.max == 100
        assert field.unit == "ms"

        f2 = {"unit": "none", "max": -100}
        field = get_field_properties(f0, f1, f2)
        assert field.max == 0
        assert field.min == -100
        assert field.unit == "ms"

    def test_leading_null_threshold_becomes_base(self):
        field = get_field_properties({
            "thresholds": [
                {"color": "#73BF69", "value": None},
                {"color": "#F2495C", "value": 50},
            ],
        })
        assert len(field.thresholds) == 2
        assert field.thresholds[0].value == -math.inf
        assert field.thresholds[1].value == 50

    def test_numeric_strings_accepted(self):
        field = get_field_properties({"decimals": "2", "max": "10"})
        assert field.decimals == 2
        assert field.max == 10

    def test_infinity_spellings(self):
        assert get_field_properties({"max": "Infinity"}).max == math.inf
        assert get_field_properties({"max": "inf"}).max is None

    def test_empty_strings_ignored(self):
        field = get_field_properties({"title": "A"}, {"title": "", "max": ""})
        assert field.title == "A"
        assert field.max is None

    def test_camel_case_aliases(self):
        field = get_field_properties({"noValue": "-", "nullValueMode": "connected"})
        assert field.no_value == "-"
        assert field.null_value_mode == "connected"

    def test_inputs_not_mutated(self):
        thresholds = [Threshold(value=None, color="green")]
        get_field_properties(FieldConfig(thresholds=thresholds))
        assert thresholds[0].value is None

    def test_round_trip_dict(self):
        cfg = FieldConfig.from_dict({
            "unit": "bytes",
            "links": [{"title": "t", "url": "http://x", "targetBlank": True}],
        })
        assert cfg.links[0].target_blank is True
        out = cfg.to_dict()
        assert out["unit"] == "bytes"
        assert out["links"] == [{"title": "t", "url": "http://x", "target_blank": True}]


class TestReducerMode:
    def test_first_numeric_values(self, series):
        display = get_field_display_values(
            series,
            FieldDisplayOptions(calcs=["first"], defaults={"title": "$__cell_0 * $__field_name * $__series_name"}),
            replace_variables=unchanged,
        )
        assert [d.display.text for d in display] == ["1", "2"]
        assert [d.name for d in display] == ["first", "first"]

    def test_last_numeric_values(self, series):
        display = get_field_display_values(series, FieldDisplayOptions(calcs=["last"]))
        assert [d.display.numeric for d in display] == [5, 6]

    def test_default_calc_is_last(self, series):
        display = get_field_display_values(series, FieldDisplayOptions())
        assert [d.display.numeric for d in display] == [5, 6]

    def test_one_display_per_calc(self, series):
        display = get_field_display_values(series, FieldDisplayOptions(calcs=["min", "max"]))
        assert [d.display.numeric for d in display] == [1, 5, 2, 6]
        assert [d.display.title for d in display] == [
            "min Field 2", "max Field 2", "min Field 3", "max Field 3",
        ]

    def test_default_title_is_field_name(self, series):
        display = get_field_display_values(series, FieldDisplayOptions())
        assert [d.display.title for d in display] == ["Field 2", "Field 3"]

    def test_sparkline_with_time_field(self):
        frame = DataFrame({"fields": [
            {"name": "time", "type": "time", "values": [1000, 2000]},
            {"name": "v", "values": [1, 2]},
        ]})
        display = get_field_display_values([frame], FieldDisplayOptions(calcs=["mean"]))
        assert len(display) == 1
        assert display[0].sparkline == [[1000, 1], [2000, 2]]
        assert display[0].display.numeric == 1.5

    def test_no_sparkline_without_time(self, series):
        display = get_field_display_values(series, FieldDisplayOptions())
        assert display[0].sparkline is None

    def test_mutable_frames_accepted(self):
        frame = MutableDataFrame()
        frame.name = "live"
        for v in [3, 9]:
            frame.add({"v": v}, add_missing_fields=True)
        display = get_field_display_values([frame], FieldDisplayOptions(calcs=["max"]))
        assert display[0].display.numeric == 9


class TestValuesMode:
    def test_all_values_field_major(self, series):
        display = get_field_display_values(series, FieldDisplayOptions(values=True, limit=1000))
        assert [d.display.numeric for d in display] == [1, 3, 5, 2, 4, 6]
        assert [d.row for d in display] == [0, 1, 2, 0, 1, 2]
        assert [d.column for d in display] == [1, 1, 1, 2, 2, 2]

    def test_limit(self, series):
        display = get_field_display_values(series, FieldDisplayOptions(values=True, limit=2))
        assert [d.display.numeric for d in display] == [1, 3]

    def test_default_limit_from_config(self, series):
        with mock.patch("config.VALUES_LIMIT", 4):
            display = get_field_display_values(series, FieldDisplayOptions(values=True))
        assert len(display) == 4

    def test_limit_counts_across_frames(self, series):
        frames = series + [DataFrame({"name": "other", "fields": [{"name": "x", "values": [7, 8]}]})]
        display = get_field_display_values(frames, FieldDisplayOptions(values=True, limit=7))
        assert [d.display.numeric for d in display] == [1, 3, 5, 2, 4, 6, 7]

    def test_cell_variables_in_title(self, series):
        display = get_field_display_values(
            series,
            FieldDisplayOptions(values=True, defaults={"title": "${__cell_0} * ${__field_name} * ${__series_name}"}),
        )
        assert display[0].display.title == "a * Field 2 * Series Name"
        assert display[4].display.title == "b * Field 3 * Series Name"

    def test_include_types(self, series):
        display = get_field_display_values(
            series, FieldDisplayOptions(values=True, include_types=(FieldType.string,)),
        )
        assert [d.display.text for d in display] == ["a", "b", "c"]

    def test_options_from_dict(self, series):
        display = get_field_display_values(series, {"values": True, "limit": 3})
        assert [d.display.numeric for d in display] == [1, 3, 5]


class TestConfigResolution:
    def test_unit_and_decimals_from_defaults(self, series):
        display = get_field_display_values(
            series, FieldDisplayOptions(calcs=["last"], defaults={"unit": "ms", "decimals": 1}),
        )
        assert [d.display.text for d in display] == ["5.0 ms", "6.0 ms"]

    def test_field_config_beats_defaults(self):
        frame = DataFrame({"fields": [{"name": "v", "values": [50], "config": {"unit": "percent"}}]})
        display = get_field_display_values([frame], FieldDisplayOptions(defaults={"unit": "ms"}))
        assert display[0].display.text == "50%"

    def test_override_rules(self, series):
        options = FieldDisplayOptions(
            calcs=["last"],
            overrides=[FieldOverride(matcher={"id": "byName", "options": "Field 3"},
                                     properties={"unit": "percent"})],
        )
        display = get_field_display_values(series, options)
        assert [d.display.text for d in display] == ["5", "6%"]
        assert display[1].field.unit == "percent"

    def test_thresholds_color(self, series):
        thresholds = [{"value": None, "color": "green"}, {"value": 4, "color": "red"}]
        first = get_field_display_values(
            series, FieldDisplayOptions(calcs=["first"], defaults={"thresholds": thresholds}))
        last = get_field_display_values(
            series, FieldDisplayOptions(calcs=["last"], defaults={"thresholds": thresholds}))
        assert [d.display.color for d in first] == ["green", "green"]
        assert [d.display.color for d in last] == ["red", "red"]

    def test_value_mapping(self, series):
        options = FieldDisplayOptions(
            calcs=["last"],
            defaults={"mappings": [{"id": 1, "type": 1, "value": "5", "text": "five"}]},
        )
        display = get_field_display_values(series, options)
        assert display[0].display.text == "five"
        assert display[0].display.numeric == 5
        assert display[1].display.text == "6"

    def test_null_mode_from_defaults(self):
        frame = DataFrame({"fields": [{"name": "v", "type": "number", "values": [None, 5]}]})
        plain = get_field_display_values([frame], FieldDisplayOptions(calcs=["min"]))
        as_zero = get_field_display_values(
            [frame], FieldDisplayOptions(calcs=["min"], defaults={"null_value_mode": "null as zero"}),
        )
        assert plain[0].display.numeric == 5
        assert as_zero[0].display.numeric == 0

    def test_null_mode_camel_case_in_field_config(self):
        frame = DataFrame({"fields": [
            {"name": "v", "type": "number", "values": [None, 5], "config": {"nullValueMode": "null as zero"}},
        ]})
        display = get_field_display_values([frame], FieldDisplayOptions(calcs=["min"]))
        assert display[0].field.null_value_mode == "null as zero"
        assert display[0].display.numeric == 0

    def test_null_mode_from_override_rule(self):
        frame = DataFrame({"fields": [{"name": "v", "type": "number", "values": [None, 4]}]})
        options = FieldDisplayOptions(
            calcs=["mean"],
            overrides=[FieldOverride(matcher={"id": "byName", "options": "v"},
                                     properties={"null_value_mode": "null as zero"})],
        )
        assert get_field_display_values([frame], options)[0].display.numeric == 2

    def test_series_names_for_unnamed_frames(self):
        frames = [
            {"ref_id": "A", "fields": [{"name": "v", "values": [1]}]},
            {"fields": [{"name": "v", "values": [2]}]},
        ]
        display = get_field_display_values(frames, FieldDisplayOptions())
        assert [d.display.title for d in display] == ["A", "Series[1]"]


class TestNoData:
    def test_thresholds_kept_when_no_data(self):
        options = FieldDisplayOptions(defaults={"thresholds": [{"color": "#F2495C", "value": 50}]})
        display = get_field_display_values(
            [{"name": "No data", "fields": []}], options, replace_variables=unchanged, linker=simple_linker,
        )
        assert len(display) == 1
        assert len(display[0].field.thresholds) == 1
        assert display[0].name == "No data"
        assert display[0].display.text == "No data"
        assert math.isnan(display[0].display.numeric)
        assert display[0].display.color == "#F2495C"

    def test_one_placeholder_per_calc(self):
        display = get_field_display_values([], FieldDisplayOptions(calcs=["min", "max"]))
        assert len(display) == 2

    def test_one_placeholder_in_values_mode(self):
        display = get_field_display_values(None, FieldDisplayOptions(values=True, calcs=["min", "max"]))
        assert len(display) == 1

    def test_no_value_text(self, series):
        display = get_field_display_values(
            [], FieldDisplayOptions(defaults={"no_value": "n/a"}))
        assert display[0].display.text == "n/a"

    def test_no_numeric_fields(self):
        frame = DataFrame({"fields": [{"name": "s", "values": ["x"]}]})
        display = get_field_display_values([frame], FieldDisplayOptions())
        assert [d.name for d in display] == ["No data"]


class TestLinks:
    def _frame(self):
        return DataFrame({
            "name": "Series Name",
            "fields": [
                {"name": "Time field", "type": "time", "values": ["1", "2"]},
                {
                    "name": "Field 1",
                    "type": "number",
                    "values": ["0.5", "1.0"],
                    "config": {
                        "links": [{
                            "title": "Link 1",
                            "url": "http://example.com?vt=${__value_time}&sn=${__series_name}",
                        }],
                    },
                },
            ],
        })

    def test_value_time_passed_to_linker(self):
        linker = mock.Mock(side_effect=simple_linker)
        options = FieldDisplayOptions(values=True, defaults={"thresholds": [{"color": "#F2495C", "value": 50}]})
        get_field_display_values([self._frame()], options, replace_variables=unchanged, linker=linker)

        assert linker.call_count == 2
        first = linker.call_args_list[0][0][0]
        second = linker.call_args_list[1][0][0]
        assert first.scoped_vars["__value_time"]["value"] == "1"
        assert second.scoped_vars["__value_time"]["value"] == "2"
        assert first.scoped_vars["__series_name"]["value"] == "Series Name"
        assert first.links[0].title == "Link 1"

    def test_current_value_passed_to_linker(self):
        linker = mock.Mock(side_effect=simple_linker)
        get_field_display_values([self._frame()], FieldDisplayOptions(values=True), linker=linker)
        first = linker.call_args_list[0][0][0]
        second = linker.call_args_list[1][0][0]
        assert first.scoped_vars["__value"] == {"text": "0.5", "value": "0.5"}
        assert second.scoped_vars["__value"] == {"text": "1", "value": "1.0"}

    def test_calc_result_passed_to_linker(self):
        linker = mock.Mock(side_effect=simple_linker)
        get_field_display_values([self._frame()], FieldDisplayOptions(calcs=["max"]), linker=linker)
        options = linker.call_args[0][0]
        assert options.scoped_vars["__value"]["value"] == 1.0
        assert options.scoped_vars["__value"]["text"] == "1"
        assert options.scoped_vars["__calc"]["value"] == "max"

    def test_links_exposed_on_display(self):
        display = get_field_display_values(
            [self._frame()], FieldDisplayOptions(values=True), linker=simple_linker,
        )
        links = display[0].get_links()
        assert links[0].title == "Link 1"
        assert display[0].has_links

    def test_caller_scoped_vars_forwarded(self):
        linker = mock.Mock(return_value=[])
        get_field_display_values(
            [self._frame()], FieldDisplayOptions(calcs=["last"]), linker=linker,
            scoped_vars={"host": {"text": "a", "value": "a"}},
        )
        options = linker.call_args[0][0]
        assert options.scoped_vars["host"]["value"] == "a"
        assert "__value_time" not in options.scoped_vars

    def test_no_linker_no_links(self):
        display = get_field_display_values([self._frame()], FieldDisplayOptions())
        assert display[0].get_links() == []


class TestTitleTemplate:
    def test_explicit_title(self):
        assert get_title_template("My title", ["mean"], []) == "My title"

    def test_no_data(self):
        assert get_title_template(None, ["mean"], []) == "No Data"

    def test_parts(self, series):
        two = series + series
        assert get_title_template(None, ["min", "max"], two) == "${__calc} ${__series_name} ${__field_name}"
        single = [DataFrame({"fields": [{"name": "v", "values": [1]}]})]
        assert get_title_template(None, ["mean"], single) == "${__field_name}"
