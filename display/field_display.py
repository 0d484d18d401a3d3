"""
Field display pipeline: frames + display options -> list of FieldDisplay.

For every frame and every field of an included type (numbers by default),
the effective field config is resolved from the option defaults, the
field's own config, the option override and any matching override rules.
Then either each raw value is displayed (``values`` mode, capped by
``limit``) or one value per reducer in ``calcs`` is computed.

Usage:
    options = FieldDisplayOptions(calcs=["mean"], defaults={"unit": "ms"})
    for fd in get_field_display_values(frames, options):
        print(fd.display.title, fd.display.text)
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import config
from core.logging import tagged
from display.display_value import (
    DisplayValue,
    Threshold,
    get_color_from_threshold,
    get_display_processor,
    to_number,
)
from display.links import DataLink, DataLinkBuiltInVars, LinkModel, LinkOptions, Linker
from display.matchers import get_field_matcher
from display.reducers import ReducerID, reduce_field
from display.templating import ScopedVars, replace_variables as default_replace_variables, scoped_var
from display.value_mappings import ValueMapping
from frames.dataframe import DataFrame
from frames.types import Field, FieldType

logger = logging.getLogger("dashframe")

VAR_SERIES_NAME = "__series_name"
VAR_FIELD_NAME = "__field_name"
VAR_CALC = "__calc"
VAR_CELL_PREFIX = "__cell_"

NO_DATA = "No data"


# ---------------------------------------------------------------------------
# Field config
# ---------------------------------------------------------------------------

@dataclass
class FieldConfig:
    """Display config for one field.

    Every property is optional; ``None`` means "not set" and lets an
    earlier config in the merge chain show through.
    """

    title: Optional[str] = None
    unit: Optional[str] = None
    decimals: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    thresholds: Optional[list[Threshold]] = None
    mappings: Optional[list[ValueMapping]] = None
    links: Optional[list[DataLink]] = None
    no_value: Optional[str] = None
    null_value_mode: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "FieldConfig":
        return apply_field_properties(cls(), data or {})

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            if key in _STRUCT_LISTS:
                d[key] = [item.to_dict() for item in value]
            else:
                d[key] = value
        return d


def _validate_text(value: Any) -> Any:
    if not isinstance(value, str) or value == "":
        return None
    return value


def _validate_unit(value: Any) -> Any:
    value = _validate_text(value)
    return None if value == "none" else value


def _validate_number(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    num = to_number(value)
    return None if math.isnan(num) else num


def _validate_decimals(value: Any) -> Any:
    num = _validate_number(value)
    if num is None or not math.isfinite(num):
        return None
    return int(num)


def _struct_list(parse: Callable[[dict], Any], kind: type) -> Callable[[Any], Any]:
    def _validate(value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return None
        out = []
        for item in value:
            if isinstance(item, kind):
                out.append(copy.copy(item))
            elif isinstance(item, dict):
                out.append(parse(item))
        return out
    return _validate


# property -> validator; a validator returns None to reject the value
_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "title": _validate_text,
    "unit": _validate_unit,
    "decimals": _validate_decimals,
    "min": _validate_number,
    "max": _validate_number,
    "thresholds": _struct_list(Threshold.from_dict, Threshold),
    "mappings": _struct_list(ValueMapping.from_dict, ValueMapping),
    "links": _struct_list(DataLink.from_dict, DataLink),
    "no_value": _validate_text,
    "null_value_mode": _validate_text,
    "color": _validate_text,
}

_STRUCT_LISTS = ("thresholds", "mappings", "links")

_ALIASES = {
    "noValue": "no_value",
    "nullValueMode": "null_value_mode",
}


def _as_property_dict(props: Union[FieldConfig, dict, None]) -> dict:
    if props is None:
        return {}
    if isinstance(props, FieldConfig):
        return dict(props.__dict__)
    return props


def apply_field_properties(field_config: FieldConfig, props: Union[FieldConfig, dict, None]) -> FieldConfig:
    """Copy the recognized, valid properties of ``props`` onto ``field_config``.

    Unknown keys, ``None``, empty strings, NaN numbers and ``unit == 'none'``
    are ignored.
    """
    for key, value in _as_property_dict(props).items():
        if value is None:
            continue
        key = _ALIASES.get(key, key)
        validator = _VALIDATORS.get(key)
        if validator is None:
            continue
        checked = validator(value)
        if checked is None:
            continue
        setattr(field_config, key, checked)
    return field_config


def get_field_properties(*props: Union[FieldConfig, dict, None]) -> FieldConfig:
    """Merge partial configs left to right; later values win.

    After the merge ``min``/``max`` are swapped if inverted, and a leading
    threshold without a value becomes the ``-inf`` base threshold.
    """
    merged = FieldConfig()
    for p in props:
        apply_field_properties(merged, p)

    if merged.min is not None and merged.max is not None and merged.min > merged.max:
        merged.min, merged.max = merged.max, merged.min

    if merged.thresholds and merged.thresholds[0].value is None:
        merged.thresholds[0].value = -math.inf

    return merged


# ---------------------------------------------------------------------------
# Options and results
# ---------------------------------------------------------------------------

@dataclass
class FieldOverride:
    """Config applied to every field the matcher accepts."""

    matcher: dict = field(default_factory=dict)
    properties: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "FieldOverride":
        return cls(matcher=data.get("matcher") or {}, properties=data.get("properties") or {})


@dataclass
class FieldDisplayOptions:
    """What to display.

    Attributes:
        calcs: Reducer ids; empty means ``["last"]``.
        defaults: Config applied first, before the field's own config.
        override: Config applied after the field's own config.
        overrides: Matcher-based override rules, applied last in order.
        values: Show every raw value instead of reducer results.
        limit: Maximum number of raw values (defaults to
            ``display.values_limit``).
        include_types: Field types that produce display values.
    """

    calcs: list[str] = field(default_factory=list)
    defaults: Union[FieldConfig, dict] = field(default_factory=dict)
    override: Union[FieldConfig, dict] = field(default_factory=dict)
    overrides: list[FieldOverride] = field(default_factory=list)
    values: bool = False
    limit: Optional[int] = None
    include_types: tuple = (FieldType.number,)

    @classmethod
    def from_dict(cls, data: dict) -> "FieldDisplayOptions":
        return cls(
            calcs=list(data.get("calcs") or []),
            defaults=data.get("defaults") or {},
            override=data.get("override") or {},
            overrides=[o if isinstance(o, FieldOverride) else FieldOverride.from_dict(o)
                       for o in data.get("overrides") or []],
            values=bool(data.get("values", False)),
            limit=data.get("limit"),
            include_types=tuple(FieldType(t) for t in data.get("include_types", ["number"])),
        )


@dataclass
class FieldDisplay:
    """One displayable value with its provenance.

    Attributes:
        name: Reducer id (reducer mode) or field name (values mode).
        field: Resolved field config.
        display: The formatted value.
        sparkline: ``[time, value]`` pairs, reducer mode with a time field only.
        frame: Source frame.
        column: Index of the field in the frame.
        row: Row index (values mode only).
    """

    name: str
    field: FieldConfig
    display: DisplayValue
    sparkline: Optional[list[list[Any]]] = None
    frame: Optional[DataFrame] = None
    column: Optional[int] = None
    row: Optional[int] = None
    links: list[LinkModel] = field(default_factory=list)

    def get_links(self) -> list[LinkModel]:
        return list(self.links)

    @property
    def has_links(self) -> bool:
        return bool(self.field.links)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def get_title_template(title: Optional[str], calcs: list[str], data: Optional[list]) -> str:
    """Explicit title, or a template naming only what varies."""
    if title:
        return title
    if not data:
        return "No Data"

    field_count = sum(1 for f in data[0].fields if f.type == FieldType.number)

    parts = []
    if len(calcs) > 1:
        parts.append("${" + VAR_CALC + "}")
    if len(data) > 1:
        parts.append("${" + VAR_SERIES_NAME + "}")
    if field_count > 1 or not parts:
        parts.append("${" + VAR_FIELD_NAME + "}")
    return " ".join(parts)


def _as_frame(frame: Any) -> Any:
    if isinstance(frame, dict):
        return DataFrame(frame)
    return frame


def _sparkline(time_field: Field, value_field: Field) -> list[list[Any]]:
    return [[time_field.values.get(i), value_field.values.get(i)]
            for i in range(value_field.values.length)]


def _field_config_for(f: Field, options: FieldDisplayOptions) -> FieldConfig:
    props = [options.defaults, f.config or {}, options.override]
    for rule in options.overrides:
        matches = get_field_matcher(rule.matcher)
        if matches is not None and matches(f):
            props.append(rule.properties)
    return get_field_properties(*props)


def create_no_values_field_display(options: FieldDisplayOptions, name: str = NO_DATA) -> FieldDisplay:
    """Placeholder display carrying only the configured defaults."""
    field_config = get_field_properties(options.defaults, {}, options.override)
    display = get_display_processor(field_config, FieldType.other)(None)
    color = None
    if field_config.thresholds:
        color = get_color_from_threshold(-math.inf, field_config.thresholds)
    return FieldDisplay(
        name=name,
        field=field_config,
        display=DisplayValue(
            text=display.text or NO_DATA,
            numeric=math.nan,
            color=color,
        ),
    )


def get_field_display_values(
    data: Optional[list],
    field_options: Union[FieldDisplayOptions, dict],
    replace_variables: Optional[Callable[..., str]] = None,
    linker: Optional[Linker] = None,
    scoped_vars: Optional[ScopedVars] = None,
) -> list[FieldDisplay]:
    """Compute display values for every included field of every frame.

    Args:
        data: Frames (DataFrame, MutableDataFrame or DTO dicts).
        field_options: Display options.
        replace_variables: ``(template, scoped_vars) -> str`` for titles.
        linker: Resolves a field's links for one value.
        scoped_vars: Caller variables available to titles and links.

    Returns:
        Display values in frame, field, then row/calc order. Never empty:
        with nothing to show, placeholders named ``No data`` are returned.
    """
    if isinstance(field_options, dict):
        field_options = FieldDisplayOptions.from_dict(field_options)
    replace_variables = replace_variables or default_replace_variables

    calcs = field_options.calcs or [ReducerID.last]
    limit = field_options.limit or config.VALUES_LIMIT
    frames = [_as_frame(f) for f in data or []]
    defaults = _as_property_dict(field_options.defaults)
    default_title = get_title_template(defaults.get("title"), calcs, frames)

    values: list[FieldDisplay] = []
    hit_limit = False
    for s, frame in enumerate(frames):
        if hit_limit:
            break
        series_name = frame.name or frame.ref_id or f"Series[{s}]"
        time_field = next((f for f in frame.fields if f.type == FieldType.time), None)

        for i, f in enumerate(frame.fields):
            if hit_limit:
                break
            if f.type not in field_options.include_types:
                continue

            field_config = _field_config_for(f, field_options)
            field_name = f.name or f"Field[{s}]"
            variables: ScopedVars = {
                **(scoped_vars or {}),
                VAR_SERIES_NAME: scoped_var(series_name),
                VAR_FIELD_NAME: scoped_var(field_name),
            }
            process = get_display_processor(field_config, f.type)
            title = field_config.title or default_title

            if field_options.values:
                uses_cells = VAR_CELL_PREFIX in title
                for j in range(f.values.length):
                    row_vars = dict(variables)
                    if uses_cells:
                        for k, cell_field in enumerate(frame.fields):
                            row_vars[f"{VAR_CELL_PREFIX}{k}"] = scoped_var(cell_field.values.get(j))
                    if time_field is not None:
                        row_vars[DataLinkBuiltInVars.value_time] = scoped_var(time_field.values.get(j))

                    raw = f.values.get(j)
                    display = process(raw)
                    row_vars[DataLinkBuiltInVars.value] = scoped_var(raw, text=display.text)
                    display.title = replace_variables(title, row_vars)
                    values.append(FieldDisplay(
                        name=field_name,
                        field=field_config,
                        display=display,
                        frame=frame,
                        column=i,
                        row=j,
                        links=_resolve_links(linker, field_config, row_vars),
                    ))
                    if len(values) >= limit:
                        hit_limit = True
                        break
            else:
                results = reduce_field(f, calcs, null_value_mode=field_config.null_value_mode)
                sparkline = _sparkline(time_field, f) if time_field is not None else None
                for calc in calcs:
                    result = results.get(calc)
                    display = process(result)
                    calc_vars = {
                        **variables,
                        VAR_CALC: scoped_var(calc),
                        DataLinkBuiltInVars.value: scoped_var(result, text=display.text),
                    }
                    display.title = replace_variables(title, calc_vars)
                    values.append(FieldDisplay(
                        name=calc,
                        field=field_config,
                        display=display,
                        sparkline=sparkline,
                        frame=frame,
                        column=i,
                        links=_resolve_links(linker, field_config, calc_vars),
                    ))

    if not values:
        if field_options.values:
            values.append(create_no_values_field_display(field_options))
        else:
            values.extend(create_no_values_field_display(field_options) for _ in calcs)
        logger.debug(f"No displayable fields in {len(frames)} frame(s)", extra=tagged("display"))
    else:
        logger.debug(
            f"Computed {len(values)} display value(s) from {len(frames)} frame(s)",
            extra=tagged("display"),
        )
    return values


def _resolve_links(
    linker: Optional[Linker],
    field_config: FieldConfig,
    variables: ScopedVars,
) -> list[LinkModel]:
    if linker is None or not field_config.links:
        return []
    return list(linker(LinkOptions(links=field_config.links, scoped_vars=variables)) or [])
