"""
Field matchers used by override rules.

A matcher config is ``{"id": <matcher id>, "options": <matcher options>}``.
``get_field_matcher(config)`` turns it into a ``Field -> bool`` predicate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from display.registry import Registry
from frames.types import Field, FieldType

FieldMatcher = Callable[[Field], bool]


class FieldMatcherID:
    by_name = "byName"
    by_regex = "byRegex"
    by_type = "byType"
    numeric = "numeric"
    time = "time"
    all = "all"


@dataclass
class FieldMatcherInfo:
    id: str
    name: str
    description: str
    get: Callable[[Any], FieldMatcher]
    alias_ids: list[str] = field(default_factory=list)


def _by_name(name: Any) -> FieldMatcher:
    return lambda f: f.name == name


def _by_regex(pattern: Any) -> FieldMatcher:
    regex = re.compile(str(pattern))
    return lambda f: bool(f.name) and regex.search(f.name) is not None


def _by_type(type_name: Any) -> FieldMatcher:
    try:
        wanted = FieldType(type_name)
    except ValueError:
        return lambda f: False
    return lambda f: f.type == wanted


def _matcher_list() -> list[FieldMatcherInfo]:
    return [
        FieldMatcherInfo(
            id=FieldMatcherID.by_name, name="Field Name",
            description="match the field name exactly", get=_by_name),
        FieldMatcherInfo(
            id=FieldMatcherID.by_regex, name="Field Name Pattern",
            description="match field names with a regular expression", get=_by_regex),
        FieldMatcherInfo(
            id=FieldMatcherID.by_type, name="Field Type",
            description="match the field type", get=_by_type),
        FieldMatcherInfo(
            id=FieldMatcherID.numeric, name="Numeric Fields",
            description="fields with type number",
            get=lambda _: _by_type(FieldType.number)),
        FieldMatcherInfo(
            id=FieldMatcherID.time, name="Time Fields",
            description="fields with type time",
            get=lambda _: _by_type(FieldType.time)),
        FieldMatcherInfo(
            id=FieldMatcherID.all, name="All Fields",
            description="every field", get=lambda _: (lambda f: True)),
    ]


field_matchers: Registry[FieldMatcherInfo] = Registry(_matcher_list)


def get_field_matcher(matcher_config: Optional[dict]) -> Optional[FieldMatcher]:
    """Predicate for a matcher config, or None for an unknown matcher id."""
    if not matcher_config:
        return None
    info = field_matchers.get_if_exists(matcher_config.get("id"))
    if info is None:
        return None
    return info.get(matcher_config.get("options"))
