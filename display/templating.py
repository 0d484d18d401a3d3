"""
Template variable substitution for titles and link urls.

Scoped variables map a name to ``{"text": ..., "value": ...}`` (a bare value
is accepted too). Three reference forms are recognized: ``$name``,
``${name}`` (optionally ``${name:format}``) and ``[[name]]``. Unknown
variables are left untouched.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional
from urllib.parse import quote

ScopedVars = dict[str, Any]
FormatFn = Callable[[Any, str], str]

_VARIABLE_RE = re.compile(
    r"\$(\w+)|\[\[([\s\S]+?)(?::(\w+))?\]\]|\$\{(\w+)(?:\.([^:^}]+))?(?::(\w+))?\}"
)


def scoped_var(value: Any, text: Any = None) -> dict[str, Any]:
    """Build a scoped variable entry."""
    return {"text": value if text is None else text, "value": value}


def _var_value(entry: Any) -> Any:
    if isinstance(entry, dict) and "value" in entry:
        return entry["value"]
    return entry


def _format_value(value: Any, fmt: Optional[str]) -> str:
    if isinstance(value, (list, tuple)):
        if fmt == "csv":
            return ",".join(str(v) for v in value)
        if fmt == "pipe":
            return "|".join(str(v) for v in value)
        if fmt == "percentencode":
            return quote(",".join(str(v) for v in value), safe="")
        return "{" + ",".join(str(v) for v in value) + "}"
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    if fmt == "percentencode":
        return quote(text, safe="")
    return text


def replace_variables(
    template: str,
    scoped_vars: Optional[ScopedVars] = None,
    format_fn: Optional[FormatFn] = None,
) -> str:
    """Substitute scoped variables into ``template``.

    Args:
        template: Text with ``$var``, ``${var}`` or ``[[var]]`` references.
        scoped_vars: Variable name to ``{"text", "value"}`` (or bare value).
        format_fn: Optional ``(value, format_name) -> str`` used instead of
            the built-in formats (``csv``, ``pipe``, ``percentencode``).

    Returns:
        The substituted text; unknown variables stay as written.
    """
    if not template:
        return template or ""
    scoped_vars = scoped_vars or {}

    def _replacer(match: re.Match) -> str:
        name = match.group(1) or match.group(2) or match.group(4)
        fmt = match.group(3) or match.group(6)
        if name not in scoped_vars:
            return match.group(0)
        value = _var_value(scoped_vars[name])
        field_path = match.group(5)
        if field_path and isinstance(value, dict):
            value = value.get(field_path)
        if format_fn is not None:
            return format_fn(value, fmt or "")
        return _format_value(value, fmt)

    return _VARIABLE_RE.sub(_replacer, template)
