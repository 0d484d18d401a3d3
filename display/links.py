"""
Data link resolution.

A ``DataLink`` is a url/title template attached to a field config. The
``LinkSrv`` turns it into a concrete ``LinkModel`` by running the templates
through variable substitution, with two built-ins added on top of the
caller's scoped variables:

    ${__url_time_range}   from=...&to=... for the current time range
    ${__all_variables}    var-<name>=<value> for every template variable

A ``LinkSrv`` instance is callable with ``LinkOptions``, so it can be handed
straight to ``get_field_display_values`` as the linker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import quote

from core.logging import tagged
from display.templating import ScopedVars, replace_variables as default_replace_variables, scoped_var

logger = logging.getLogger("dashframe")


class DataLinkBuiltInVars:
    keep_time = "__url_time_range"
    include_vars = "__all_variables"
    series_name = "__series_name"
    field_name = "__field_name"
    value_time = "__value_time"
    value = "__value"


@dataclass
class DataLink:
    title: str = ""
    url: str = ""
    target_blank: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "DataLink":
        return cls(
            title=data.get("title", "") or "",
            url=data.get("url", "") or "",
            target_blank=bool(data.get("target_blank", data.get("targetBlank", False))),
        )

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url, "target_blank": self.target_blank}


@dataclass
class LinkModel:
    href: str
    title: str
    target: str = "_self"


@dataclass
class LinkOptions:
    """Arguments passed to a linker for one display value."""

    links: list[DataLink] = field(default_factory=list)
    scoped_vars: ScopedVars = field(default_factory=dict)


Linker = Callable[[LinkOptions], list[LinkModel]]


# ---------------------------------------------------------------------------
# Url helpers
# ---------------------------------------------------------------------------

def _encode_uri_value(value: Any) -> str:
    text = "true" if value is True else "false" if value is False else str(value)
    return quote(text, safe="-_.!~*'()@:$,;").replace("%20", "+")


def to_url_params(params: dict[str, Any]) -> str:
    """Encode a dict as a query string.

    ``True`` values become bare keys, lists repeat the key, ``None`` is
    skipped.
    """
    parts = []
    for key, value in params.items():
        if value is None:
            continue
        if value is True:
            parts.append(_encode_uri_value(key))
        elif isinstance(value, (list, tuple)):
            for v in value:
                parts.append(f"{_encode_uri_value(key)}={_encode_uri_value(v)}")
        else:
            parts.append(f"{_encode_uri_value(key)}={_encode_uri_value(value)}")
    return "&".join(parts)


def append_query_to_url(url: str, query: str) -> str:
    if not query:
        return url
    pos = url.find("?")
    if pos != -1:
        if len(url) - pos > 1:
            url += "&"
    else:
        url += "?"
    return url + query


def _fill_from_scoped_vars(params: dict[str, Any], scoped_vars: ScopedVars) -> None:
    for name, entry in (scoped_vars or {}).items():
        if name.startswith("__"):
            continue
        value = entry.get("value") if isinstance(entry, dict) else entry
        params[f"var-{name}"] = value


# ---------------------------------------------------------------------------
# Link service
# ---------------------------------------------------------------------------

class LinkModelSupplier:
    """Deferred link resolution for one field display."""

    def __init__(self, srv: "LinkSrv", links: list[DataLink]):
        self._srv = srv
        self._links = links

    def get_links(self, scoped_vars: Optional[ScopedVars] = None) -> list[LinkModel]:
        return [self._srv.get_data_link_ui_model(link, scoped_vars or {}) for link in self._links]


class LinkSrv:
    """Resolves data link templates into concrete links.

    Args:
        replace_variables: ``(template, scoped_vars) -> str``.
        time_range_for_url: Returns the current range as ``{"from", "to"}``.
        fill_variable_values: ``(params, scoped_vars)`` filling url params
            for every template variable; defaults to the non built-in scoped
            variables as ``var-<name>``.
    """

    def __init__(
        self,
        replace_variables: Optional[Callable[..., str]] = None,
        time_range_for_url: Optional[Callable[[], dict]] = None,
        fill_variable_values: Optional[Callable[[dict, ScopedVars], None]] = None,
    ):
        self.replace_variables = replace_variables or default_replace_variables
        self.time_range_for_url = time_range_for_url or (lambda: {})
        self.fill_variable_values = fill_variable_values or _fill_from_scoped_vars

    def get_data_link_ui_model(self, link: DataLink, scoped_vars: ScopedVars) -> LinkModel:
        scoped_vars = scoped_vars or {}
        time_range_url = to_url_params(self.time_range_for_url() or {})

        params: dict[str, Any] = {}
        self.fill_variable_values(params, scoped_vars)
        variables_query = to_url_params(params)

        href = self.replace_variables(link.url, {
            **scoped_vars,
            DataLinkBuiltInVars.keep_time: scoped_var(time_range_url),
            DataLinkBuiltInVars.include_vars: scoped_var(variables_query),
        })
        title = self.replace_variables(link.title or "", scoped_vars)
        logger.debug(f"Resolved link {link.url!r} -> {href!r}", extra=tagged("display"))
        return LinkModel(
            href=href,
            title=title,
            target="_blank" if link.target_blank else "_self",
        )

    def get_link_supplier(self, display: Any) -> Optional[LinkModelSupplier]:
        """Supplier for a ``FieldDisplay``'s links, or None if it has none."""
        links = getattr(display.field, "links", None)
        if not links:
            return None
        return LinkModelSupplier(self, links)

    def __call__(self, options: LinkOptions) -> list[LinkModel]:
        return [self.get_data_link_ui_model(link, options.scoped_vars) for link in options.links]
