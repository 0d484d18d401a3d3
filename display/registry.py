"""
Generic lazily-initialized registry of named items.

Items are dataclass-like objects with an ``id``, a ``name`` and optional
``alias_ids``. The item list comes from an init callable that runs once,
on first access, under a lock; afterwards the registry is read-only.

Usage:
    reducers = Registry(lambda: [ReducerInfo(id="sum", name="Total", ...)])
    reducers.get("total")     # alias lookup
    reducers.list(["sum", "nope"])  # unknown ids are skipped
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


class Registry(Generic[T]):
    """Registry of items keyed by id and alias ids."""

    def __init__(self, init: Callable[[], Iterable[T]]):
        self._init = init
        self._ordered: list[T] = []
        self._by_id: dict[str, T] = {}
        self._initialized = False
        self._lock = threading.Lock()

    def _ensure(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            for item in self._init():
                self._register(item)
            self._initialized = True

    def _register(self, item: T) -> None:
        item_id = getattr(item, "id")
        if item_id in self._by_id:
            raise ValueError(f"Duplicate registry id: {item_id}")
        self._ordered.append(item)
        self._by_id[item_id] = item
        for alias in getattr(item, "alias_ids", None) or []:
            self._by_id.setdefault(alias, item)

    def get_if_exists(self, id: str | None) -> T | None:
        if not id:
            return None
        self._ensure()
        return self._by_id.get(id)

    def get(self, id: str) -> T:
        """Item for an id or alias.

        Raises:
            KeyError: If the id is not registered.
        """
        item = self.get_if_exists(id)
        if item is None:
            raise KeyError(f"Unknown registry id: {id}")
        return item

    def list(self, ids: Iterable[str] | None = None) -> list[T]:
        """All items, or the items for ``ids`` in that order (unknown ids skipped)."""
        self._ensure()
        if ids is None:
            return list(self._ordered)
        found = []
        for i in ids:
            item = self._by_id.get(i)
            if item is not None:
                found.append(item)
        return found

    def ids(self) -> list[str]:
        self._ensure()
        return [getattr(item, "id") for item in self._ordered]

    def select_options(self) -> list[dict[str, Any]]:
        """``[{value, label, description}]`` for option pickers."""
        self._ensure()
        return [
            {
                "value": getattr(item, "id"),
                "label": getattr(item, "name"),
                "description": getattr(item, "description", ""),
            }
            for item in self._ordered
        ]

    def __contains__(self, id: str) -> bool:
        return self.get_if_exists(id) is not None

    def __len__(self) -> int:
        self._ensure()
        return len(self._ordered)
