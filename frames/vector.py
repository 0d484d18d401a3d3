"""
Value storage for frame columns.

Every column is backed by a Vector: a small mutable-sequence contract
(length, get/set by logical index, add, to_array). Frames only ever talk
to this interface, so the storage can be swapped at construction time:

    ArrayVector     growable list, unbounded
    CircularVector  fixed capacity, evicts once full
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator

import numpy as np


class Vector(ABC):
    """Abstract column storage."""

    @property
    @abstractmethod
    def length(self) -> int:
        ...

    @abstractmethod
    def get(self, index: int) -> Any:
        ...

    def set(self, index: int, value: Any) -> None:
        raise TypeError(f"{type(self).__name__} is read-only")

    def add(self, value: Any) -> None:
        raise TypeError(f"{type(self).__name__} is read-only")

    def reverse(self) -> None:
        raise TypeError(f"{type(self).__name__} is read-only")

    def to_array(self) -> list:
        """Materialize the logical sequence as a new list."""
        return [self.get(i) for i in range(self.length)]

    def to_numpy(self, dtype=None) -> np.ndarray:
        return np.asarray(self.to_array(), dtype=dtype)

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[Any]:
        for i in range(self.length):
            yield self.get(i)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_array()!r})"


class ArrayVector(Vector):
    """List-backed vector with unbounded growth."""

    def __init__(self, buffer: Iterable[Any] | None = None):
        self.buffer: list = list(buffer) if buffer is not None else []

    @property
    def length(self) -> int:
        return len(self.buffer)

    def get(self, index: int) -> Any:
        if 0 <= index < len(self.buffer):
            return self.buffer[index]
        return None

    def set(self, index: int, value: Any) -> None:
        # Writing past the end grows the buffer, padding the gap with None
        if index < 0:
            raise IndexError(f"Negative index {index}")
        while len(self.buffer) <= index:
            self.buffer.append(None)
        self.buffer[index] = value

    def add(self, value: Any) -> None:
        self.buffer.append(value)

    def reverse(self) -> None:
        self.buffer.reverse()

    def to_array(self) -> list:
        return list(self.buffer)


class CircularVector(Vector):
    """Fixed-capacity ring buffer.

    In ``tail`` mode (default) new values go to the end of the logical
    sequence and, once full, the oldest value (logical index 0) is dropped.
    In ``head`` mode new values go to logical index 0 and, once full, the
    value at the far end is overwritten.

    ``get``/``set`` use logical indexes, never physical buffer positions.
    """

    def __init__(
        self,
        capacity: int | None = None,
        append: str = "tail",
        buffer: Iterable[Any] | None = None,
    ):
        if append not in ("head", "tail"):
            raise ValueError(f"append must be 'head' or 'tail', got '{append}'")
        self.buffer: list = list(buffer) if buffer is not None else []
        self.capacity = len(self.buffer)
        self.tail = append != "head"
        self.index = 0  # physical position of logical index 0
        if capacity:
            self.set_capacity(capacity)
        if self.capacity < 1:
            raise ValueError("CircularVector requires a positive capacity")

    @property
    def length(self) -> int:
        return len(self.buffer)

    def _physical(self, index: int) -> int:
        return (index + self.index) % len(self.buffer)

    def get(self, index: int) -> Any:
        if not self.buffer:
            return None
        return self.buffer[self._physical(index)]

    def set(self, index: int, value: Any) -> None:
        if not self.buffer:
            self.add(value)
            return
        self.buffer[self._physical(index)] = value

    def add(self, value: Any) -> None:
        # Still filling up: grow the buffer itself
        if len(self.buffer) < self.capacity:
            if self.tail:
                self.buffer.append(value)
            else:
                self.buffer.insert(0, value)
            return

        if self.tail:
            self.buffer[self.index] = value
            self.index = (self.index + 1) % len(self.buffer)
        else:
            idx = self.index - 1
            if idx < 0:
                idx = len(self.buffer) - 1
            self.buffer[idx] = value
            self.index = idx

    def set_capacity(self, capacity: int) -> None:
        """Change the capacity, re-laying the buffer out in logical order.

        Shrinking keeps the newest values in tail mode and the first values
        in head mode.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if capacity == self.capacity and self.index == 0:
            return
        copy = self.to_array()
        if len(copy) > capacity:
            delta = len(copy) - capacity
            if self.tail:
                copy = copy[delta:]
            else:
                copy = copy[: len(copy) - delta]
        self.buffer = copy
        self.capacity = capacity
        self.index = 0

    def set_append_mode(self, mode: str) -> None:
        if mode not in ("head", "tail"):
            raise ValueError(f"append must be 'head' or 'tail', got '{mode}'")
        tail = mode != "head"
        if tail != self.tail:
            self.buffer = list(reversed(self.to_array()))
            self.index = 0
            self.tail = tail

    def reverse(self) -> None:
        self.buffer = list(reversed(self.to_array()))
        self.index = 0
