"""The running state of a size query."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from heapsize.total_size import TotalSize

__all__ = ["Context"]


def _check(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")


class Context:
    """Tracks totals and already-seen shared objects during a size query.

    The mutating methods return the context itself so calls can be chained.
    """

    def __init__(self) -> None:
        self._total_bytes = 0
        self._excess_bytes = 0
        self._shared_bytes = 0
        self._distinct_allocations = 0
        self._is_shared = False
        # Keyed by id(); the values keep the objects alive so ids stay unique.
        self._pointers: dict[int, object] = {}

    def __repr__(self) -> str:
        return (
            f"Context(total_bytes={self._total_bytes}, "
            f"excess_bytes={self._excess_bytes}, "
            f"shared_bytes={self._shared_bytes}, "
            f"distinct_allocations={self._distinct_allocations}, "
            f"is_shared={self._is_shared}, pointers={len(self._pointers)})"
        )

    @property
    def is_shared(self) -> bool:
        """Whether added bytes are currently being counted as shared."""
        return self._is_shared

    @contextmanager
    def shared(self) -> Iterator[Context]:
        """Count every byte added inside the block as shared."""
        previous = self._is_shared
        self._is_shared = True
        try:
            yield self
        finally:
            self._is_shared = previous

    def add_distinct_allocation(self) -> Context:
        """Record one distinct allocation."""
        return self.add_distinct_allocations(1)

    def add_distinct_allocations(self, allocations: int) -> Context:
        """Record `allocations` distinct allocations."""
        _check("allocations", allocations)
        self._distinct_allocations += allocations
        return self

    def _add_bytes(self, size: int) -> None:
        self._total_bytes += size
        if self._is_shared:
            self._shared_bytes += size

    def add(self, size: int) -> Context:
        """Add `size` bytes, also counted as shared inside a shared block."""
        _check("size", size)
        self._add_bytes(size)
        return self

    def add_shared(self, size: int) -> Context:
        """Add `size` to the shared bytes only."""
        _check("size", size)
        self._shared_bytes += size
        return self

    def add_excess(self, size: int) -> Context:
        """Add `size` bytes that are allocated but unused."""
        _check("size", size)
        self._add_bytes(size)
        self._excess_bytes += size
        return self

    def add_arraylike(self, length: int, element_size: int) -> Context:
        """Add a fully used array of `length` elements."""
        _check("length", length)
        _check("element_size", element_size)
        self._add_bytes(length * element_size)
        return self

    def add_vectorlike(self, length: int, capacity: int, element_size: int) -> Context:
        """Add a growable buffer; the unused capacity counts as excess."""
        _check("length", length)
        _check("capacity", capacity)
        _check("element_size", element_size)
        if capacity < length:
            raise ValueError(f"capacity {capacity} is smaller than length {length}")
        used = length * element_size
        allocated = capacity * element_size
        self._add_bytes(allocated)
        self._excess_bytes += allocated - used
        return self

    def insert_ptr(self, obj: object) -> bool:
        """Remember `obj`; return True if it had not been seen before."""
        key = id(obj)
        if key in self._pointers:
            return False
        self._pointers[key] = obj
        return True

    def add_ptr(self, obj: object) -> Context:
        """Remember `obj` whether or not it was seen before."""
        self.insert_ptr(obj)
        return self

    def contains_ptr(self, obj: object) -> bool:
        """Whether `obj` has been seen by this context."""
        return id(obj) in self._pointers

    def total_size(self) -> TotalSize:
        """The totals gathered so far."""
        return TotalSize(
            self._total_bytes,
            self._excess_bytes,
            self._shared_bytes,
            self._distinct_allocations,
        )