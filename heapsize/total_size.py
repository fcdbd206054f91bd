"""Aggregated memory totals produced by a size query."""

from __future__ import annotations

from dataclasses import dataclass, fields

__all__ = ["TotalSize"]


@dataclass(frozen=True, order=True)
class TotalSize:
    """The total space taken up by a value, including its heap allocations."""

    total_bytes: int = 0
    excess_bytes: int = 0
    shared_bytes: int = 0
    distinct_allocations: int = 0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{item.name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{item.name} cannot be negative, got {value}")

    @classmethod
    def zero(cls) -> TotalSize:
        """A size where every count is zero."""
        return cls()

    @classmethod
    def total(cls, total: int) -> TotalSize:
        """A size of `total` bytes with every other count at zero."""
        return cls(total_bytes=total)

    @property
    def used_bytes(self) -> int:
        """Bytes actually in use: total bytes minus excess bytes."""
        used = self.total_bytes - self.excess_bytes
        if used < 0:
            raise ValueError("excess bytes exceed total bytes")
        return used

    def __add__(self, other: object) -> TotalSize:
        if not isinstance(other, TotalSize):
            return NotImplemented
        return TotalSize(
            self.total_bytes + other.total_bytes,
            self.excess_bytes + other.excess_bytes,
            self.shared_bytes + other.shared_bytes,
            self.distinct_allocations + other.distinct_allocations,
        )

    def __radd__(self, other: object) -> TotalSize:
        # Lets the builtin sum() start from 0.
        if other == 0:
            return self
        if isinstance(other, TotalSize):
            return other.__add__(self)
        return NotImplemented

    def __sub__(self, other: object) -> TotalSize:
        if not isinstance(other, TotalSize):
            return NotImplemented
        return TotalSize(
            self.total_bytes - other.total_bytes,
            self.excess_bytes - other.excess_bytes,
            self.shared_bytes - other.shared_bytes,
            self.distinct_allocations - other.distinct_allocations,
        )