"""Size estimates for hash tables and B-trees."""

from __future__ import annotations

__all__ = [
    "POINTER_SIZE",
    "GROUP_WIDTH",
    "BTREE_B",
    "capacity_to_buckets",
    "calculate_layout_for",
    "estimate_hashmap_size",
    "estimate_btree_size",
]

POINTER_SIZE = 8
"""Size of a pointer or machine word on the modelled 64-bit target."""

GROUP_WIDTH = 8
"""Width of a hash table control group on a 64-bit target."""

BTREE_B = 6
_BTREE_MAX = 2 * BTREE_B - 1
_BTREE_MIN = BTREE_B - 1


def _check(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")


def capacity_to_buckets(capacity: int) -> int:
    """Number of buckets a hash table needs to hold `capacity` elements."""
    _check("capacity", capacity)
    if capacity == 0:
        return 0
    if capacity < 4:
        return 4
    if capacity < 8:
        return 8
    adjusted = capacity * 8 // 7
    return 1 << (adjusted - 1).bit_length()


def calculate_layout_for(entry_size: int, entry_align: int, buckets: int) -> int:
    """Bytes of a hash table allocation holding `buckets` entries."""
    _check("entry_size", entry_size)
    _check("buckets", buckets)
    if entry_align < 1 or entry_align & (entry_align - 1):
        raise ValueError(f"entry_align must be a power of two, got {entry_align}")
    align = max(entry_align, GROUP_WIDTH)
    ctrl_offset = (entry_size * buckets + align - 1) & ~(align - 1)
    return ctrl_offset + buckets + GROUP_WIDTH


def estimate_hashmap_size(
    entry_size: int, entry_align: int, length: int, capacity: int
) -> tuple[int, int]:
    """Return (allocated bytes, used bytes) of a hash table."""
    _check("length", length)
    if capacity == 0:
        return (0, 0)
    buckets = capacity_to_buckets(capacity)
    table_layout = calculate_layout_for(entry_size, entry_align, buckets)
    used_layout = calculate_layout_for(entry_size, entry_align, length)
    return (table_layout, used_layout)


def _round_up(value: int, align: int) -> int:
    return (value + align - 1) // align * align


def estimate_btree_size(key_size: int, value_size: int, length: int) -> int:
    """Estimated bytes of B-tree nodes holding `length` entries.

    A node holds a parent pointer, two 16-bit counters and room for
    2*B - 1 keys and values; nodes are assumed half-way between their
    minimum and maximum fill.
    """
    _check("key_size", key_size)
    _check("value_size", value_size)
    _check("length", length)
    node = _round_up(
        POINTER_SIZE + 2 + 2 + _BTREE_MAX * key_size + _BTREE_MAX * value_size,
        POINTER_SIZE,
    )
    return length * node * 2 // (_BTREE_MAX + _BTREE_MIN)