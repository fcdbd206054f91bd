# heapsize

Estimate how much memory a value takes up in total: the value itself plus
everything it owns, such as the buffers of strings, lists and maps. The
numbers come from a fixed model of a 64-bit machine, not from the
interpreter's own object sizes, so they describe how large the data would be
laid out as plain structs, vectors and hash tables.

## Installation

```
pip install heapsize
```

## Measuring values

```python
from heapsize.measure import size_of, size_of_values

size = size_of(["a", "b", "c"])
print(size.total_bytes, size.excess_bytes, size.shared_bytes)
print(size.distinct_allocations, size.used_bytes)

# Several values measured into one total
combined = size_of_values([["a", "b"], {"key": 1}])
```

`size_of` returns a `TotalSize`, a frozen dataclass with four counts:

- `total_bytes`: every byte counted, including unused capacity
- `excess_bytes`: bytes allocated but not in use
- `shared_bytes`: bytes counted as shared (see `Context.shared` below)
- `distinct_allocations`: how many separate allocations were seen

`used_bytes` is a property giving `total_bytes - excess_bytes`.
`TotalSize` values can be added, subtracted and compared, and `sum()` works
on a list of them. `TotalSize.zero()` and `TotalSize.total(n)` build common
values.

The model covers `None`, `bool`, `int` (up to 128 bits), `float`,
`complex`, `str`, `bytes`, `bytearray`, `array.array`, `list`,
`collections.deque`, `tuple`, `dict`, `set`, `frozenset`, `range`, enum
members, `pathlib` paths, IPv4 and IPv6 addresses, `datetime` values,
functions, weak references, `TotalSize` and `HumanBytes`. Any other type
raises `TypeError`, and a container that contains itself raises
`ValueError`.

## Your own types

Subclass `heapsize.measure.SizeOf`, set `inline_size` and implement
`size_of_children(context)`, or use the decorator from `heapsize.derive`
on a dataclass:

```python
from dataclasses import dataclass
from heapsize.derive import size_of_derive, field

@size_of_derive
@dataclass
class Record:
    name: str
    tags: list
    cache: dict = field(skip=True, default_factory=dict)
```

The derived inline size is the inline size of all fields laid out in a row
and padded to their largest alignment; a class may instead set its own
`inline_size` attribute. Fields marked with `field(skip=True)` still count
inline but their children are not measured, and
`@size_of_derive(skip_all=True)` measures no children at all (the class then
need not be a dataclass).

For types you do not own, `heapsize.measure.register(type_, handler)`
installs a handler for the type and its subclasses. `handler(value,
context)` adds whatever the value owns to the `Context` and returns the
value's inline size in bytes.

## Lower-level pieces

`heapsize.context.Context` accumulates the counts during a walk. Its `add`,
`add_excess`, `add_shared`, `add_arraylike`, `add_vectorlike` and
`add_distinct_allocation(s)` methods return the context so calls chain;
`with context.shared():` counts every byte added inside the block as shared
too. `insert_ptr`, `add_ptr` and `contains_ptr` remember objects already
seen, so a handler can count shared data only once. `total_size()` returns
the current `TotalSize`.

`heapsize.estimates` holds the estimates used for hash tables and B-trees:
`capacity_to_buckets`, `calculate_layout_for`, `estimate_hashmap_size` and
`estimate_btree_size`.

`heapsize.human_bytes.HumanBytes` formats a byte count in binary units, so
`str(HumanBytes(1536))` is `1.50 KiB`.

## What it does not do

- It does not report the memory the Python interpreter actually uses for an
  object; it applies the fixed model described above.
- The built-in measurement does not detect values reached more than once:
  the same list held in two places is counted twice. Sharing is only
  tracked where a `SizeOf` subclass or a registered handler uses
  `Context.insert_ptr` and `Context.shared` itself.
- There is no command-line tool; the package is used as a library.