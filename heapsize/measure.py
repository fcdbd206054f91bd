"""Measuring how much memory a value and everything it owns occupies.

Values are measured against a model of a 64-bit machine where every
builtin has a fixed inline size and owns its heap buffers exclusively:

* ``None`` and ``()`` occupy nothing; ``bool`` is one byte; ``float`` is
  eight bytes and ``complex`` sixteen.
* ``int`` is an eight-byte word, or sixteen bytes when it needs more than
  64 bits; larger integers cannot be measured.
* ``str`` and ``bytearray`` are growable buffers (24 bytes inline) that own
  their contents; ``bytes`` is a boxed slice (16 bytes inline).
* ``list`` and ``array.array`` are growable arrays (24 bytes inline),
  ``collections.deque`` a ring buffer (32 bytes inline); each slot is as
  large as the largest element.
* ``tuple`` is stored inline, its elements laid out by decreasing
  alignment and padded to the largest one.
* ``dict``, ``set`` and ``frozenset`` are hash tables (48 bytes inline)
  whose allocation is estimated from their length.
* Enum members are fieldless tags as small as their member count allows.

Further types can be measured by subclassing :class:`SizeOf` or by
calling :func:`register`.
"""

from __future__ import annotations

import array
import datetime
import enum
import ipaddress
import os
import pathlib
import types
import weakref
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from heapsize.context import Context
from heapsize.estimates import POINTER_SIZE, estimate_hashmap_size
from heapsize.human_bytes import HumanBytes
from heapsize.total_size import TotalSize

__all__ = [
    "SizeOf",
    "register",
    "size_of",
    "size_of_with_context",
    "size_of_children",
    "size_of_values",
]

_WORD = POINTER_SIZE
_VEC_SIZE = 3 * _WORD
_BOXED_SLICE_SIZE = 2 * _WORD
_DEQUE_SIZE = 4 * _WORD
_HASHMAP_SIZE = 6 * _WORD
_PATH_ELEM_SIZE = 2 if os.name == "nt" else 1


class SizeOf(ABC):
    """Base for values that report the memory they own.

    ``inline_size`` is the number of bytes the value itself occupies;
    :meth:`size_of_children` adds everything it owns beyond that.
    """

    inline_size: int = 0

    @abstractmethod
    def size_of_children(self, context: Context) -> None:
        """Add the memory owned by this value, not the value itself."""


@dataclass(frozen=True)
class _Handler:
    inline: Callable[[Any], int]
    children: Callable[[Any, Context], None]


_HANDLERS: dict[type, _Handler] = {}

# Containers currently being walked, per context, to refuse cycles.
_ACTIVE: weakref.WeakKeyDictionary[Context, set[int]] = weakref.WeakKeyDictionary()


def register(type_: type, handler: Callable[[Any, Context], int]) -> Callable[[Any, Context], int]:
    """Teach the measurer about ``type_`` and its subclasses.

    ``handler(value, context)`` must add the memory owned by ``value`` to
    ``context`` and return the inline size of ``value`` in bytes.  The
    handler is returned unchanged.
    """
    if not isinstance(type_, type):
        raise TypeError(f"expected a type, got {type_!r}")
    if not callable(handler):
        raise TypeError(f"handler must be callable, got {handler!r}")

    def inline(value: Any) -> int:
        return _checked_size(handler(value, Context()), type(value))

    def children(value: Any, context: Context) -> None:
        handler(value, context)

    _HANDLERS[type_] = _Handler(inline, children)
    return handler


def size_of(value: Any) -> TotalSize:
    """The total size of ``value``, including everything it owns."""
    context = Context()
    size_of_with_context(value, context)
    return context.total_size()


def size_of_values(values: Iterable[Any]) -> TotalSize:
    """The combined size of ``values``; shared data is counted once."""
    context = Context()
    for value in values:
        size_of_with_context(value, context)
    return context.total_size()


def size_of_with_context(value: Any, context: Context) -> None:
    """Add ``value`` itself and everything it owns to ``context``."""
    context.add(_inline_size(value))
    size_of_children(value, context)


def size_of_children(value: Any, context: Context) -> None:
    """Add everything ``value`` owns, but not ``value`` itself, to ``context``."""
    if isinstance(value, SizeOf):
        value.size_of_children(context)
    else:
        _handler_for(value).children(value, context)


def _handler_for(value: Any) -> _Handler:
    for cls in type(value).__mro__:
        handler = _HANDLERS.get(cls)
        if handler is not None:
            return handler
    raise TypeError(f"cannot measure values of type {type(value).__qualname__}")


def _checked_size(size: Any, owner: type) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise ValueError(
            f"inline size of {owner.__qualname__} must be a non-negative int, got {size!r}"
        )
    return size


def _inline_size(value: Any) -> int:
    if isinstance(value, SizeOf):
        return _checked_size(value.inline_size, type(value))
    return _handler_for(value).inline(value)


def _align_of(size: int) -> int:
    if size == 0:
        return 1
    return min(size & -size, _WORD)


def _round_up(value: int, align: int) -> int:
    return (value + align - 1) // align * align


def _slot_layout(values: Iterable[Any]) -> tuple[int, int]:
    """Size and alignment of a slot wide enough for every value."""
    size, align = 0, 1
    for value in values:
        item = _inline_size(value)
        size = max(size, item)
        align = max(align, _align_of(item))
    return _round_up(size, align), align


@contextmanager
def _visiting(context: Context, container: object) -> Iterator[None]:
    active = _ACTIVE.setdefault(context, set())
    key = id(container)
    if key in active:
        raise ValueError("cannot measure a value that contains itself")
    active.add(key)
    try:
        yield
    finally:
        active.discard(key)


def _no_children(value: Any, context: Context) -> None:
    pass


def _fixed(size: int) -> _Handler:
    return _Handler(lambda _value: size, _no_children)


def _int_inline(value: int) -> int:
    if -(2**63) <= value < 2**64:
        return 8
    if -(2**127) <= value < 2**128:
        return 16
    raise OverflowError(f"integer {value} does not fit in 128 bits")


def _buffer_children(length: int, element_size: int, context: Context) -> None:
    if length:
        context.add_vectorlike(length, length, element_size).add_distinct_allocation()


def _str_children(value: str, context: Context) -> None:
    _buffer_children(len(value.encode("utf-8", "surrogatepass")), 1, context)


def _bytes_children(value: bytes, context: Context) -> None:
    if value:
        context.add(len(value)).add_distinct_allocation()


def _bytearray_children(value: bytearray, context: Context) -> None:
    _buffer_children(len(value), 1, context)


def _array_children(value: array.array, context: Context) -> None:
    _buffer_children(len(value), value.itemsize, context)


def _path_children(value: pathlib.PurePath, context: Context) -> None:
    text = str(value)
    if _PATH_ELEM_SIZE == 2:
        length = len(text.encode("utf-16-le", "surrogatepass")) // 2
    else:
        length = len(os.fsencode(text))
    _buffer_children(length, _PATH_ELEM_SIZE, context)


def _sequence_children(value: Any, context: Context) -> None:
    if not value:
        return
    with _visiting(context, value):
        slot, _ = _slot_layout(value)
        if slot:
            context.add_vectorlike(len(value), len(value), slot).add_distinct_allocation()
        for element in value:
            size_of_children(element, context)


def _tuple_inline(value: tuple) -> int:
    total, align = 0, 1
    for element in value:
        size = _inline_size(element)
        total += size
        align = max(align, _align_of(size))
    return _round_up(total, align)


def _tuple_children(value: tuple, context: Context) -> None:
    with _visiting(context, value):
        for element in value:
            size_of_children(element, context)


def _add_table(context: Context, entry_size: int, entry_align: int, length: int) -> None:
    total_bytes, used_bytes = estimate_hashmap_size(entry_size, entry_align, length, length)
    context.add(used_bytes).add_excess(total_bytes - used_bytes).add_distinct_allocation()


def _dict_children(value: dict, context: Context) -> None:
    if not value:
        return
    with _visiting(context, value):
        key_size, key_align = _slot_layout(value.keys())
        value_size, value_align = _slot_layout(value.values())
        align = max(key_align, value_align)
        _add_table(context, _round_up(key_size + value_size, align), align, len(value))
        for key, item in value.items():
            size_of_children(key, context)
            size_of_children(item, context)


def _set_children(value: set | frozenset, context: Context) -> None:
    if not value:
        return
    with _visiting(context, value):
        key_size, key_align = _slot_layout(value)
        _add_table(context, key_size, key_align, len(value))
        for key in value:
            size_of_children(key, context)


def _enum_inline(value: enum.Enum) -> int:
    count = len(type(value))
    if count <= 1:
        return 0
    return ((count - 1).bit_length() + 7) // 8


_HANDLERS.update(
    {
        type(None): _fixed(0),
        bool: _fixed(1),
        int: _Handler(_int_inline, _no_children),
        float: _fixed(8),
        complex: _fixed(16),
        str: _Handler(lambda _v: _VEC_SIZE, _str_children),
        bytes: _Handler(lambda _v: _BOXED_SLICE_SIZE, _bytes_children),
        bytearray: _Handler(lambda _v: _VEC_SIZE, _bytearray_children),
        array.array: _Handler(lambda _v: _VEC_SIZE, _array_children),
        list: _Handler(lambda _v: _VEC_SIZE, _sequence_children),
        deque: _Handler(lambda _v: _DEQUE_SIZE, _sequence_children),
        tuple: _Handler(_tuple_inline, _tuple_children),
        dict: _Handler(lambda _v: _HASHMAP_SIZE, _dict_children),
        set: _Handler(lambda _v: _HASHMAP_SIZE, _set_children),
        frozenset: _Handler(lambda _v: _HASHMAP_SIZE, _set_children),
        range: _fixed(3 * _WORD),
        enum.Enum: _Handler(_enum_inline, _no_children),
        pathlib.PurePath: _Handler(lambda _v: _VEC_SIZE, _path_children),
        ipaddress.IPv4Address: _fixed(4),
        ipaddress.IPv6Address: _fixed(16),
        datetime.timedelta: _fixed(16),
        datetime.datetime: _fixed(16),
        datetime.date: _fixed(4),
        datetime.time: _fixed(8),
        weakref.ref: _fixed(_WORD),
        types.FunctionType: _fixed(_WORD),
        types.BuiltinFunctionType: _fixed(_WORD),
        TotalSize: _fixed(4 * _WORD),
        HumanBytes: _fixed(8),
    }
)