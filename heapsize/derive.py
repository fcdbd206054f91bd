"""Deriving memory measurement for dataclasses.

Decorating a dataclass with :func:`size_of_derive` makes its instances
measurable by :func:`heapsize.measure.size_of`.  The inline size of an
instance is the inline size of its fields laid out one after another.
The fields are padded to the largest alignment among them. Its children
are the children of every field not marked with ``field(skip=True)``.

A class may set an ``inline_size`` class attribute to fix its inline size,
which suits a family of variant classes sharing one base class.
"""

from __future__ import annotations

import dataclasses
import threading
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar, overload

from heapsize.context import Context
from heapsize.measure import SizeOf, _align_of, _inline_size, _round_up, size_of_children

__all__ = ["field", "size_of_derive"]

_SKIP_KEY = "heapsize.skip"

_T = TypeVar("_T", bound=type)

# Instances whose children are being walked, per context.
_ACTIVE: weakref.WeakKeyDictionary[Context, set[int]] = weakref.WeakKeyDictionary()
# Instances whose inline size is being computed, per thread.
_LOCAL = threading.local()


def field(*, skip: bool = False, **kwargs: Any) -> Any:
    """A dataclass field; with ``skip=True`` its children are not measured.

    All other keyword arguments are passed to :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_SKIP_KEY] = bool(skip)
    return dataclasses.field(metadata=metadata, **kwargs)


@contextmanager
def _visiting(context: Context, instance: object) -> Iterator[None]:
    active = _ACTIVE.setdefault(context, set())
    key = id(instance)
    if key in active:
        raise ValueError("cannot measure a value that contains itself")
    active.add(key)
    try:
        yield
    finally:
        active.discard(key)


@contextmanager
def _computing_inline(instance: object) -> Iterator[None]:
    active: set[int] | None = getattr(_LOCAL, "active", None)
    if active is None:
        active = _LOCAL.active = set()
    key = id(instance)
    if key in active:
        raise ValueError("cannot measure a value that contains itself inline")
    active.add(key)
    try:
        yield
    finally:
        active.discard(key)


def _has_explicit_inline_size(cls: type) -> bool:
    return any("inline_size" in vars(base) for base in cls.__mro__ if base is not object)


def _make_inline_size(names: tuple[str, ...]) -> property:
    def inline_size(self: Any) -> int:
        with _computing_inline(self):
            total, align = 0, 1
            for name in names:
                size = _inline_size(getattr(self, name))
                total += size
                align = max(align, _align_of(size))
            return _round_up(total, align)

    return property(inline_size, doc="Bytes the fields occupy inline.")


def _make_size_of_children(names: tuple[str, ...]) -> Callable[[Any, Context], None]:
    def size_of_children_method(self: Any, context: Context) -> None:
        if not names:
            return
        with _visiting(context, self):
            for name in names:
                size_of_children(getattr(self, name), context)

    size_of_children_method.__name__ = "size_of_children"
    size_of_children_method.__doc__ = "Add the memory owned by the measured fields."
    return size_of_children_method


@overload
def size_of_derive(cls: _T, *, skip_all: bool = False) -> _T: ...


@overload
def size_of_derive(cls: None = None, *, skip_all: bool = False) -> Callable[[_T], _T]: ...


def size_of_derive(cls: Any = None, *, skip_all: bool = False) -> Any:
    """Make instances of the dataclass ``cls`` measurable.

    Use as ``@size_of_derive`` or ``@size_of_derive(skip_all=True)`` above
    ``@dataclass``.  With ``skip_all`` no children are measured, and the
    class need not be a dataclass.
    """
    if cls is None:
        return lambda target: size_of_derive(target, skip_all=skip_all)
    if not isinstance(cls, type):
        raise TypeError(f"size_of_derive expects a class, got {cls!r}")

    is_dataclass = dataclasses.is_dataclass(cls)
    if not is_dataclass and not skip_all:
        raise TypeError(
            f"cannot derive SizeOf for {cls.__qualname__}: it is not a dataclass; "
            "measure it by hand or use skip_all=True"
        )
    if "size_of_children" in vars(cls):
        raise TypeError(f"{cls.__qualname__} already defines size_of_children")

    all_fields = dataclasses.fields(cls) if is_dataclass else ()
    inline_names = tuple(item.name for item in all_fields)
    measured = () if skip_all else tuple(
        item.name for item in all_fields if not item.metadata.get(_SKIP_KEY, False)
    )

    if not _has_explicit_inline_size(cls):
        cls.inline_size = _make_inline_size(inline_names)
    cls.size_of_children = _make_size_of_children(measured)
    SizeOf.register(cls)
    return cls