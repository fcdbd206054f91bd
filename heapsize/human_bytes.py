"""Readable formatting of byte counts."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["HumanBytes"]

_KB = 1024.0
_UNITS = (
    ("EiB", _KB**6),
    ("PiB", _KB**5),
    ("TiB", _KB**4),
    ("GiB", _KB**3),
    ("MiB", _KB**2),
    ("KiB", _KB),
)
_MAX = 2**64 - 1


@dataclass(frozen=True, order=True)
class HumanBytes:
    """A byte count that prints in binary units, e.g. ``1.50 KiB``."""

    bytes: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.bytes, int) or isinstance(self.bytes, bool):
            raise TypeError(f"bytes must be an int, got {self.bytes!r}")
        if not 0 <= self.bytes <= _MAX:
            raise ValueError(f"bytes must be between 0 and {_MAX}, got {self.bytes}")

    def __str__(self) -> str:
        amount = float(self.bytes)
        for unit, scale in _UNITS:
            if amount / scale > 1.0:
                return f"{amount / scale:.2f} {unit}"
        return f"{self.bytes} B"

    def __int__(self) -> int:
        return self.bytes