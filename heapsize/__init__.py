"""Estimate the total memory used by a value, heap allocations included.

Submodules: measure (size queries), derive (dataclass support), context,
total_size, estimates and human_bytes.
"""

__version__ = "0.1.5"

__all__ = ["context", "derive", "estimates", "human_bytes", "measure", "total_size"]