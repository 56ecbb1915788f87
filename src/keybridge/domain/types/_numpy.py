"""
Domain-level structural typing for NumPy-like n-dimensional arrays.

This module defines :class:`NDArrayLike`, a backend-agnostic Protocol
representing the external array objects that the tensor bridge consumes and
produces, without introducing a dependency on NumPy in the domain layer.

Only the members the bridge relies on are modeled: shape and rank, element
count, dtype, contiguity flags and byte size.
"""

from __future__ import annotations

from typing import Any, Protocol, Tuple, runtime_checkable


@runtime_checkable
class NDArrayLike(Protocol):
    """
    Structural typing interface for objects that behave like NumPy ndarrays.

    Notes
    -----
    - This is a *Protocol*, not a concrete base class.
    - ``numpy.ndarray`` satisfies it.
    """

    @property
    def shape(self) -> Tuple[int, ...]:
        """Size of each dimension."""
        ...

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        ...

    @property
    def size(self) -> int:
        """Total number of elements."""
        ...

    @property
    def dtype(self) -> Any:
        """Backend-defined dtype object (e.g., ``numpy.dtype``)."""
        ...

    @property
    def flags(self) -> Any:
        """Memory-layout flags (``C_CONTIGUOUS`` and friends)."""
        ...

    @property
    def nbytes(self) -> int:
        """Total bytes consumed by the elements."""
        ...

    def reshape(self, *shape: int) -> "NDArrayLike": ...
