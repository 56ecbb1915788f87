"""
Tensor interface definitions.

This module defines the domain-level interface for type-erased tensors using
structural typing. The interface captures what the bridge and the operators
need from a tensor: its dimensions, its element type descriptor, its device,
and byte-level access to its storage.

Notes
-----
The element type is exposed as an opaque ``meta`` object (a `TypeMeta` in
the infrastructure layer) so this module stays free of NumPy.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from .device._device_protocol import DeviceLike


@runtime_checkable
class ITensor(Protocol):
    """
    Type-erased, resizable tensor interface.

    A tensor is *uninitialized* until its first `resize`: its shape is then
    ``None`` and its size is ``-1``.
    """

    @property
    def shape(self) -> Optional[tuple[int, ...]]:
        """Return the tensor's dimensions, or None if never resized."""
        ...

    @property
    def ndim(self) -> int:
        """Return the number of dimensions (0 when uninitialized)."""
        ...

    @property
    def size(self) -> int:
        """Return the element count, or -1 when uninitialized."""
        ...

    @property
    def meta(self) -> Any:
        """Return the element type descriptor."""
        ...

    @property
    def nbytes(self) -> int:
        """Return ``size * meta.itemsize`` (0 when no type is set)."""
        ...

    @property
    def device(self) -> DeviceLike:
        """Return the device on which this tensor resides."""
        ...

    def resize(self, dims: Sequence[int]) -> None:
        """Change the dimensions, keeping storage when capacity suffices."""
        ...

    def raw_data(self) -> Any:
        """Return the storage for read access."""
        ...

    def raw_mutable_data(self, meta: Any) -> Any:
        """Return storage typed as `meta`, allocating it if needed."""
        ...
