"""
Type-erased tensor implementation.

This module provides `Tensor`, a resizable, type-erased n-dimensional
container bound to a device context, and its two concrete flavors:

- `TensorCPU`: storage is a flat NumPy buffer owned by a `CPUContext`.
- `TensorCUDA`: storage is a `_CudaStorage` allocation owned by a
  `CUDAContext`.

A tensor carries its dimensions, an element type descriptor (`TypeMeta`) and
an untyped storage. Its element type is not fixed at construction: the first
call to `raw_mutable_data(meta)` (or `mutable_data(meta)` on CPU) decides it,
and a later call with a different type discards the old storage and
allocates anew.

Lifecycle
---------
- A freshly constructed tensor is *uninitialized*: ``shape is None`` and
  ``size == -1``. Its storage cannot be read or allocated until `resize`
  has been called, including ``resize([])`` for a scalar.
- `resize` changes the dimensions. Storage is kept when its capacity
  (in elements) still covers the new size, otherwise it is released and
  re-allocated on the next mutable access.
- `reset` returns the tensor to the uninitialized state.

Design notes
------------
- Storage is opaque to the tensor: all allocation and byte movement goes
  through the context, so the same class serves CPU and CUDA.
- Typed NumPy views (`data`, `mutable_data`) are only offered by
  `TensorCPU`, since CUDA storage is not host-addressable.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Sequence, Type

import numpy as np

from ...domain._errors import PreconditionError, enforce
from ...domain.device._device import Device
from ..context._base import BaseContext
from ..context._cpu import CPUContext
from ..context._cuda import CUDAContext
from ..types._type_meta import TypeMeta, UNDEFINED


def _normalize_dims(dims: Sequence[int]) -> tuple[int, ...]:
    out = []
    for d in dims:
        d_i = int(d)
        if d_i < 0:
            raise ValueError(f"Tensor dimensions must be >= 0, got {tuple(dims)}")
        out.append(d_i)
    return tuple(out)


class Tensor:
    """
    Resizable, type-erased tensor bound to a device context.

    Parameters
    ----------
    context : BaseContext, optional
        Context that owns the storage. Defaults to a fresh instance of the
        class's `context_cls`.

    Notes
    -----
    Subclasses pin `context_cls`; constructing a tensor with a context of
    another kind raises `PreconditionError`.
    """

    context_cls: ClassVar[Type[BaseContext]] = BaseContext

    def __init__(self, context: Optional[BaseContext] = None) -> None:
        if context is None:
            context = self.context_cls()
        enforce(
            isinstance(context, self.context_cls),
            f"{type(self).__name__} requires a {self.context_cls.__name__}, ",
            f"got {type(context).__name__}",
            error=PreconditionError,
        )
        self._context = context
        self._dims: Optional[tuple[int, ...]] = None
        self._size = -1
        self._meta: TypeMeta = UNDEFINED
        self._storage: Any = None
        self._capacity = 0

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    @property
    def context(self) -> BaseContext:
        return self._context

    @property
    def device(self) -> Device:
        return self._context.device

    @property
    def shape(self) -> Optional[tuple[int, ...]]:
        return self._dims

    @property
    def ndim(self) -> int:
        return 0 if self._dims is None else len(self._dims)

    @property
    def size(self) -> int:
        return self._size

    @property
    def meta(self) -> TypeMeta:
        return self._meta

    @property
    def itemsize(self) -> int:
        return self._meta.itemsize

    @property
    def nbytes(self) -> int:
        if self._size < 0 or not self._meta:
            return 0
        return self._size * self._meta.itemsize

    def is_initialized(self) -> bool:
        """Return True once the tensor has been resized at least once."""
        return self._dims is not None

    def dim(self, i: int) -> int:
        enforce(self._dims is not None, "Tensor is not initialized.", error=PreconditionError)
        return self._dims[i]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self._dims}, "
            f"meta={self._meta.name}, device={self.device})"
        )

    # ------------------------------------------------------------------
    # Shape management
    # ------------------------------------------------------------------
    def resize(self, dims: Sequence[int]) -> None:
        """
        Set the tensor's dimensions.

        Parameters
        ----------
        dims : Sequence[int]
            New dimensions. An empty sequence makes the tensor a scalar
            (size 1).

        Raises
        ------
        ValueError
            If any dimension is negative.
        """
        new_dims = _normalize_dims(dims)
        new_size = int(np.prod(new_dims, dtype=np.int64)) if new_dims else 1
        self._dims = new_dims
        self._size = new_size
        if self._storage is not None and new_size > self._capacity:
            self._free_storage()

    def bind_context(self, context: BaseContext) -> None:
        """
        Rebind the tensor to `context`.

        Storage allocated on another device is released; dimensions and
        element type are kept.
        """
        enforce(
            isinstance(context, self.context_cls),
            f"{type(self).__name__} requires a {self.context_cls.__name__}, ",
            f"got {type(context).__name__}",
            error=PreconditionError,
        )
        if context.device != self._context.device:
            self._free_storage()
        self._context = context

    def reset(self) -> None:
        """Release the storage and return to the uninitialized state."""
        self._free_storage()
        self._dims = None
        self._size = -1
        self._meta = UNDEFINED

    def _free_storage(self) -> None:
        if self._storage is not None:
            self._context.release_storage(self._storage)
        self._storage = None
        self._capacity = 0

    # ------------------------------------------------------------------
    # Storage access
    # ------------------------------------------------------------------
    def raw_data(self) -> Any:
        """
        Return the storage for read access.

        Raises
        ------
        PreconditionError
            If the tensor is uninitialized, or has elements but no
            allocated storage.
        """
        enforce(self._size >= 0, "Tensor is not initialized.", error=PreconditionError)
        enforce(
            self._storage is not None or self._size == 0,
            "The tensor is of non-zero shape, but its data is not allocated yet.",
            error=PreconditionError,
        )
        return self._storage

    def raw_mutable_data(self, meta: TypeMeta) -> Any:
        """
        Return storage typed as `meta`, allocating it if needed.

        If the tensor already holds storage of type `meta` large enough for
        its current size, that storage is returned unchanged. Otherwise the
        old storage is released, the tensor is retyped to `meta` and fresh
        storage is allocated.

        Raises
        ------
        PreconditionError
            If the tensor has not been resized yet, or `meta` is undefined.
        """
        enforce(
            self._size >= 0,
            "Tensor is not initialized. You probably need to call resize() ",
            "before calling mutable_data().",
            error=PreconditionError,
        )
        enforce(meta, "Cannot allocate storage for an undefined type.", error=PreconditionError)
        if self._meta == meta and self._storage is not None:
            return self._storage
        self._free_storage()
        self._meta = meta
        self._storage = self._context.new_storage(meta, self._size)
        self._capacity = self._size
        return self._storage

    def _check_meta(self, meta: TypeMeta) -> None:
        enforce(
            self._meta == meta,
            "Tensor type mismatch, caller expects elements to be ",
            meta.name,
            " while tensor contains ",
            self._meta.name,
            error=PreconditionError,
        )


class TensorCPU(Tensor):
    """Tensor whose storage lives in host memory."""

    context_cls = CPUContext

    def _typed_view(self, storage: np.ndarray) -> np.ndarray:
        if not self._meta.pod:
            return storage[: self._size].reshape(self._dims)
        nbytes = self._size * self._meta.itemsize
        return storage[:nbytes].view(self._meta.dtype).reshape(self._dims)

    def data(self, meta: TypeMeta) -> np.ndarray:
        """
        Return a typed NumPy view of the tensor's elements.

        The view aliases the tensor's storage and has the tensor's shape.

        Raises
        ------
        PreconditionError
            If the tensor's element type is not `meta`, or the storage is
            not allocated.
        """
        self._check_meta(meta)
        storage = self.raw_data()
        if storage is None:
            storage = self._context.new_storage(meta, 0)
        return self._typed_view(storage)

    def mutable_data(self, meta: TypeMeta) -> np.ndarray:
        """Allocate (or reuse) storage typed as `meta` and return a typed view."""
        return self._typed_view(self.raw_mutable_data(meta))


class TensorCUDA(Tensor):
    """Tensor whose storage lives in CUDA device memory."""

    context_cls = CUDAContext

    @property
    def dev_ptr(self) -> int:
        """Device pointer of the storage (0 when unallocated)."""
        return 0 if self._storage is None else int(self._storage.dev_ptr)
