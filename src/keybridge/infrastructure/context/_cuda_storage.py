"""
CUDA storage and lifetime management.

This module defines `_CudaStorage`, a single-owner wrapper around one CUDA
device allocation. CUDA tensors hold their bytes through one of these
objects instead of a raw device pointer, which gives the allocation a single,
explicit owner:

- The device memory is freed exactly once, when the storage is released
  (`release`) or, as a safety net, when the storage object is
  garbage-collected.
- Borrowed storage (a device pointer owned by someone else) is created with
  ``owned=False`` and never freed.

Design Notes
------------
- `_CudaStorage` avoids defining `__del__`; a `weakref.finalize` callback
  capturing only plain values frees the pointer instead.
- The storage does not impose layout, stride, or shape semantics; these
  remain the responsibility of the tensor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
import weakref
from typing import Any

@dataclass
class _CudaStorage:
    """
    Single-owner wrapper around a CUDA device allocation.

    Attributes
    ----------
    runtime : CudaRuntime
        Runtime that owns the allocation (used to free it).
    device_index : int
        CUDA ordinal the memory lives on.
    dev_ptr : int
        Device pointer (0 once freed).
    nbytes : int
        Allocation size in bytes (0 once freed).
    owned : bool
        False for borrowed pointers, which are never freed.

    Thread safety
    -------------
    `release` is protected by an internal lock.
    """

    runtime: Any
    device_index: int
    dev_ptr: int
    nbytes: int
    owned: bool = True

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _finalizer: weakref.finalize | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        # Capture plain values, not self, to avoid cycles.
        runtime = self.runtime
        device_index = int(self.device_index)
        dev_ptr = int(self.dev_ptr)

        def _free_ptr() -> None:
            try:
                runtime.set_device(device_index)
                runtime.free(dev_ptr)
            except Exception:
                # Never raise in finalizers; modules may be gone at shutdown.
                pass

        if self.owned and dev_ptr != 0 and int(self.nbytes) > 0:
            self._finalizer = weakref.finalize(self, _free_ptr)

    @classmethod
    def allocate(cls, runtime: Any, device_index: int, nbytes: int) -> "_CudaStorage":
        """
        Allocate `nbytes` on `device_index` and wrap the result.

        Zero-byte requests produce a storage with ``dev_ptr == 0`` and no
        device allocation.
        """
        nbytes = int(nbytes)
        if nbytes == 0:
            return cls(runtime, int(device_index), 0, 0)
        runtime.set_device(int(device_index))
        dev_ptr = int(runtime.malloc(nbytes))
        if dev_ptr == 0:
            raise RuntimeError(f"cuda malloc returned a null pointer for {nbytes} bytes")
        return cls(runtime, int(device_index), dev_ptr, nbytes)

    def release(self) -> None:
        """
        Free the device memory now.

        Subsequent calls after the memory has been freed have no effect.
        """
        with self._lock:
            if self._finalizer is not None and self._finalizer.alive:
                self._finalizer()
            self.dev_ptr = 0
            self.nbytes = 0
