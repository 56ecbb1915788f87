"""
ctypes bindings for the CUDA runtime utilities exported by the native library.

`CudaRuntime` wraps a loaded `ctypes.CDLL` and binds, once and lazily, the
general-purpose exports every CUDA tensor path relies on:

- ``keybridge_cuda_set_device(int device) -> int``
- ``keybridge_cuda_malloc(uint64_t* out_ptr, size_t nbytes) -> int``
- ``keybridge_cuda_free(uint64_t ptr) -> int``
- ``keybridge_cuda_memcpy_h2d(uint64_t dst, const void* src, size_t nbytes) -> int``
- ``keybridge_cuda_memcpy_d2h(void* dst, uint64_t src, size_t nbytes) -> int``
- ``keybridge_cuda_synchronize() -> int``

Every export returns 0 on success; any other status raises `RuntimeError`
naming the export and the status.

Device pointers (DevPtr) are plain Python ints. Host buffers are NumPy
arrays and must be C-contiguous.
"""

from __future__ import annotations

import ctypes
from ctypes import c_int, c_size_t, c_uint64, c_void_p
from functools import lru_cache

import numpy as np

from ._native_loader import load_keybridge_cuda_native

DevPtr = int


def _check(status: int, name: str) -> None:
    if int(status) != 0:
        raise RuntimeError(f"{name} failed with status={int(status)}")


class CudaRuntime:
    """
    Thin, typed wrapper around the CUDA runtime exports of the native library.

    Parameters
    ----------
    lib : ctypes.CDLL
        Loaded KeyBridge CUDA native library handle.
    """

    def __init__(self, lib: ctypes.CDLL) -> None:
        self.lib = lib
        self._bound = False

    def _bind(self) -> None:
        """Bind argtypes/restype for the runtime exports (idempotent)."""
        if self._bound:
            return

        lib = self.lib
        for sym in (
            "keybridge_cuda_set_device",
            "keybridge_cuda_malloc",
            "keybridge_cuda_free",
            "keybridge_cuda_memcpy_h2d",
            "keybridge_cuda_memcpy_d2h",
            "keybridge_cuda_synchronize",
        ):
            if not hasattr(lib, sym):
                raise RuntimeError(f"Native library missing symbol: {sym}")

        lib.keybridge_cuda_set_device.argtypes = [c_int]
        lib.keybridge_cuda_set_device.restype = c_int

        lib.keybridge_cuda_malloc.argtypes = [ctypes.POINTER(c_uint64), c_size_t]
        lib.keybridge_cuda_malloc.restype = c_int

        lib.keybridge_cuda_free.argtypes = [c_uint64]
        lib.keybridge_cuda_free.restype = c_int

        lib.keybridge_cuda_memcpy_h2d.argtypes = [c_uint64, c_void_p, c_size_t]
        lib.keybridge_cuda_memcpy_h2d.restype = c_int

        lib.keybridge_cuda_memcpy_d2h.argtypes = [c_void_p, c_uint64, c_size_t]
        lib.keybridge_cuda_memcpy_d2h.restype = c_int

        lib.keybridge_cuda_synchronize.argtypes = []
        lib.keybridge_cuda_synchronize.restype = c_int

        self._bound = True

    def set_device(self, device: int) -> None:
        self._bind()
        _check(self.lib.keybridge_cuda_set_device(int(device)), "keybridge_cuda_set_device")

    def malloc(self, nbytes: int) -> DevPtr:
        """Allocate `nbytes` of device memory and return the DevPtr."""
        self._bind()
        out = c_uint64(0)
        _check(
            self.lib.keybridge_cuda_malloc(ctypes.byref(out), c_size_t(int(nbytes))),
            "keybridge_cuda_malloc",
        )
        return int(out.value)

    def free(self, dev_ptr: DevPtr) -> None:
        self._bind()
        _check(self.lib.keybridge_cuda_free(c_uint64(int(dev_ptr))), "keybridge_cuda_free")

    def memcpy_h2d(self, dst_dev: DevPtr, src_host: np.ndarray, nbytes: int) -> None:
        self._bind()
        _check(
            self.lib.keybridge_cuda_memcpy_h2d(
                c_uint64(int(dst_dev)),
                c_void_p(int(src_host.ctypes.data)),
                c_size_t(int(nbytes)),
            ),
            "keybridge_cuda_memcpy_h2d",
        )

    def memcpy_d2h(self, dst_host: np.ndarray, src_dev: DevPtr, nbytes: int) -> None:
        self._bind()
        _check(
            self.lib.keybridge_cuda_memcpy_d2h(
                c_void_p(int(dst_host.ctypes.data)),
                c_uint64(int(src_dev)),
                c_size_t(int(nbytes)),
            ),
            "keybridge_cuda_memcpy_d2h",
        )

    def synchronize(self) -> None:
        self._bind()
        _check(self.lib.keybridge_cuda_synchronize(), "keybridge_cuda_synchronize")


@lru_cache(maxsize=1)
def load_cuda_runtime() -> CudaRuntime:
    """
    Return the process-wide `CudaRuntime` over the loaded native library.

    Raises
    ------
    FileNotFoundError, OSError
        Propagated from `load_keybridge_cuda_native`.
    """
    return CudaRuntime(load_keybridge_cuda_native())
