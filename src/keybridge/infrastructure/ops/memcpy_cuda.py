"""
CUDA memcpy primitives (device-pointer first).

These functions validate host buffers and byte counts at the Python boundary,
then delegate the raw transfer to a `CudaRuntime`:

- `memcpy_htod`: host ndarray -> device pointer
- `memcpy_dtoh`: device pointer -> host ndarray

With ``sync=True`` (the default) the runtime is synchronized after the copy,
so the caller observes a completed transfer when the call returns.

Zero-byte transfers return immediately without touching the runtime.
"""

from __future__ import annotations

from typing import Any

import numpy as np

DevPtr = int


def _check_nbytes(nbytes: int, host: np.ndarray, name: str) -> int:
    nbytes_i = int(nbytes)
    if nbytes_i < 0:
        raise ValueError("nbytes must be >= 0")
    if nbytes_i > int(host.nbytes):
        raise ValueError(
            f"nbytes exceeds {name}.nbytes: {nbytes_i} > {int(host.nbytes)}"
        )
    return nbytes_i


def memcpy_htod(
    runtime: Any,
    *,
    dst_dev: DevPtr,
    src_host: np.ndarray,
    nbytes: int,
    sync: bool = True,
) -> None:
    """
    Host-to-device memcpy.

    Parameters
    ----------
    runtime : CudaRuntime
        Runtime used for the transfer.
    dst_dev : int
        Destination device pointer.
    src_host : np.ndarray
        Source host buffer; made C-contiguous if needed.
    nbytes : int
        Number of bytes to copy (at most ``src_host.nbytes``).
    sync : bool, optional
        Synchronize after the copy. Default True.

    Raises
    ------
    TypeError
        If `src_host` is not an ndarray.
    ValueError
        If `nbytes` is negative or larger than the host buffer.
    """
    if not isinstance(src_host, np.ndarray):
        raise TypeError(f"src_host must be np.ndarray, got {type(src_host)!r}")
    if not src_host.flags["C_CONTIGUOUS"]:
        src_host = np.ascontiguousarray(src_host)

    nbytes_i = _check_nbytes(nbytes, src_host, "src_host")
    if nbytes_i == 0:
        return

    runtime.memcpy_h2d(int(dst_dev), src_host, nbytes_i)
    if sync:
        runtime.synchronize()


def memcpy_dtoh(
    runtime: Any,
    *,
    dst_host: np.ndarray,
    src_dev: DevPtr,
    nbytes: int,
    sync: bool = True,
) -> None:
    """
    Device-to-host memcpy.

    Raises
    ------
    TypeError
        If `dst_host` is not an ndarray.
    ValueError
        If `dst_host` is not C-contiguous, or `nbytes` is negative or larger
        than the host buffer.
    """
    if not isinstance(dst_host, np.ndarray):
        raise TypeError(f"dst_host must be np.ndarray, got {type(dst_host)!r}")
    if not dst_host.flags["C_CONTIGUOUS"]:
        raise ValueError("dst_host must be C-contiguous")

    nbytes_i = _check_nbytes(nbytes, dst_host, "dst_host")
    if nbytes_i == 0:
        return

    runtime.memcpy_d2h(dst_host, int(src_dev), nbytes_i)
    if sync:
        runtime.synchronize()


__all__ = ["memcpy_htod", "memcpy_dtoh"]
