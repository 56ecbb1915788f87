"""
Ownership wrappers for NumPy arrays crossing the bridge.

Arrays flow through the bridge under two distinct ownership regimes:

- `BorrowedArrayView`: an array supplied by the caller to a feed. The bridge
  reads it but never mutates or retains it. When the array is not
  C-contiguous or not in native byte order a temporary copy is made, and
  that copy is dropped
  on every exit path of `contiguous()`.
- `OwnedArrayHandle`: an array allocated by a fetch. The bridge owns it
  (and, for object arrays, every element constructed into it) until it is
  either handed to the caller with `detach()` or discarded with `release()`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import numpy as np

from ..types._numpy_mapping import numpy_dtype_for_code


class BorrowedArrayView:
    """
    Read-only borrow of a caller-owned array.

    Parameters
    ----------
    array : np.ndarray
        The caller's array.

    Raises
    ------
    TypeError
        If `array` is not a NumPy ndarray.
    """

    __slots__ = ("_array",)

    def __init__(self, array: np.ndarray) -> None:
        if not isinstance(array, np.ndarray):
            raise TypeError(f"Expected np.ndarray, got {type(array)!r}")
        self._array = array

    @property
    def array(self) -> np.ndarray:
        return self._array

    @property
    def type_code(self) -> int:
        """NumPy type number of the borrowed array."""
        return int(self._array.dtype.num)

    @contextmanager
    def contiguous(self) -> Iterator[np.ndarray]:
        """
        Yield a C-contiguous, native byte order array with the same values.

        The caller's array is yielded as-is when it already qualifies;
        otherwise a temporary copy is yielded and dropped on exit.
        """
        arr = self._array
        copy: Optional[np.ndarray] = None
        if not arr.dtype.isnative:
            copy = np.ascontiguousarray(arr, dtype=arr.dtype.newbyteorder("="))
        elif not arr.flags["C_CONTIGUOUS"]:
            copy = np.ascontiguousarray(arr)
        try:
            yield arr if copy is None else copy
        finally:
            del copy


class OwnedArrayHandle:
    """
    Bridge-owned array pending hand-off to the caller.

    Use `allocate` to create one. Exactly one of `detach` or `release` ends
    the handle's ownership.
    """

    __slots__ = ("_array",)

    def __init__(self, array: np.ndarray) -> None:
        self._array: Optional[np.ndarray] = array

    @classmethod
    def allocate(cls, shape: Sequence[int], code: int) -> "OwnedArrayHandle":
        """
        Allocate an uninitialized array of `shape` with NumPy type number
        `code`. Object arrays start filled with None.
        """
        dtype = numpy_dtype_for_code(code)
        return cls(np.empty(tuple(int(d) for d in shape), dtype=dtype))

    @property
    def released(self) -> bool:
        """True once the array has been released or detached."""
        return self._array is None

    @property
    def array(self) -> np.ndarray:
        if self._array is None:
            raise RuntimeError("OwnedArrayHandle no longer owns an array")
        return self._array

    def byte_view(self) -> np.ndarray:
        """Flat ``uint8`` view of the array's memory (POD arrays only)."""
        return self.array.reshape(-1).view(np.uint8)

    def set_item(self, index: int, value: Any) -> None:
        """Store `value` at flat position `index`."""
        self.array.reshape(-1)[index] = value

    def release(self) -> None:
        """Drop the array and every element stored in it."""
        arr = self._array
        if arr is None:
            return
        if arr.dtype == object:
            arr.fill(None)
        self._array = None

    def detach(self) -> np.ndarray:
        """Transfer the array to the caller; the handle is empty afterwards."""
        arr = self.array
        self._array = None
        return arr
