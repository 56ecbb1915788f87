"""
Blob fetchers: blob payload -> new NumPy array.

`TensorFetcher` converts a tensor payload into a freshly allocated NumPy
array holding a copy of its elements. It is written once against the
device context contract and specialized per device:

- `TensorFetcherCPU` for `TensorCPU` payloads,
- `TensorFetcherCUDA` for `TensorCUDA` payloads (device-to-host copy).

`BytesFetcher` returns a raw ``bytes`` payload unchanged.

The copy is always performed, even for host tensors, so the returned array
never aliases tensor storage.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Type

import numpy as np

from ...domain._bridge import BlobFetcherBase
from ...domain._errors import (
    ArrayConstructionError,
    PreconditionError,
    UnsupportedTypeError,
    enforce,
)
from ..context._base import BaseContext
from ..context._cpu import CPUContext
from ..context._cuda import CUDAContext
from ..tensor._blob import Blob
from ..tensor._tensor import Tensor, TensorCPU, TensorCUDA
from ..types._numpy_mapping import UNSUPPORTED_CODE, is_string_code, to_external_code
from ._array_handles import OwnedArrayHandle

logger = logging.getLogger(__name__)


def _string_element(value: Any) -> bytes:
    if not isinstance(value, bytes):
        raise TypeError(f"string tensor element must be bytes, got {type(value)!r}")
    return bytes(value)


class TensorFetcher(BlobFetcherBase):
    """
    Fetcher for tensor payloads, parameterized by tensor and context class.
    """

    tensor_cls: ClassVar[Type[Tensor]]
    context_cls: ClassVar[Type[BaseContext]]

    def fetch(self, blob: Blob) -> np.ndarray:
        return self.fetch_tensor(blob.get(self.tensor_cls))

    def fetch_tensor(self, tensor: Tensor) -> np.ndarray:
        """
        Copy `tensor` into a new NumPy array.

        Parameters
        ----------
        tensor : Tensor
            Source tensor. Must have been resized at least once.

        Returns
        -------
        np.ndarray
            New array with the tensor's shape and the NumPy dtype mapped from
            its element type. String tensors yield object arrays of ``bytes``.

        Raises
        ------
        PreconditionError
            If the tensor is uninitialized.
        UnsupportedTypeError
            If the element type has no NumPy analogue. No array is allocated.
        ArrayConstructionError
            If a string element cannot be constructed. Every element built so
            far and the array are released first.
        """
        enforce(
            tensor.size >= 0, "Trying to fetch uninitialized tensor", error=PreconditionError
        )
        code = to_external_code(tensor.meta)
        enforce(
            code != UNSUPPORTED_CODE,
            "This tensor's data type is not supported: ",
            tensor.meta.name,
            ".",
            error=UnsupportedTypeError,
        )

        context = self.context_cls(tensor.context.option)
        handle = OwnedArrayHandle.allocate(tensor.shape, code)
        if is_string_code(code):
            self._copy_strings(tensor, handle)
        else:
            try:
                nbytes = tensor.nbytes
                if nbytes > 0:
                    context.copy_bytes_to_cpu(nbytes, tensor.raw_data(), handle.byte_view())
                context.finish_device_computation()
            except BaseException:
                handle.release()
                raise

        logger.debug(
            "fetched %s shape=%s type=%s from %s",
            type(tensor).__name__,
            tensor.shape,
            tensor.meta.name,
            tensor.device,
        )
        return handle.detach()

    def _copy_strings(self, tensor: Tensor, handle: OwnedArrayHandle) -> None:
        src = tensor.raw_data()
        try:
            for i in range(tensor.size):
                handle.set_item(i, _string_element(src[i]))
        except Exception as e:
            handle.release()
            raise ArrayConstructionError(
                "Failed to allocate string for ndarray of strings."
            ) from e


class TensorFetcherCPU(TensorFetcher):
    tensor_cls = TensorCPU
    context_cls = CPUContext


class TensorFetcherCUDA(TensorFetcher):
    tensor_cls = TensorCUDA
    context_cls = CUDAContext


class BytesFetcher(BlobFetcherBase):
    """Fetcher for raw ``bytes`` payloads; returns the payload unchanged."""

    def fetch(self, blob: Blob) -> bytes:
        return blob.get(bytes)
