"""
Blob feeders: NumPy array -> tensor payload on a requested device.

`TensorFeeder` resolves the array's element type, builds the device context
named by the `DeviceOption`, makes sure the blob holds a tensor of the
feeder's class and copies the array's elements into it. Device-specific
behavior lives entirely in the context:

- `TensorFeederCPU`: host memcpy into a `TensorCPU`.
- `TensorFeederCUDA`: host-to-device memcpy into a `TensorCUDA`.

String arrays (object, ``S`` or ``U`` dtype) are fed element by element.
Every element is converted before the tensor's storage is written. A bad
element leaves the tensor resized and filled with empty strings, even when
the tensor reuses storage from an earlier feed.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, List, Type

import numpy as np

from ...domain._bridge import BlobFeederBase
from ...domain._errors import ForeignObjectError, UnsupportedTypeError, enforce
from ...domain.device._device_option import DeviceOption
from ..context._base import BaseContext
from ..context._cpu import CPUContext
from ..context._cuda import CUDAContext
from ..tensor._blob import Blob
from ..tensor._tensor import Tensor, TensorCPU, TensorCUDA
from ..types._numpy_mapping import to_internal_type
from ._array_handles import BorrowedArrayView

logger = logging.getLogger(__name__)


def _extract_string(value: Any) -> bytes:
    """
    Read one string element of a foreign array as ``bytes``.

    ``bytes`` (including ``np.bytes_``) are taken as-is, ``str`` (including
    ``np.str_``) is encoded as UTF-8.
    """
    if isinstance(value, bytes):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise ForeignObjectError("Unsupported python object type passed into ndarray.")


class TensorFeeder(BlobFeederBase):
    """
    Feeder for tensor payloads, parameterized by tensor and context class.
    """

    tensor_cls: ClassVar[Type[Tensor]]
    context_cls: ClassVar[Type[BaseContext]]

    def feed(self, option: DeviceOption, array: np.ndarray, blob: Blob) -> None:
        """
        Copy `array` into the blob's tensor on the device named by `option`.

        Parameters
        ----------
        option : DeviceOption
            Target device.
        array : np.ndarray
            Source array. Borrowed: neither modified nor retained.
        blob : Blob
            Destination. Its payload is replaced by a tensor of this feeder's
            class if it holds anything else.

        Raises
        ------
        UnsupportedTypeError
            If the array's dtype has no internal analogue.
        ForeignObjectError
            If an element of a string array is neither ``bytes`` nor ``str``.
        """
        with BorrowedArrayView(array).contiguous() as src:
            code = int(src.dtype.num)
            meta = to_internal_type(code)
            enforce(
                meta,
                "This numpy data type is not supported: ",
                code,
                ".",
                error=UnsupportedTypeError,
            )

            context = self.context_cls(option)
            context.switch_to_device()
            tensor = blob.get_mutable(self.tensor_cls)
            tensor.bind_context(context)
            tensor.resize(src.shape)

            if meta.pod:
                nbytes = tensor.size * meta.itemsize
                dst = tensor.raw_mutable_data(meta)
                if nbytes > 0:
                    context.copy_bytes_from_cpu(
                        nbytes, src.reshape(-1).view(np.uint8), dst
                    )
            else:
                dst = tensor.raw_mutable_data(meta)
                try:
                    values: List[bytes] = [
                        _extract_string(v) for v in src.reshape(-1)
                    ]
                except ForeignObjectError:
                    # storage may still hold a previous feed's strings
                    dst[: tensor.size].fill(b"")
                    raise
                for i, v in enumerate(values):
                    dst[i] = v

            context.finish_device_computation()

            logger.debug(
                "fed %s shape=%s type=%s to %s",
                type(tensor).__name__,
                tensor.shape,
                meta.name,
                tensor.device,
            )


class TensorFeederCPU(TensorFeeder):
    tensor_cls = TensorCPU
    context_cls = CPUContext


class TensorFeederCUDA(TensorFeeder):
    tensor_cls = TensorCUDA
    context_cls = CUDAContext
