"""
Host (CPU) device context.

CPU storage is a flat NumPy buffer: ``uint8`` bytes for POD element types,
an object buffer of ``bytes`` for the string type. All copies are plain
host memcpys and complete synchronously.
"""

from __future__ import annotations

import numpy as np

from ...domain.device._device import Device, DeviceType
from ..types._type_meta import TypeMeta
from ._base import BaseContext


class CPUContext(BaseContext):
    """Context for host memory."""

    DEVICE_TYPE = DeviceType.CPU

    @property
    def device(self) -> Device:
        return Device.cpu()

    def switch_to_device(self) -> None:
        return None

    def finish_device_computation(self) -> None:
        return None

    def new_storage(self, meta: TypeMeta, count: int) -> np.ndarray:
        count = int(count)
        if not meta.pod:
            return np.full(count, b"", dtype=object)
        return np.empty(count * int(meta.itemsize), dtype=np.uint8)

    def copy_bytes_from_cpu(self, nbytes: int, src: np.ndarray, dst: np.ndarray) -> None:
        nbytes = int(nbytes)
        np.copyto(dst[:nbytes], src[:nbytes])

    def copy_bytes_to_cpu(self, nbytes: int, src: np.ndarray, dst: np.ndarray) -> None:
        nbytes = int(nbytes)
        np.copyto(dst[:nbytes], src[:nbytes])
