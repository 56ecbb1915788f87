"""
Device context contract.

A device context is the execution/memory domain a tensor is bound to. It
knows how to allocate storage for that domain and how to move bytes between
the host and the domain. Tensors, fetchers and feeders are written once
against this interface and instantiated per concrete context
(`CPUContext`, `CUDAContext`).

Storage objects are opaque to callers: the CPU context hands out flat NumPy
buffers, the CUDA context hands out `_CudaStorage` allocations. Host-side
buffers passed to the ``copy_bytes_*`` methods are always flat, C-contiguous
``uint8`` NumPy arrays.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

import numpy as np

from ...domain._errors import PreconditionError, enforce
from ...domain.device._device import Device, DeviceType
from ...domain.device._device_option import DeviceOption
from ..types._type_meta import TypeMeta


class BaseContext(ABC):
    """
    Abstract device context.

    Parameters
    ----------
    option : DeviceOption, optional
        Device selection. Defaults to device 0 of this context's type.

    Raises
    ------
    PreconditionError
        If `option.device_type` does not match the context's device type.
    """

    DEVICE_TYPE: ClassVar[DeviceType]

    def __init__(self, option: Optional[DeviceOption] = None) -> None:
        if option is None:
            option = DeviceOption(device_type=int(self.DEVICE_TYPE))
        enforce(
            option.device_type == self.DEVICE_TYPE,
            f"{type(self).__name__} expects device_type={int(self.DEVICE_TYPE)}, ",
            f"got {option.device_type}",
            error=PreconditionError,
        )
        self._option = option

    @classmethod
    def from_device(cls, device: Device) -> "BaseContext":
        """Build a context targeting `device`."""
        return cls(DeviceOption.from_device(device))

    @property
    def option(self) -> DeviceOption:
        return self._option

    @property
    @abstractmethod
    def device(self) -> Device:
        """Device this context targets."""
        ...

    @abstractmethod
    def switch_to_device(self) -> None:
        """Make this context's device current for subsequent work."""
        ...

    @abstractmethod
    def finish_device_computation(self) -> None:
        """Block until all queued device work has completed."""
        ...

    @abstractmethod
    def new_storage(self, meta: TypeMeta, count: int) -> Any:
        """Allocate storage for `count` elements of type `meta`."""
        ...

    @abstractmethod
    def copy_bytes_from_cpu(self, nbytes: int, src: np.ndarray, dst: Any) -> None:
        """Copy `nbytes` from a host byte buffer into context storage."""
        ...

    @abstractmethod
    def copy_bytes_to_cpu(self, nbytes: int, src: Any, dst: np.ndarray) -> None:
        """Copy `nbytes` from context storage into a host byte buffer."""
        ...

    def release_storage(self, storage: Any) -> None:
        """Release storage previously returned by `new_storage`."""
        return None
