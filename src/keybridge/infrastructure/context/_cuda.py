"""
CUDA device context.

Storage is a `_CudaStorage` allocation on the device selected by the
context's `DeviceOption`. Transfers go through the memcpy primitives in
`infrastructure.ops.memcpy_cuda` and are queued without synchronizing;
callers that need the bytes on the host call `finish_device_computation`.

The runtime is resolved lazily through `_runtime_factory` so that a context
can be constructed (and its device queried) on machines without the native
library. Tests replace the factory with an in-memory fake.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ...domain._errors import DeviceNotSupportedError
from ...domain.device._device import Device, DeviceType
from ...domain.device._device_option import DeviceOption
from ..native_cuda.python.cuda_runtime_ctypes import load_cuda_runtime
from ..ops.memcpy_cuda import memcpy_dtoh, memcpy_htod
from ._cuda_storage import _CudaStorage
from ..types._type_meta import TypeMeta
from ._base import BaseContext


class CUDAContext(BaseContext):
    """Context for memory on a single CUDA device."""

    DEVICE_TYPE = DeviceType.CUDA

    _runtime_factory = staticmethod(load_cuda_runtime)

    def __init__(self, option: Optional[DeviceOption] = None) -> None:
        super().__init__(option)
        self._runtime: Any = None

    @property
    def runtime(self) -> Any:
        if self._runtime is None:
            self._runtime = type(self)._runtime_factory()
        return self._runtime

    @property
    def device_index(self) -> int:
        return int(self._option.cuda_gpu_id)

    @property
    def device(self) -> Device:
        return Device.cuda(self.device_index)

    def switch_to_device(self) -> None:
        self.runtime.set_device(self.device_index)

    def finish_device_computation(self) -> None:
        self.runtime.synchronize()

    def new_storage(self, meta: TypeMeta, count: int) -> _CudaStorage:
        if not meta.pod:
            raise DeviceNotSupportedError(
                f"storage for type '{meta.name}'", str(self.device)
            )
        nbytes = int(count) * int(meta.itemsize)
        return _CudaStorage.allocate(self.runtime, self.device_index, nbytes)

    def release_storage(self, storage: Any) -> None:
        if isinstance(storage, _CudaStorage):
            storage.release()

    def copy_bytes_from_cpu(self, nbytes: int, src: np.ndarray, dst: _CudaStorage) -> None:
        self.switch_to_device()
        memcpy_htod(
            self.runtime, dst_dev=dst.dev_ptr, src_host=src, nbytes=nbytes, sync=False
        )

    def copy_bytes_to_cpu(self, nbytes: int, src: _CudaStorage, dst: np.ndarray) -> None:
        self.switch_to_device()
        memcpy_dtoh(
            self.runtime, dst_host=dst, src_dev=src.dev_ptr, nbytes=nbytes, sync=False
        )
