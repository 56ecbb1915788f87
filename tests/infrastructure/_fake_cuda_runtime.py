"""
In-memory stand-in for `CudaRuntime`, used to exercise CUDA code paths on
machines without a GPU or the native library.

Device memory is a dict from pointer to bytearray. Every call is recorded in
`calls` so tests can assert on the sequence of runtime operations.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator
from unittest.mock import patch

import numpy as np


class FakeCudaRuntime:
    def __init__(self) -> None:
        self.memory: dict[int, bytearray] = {}
        self.device_of: dict[int, int] = {}
        self.current_device = 0
        self.calls: list[tuple] = []
        self.sync_count = 0
        self._next_ptr = 0x10000

    def set_device(self, device: int) -> None:
        self.calls.append(("set_device", int(device)))
        self.current_device = int(device)

    def malloc(self, nbytes: int) -> int:
        self.calls.append(("malloc", int(nbytes)))
        ptr = self._next_ptr
        self._next_ptr += int(nbytes) + 256
        self.memory[ptr] = bytearray(int(nbytes))
        self.device_of[ptr] = self.current_device
        return ptr

    def free(self, dev_ptr: int) -> None:
        self.calls.append(("free", int(dev_ptr)))
        del self.memory[int(dev_ptr)]
        del self.device_of[int(dev_ptr)]

    def memcpy_h2d(self, dst_dev: int, src_host: np.ndarray, nbytes: int) -> None:
        self.calls.append(("memcpy_h2d", int(dst_dev), int(nbytes)))
        self.memory[int(dst_dev)][:nbytes] = src_host.tobytes()[:nbytes]

    def memcpy_d2h(self, dst_host: np.ndarray, src_dev: int, nbytes: int) -> None:
        self.calls.append(("memcpy_d2h", int(src_dev), int(nbytes)))
        data = np.frombuffer(bytes(self.memory[int(src_dev)][:nbytes]), dtype=np.uint8)
        dst_host.reshape(-1).view(np.uint8)[:nbytes] = data

    def synchronize(self) -> None:
        self.calls.append(("synchronize",))
        self.sync_count += 1

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@contextmanager
def fake_cuda_runtime() -> Iterator[FakeCudaRuntime]:
    """Route every `CUDAContext` created inside the block to a fake runtime."""
    from src.keybridge.infrastructure.context._cuda import CUDAContext

    fake = FakeCudaRuntime()
    with patch.object(CUDAContext, "_runtime_factory", lambda: fake):
        yield fake
