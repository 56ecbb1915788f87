"""
Feed/fetch through CUDA tensors, against the in-memory runtime and (when it
can be loaded) the native library.
"""

import unittest

import numpy as np

from src.keybridge.domain._errors import DeviceNotSupportedError
from src.keybridge.domain.device._device import Device
from src.keybridge.domain.device._device_option import DeviceOption
from src.keybridge.infrastructure.bridge import feed_blob, fetch_blob
from src.keybridge.infrastructure.native_cuda.python.cuda_runtime_ctypes import (
    load_cuda_runtime,
)
from src.keybridge.infrastructure.tensor import Blob, TensorCPU, TensorCUDA
from src.keybridge.infrastructure.types import FLOAT

from tests.infrastructure._fake_cuda_runtime import fake_cuda_runtime


class TestCUDABridgeFake(unittest.TestCase):
    def test_feed_then_fetch(self):
        with fake_cuda_runtime() as fake:
            blob = Blob()
            x = np.arange(12, dtype=np.float32).reshape(3, 4)
            feed_blob(blob, x, DeviceOption.cuda(1))

            t = blob.get(TensorCUDA)
            self.assertEqual(t.device, Device.cuda(1))
            self.assertIs(t.meta, FLOAT)
            self.assertEqual(t.shape, (3, 4))
            self.assertEqual(fake.device_of[t.dev_ptr], 1)
            self.assertIn(("set_device", 1), fake.calls)

            out = fetch_blob(blob)
            np.testing.assert_array_equal(out, x)
            self.assertEqual(out.dtype, np.float32)
            self.assertEqual(fake.sync_count, 2)

    def test_feed_moves_tensor_between_devices(self):
        with fake_cuda_runtime() as fake:
            blob = Blob()
            feed_blob(blob, np.ones(4, dtype=np.float32), DeviceOption.cuda(0))
            first_ptr = blob.get(TensorCUDA).dev_ptr
            feed_blob(blob, np.zeros(4, dtype=np.float32), DeviceOption.cuda(2))
            t = blob.get(TensorCUDA)
            self.assertNotIn(first_ptr, fake.memory)
            self.assertEqual(fake.device_of[t.dev_ptr], 2)
            np.testing.assert_array_equal(fetch_blob(blob), np.zeros(4))

    def test_cpu_payload_replaced_by_cuda_tensor(self):
        with fake_cuda_runtime():
            blob = Blob()
            feed_blob(blob, np.ones(2, dtype=np.float64))
            self.assertTrue(blob.is_type(TensorCPU))
            feed_blob(blob, np.ones(2, dtype=np.float64), DeviceOption.cuda())
            self.assertTrue(blob.is_type(TensorCUDA))

    def test_empty_array_skips_transfer(self):
        with fake_cuda_runtime() as fake:
            blob = Blob()
            feed_blob(blob, np.zeros((0, 3), dtype=np.float32), DeviceOption.cuda())
            out = fetch_blob(blob)
            self.assertEqual(out.shape, (0, 3))
            self.assertNotIn("memcpy_h2d", fake.call_names())
            self.assertNotIn("memcpy_d2h", fake.call_names())

    def test_strings_not_supported_on_cuda(self):
        with fake_cuda_runtime():
            with self.assertRaises(DeviceNotSupportedError):
                feed_blob(
                    Blob(), np.array([b"a"], dtype=object), DeviceOption.cuda()
                )


class TestCUDABridgeNative(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        try:
            cls.runtime = load_cuda_runtime()
            cls.runtime.set_device(0)
        except Exception as e:
            cls.runtime = None
            cls._skip_reason = f"CUDA native library not available: {e!r}"

    def setUp(self) -> None:
        if getattr(self, "runtime", None) is None:
            self.skipTest(getattr(self, "_skip_reason", "CUDA not available"))

    def test_round_trip(self):
        blob = Blob()
        x = np.random.default_rng(1).standard_normal((8, 5))
        feed_blob(blob, x, DeviceOption.cuda(0))
        np.testing.assert_array_equal(fetch_blob(blob), x)


if __name__ == "__main__":
    unittest.main()
