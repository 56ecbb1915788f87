import unittest

import numpy as np

from src.keybridge.domain._errors import PreconditionError
from src.keybridge.domain.device._device import Device
from src.keybridge.domain.device._device_option import DeviceOption
from src.keybridge.infrastructure.context import CPUContext
from src.keybridge.infrastructure.types import FLOAT, INT16, STRING


class TestCPUContext(unittest.TestCase):
    def test_default_option_and_device(self):
        ctx = CPUContext()
        self.assertEqual(ctx.option, DeviceOption.cpu())
        self.assertEqual(ctx.device, Device.cpu())

    def test_rejects_cuda_option(self):
        with self.assertRaises(PreconditionError):
            CPUContext(DeviceOption.cuda(0))

    def test_from_device(self):
        self.assertIsInstance(CPUContext.from_device(Device.cpu()), CPUContext)

    def test_pod_storage_is_flat_bytes(self):
        storage = CPUContext().new_storage(FLOAT, 6)
        self.assertEqual(storage.dtype, np.uint8)
        self.assertEqual(storage.shape, (24,))

    def test_string_storage_holds_empty_bytes(self):
        storage = CPUContext().new_storage(STRING, 3)
        self.assertEqual(storage.dtype, object)
        self.assertEqual(list(storage), [b"", b"", b""])

    def test_copy_bytes_round_trip(self):
        ctx = CPUContext()
        src = np.arange(5, dtype=np.int16)
        dst = ctx.new_storage(INT16, 5)
        ctx.copy_bytes_from_cpu(src.nbytes, src.view(np.uint8), dst)

        out = np.empty(10, dtype=np.uint8)
        ctx.copy_bytes_to_cpu(10, dst, out)
        np.testing.assert_array_equal(out.view(np.int16), src)

    def test_device_work_is_synchronous(self):
        ctx = CPUContext()
        self.assertIsNone(ctx.switch_to_device())
        self.assertIsNone(ctx.finish_device_computation())


if __name__ == "__main__":
    unittest.main()
