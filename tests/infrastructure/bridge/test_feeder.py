import unittest

import numpy as np

from src.keybridge.domain._errors import ForeignObjectError, UnsupportedTypeError
from src.keybridge.domain.device._device_option import DeviceOption
from src.keybridge.infrastructure.bridge import TensorFeederCPU
from src.keybridge.infrastructure.tensor import Blob, TensorCPU
from src.keybridge.infrastructure.types import (
    BOOL,
    FLOAT,
    FLOAT16,
    INT32,
    INT64,
    STRING,
    UINT8,
)


class TestTensorFeederCPU(unittest.TestCase):
    def setUp(self) -> None:
        self.feeder = TensorFeederCPU()
        self.option = DeviceOption.cpu()

    def _feed(self, array: np.ndarray, blob: Blob = None) -> TensorCPU:
        blob = Blob() if blob is None else blob
        self.feeder.feed(self.option, array, blob)
        return blob.get(TensorCPU)

    def test_float_matrix(self):
        x = np.arange(6, dtype=np.float32).reshape(2, 3)
        t = self._feed(x)
        self.assertEqual(t.shape, (2, 3))
        self.assertIs(t.meta, FLOAT)
        np.testing.assert_array_equal(t.data(FLOAT), x)
        self.assertFalse(np.shares_memory(t.raw_data(), x))

    def test_source_is_not_modified(self):
        x = np.array([[1, 2], [3, 4]], dtype=np.int32)
        before = x.copy()
        t = self._feed(x)
        t.mutable_data(INT32)[...] = 0
        np.testing.assert_array_equal(x, before)

    def test_non_contiguous_input(self):
        base = np.arange(24, dtype=np.float32).reshape(4, 6)
        x = base[:, ::2]
        t = self._feed(x)
        self.assertEqual(t.shape, (4, 3))
        np.testing.assert_array_equal(t.data(FLOAT), x)

    def test_fortran_order_input(self):
        x = np.asfortranarray(np.arange(6, dtype=np.uint8).reshape(2, 3))
        t = self._feed(x)
        self.assertIs(t.meta, UINT8)
        np.testing.assert_array_equal(t.data(UINT8), x)

    def test_other_pod_types(self):
        cases = [
            (np.array([True, False]), BOOL),
            (np.array([0.5, 1.5], dtype=np.float16), FLOAT16),
            (np.array([1, 2], dtype=np.int64), INT64),
        ]
        for x, meta in cases:
            with self.subTest(meta=meta.name):
                t = self._feed(x)
                self.assertIs(t.meta, meta)
                np.testing.assert_array_equal(t.data(meta), x)

    def test_platform_long(self):
        x = np.array([1, -2, 3], dtype="l")
        t = self._feed(x)
        self.assertEqual(t.meta.itemsize, np.dtype("l").itemsize)
        np.testing.assert_array_equal(t.data(t.meta), x)

    def test_scalar_and_empty(self):
        t = self._feed(np.array(3.0, dtype=np.float32))
        self.assertEqual(t.shape, ())
        self.assertEqual(float(t.data(FLOAT)), 3.0)

        t = self._feed(np.zeros((0, 5), dtype=np.float32))
        self.assertEqual(t.shape, (0, 5))
        self.assertEqual(t.size, 0)

    def test_object_string_array(self):
        x = np.array([b"ab", "cé"], dtype=object)
        t = self._feed(x)
        self.assertIs(t.meta, STRING)
        self.assertEqual(t.data(STRING).tolist(), [b"ab", "cé".encode("utf-8")])

    def test_fixed_width_byte_strings(self):
        t = self._feed(np.array([[b"x", b"yz"]]))
        self.assertIs(t.meta, STRING)
        self.assertEqual(t.shape, (1, 2))
        self.assertEqual(t.data(STRING).tolist(), [[b"x", b"yz"]])

    def test_unicode_strings(self):
        t = self._feed(np.array(["hi", "über"]))
        self.assertEqual(t.data(STRING).tolist(), [b"hi", "über".encode("utf-8")])

    def test_bad_string_element_leaves_tensor_unpopulated(self):
        blob = Blob()
        x = np.array([b"ok", 3], dtype=object)
        with self.assertRaises(ForeignObjectError) as cm:
            self.feeder.feed(self.option, x, blob)
        self.assertIn("Unsupported python object type", str(cm.exception))
        t = blob.get(TensorCPU)
        self.assertEqual(t.shape, (2,))
        self.assertEqual(t.data(STRING).tolist(), [b"", b""])

    def test_bad_string_refeed_clears_previous_strings(self):
        blob = Blob()
        self._feed(np.array([b"a", b"b", b"c"], dtype=object), blob)
        with self.assertRaises(ForeignObjectError):
            self.feeder.feed(self.option, np.array([b"x", 5], dtype=object), blob)
        t = blob.get(TensorCPU)
        self.assertEqual(t.shape, (2,))
        self.assertEqual(t.data(STRING).tolist(), [b"", b""])

    def test_non_native_byte_order(self):
        x = np.array([1.0, 2.0], dtype=">f4")
        t = self._feed(x)
        self.assertIs(t.meta, FLOAT)
        np.testing.assert_array_equal(t.data(FLOAT), [1.0, 2.0])
        self.assertEqual(x.dtype.str, ">f4")

    def test_unsupported_dtypes(self):
        for dtype in (np.complex64, np.uint32):
            with self.subTest(dtype=np.dtype(dtype).name):
                blob = Blob()
                with self.assertRaises(UnsupportedTypeError) as cm:
                    self.feeder.feed(self.option, np.zeros(2, dtype=dtype), blob)
                self.assertIn(str(np.dtype(dtype).num), str(cm.exception))
                self.assertTrue(blob.is_empty())

    def test_replaces_other_payload(self):
        blob = Blob(b"previous")
        t = self._feed(np.ones(3, dtype=np.float32), blob)
        self.assertTrue(blob.is_type(TensorCPU))
        self.assertEqual(t.size, 3)

    def test_refeed_reuses_tensor_and_retypes(self):
        blob = Blob()
        first = self._feed(np.ones((2, 2), dtype=np.float32), blob)
        second = self._feed(np.arange(3, dtype=np.int64), blob)
        self.assertIs(first, second)
        self.assertIs(second.meta, INT64)
        self.assertEqual(second.shape, (3,))
        np.testing.assert_array_equal(second.data(INT64), [0, 1, 2])


if __name__ == "__main__":
    unittest.main()
