import unittest

import numpy as np

from src.keybridge.domain.types import NDArrayLike
from src.keybridge.infrastructure.bridge import BorrowedArrayView, OwnedArrayHandle
from src.keybridge.infrastructure.types import FLOAT, STRING, to_external_code


class TestBorrowedArrayView(unittest.TestCase):
    def test_rejects_non_arrays(self):
        with self.assertRaises(TypeError):
            BorrowedArrayView([1, 2, 3])  # type: ignore[arg-type]

    def test_contiguous_array_is_yielded_as_is(self):
        x = np.arange(6, dtype=np.float32)
        with BorrowedArrayView(x).contiguous() as c:
            self.assertIs(c, x)

    def test_non_contiguous_array_is_copied(self):
        x = np.arange(12, dtype=np.float64).reshape(3, 4)[:, ::2]
        before = x.copy()
        with BorrowedArrayView(x).contiguous() as c:
            self.assertTrue(c.flags["C_CONTIGUOUS"])
            self.assertFalse(np.shares_memory(c, x))
            np.testing.assert_array_equal(c, x)
        np.testing.assert_array_equal(x, before)

    def test_non_native_byte_order_is_copied(self):
        swapped = np.dtype(np.int32).newbyteorder("S")
        x = np.array([1, 258, -7], dtype=swapped)
        with BorrowedArrayView(x).contiguous() as c:
            self.assertTrue(c.dtype.isnative)
            self.assertEqual(c.dtype.num, x.dtype.num)
            np.testing.assert_array_equal(c, [1, 258, -7])
        self.assertFalse(x.dtype.isnative)

    def test_exceptions_propagate(self):
        x = np.asfortranarray(np.ones((2, 3)))
        with self.assertRaises(KeyError):
            with BorrowedArrayView(x).contiguous():
                raise KeyError("boom")

    def test_numpy_arrays_are_array_like(self):
        self.assertIsInstance(np.zeros((2, 2)), NDArrayLike)
        self.assertNotIsInstance([1, 2], NDArrayLike)

    def test_type_code(self):
        self.assertEqual(
            BorrowedArrayView(np.zeros(1, dtype=np.float32)).type_code,
            np.dtype(np.float32).num,
        )


class TestOwnedArrayHandle(unittest.TestCase):
    def test_allocate_pod(self):
        h = OwnedArrayHandle.allocate((2, 3), to_external_code(FLOAT))
        self.assertEqual(h.array.shape, (2, 3))
        self.assertEqual(h.array.dtype, np.float32)
        self.assertEqual(h.byte_view().shape, (24,))

    def test_detach_transfers_ownership(self):
        h = OwnedArrayHandle.allocate((2,), to_external_code(STRING))
        h.set_item(0, b"a")
        h.set_item(1, b"b")
        arr = h.detach()
        self.assertTrue(h.released)
        self.assertEqual(list(arr), [b"a", b"b"])
        with self.assertRaises(RuntimeError):
            _ = h.array

    def test_release_drops_elements(self):
        h = OwnedArrayHandle.allocate((2,), to_external_code(STRING))
        arr = h.array
        h.set_item(0, b"abc")
        h.release()
        self.assertTrue(h.released)
        self.assertIsNone(arr[0])
        h.release()

    def test_scalar_shape(self):
        h = OwnedArrayHandle.allocate((), to_external_code(STRING))
        h.set_item(0, b"only")
        self.assertEqual(h.detach()[()], b"only")


if __name__ == "__main__":
    unittest.main()
