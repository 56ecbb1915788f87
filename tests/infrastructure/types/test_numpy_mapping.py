import unittest

import numpy as np

from src.keybridge.infrastructure.tensor import TensorCPU
from src.keybridge.infrastructure.types import (
    BFLOAT16,
    BOOL,
    DOUBLE,
    FLOAT,
    FLOAT16,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    UINT8,
    UINT16,
    UNDEFINED,
    UNSUPPORTED_CODE,
    is_string_code,
    numpy_dtype_for_code,
    to_external_code,
    to_internal_type,
    type_meta_of,
)

SUPPORTED = (BOOL, DOUBLE, FLOAT, FLOAT16, INT32, INT8, INT16, INT64, UINT8, UINT16, STRING)


class TestToExternalCode(unittest.TestCase):
    def test_forward_table(self):
        expected = {
            BOOL: np.dtype(np.bool_).num,
            DOUBLE: np.dtype(np.float64).num,
            FLOAT: np.dtype(np.float32).num,
            FLOAT16: np.dtype(np.float16).num,
            INT32: np.dtype(np.intc).num,
            INT8: np.dtype(np.int8).num,
            INT16: np.dtype(np.int16).num,
            INT64: np.dtype("q").num,
            UINT8: np.dtype(np.uint8).num,
            UINT16: np.dtype(np.uint16).num,
            STRING: np.dtype(object).num,
        }
        for meta, code in expected.items():
            with self.subTest(meta=meta.name):
                self.assertEqual(to_external_code(meta), code)

    def test_unsupported_types_yield_sentinel(self):
        self.assertEqual(to_external_code(BFLOAT16), UNSUPPORTED_CODE)
        self.assertEqual(to_external_code(UNDEFINED), UNSUPPORTED_CODE)
        self.assertEqual(to_external_code(type_meta_of(TensorCPU)), UNSUPPORTED_CODE)


class TestToInternalType(unittest.TestCase):
    def test_round_trip_for_every_supported_type(self):
        for meta in SUPPORTED:
            with self.subTest(meta=meta.name):
                self.assertEqual(to_internal_type(to_external_code(meta)), meta)

    def test_platform_long_maps_by_width(self):
        meta = to_internal_type(np.dtype("l").num)
        self.assertEqual(meta.itemsize, np.dtype("l").itemsize)
        self.assertEqual(meta.dtype.kind, "i")

    def test_fixed_width_strings_map_to_string(self):
        self.assertIs(to_internal_type(np.dtype("S4").num), STRING)
        self.assertIs(to_internal_type(np.dtype("U4").num), STRING)
        self.assertTrue(is_string_code(np.dtype("U1").num))
        self.assertFalse(is_string_code(np.dtype(np.float32).num))

    def test_unsupported_codes_yield_undefined(self):
        for dt in (np.complex64, np.complex128, np.uint32, np.uint64):
            with self.subTest(dtype=np.dtype(dt).name):
                meta = to_internal_type(np.dtype(dt).num)
                self.assertEqual(meta.id, 0)
        self.assertIs(to_internal_type(UNSUPPORTED_CODE), UNDEFINED)


class TestNumpyDtypeForCode(unittest.TestCase):
    def test_allocation_dtypes(self):
        self.assertEqual(numpy_dtype_for_code(to_external_code(FLOAT)), np.dtype(np.float32))
        self.assertEqual(numpy_dtype_for_code(to_external_code(STRING)), np.dtype(object))

    def test_unknown_code_raises_key_error(self):
        with self.assertRaises(KeyError):
            numpy_dtype_for_code(UNSUPPORTED_CODE)


if __name__ == "__main__":
    unittest.main()
