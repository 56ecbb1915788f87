import unittest

import numpy as np

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
    TypeMeta,
    register_type,
    type_meta_by_id,
    type_meta_of,
)

BUILTINS = (BOOL, FLOAT, DOUBLE, FLOAT16, INT8, INT16, INT32, INT64, UINT8, UINT16, BFLOAT16, STRING)


class TestTypeMeta(unittest.TestCase):
    def test_undefined_has_id_zero_and_is_falsy(self):
        self.assertEqual(UNDEFINED.id, 0)
        self.assertFalse(UNDEFINED)
        for meta in BUILTINS:
            self.assertTrue(meta)

    def test_builtin_ids_are_unique(self):
        ids = [m.id for m in BUILTINS]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertNotIn(0, ids)

    def test_pod_itemsizes_match_numpy(self):
        pairs = {
            BOOL: np.bool_,
            FLOAT: np.float32,
            DOUBLE: np.float64,
            FLOAT16: np.float16,
            INT8: np.int8,
            INT16: np.int16,
            INT32: np.int32,
            INT64: np.int64,
            UINT8: np.uint8,
            UINT16: np.uint16,
        }
        for meta, np_type in pairs.items():
            with self.subTest(meta=meta.name):
                self.assertTrue(meta.pod)
                self.assertEqual(meta.itemsize, np.dtype(np_type).itemsize)
                self.assertEqual(meta.dtype, np.dtype(np_type))

    def test_string_is_not_pod(self):
        self.assertFalse(STRING.pod)
        self.assertEqual(STRING.dtype, np.dtype(object))

    def test_bfloat16_is_two_byte_words(self):
        self.assertEqual(BFLOAT16.itemsize, 2)

    def test_lookup_by_name_and_id(self):
        self.assertIs(type_meta_of("float"), FLOAT)
        self.assertIs(type_meta_by_id(INT64.id), INT64)
        self.assertIs(type_meta_of("no-such-type"), UNDEFINED)
        self.assertIs(type_meta_by_id(10**6), UNDEFINED)

    def test_classes_are_registered_on_demand_with_stable_ids(self):
        class Payload:
            pass

        first = type_meta_of(Payload)
        second = type_meta_of(Payload)
        self.assertIs(first, second)
        self.assertTrue(first)
        self.assertEqual(first.name, Payload.__qualname__)
        self.assertIs(type_meta_by_id(first.id), first)

    def test_register_existing_key_returns_existing(self):
        self.assertIs(register_type("float", "float"), FLOAT)

    def test_equality_is_by_id(self):
        clone = TypeMeta(FLOAT.id, "other-name")
        self.assertEqual(clone, FLOAT)
        self.assertEqual(hash(clone), hash(FLOAT))
        self.assertNotEqual(FLOAT, DOUBLE)


if __name__ == "__main__":
    unittest.main()
