import unittest

import numpy as np

from src.keybridge.domain._bridge import BlobFeederBase, BlobFetcherBase
from src.keybridge.infrastructure.bridge import (
    BlobFeederRegistry,
    BlobFetcherRegistry,
    TypedRegistry,
    create_feeder,
    create_fetcher,
    register_blob_feeder,
    register_blob_fetcher,
    register_builtin_handlers,
)
from src.keybridge.infrastructure.bridge import TensorFeederCPU, TensorFetcherCPU
from src.keybridge.infrastructure.tensor import TensorCPU
from src.keybridge.infrastructure.types import type_meta_of


class _UnregisteredPayload:
    pass


class _CustomPayload:
    pass


class TestTypedRegistry(unittest.TestCase):
    def test_create_unknown_key_returns_none(self):
        reg: TypedRegistry[str, object] = TypedRegistry("test")
        self.assertIsNone(reg.create("missing"))
        self.assertFalse(reg.has("missing"))
        self.assertEqual(len(reg), 0)

    def test_register_decorator_returns_class(self):
        reg: TypedRegistry[str, object] = TypedRegistry("test")

        @reg.register("a")
        class A:
            def __init__(self, value=0):
                self.value = value

        self.assertIn("a", reg)
        self.assertEqual(reg.keys(), ("a",))
        self.assertIsInstance(reg.create("a"), A)
        self.assertEqual(reg.create("a", value=5).value, 5)
        self.assertIsNot(reg.create("a"), reg.create("a"))

    def test_duplicate_key_rejected(self):
        reg: TypedRegistry[int, object] = TypedRegistry("test")
        reg.add(1, object)
        with self.assertRaises(ValueError):
            reg.add(1, dict)

    def test_overwrite(self):
        reg: TypedRegistry[int, object] = TypedRegistry("test")
        reg.add(1, list)
        reg.add(1, dict, overwrite=True)
        self.assertEqual(reg.create(1), {})

    def test_repr_names_registry(self):
        reg: TypedRegistry[int, object] = TypedRegistry("things")
        reg.add(3, list)
        self.assertIn("things", repr(reg))


class TestBridgeRegistries(unittest.TestCase):
    def test_builtins_registered(self):
        register_builtin_handlers()
        register_builtin_handlers()
        self.assertIsInstance(
            create_fetcher(type_meta_of(TensorCPU).id), TensorFetcherCPU
        )
        self.assertIsInstance(create_feeder(0), TensorFeederCPU)

    def test_unregistered_keys(self):
        register_builtin_handlers()
        self.assertIsNone(create_fetcher(type_meta_of(_UnregisteredPayload).id))
        self.assertIsNone(create_feeder(12345))

    def test_custom_fetcher(self):
        @register_blob_fetcher(type_meta_of(_CustomPayload), overwrite=True)
        class PayloadFetcher(BlobFetcherBase):
            def fetch(self, blob):
                return "payload"

        fetcher = create_fetcher(type_meta_of(_CustomPayload).id)
        self.assertIsInstance(fetcher, PayloadFetcher)
        self.assertIn(type_meta_of(_CustomPayload).id, BlobFetcherRegistry)

    def test_custom_feeder(self):
        @register_blob_feeder(97, overwrite=True)
        class RecordingFeeder(BlobFeederBase):
            def feed(self, option, array, blob):
                blob.reset(np.asarray(array).tolist())

        self.assertIn(97, BlobFeederRegistry)
        self.assertIsInstance(create_feeder(97), RecordingFeeder)


if __name__ == "__main__":
    unittest.main()
