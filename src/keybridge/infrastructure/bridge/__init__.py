from ._array_handles import BorrowedArrayView, OwnedArrayHandle
from ._registry import (
    TypedRegistry,
    BlobFetcherRegistry,
    BlobFeederRegistry,
    register_blob_fetcher,
    register_blob_feeder,
    create_fetcher,
    create_feeder,
)
from ._fetcher import TensorFetcher, TensorFetcherCPU, TensorFetcherCUDA, BytesFetcher
from ._feeder import TensorFeeder, TensorFeederCPU, TensorFeederCUDA
from ._api import register_builtin_handlers, fetch_blob, feed_blob

__all__ = [
    "BorrowedArrayView",
    "OwnedArrayHandle",
    "TypedRegistry",
    "BlobFetcherRegistry",
    "BlobFeederRegistry",
    "register_blob_fetcher",
    "register_blob_feeder",
    "create_fetcher",
    "create_feeder",
    "TensorFetcher",
    "TensorFetcherCPU",
    "TensorFetcherCUDA",
    "BytesFetcher",
    "TensorFeeder",
    "TensorFeederCPU",
    "TensorFeederCUDA",
    "register_builtin_handlers",
    "fetch_blob",
    "feed_blob",
]
