"""
Blob bridge interface definitions.

The tensor bridge moves data between blobs (type-erased single-payload
containers) and external NumPy-like arrays. It is built from two families of
handlers, each resolved at runtime from a registry:

- `BlobFetcherBase`: produces a new external array from a blob's payload.
  Fetchers are keyed by the payload's type id.
- `BlobFeederBase`: populates a blob's payload from an external array on a
  requested device. Feeders are keyed by device-type code.

Concrete handlers live in the infrastructure layer; this module only states
the contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .device._device_option import DeviceOption
from .types._numpy import NDArrayLike


class BlobFetcherBase(ABC):
    """
    Handler that converts a blob's payload into an external array.
    """

    @abstractmethod
    def fetch(self, blob: Any) -> Any:
        """
        Return a new external object holding a copy of the blob's payload.

        Ownership of the returned object passes to the caller.
        """
        ...


class BlobFeederBase(ABC):
    """
    Handler that populates a blob from an external array.
    """

    @abstractmethod
    def feed(self, option: DeviceOption, array: NDArrayLike, blob: Any) -> None:
        """
        Copy `array` into the blob's payload on the device named by `option`.

        The array is borrowed: it is neither modified nor retained.
        """
        ...
