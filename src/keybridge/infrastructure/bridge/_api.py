"""
Public entry points of the tensor bridge.

`fetch_blob` and `feed_blob` resolve the right handler from the registries
and delegate to it. The built-in handlers are installed by
`register_builtin_handlers`, which both entry points call before their
first lookup; calling it again is a no-op.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import numpy as np

from ...domain._errors import UnsupportedTypeError
from ...domain.device._device import DeviceType
from ...domain.device._device_option import DeviceOption
from ..tensor._blob import Blob
from ..tensor._tensor import TensorCPU, TensorCUDA
from ..types._type_meta import type_meta_of
from ._feeder import TensorFeederCPU, TensorFeederCUDA
from ._fetcher import BytesFetcher, TensorFetcherCPU, TensorFetcherCUDA
from ._registry import (
    BlobFeederRegistry,
    BlobFetcherRegistry,
    create_feeder,
    create_fetcher,
)

logger = logging.getLogger(__name__)

_builtins_lock = threading.Lock()
_builtins_registered = False


def register_builtin_handlers() -> None:
    """
    Install the built-in fetchers and feeders.

    Keys that are already registered (for example by an application that
    installed its own CPU feeder first) are left untouched.
    """
    global _builtins_registered
    if _builtins_registered:
        return
    with _builtins_lock:
        if _builtins_registered:
            return
        fetchers = (
            (type_meta_of(TensorCPU).id, TensorFetcherCPU),
            (type_meta_of(TensorCUDA).id, TensorFetcherCUDA),
            (type_meta_of(bytes).id, BytesFetcher),
        )
        for key, creator in fetchers:
            if key not in BlobFetcherRegistry:
                BlobFetcherRegistry.add(key, creator)

        feeders = (
            (int(DeviceType.CPU), TensorFeederCPU),
            (int(DeviceType.CUDA), TensorFeederCUDA),
        )
        for key, creator in feeders:
            if key not in BlobFeederRegistry:
                BlobFeederRegistry.add(key, creator)

        _builtins_registered = True
        logger.debug("registered built-in blob fetchers and feeders")


def fetch_blob(blob: Blob) -> Any:
    """
    Return a copy of the blob's payload as an external object.

    Tensor payloads become new NumPy arrays, ``bytes`` payloads are returned
    as-is.

    Raises
    ------
    UnsupportedTypeError
        If no fetcher is registered for the payload's type.
    """
    register_builtin_handlers()
    fetcher = create_fetcher(blob.meta.id)
    if fetcher is None:
        raise UnsupportedTypeError(
            f"No blob fetcher registered for payload type: {blob.type_name}."
        )
    return fetcher.fetch(blob)


def feed_blob(
    blob: Blob, value: Any, device_option: Optional[DeviceOption] = None
) -> None:
    """
    Populate `blob` from `value`.

    Parameters
    ----------
    blob : Blob
        Destination blob.
    value : Any
        ``bytes`` or ``str`` values are stored as a ``bytes`` payload
        (``str`` is UTF-8 encoded). Anything else is converted with
        `np.asarray` and fed as a tensor.
    device_option : DeviceOption, optional
        Target device. Defaults to the CPU.

    Raises
    ------
    UnsupportedTypeError
        If no feeder is registered for ``device_option.device_type``, or the
        array's dtype is unsupported.
    """
    if isinstance(value, str):
        blob.reset(value.encode("utf-8"))
        return
    if isinstance(value, bytes):
        blob.reset(bytes(value))
        return

    register_builtin_handlers()
    option = device_option if device_option is not None else DeviceOption()
    feeder = create_feeder(option.device_type)
    if feeder is None:
        raise UnsupportedTypeError(
            f"No blob feeder registered for device type: {option.device_type}."
        )
    array = value if isinstance(value, np.ndarray) else np.asarray(value)
    feeder.feed(option, array, blob)
