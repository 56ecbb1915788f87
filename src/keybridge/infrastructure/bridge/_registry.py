"""
Keyed handler registries for the tensor bridge.

The bridge resolves its handlers at runtime from two process-wide tables:

- `BlobFetcherRegistry`: payload type id (``TypeMeta.id``) -> fetcher class.
- `BlobFeederRegistry`: device-type code (``DeviceOption.device_type``) ->
  feeder class.

Both are instances of `TypedRegistry`, an append-only mapping from a key to
a handler constructor. Handlers are registered with a decorator:

    @register_blob_feeder(7)
    class MyDeviceFeeder(BlobFeederBase): ...

and instantiated on demand:

    feeder = create_feeder(option.device_type)   # new instance or None

Notes
-----
- Registering a key twice raises `ValueError` unless ``overwrite=True``.
- `create` never raises for unknown keys; it returns None so the caller can
  produce an error naming what was looked up.
- Registration is serialized by a lock. Lookups are plain dict reads and
  are expected to happen after registration has completed.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Generic, Hashable, Optional

from typing_extensions import TypeVar

from ...domain._bridge import BlobFeederBase, BlobFetcherBase
from ..types._type_meta import TypeMeta

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
C = TypeVar("C", bound=Callable[..., object])


class TypedRegistry(Generic[K, V]):
    """
    Append-only table from keys to handler constructors.

    Parameters
    ----------
    name : str
        Registry name used in log records and error messages.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._creators: Dict[K, Callable[..., V]] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def register(self, key: K, *, overwrite: bool = False) -> Callable[[C], C]:
        """
        Decorator registering a constructor under `key`.

        Parameters
        ----------
        key : Hashable
            Lookup key.
        overwrite : bool, optional
            If False (default), raises if `key` is already registered.
        """

        def decorator(creator: C) -> C:
            self.add(key, creator, overwrite=overwrite)
            return creator

        return decorator

    def add(self, key: K, creator: Callable[..., V], *, overwrite: bool = False) -> None:
        """Register `creator` under `key` (non-decorator form)."""
        with self._lock:
            if not overwrite and key in self._creators:
                raise ValueError(f"{self._name}: key already registered: {key!r}")
            self._creators[key] = creator
        logger.debug(
            "%s: registered %r -> %s",
            self._name,
            key,
            getattr(creator, "__qualname__", repr(creator)),
        )

    def has(self, key: K) -> bool:
        return key in self._creators

    def keys(self) -> tuple:
        return tuple(self._creators)

    def create(self, key: K, *args: Any, **kwargs: Any) -> Optional[V]:
        """
        Return a new handler for `key`, or None if `key` is unregistered.

        Extra arguments are forwarded to the registered constructor.
        """
        creator = self._creators.get(key)
        if creator is None:
            return None
        return creator(*args, **kwargs)

    def __contains__(self, key: object) -> bool:
        return key in self._creators

    def __len__(self) -> int:
        return len(self._creators)

    def __repr__(self) -> str:
        return f"TypedRegistry({self._name!r}, keys={sorted(self._creators, key=repr)})"


BlobFetcherRegistry: TypedRegistry[int, BlobFetcherBase] = TypedRegistry(
    "BlobFetcherRegistry"
)
BlobFeederRegistry: TypedRegistry[int, BlobFeederBase] = TypedRegistry(
    "BlobFeederRegistry"
)


def register_blob_fetcher(meta: TypeMeta, *, overwrite: bool = False) -> Callable[[C], C]:
    """Register a fetcher class for payloads of type `meta`."""
    return BlobFetcherRegistry.register(meta.id, overwrite=overwrite)


def register_blob_feeder(device_type: int, *, overwrite: bool = False) -> Callable[[C], C]:
    """Register a feeder class for the device-type code `device_type`."""
    return BlobFeederRegistry.register(int(device_type), overwrite=overwrite)


def create_fetcher(type_id: int) -> Optional[BlobFetcherBase]:
    """Return a new fetcher for payload type id `type_id`, or None."""
    return BlobFetcherRegistry.create(int(type_id))


def create_feeder(device_type: int) -> Optional[BlobFeederBase]:
    """Return a new feeder for device-type code `device_type`, or None."""
    return BlobFeederRegistry.create(int(device_type))
