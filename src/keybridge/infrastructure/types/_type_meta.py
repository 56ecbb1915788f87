"""
Internal type tags (`TypeMeta`) for KeyBridge.

Every element type a tensor can hold, and every payload type a blob can
hold, is identified by a `TypeMeta`: a small immutable descriptor with a
process-wide unique integer id. Ids are assigned in registration order
starting at 1; id 0 is reserved for `UNDEFINED`, the descriptor returned
when a type is unknown or not yet set.

Element types
-------------
The built-in element types are registered when this module is imported:
``bool``, ``float``, ``double``, ``float16``, ``bfloat16``, ``int8``,
``int16``, ``int32``, ``int64``, ``uint8``, ``uint16`` and ``string``.

- POD element types carry a NumPy storage dtype and a fixed itemsize.
- ``string`` is the variable-length kind: elements are Python ``bytes``
  stored in an object buffer, so it is flagged ``pod=False``.
- ``bfloat16`` has no NumPy dtype; tensors of that type are stored as raw
  2-byte words and cannot be exchanged with NumPy.

Payload types
-------------
Python classes stored in blobs (tensor classes, ``bytes``...) receive a
`TypeMeta` lazily through `type_meta_of(cls)`; repeated calls return the
same descriptor.

Thread safety
-------------
Registration is serialized by a module-level lock. Lookups read a dict.
"""

from __future__ import annotations

import threading
from typing import Dict, Hashable, Optional

import numpy as np


class TypeMeta:
    """
    Immutable descriptor of an internal element or payload type.

    Parameters
    ----------
    id : int
        Unique type id. 0 means undefined.
    name : str
        Human-readable type name used in error messages.
    itemsize : int
        Size in bytes of one element (0 for payload types).
    dtype : np.dtype or None
        NumPy dtype used for host storage, if any.
    pod : bool
        False for variable-length element types (``string``) and payloads.

    Notes
    -----
    Equality and hashing use the id only.
    """

    __slots__ = ("_id", "_name", "_itemsize", "_dtype", "_pod")

    def __init__(
        self,
        id: int,
        name: str,
        itemsize: int = 0,
        dtype: Optional[np.dtype] = None,
        pod: bool = True,
    ) -> None:
        self._id = int(id)
        self._name = str(name)
        self._itemsize = int(itemsize)
        self._dtype = None if dtype is None else np.dtype(dtype)
        self._pod = bool(pod)

    @property
    def id(self) -> int:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def itemsize(self) -> int:
        return self._itemsize

    @property
    def dtype(self) -> Optional[np.dtype]:
        return self._dtype

    @property
    def pod(self) -> bool:
        return self._pod

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeMeta):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __bool__(self) -> bool:
        return self._id != 0

    def __repr__(self) -> str:
        return f"TypeMeta(id={self._id}, name={self._name!r})"


UNDEFINED = TypeMeta(0, "undefined")

_LOCK = threading.Lock()
_BY_KEY: Dict[Hashable, TypeMeta] = {}
_BY_ID: Dict[int, TypeMeta] = {0: UNDEFINED}


def register_type(
    key: Hashable,
    name: str,
    *,
    itemsize: int = 0,
    dtype: Optional[np.dtype] = None,
    pod: bool = True,
) -> TypeMeta:
    """
    Register a new type under `key` and return its descriptor.

    Registering an already-registered key returns the existing descriptor
    unchanged, so module reloads do not mint new ids.

    Parameters
    ----------
    key : Hashable
        Lookup key (element type name or Python class).
    name : str
        Display name.
    itemsize, dtype, pod
        See `TypeMeta`.
    """
    with _LOCK:
        existing = _BY_KEY.get(key)
        if existing is not None:
            return existing
        meta = TypeMeta(len(_BY_ID), name, itemsize=itemsize, dtype=dtype, pod=pod)
        _BY_ID[meta.id] = meta
        _BY_KEY[key] = meta
        return meta


def type_meta_of(key: Hashable) -> TypeMeta:
    """
    Return the descriptor for `key`, registering Python classes on demand.

    Element type names (``"float"``, ``"string"``...) must already be
    registered; unknown names yield `UNDEFINED`.
    """
    meta = _BY_KEY.get(key)
    if meta is not None:
        return meta
    if isinstance(key, type):
        return register_type(key, key.__qualname__)
    return UNDEFINED


def type_meta_by_id(type_id: int) -> TypeMeta:
    """Return the descriptor with id `type_id`, or `UNDEFINED`."""
    return _BY_ID.get(int(type_id), UNDEFINED)


def _pod(name: str, np_type: type) -> TypeMeta:
    dt = np.dtype(np_type)
    return register_type(name, name, itemsize=dt.itemsize, dtype=dt)


BOOL = _pod("bool", np.bool_)
FLOAT = _pod("float", np.float32)
DOUBLE = _pod("double", np.float64)
FLOAT16 = _pod("float16", np.float16)
INT8 = _pod("int8", np.int8)
INT16 = _pod("int16", np.int16)
INT32 = _pod("int32", np.int32)
INT64 = _pod("int64", np.int64)
UINT8 = _pod("uint8", np.uint8)
UINT16 = _pod("uint16", np.uint16)
# Raw 16-bit words; no NumPy dtype exists for bfloat16.
BFLOAT16 = register_type("bfloat16", "bfloat16", itemsize=2, dtype=np.uint16)
STRING = register_type(
    "string",
    "string",
    itemsize=np.dtype(object).itemsize,
    dtype=np.dtype(object),
    pod=False,
)
