"""
Translation between internal type tags and NumPy type numbers.

The tensor bridge lives between two independent type universes: internal
`TypeMeta` descriptors and NumPy's integer type numbers (``dtype.num``,
the ``NPY_*`` codes). This module holds the finite table between them.

Both directions are partial functions, and neither raises:

- `to_external_code(meta)` returns `UNSUPPORTED_CODE` (-1) when the internal
  type has no NumPy analogue (``bfloat16``, payload types, `UNDEFINED`).
- `to_internal_type(code)` returns `UNDEFINED` (``id == 0``) when the NumPy
  type has no internal analogue.

Callers turn those sentinels into descriptive errors. Both lookups are pure
and cached.

Reverse-only entries
--------------------
NumPy spells some widths more than once. ``NPY_LONG`` (the platform
``long``) maps by its width, and fixed-width byte strings (``NPY_STRING``)
and unicode strings (``NPY_UNICODE``) both map to ``string``. Fetching a
string tensor always produces ``NPY_OBJECT`` arrays of ``bytes``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict

import numpy as np

from ._type_meta import (
    TypeMeta,
    UNDEFINED,
    BOOL,
    DOUBLE,
    FLOAT,
    FLOAT16,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT8,
    UINT16,
    STRING,
)

UNSUPPORTED_CODE = -1

NPY_BOOL = np.dtype(np.bool_).num
NPY_BYTE = np.dtype(np.byte).num
NPY_UBYTE = np.dtype(np.ubyte).num
NPY_SHORT = np.dtype(np.short).num
NPY_USHORT = np.dtype(np.ushort).num
NPY_INT = np.dtype(np.intc).num
NPY_LONG = np.dtype("l").num
NPY_LONGLONG = np.dtype("q").num
NPY_HALF = np.dtype(np.half).num
NPY_FLOAT = np.dtype(np.single).num
NPY_DOUBLE = np.dtype(np.double).num
NPY_OBJECT = np.dtype(np.object_).num
NPY_STRING = np.dtype(np.bytes_).num
NPY_UNICODE = np.dtype(np.str_).num

_TO_NUMPY: Dict[int, int] = {
    BOOL.id: NPY_BOOL,
    DOUBLE.id: NPY_DOUBLE,
    FLOAT.id: NPY_FLOAT,
    FLOAT16.id: NPY_HALF,
    INT32.id: NPY_INT,
    INT8.id: NPY_BYTE,
    INT16.id: NPY_SHORT,
    INT64.id: NPY_LONGLONG,
    UINT8.id: NPY_UBYTE,
    UINT16.id: NPY_USHORT,
    STRING.id: NPY_OBJECT,
}

_SIGNED_BY_WIDTH = {1: INT8, 2: INT16, 4: INT32, 8: INT64}

_FROM_NUMPY: Dict[int, TypeMeta] = {
    NPY_BOOL: BOOL,
    NPY_DOUBLE: DOUBLE,
    NPY_FLOAT: FLOAT,
    NPY_HALF: FLOAT16,
    NPY_INT: INT32,
    NPY_BYTE: INT8,
    NPY_SHORT: INT16,
    NPY_LONG: _SIGNED_BY_WIDTH[np.dtype("l").itemsize],
    NPY_LONGLONG: INT64,
    NPY_UBYTE: UINT8,
    NPY_USHORT: UINT16,
    NPY_OBJECT: STRING,
    NPY_STRING: STRING,
    NPY_UNICODE: STRING,
}

# Allocation dtype per supported external code.
_CODE_DTYPES: Dict[int, np.dtype] = {
    NPY_BOOL: np.dtype(np.bool_),
    NPY_BYTE: np.dtype(np.byte),
    NPY_UBYTE: np.dtype(np.ubyte),
    NPY_SHORT: np.dtype(np.short),
    NPY_USHORT: np.dtype(np.ushort),
    NPY_INT: np.dtype(np.intc),
    NPY_LONG: np.dtype("l"),
    NPY_LONGLONG: np.dtype("q"),
    NPY_HALF: np.dtype(np.half),
    NPY_FLOAT: np.dtype(np.single),
    NPY_DOUBLE: np.dtype(np.double),
    NPY_OBJECT: np.dtype(np.object_),
}


@lru_cache(maxsize=None)
def to_external_code(meta: TypeMeta) -> int:
    """
    Translate an internal type to a NumPy type number.

    Parameters
    ----------
    meta : TypeMeta
        Internal element type.

    Returns
    -------
    int
        The NumPy type number, or `UNSUPPORTED_CODE` if there is none.
    """
    return _TO_NUMPY.get(meta.id, UNSUPPORTED_CODE)


@lru_cache(maxsize=None)
def to_internal_type(code: int) -> TypeMeta:
    """
    Translate a NumPy type number to an internal type.

    Parameters
    ----------
    code : int
        NumPy type number (``ndarray.dtype.num``).

    Returns
    -------
    TypeMeta
        The internal element type, or `UNDEFINED` (``id == 0``).
    """
    return _FROM_NUMPY.get(int(code), UNDEFINED)


def numpy_dtype_for_code(code: int) -> np.dtype:
    """
    Return the NumPy dtype used to allocate arrays of type number `code`.

    Raises
    ------
    KeyError
        If `code` is not one of the codes produced by `to_external_code`.
    """
    return _CODE_DTYPES[int(code)]


def is_string_code(code: int) -> bool:
    """Return True if `code` denotes the variable-length string kind."""
    return to_internal_type(code) == STRING
