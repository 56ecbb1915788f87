"""
Internal type tags and their NumPy translation table.
"""

from ._type_meta import (
    TypeMeta,
    UNDEFINED,
    BOOL,
    FLOAT,
    DOUBLE,
    FLOAT16,
    BFLOAT16,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT8,
    UINT16,
    STRING,
    register_type,
    type_meta_of,
    type_meta_by_id,
)
from ._numpy_mapping import (
    UNSUPPORTED_CODE,
    to_external_code,
    to_internal_type,
    numpy_dtype_for_code,
    is_string_code,
)

__all__ = [
    "TypeMeta",
    "UNDEFINED",
    "BOOL",
    "FLOAT",
    "DOUBLE",
    "FLOAT16",
    "BFLOAT16",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT8",
    "UINT16",
    "STRING",
    "register_type",
    "type_meta_of",
    "type_meta_by_id",
    "UNSUPPORTED_CODE",
    "to_external_code",
    "to_internal_type",
    "numpy_dtype_for_code",
    "is_string_code",
]
