"""
Exceptions for KeyBridge.

This module defines the runtime errors raised by the tensor bridge, the
operator layer and the device backends. All of them are fail-fast: they are
raised at the point where the problem is detected, carry a message naming
the offending type, value or device, and are never caught inside the
library. Whether a failed feed/fetch or operator run aborts the whole
program is decided by the caller.

Hierarchy
---------
- `EnforceError`: base class for violated runtime checks.
    - `PreconditionError`: the caller broke a documented precondition
      (uninitialized tensor, wrong operator arity, invalid arguments).
    - `UnsupportedTypeError`: a type or device has no mapping / handler.
    - `ForeignObjectError`: an element of a foreign array cannot be read.
    - `ArrayConstructionError`: building a foreign array element failed.
    - `SchemaError`: an operator definition does not match its schema.
- `DeviceNotSupportedError`: an operation has no implementation for a device.
"""

from __future__ import annotations

from typing import Any, Type


class EnforceError(RuntimeError):
    """
    Raised when a runtime check enforced by the library fails.
    """


class PreconditionError(EnforceError):
    """
    Raised when a documented precondition of an operation is violated.

    Examples are fetching a tensor that was never resized, or asking the
    ConvTranspose gradient maker to handle a definition without exactly
    three inputs. These indicate programmer or graph-construction errors.
    """


class UnsupportedTypeError(EnforceError):
    """
    Raised when an element type, payload type or device-type code has no
    mapping or registered handler.
    """


class ForeignObjectError(EnforceError):
    """
    Raised when an element of a foreign array cannot be converted, e.g. a
    non-string object inside an object array fed as a string tensor.
    """


class ArrayConstructionError(EnforceError):
    """
    Raised when constructing an element of a new foreign array fails.

    By the time this is raised, every element constructed so far and the
    array itself have been released.
    """


class SchemaError(EnforceError):
    """
    Raised when an operator definition violates its registered schema.
    """


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when an operation is requested on a device backend that does not
    implement it (for example string tensors on CUDA).

    Attributes
    ----------
    op : str
        The name of the operation that was attempted.
    device : str
        String representation of the device on which the operation
        was attempted.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


def enforce(
    condition: Any, *parts: Any, error: Type[EnforceError] = EnforceError
) -> None:
    """
    Raise `error` with the concatenated `parts` if `condition` is falsy.

    Parameters
    ----------
    condition : Any
        Value tested for truthiness.
    *parts : Any
        Message fragments, converted with `str` and joined without
        separators.
    error : Type[EnforceError], optional
        Exception class to raise. Defaults to `EnforceError`.
    """
    if not condition:
        message = "".join(str(p) for p in parts) or "Enforce failed."
        raise error(message)
