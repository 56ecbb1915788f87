"""
Type-erased single-payload container.

A `Blob` holds at most one Python object of any type together with that
type's `TypeMeta`. The bridge looks fetchers up by the payload's type id,
and feeders use `get_mutable` to obtain (or create) a payload of the class
they populate.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from ...domain._errors import PreconditionError, enforce
from ..types._type_meta import TypeMeta, UNDEFINED, type_meta_of

T = TypeVar("T")


class Blob:
    """
    Container for a single, arbitrarily typed payload.

    Parameters
    ----------
    payload : Any, optional
        Initial payload. None leaves the blob empty.
    """

    __slots__ = ("_payload", "_meta")

    def __init__(self, payload: Optional[Any] = None) -> None:
        self._payload: Any = None
        self._meta: TypeMeta = UNDEFINED
        if payload is not None:
            self.reset(payload)

    @property
    def meta(self) -> TypeMeta:
        """Type descriptor of the payload (`UNDEFINED` when empty)."""
        return self._meta

    @property
    def type_name(self) -> str:
        return self._meta.name

    @property
    def payload(self) -> Any:
        return self._payload

    def is_empty(self) -> bool:
        return self._payload is None

    def is_type(self, cls: Type[Any]) -> bool:
        """Return True if the payload is exactly of class `cls`."""
        return self._payload is not None and self._meta == type_meta_of(cls)

    def get(self, cls: Type[T]) -> T:
        """
        Return the payload, checking it is of class `cls`.

        Raises
        ------
        PreconditionError
            If the blob is empty or holds another type.
        """
        enforce(
            self.is_type(cls),
            "wrong type for the Blob instance. Blob contains ",
            self._meta.name,
            " while caller expects ",
            type_meta_of(cls).name,
            error=PreconditionError,
        )
        return self._payload

    def get_mutable(self, cls: Type[T]) -> T:
        """
        Return the payload if it is of class `cls`, otherwise replace it
        with a default-constructed ``cls()`` and return that.
        """
        if self.is_type(cls):
            return self._payload
        return self.reset(cls())

    def reset(self, payload: Optional[Any] = None) -> Any:
        """Replace the payload (None empties the blob) and return it."""
        self._payload = payload
        self._meta = UNDEFINED if payload is None else type_meta_of(type(payload))
        return payload

    def __repr__(self) -> str:
        return f"Blob(type={self._meta.name})"
