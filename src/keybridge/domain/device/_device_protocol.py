"""
Structural contract for device descriptors.

`ITensor.device` is typed against `DeviceLike` rather than the concrete
`Device` class, so the domain layer only states what it reads from a device:
its category, its ordinal and a printable name for error messages.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DeviceLike(Protocol):
    """Anything exposing a device category, an ordinal and a display name."""

    type: object
    index: Optional[int]

    def is_cpu(self) -> bool: ...
    def is_cuda(self) -> bool: ...
    def __str__(self) -> str: ...
