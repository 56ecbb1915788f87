"""
Device descriptors.

- `DeviceType`: the integer device-type codes. They appear verbatim in
  `DeviceOption.device_type` and key the blob feeder registry, so the values
  are part of the public contract (``CPU == 0``, ``CUDA == 1``).
- `Device`: a parsed, hashable ``"cpu"`` / ``"cuda:<index>"`` descriptor
  reported by tensors and contexts.

Nothing here touches a backend; constructing ``Device("cuda:3")`` on a
machine without a GPU is fine.
"""

from enum import IntEnum
import re
from typing import Optional, Tuple


class DeviceType(IntEnum):
    """Device-type codes. Unknown codes are represented as plain ints."""

    CPU = 0
    CUDA = 1


_SPEC = re.compile(r"^(cpu)$|^cuda:(\d+)$")


def _parse(device: str) -> Tuple[DeviceType, Optional[int]]:
    m = _SPEC.match(device)
    if m is None:
        raise ValueError(
            f"Invalid device '{device}'. Expected 'cpu' or 'cuda:<index>'"
        )
    if m.group(1):
        return DeviceType.CPU, None
    return DeviceType.CUDA, int(m.group(2))


class Device:
    """
    Parsed device descriptor.

    Parameters
    ----------
    device : str
        ``"cpu"`` or ``"cuda:<index>"`` with a non-negative decimal index.

    Attributes
    ----------
    type : DeviceType
        Device category.
    index : int or None
        CUDA ordinal; None for the CPU.

    Raises
    ------
    ValueError
        If `device` has any other form (case matters, no whitespace).
    """

    __slots__ = ("type", "index")

    def __init__(self, device: str):
        self.type, self.index = _parse(device)

    @classmethod
    def cpu(cls) -> "Device":
        return cls("cpu")

    @classmethod
    def cuda(cls, index: int = 0) -> "Device":
        """Return the CUDA device with ordinal `index`."""
        return cls(f"cuda:{int(index)}")

    def is_cpu(self) -> bool:
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        return self.type is DeviceType.CUDA

    def _key(self) -> Tuple[DeviceType, Optional[int]]:
        return self.type, self.index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return "cpu" if self.is_cpu() else f"cuda:{self.index}"

    def __repr__(self) -> str:
        return f"Device('{self}')"
