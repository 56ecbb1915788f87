"""
Device option record passed to blob feeders.

A `DeviceOption` is the opaque configuration structure that tells a feeder
which device a tensor should be materialized on. It carries a raw integer
device-type code rather than a `DeviceType` member: unknown codes are legal
values, and deciding whether a code is supported is the job of the feeder
registry, not of this record.
"""

from __future__ import annotations

from dataclasses import dataclass

from ._device import Device, DeviceType


@dataclass(frozen=True)
class DeviceOption:
    """
    Target device of a feed operation.

    Attributes
    ----------
    device_type : int
        Device-type code (`DeviceType.CPU == 0`, `DeviceType.CUDA == 1`).
    cuda_gpu_id : int
        CUDA device ordinal. Ignored for CPU options.
    """

    device_type: int = int(DeviceType.CPU)
    cuda_gpu_id: int = 0

    def __post_init__(self) -> None:
        if int(self.cuda_gpu_id) < 0:
            raise ValueError(f"cuda_gpu_id must be >= 0, got {self.cuda_gpu_id}")

    @classmethod
    def cpu(cls) -> "DeviceOption":
        return cls(device_type=int(DeviceType.CPU))

    @classmethod
    def cuda(cls, gpu_id: int = 0) -> "DeviceOption":
        return cls(device_type=int(DeviceType.CUDA), cuda_gpu_id=int(gpu_id))

    @classmethod
    def from_device(cls, device: Device) -> "DeviceOption":
        """Build the option that targets `device`."""
        if device.is_cuda():
            return cls.cuda(int(device.index or 0))
        return cls.cpu()

    def to_device(self) -> Device:
        """
        Convert the option to a `Device`.

        Raises
        ------
        ValueError
            If `device_type` is not a known `DeviceType` code.
        """
        if self.device_type == DeviceType.CPU:
            return Device.cpu()
        if self.device_type == DeviceType.CUDA:
            return Device.cuda(int(self.cuda_gpu_id))
        raise ValueError(f"Unknown device type code: {self.device_type}")
