"""
KeyBridge: type-erased tensors, a NumPy tensor bridge and the ConvTranspose
operator family.
"""

__version__ = "0.1.0a0"

from .domain.device import Device, DeviceType, DeviceOption
from .infrastructure.tensor import Blob, TensorCPU, TensorCUDA
from .infrastructure.bridge import feed_blob, fetch_blob, register_builtin_handlers
from .infrastructure.workspace import Workspace
from .infrastructure._logging import setup_logging

__all__ = [
    "__version__",
    "Device",
    "DeviceType",
    "DeviceOption",
    "Blob",
    "TensorCPU",
    "TensorCUDA",
    "feed_blob",
    "fetch_blob",
    "register_builtin_handlers",
    "Workspace",
    "setup_logging",
]
