from ._base import BaseContext
from ._cpu import CPUContext
from ._cuda import CUDAContext

__all__ = ["BaseContext", "CPUContext", "CUDAContext"]
