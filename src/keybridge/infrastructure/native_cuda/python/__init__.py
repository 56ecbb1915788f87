from ._native_loader import load_keybridge_cuda_native, resolve_library_path
from .cuda_runtime_ctypes import CudaRuntime, load_cuda_runtime

__all__ = [
    "load_keybridge_cuda_native",
    "resolve_library_path",
    "CudaRuntime",
    "load_cuda_runtime",
]
