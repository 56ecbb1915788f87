from ._blob import Blob
from ._tensor import Tensor, TensorCPU, TensorCUDA

__all__ = ["Blob", "Tensor", "TensorCPU", "TensorCUDA"]
