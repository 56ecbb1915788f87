"""
Concrete runtime: NumPy/CUDA contexts, tensors, the tensor bridge and
operators.
"""
