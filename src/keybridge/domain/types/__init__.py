from ._numpy import NDArrayLike

__all__ = ["NDArrayLike"]
