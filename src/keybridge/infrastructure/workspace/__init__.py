from ._workspace import Workspace

__all__ = ["Workspace"]
