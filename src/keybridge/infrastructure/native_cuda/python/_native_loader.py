"""
Cached loader for the KeyBridge CUDA native library.

This module resolves the compiled CUDA runtime shim (the shared library that
exports the ``keybridge_cuda_*`` symbols), makes its dependency directories
discoverable on Windows, and returns a `ctypes.CDLL` handle that is reused
across the codebase.

Key behaviors
-------------
- Cached singleton: `load_keybridge_cuda_native()` is decorated with
  `lru_cache` so the library is loaded only once per process.
- Explicit override: the ``KEYBRIDGE_CUDA_NATIVE`` environment variable, when
  set, names the library file to load.
- Default location: ``native_cuda/keybridge_cuda_native/<build>/`` inside the
  package, with a platform-specific file name (``KeyBridgeCudaNative.dll`` on
  Windows, ``libkeybridge_cuda_native.so`` elsewhere).
- Dependency resolution (Windows): ``<CUDA_PATH>/bin`` and the library's own
  directory are registered via `os.add_dll_directory`, falling back to
  prepending onto ``PATH`` on WinError 206.
- Explicit failure: raises `FileNotFoundError` if the resolved file does not
  exist. The package ships no compiled library; the default location is only
  populated by a local build.
"""

from __future__ import annotations

import ctypes
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

_ENV_LIBRARY = "KEYBRIDGE_CUDA_NATIVE"


def _default_library_path() -> Path:
    base = Path(__file__).resolve().parents[1] / "keybridge_cuda_native"
    if sys.platform == "win32":
        return base / "x64" / "Release" / "KeyBridgeCudaNative.dll"
    return base / "build" / "libkeybridge_cuda_native.so"


def resolve_library_path() -> Path:
    """
    Return the path of the CUDA native library to load.

    ``KEYBRIDGE_CUDA_NATIVE`` takes precedence over the in-package default.
    """
    override = os.environ.get(_ENV_LIBRARY, "")
    if override:
        return Path(override).expanduser().resolve()
    return _default_library_path().resolve()


def _add_dll_dir_or_path(dir_path: str) -> None:
    """
    Add a directory for DLL dependency resolution (Windows only).

    Uses `os.add_dll_directory(dir_path)`. Some Windows setups raise
    WinError 206 ("The filename or extension is too long"); in that case the
    directory is prepended to ``PATH`` for the current process instead.

    Raises
    ------
    OSError
        Re-raised if `os.add_dll_directory` fails for reasons other than
        WinError 206.
    """
    if not dir_path or not os.path.isdir(dir_path):
        return
    add_dll_directory = getattr(os, "add_dll_directory", None)
    if add_dll_directory is None:
        return

    try:
        add_dll_directory(dir_path)
    except OSError as e:
        # WinError 206: The filename or extension is too long
        if getattr(e, "winerror", None) != 206:
            raise
        cur = os.environ.get("PATH", "")
        parts = cur.split(os.pathsep) if cur else []
        if dir_path not in parts:
            os.environ["PATH"] = dir_path + os.pathsep + cur if cur else dir_path


@lru_cache(maxsize=1)
def load_keybridge_cuda_native() -> ctypes.CDLL:
    """
    Load and cache the KeyBridge CUDA native library.

    Environment variables
    ---------------------
    KEYBRIDGE_CUDA_NATIVE : str, optional
        Explicit path of the library file.
    CUDA_PATH : str, optional
        If set, ``<CUDA_PATH>/bin`` is added to the DLL search path (Windows).

    Returns
    -------
    ctypes.CDLL
        Loaded library handle.

    Raises
    ------
    FileNotFoundError
        If the resolved library file does not exist.
    OSError
        If the library fails to load.
    """
    p = resolve_library_path()
    if not p.exists():
        raise FileNotFoundError(
            f"KeyBridge CUDA native library not found at: {p}. The library is "
            f"not built by this package; set {_ENV_LIBRARY} to a shared library "
            "exporting the keybridge_cuda_* runtime symbols."
        )

    if sys.platform == "win32":
        cuda_path = os.environ.get("CUDA_PATH", "")
        if cuda_path:
            _add_dll_dir_or_path(os.path.join(cuda_path, "bin"))
        _add_dll_dir_or_path(str(p.parent))

    lib = ctypes.CDLL(str(p))
    logger.info("Loaded KeyBridge CUDA native library from %s", p)
    return lib
