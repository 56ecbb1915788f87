"""
Logging configuration helper.

KeyBridge modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Applications and scripts call
`setup_logging` once to route records to stdout.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

_ENV_LEVEL = "KEYBRIDGE_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(_ENV_LEVEL, "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure the root logger to write to stdout.

    Parameters
    ----------
    level : int or str, optional
        Log level. Defaults to the ``KEYBRIDGE_LOG_LEVEL`` environment
        variable, or INFO when unset.

    Raises
    ------
    ValueError
        If the level name is not a known logging level.
    """
    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
