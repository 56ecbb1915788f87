"""
Minimal named-blob workspace.

A `Workspace` maps blob names to `Blob` objects and offers the bridge and
operator entry points keyed by name. It does not build or schedule graphs;
`run_operator_once` creates and runs a single operator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ...domain._errors import PreconditionError, enforce
from ...domain._operator_def import OperatorDef
from ...domain.device._device_option import DeviceOption
from ..bridge._api import feed_blob, fetch_blob
from ..operators._operator import create_operator
from ..tensor._blob import Blob

logger = logging.getLogger(__name__)


class Workspace:
    """Name -> `Blob` table."""

    def __init__(self) -> None:
        self._blobs: Dict[str, Blob] = {}

    def create_blob(self, name: str) -> Blob:
        """Return the blob called `name`, creating an empty one if needed."""
        blob = self._blobs.get(name)
        if blob is None:
            blob = Blob()
            self._blobs[name] = blob
            logger.debug("created blob %s", name)
        return blob

    def has_blob(self, name: str) -> bool:
        return name in self._blobs

    def get_blob(self, name: str) -> Optional[Blob]:
        return self._blobs.get(name)

    def remove_blob(self, name: str) -> bool:
        """Remove `name`; return True if it existed."""
        return self._blobs.pop(name, None) is not None

    def blobs(self) -> list[str]:
        """Return the blob names (sorted)."""
        return sorted(self._blobs)

    def feed_blob(
        self, name: str, value: Any, device_option: Optional[DeviceOption] = None
    ) -> None:
        """Feed `value` into blob `name`, creating the blob if needed."""
        feed_blob(self.create_blob(name), value, device_option)

    def fetch_blob(self, name: str) -> Any:
        """
        Fetch a copy of blob `name`.

        Raises
        ------
        PreconditionError
            If the blob does not exist.
        """
        blob = self._blobs.get(name)
        enforce(blob is not None, "Blob ", name, " does not exist.", error=PreconditionError)
        return fetch_blob(blob)

    def run_operator_once(self, op_def: OperatorDef) -> None:
        """Create the operator described by `op_def` and run it once."""
        create_operator(op_def, self).run()
