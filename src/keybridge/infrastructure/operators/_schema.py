"""
Operator schemas.

An `OpSchema` is the static declaration of an operator type: how many
inputs and outputs it accepts, and human-readable documentation of each
slot. Schemas are created and registered with `operator_schema(name)` and
configured through a fluent builder:

    operator_schema("ConvTranspose") \\
        .num_inputs(3) \\
        .num_outputs(1) \\
        .set_doc("...") \\
        .input(0, "X", "...")

`OpSchema.verify(op_def)` checks an `OperatorDef` against the declared
arity and raises `SchemaError` when it does not match.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from ...domain._errors import SchemaError
from ...domain._operator_def import OperatorDef

logger = logging.getLogger(__name__)


class OpSchema:
    """
    Static declaration of an operator type.

    Parameters
    ----------
    name : str
        Operator type name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.doc: str = ""
        self.min_input = 0
        self.max_input = 0
        self.min_output = 0
        self.max_output = 0
        self.input_desc: Dict[int, Tuple[str, str]] = {}
        self.output_desc: Dict[int, Tuple[str, str]] = {}
        self.arg_desc: List[Tuple[str, str]] = []

    def num_inputs(self, n: int, max_n: Optional[int] = None) -> "OpSchema":
        """Accept exactly `n` inputs, or between `n` and `max_n` inclusive."""
        self.min_input = int(n)
        self.max_input = int(n if max_n is None else max_n)
        return self

    def num_outputs(self, n: int, max_n: Optional[int] = None) -> "OpSchema":
        """Accept exactly `n` outputs, or between `n` and `max_n` inclusive."""
        self.min_output = int(n)
        self.max_output = int(n if max_n is None else max_n)
        return self

    def set_doc(self, doc: str) -> "OpSchema":
        self.doc = doc
        return self

    def input(self, idx: int, name: str, description: str) -> "OpSchema":
        self.input_desc[int(idx)] = (name, description)
        return self

    def output(self, idx: int, name: str, description: str) -> "OpSchema":
        self.output_desc[int(idx)] = (name, description)
        return self

    def arg(self, name: str, description: str) -> "OpSchema":
        self.arg_desc.append((name, description))
        return self

    def verify(self, op_def: OperatorDef) -> None:
        """
        Check the arity of `op_def` against this schema.

        Raises
        ------
        SchemaError
            If the number of inputs or outputs is out of range.
        """
        n_in, n_out = op_def.input_size, op_def.output_size
        if not self.min_input <= n_in <= self.max_input:
            raise SchemaError(
                f"Operator {self.name} expects {self._range(self.min_input, self.max_input)} "
                f"inputs, got {n_in}."
            )
        if not self.min_output <= n_out <= self.max_output:
            raise SchemaError(
                f"Operator {self.name} expects "
                f"{self._range(self.min_output, self.max_output)} outputs, got {n_out}."
            )

    @staticmethod
    def _range(lo: int, hi: int) -> str:
        return str(lo) if lo == hi else f"{lo} to {hi}"

    def __repr__(self) -> str:
        return (
            f"OpSchema({self.name!r}, inputs={self._range(self.min_input, self.max_input)}, "
            f"outputs={self._range(self.min_output, self.max_output)})"
        )


_SCHEMAS: Dict[str, OpSchema] = {}
_SCHEMAS_LOCK = threading.Lock()


def operator_schema(name: str) -> OpSchema:
    """
    Create and register the schema for operator type `name`.

    Raises
    ------
    ValueError
        If a schema for `name` already exists.
    """
    with _SCHEMAS_LOCK:
        if name in _SCHEMAS:
            raise ValueError(f"Operator schema already registered: {name!r}")
        schema = OpSchema(name)
        _SCHEMAS[name] = schema
    logger.debug("registered operator schema %s", name)
    return schema


def get_schema(name: str) -> Optional[OpSchema]:
    """Return the schema registered for `name`, or None."""
    return _SCHEMAS.get(name)


def registered_schemas() -> tuple[str, ...]:
    """Return the names of all registered schemas (sorted)."""
    return tuple(sorted(_SCHEMAS))
