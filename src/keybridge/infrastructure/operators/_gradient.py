"""
Gradient makers.

A gradient maker turns the `OperatorDef` of a forward operator into the
`OperatorDef`s that compute its input gradients. The transformation is pure
over metadata: it reads blob names and arguments, never tensor data.

Naming
------
The gradient of blob ``X`` is the blob ``X_grad``. Output gradients (``GO``)
default to that name but can be supplied explicitly by the caller; input
gradients (``GI``) are always named by the rule and recorded so that the
caller learns which gradient blob corresponds to which forward input.

Registration
------------
Makers are registered per forward operator type with the
`register_gradient` decorator and resolved with `get_gradient_for_op`.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Type, TypeVar

from ...domain._errors import EnforceError, enforce
from ...domain._operator_def import OperatorDef

logger = logging.getLogger(__name__)

GRADIENT_SUFFIX = "_grad"


def gradient_name(name: str) -> str:
    """Return the name of the gradient blob of `name`."""
    return f"{name}{GRADIENT_SUFFIX}"


@dataclass
class GradientOpsMeta:
    """
    Result of gradient generation.

    Attributes
    ----------
    ops : list[OperatorDef]
        Gradient operator definitions, in execution order.
    g_input : list[str or None]
        Per forward input, the name of its gradient blob, or None if no
        gradient is produced for it.
    """

    ops: List[OperatorDef] = field(default_factory=list)
    g_input: List[Optional[str]] = field(default_factory=list)


class GradientMakerBase(ABC):
    """
    Base class of gradient makers.

    Parameters
    ----------
    op_def : OperatorDef
        Forward operator definition.
    g_output : Sequence[str], optional
        Names of the gradients of the forward outputs. Defaults to
        ``<output>_grad`` for every output.
    """

    copy_device_option = True
    copy_engine = True
    copy_arguments = True

    def __init__(self, op_def: OperatorDef, g_output: Optional[Sequence[str]] = None) -> None:
        self.def_ = op_def
        if g_output is None:
            g_output = [gradient_name(o) for o in op_def.outputs]
        enforce(
            len(g_output) == op_def.output_size,
            "Gradient maker for ",
            op_def.type,
            " expects ",
            op_def.output_size,
            " output gradients, got ",
            len(g_output),
        )
        self.g_output: List[str] = list(g_output)
        self.g_input: List[Optional[str]] = [None] * op_def.input_size

    def I(self, i: int) -> str:
        """Name of forward input `i`."""
        return self.def_.inputs[i]

    def O(self, i: int) -> str:
        """Name of forward output `i`."""
        return self.def_.outputs[i]

    def GI(self, i: int) -> str:
        """Name of the gradient of forward input `i`; records it."""
        name = gradient_name(self.def_.inputs[i])
        self.g_input[i] = name
        return name

    def GO(self, i: int) -> str:
        """Name of the gradient of forward output `i`."""
        name = self.g_output[i]
        enforce(name, "Gradient of output ", self.O(i), " is not available.")
        return name

    def single_gradient_def(
        self,
        op_type: str,
        name: str,
        inputs: Sequence[str],
        outputs: Sequence[str],
    ) -> List[OperatorDef]:
        """Build a one-element list holding a gradient `OperatorDef`."""
        op = OperatorDef(type=op_type, inputs=list(inputs), outputs=list(outputs), name=name)
        if self.copy_device_option:
            op.device_option = self.def_.device_option
        if self.copy_engine:
            op.engine = self.def_.engine
        if self.copy_arguments:
            op.args = copy.deepcopy(self.def_.args)
        return [op]

    @abstractmethod
    def get_gradient_defs(self) -> List[OperatorDef]:
        """Return the gradient operator definitions."""
        ...

    def get(self) -> GradientOpsMeta:
        ops = self.get_gradient_defs()
        return GradientOpsMeta(ops=ops, g_input=list(self.g_input))


M = TypeVar("M", bound=Type[GradientMakerBase])

_GRADIENT_MAKERS: Dict[str, Type[GradientMakerBase]] = {}
_GRADIENT_MAKERS_LOCK = threading.Lock()


def register_gradient(op_type: str, *, overwrite: bool = False) -> Callable[[M], M]:
    """
    Decorator registering a gradient maker class for operator `op_type`.

    Raises
    ------
    ValueError
        If a maker is already registered for `op_type` and `overwrite` is
        False.
    """

    def decorator(cls: M) -> M:
        with _GRADIENT_MAKERS_LOCK:
            if not overwrite and op_type in _GRADIENT_MAKERS:
                raise ValueError(f"Gradient already registered: {op_type!r}")
            _GRADIENT_MAKERS[op_type] = cls
        logger.debug("registered gradient maker %s for %s", cls.__qualname__, op_type)
        return cls

    return decorator


def get_gradient_maker(op_type: str) -> Optional[Type[GradientMakerBase]]:
    return _GRADIENT_MAKERS.get(op_type)


def get_gradient_for_op(
    op_def: OperatorDef, g_output: Optional[Sequence[str]] = None
) -> GradientOpsMeta:
    """
    Generate the gradient operators of `op_def`.

    Raises
    ------
    EnforceError
        If no gradient maker is registered for ``op_def.type``.
    """
    maker_cls = _GRADIENT_MAKERS.get(op_def.type)
    if maker_cls is None:
        raise EnforceError(f"Gradient maker for operator {op_def.type} not implemented.")
    return maker_cls(op_def, g_output).get()
