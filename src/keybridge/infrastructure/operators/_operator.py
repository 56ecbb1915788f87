"""
Operator runtime.

`OperatorBase` binds an `OperatorDef` to the blobs of a workspace: inputs are
looked up (they must exist), outputs are created on demand. Concrete
operators implement `run_on_device` and read their arguments through the
`get_single_argument` helpers.

CPU operator classes are registered by type name in `CPUOperatorRegistry`
and instantiated with `create_operator`, which first checks the definition
against the operator's schema.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Type, TypeVar

from ...domain._errors import (
    DeviceNotSupportedError,
    PreconditionError,
    UnsupportedTypeError,
    enforce,
)
from ...domain._operator_def import OperatorDef
from ...domain.device._device import DeviceType
from ..bridge._registry import TypedRegistry
from ..tensor._blob import Blob
from ..tensor._tensor import Tensor, TensorCPU
from ._schema import get_schema

if TYPE_CHECKING:
    from ..workspace._workspace import Workspace

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Tensor)


class OperatorBase(ABC):
    """
    Operator bound to workspace blobs.

    Parameters
    ----------
    op_def : OperatorDef
        Operator definition.
    ws : Workspace
        Workspace that owns the input and output blobs.

    Raises
    ------
    PreconditionError
        If an input blob does not exist in `ws`.
    """

    def __init__(self, op_def: OperatorDef, ws: "Workspace") -> None:
        self.def_ = op_def
        self._inputs: List[Blob] = []
        for name in op_def.inputs:
            blob = ws.get_blob(name)
            enforce(
                blob is not None,
                "Encountered a non-existing input blob: ",
                name,
                error=PreconditionError,
            )
            self._inputs.append(blob)
        self._outputs: List[Blob] = [ws.create_blob(name) for name in op_def.outputs]

    @property
    def type(self) -> str:
        return self.def_.type

    @property
    def input_size(self) -> int:
        return len(self._inputs)

    @property
    def output_size(self) -> int:
        return len(self._outputs)

    def input(self, i: int, cls: Type[T] = TensorCPU) -> T:
        return self._inputs[i].get(cls)

    def output(self, i: int, cls: Type[T] = TensorCPU) -> T:
        return self._outputs[i].get_mutable(cls)

    def has_argument(self, name: str) -> bool:
        return self.def_.has_arg(name)

    def get_single_argument(self, name: str, default: Any = None) -> Any:
        return self.def_.arg(name, default)

    def get_repeated_argument(self, name: str, default: Optional[Sequence[Any]] = None) -> List[Any]:
        value = self.def_.arg(name)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def run(self) -> None:
        """Execute the operator."""
        logger.debug("running %s (%s)", self.def_.type, self.def_.name or "<unnamed>")
        self.run_on_device()

    @abstractmethod
    def run_on_device(self) -> None: ...


CPUOperatorRegistry: TypedRegistry[str, OperatorBase] = TypedRegistry("CPUOperatorRegistry")

_REGISTRIES_BY_DEVICE = {int(DeviceType.CPU): CPUOperatorRegistry}

O = TypeVar("O", bound=Type[OperatorBase])


def register_cpu_operator(op_type: str) -> Callable[[O], O]:
    """Decorator registering a CPU operator class for `op_type`."""
    return CPUOperatorRegistry.register(op_type)


def create_operator(op_def: OperatorDef, ws: "Workspace") -> OperatorBase:
    """
    Instantiate the operator described by `op_def` on its device.

    Raises
    ------
    SchemaError
        If `op_def` violates the operator's schema.
    DeviceNotSupportedError
        If no operators are implemented for the requested device type.
    UnsupportedTypeError
        If no operator is registered for ``op_def.type`` on that device.
    """
    schema = get_schema(op_def.type)
    if schema is not None:
        schema.verify(op_def)

    device_type = op_def.device_option.device_type
    registry = _REGISTRIES_BY_DEVICE.get(int(device_type))
    if registry is None:
        raise DeviceNotSupportedError(f"operator {op_def.type}", f"device_type={device_type}")

    op = registry.create(op_def.type, op_def, ws)
    if op is None:
        raise UnsupportedTypeError(
            f"Cannot create operator of type '{op_def.type}' on device type {device_type}."
        )
    return op
