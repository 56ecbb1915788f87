"""
Operator invocation records.

An `OperatorDef` describes one operator invocation in a computation graph:
the operator type, the names of the blobs it reads and writes, its
arguments and the device it should run on. Records are plain metadata; no
tensor data is attached to them, which makes gradient generation a pure
transformation from one set of records to another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .device._device_option import DeviceOption


@dataclass
class OperatorDef:
    """
    Operator invocation record.

    Attributes
    ----------
    type : str
        Registered operator type name (e.g. ``"ConvTranspose"``).
    inputs : list[str]
        Names of the input blobs, in slot order.
    outputs : list[str]
        Names of the output blobs, in slot order.
    name : str
        Optional instance name.
    args : dict[str, Any]
        Operator arguments by name.
    device_option : DeviceOption
        Device on which the operator runs.
    engine : str
        Optional engine (implementation variant) name.
    """

    type: str
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    name: str = ""
    args: Dict[str, Any] = field(default_factory=dict)
    device_option: DeviceOption = field(default_factory=DeviceOption)
    engine: str = ""

    @property
    def input_size(self) -> int:
        return len(self.inputs)

    @property
    def output_size(self) -> int:
        return len(self.outputs)

    def has_arg(self, name: str) -> bool:
        return name in self.args

    def arg(self, name: str, default: Optional[Any] = None) -> Any:
        return self.args.get(name, default)
