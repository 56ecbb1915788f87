from ._schema import OpSchema, operator_schema, get_schema, registered_schemas
from ._gradient import (
    GradientMakerBase,
    GradientOpsMeta,
    gradient_name,
    register_gradient,
    get_gradient_maker,
    get_gradient_for_op,
)
from ._operator import (
    OperatorBase,
    CPUOperatorRegistry,
    register_cpu_operator,
    create_operator,
)
from .conv_transpose_op import (
    GetConvTransposeGradient,
    ConvTransposeOp,
    ConvTransposeGradientOp,
)

__all__ = [
    "OpSchema",
    "operator_schema",
    "get_schema",
    "registered_schemas",
    "GradientMakerBase",
    "GradientOpsMeta",
    "gradient_name",
    "register_gradient",
    "get_gradient_maker",
    "get_gradient_for_op",
    "OperatorBase",
    "CPUOperatorRegistry",
    "register_cpu_operator",
    "create_operator",
    "GetConvTransposeGradient",
    "ConvTransposeOp",
    "ConvTransposeGradientOp",
]
