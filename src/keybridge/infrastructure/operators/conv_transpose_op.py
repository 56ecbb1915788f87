"""
ConvTranspose operator family.

Declares the ``ConvTranspose`` and ``ConvTransposeGradient`` schemas, the
gradient maker that wires the former to the latter, and CPU (float32)
implementations of both.

Arguments
---------
kernel, kernel_h, kernel_w
    Optional. When given they must match the filter's spatial size.
stride, stride_h, stride_w
    Strides (default 1). Per-axis values override ``stride``.
pad, pad_t, pad_l, pad_b, pad_r
    Paddings removed from the output (default 0). Per-side values override
    ``pad``.
adj, adj_h, adj_w
    Extra output rows/columns (default 0, must be < stride).
order
    ``"NCHW"`` (default) or ``"NHWC"``.

Layouts
-------
NCHW: X (N, C, H, W), filter (C, M, kH, kW), Y (N, M, H_out, W_out).
NHWC: X (N, H, W, C), filter (C, kH, kW, M), Y (N, H_out, W_out, M).

with ``H_out = (H - 1) * stride_h + kH + adj_h - pad_t - pad_b``.
"""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from ...domain._errors import PreconditionError, enforce
from ...domain._operator_def import OperatorDef
from ..ops.conv_transpose_cpu import (
    ConvTransposeGeometry,
    conv_transpose_backward_cpu,
    conv_transpose_forward_cpu,
)
from ..types._type_meta import FLOAT
from ._gradient import GradientMakerBase, register_gradient
from ._operator import OperatorBase, register_cpu_operator
from ._schema import operator_schema

_ARG_DOCS = (
    ("kernel", "Kernel size (both axes); optional, must match the filter."),
    ("stride", "Stride (both axes), default 1."),
    ("pad", "Padding on every side, default 0."),
    ("adj", "Extra output size on the bottom/right, default 0, < stride."),
    ("order", "Storage order, NCHW (default) or NHWC."),
)

_schema = (
    operator_schema("ConvTranspose")
    .num_inputs(3)
    .num_outputs(1)
    .set_doc(
        """
    The transposed convolution consumes an input blob, the filter blob and the
    bias blob, and computes the output. Stride, kernel size and per-side pads
    are operator arguments rather than inputs. Every input position scatters a
    filter-weighted copy of its channels into a (stride)-spaced window of the
    output, the padded border is cropped, and the bias is added to every
    output position of its channel.
    """
    )
    .input(
        0,
        "X",
        "Input data blob from previous layer; has size (N x C x H x W), where "
        "N is the batch size, C is the number of channels, and H and W are the "
        "height and width. This is the NCHW layout; for NHWC the dimensions "
        "are (N x H x W x C).",
    )
    .input(
        1,
        "filter",
        "The filter blob that will be used in the transposed convolution; has "
        "size (M x C x kH x kW), where M is the number of input channels, C is "
        "the number of output channels, and kH and kW are the height and width "
        "of the kernel.",
    )
    .input(2, "bias", "The 1D bias blob that is added through the convolution; has size (C).")
    .output(
        0,
        "Y",
        "Output data blob that contains the result of the transposed "
        "convolution. The output dimensions are functions of the kernel size, "
        "stride size, and pad lengths.",
    )
)
for _name, _desc in _ARG_DOCS:
    _schema.arg(_name, _desc)

operator_schema("ConvTransposeGradient").num_inputs(3).num_outputs(2, 3).set_doc(
    """
    Gradient of ConvTranspose. Inputs are X, filter and the gradient of Y.
    Outputs are the gradients of filter and bias and, when a third output is
    given, the gradient of X.
    """
)


@register_gradient("ConvTranspose")
class GetConvTransposeGradient(GradientMakerBase):
    """
    Gradient maker for ``ConvTranspose``.

    Emits a single ``ConvTransposeGradient`` with inputs
    ``[X, filter, Y_grad]`` and outputs ``[filter_grad, bias_grad, X_grad]``.
    """

    def get_gradient_defs(self) -> List[OperatorDef]:
        enforce(
            self.def_.input_size == 3,
            "ConvTranspose gradient expects 3 inputs, got ",
            self.def_.input_size,
            error=PreconditionError,
        )
        return self.single_gradient_def(
            "ConvTransposeGradient",
            "",
            [self.I(0), self.I(1), self.GO(0)],
            [self.GI(1), self.GI(2), self.GI(0)],
        )


class ConvTransposeOpBase(OperatorBase):
    """Argument parsing shared by the forward and gradient operators."""

    def __init__(self, op_def: OperatorDef, ws) -> None:
        super().__init__(op_def, ws)
        self.order = str(self.get_single_argument("order", "NCHW")).upper()
        enforce(
            self.order in ("NCHW", "NHWC"),
            "Unsupported storage order: ",
            self.order,
            error=PreconditionError,
        )

        stride = int(self.get_single_argument("stride", 1))
        pad = int(self.get_single_argument("pad", 0))
        adj = int(self.get_single_argument("adj", 0))
        stride_h = int(self.get_single_argument("stride_h", stride))
        stride_w = int(self.get_single_argument("stride_w", stride))
        adj_h = int(self.get_single_argument("adj_h", adj))
        adj_w = int(self.get_single_argument("adj_w", adj))
        pads = tuple(
            int(self.get_single_argument(name, pad))
            for name in ("pad_t", "pad_l", "pad_b", "pad_r")
        )

        enforce(
            stride_h > 0 and stride_w > 0,
            "Stride must be positive, got (",
            stride_h,
            ", ",
            stride_w,
            ")",
            error=PreconditionError,
        )
        enforce(min(pads) >= 0, "Pads must be non-negative, got ", pads, error=PreconditionError)
        enforce(
            0 <= adj_h < stride_h and 0 <= adj_w < stride_w,
            "adj must be non-negative and smaller than stride, got adj=(",
            adj_h,
            ", ",
            adj_w,
            ")",
            error=PreconditionError,
        )
        self.geometry = ConvTransposeGeometry(
            stride_h=stride_h,
            stride_w=stride_w,
            pad_t=pads[0],
            pad_l=pads[1],
            pad_b=pads[2],
            pad_r=pads[3],
            adj_h=adj_h,
            adj_w=adj_w,
        )

        kernel = self.get_single_argument("kernel")
        self.kernel_h = self.get_single_argument("kernel_h", kernel)
        self.kernel_w = self.get_single_argument("kernel_w", kernel)

    def _to_nchw(self, x: np.ndarray, filt: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        enforce(x.ndim == 4, "Input X must be 4D, got shape ", x.shape, error=PreconditionError)
        enforce(
            filt.ndim == 4, "Filter must be 4D, got shape ", filt.shape, error=PreconditionError
        )
        if self.order == "NHWC":
            x = x.transpose(0, 3, 1, 2)
            filt = filt.transpose(0, 3, 1, 2)
        enforce(
            x.shape[1] == filt.shape[0],
            "Filter input channels (",
            filt.shape[0],
            ") do not match X channels (",
            x.shape[1],
            ")",
            error=PreconditionError,
        )
        k_h, k_w = filt.shape[2], filt.shape[3]
        if self.kernel_h is not None:
            enforce(
                int(self.kernel_h) == k_h,
                "kernel_h (",
                self.kernel_h,
                ") does not match filter height ",
                k_h,
                error=PreconditionError,
            )
        if self.kernel_w is not None:
            enforce(
                int(self.kernel_w) == k_w,
                "kernel_w (",
                self.kernel_w,
                ") does not match filter width ",
                k_w,
                error=PreconditionError,
            )
        return x, filt

    def _from_nchw(self, y: np.ndarray) -> np.ndarray:
        if self.order == "NHWC":
            return y.transpose(0, 2, 3, 1)
        return y

    def _filter_from_nchw(self, filt: np.ndarray) -> np.ndarray:
        if self.order == "NHWC":
            return filt.transpose(0, 2, 3, 1)
        return filt


@register_cpu_operator("ConvTranspose")
class ConvTransposeOp(ConvTransposeOpBase):
    """CPU float32 transpose convolution."""

    def run_on_device(self) -> None:
        x = self.input(0).data(FLOAT)
        filt = self.input(1).data(FLOAT)
        bias = self.input(2).data(FLOAT)

        x_nchw, w_nchw = self._to_nchw(x, filt)
        c_out = w_nchw.shape[1]
        enforce(
            bias.shape == (c_out,),
            "Bias must have shape (",
            c_out,
            ",), got ",
            bias.shape,
            error=PreconditionError,
        )
        h_out, w_out = self.geometry.output_size(
            x_nchw.shape[2], x_nchw.shape[3], w_nchw.shape[2], w_nchw.shape[3]
        )
        enforce(
            h_out > 0 and w_out > 0,
            "Invalid output size: (",
            h_out,
            ", ",
            w_out,
            ")",
            error=PreconditionError,
        )

        y = self._from_nchw(conv_transpose_forward_cpu(x_nchw, w_nchw, bias, self.geometry))
        out = self.output(0)
        out.resize(y.shape)
        out.mutable_data(FLOAT)[...] = y


@register_cpu_operator("ConvTransposeGradient")
class ConvTransposeGradientOp(ConvTransposeOpBase):
    """
    CPU float32 gradient of the transpose convolution.

    Outputs ``[filter_grad, bias_grad]`` and, with a third output,
    ``X_grad``.
    """

    def run_on_device(self) -> None:
        x = self.input(0).data(FLOAT)
        filt = self.input(1).data(FLOAT)
        d_y = self.input(2).data(FLOAT)

        x_nchw, w_nchw = self._to_nchw(x, filt)
        d_y_nchw = d_y.transpose(0, 3, 1, 2) if self.order == "NHWC" else d_y
        h_out, w_out = self.geometry.output_size(
            x_nchw.shape[2], x_nchw.shape[3], w_nchw.shape[2], w_nchw.shape[3]
        )
        expected = (x_nchw.shape[0], w_nchw.shape[1], h_out, w_out)
        enforce(
            d_y_nchw.shape == expected,
            "Output gradient has shape ",
            d_y_nchw.shape,
            ", expected ",
            expected,
            error=PreconditionError,
        )

        compute_d_x = self.output_size == 3
        d_w, d_b, d_x = conv_transpose_backward_cpu(
            x_nchw, w_nchw, d_y_nchw, self.geometry, compute_grad_x=compute_d_x
        )

        d_filter = self._filter_from_nchw(d_w)
        out_w = self.output(0)
        out_w.resize(d_filter.shape)
        out_w.mutable_data(FLOAT)[...] = d_filter

        out_b = self.output(1)
        out_b.resize(d_b.shape)
        out_b.mutable_data(FLOAT)[...] = d_b

        if compute_d_x:
            d_x = self._from_nchw(d_x)
            out_x = self.output(2)
            out_x.resize(d_x.shape)
            out_x.mutable_data(FLOAT)[...] = d_x
