"""
CPU ConvTranspose (2D transpose convolution) kernels.

Vectorized NumPy implementations of the forward and backward passes used by
the ``ConvTranspose`` and ``ConvTransposeGradient`` CPU operators.

Tensor layout
-------------
Activations are NCHW:

- x: (N, C_in, H_in, W_in)
- y: (N, C_out, H_out, W_out)

The filter layout is (C_in, C_out, K_h, K_w).

Algorithm
---------
Each kernel tap ``(kh, kw)`` contributes a channel-mixed copy of the input,
scattered with the stride into an unpadded "full" output of size

    H_full = (H_in - 1) * stride_h + K_h + adj_h

The padded output is the window ``[pad_t : H_full - pad_b]`` of the full
buffer (likewise for width). Rows/columns added by ``adj`` receive only the
bias. The backward pass gathers from the same windows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class ConvTransposeGeometry:
    """
    Stride, padding and output adjustment of a transpose convolution.

    Attributes
    ----------
    stride_h, stride_w : int
        Strides (> 0).
    pad_t, pad_l, pad_b, pad_r : int
        Paddings removed from the top/left/bottom/right of the full output.
    adj_h, adj_w : int
        Extra rows/columns appended to the output (0 <= adj < stride).
    """

    stride_h: int = 1
    stride_w: int = 1
    pad_t: int = 0
    pad_l: int = 0
    pad_b: int = 0
    pad_r: int = 0
    adj_h: int = 0
    adj_w: int = 0

    def __post_init__(self) -> None:
        if self.stride_h <= 0 or self.stride_w <= 0:
            raise ValueError(
                f"stride must be positive, got stride=({self.stride_h},{self.stride_w})"
            )
        if min(self.pad_t, self.pad_l, self.pad_b, self.pad_r) < 0:
            raise ValueError(
                "pads must be non-negative, got "
                f"({self.pad_t},{self.pad_l},{self.pad_b},{self.pad_r})"
            )
        if self.adj_h < 0 or self.adj_w < 0:
            raise ValueError(f"adj must be non-negative, got ({self.adj_h},{self.adj_w})")
        if self.adj_h >= self.stride_h or self.adj_w >= self.stride_w:
            raise ValueError(
                f"adj must be < stride per dim, got adj=({self.adj_h},{self.adj_w}), "
                f"stride=({self.stride_h},{self.stride_w})"
            )

    def full_size(self, h_in: int, w_in: int, k_h: int, k_w: int) -> Tuple[int, int]:
        return (
            (h_in - 1) * self.stride_h + k_h + self.adj_h,
            (w_in - 1) * self.stride_w + k_w + self.adj_w,
        )

    def output_size(self, h_in: int, w_in: int, k_h: int, k_w: int) -> Tuple[int, int]:
        """Return ``(H_out, W_out)`` for the given input and kernel sizes."""
        h_full, w_full = self.full_size(h_in, w_in, k_h, k_w)
        return h_full - self.pad_t - self.pad_b, w_full - self.pad_l - self.pad_r


def _tap_window(
    geom: ConvTransposeGeometry, kh: int, kw: int, h_in: int, w_in: int
) -> Tuple[slice, slice]:
    return (
        slice(kh, kh + (h_in - 1) * geom.stride_h + 1, geom.stride_h),
        slice(kw, kw + (w_in - 1) * geom.stride_w + 1, geom.stride_w),
    )


def _check_shapes(x: np.ndarray, w: np.ndarray) -> Tuple[int, ...]:
    if x.ndim != 4:
        raise ValueError(f"x must be 4D (N, C_in, H, W), got shape {x.shape}")
    if w.ndim != 4:
        raise ValueError(f"w must be 4D (C_in, C_out, K_h, K_w), got shape {w.shape}")
    N, C_in, H_in, W_in = x.shape
    C_in2, C_out, K_h, K_w = w.shape
    if C_in != C_in2:
        raise ValueError(f"in_channels mismatch: x has {C_in}, weight has {C_in2}")
    return N, C_in, H_in, W_in, C_out, K_h, K_w


def conv_transpose_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    b: Optional[np.ndarray],
    geom: ConvTransposeGeometry,
) -> np.ndarray:
    """
    Compute the forward pass of a 2D transpose convolution.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (N, C_in, H_in, W_in).
    w : np.ndarray
        Filter of shape (C_in, C_out, K_h, K_w).
    b : Optional[np.ndarray]
        Bias of shape (C_out,), or None.
    geom : ConvTransposeGeometry
        Stride, padding and adjustment.

    Returns
    -------
    np.ndarray
        Output of shape (N, C_out, H_out, W_out) with the dtype of `x`.

    Raises
    ------
    ValueError
        If shapes are inconsistent or the output size is not positive.
    """
    N, C_in, H_in, W_in, C_out, K_h, K_w = _check_shapes(x, w)
    if b is not None and (b.ndim != 1 or b.shape[0] != C_out):
        raise ValueError(f"bias shape mismatch: expected ({C_out},), got {b.shape}")

    H_out, W_out = geom.output_size(H_in, W_in, K_h, K_w)
    if H_out <= 0 or W_out <= 0:
        raise ValueError(f"invalid output size: H_out={H_out}, W_out={W_out}")
    H_full, W_full = geom.full_size(H_in, W_in, K_h, K_w)

    full = np.zeros((N, C_out, H_full, W_full), dtype=x.dtype)
    for kh in range(K_h):
        for kw in range(K_w):
            rows, cols = _tap_window(geom, kh, kw, H_in, W_in)
            full[:, :, rows, cols] += np.einsum("nchw,cm->nmhw", x, w[:, :, kh, kw])

    y = np.ascontiguousarray(
        full[:, :, geom.pad_t : geom.pad_t + H_out, geom.pad_l : geom.pad_l + W_out]
    )
    if b is not None:
        y += b.astype(y.dtype, copy=False)[None, :, None, None]
    return y


def conv_transpose_backward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    grad_out: np.ndarray,
    geom: ConvTransposeGeometry,
    *,
    compute_grad_x: bool = True,
) -> Tuple[np.ndarray, np.ndarray, Optional[np.ndarray]]:
    """
    Compute the backward pass of a 2D transpose convolution.

    Parameters
    ----------
    x : np.ndarray
        Forward input of shape (N, C_in, H_in, W_in).
    w : np.ndarray
        Filter of shape (C_in, C_out, K_h, K_w).
    grad_out : np.ndarray
        Gradient w.r.t. the output, shape (N, C_out, H_out, W_out).
    geom : ConvTransposeGeometry
        Geometry used in the forward pass.
    compute_grad_x : bool, optional
        If False, the input gradient is skipped and returned as None.

    Returns
    -------
    tuple
        ``(grad_w, grad_b, grad_x)`` with shapes (C_in, C_out, K_h, K_w),
        (C_out,) and (N, C_in, H_in, W_in).
    """
    N, C_in, H_in, W_in, C_out, K_h, K_w = _check_shapes(x, w)
    H_out, W_out = geom.output_size(H_in, W_in, K_h, K_w)
    if grad_out.shape != (N, C_out, H_out, W_out):
        raise ValueError(
            f"grad_out shape mismatch: expected {(N, C_out, H_out, W_out)}, "
            f"got {grad_out.shape}"
        )
    H_full, W_full = geom.full_size(H_in, W_in, K_h, K_w)

    full = np.zeros((N, C_out, H_full, W_full), dtype=grad_out.dtype)
    full[:, :, geom.pad_t : geom.pad_t + H_out, geom.pad_l : geom.pad_l + W_out] = grad_out

    grad_w = np.zeros_like(w)
    grad_x = np.zeros_like(x) if compute_grad_x else None
    for kh in range(K_h):
        for kw in range(K_w):
            rows, cols = _tap_window(geom, kh, kw, H_in, W_in)
            g = full[:, :, rows, cols]
            grad_w[:, :, kh, kw] = np.einsum("nchw,nmhw->cm", x, g)
            if grad_x is not None:
                grad_x += np.einsum("nmhw,cm->nchw", g, w[:, :, kh, kw])

    grad_b = grad_out.sum(axis=(0, 2, 3)).astype(w.dtype, copy=False)
    return grad_w, grad_b, grad_x


__all__ = [
    "ConvTransposeGeometry",
    "conv_transpose_forward_cpu",
    "conv_transpose_backward_cpu",
]
