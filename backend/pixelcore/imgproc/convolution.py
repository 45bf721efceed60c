# backend/pixelcore/imgproc/convolution.py
import logging
from typing import Callable

import numpy as np

from .buffer import GRAY, channels_of, ensure_buffer, require_same_shape
from .kernels import SOBEL_X, SOBEL_Y, as_kernel

logger = logging.getLogger(__name__)


def apply_kernel(src: np.ndarray, kernel) -> np.ndarray:
    """
    Apply a 3x3 kernel to every non-border pixel, each channel on its own.

    The kernel is mirrored against the neighbourhood: kernel[0][0] weighs the
    bottom-right neighbour and kernel[2][2] the top-left one. The absolute value
    of the sum is saturated to [0, 255]. The 1-pixel border is left at 0, so
    anything compared against this output has to skip it.
    """
    src = ensure_buffer(src)
    k = as_kernel(kernel)
    h, w = src.shape[:2]

    logger.debug(f"kernel 3 x 3 on src {w} x {h} x {channels_of(src)}: {k.ravel().tolist()}")

    out = np.zeros_like(src)
    if h < 3 or w < 3:
        return out

    data = src.astype(np.int32)
    acc = np.zeros((h - 2, w - 2) + src.shape[2:], dtype=np.int32)
    for r in range(3):
        for c in range(3):
            # kernel (r, c) pairs with neighbour offset (1 - r, 1 - c)
            acc += k[r, c] * data[2 - r:h - r, 2 - c:w - c]

    out[1:-1, 1:-1] = np.clip(np.abs(acc), 0, 255).astype(np.uint8)
    return out


def combine(a: np.ndarray, b: np.ndarray, func: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> np.ndarray:
    """
    Combine two buffers sample by sample. func gets int32 arrays and its
    result is saturated back into uint8.
    """
    a = ensure_buffer(a)
    b = ensure_buffer(b)
    require_same_shape(a, b)
    res = func(a.astype(np.int32), b.astype(np.int32))
    return np.clip(res, 0, 255).astype(np.uint8)


def hypotenuse(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    # truncated, like an int cast of sqrt
    return np.floor(np.sqrt(a * a + b * b)).astype(np.int32)


def average(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.floor(0.5 * a + 0.5 * b).astype(np.int32)


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    # Simple Sobel magnitude
    gray = ensure_buffer(gray, GRAY)
    gx = apply_kernel(gray, SOBEL_X)
    gy = apply_kernel(gray, SOBEL_Y)
    return combine(gx, gy, hypotenuse)
