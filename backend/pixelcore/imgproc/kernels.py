# backend/pixelcore/imgproc/kernels.py
import numpy as np

from .errors import ShapeMismatchError

SHARPEN = (0, -1, 0,
           -1, 5, -1,
           0, -1, 0)

SOBEL_X = (-1, 0, 1,
           -2, 0, 2,
           -1, 0, 1)

SOBEL_Y = (-1, -2, -1,
           0, 0, 0,
           1, 2, 1)

NAMED_KERNELS = {
    "sharpen": SHARPEN,
    "sobel_x": SOBEL_X,
    "sobel_y": SOBEL_Y,
}


def as_kernel(kernel) -> np.ndarray:
    """
    Accept a flat 9-sequence or anything 3x3 and return a read-only int32 (3, 3) array.
    """
    k = np.array(kernel, dtype=np.int32)
    if k.size != 9 or k.ndim not in (1, 2) or (k.ndim == 2 and k.shape != (3, 3)):
        raise ShapeMismatchError(f"kernel must be 3x3, got shape {k.shape}")
    k = k.reshape(3, 3)
    k.setflags(write=False)
    return k
