# backend/pixelcore/imgproc/buffer.py
"""
Pixel buffers are plain numpy uint8 arrays:

    gray  -> shape (height, width)
    color -> shape (height, width, 3), stored B,G,R like cv2

These helpers validate and build them, so the algorithms can assume a
contiguous, correctly-shaped array.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .errors import ShapeMismatchError

GRAY = 1
COLOR = 3

WHITE = 255
BLACK = 0


@dataclass(frozen=True)
class BoundingRect:
    """Closed (inclusive) bounds of an object: rows top..bottom, cols left..right."""
    top: int
    bottom: int
    left: int
    right: int
    # False only for the zero rect handed back when there is nothing to bound
    found: bool = True

    @classmethod
    def empty(cls) -> "BoundingRect":
        return cls(0, 0, 0, 0, found=False)

    @property
    def is_empty(self) -> bool:
        return not self.found

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    def to_dict(self) -> dict:
        return {"top": self.top, "bottom": self.bottom,
                "left": self.left, "right": self.right, "found": self.found}


def channels_of(buf: np.ndarray) -> int:
    if buf.ndim == 2:
        return GRAY
    if buf.ndim == 3 and buf.shape[2] == COLOR:
        return COLOR
    raise ShapeMismatchError(f"unsupported buffer shape {buf.shape}")


def ensure_buffer(buf, channels: Optional[int] = None) -> np.ndarray:
    """Validate a pixel buffer and return it as a C-contiguous uint8 array."""
    if not isinstance(buf, np.ndarray):
        raise ShapeMismatchError(f"expected a numpy array, got {type(buf).__name__}")
    if buf.dtype != np.uint8:
        raise ShapeMismatchError(f"expected uint8 samples, got {buf.dtype}")
    n = channels_of(buf)
    if channels is not None and n != channels:
        raise ShapeMismatchError(f"expected {channels} channel(s), got {n}")
    return np.ascontiguousarray(buf)


def require_same_shape(a: np.ndarray, b: np.ndarray) -> None:
    if a.dtype != b.dtype or a.shape != b.shape:
        raise ShapeMismatchError(
            f"buffers differ: {a.shape}/{a.dtype} vs {b.shape}/{b.dtype}"
        )


def from_samples(width: int, height: int, channels: int, samples: Sequence[int]) -> np.ndarray:
    """Build a buffer from a flat, row-major, channel-interleaved sample sequence."""
    if channels not in (GRAY, COLOR):
        raise ShapeMismatchError(f"channels must be 1 or 3, got {channels}")
    data = np.asarray(samples, dtype=np.uint8).ravel()
    if data.size != width * height * channels:
        raise ShapeMismatchError(
            f"{data.size} samples for a {width}x{height}x{channels} buffer"
        )
    shape = (height, width) if channels == GRAY else (height, width, channels)
    return data.reshape(shape).copy()


def threshold(gray: np.ndarray, level: int) -> np.ndarray:
    """Binary buffer: WHITE where the sample is above level, BLACK elsewhere."""
    gray = ensure_buffer(gray, GRAY)
    return np.where(gray > level, WHITE, BLACK).astype(np.uint8)


def crop(buf: np.ndarray, rect: BoundingRect) -> np.ndarray:
    return buf[rect.top:rect.bottom + 1, rect.left:rect.right + 1].copy()
