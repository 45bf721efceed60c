# backend/pixelcore/imgproc/color.py
import logging
from typing import Union

import numpy as np

from .buffer import COLOR, ensure_buffer

logger = logging.getLogger(__name__)

# weights for RGB to grayscale conversion
R_WEIGHT = 0.2989
G_WEIGHT = 0.5870
B_WEIGHT = 0.1140

# channel offsets as stored in memory (B,G,R)
BLUE = 0
GREEN = 1
RED = 2

_CHANNEL_NAMES = {"blue": BLUE, "green": GREEN, "red": RED}


def rgb2g(src: np.ndarray) -> np.ndarray:
    """Luma-weighted reduction of a B,G,R buffer to one channel."""
    src = ensure_buffer(src, COLOR)
    px = src.astype(np.float64)
    luma = (B_WEIGHT * px[..., BLUE]
            + G_WEIGHT * px[..., GREEN]
            + R_WEIGHT * px[..., RED])
    return np.clip(np.rint(luma), 0, 255).astype(np.uint8)


def channel_index(channel: Union[int, str]) -> int:
    if isinstance(channel, str):
        try:
            return _CHANNEL_NAMES[channel.lower()]
        except KeyError:
            raise ValueError(f"unknown channel name {channel!r}") from None
    if channel not in (BLUE, GREEN, RED):
        raise ValueError(f"channel index must be 0, 1 or 2, got {channel}")
    return int(channel)


def isolate_color(src: np.ndarray, channel: Union[int, str], threshold: int) -> np.ndarray:
    """
    Keep only one hue of a color buffer.

    The common "white" part every channel shares (the per-pixel minimum) is
    subtracted first; what remains of the wanted channel survives only above
    threshold. The other two channels come back zeroed.

    NB: a pixel like (240, 0, 255) keeps a lot of red even though it reads as
    magenta; only the shared minimum is removed.
    """
    src = ensure_buffer(src, COLOR)
    c = channel_index(channel)

    logger.info(f"isolating channel {c}")

    low = src.min(axis=2)
    diff = src[..., c].astype(np.int16) - low
    dst = np.zeros_like(src)
    dst[..., c] = np.where(diff > threshold, diff, 0).astype(np.uint8)
    return dst
