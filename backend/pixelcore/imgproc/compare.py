# backend/pixelcore/imgproc/compare.py
import logging
import math
from typing import Sequence

import numpy as np

from .buffer import ensure_buffer, require_same_shape

logger = logging.getLogger(__name__)

# compare_hu below this is a pretty good match (calibrated by eye, not a contract)
HU_MATCH_THRESHOLD = 50.0


def sum_of_absolute_differences(a: np.ndarray, b: np.ndarray) -> int:
    """
    Sum of |a - b| over every sample except the 1-pixel border.

    The border is skipped because filtered images leave it undefined (see
    apply_kernel), so it would only add noise to the comparison.
    """
    a = ensure_buffer(a)
    b = ensure_buffer(b)
    require_same_shape(a, b)

    inner_a = a[1:-1, 1:-1].astype(np.int64)
    inner_b = b[1:-1, 1:-1].astype(np.int64)
    total = int(np.abs(inner_a - inner_b).sum())

    # mean over the whole buffer; an empty buffer has nothing to average
    logger.info(f"absdiff {total / float(max(a.size, 1)):f}")
    return total


def compare_hu(hu1: Sequence[float], hu2: Sequence[float]) -> float:
    """
    How different two sets of Hu moments are. The arguments commute.

    NB: the 7th invariant only tells mirror images apart; it is left out, since
    stretched shapes can otherwise look quite different.
    """
    if len(hu1) < 6 or len(hu2) < 6:
        raise ValueError("need at least 6 Hu invariants per set")

    r = 0.0
    for h1, h2 in zip(hu1[:6], hu2[:6]):
        h1, h2 = float(h1), float(h2)
        if h1 == h2:
            continue
        prod = h1 * h2
        if prod == 0:
            return math.inf
        sq_diff = (h2 - h1) ** 2 / prod
        r += sq_diff ** 2
    return r


def is_hu_match(distance: float, threshold: float = HU_MATCH_THRESHOLD) -> bool:
    return distance < threshold
