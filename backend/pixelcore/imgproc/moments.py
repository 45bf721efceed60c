# backend/pixelcore/imgproc/moments.py
"""
Image moments of a gray buffer.

    m_ij = sum x^i y^j p             (x = column, y = row)
    u_ij = sum (x - x_bar)^i (y - y_bar)^j p
    n_ij = u_ij / m00^(1 + (i + j) / 2)

and Hu's seven invariants built from the n_ij. Everything accumulates in
float64 whatever the input depth.

see: https://en.wikipedia.org/wiki/Image_moment
"""
import json
import logging
from dataclasses import asdict, dataclass
from typing import Tuple

import numpy as np

from .buffer import GRAY, ensure_buffer

logger = logging.getLogger(__name__)


@dataclass
class MomentSet:
    # moments about 0
    m00: float = 0.0
    m01: float = 0.0
    m10: float = 0.0
    # central moments
    u02: float = 0.0
    u03: float = 0.0
    u11: float = 0.0
    u12: float = 0.0
    u20: float = 0.0
    u21: float = 0.0
    u30: float = 0.0
    # normalized central moments
    n02: float = 0.0
    n03: float = 0.0
    n11: float = 0.0
    n12: float = 0.0
    n20: float = 0.0
    n21: float = 0.0
    n30: float = 0.0
    hu: Tuple[float, ...] = (0.0,) * 7

    @property
    def is_degenerate(self) -> bool:
        return self.m00 == 0

    @property
    def centroid(self) -> Tuple[float, float]:
        """(x, y) of the centre of mass; (0, 0) for an empty object."""
        if self.is_degenerate:
            return 0.0, 0.0
        return self.m10 / self.m00, self.m01 / self.m00

    def to_dict(self) -> dict:
        d = asdict(self)
        d["hu"] = list(self.hu)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def hu_invariants(n20, n02, n11, n30, n12, n21, n03) -> Tuple[float, ...]:
    a = n30 + n12
    b = n21 + n03
    return (
        n20 + n02,
        (n20 - n02) ** 2 + 4 * n11 ** 2,
        (n30 - 3 * n12) ** 2 + (3 * n21 - n03) ** 2,
        a ** 2 + b ** 2,
        (n30 - 3 * n12) * a * (a ** 2 - 3 * b ** 2)
        + (3 * n21 - n03) * b * (3 * a ** 2 - b ** 2),
        (n20 - n02) * (a ** 2 - b ** 2) + 4 * n11 * a * b,
        (3 * n21 - n03) * a * (a ** 2 - 3 * b ** 2)
        - (n30 - 3 * n12) * b * (3 * a ** 2 - b ** 2),
    )


def image_moments(src: np.ndarray) -> MomentSet:
    src = ensure_buffer(src, GRAY)
    p = src.astype(np.float64)
    rows, cols = src.shape
    y = np.arange(rows, dtype=np.float64)[:, None]
    x = np.arange(cols, dtype=np.float64)[None, :]

    m00 = float(p.sum())
    if m00 == 0:
        logger.warning("m00 == 0, no moments for an empty object")
        return MomentSet()

    m01 = float((y * p).sum())
    m10 = float((x * p).sum())

    dx = x - m10 / m00
    dy = y - m01 / m00

    def central(i: int, j: int) -> float:
        return float((dx ** i * dy ** j * p).sum())

    u = {ij: central(*ij) for ij in ((0, 2), (0, 3), (1, 1), (1, 2), (2, 0), (2, 1), (3, 0))}
    n = {ij: v / m00 ** (1 + sum(ij) / 2.0) for ij, v in u.items()}

    return MomentSet(
        m00=m00, m01=m01, m10=m10,
        u02=u[0, 2], u03=u[0, 3], u11=u[1, 1], u12=u[1, 2],
        u20=u[2, 0], u21=u[2, 1], u30=u[3, 0],
        n02=n[0, 2], n03=n[0, 3], n11=n[1, 1], n12=n[1, 2],
        n20=n[2, 0], n21=n[2, 1], n30=n[3, 0],
        hu=hu_invariants(n[2, 0], n[0, 2], n[1, 1], n[3, 0], n[1, 2], n[2, 1], n[0, 3]),
    )
