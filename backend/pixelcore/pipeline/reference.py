# backend/pixelcore/pipeline/reference.py

"""
Parity checks: run each core operation next to its OpenCV counterpart and
score the pair with the comparator.

OpenCV is only used here (and for drawing the outline in contours) to
validate numbers; nothing in the core calls it for a result.
"""

import json
import logging
from dataclasses import asdict, dataclass

import cv2
import numpy as np

from ..config import THRESHOLD
from ..imgproc.buffer import COLOR, ensure_buffer, threshold as binarize
from ..imgproc.color import rgb2g
from ..imgproc.compare import compare_hu, is_hu_match, sum_of_absolute_differences
from ..imgproc.convolution import apply_kernel
from ..imgproc.kernels import NAMED_KERNELS, as_kernel
from ..imgproc.labeling import label_components
from ..imgproc.moments import image_moments

logger = logging.getLogger(__name__)


@dataclass
class ParityReport:
    kernel: str
    gray_sad: int
    filter_sad: int
    hu_distance: float
    hu_match: bool
    m00: float
    reference_m00: float
    num_labels: int
    component_count: int
    reference_component_count: int

    def to_dict(self) -> dict:
        d = asdict(self)
        # inf is not valid JSON
        if not np.isfinite(d["hu_distance"]):
            d["hu_distance"] = None
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def reference_filter(src: np.ndarray, kernel) -> np.ndarray:
    """
    apply_kernel done by cv2.filter2D.

    filter2D correlates, so the kernel is flipped on both axes to match the
    mirrored pairing; the border is zeroed like ours.
    """
    k = np.asarray(as_kernel(kernel), dtype=np.float32)
    res = cv2.filter2D(src, cv2.CV_32F, cv2.flip(k, -1))
    out = np.clip(np.abs(res), 0, 255).astype(np.uint8)
    out[0, :] = 0
    out[-1, :] = 0
    out[:, 0] = 0
    out[:, -1] = 0
    return out


def reference_component_count(binary: np.ndarray) -> int:
    # our labeling never looks at the border, so neither does the reference
    inner = binary.copy()
    inner[0, :] = 0
    inner[-1, :] = 0
    inner[:, 0] = 0
    inner[:, -1] = 0
    n, _ = cv2.connectedComponents(inner, connectivity=8)
    return int(n) - 1


def reference_report(bgr: np.ndarray, kernel: str = "sobel_x", threshold: int = THRESHOLD) -> ParityReport:
    bgr = ensure_buffer(bgr, COLOR)
    try:
        k = NAMED_KERNELS[kernel]
    except KeyError:
        raise ValueError(f"unknown kernel {kernel!r}, expected one of {sorted(NAMED_KERNELS)}") from None

    # Compare our grayscale to OpenCV's
    gray = rgb2g(bgr)
    gray_ref = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)
    gray_sad = sum_of_absolute_differences(gray_ref, gray)

    # Compare our filter to OpenCV's
    filtered = apply_kernel(bgr, k)
    filtered_ref = reference_filter(bgr, k)
    filter_sad = sum_of_absolute_differences(filtered_ref, filtered)

    m = image_moments(gray)
    m_ref = cv2.moments(gray, binaryImage=False)
    hu_ref = cv2.HuMoments(m_ref).flatten().tolist()
    hu_distance = compare_hu(hu_ref, m.hu)

    binary = binarize(gray, threshold)
    labeled = label_components(binary)

    report = ParityReport(
        kernel=kernel,
        gray_sad=gray_sad,
        filter_sad=filter_sad,
        hu_distance=hu_distance,
        hu_match=is_hu_match(hu_distance),
        m00=m.m00,
        reference_m00=float(m_ref["m00"]),
        num_labels=labeled.num_labels,
        component_count=labeled.component_count,
        reference_component_count=reference_component_count(binary),
    )
    logger.debug(f"gray abs diff {gray_sad}, filter abs diff {filter_sad}, hu distance {hu_distance}")
    return report
