# backend/pixelcore/pipeline/analyze.py

"""
Blob analysis pipeline.

    decoded B,G,R buffer
      -> gray (or one isolated hue, then gray)
      -> threshold
      -> connected components (counts)
      -> objects pulled out one by one
      -> moments of each object

The caller (FastAPI endpoint) only needs:
    analyze_image(decode_image(image_bytes))
"""

import io
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import List, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..config import DUMP_DIR, MAX_OBJECTS, MERGE_TABLE_CAPACITY, THRESHOLD
from ..imgproc.buffer import threshold as binarize
from ..imgproc.color import channel_index, isolate_color, rgb2g
from ..imgproc.contours import enumerate_objects
from ..imgproc.debug import dump_labels, dump_merge_table
from ..imgproc.labeling import label_components
from ..imgproc.moments import image_moments

logger = logging.getLogger(__name__)


# ---------- small helpers ----------


def _to_srgb_rgba(im: Image.Image) -> Image.Image:
    if im.mode != "RGBA":
        im = im.convert("RGBA")
    return im


def _composite_over_white(im: Image.Image) -> Image.Image:
    """Flatten alpha over white so transparent areas read as background."""
    bg = Image.new("RGBA", im.size, (255, 255, 255, 255))
    out = Image.alpha_composite(bg, im)
    return out.convert("RGB")


def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode any Pillow-readable image into a B,G,R uint8 buffer."""
    try:
        im = Image.open(io.BytesIO(image_bytes))
        im.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError("Could not decode input image") from e

    im = _composite_over_white(_to_srgb_rgba(im))
    rgb = np.asarray(im, dtype=np.uint8)
    # stored B,G,R like the rest of the core
    return np.ascontiguousarray(rgb[..., ::-1])


# ---------- report ----------


@dataclass
class ObjectReport:
    top: int
    bottom: int
    left: int
    right: int
    area: int
    centroid: List[float]
    hu: List[float]
    degenerate: bool


@dataclass
class AnalysisReport:
    width: int
    height: int
    threshold: int
    channel: Optional[int]
    # labels allocated by the labeling pass, before merges
    num_labels: int
    component_count: int
    objects: List[ObjectReport] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# ---------- public entrypoint ----------


def analyze_image(
    bgr: np.ndarray,
    threshold: int = THRESHOLD,
    channel: Optional[Union[int, str]] = None,
    max_objects: int = MAX_OBJECTS,
    capacity: int = MERGE_TABLE_CAPACITY,
    dump_dir: Optional[str] = DUMP_DIR,
) -> AnalysisReport:
    """
    Find the objects in a color image and describe each one.

    With channel set, only that hue is kept (see isolate_color) before the
    image goes gray; threshold is then applied to the isolated response.

    With dump_dir set, the labeling pass is written there as merge_table.txt
    and labels.txt.
    """
    c = None
    if channel is not None:
        c = channel_index(channel)
        bgr = isolate_color(bgr, c, threshold)
        gray = bgr[..., c].copy()
        binary = binarize(gray, 0)
    else:
        gray = rgb2g(bgr)
        binary = binarize(gray, threshold)

    labeled = label_components(binary, capacity=capacity)
    if dump_dir:
        os.makedirs(dump_dir, exist_ok=True)
        dump_merge_table(labeled, os.path.join(dump_dir, "merge_table.txt"))
        dump_labels(labeled, os.path.join(dump_dir, "labels.txt"))
        logger.debug(f"label dumps written to {dump_dir}")
    scan = enumerate_objects(binary, max_objects=max_objects)

    report = AnalysisReport(
        width=int(bgr.shape[1]),
        height=int(bgr.shape[0]),
        threshold=int(threshold),
        channel=c,
        num_labels=labeled.num_labels,
        component_count=labeled.component_count,
    )

    for rect, blob in scan.objects:
        m = image_moments(blob)
        report.objects.append(ObjectReport(
            top=rect.top,
            bottom=rect.bottom,
            left=rect.left,
            right=rect.right,
            area=int(np.count_nonzero(blob)),
            centroid=[rect.left + m.centroid[0], rect.top + m.centroid[1]],
            hu=[float(h) for h in m.hu],
            degenerate=m.is_degenerate,
        ))

    logger.info(
        f"{len(report.objects)} objects, {report.component_count} components "
        f"({report.num_labels} labels allocated)"
    )
    return report
