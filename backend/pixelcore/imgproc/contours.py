# backend/pixelcore/imgproc/contours.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .buffer import BLACK, GRAY, WHITE, BoundingRect, crop, ensure_buffer, require_same_shape
from .errors import ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass
class ObjectScan:
    objects: List[Tuple[BoundingRect, np.ndarray]] = field(default_factory=list)
    annotated: Optional[np.ndarray] = None

    @property
    def rects(self) -> List[BoundingRect]:
        return [r for r, _ in self.objects]


def _in_place(buf: np.ndarray, name: str) -> np.ndarray:
    # checked before ensure_buffer, which would hand back a copy
    if isinstance(buf, np.ndarray) and not (buf.flags.c_contiguous and buf.flags.writeable):
        raise ShapeMismatchError(f"{name} must be a writeable C-contiguous buffer")
    return ensure_buffer(buf, GRAY)


def _first_foreground(src: np.ndarray) -> Optional[Tuple[int, int]]:
    hits = np.flatnonzero(src)
    if hits.size == 0:
        return None
    return divmod(int(hits[0]), src.shape[1])


def _mark_first(dst: np.ndarray, line: np.ndarray, coords) -> bool:
    """Mark the first foreground sample of a probed line in dst."""
    hits = np.flatnonzero(line)
    if hits.size == 0:
        return False
    dst[coords(int(hits[0]))] = WHITE
    return True


def extract_object(src: np.ndarray, dst: np.ndarray) -> BoundingRect:
    """
    Find one object in a binary image, erase it from src and outline it in dst.

    Starting at the first white pixel (raster order) a cursor inches forwards
    diagonally: the column just right of it and the row just below it are
    probed, over the span seen so far, and the cursor moves along each axis
    that still holds a white pixel. When neither does, that is the bottom-right
    corner. The same probing backwards from the start pixel gives the top-left
    corner.

    This is not a flood fill. Concave or disjoint shapes can be bounded too
    small (a part that only reaches back outside the probed span is missed) or
    too large (a neighbour that touches the span is swallowed).

    Reaching the buffer edge only stops the probe along that axis; the other
    axis keeps advancing, so an object touching the edge is still bounded
    exactly.

    Returns closed bounds, or BoundingRect.empty() when src has no white pixel.
    """
    src = _in_place(src, "src")
    dst = _in_place(dst, "dst")
    require_same_shape(src, dst)

    rows, cols = src.shape

    seed = _first_foreground(src)
    if seed is None:
        logger.info("empty image")
        return BoundingRect.empty()

    start_y, start_x = seed
    dst[start_y, start_x] = WHITE

    # Inch forwards diagonally until no more pixels
    i, j = start_y, start_x
    while True:
        found = False
        if j + 1 < cols and _mark_first(dst, src[start_y:i + 1, j + 1],
                                        lambda k: (start_y + k, j + 1)):
            j += 1
            found = True
        if i + 1 < rows and _mark_first(dst, src[i + 1, start_x:j + 1],
                                        lambda k: (i + 1, start_x + k)):
            i += 1
            found = True
        if not found:
            break
    if i == rows - 1 or j == cols - 1:
        logger.warning("at bottom right corner of image")
    bottom, right = i, j

    # ... and backwards for the top left
    i, j = start_y, start_x
    while True:
        found = False
        if j - 1 >= 0 and _mark_first(dst, src[i:bottom + 1, j - 1],
                                      lambda k: (i + k, j - 1)):
            j -= 1
            found = True
        if i - 1 >= 0 and _mark_first(dst, src[i - 1, j:right + 1],
                                      lambda k: (i - 1, j + k)):
            i -= 1
            found = True
        if not found:
            break
    if i == 0 or j == 0:
        logger.warning("at top left corner of image")
    top, left = i, j

    # Erase from src image.
    src[top:bottom + 1, left:right + 1] = BLACK

    # draw bounding box
    cv2.rectangle(dst, (left, top), (right, bottom), (WHITE,), 1)

    rect = BoundingRect(top=top, bottom=bottom, left=left, right=right)
    logger.info(f"obj is {rect.width} x {rect.height}")
    return rect


def enumerate_objects(src: np.ndarray, max_objects: Optional[int] = None) -> ObjectScan:
    """
    Pull objects out of a binary image one at a time until none are left.

    src is not modified; each object comes back with its crop from the
    original pixels.
    """
    src = ensure_buffer(src, GRAY)
    work = src.copy()
    scan = ObjectScan(annotated=np.zeros_like(src))

    while max_objects is None or len(scan.objects) < max_objects:
        rect = extract_object(work, scan.annotated)
        if rect.is_empty:
            break
        scan.objects.append((rect, crop(src, rect)))

    return scan
