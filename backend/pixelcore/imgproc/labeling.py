# backend/pixelcore/imgproc/labeling.py
"""
Single-pass connected components labeling (8-connectivity).

A raster pass looks at the four neighbours already visited

    a b c        a = NW, b = N, c = NE
    d p          d = W

and gives p a new label, the label of its neighbours, or (when the neighbours
disagree) the smallest neighbour label, queueing the others for merging. The
queue is drained into the merge table at the end of every row, then a second
pass rewrites every label to its canonical value.

The 1-pixel border is never labeled.
"""
import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..config import MERGE_TABLE_CAPACITY
from .buffer import BLACK, GRAY, ensure_buffer
from .errors import LabelCapacityError

logger = logging.getLogger(__name__)


@dataclass
class LabelResult:
    labels: np.ndarray
    merge_table: List[int] = field(default_factory=lambda: [0])
    # labels handed out during the pass, NOT the number left after merging
    num_labels: int = 0

    @property
    def component_count(self) -> int:
        """Distinct canonical labels left in the map."""
        return int(np.unique(self.labels[self.labels != BLACK]).size)

    def canonical(self, label: int) -> int:
        return _find(self.merge_table, label)


def _find(table: List[int], label: int) -> int:
    while table[label] != label:
        label = table[label]
    return label


def _drain_merges(table: List[int], merge_stack: List[tuple]) -> None:
    while merge_stack:
        index, target = merge_stack.pop()
        root = _find(table, target)
        prior = _find(table, index)
        # never drop a link made earlier in the pass
        canonical = min(root, prior)
        table[index] = canonical
        table[root] = canonical
        table[prior] = canonical


def label_components(src: np.ndarray, capacity: int = MERGE_TABLE_CAPACITY) -> LabelResult:
    """
    Label the foreground (non-zero) pixels of a binary gray buffer.

    Raises LabelCapacityError when more than capacity - 1 provisional labels
    would be needed.
    """
    src = ensure_buffer(src, GRAY)
    if not 2 <= capacity <= np.iinfo(np.uint16).max + 1:
        raise ValueError(f"capacity must be in [2, 65536], got {capacity}")

    rows, cols = src.shape
    dst = np.zeros((rows, cols), dtype=np.uint16)
    merge_table = [0]
    num_labels = 0

    # First pass.
    for i in range(1, rows - 1):
        merge_stack = []
        for j in range(1, cols - 1):
            if src[i, j] == BLACK:
                continue

            neighbours = (
                (i - 1, j - 1),
                (i - 1, j),
                (i - 1, j + 1),
                (i, j - 1),
            )
            values = [int(dst[n]) for n in neighbours]
            present = {v for v in values if v != BLACK}

            if not present:
                num_labels += 1
                if num_labels >= capacity:
                    raise LabelCapacityError(capacity)
                merge_table.append(num_labels)
                dst[i, j] = num_labels
            elif len(present) == 1:
                dst[i, j] = merge_table[present.pop()]
            else:
                target = min(present)
                for n, v in zip(neighbours, values):
                    if v != BLACK and v != target:
                        dst[n] = target
                        merge_stack.append((v, target))
                dst[i, j] = merge_table[target]

        if merge_stack:
            logger.debug(f"row {i}: merges {len(merge_stack)}")
        _drain_merges(merge_table, merge_stack)

    # Second pass through the merge table.
    lut = np.array([_find(merge_table, n) for n in range(len(merge_table))], dtype=np.uint16)
    dst = lut[dst]

    logger.info(f"Found {num_labels} labels")
    return LabelResult(labels=dst, merge_table=merge_table, num_labels=num_labels)
