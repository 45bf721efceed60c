# backend/pixelcore/imgproc/debug.py
"""
Text dumps of a labeling pass, for eyeballing merges.

The labeling itself never writes them; analyze_image does when PIXELCORE_DUMP_DIR
is set, and they can be called by hand on any LabelResult.
"""
from pathlib import Path
from typing import Union

from .labeling import LabelResult


def dump_merge_table(result: LabelResult, path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for i in range(result.num_labels + 1):
            f.write(f"{i} -> {result.merge_table[i]}\n")


def dump_labels(result: LabelResult, path: Union[str, Path]) -> None:
    # interior only, the border is never labeled
    inner = result.labels[1:-1, 1:-1]
    with open(path, "w", encoding="utf-8") as f:
        for row in inner.tolist():
            f.write("".join(f"{v:3d}, " for v in row) + "\n")
