# backend/pixelcore/imgproc/errors.py


class PixelCoreError(Exception):
    """Base class for errors raised by the pixel-processing core."""


class ShapeMismatchError(PixelCoreError, ValueError):
    """Buffers (or a kernel) do not have the shape/channels an operation needs."""


class LabelCapacityError(PixelCoreError, RuntimeError):
    """More provisional labels were needed than the merge table can hold."""

    def __init__(self, capacity: int):
        super().__init__(f"merge table capacity of {capacity} labels exceeded")
        self.capacity = capacity
