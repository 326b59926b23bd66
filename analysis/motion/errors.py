from __future__ import annotations


class MotionError(Exception):
    """Base class for motion-analysis errors."""


class DimensionMismatchError(MotionError, ValueError):
    """Previous and current buffers do not share the same width/height."""

    def __init__(self, prev_shape: tuple, curr_shape: tuple) -> None:
        super().__init__(
            f"buffer dimensions differ: previous={prev_shape[:2]} current={curr_shape[:2]}"
        )
        self.prev_shape = prev_shape
        self.curr_shape = curr_shape


class InvalidFrameError(MotionError, ValueError):
    """A buffer is not an (H, W, C) colour frame with at least three channels."""
