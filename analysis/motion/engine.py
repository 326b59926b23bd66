"""Frame-differencing motion engine.

Turns a pair of low-resolution buffers into a :class:`DetectionResult`:

- `diff_frames` finds every pixel whose summed colour delta beats the
  sensitivity.
- `evaluate` compares the changed-pixel count to the trigger threshold and,
  only when motion is present, wraps the changed pixels in a convex hull.

The engine keeps no state between calls. The previous buffer is owned by the
sampling loop, which passes it in explicitly every tick.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .diff import diff_frames
from .hull import Point, convex_hull
from .model import DetectionResult, MotionConfig


def evaluate(changed: Sequence[Point], threshold: int) -> DetectionResult:
    """Decide whether ``changed`` amounts to motion and compute its hull if so."""
    count = len(changed)
    if count > threshold:
        return DetectionResult(count=count, threshold=threshold, hull=convex_hull(changed))
    return DetectionResult(count=count, threshold=threshold)


class MotionEngine:
    """Differencer + evaluator bundled behind a single call.

    The configuration can be swapped between calls; every call reads it once.
    """

    def __init__(self, config: Optional[MotionConfig] = None) -> None:
        self._cfg = config or MotionConfig()

    @property
    def config(self) -> MotionConfig:
        return self._cfg

    def configure(self, config: MotionConfig) -> None:
        self._cfg = config

    def step(
        self,
        prev: np.ndarray,
        curr: np.ndarray,
        config: Optional[MotionConfig] = None,
    ) -> DetectionResult:
        """Compare ``prev`` to ``curr`` and evaluate the changed-pixel set.

        Raises
        ------
        DimensionMismatchError
            If the two buffers differ in width or height.
        InvalidFrameError
            If either buffer is not a colour frame.
        """
        cfg = config or self._cfg
        changed = diff_frames(prev, curr, cfg.sensitivity)
        return evaluate(changed, int(cfg.threshold))
