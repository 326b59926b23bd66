from __future__ import annotations

from typing import List

import numpy as np

from .errors import DimensionMismatchError, InvalidFrameError
from .hull import Point


def _check_buffer(name: str, buf: np.ndarray) -> None:
    if buf.ndim != 3 or buf.shape[2] < 3:
        raise InvalidFrameError(f"{name} buffer must be (H, W, 3|4), got shape {buf.shape}")


def changed_mask(prev: np.ndarray, curr: np.ndarray, sensitivity: float) -> np.ndarray:
    """Boolean (H, W) mask of pixels whose summed colour delta exceeds ``sensitivity``.

    Only the first three channels take part; alpha is ignored.
    """
    prev_arr = np.asarray(prev)
    curr_arr = np.asarray(curr)
    _check_buffer("previous", prev_arr)
    _check_buffer("current", curr_arr)
    if prev_arr.shape[:2] != curr_arr.shape[:2]:
        raise DimensionMismatchError(prev_arr.shape, curr_arr.shape)

    # Widen before subtracting so uint8 does not wrap.
    delta = np.abs(curr_arr[:, :, :3].astype(np.int16) - prev_arr[:, :, :3].astype(np.int16))
    return delta.sum(axis=2, dtype=np.int32) > sensitivity


def diff_frames(prev: np.ndarray, curr: np.ndarray, sensitivity: float) -> List[Point]:
    """Return the changed-pixel set between two equally sized buffers.

    Points come back in row-major scan order and always lie inside
    ``[0, W) x [0, H)``. Raises :class:`DimensionMismatchError` when the
    buffers differ in width or height.
    """
    mask = changed_mask(prev, curr, sensitivity)
    ys, xs = np.nonzero(mask)
    return [Point(x, y) for x, y in zip(xs.tolist(), ys.tolist())]
