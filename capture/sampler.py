from __future__ import annotations

import base64
import time
from typing import Callable, Optional

import cv2
import numpy as np

from .errors import CaptureUnavailableError, SnapshotError
from .reader import FrameStream

# Comparison grid; small enough that a full differencing pass fits in a tick.
SAMPLE_WIDTH = 64
SAMPLE_HEIGHT = 48

# Longest gap between new frames before the source counts as unavailable.
DEFAULT_MAX_STALE_S = 2.0


def downsample(
    frame: np.ndarray, width: int = SAMPLE_WIDTH, height: int = SAMPLE_HEIGHT
) -> np.ndarray:
    """Area-average ``frame`` down to ``width x height``."""
    return cv2.resize(frame, (int(width), int(height)), interpolation=cv2.INTER_AREA)


def encode_snapshot(frame: np.ndarray, quality: int = 60) -> str:
    """JPEG-encode a BGR frame as a ``data:`` URL."""
    if frame is None or getattr(frame, "size", 0) == 0:
        raise SnapshotError("empty frame")
    try:
        ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    except cv2.error as exc:
        raise SnapshotError(f"JPEG encode failed: {exc}") from exc
    if not ok:
        raise SnapshotError("JPEG encode returned no data")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.tobytes()).decode("ascii")


class FrameSampler:
    """Capture collaborator for the sampling loop.

    Keeps the newest full-resolution frame from ``stream`` and serves:

    - ``sample()``: the low-resolution comparison buffer for this tick.
    - ``snapshot_frame()``: a copy of the newest full-resolution frame.

    A tick with no new frame reuses the newest one, but only for up to
    ``max_stale_s`` seconds (``0`` disables the bound). Past that, or once a
    stream exposing ``alive`` reports False, ``sample()`` raises
    :class:`CaptureUnavailableError` so the tick is skipped instead of being
    read as a still scene.
    """

    def __init__(
        self,
        stream: FrameStream,
        width: int = SAMPLE_WIDTH,
        height: int = SAMPLE_HEIGHT,
        max_stale_s: float = DEFAULT_MAX_STALE_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stream = stream
        self.width = int(width)
        self.height = int(height)
        self.max_stale_s = float(max_stale_s)
        self._clock = clock
        self._latest: Optional[np.ndarray] = None
        self._latest_id: Optional[int] = None
        self._latest_at = 0.0

    def start(self) -> None:
        self._stream.start()

    def close(self) -> None:
        self._stream.close()

    def poll(self) -> bool:
        """Drain the stream down to its newest frame. Returns True if one arrived."""
        got = False
        while True:
            item = self._stream.read()
            if item is None:
                break
            frame, _pts_ms, frame_id = item
            self._latest = frame
            self._latest_id = int(frame_id)
            got = True
        if got:
            self._latest_at = self._clock()
        return got

    def _check_fresh(self) -> None:
        if getattr(self._stream, "alive", True) is False:
            raise CaptureUnavailableError("capture source has stopped")
        if self.max_stale_s <= 0:
            return
        age = self._clock() - self._latest_at
        if age > self.max_stale_s:
            raise CaptureUnavailableError(
                f"no new frame for {age:.2f}s (frame {self._latest_id})"
            )

    def sample(self) -> np.ndarray:
        """Return the low-resolution buffer for this tick.

        Raises
        ------
        CaptureUnavailableError
            If no frame has been received yet, or the source has gone quiet
            or stopped.
        """
        fresh = self.poll()
        if self._latest is None:
            raise CaptureUnavailableError("no frame received from capture source yet")
        if not fresh:
            self._check_fresh()
        try:
            return downsample(self._latest, self.width, self.height)
        except cv2.error as exc:
            raise CaptureUnavailableError(f"could not downsample frame: {exc}") from exc

    def snapshot_frame(self) -> np.ndarray:
        if self._latest is None:
            raise SnapshotError("no frame available for snapshot")
        return self._latest.copy()
