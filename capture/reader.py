from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np

_LOG = logging.getLogger(__name__)


class FrameStream(Protocol):
    def start(self) -> None: ...
    def read(self) -> Optional[Tuple[np.ndarray, float, int]]: ...  # (frame_bgr, pts_ms, frame_id)
    def close(self) -> None: ...


class NullTransport:
    """A tiny source that synthesizes black frames. Useful for tests/dev."""

    def __init__(self, width: int = 640, height: int = 480, fps: float = 15.0):
        self.width, self.height, self.fps = width, height, fps
        self._running = False
        self._next_ts = 0.0
        self._frame_id = 0

    def start(self) -> None:
        self._running = True
        self._next_ts = time.time() * 1000.0

    def read(self) -> Optional[Tuple[np.ndarray, float, int]]:
        if not self._running:
            return None
        now_ms = time.time() * 1000.0
        if now_ms < self._next_ts:
            return None
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        fid = self._frame_id
        self._frame_id += 1
        self._next_ts += 1000.0 / max(self.fps, 0.001)
        return frame, now_ms, fid

    def close(self) -> None:
        self._running = False


class CameraTransport:
    """Local camera through ``cv2.VideoCapture``. ``read()`` blocks on the device."""

    def __init__(
        self,
        camera_index: int = 0,
        width: int = 640,
        height: int = 480,
        fps: float = 15.0,
        flip_horizontal: bool = False,
    ):
        self.camera_index = camera_index
        self.width, self.height, self.fps = width, height, fps
        self.flip_horizontal = flip_horizontal
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_id = 0

    def start(self) -> None:
        if self._cap is not None:
            return

        # macOS: prefer AVFoundation backend
        if sys.platform == "darwin":
            cap = cv2.VideoCapture(self.camera_index, cv2.CAP_AVFOUNDATION)
        else:
            cap = cv2.VideoCapture(self.camera_index)

        if not cap.isOpened():
            cap.release()
            raise RuntimeError(
                f"Could not open camera {self.camera_index}; "
                "check permissions and that no other app holds the device."
            )

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cap = cap
        _LOG.info(
            "Camera %d opened (%dx%d @ %.1f fps requested)",
            self.camera_index,
            self.width,
            self.height,
            self.fps,
        )

    def read(self) -> Optional[Tuple[np.ndarray, float, int]]:
        if self._cap is None:
            return None

        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None

        if self.flip_horizontal:
            frame = cv2.flip(frame, 1)

        fid = self._frame_id
        self._frame_id += 1
        return frame, time.time() * 1000.0, fid

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


# --- Discovery ---------------------------------------------------------------


@dataclass
class ReaderConfig:
    prefer: str = "camera"  # or "null"
    camera_index: int = 0
    width: int = 640
    height: int = 480
    fps: float = 15.0
    flip_horizontal: bool = False


class ReaderFactory:
    @staticmethod
    def from_config(cfg: ReaderConfig) -> FrameStream:
        if cfg.prefer == "null":
            return NullTransport(width=cfg.width, height=cfg.height, fps=cfg.fps)
        if cfg.prefer == "camera":
            return CameraTransport(
                camera_index=cfg.camera_index,
                width=cfg.width,
                height=cfg.height,
                fps=cfg.fps,
                flip_horizontal=cfg.flip_horizontal,
            )
        raise ValueError(f"unknown reader backend: {cfg.prefer!r} (expected 'camera' or 'null')")
