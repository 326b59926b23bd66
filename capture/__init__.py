# capture/__init__.py
"""Capture package: frame sources, nonblocking adapter, and the tick sampler."""

from .errors import CaptureError, CaptureUnavailableError, SnapshotError
from .nonblocking_adapter import wrap_nonblocking
from .reader import CameraTransport, NullTransport, ReaderConfig, ReaderFactory
from .sampler import FrameSampler, downsample, encode_snapshot

__all__ = [
    "ReaderFactory",
    "ReaderConfig",
    "NullTransport",
    "CameraTransport",
    "wrap_nonblocking",
    "FrameSampler",
    "downsample",
    "encode_snapshot",
    "CaptureError",
    "CaptureUnavailableError",
    "SnapshotError",
]

__version__ = "0.1.0"
