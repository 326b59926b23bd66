from __future__ import annotations


class CaptureError(Exception):
    """Base class for capture-side failures."""


class CaptureUnavailableError(CaptureError):
    """No frame is available for this tick."""


class SnapshotError(CaptureError):
    """A full-resolution snapshot could not be taken or encoded."""
