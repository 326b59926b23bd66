"""Public exports for the motion analysis package."""

from __future__ import annotations

from .diff import changed_mask, diff_frames
from .dispatcher import FALLBACK_DESCRIPTION, AlertDispatcher, DispatcherConfig
from .engine import MotionEngine, evaluate
from .errors import DimensionMismatchError, InvalidFrameError, MotionError
from .events import AlertDecision, AlertState, AlertStateMachine, AlertStatus, transition
from .hull import Point, convex_hull, cross
from .log import MotionLog, MotionLogEntry
from .model import DetectionResult, MotionConfig
from .pipeline import SamplingLoop, TickReport

__all__ = [
    "Point",
    "cross",
    "convex_hull",
    "changed_mask",
    "diff_frames",
    "evaluate",
    "MotionEngine",
    "MotionConfig",
    "DetectionResult",
    "MotionError",
    "DimensionMismatchError",
    "InvalidFrameError",
    "AlertStatus",
    "AlertDecision",
    "AlertState",
    "AlertStateMachine",
    "transition",
    "MotionLog",
    "MotionLogEntry",
    "AlertDispatcher",
    "DispatcherConfig",
    "FALLBACK_DESCRIPTION",
    "SamplingLoop",
    "TickReport",
]
