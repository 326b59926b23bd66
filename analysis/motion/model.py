from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .hull import Point


@dataclass
class MotionConfig:
    """
    Operator-facing knobs for the motion sentinel.

    Read once at the start of every tick, so changes take effect on the
    next tick and never retroactively.
    """

    # Per-pixel threshold on |dR| + |dG| + |dB|; lower is more sensitive.
    sensitivity: float = 20

    # Number of changed pixels that must be exceeded to declare motion.
    threshold: int = 150

    # Seconds between qualifying triggers (log entry + side effects).
    cooldown_s: float = 5.0

    enable_audio: bool = True
    enable_ai: bool = True

    def __post_init__(self) -> None:
        if self.sensitivity < 0:
            raise ValueError(f"sensitivity must be >= 0, got {self.sensitivity!r}")
        if self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold!r}")
        if self.cooldown_s < 0:
            raise ValueError(f"cooldown_s must be >= 0, got {self.cooldown_s!r}")


@dataclass(frozen=True)
class DetectionResult:
    """
    Per-tick output of the detection evaluator.

    ``hull`` is only populated when motion is present; it is an opaque,
    counter-clockwise vertex list for whatever renders it.
    """

    count: int
    threshold: int
    hull: List[Point] = field(default_factory=list)

    @property
    def motion(self) -> bool:
        return self.count > self.threshold
