"""Fixed-period sampling loop.

Each tick:

1. read the config once;
2. pull the low-resolution buffer from the capture collaborator (skip the
   tick if there is none);
3. if a previous buffer exists: differencer -> evaluator -> alert state
   machine, and hand qualifying triggers to the dispatcher;
4. store the current buffer as the previous one.

The previous buffer and the alert state live on the loop and are only
touched from the thread that calls :meth:`SamplingLoop.tick`.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import numpy as np

from capture.errors import CaptureError

from .engine import MotionEngine
from .errors import MotionError
from .events import AlertDecision, AlertState, AlertStateMachine, AlertStatus
from .hull import Point
from .log import MotionLog, MotionLogEntry
from .model import MotionConfig

_LOG = logging.getLogger(__name__)

DEFAULT_TICK_S = 0.1


@dataclass(frozen=True)
class TickReport:
    """What one tick observed; handed to whatever displays the overlay."""

    changed_count: int
    threshold: int
    hull: List[Point] = field(default_factory=list)
    status: AlertStatus = AlertStatus.IDLE
    decision: Optional[AlertDecision] = None
    entry: Optional[MotionLogEntry] = None
    compared: bool = True


class SamplingLoop:
    """
    Drive the detection chain on a fixed period.

    API:
        loop = SamplingLoop(sampler, dispatcher, config=MotionConfig())
        report = loop.tick()        # one tick, synchronous
        loop.run(max_seconds=30)    # blocks; call loop.stop() to end early
    """

    def __init__(
        self,
        source: Any,
        dispatcher: Optional[Any] = None,
        config: Optional[MotionConfig] = None,
        tick_s: float = DEFAULT_TICK_S,
        clock: Callable[[], float] = time.monotonic,
        on_tick: Optional[Callable[[TickReport], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if tick_s <= 0:
            raise ValueError(f"tick_s must be > 0, got {tick_s!r}")
        self._source = source
        self._dispatcher = dispatcher
        self._cfg = config or MotionConfig()
        self._tick_s = float(tick_s)
        self._clock = clock
        self._on_tick = on_tick
        self._log = logger or _LOG

        self._engine = MotionEngine(self._cfg)
        self._alerts = AlertStateMachine(cooldown_s=self._cfg.cooldown_s)
        self._prev: Optional[np.ndarray] = None
        self._last_count = 0
        self._stop = threading.Event()

    # ------------------------------------------------------------ observability

    @property
    def config(self) -> MotionConfig:
        return self._cfg

    @property
    def status(self) -> AlertStatus:
        return self._alerts.status

    @property
    def alert_state(self) -> AlertState:
        return self._alerts.state

    @property
    def last_count(self) -> int:
        return self._last_count

    @property
    def threshold(self) -> int:
        return int(self._cfg.threshold)

    @property
    def log(self) -> Optional[MotionLog]:
        return getattr(self._dispatcher, "log", None)

    @property
    def has_previous(self) -> bool:
        return self._prev is not None

    # ------------------------------------------------------------------ control

    def update_config(self, config: MotionConfig) -> None:
        """Swap the configuration; picked up at the start of the next tick."""
        self._cfg = config

    def stop(self) -> None:
        self._stop.set()

    # ------------------------------------------------------------------- ticks

    def tick(self, now: Optional[float] = None) -> Optional[TickReport]:
        """Run one tick. Returns ``None`` when the capture source had nothing."""
        cfg = self._cfg
        now = self._clock() if now is None else float(now)

        try:
            current = self._source.sample()
        except CaptureError as exc:
            self._log.debug("Capture unavailable; skipping tick: %s", exc)
            return None

        prev, self._prev = self._prev, current
        if prev is None:
            return TickReport(
                changed_count=0,
                threshold=int(cfg.threshold),
                status=self._alerts.status,
                compared=False,
            )

        try:
            result = self._engine.step(prev, current, cfg)
        except MotionError as exc:
            self._log.warning("Skipping comparison: %s", exc)
            return TickReport(
                changed_count=0,
                threshold=int(cfg.threshold),
                status=self._alerts.status,
                compared=False,
            )

        self._last_count = result.count
        self._alerts.with_cooldown(cfg.cooldown_s)
        decision = self._alerts.step(result.motion, now)

        entry: Optional[MotionLogEntry] = None
        if decision is AlertDecision.TRIGGERED:
            self._log.info(
                "Motion: %d changed pixels > threshold %d", result.count, result.threshold
            )
            entry = self._dispatch(cfg)
        elif decision is AlertDecision.SUPPRESSED:
            self._log.debug("Motion within cooldown: %d changed pixels", result.count)

        return TickReport(
            changed_count=result.count,
            threshold=result.threshold,
            hull=result.hull,
            status=self._alerts.status,
            decision=decision,
            entry=entry,
        )

    def _dispatch(self, cfg: MotionConfig) -> Optional[MotionLogEntry]:
        if self._dispatcher is None:
            return None
        try:
            return self._dispatcher.handle_trigger(cfg)
        except Exception as exc:
            # Side effects never touch the alert state; just record the failure.
            self._log.error("Alert dispatch failed: %s", exc)
            return None

    def run(self, max_seconds: float = 0.0) -> int:
        """Tick every ``tick_s`` until :meth:`stop` or ``max_seconds`` elapses.

        Ticks never overlap: a tick that overruns its slot causes the missed
        slots to be skipped, not queued. Returns the number of ticks run.
        """
        self._stop.clear()
        t0 = self._clock()
        next_at = t0
        ticks = 0

        while not self._stop.is_set():
            now = self._clock()
            if max_seconds > 0 and (now - t0) >= max_seconds:
                self._log.info("Reached max-seconds=%s, exiting loop.", max_seconds)
                break

            if now < next_at:
                self._stop.wait(next_at - now)
                continue

            try:
                report = self.tick(now)
            except Exception:
                self._log.exception("Tick failed; continuing")
                report = None
            ticks += 1

            if report is not None and self._on_tick is not None:
                try:
                    self._on_tick(report)
                except Exception:
                    self._log.exception("on_tick callback failed")

            next_at += self._tick_s
            after = self._clock()
            if after >= next_at:
                missed = int((after - next_at) // self._tick_s) + 1
                self._log.debug("Tick overran; skipping %d slot(s)", missed)
                next_at += missed * self._tick_s

        return ticks
