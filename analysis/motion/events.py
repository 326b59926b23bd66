from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Tuple


class AlertStatus(str, enum.Enum):
    IDLE = "IDLE"
    ALERT = "ALERT"


class AlertDecision(str, enum.Enum):
    """What a single tick's transition asks the caller to do."""

    # No motion this tick: indicator relaxes, nothing else happens.
    IDLE = "idle"
    # Motion inside the cooldown window: indicator stays live, no log/side effects.
    SUPPRESSED = "suppressed"
    # Motion after the cooldown (or the first ever): log entry + side effects.
    TRIGGERED = "triggered"


@dataclass(frozen=True)
class AlertState:
    """
    Alert indicator plus cooldown bookkeeping.

    ``last_alert_ts`` is ``None`` until the first qualifying trigger. All
    timestamps are seconds on a single monotonic clock chosen by the caller.
    """

    status: AlertStatus = AlertStatus.IDLE
    last_alert_ts: Optional[float] = None
    cooldown_s: float = 5.0

    def in_cooldown(self, now: float) -> bool:
        if self.last_alert_ts is None:
            return False
        return (now - self.last_alert_ts) < self.cooldown_s


def transition(
    state: AlertState, motion_present: bool, now: float
) -> Tuple[AlertState, AlertDecision]:
    """
    Advance ``state`` by one tick and return ``(new_state, decision)``.

    Motion always shows as ALERT, whether or not it qualifies; only a
    qualifying trigger moves ``last_alert_ts``. No motion only flips the
    status back to IDLE and leaves the cooldown timer untouched.
    """
    if not motion_present:
        return replace(state, status=AlertStatus.IDLE), AlertDecision.IDLE

    if state.in_cooldown(now):
        return replace(state, status=AlertStatus.ALERT), AlertDecision.SUPPRESSED

    return (
        replace(state, status=AlertStatus.ALERT, last_alert_ts=float(now)),
        AlertDecision.TRIGGERED,
    )


class AlertStateMachine:
    """
    Single owner of an :class:`AlertState`.

    API:
        machine = AlertStateMachine(cooldown_s=5.0)
        decision = machine.step(motion_present, now)
    """

    def __init__(self, cooldown_s: float = 5.0) -> None:
        if cooldown_s < 0:
            raise ValueError(f"cooldown_s must be >= 0, got {cooldown_s!r}")
        self._state = AlertState(cooldown_s=float(cooldown_s))

    @property
    def state(self) -> AlertState:
        return self._state

    @property
    def status(self) -> AlertStatus:
        return self._state.status

    def with_cooldown(self, cooldown_s: float) -> None:
        """Change the cooldown window; the last-alert timestamp is kept."""
        if cooldown_s < 0:
            raise ValueError(f"cooldown_s must be >= 0, got {cooldown_s!r}")
        if float(cooldown_s) != self._state.cooldown_s:
            self._state = replace(self._state, cooldown_s=float(cooldown_s))

    def reset(self) -> None:
        self._state = AlertState(cooldown_s=self._state.cooldown_s)

    def step(self, motion_present: bool, now: float) -> AlertDecision:
        self._state, decision = transition(self._state, motion_present, now)
        return decision
