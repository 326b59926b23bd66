from __future__ import annotations

from analysis.motion import AlertDecision, AlertState, AlertStateMachine, AlertStatus, transition


def test_cooldown_suppresses_then_rearms():
    machine = AlertStateMachine(cooldown_s=5.0)

    assert machine.step(True, now=0.0) is AlertDecision.TRIGGERED
    assert machine.status is AlertStatus.ALERT
    assert machine.state.last_alert_ts == 0.0

    assert machine.step(True, now=3.0) is AlertDecision.SUPPRESSED
    assert machine.status is AlertStatus.ALERT
    assert machine.state.last_alert_ts == 0.0

    assert machine.step(True, now=6.0) is AlertDecision.TRIGGERED
    assert machine.state.last_alert_ts == 6.0


def test_no_motion_always_idles_without_touching_timer():
    machine = AlertStateMachine(cooldown_s=5.0)
    machine.step(True, now=10.0)

    assert machine.step(False, now=11.0) is AlertDecision.IDLE
    assert machine.status is AlertStatus.IDLE
    assert machine.state.last_alert_ts == 10.0

    # Still inside the window: motion shows ALERT again, but no new trigger.
    assert machine.step(True, now=12.0) is AlertDecision.SUPPRESSED
    assert machine.status is AlertStatus.ALERT


def test_idle_without_any_motion_never_alerts():
    machine = AlertStateMachine(cooldown_s=0.0)
    for t in range(5):
        assert machine.step(False, now=float(t)) is AlertDecision.IDLE
    assert machine.state == AlertState(status=AlertStatus.IDLE, last_alert_ts=None, cooldown_s=0.0)


def test_zero_cooldown_triggers_every_motion_tick():
    machine = AlertStateMachine(cooldown_s=0.0)
    decisions = [machine.step(True, now=t / 10) for t in range(3)]
    assert decisions == [AlertDecision.TRIGGERED] * 3


def test_cooldown_boundary_is_inclusive_of_elapsed():
    state = AlertState(status=AlertStatus.IDLE, last_alert_ts=0.0, cooldown_s=5.0)
    _, decision = transition(state, True, 4.999)
    assert decision is AlertDecision.SUPPRESSED
    _, decision = transition(state, True, 5.0)
    assert decision is AlertDecision.TRIGGERED


def test_transition_is_pure():
    state = AlertState()
    new_state, _ = transition(state, True, 1.0)
    assert state == AlertState()
    assert new_state.status is AlertStatus.ALERT


def test_reconfiguring_cooldown_keeps_last_alert():
    machine = AlertStateMachine(cooldown_s=10.0)
    machine.step(True, now=0.0)
    machine.with_cooldown(2.0)
    assert machine.state.last_alert_ts == 0.0
    assert machine.step(True, now=3.0) is AlertDecision.TRIGGERED
