from unittest.mock import MagicMock

import pytest

from outcome_service import OutcomeServiceError, SpinEligibility, SpinResult
from spin_screen import (
    LOAD_FAILED_MESSAGE,
    NO_CAMPAIGN_MESSAGE,
    SPIN_FAILED_MESSAGE,
    KioskState,
    SpinScreen,
)
from wheel_config import DEFAULT_CAMPAIGN_SEGMENTS
from wheel_layout import segment_under_pointer


def _service(segments=DEFAULT_CAMPAIGN_SEGMENTS, index=2, amount=10):
    service = MagicMock()
    service.spin_eligibility.return_value = SpinEligibility(can_spin=True, segments=list(segments))
    service.spin_execute.return_value = SpinResult(
        segment_index=index, amount=amount, barcode="BC123", expires_at="2026-11-17T12:00:00Z")
    return service


def _screen(service, clock, **kwargs):
    kwargs.setdefault("duration", 5.0)
    kwargs.setdefault("result_hold", 2.0)
    return SpinScreen(service, customer_id="c-1", clock=clock, **kwargs)


def _run_frames(screen, clock, seconds, step=1 / 60):
    end = clock.now + seconds
    while clock.now < end:
        screen.tick(clock.advance(step))


def test_load_campaign_sorts_segments(clock):
    records = [
        {"segment_order": 1, "label": "B"},
        {"segment_order": 0, "label": "A"},
    ]
    screen = _screen(_service(segments=records), clock)

    assert screen.load_campaign() is True
    assert [s.label for s in screen.segments] == ["A", "B"]
    assert screen.error is None


def test_load_campaign_with_null_segment_order(clock):
    records = [
        {"segment_order": 1, "label": "B"},
        {"segment_order": None, "label": "A"},
    ]
    screen = _screen(_service(segments=records), clock)

    assert screen.load_campaign() is True
    assert [s.label for s in screen.segments] == ["A", "B"]


def test_not_eligible_shows_reason(clock):
    service = _service()
    service.spin_eligibility.return_value = SpinEligibility(can_spin=False, reason="Come back tomorrow")
    screen = _screen(service, clock)

    assert screen.load_campaign() is False
    assert screen.error == "Come back tomorrow"
    assert screen.request_spin() is False
    service.spin_execute.assert_not_called()


def test_no_campaign(clock):
    service = _service()
    service.spin_eligibility.return_value = SpinEligibility(can_spin=True, segments=None)
    screen = _screen(service, clock)

    assert screen.load_campaign() is False
    assert screen.error == NO_CAMPAIGN_MESSAGE


def test_campaign_load_failure(clock):
    service = _service()
    service.spin_eligibility.side_effect = OutcomeServiceError("down")
    screen = _screen(service, clock)

    assert screen.load_campaign() is False
    assert screen.error == LOAD_FAILED_MESSAGE


def test_no_customer(clock):
    screen = SpinScreen(_service(), clock=clock)

    assert screen.load_campaign() is False
    assert screen.error == "No customer selected"


def test_full_spin_flow(clock):
    tickets, states = [], []
    screen = _screen(_service(index=2, amount=10), clock, on_ticket=tickets.append)
    screen.add_listener(lambda state, result: states.append(state))
    screen.load_campaign()

    assert screen.request_spin(full_spins=5) is True
    assert screen.state is KioskState.SPINNING
    assert screen.spinning

    _run_frames(screen, clock, 5.1)

    assert screen.state is KioskState.PRIZE_AWARDED
    assert screen.show_result
    assert screen.result.amount == 10
    assert screen.winning_index == 2
    assert segment_under_pointer(screen.rotation, len(screen.segments)) == 2
    assert tickets == []

    _run_frames(screen, clock, 2.1)

    assert screen.state is KioskState.PRINTING_TICKET
    assert [t.barcode for t in tickets] == ["BC123"]
    assert states == [KioskState.SPINNING, KioskState.PRIZE_AWARDED, KioskState.PRINTING_TICKET]


def test_second_customer_spin_lands_from_previous_position(clock):
    service = _service(index=2)
    screen = _screen(service, clock, duration=1.0, result_hold=0.5)
    screen.load_campaign()
    screen.request_spin(full_spins=5)
    _run_frames(screen, clock, 2.0)
    assert screen.state is KioskState.PRINTING_TICKET

    service.spin_execute.return_value = SpinResult(
        segment_index=4, amount=0, barcode="BC999", expires_at=None)
    assert screen.request_spin() is True
    _run_frames(screen, clock, 1.5)

    assert segment_under_pointer(screen.rotation, len(screen.segments)) == 4


def test_spin_while_spinning_is_ignored(clock):
    service = _service()
    screen = _screen(service, clock)
    screen.load_campaign()
    screen.request_spin(full_spins=5)
    _run_frames(screen, clock, 1.0)

    assert screen.request_spin() is False
    assert service.spin_execute.call_count == 1


def test_spin_during_prize_hold_is_ignored(clock):
    service = _service()
    screen = _screen(service, clock, duration=1.0)
    screen.load_campaign()
    screen.request_spin()
    _run_frames(screen, clock, 1.2)
    assert screen.state is KioskState.PRIZE_AWARDED

    assert screen.request_spin() is False
    assert service.spin_execute.call_count == 1


def test_outcome_failure_returns_to_mode_selection(clock):
    service = _service()
    service.spin_execute.side_effect = OutcomeServiceError("timeout")
    screen = _screen(service, clock)
    screen.load_campaign()

    assert screen.request_spin() is False
    assert screen.state is KioskState.MODE_SELECTION
    assert screen.error == SPIN_FAILED_MESSAGE
    assert screen.scheduler.pending == 0


def test_result_outside_wheel_aborts_before_animating(clock):
    service = _service(index=len(DEFAULT_CAMPAIGN_SEGMENTS))
    screen = _screen(service, clock)
    screen.load_campaign()

    assert screen.request_spin() is False
    assert screen.error == SPIN_FAILED_MESSAGE
    assert screen.state is KioskState.SPIN_MODE
    assert not screen.spinning
    assert screen.scheduler.pending == 0


def test_teardown_mid_spin_drops_completion(clock):
    tickets = []
    screen = _screen(_service(), clock, on_ticket=tickets.append)
    screen.load_campaign()
    screen.request_spin()
    _run_frames(screen, clock, 1.0)

    screen.teardown()
    _run_frames(screen, clock, 10.0)

    assert not screen.spinning
    assert screen.result is None
    assert screen.state is KioskState.MODE_SELECTION
    assert tickets == []


def test_teardown_during_prize_hold_skips_ticket(clock):
    tickets = []
    screen = _screen(_service(), clock, duration=1.0, on_ticket=tickets.append)
    screen.load_campaign()
    screen.request_spin()
    _run_frames(screen, clock, 1.2)

    screen.teardown()
    _run_frames(screen, clock, 5.0)

    assert tickets == []


def test_campaign_reload_mid_spin_waits_for_landing(clock):
    screen = _screen(_service(index=4), clock, duration=1.0)
    screen.load_campaign()
    screen.request_spin()
    _run_frames(screen, clock, 0.5)

    screen.set_segments([{"segment_order": 0, "label": "Only"}, {"segment_order": 1, "label": "Two"}])
    assert len(screen.segments) == len(DEFAULT_CAMPAIGN_SEGMENTS)

    _run_frames(screen, clock, 1.0)
    assert [s.label for s in screen.segments] == ["Only", "Two"]


def test_back_is_blocked_while_spinning(clock):
    screen = _screen(_service(), clock)
    screen.load_campaign()
    screen.request_spin()

    assert screen.back() is False
    _run_frames(screen, clock, 5.1)
    assert screen.back() is True
    assert screen.state is KioskState.MODE_SELECTION


@pytest.mark.parametrize("segments", [[], None])
def test_spin_without_segments_is_ignored(clock, segments):
    service = _service()
    service.spin_eligibility.return_value = SpinEligibility(can_spin=True, segments=segments)
    screen = _screen(service, clock)
    screen.load_campaign()

    assert screen.request_spin() is False
    service.spin_execute.assert_not_called()
