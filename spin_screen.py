# =============================================================================
# Kiosk Prize Wheel - Spin Screen
#
# The kiosk screen logic behind the wheel: loads the customer's campaign,
# asks the outcome service for a result, hands it to the animator, and walks
# the kiosk through SPINNING -> PRIZE_AWARDED -> PRINTING_TICKET.
# Nothing here draws; the pygame app reads this object's fields every frame.
# =============================================================================

import logging
import time
from enum import Enum

from spin_engine import FrameScheduler, SpinAnimator
from wheel_config import MAX_FULL_SPINS, MIN_FULL_SPINS, RESULT_HOLD_SEC, SPIN_DURATION_SEC
from wheel_layout import WheelConfigError, sort_segments

log = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load spin wheel. Please try again."
NO_CAMPAIGN_MESSAGE = "No active campaign available"
SPIN_FAILED_MESSAGE = "Spin failed. Please try again."


class KioskState(str, Enum):
    MODE_SELECTION = "MODE_SELECTION"
    SPIN_MODE = "SPIN_MODE"
    SPINNING = "SPINNING"
    PRIZE_AWARDED = "PRIZE_AWARDED"
    PRINTING_TICKET = "PRINTING_TICKET"


class SpinScreen:
    """Owns one wheel and the one spin that may be running on it."""

    def __init__(self, outcome_service, customer_id=None, clock=time.monotonic,
                 duration=SPIN_DURATION_SEC, result_hold=RESULT_HOLD_SEC, rng=None,
                 min_full_spins=MIN_FULL_SPINS, max_full_spins=MAX_FULL_SPINS,
                 on_ticket=None):
        self.outcome_service = outcome_service
        self.customer_id = customer_id
        self.clock = clock
        self.result_hold = result_hold
        self.on_ticket = on_ticket

        self.scheduler = FrameScheduler()
        self.animator = SpinAnimator(
            self.scheduler,
            clock=clock,
            duration=duration,
            rng=rng,
            min_full_spins=min_full_spins,
            max_full_spins=max_full_spins,
            on_complete=self._on_spin_complete,
        )

        self.state = KioskState.SPIN_MODE
        self.segments = []
        self.error = None
        self.result = None
        self.winning_index = None
        self._awarded_at = None
        self._pending_segments = None
        self._listeners = []

    # --- Read-only views for the renderer ---
    @property
    def spinning(self):
        return self.animator.is_spinning

    @property
    def rotation(self):
        return self.animator.display_rotation

    @property
    def show_result(self):
        return self.state in (KioskState.PRIZE_AWARDED, KioskState.PRINTING_TICKET) and self.result is not None

    def add_listener(self, callback):
        """`callback(state, result)` runs on every state change."""
        self._listeners.append(callback)

    # --- Campaign ---
    def load_campaign(self):
        """Checks eligibility and loads the campaign's segments. Returns True if the wheel is ready."""
        if self.customer_id is None:
            self.error = "No customer selected"
            return False
        try:
            eligibility = self.outcome_service.spin_eligibility(self.customer_id)
        except Exception:
            log.exception("Loading spin campaign failed for customer %s", self.customer_id)
            self.error = LOAD_FAILED_MESSAGE
            return False

        if not eligibility.can_spin:
            self.error = eligibility.reason or "Not eligible to spin"
            return False
        if not eligibility.segments:
            self.error = NO_CAMPAIGN_MESSAGE
            return False

        self.error = None
        self.set_segments(eligibility.segments)
        return True

    def set_segments(self, records):
        """Replaces the campaign. While a spin runs the new list waits until it lands."""
        segments = sort_segments(records)
        if self.spinning:
            log.info("Campaign reloaded mid-spin; applying after the current spin")
            self._pending_segments = segments
            return
        self.segments = segments
        self.winning_index = None

    # --- Spinning ---
    def request_spin(self, full_spins=None):
        """
        Spins the wheel for the current customer. Returns True if an animation started.
        Re-entrant requests while spinning are ignored.
        """
        if self.spinning or not self.segments:
            return False
        if self.state is KioskState.PRIZE_AWARDED:
            return False

        self.error = None
        self.result = None
        self.winning_index = None
        self._set_state(KioskState.SPINNING)
        try:
            result = self.outcome_service.spin_execute(self.customer_id)
        except Exception:
            log.exception("Spin request failed for customer %s", self.customer_id)
            self.error = SPIN_FAILED_MESSAGE
            self._set_state(KioskState.MODE_SELECTION)
            return False

        try:
            started = self.animator.spin(result, self.segments, full_spins=full_spins)
        except WheelConfigError as e:
            log.error("Spin result does not fit the wheel: %s", e)
            self.error = SPIN_FAILED_MESSAGE
            self._set_state(KioskState.SPIN_MODE)
            return False
        return started

    def tick(self, now=None):
        """Advances one frame: the wheel animation and the prize hold timer."""
        now = self.clock() if now is None else now
        self.scheduler.run_frame(now)
        if self.state is KioskState.PRIZE_AWARDED and now - self._awarded_at >= self.result_hold:
            self._set_state(KioskState.PRINTING_TICKET)
            if self.on_ticket:
                self.on_ticket(self.result)

    def _on_spin_complete(self, result):
        self._awarded_at = self.clock()
        self.result = result
        self.winning_index = result.segment_index
        if self._pending_segments is not None:
            # The wedge we landed on belongs to the old face; don't highlight the new one.
            self.segments, self._pending_segments = self._pending_segments, None
            self.winning_index = None
        log.info("Prize awarded: %s (barcode %s)", result.amount, result.barcode)
        self._set_state(KioskState.PRIZE_AWARDED)

    # --- Navigation ---
    def back(self):
        if self.spinning:
            return False
        self._set_state(KioskState.MODE_SELECTION)
        return True

    def teardown(self):
        """The screen is going away: drop the running spin and any pending ticket hand-off."""
        self.animator.cancel()
        self._awarded_at = None
        if self._pending_segments is not None:
            self.segments, self._pending_segments = self._pending_segments, None
        if self.state in (KioskState.SPINNING, KioskState.PRIZE_AWARDED):
            self._set_state(KioskState.MODE_SELECTION)

    def _set_state(self, state):
        if state is self.state:
            return
        log.debug("Kiosk state %s -> %s", self.state.value, state.value)
        self.state = state
        for callback in self._listeners:
            callback(state, self.result)
