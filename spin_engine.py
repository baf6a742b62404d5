# =============================================================================
# Kiosk Prize Wheel - Spin Animation Engine
#
# The outcome service decides which segment wins; this module only makes the
# wheel land there. It computes a forward-only target rotation with a few
# extra full turns, then eases the wheel from its current rotation to the
# target over a fixed duration, one frame at a time.
#
# Everything runs on the frame loop: no threads, no sleeping. Each frame
# re-evaluates the rotation as a function of elapsed time.
# =============================================================================

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Optional

from wheel_config import MAX_FULL_SPINS, MIN_FULL_SPINS, SPIN_DURATION_SEC
from wheel_layout import POINTER_ANGLE, WheelConfigError, normalize_angle, segment_angles

log = logging.getLogger(__name__)


# ========= EASING =========

def ease_out_cubic(x: float) -> float:
    """Cubic easing: starts fast, slows down to a stop. Used for the main spin."""
    return 1 - pow(1 - x, 3)


def ease_out_back(x: float) -> float:
    """
    "Back" easing creates an overshoot effect, like a bounce.
    Used for the pointer jiggle animation.
    """
    c1 = 1.70158
    c3 = c1 + 1
    return 1 + c3 * pow(x - 1, 3) + c1 * pow(x - 1, 2)


# ========= TARGETING =========

def pick_full_spins(rng=None, min_spins=MIN_FULL_SPINS, max_spins=MAX_FULL_SPINS) -> int:
    """Uniform number of extra full turns, inclusive on both ends."""
    rng = rng or random
    return rng.randint(min_spins, max_spins)


def check_target(target_index: int, total_segments: int) -> None:
    if total_segments <= 0:
        raise WheelConfigError("cannot spin a wheel with no segments")
    if not 0 <= target_index < total_segments:
        raise WheelConfigError(
            f"segment index {target_index} is outside a {total_segments}-segment wheel"
        )


def compute_target_rotation(current_rotation: float, target_index: int,
                            total_segments: int, full_spins: int) -> float:
    """
    Final (unwrapped) rotation that brings the middle of `target_index` under the pointer.

    The remainder is measured from where the wheel currently rests and normalized
    into [0, 360), so the wheel only ever moves forward from `current_rotation`
    and `target % 360` always shows the target segment under the pointer.
    """
    check_target(target_index, total_segments)
    if full_spins < 0:
        raise ValueError("full_spins must be a non-negative number of turns")
    mid = segment_angles(target_index, total_segments).mid
    rotation_needed = POINTER_ANGLE - mid - current_rotation
    return current_rotation + full_spins * 360 + normalize_angle(rotation_needed)


# ========= FRAME SCHEDULING =========

class FrameScheduler:
    """
    Cooperative per-frame callback queue.

    Callbacks requested before a frame starts run once during that frame;
    callbacks requested while a frame is running wait for the next one.
    """

    def __init__(self):
        self._pending = []

    def request_frame(self, callback):
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_frame(self, now: float) -> int:
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback(now)
        return len(callbacks)


# ========= ANIMATION DRIVER =========

@dataclass
class SpinState:
    start_rotation: float
    target_index: int
    target_rotation: float
    start_time: float
    duration: float
    generation: int
    result: Any = None


class SpinAnimator:
    """
    Drives one wheel. `spin()` starts an animation, the scheduler calls back every
    frame until the wheel rests on the target, then `on_complete(result)` fires once.
    """

    def __init__(self, scheduler, clock=time.monotonic, duration=SPIN_DURATION_SEC,
                 rng=None, min_full_spins=MIN_FULL_SPINS, max_full_spins=MAX_FULL_SPINS,
                 on_frame=None, on_complete=None):
        if duration <= 0:
            raise ValueError("duration must be positive")
        self.scheduler = scheduler
        self.clock = clock
        self.duration = duration
        self.rng = rng or random.Random()
        self.min_full_spins = min_full_spins
        self.max_full_spins = max_full_spins
        self.on_frame = on_frame
        self.on_complete = on_complete

        self.rotation = 0.0               # Unwrapped; only ever interpolated in this form.
        self.state: Optional[SpinState] = None
        self._generation = 0

    @property
    def is_spinning(self) -> bool:
        return self.state is not None

    @property
    def display_rotation(self) -> float:
        return self.rotation % 360

    def spin(self, result, segments, full_spins=None) -> bool:
        """
        Starts a spin landing on `result.segment_index` of `segments` (the list active
        right now). Returns False if a spin is already running.
        Raises WheelConfigError, with nothing scheduled, if the target is not on the wheel.
        """
        if self.is_spinning:
            log.debug("Spin ignored, wheel already spinning (generation %s)", self._generation)
            return False

        total = len(segments)
        target_index = result.segment_index
        check_target(target_index, total)
        if full_spins is None:
            full_spins = pick_full_spins(self.rng, self.min_full_spins, self.max_full_spins)
        target = compute_target_rotation(self.rotation, target_index, total, full_spins)

        self._generation += 1
        self.state = SpinState(
            start_rotation=self.rotation,
            target_index=target_index,
            target_rotation=target,
            start_time=self.clock(),
            duration=self.duration,
            generation=self._generation,
            result=result,
        )
        log.info("Spinning to segment %s of %s (%s full turns, %.1f -> %.1f)",
                 target_index, total, full_spins, self.rotation, target)
        self._schedule(self._generation)
        return True

    def cancel(self) -> None:
        """Abandons the running animation. Its pending frames become no-ops; nothing completes."""
        if self.state is None:
            return
        log.info("Spin to segment %s cancelled", self.state.target_index)
        self._generation += 1
        self.state = None

    def rotation_at(self, now: float) -> float:
        """Unwrapped rotation of the running spin at time `now`."""
        state = self.state
        if state is None:
            return self.rotation
        elapsed = min(max(now - state.start_time, 0.0), state.duration)
        eased = ease_out_cubic(elapsed / state.duration)
        return state.start_rotation + (state.target_rotation - state.start_rotation) * eased

    def _schedule(self, generation):
        def frame(now):
            if generation != self._generation:
                return  # stale frame from a cancelled or finished spin
            self._frame(now)
        self.scheduler.request_frame(frame)

    def _frame(self, now):
        state = self.state
        if now - state.start_time < state.duration:
            self.rotation = self.rotation_at(now)
            self._emit_frame()
            self._schedule(state.generation)
            return

        # Terminal frame: rest exactly on the target, wrapped so the next spin starts small.
        self.rotation = state.target_rotation % 360
        self.state = None
        self._generation += 1
        self._emit_frame()
        log.info("Spin landed on segment %s", state.target_index)
        if self.on_complete:
            self.on_complete(state.result)

    def _emit_frame(self):
        if self.on_frame:
            self.on_frame(self.display_rotation)
