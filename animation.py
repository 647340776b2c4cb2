# =============================================================================
# Animation Controller
# Drives the wheel angle and the bottle (pointer) angle one frame at a time.
#
# Two states:
# - "idle":     wheel and bottle turn together at IDLE_SPEED.
# - "spinning": the wheel keeps its idle pace while the bottle eases from its
#               start angle onto a target fixed when the spin began.
#
# The host calls tick(now) once per frame with a millisecond timestamp. There
# is no loop in here, so tests can feed synthetic timestamps.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Optional

from fair_random import FairRandom
from geometry import (
    POINTER_REFERENCE_ANGLE,
    TAU,
    forward_delta,
    max_jitter,
    normalize_angle,
    target_pointer_angle,
    winning_index,
)

log = logging.getLogger(__name__)

# --- CONFIGURATION ---
IDLE_SPEED          = 0.35    # Radians per second while nothing is happening.
SPIN_DURATION_MS    = 2400    # Length of the eased bottle spin.
MAX_FRAME_DELTA_MS  = 50      # Idle steps are capped so a stalled frame doesn't jump.
MIN_EXTRA_TURNS     = 6       # Full bottle turns before settling...
EXTRA_TURN_CHOICES  = 5       # ...plus 0..4 more, picked at random.

IDLE = "idle"
SPINNING = "spinning"


# ========= EASING =========

def ease_out_cubic(x: float) -> float:
    """Cubic easing: starts fast, slows down to a stop. Used for the bottle spin."""
    return 1 - pow(1 - x, 3)


@dataclass
class SpinSession:
    """One spin in flight. Discarded as soon as the bottle settles."""
    index: int                 # Segment drawn when the spin was triggered.
    total: int
    start_angle: float         # Bottle angle at the start.
    target_angle: float        # Bottle angle at the end, extra turns included.
    wheel_start: float
    wheel_end: float           # Predicted wheel angle once duration_ms has passed.
    duration_ms: float
    extra_turns: int
    started_at: Optional[float] = None


class AnimationController:
    """
    Frame-driven state machine for the wheel and bottle.

    `on_settled(winner_index, session)` fires once per spin, on the tick that
    lands the bottle. The winner passed is read back from the final angles,
    which is what the viewer actually sees.
    """

    def __init__(self, rng=None, on_settled=None, idle_speed=IDLE_SPEED,
                 duration_ms=SPIN_DURATION_MS, wheel_angle=0.0,
                 pointer_angle=POINTER_REFERENCE_ANGLE):
        self.rng = rng or FairRandom()
        self.on_settled = on_settled
        self.idle_speed = idle_speed
        self.duration_ms = duration_ms
        self.wheel_angle = normalize_angle(wheel_angle)
        self.pointer_angle = normalize_angle(pointer_angle)
        self.session: Optional[SpinSession] = None
        self.last_winner: Optional[int] = None
        self._last_now: Optional[float] = None

    @property
    def state(self) -> str:
        return SPINNING if self.session is not None else IDLE

    @property
    def is_spinning(self) -> bool:
        return self.session is not None

    def progress(self, now) -> float:
        """Spin progress in [0, 1]; 0 while idle."""
        s = self.session
        if s is None or s.started_at is None:
            return 0.0
        return min(1.0, max(0.0, (now - s.started_at) / s.duration_ms))

    def start_spin(self, index: int, total: int) -> bool:
        """
        Switches to "spinning" with the bottle headed for segment `index`.
        Returns False, changing nothing, if a spin is already running.
        """
        if self.session is not None:
            return False

        # The wheel keeps turning for the whole spin, so aim at where it will be.
        wheel_end = self.wheel_angle + self.idle_speed * (self.duration_ms / 1000.0)
        jitter = self.rng.signed_jitter(max_jitter(total))
        landing = target_pointer_angle(index, total, wheel_end, jitter)
        turns = MIN_EXTRA_TURNS + self.rng.uniform_int(EXTRA_TURN_CHOICES)
        target = self.pointer_angle + turns * TAU + forward_delta(self.pointer_angle, landing)

        self.session = SpinSession(
            index=index,
            total=total,
            start_angle=self.pointer_angle,
            target_angle=target,
            wheel_start=self.wheel_angle,
            wheel_end=wheel_end,
            duration_ms=self.duration_ms,
            extra_turns=turns,
            # Spins triggered before the first frame start on that frame.
            started_at=self._last_now,
        )
        log.info("Spin started: segment %d of %d, %d extra turns", index, total, turns)
        return True

    def tick(self, now: float) -> Optional[int]:
        """
        Advances one frame. Returns the winning index on the frame the bottle
        settles, otherwise None.
        """
        dt = 0.0 if self._last_now is None else now - self._last_now
        self._last_now = now

        s = self.session
        if s is None:
            dt = max(0.0, min(dt, MAX_FRAME_DELTA_MS))
            step = self.idle_speed * dt / 1000.0
            self.wheel_angle = normalize_angle(self.wheel_angle + step)
            self.pointer_angle = normalize_angle(self.pointer_angle + step)
            return None

        if s.started_at is None:
            s.started_at = now
        elapsed = max(0.0, now - s.started_at)
        if elapsed < s.duration_ms:
            # Wheel position comes from elapsed time, not summed frame deltas,
            # so it reaches wheel_end exactly.
            self.wheel_angle = normalize_angle(s.wheel_start + self.idle_speed * elapsed / 1000.0)
            k = ease_out_cubic(elapsed / s.duration_ms)
            self.pointer_angle = s.start_angle + (s.target_angle - s.start_angle) * k
            return None

        return self._settle(s)

    def _settle(self, s: SpinSession) -> int:
        """Snaps both angles onto their targets and reads back the winner."""
        self.wheel_angle = normalize_angle(s.wheel_end)
        self.pointer_angle = normalize_angle(s.target_angle)
        self.session = None

        winner = winning_index(self.pointer_angle, self.wheel_angle, s.total)
        if winner != s.index:
            log.warning("Bottle settled on segment %d, drawn segment was %d", winner, s.index)
        else:
            log.info("Spin finished on segment %d", winner)
        self.last_winner = winner

        if self.on_settled:
            self.on_settled(winner, s)
        return winner
