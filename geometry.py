# =============================================================================
# Wheel Geometry
# Pure functions mapping between segment indices and angles.
#
# COORDINATE SYSTEM:
# Angles are radians in screen space: 0 points right and positive angles turn
# clockwise, because the y axis grows downwards. 1.5*pi therefore points
# straight up. Segment i of n starts at wheel_angle + i*slice and runs
# clockwise for one slice.
# =============================================================================

import math

TAU = math.pi * 2
POINTER_REFERENCE_ANGLE = math.pi * 1.5   # "Up" on screen; where the bottle rests.
JITTER_FRACTION = 0.45                    # Max landing offset from centre, in slices.


def normalize_angle(x: float) -> float:
    """Wraps any finite angle into [0, 2*pi), negative inputs included."""
    return ((x % TAU) + TAU) % TAU


def slice_angle(total: int) -> float:
    if total <= 0:
        raise ValueError("a wheel needs at least one segment")
    return TAU / total


def segment_bounds(index, total, wheel_angle):
    """(start, end) angles of one segment for a given wheel rotation."""
    s = slice_angle(total)
    start = wheel_angle + index * s
    return start, start + s


def max_jitter(total: int) -> float:
    """Exclusive bound on the landing offset for a wheel of `total` segments."""
    return JITTER_FRACTION * slice_angle(total)


def target_pointer_angle(index: int, total: int, wheel_end: float, jitter: float = 0.0) -> float:
    """
    Pointer angle that lands inside segment `index` once the wheel sits at
    `wheel_end`. `jitter` shifts the landing point away from the segment
    centre and must stay below max_jitter(total) in magnitude.
    """
    s = slice_angle(total)
    if not 0 <= index < total:
        raise ValueError(f"index {index} outside a wheel of {total} segments")
    if abs(jitter) >= JITTER_FRACTION * s:
        raise ValueError(f"jitter {jitter} would leave the segment")
    return normalize_angle(normalize_angle(wheel_end) + (index + 0.5) * s + jitter)


def winning_index(pointer_angle: float, wheel_angle: float, total: int) -> int:
    """Index of the segment the pointer is over."""
    s = slice_angle(total)
    relative = normalize_angle(normalize_angle(pointer_angle) - normalize_angle(wheel_angle))
    return int(relative // s) % total


def forward_delta(current: float, target: float) -> float:
    """Clockwise distance in [0, 2*pi) needed to get from `current` to `target`."""
    return normalize_angle(target - current)
