"""
Circular arithmetic on compass angles in degrees.

All helpers treat angles as points on a circle so that 359° and 1° are two
degrees apart, not 358.

Functions:
- normalize_degrees: reduce any angle into [0, 360)
- shortest_delta: signed minimal difference in (-180, 180]
- circular_mean: mean direction of a set of headings (None when empty)
- circular_std_dev: RMS of shortest deltas around a mean (None when empty)

Usage:
    from compass.geometry.angle_math import circular_mean, shortest_delta

    mean = circular_mean([350.0, 0.0, 10.0])   # ~0.0
    step = shortest_delta(350.0, 10.0)         # 20.0
"""

import math
from typing import Optional, Sequence


def normalize_degrees(angle: float) -> float:
    """Reduce angle modulo 360 into [0, 360)."""
    a = math.fmod(angle, 360.0)
    if a < 0:
        a += 360.0
    # -1e-15 + 360.0 rounds to 360.0
    if a >= 360.0:
        a = 0.0
    return a


def shortest_delta(from_deg: float, to_deg: float) -> float:
    """Signed shortest angular difference from from_deg to to_deg, in (-180, 180]."""
    diff = math.fmod(to_deg - from_deg, 360.0)
    if diff > 180.0:
        diff -= 360.0
    if diff <= -180.0:
        diff += 360.0
    return diff


def circular_mean(samples: Sequence[float]) -> Optional[float]:
    """
    Mean direction of headings in degrees.

    Each sample is converted to a unit vector, the vectors are summed and the
    angle of the sum is returned, normalized to [0, 360).

    Returns:
        Mean heading, or None for an empty sequence
    """
    if not samples:
        return None

    sum_sin = 0.0
    sum_cos = 0.0
    for d in samples:
        r = math.radians(d)
        sum_cos += math.cos(r)
        sum_sin += math.sin(r)

    return normalize_degrees(math.degrees(math.atan2(sum_sin, sum_cos)))


def circular_std_dev(samples: Sequence[float], mean: Optional[float]) -> Optional[float]:
    """
    Spread of headings around mean, in degrees.

    Root-mean-square of shortest_delta(mean, sample). This is an approximation
    of circular spread, not the circular-variance formula.

    Returns:
        Non-negative spread, or None when samples is empty or mean is None
    """
    if not samples or mean is None:
        return None

    acc = 0.0
    for d in samples:
        delta = shortest_delta(mean, d)
        acc += delta * delta
    return math.sqrt(acc / len(samples))
