"""First-order circular low-pass filter for compass headings."""

from typing import Optional

from compass.geometry.angle_math import normalize_degrees, shortest_delta
from utils.config import Config

# Fixed smoothing factor (0..1), lower = smoother
ALPHA = Config.HEADING_SMOOTHING_ALPHA


class HeadingFilter:
    """
    Exponential smoothing over angles in degrees.

    The first target seeds the state (normalized). Later targets pull the state
    along the shortest arc by ALPHA of the remaining difference, so the
    output never crosses the target.
    """

    def __init__(self) -> None:
        self._state: Optional[float] = None  # None until the first sample

    @property
    def value(self) -> Optional[float]:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    def update(self, target: float) -> float:
        if self._state is None:
            self._state = normalize_degrees(target)
        else:
            delta = shortest_delta(self._state, target)
            self._state = normalize_degrees(self._state + ALPHA * delta)
        return self._state

    def reseed(self, value: float) -> None:
        """Jump straight to value, bypassing smoothing."""
        self._state = normalize_degrees(value)

    def reset(self) -> None:
        self._state = None
