"""
Refresh policy for the needle and the numeric heading readout.

Updates are pushed at roughly 10 Hz, or sooner when the heading has moved
more than a degree from what the needle currently shows. The needle is drawn
rotated by the negated heading, and the comparison is made against that
applied rotation.
"""

import math
from dataclasses import dataclass
from typing import Optional

from compass.geometry.angle_math import shortest_delta
from utils.config_sections import UpdateGateConfig, load_update_gate_config


@dataclass(frozen=True)
class DisplayUpdate:
    heading_rounded: int      # Readout text, 0..359
    visual_rotation: float    # Needle rotation in degrees (= -heading)


class UpdateGate:
    """Decide when a displayed heading should be pushed to the UI."""

    def __init__(self, config: Optional[UpdateGateConfig] = None) -> None:
        self.config = config or load_update_gate_config()
        self.last_push_ms: Optional[int] = None  # None until the first push
        self.visual_rotation = 0.0
        self.pushes = 0

    def should_update(self, displayed_heading: float, now_ms: int) -> bool:
        if self.last_push_ms is None:
            return True
        elapsed = now_ms - self.last_push_ms
        moved = abs(shortest_delta(-self.visual_rotation, displayed_heading))
        return elapsed > self.config.min_interval_ms or moved > self.config.min_change_deg

    def evaluate(self, displayed_heading: float, now_ms: int) -> Optional[DisplayUpdate]:
        """Return the update to render, or None if the UI can keep its current state."""
        if not self.should_update(displayed_heading, now_ms):
            return None

        self.last_push_ms = now_ms
        self.visual_rotation = -displayed_heading
        self.pushes += 1

        # Half-up rounding; 359.5 wraps to 0
        rounded = int(math.floor(displayed_heading + 0.5)) % 360
        return DisplayUpdate(heading_rounded=rounded, visual_rotation=self.visual_rotation)
