"""
Raw orientation samples to azimuth in degrees.

Supports the two fusion strategies:
- Rotation vector: fused orientation sensor, always yields a matrix
- Accelerometer + magnetometer: may fail (free fall, device near vertical)

The matrix is remapped for the current display rotation before the azimuth
is extracted, so portrait and landscape report the heading the screen's top
edge points at.

Usage:
    resolver = OrientationResolver()
    azimuth = resolver.resolve(RotationVectorSample((0.0, 0.0, 0.0, 1.0)), DisplayRotation.ROTATION_0)
    if azimuth is None:
        # Degenerate sample, skip it
"""

import logging
import math
from typing import Dict, Optional, Tuple

import numpy as np

from compass.geometry.angle_math import normalize_degrees
from compass.sensors.rotation_math import (
    AXIS_MINUS_X,
    AXIS_MINUS_Y,
    AXIS_X,
    AXIS_Y,
    orientation_angles,
    remap_coordinate_system,
    rotation_matrix_from_gravity,
    rotation_matrix_from_vector,
)
from compass.sensors.sensor_types import (
    AccelMagSample,
    DisplayRotation,
    OrientationSample,
    RotationVectorSample,
)
from utils.config_sections import SensorFusionConfig, load_sensor_fusion_config

log = logging.getLogger("OrientationResolver")

# display rotation -> (new X axis, new Y axis)
DISPLAY_AXIS_REMAP: Dict[DisplayRotation, Tuple[int, int]] = {
    DisplayRotation.ROTATION_0: (AXIS_X, AXIS_Y),
    DisplayRotation.ROTATION_90: (AXIS_Y, AXIS_MINUS_X),
    DisplayRotation.ROTATION_180: (AXIS_MINUS_X, AXIS_MINUS_Y),
    DisplayRotation.ROTATION_270: (AXIS_MINUS_Y, AXIS_X),
}


class OrientationResolver:
    """Convert rotation-vector or accelerometer/magnetometer samples into azimuth."""

    def __init__(self, config: Optional[SensorFusionConfig] = None) -> None:
        self.config = config or load_sensor_fusion_config()

    def rotation_matrix(self, sample: OrientationSample) -> Optional[np.ndarray]:
        """Device-to-world rotation matrix for sample, or None if fusion fails."""
        if isinstance(sample, RotationVectorSample):
            return rotation_matrix_from_vector(sample.values)
        if isinstance(sample, AccelMagSample):
            return rotation_matrix_from_gravity(sample.accel, sample.mag, self.config)
        raise TypeError(f"Unsupported orientation sample: {type(sample).__name__}")

    def resolve(self, sample: OrientationSample, display_rotation: DisplayRotation) -> Optional[float]:
        """
        Azimuth of the screen's top edge in degrees [0, 360).

        Args:
            sample: Rotation vector or latest accelerometer/magnetometer readings
            display_rotation: Current screen orientation (read per sample)

        Returns:
            Azimuth in degrees, or None when no rotation matrix can be built
        """
        matrix = self.rotation_matrix(sample)
        if matrix is None:
            log.debug("Degenerate accelerometer/magnetometer sample skipped")
            return None

        x_axis, y_axis = DISPLAY_AXIS_REMAP[DisplayRotation(display_rotation)]
        adjusted = remap_coordinate_system(matrix, x_axis, y_axis)

        azimuth_rad = orientation_angles(adjusted)[0]
        return normalize_degrees(math.degrees(azimuth_rad))
