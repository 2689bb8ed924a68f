"""
Rotation matrices for device orientation.

Matrices map device coordinates to world coordinates (x east, y north, z up)
and are returned as fresh 3x3 numpy arrays on every call; nothing here keeps
shared buffers between samples.

Axis codes for remapping follow the usual sensor convention: 1/2/3 for
X/Y/Z, with 0x80 set for the negated axis.
"""

import math
from typing import Optional, Sequence

import numpy as np

from utils.config_sections import SensorFusionConfig

AXIS_X = 1
AXIS_Y = 2
AXIS_Z = 3
AXIS_MINUS_X = AXIS_X | 0x80
AXIS_MINUS_Y = AXIS_Y | 0x80
AXIS_MINUS_Z = AXIS_Z | 0x80


def rotation_matrix_from_vector(rotation_vector: Sequence[float]) -> np.ndarray:
    """
    Rotation matrix from a rotation vector (x*sin(θ/2), y*sin(θ/2), z*sin(θ/2)[, cos(θ/2)]).

    When the scalar part is missing it is derived from the unit-norm constraint.
    """
    q1, q2, q3 = (float(v) for v in rotation_vector[:3])
    if len(rotation_vector) >= 4:
        q0 = float(rotation_vector[3])
    else:
        q0 = 1.0 - q1 * q1 - q2 * q2 - q3 * q3
        q0 = math.sqrt(q0) if q0 > 0 else 0.0

    sq_q1 = 2 * q1 * q1
    sq_q2 = 2 * q2 * q2
    sq_q3 = 2 * q3 * q3
    q1_q2 = 2 * q1 * q2
    q3_q0 = 2 * q3 * q0
    q1_q3 = 2 * q1 * q3
    q2_q0 = 2 * q2 * q0
    q2_q3 = 2 * q2 * q3
    q1_q0 = 2 * q1 * q0

    return np.array([
        [1 - sq_q2 - sq_q3, q1_q2 - q3_q0, q1_q3 + q2_q0],
        [q1_q2 + q3_q0, 1 - sq_q1 - sq_q3, q2_q3 - q1_q0],
        [q1_q3 - q2_q0, q2_q3 + q1_q0, 1 - sq_q1 - sq_q2],
    ])


def rotation_matrix_from_gravity(
    gravity: Sequence[float],
    geomagnetic: Sequence[float],
    config: Optional[SensorFusionConfig] = None,
) -> Optional[np.ndarray]:
    """
    Rotation matrix from accelerometer and magnetometer readings.

    Rows are East (E x A), North (A x East) and Up (A), all normalized.

    Returns:
        3x3 matrix, or None in free fall or when the field is (nearly)
        parallel to gravity
    """
    cfg = config or SensorFusionConfig()

    a = np.asarray(gravity[:3], dtype=float)
    e = np.asarray(geomagnetic[:3], dtype=float)

    normsq_a = float(np.dot(a, a))
    if normsq_a < cfg.free_fall_gravity_squared:
        return None

    h = np.cross(e, a)
    norm_h = float(np.linalg.norm(h))
    if norm_h < cfg.min_geomagnetic_cross_norm:
        return None

    h = h / norm_h
    a = a / math.sqrt(normsq_a)
    m = np.cross(a, h)

    return np.vstack([h, m, a])


def remap_coordinate_system(in_r: np.ndarray, x_axis: int, y_axis: int) -> np.ndarray:
    """
    Express a rotation matrix in a remapped device frame.

    x_axis / y_axis name which device axis becomes the new X / Y; the new Z
    completes a right-handed frame.

    Raises:
        ValueError: unknown axis codes or both arguments on the same axis
    """
    if (x_axis & 0x7C) or (y_axis & 0x7C):
        raise ValueError(f"Invalid axis codes: {x_axis:#x}, {y_axis:#x}")
    if (x_axis & 3) == 0 or (y_axis & 3) == 0:
        raise ValueError(f"Invalid axis codes: {x_axis:#x}, {y_axis:#x}")
    if (x_axis & 3) == (y_axis & 3):
        raise ValueError("X and Y must map to different axes")

    z_axis = x_axis ^ y_axis
    x = (x_axis & 3) - 1
    y = (y_axis & 3) - 1
    z = (z_axis & 3) - 1

    # Flip Z when (x, y, z) is not a cyclic permutation of (0, 1, 2)
    axis_y = (z + 1) % 3
    axis_z = (z + 2) % 3
    if (x ^ axis_y) | (y ^ axis_z):
        z_axis ^= 0x80

    signs = [-1.0 if axis >= 0x80 else 1.0 for axis in (x_axis, y_axis, z_axis)]

    src = np.asarray(in_r, dtype=float)
    out = np.zeros((3, 3))
    out[:, x] = signs[0] * src[:, 0]
    out[:, y] = signs[1] * src[:, 1]
    out[:, z] = signs[2] * src[:, 2]
    return out


def orientation_angles(r: np.ndarray) -> np.ndarray:
    """Return (azimuth, pitch, roll) in radians for rotation matrix r."""
    azimuth = math.atan2(r[0, 1], r[1, 1])
    pitch = math.asin(max(-1.0, min(1.0, -r[2, 1])))
    roll = math.atan2(-r[2, 0], r[2, 2])
    return np.array([azimuth, pitch, roll])
