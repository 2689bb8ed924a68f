"""Value types exchanged between the sensor subsystem and the heading core."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Sequence, Tuple, Union


class DisplayRotation(IntEnum):
    """Screen orientation relative to the device's natural orientation."""

    ROTATION_0 = 0
    ROTATION_90 = 90
    ROTATION_180 = 180
    ROTATION_270 = 270


class SensorType(Enum):
    ROTATION_VECTOR = "rotation_vector"
    ACCELEROMETER = "accelerometer"
    MAGNETIC_FIELD = "magnetic_field"


class SensorSourceMode(Enum):
    """Fusion strategy, fixed for one active sensing session."""

    ROTATION_VECTOR = "rotation_vector"
    ACCELEROMETER_MAGNETOMETER = "accelerometer_magnetometer"


def _as_vector(values: Sequence[float], name: str, minimum: int = 3) -> Tuple[float, ...]:
    vector = tuple(float(v) for v in values)
    if len(vector) < minimum:
        raise ValueError(f"{name} needs at least {minimum} components, got {len(vector)}")
    return vector


@dataclass(frozen=True)
class SensorEvent:
    """Raw event as delivered by the platform sensor subsystem."""

    sensor_type: SensorType
    values: Tuple[float, ...]
    timestamp_ms: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _as_vector(self.values, self.sensor_type.value))


@dataclass(frozen=True)
class RotationVectorSample:
    """Rotation vector (x, y, z[, w]) from a fused orientation sensor."""

    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _as_vector(self.values, "rotation vector"))


@dataclass(frozen=True)
class AccelMagSample:
    """Latest accelerometer (m/s²) and magnetometer (μT) readings."""

    accel: Tuple[float, float, float]
    mag: Tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "accel", _as_vector(self.accel, "accelerometer")[:3])
        object.__setattr__(self, "mag", _as_vector(self.mag, "magnetometer")[:3])


OrientationSample = Union[RotationVectorSample, AccelMagSample]
