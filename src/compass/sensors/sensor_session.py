"""
Sensor subscription boundary for one active sensing session.

The collaborator that owns the platform sensors calls start() when the app
comes to the foreground and stop() when it goes to the background. Between
the two, raw events are routed through on_event(), which turns them into
orientation samples for the resolver.

Mode selection happens once per start():
- Rotation vector available: use it exclusively
- Otherwise: accelerometer + magnetometer, latest reading of each wins

Usage:
    session = SensorSession()
    mode = session.start(available=[SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD])
    sample = session.on_event(event)
    if sample is not None:
        pipeline.process(sample, now_ms)
    session.stop()
"""

import logging
from typing import Iterable, List, Optional, Tuple

from compass.sensors.sensor_types import (
    AccelMagSample,
    OrientationSample,
    RotationVectorSample,
    SensorEvent,
    SensorSourceMode,
    SensorType,
)

log = logging.getLogger("SensorSession")


class SensorUnavailableError(RuntimeError):
    """Neither a rotation vector nor an accelerometer/magnetometer pair is available."""


class SensorSession:
    """Owns the fusion mode and latest raw readings for one sensing session."""

    def __init__(self) -> None:
        self.mode: Optional[SensorSourceMode] = None
        self.accelerometer_reading: Optional[Tuple[float, ...]] = None
        self.magnetometer_reading: Optional[Tuple[float, ...]] = None
        self.events_received = 0

    @property
    def active(self) -> bool:
        return self.mode is not None

    def start(self, available: Iterable[SensorType]) -> SensorSourceMode:
        """
        Begin a sensing session and fix the fusion mode for its lifetime.

        Args:
            available: Sensor types the platform can provide

        Returns:
            The selected SensorSourceMode

        Raises:
            SensorUnavailableError: No usable fusion strategy
        """
        available_set = set(available)

        if SensorType.ROTATION_VECTOR in available_set:
            mode = SensorSourceMode.ROTATION_VECTOR
        elif {SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD} <= available_set:
            mode = SensorSourceMode.ACCELEROMETER_MAGNETOMETER
        else:
            raise SensorUnavailableError(
                f"No orientation source among {sorted(s.value for s in available_set)}"
            )

        self.mode = mode
        self.accelerometer_reading = None
        self.magnetometer_reading = None
        self.events_received = 0
        log.info("Sensor session started in %s mode", mode.value)
        return mode

    def stop(self) -> None:
        """End the sensing session; later events are ignored until start()."""
        if self.mode is not None:
            log.info("Sensor session stopped after %d events", self.events_received)
        self.mode = None
        self.accelerometer_reading = None
        self.magnetometer_reading = None

    def subscribed_sensors(self) -> List[SensorType]:
        """Sensor types the collaborator should register listeners for."""
        if self.mode is SensorSourceMode.ROTATION_VECTOR:
            return [SensorType.ROTATION_VECTOR]
        if self.mode is SensorSourceMode.ACCELEROMETER_MAGNETOMETER:
            return [SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD]
        return []

    def on_event(self, event: SensorEvent) -> Optional[OrientationSample]:
        """
        Route a raw sensor event.

        Returns:
            A sample ready for the resolver, or None when this event does not
            complete one (inactive session, other mode, missing counterpart)
        """
        if self.mode is None:
            return None

        self.events_received += 1

        if event.sensor_type is SensorType.ROTATION_VECTOR:
            if self.mode is SensorSourceMode.ROTATION_VECTOR:
                return RotationVectorSample(event.values)
            return None

        if event.sensor_type is SensorType.ACCELEROMETER:
            self.accelerometer_reading = tuple(event.values)
        elif event.sensor_type is SensorType.MAGNETIC_FIELD:
            self.magnetometer_reading = tuple(event.values)
        else:
            return None

        if self.mode is not SensorSourceMode.ACCELEROMETER_MAGNETOMETER:
            return None
        if self.accelerometer_reading is None or self.magnetometer_reading is None:
            return None

        return AccelMagSample(self.accelerometer_reading, self.magnetometer_reading)
