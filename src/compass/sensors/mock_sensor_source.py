#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mock sensor source for running the compass core without hardware.

Generates the raw events a phone lying flat on a table would produce while
its top edge points at a chosen heading, optionally with Gaussian heading
noise. Both fusion strategies are covered:
- 'rotation_vector': one rotation-vector event per tick
- 'accelerometer_magnetometer': an accelerometer and a magnetometer event per tick

Usage:
    source = MockSensorSource(SensorSourceMode.ROTATION_VECTOR, heading_deg=90.0, noise_deg=0.0)
    for event in source.events(duration_ms=1000):
        pipeline.on_sensor_event(event, event.timestamp_ms)
"""

import logging
import math
from typing import Iterator, List, Optional

import numpy as np

from compass.geometry.angle_math import normalize_degrees
from compass.sensors.sensor_types import SensorEvent, SensorSourceMode, SensorType
from utils.config_sections import SimulationConfig, load_simulation_config

log = logging.getLogger("MockSensorSource")

# Earth field in world frame (east, north, up), μT
GEOMAGNETIC_NORTH_UT = 20.0
GEOMAGNETIC_DOWN_UT = 40.0
STANDARD_GRAVITY = 9.80665


class MockSensorSource:
    """Synthetic sensor events for a device lying flat at a given heading."""

    def __init__(
        self,
        mode: SensorSourceMode = SensorSourceMode.ROTATION_VECTOR,
        heading_deg: Optional[float] = None,
        noise_deg: Optional[float] = None,
        rate_hz: Optional[int] = None,
        seed: Optional[int] = None,
        config: Optional[SimulationConfig] = None,
    ) -> None:
        cfg = config or load_simulation_config()
        self.mode = mode
        self.heading_deg = normalize_degrees(cfg.heading_deg if heading_deg is None else heading_deg)
        self.noise_deg = cfg.noise_deg if noise_deg is None else noise_deg
        self.rate_hz = cfg.rate_hz if rate_hz is None else rate_hz
        if self.rate_hz <= 0:
            raise ValueError(f"rate_hz must be positive, got {self.rate_hz}")
        self.rng = np.random.default_rng(cfg.seed if seed is None else seed)
        self._gravity_vector = (0.0, 0.0, STANDARD_GRAVITY)

        log.debug("MockSensorSource in '%s' mode @ %d Hz, heading %.1f°",
                  mode.value, self.rate_hz, self.heading_deg)

    @property
    def available_sensors(self) -> List[SensorType]:
        if self.mode is SensorSourceMode.ROTATION_VECTOR:
            return [SensorType.ROTATION_VECTOR, SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD]
        return [SensorType.ACCELEROMETER, SensorType.MAGNETIC_FIELD]

    def set_heading(self, heading_deg: float) -> None:
        self.heading_deg = normalize_degrees(heading_deg)

    def _sample_heading(self) -> float:
        if self.noise_deg <= 0:
            return self.heading_deg
        return normalize_degrees(self.heading_deg + float(self.rng.normal(0.0, self.noise_deg)))

    def rotation_vector(self, heading_deg: float) -> tuple:
        """Unit quaternion (x, y, z, w) for a flat device turned clockwise by heading."""
        half = -math.radians(heading_deg) / 2.0
        return (0.0, 0.0, math.sin(half), math.cos(half))

    def geomagnetic(self, heading_deg: float) -> tuple:
        """Earth field expressed in device coordinates."""
        h = math.radians(heading_deg)
        return (
            -math.sin(h) * GEOMAGNETIC_NORTH_UT,
            math.cos(h) * GEOMAGNETIC_NORTH_UT,
            -GEOMAGNETIC_DOWN_UT,
        )

    def tick(self, timestamp_ms: int) -> List[SensorEvent]:
        """Events produced at one sampling instant."""
        heading = self._sample_heading()
        if self.mode is SensorSourceMode.ROTATION_VECTOR:
            return [SensorEvent(SensorType.ROTATION_VECTOR, self.rotation_vector(heading), timestamp_ms)]
        return [
            SensorEvent(SensorType.ACCELEROMETER, self._gravity_vector, timestamp_ms),
            SensorEvent(SensorType.MAGNETIC_FIELD, self.geomagnetic(heading), timestamp_ms),
        ]

    def events(self, duration_ms: int, start_ms: int = 0) -> Iterator[SensorEvent]:
        """Timed event stream covering [start_ms, start_ms + duration_ms]."""
        period_ms = 1000.0 / self.rate_hz
        steps = int(duration_ms // period_ms)
        for i in range(steps + 1):
            timestamp_ms = start_ms + int(round(i * period_ms))
            for event in self.tick(timestamp_ms):
                yield event
