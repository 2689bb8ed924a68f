"""Per-sample orchestration of the compass heading core."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from compass.calibration.calibration_session import ButtonState, CalibrationResult, CalibrationSession
from compass.display.update_gate import DisplayUpdate, UpdateGate
from compass.filtering.heading_filter import HeadingFilter
from compass.geometry.angle_math import normalize_degrees
from compass.sensors.orientation_resolver import OrientationResolver
from compass.sensors.sensor_session import SensorSession
from compass.sensors.sensor_types import (
    DisplayRotation,
    OrientationSample,
    SensorEvent,
    SensorSourceMode,
    SensorType,
)

log = logging.getLogger("CompassPipeline")

DisplayRotationProvider = Callable[[], DisplayRotation]


@dataclass
class PersistedCompassState:
    """The only state kept across suspend/resume; everything else is rebuilt."""

    is_calibrating: bool = False
    calibrated_offset: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_calibrating": self.is_calibrating,
            "calibrated_offset": self.calibrated_offset,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PersistedCompassState":
        data = data or {}
        return cls(
            is_calibrating=bool(data.get("is_calibrating", False)),
            calibrated_offset=float(data.get("calibrated_offset", 0.0)),
        )


class CompassPipeline:
    """
    Resolve → offset → smooth → gate → calibrate, once per sensor sample.

    The display rotation is read from the provider on every sample because
    the screen can rotate at any time.
    """

    def __init__(
        self,
        resolver: Optional[OrientationResolver] = None,
        heading_filter: Optional[HeadingFilter] = None,
        update_gate: Optional[UpdateGate] = None,
        calibration: Optional[CalibrationSession] = None,
        *,
        sensor_session: Optional[SensorSession] = None,
        display_rotation_provider: Optional[DisplayRotationProvider] = None,
        telemetry=None,
    ) -> None:
        self.resolver = resolver or OrientationResolver()
        self.heading_filter = heading_filter or HeadingFilter()
        self.update_gate = update_gate or UpdateGate()
        self.calibration = calibration or CalibrationSession()
        self.sensor_session = sensor_session or SensorSession()
        self.display_rotation_provider = display_rotation_provider or (lambda: DisplayRotation.ROTATION_0)
        self.telemetry = telemetry

        # Subtracted from raw azimuth; only restore_state() writes it
        self.calibrated_offset = 0.0

        self.raw_azimuth: Optional[float] = None
        self.last_display_update: Optional[DisplayUpdate] = None
        self.last_calibration_result: Optional[CalibrationResult] = None
        self.samples_processed = 0
        self.samples_skipped = 0

    # ------------------------------------------------------------------
    # read-only state for the UI
    # ------------------------------------------------------------------

    @property
    def displayed_heading(self) -> Optional[float]:
        return self.heading_filter.value

    @property
    def source_mode(self) -> Optional[SensorSourceMode]:
        return self.sensor_session.mode

    # ------------------------------------------------------------------
    # sensing lifecycle
    # ------------------------------------------------------------------

    def start(self, available: Iterable[SensorType]) -> SensorSourceMode:
        mode = self.sensor_session.start(available)
        if self.telemetry is not None:
            self.telemetry.log_event("sensors_started", mode=mode.value)
        return mode

    def stop(self) -> None:
        self.sensor_session.stop()
        if self.telemetry is not None:
            self.telemetry.log_event("sensors_stopped")

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def on_sensor_event(self, event: SensorEvent, now_ms: int) -> Optional[DisplayUpdate]:
        """Route a raw platform event; returns a display update when one is due."""
        sample = self.sensor_session.on_event(event)
        if sample is None:
            return None
        return self.process(sample, now_ms)

    def process(self, sample: OrientationSample, now_ms: int) -> Optional[DisplayUpdate]:
        """
        Run one orientation sample through the pipeline.

        Args:
            sample: Rotation vector or accelerometer/magnetometer sample
            now_ms: Wall-clock time of the sample in milliseconds

        Returns:
            DisplayUpdate if the UI should refresh, otherwise None
        """
        raw = self.resolver.resolve(sample, self.display_rotation_provider())
        if raw is None:
            self.samples_skipped += 1
            return None

        self.samples_processed += 1
        self.raw_azimuth = raw

        target = normalize_degrees(raw - self.calibrated_offset)
        displayed = self.heading_filter.update(target)

        update = self.update_gate.evaluate(displayed, now_ms)
        if update is not None:
            self.last_display_update = update
            if self.telemetry is not None:
                self.telemetry.log_display_update(update, raw_azimuth=raw, timestamp_ms=now_ms)

        if self.calibration.is_collecting:
            result = self.calibration.tick(displayed, now_ms)
            if result is not None:
                self._apply_calibration_result(result, now_ms)

        return update

    def press_calibrate(self, now_ms: int) -> ButtonState:
        """Forward a button press; now_ms must be on the same clock as process()."""
        return self.calibration.press_button(now_ms)

    def save_state(self) -> PersistedCompassState:
        return PersistedCompassState(
            is_calibrating=self.calibration.is_calibrating,
            calibrated_offset=self.calibrated_offset,
        )

    def restore_state(self, state: PersistedCompassState) -> None:
        self.calibrated_offset = normalize_degrees(state.calibrated_offset)
        self.calibration.restore(state.is_calibrating)
        log.debug("Restored state: calibrating=%s offset=%.1f°",
                  state.is_calibrating, self.calibrated_offset)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _apply_calibration_result(self, result: CalibrationResult, now_ms: int) -> None:
        self.last_calibration_result = result
        if result.accepted and result.mean is not None:
            # The offset is left untouched; only the filter jumps to the mean
            self.heading_filter.reseed(result.mean)
        if self.telemetry is not None:
            self.telemetry.log_calibration_result(result, timestamp_ms=now_ms)
