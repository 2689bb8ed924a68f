"""
Builder wiring the compass pipeline from configuration.
"""

import logging
from pathlib import Path
from typing import Optional

from compass.calibration.calibration_session import CalibrationSession
from compass.display.update_gate import UpdateGate
from compass.filtering.heading_filter import HeadingFilter
from compass.pipeline.compass_pipeline import CompassPipeline, DisplayRotationProvider
from compass.sensors.orientation_resolver import OrientationResolver
from compass.sensors.sensor_session import SensorSession
from compass.telemetry.telemetry_logger import TelemetryLogger
from utils.config_sections import (
    load_calibration_config,
    load_sensor_fusion_config,
    load_telemetry_config,
    load_update_gate_config,
)

log = logging.getLogger("Builder")


class Builder:
    """Creates every dependency of the pipeline; components read Config sections."""

    def build_resolver(self) -> OrientationResolver:
        return OrientationResolver(load_sensor_fusion_config())

    def build_heading_filter(self) -> HeadingFilter:
        return HeadingFilter()

    def build_update_gate(self) -> UpdateGate:
        return UpdateGate(load_update_gate_config())

    def build_calibration(self) -> CalibrationSession:
        return CalibrationSession(load_calibration_config())

    def build_sensor_session(self) -> SensorSession:
        return SensorSession()

    def build_telemetry(self) -> Optional[TelemetryLogger]:
        cfg = load_telemetry_config()
        if not cfg.enabled:
            return None
        return TelemetryLogger(output_dir=Path(cfg.output_dir))

    def build_pipeline(
        self,
        display_rotation_provider: Optional[DisplayRotationProvider] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> CompassPipeline:
        log.debug("Building compass pipeline")
        return CompassPipeline(
            resolver=self.build_resolver(),
            heading_filter=self.build_heading_filter(),
            update_gate=self.build_update_gate(),
            calibration=self.build_calibration(),
            sensor_session=self.build_sensor_session(),
            display_rotation_provider=display_rotation_provider,
            telemetry=telemetry if telemetry is not None else self.build_telemetry(),
        )
