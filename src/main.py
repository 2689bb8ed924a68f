#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Compass heading core - simulated session

Runs the full pipeline (sensor session → resolver → filter → update gate →
calibration) against the MockSensorSource, so the behavior can be checked
without a phone.

Modes:
- main(SensorSourceMode.ROTATION_VECTOR): fused rotation-vector sensor
- main(SensorSourceMode.ACCELEROMETER_MAGNETOMETER): dual-sensor fusion
- main(..., calibrate=True): press the calibration button twice mid-session
"""

import logging
from pathlib import Path
from typing import Optional

from compass.calibration.calibration_session import CalibrationEvent
from compass.pipeline.builder import Builder
from compass.sensors.mock_sensor_source import MockSensorSource
from compass.sensors.sensor_types import SensorSourceMode
from compass.telemetry.telemetry_logger import TelemetryLogger
from utils.config_sections import load_simulation_config

log = logging.getLogger("main")


def _print_calibration_event(event: CalibrationEvent) -> None:
    print(f"  [CALIBRATION] {event.kind.value} → button "
          f"'{event.button.button_label.value}' enabled={event.button.button_enabled}")
    if event.result is not None and event.result.std_dev is not None:
        print(f"  [CALIBRATION] mean={event.result.mean:.1f}° std={event.result.std_dev:.2f}° "
              f"samples={event.result.sample_count}")


def main(
    mode: SensorSourceMode = SensorSourceMode.ROTATION_VECTOR,
    calibrate: bool = False,
    telemetry_dir: Optional[Path] = None,
) -> dict:
    """
    Run one simulated compass session.

    Returns:
        Dict with the final displayed heading, push count and calibration outcome
    """
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    sim = load_simulation_config()
    print("=" * 60)
    print(f"Compass core - simulated session ({mode.value})")
    print("=" * 60)

    telemetry = TelemetryLogger(output_dir=telemetry_dir) if telemetry_dir is not None else None
    pipeline = Builder().build_pipeline(telemetry=telemetry)
    pipeline.calibration.subscribe(_print_calibration_event)

    source = MockSensorSource(mode=mode, config=sim)
    pipeline.start(source.available_sensors)

    calibrate_at_ms = sim.duration_ms // 3
    pressed = False

    try:
        for event in source.events(sim.duration_ms):
            now_ms = event.timestamp_ms
            if calibrate and not pressed and now_ms >= calibrate_at_ms:
                pipeline.press_calibrate(now_ms)
                pipeline.press_calibrate(now_ms)
                pressed = True

            update = pipeline.on_sensor_event(event, now_ms)
            if update is not None:
                print(f"  t={now_ms:5d} ms  heading {update.heading_rounded:3d}°  "
                      f"needle {update.visual_rotation:7.2f}°")
    finally:
        pipeline.stop()

    result = pipeline.last_calibration_result
    summary = {
        "displayed_heading": pipeline.displayed_heading,
        "display_updates": pipeline.update_gate.pushes,
        "samples_skipped": pipeline.samples_skipped,
        "calibration_accepted": None if result is None else result.accepted,
    }

    if telemetry is not None:
        telemetry.finalize_session()

    print(f"Final heading: {summary['displayed_heading']:.1f}°  "
          f"({summary['display_updates']} display updates)")
    return summary


if __name__ == "__main__":
    main()
