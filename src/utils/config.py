"""
Centralized configuration for the compass heading core.

This module provides all configuration constants and runtime settings for:
- Sensor fusion (free-fall and degenerate-field thresholds)
- Heading smoothing (circular low-pass filter)
- Display updates (refresh interval and change threshold)
- Calibration (collection window and stability threshold)
- Telemetry (session logs)
- Simulation (mock sensor source used by the demo)

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from utils.config import Config

    window = Config.CALIBRATION_DURATION_MS
    if Config.TELEMETRY_ENABLED:
        # Write JSONL session logs
"""

import logging

log = logging.getLogger(__name__)


class Config:
    """System configuration constants for the compass heading core."""

    # ==========================================================================
    # SENSOR FUSION: Accelerometer + Magnetometer
    # ==========================================================================

    STANDARD_GRAVITY = 9.80665              # m/s²
    FREE_FALL_GRAVITY_RATIO = 0.01          # |a|² below ratio * g² = free fall, no matrix
    MIN_GEOMAGNETIC_CROSS_NORM = 0.1        # |E x A| below this = degenerate (device near vertical)

    # ==========================================================================
    # HEADING FILTER
    # ==========================================================================

    # Fixed smoothing factor (0..1), lower = smoother. Not exposed per instance.
    HEADING_SMOOTHING_ALPHA = 0.15

    # ==========================================================================
    # DISPLAY UPDATES
    # ==========================================================================

    DISPLAY_MIN_INTERVAL_MS = 100           # ~10 Hz refresh
    DISPLAY_MIN_CHANGE_DEG = 1.0            # Push earlier if needle moved more than this

    # ==========================================================================
    # CALIBRATION
    # ==========================================================================

    CALIBRATION_DURATION_MS = 1500          # Hold-steady collection window
    CALIBRATION_MAX_STD_DEV_DEG = 5.0       # Accept only if spread is at most this

    # ==========================================================================
    # TELEMETRY
    # ==========================================================================

    TELEMETRY_ENABLED = False               # JSONL logs under TELEMETRY_OUTPUT_DIR
    TELEMETRY_OUTPUT_DIR = "logs"

    # ==========================================================================
    # SIMULATION (mock sensor source)
    # ==========================================================================

    SIMULATION_RATE_HZ = 10                 # Matches a UI-rate sensor subscription
    SIMULATION_NOISE_DEG = 0.5
    SIMULATION_HEADING_DEG = 45.0
    SIMULATION_DURATION_MS = 3000
    SIMULATION_SEED = 7
