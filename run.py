#!/usr/bin/env python3
"""
Wrapper to run the simulated compass session from the repository root
Adds src/ to sys.path so the packages resolve without installation
"""
import sys
import os

# Add src to path FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    from main import main
    from compass.sensors.sensor_types import SensorSourceMode

    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

        if mode == "rotation":
            main(SensorSourceMode.ROTATION_VECTOR)
        elif mode == "dual":
            main(SensorSourceMode.ACCELEROMETER_MAGNETOMETER)
        elif mode == "calibrate":
            main(SensorSourceMode.ROTATION_VECTOR, calibrate=True)
        else:
            print(f"Mode '{mode}' not recognized")
            print("Available modes: rotation, dual, calibrate")
            sys.exit(1)
    else:
        main()
