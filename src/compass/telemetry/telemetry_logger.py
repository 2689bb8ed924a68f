"""
Session telemetry for the compass heading core.

Records what the UI was told and how calibration attempts went, as JSONL
files inside one folder per session. Useful for replaying a field session
and tuning the calibration stability threshold.

Features:
- Thread-safe metric collection with locks
- JSONL format for streaming analytics
- Session-based organization with readable timestamps
- Summary statistics on finalize

Metric Types:
- DisplayUpdateMetric: readout value and needle rotation pushed to the UI
- CalibrationMetric: outcome and spread of each calibration window

Files (session_YYYY-MM-DD_HH-MM-SS/):
- display_updates.jsonl
- calibration.jsonl
- system.jsonl
- summary.json (after finalize_session)

Usage:
    from compass.telemetry.telemetry_logger import TelemetryLogger

    telemetry = TelemetryLogger(output_dir=Path("logs"))
    telemetry.log_display_update(update, raw_azimuth=12.3, timestamp_ms=now_ms)
    telemetry.log_calibration_result(result, timestamp_ms=now_ms)
    summary = telemetry.finalize_session()
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from compass.calibration.calibration_session import CalibrationResult
from compass.display.update_gate import DisplayUpdate

log = logging.getLogger("TelemetryLogger")


@dataclass
class DisplayUpdateMetric:
    """Display update pushed to the UI."""
    timestamp_ms: int
    heading_rounded: int
    visual_rotation: float
    raw_azimuth: Optional[float] = None


@dataclass
class CalibrationMetric:
    """Outcome of one calibration window."""
    timestamp_ms: int
    accepted: bool
    mean: Optional[float]
    std_dev: Optional[float]
    sample_count: int


class TelemetryLogger:
    """
    Thread-safe JSONL logger for compass sessions.
    - Display: readout and needle rotation
    - Calibration: accepted/rejected windows with spread
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize new telemetry session.

        Args:
            output_dir: Base directory for logs (default: logs/)
        """
        self._write_lock = threading.Lock()
        self._buffer_lock = threading.Lock()

        base_dir = Path(output_dir) if output_dir is not None else Path("logs")
        base_dir.mkdir(parents=True, exist_ok=True)

        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.session_dir = base_dir / f"session_{self.session_timestamp}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.display_log = self.session_dir / "display_updates.jsonl"
        self.calibration_log = self.session_dir / "calibration.jsonl"
        self.system_log = self.session_dir / "system.jsonl"

        # In-memory buffers (protected by _buffer_lock)
        self.display_buffer: List[DisplayUpdateMetric] = []
        self.calibration_buffer: List[CalibrationMetric] = []

        self._log_system_event("session_start", {"session": self.session_timestamp})
        log.info("Telemetry session %s in %s", self.session_timestamp, self.session_dir)

    def get_session_dir(self) -> Path:
        return self.session_dir

    # ------------------------------------------------------------------
    # Display updates
    # ------------------------------------------------------------------

    def log_display_update(
        self,
        update: DisplayUpdate,
        raw_azimuth: Optional[float] = None,
        timestamp_ms: Optional[int] = None,
    ) -> None:
        """
        Record a display update.

        Thread-safe: Can be called from any thread.
        """
        metric = DisplayUpdateMetric(
            timestamp_ms=int(time.time() * 1000) if timestamp_ms is None else timestamp_ms,
            heading_rounded=update.heading_rounded,
            visual_rotation=update.visual_rotation,
            raw_azimuth=raw_azimuth,
        )

        with self._buffer_lock:
            self.display_buffer.append(metric)

        self._write_jsonl(self.display_log, asdict(metric))

    # ------------------------------------------------------------------
    # Calibration
    # ------------------------------------------------------------------

    def log_calibration_result(self, result: CalibrationResult, timestamp_ms: Optional[int] = None) -> None:
        """
        Record the outcome of a calibration window.

        Thread-safe: Can be called from any thread.
        """
        metric = CalibrationMetric(
            timestamp_ms=int(time.time() * 1000) if timestamp_ms is None else timestamp_ms,
            accepted=result.accepted,
            mean=result.mean,
            std_dev=result.std_dev,
            sample_count=result.sample_count,
        )

        with self._buffer_lock:
            self.calibration_buffer.append(metric)

        self._write_jsonl(self.calibration_log, asdict(metric))

    # ------------------------------------------------------------------
    # System events
    # ------------------------------------------------------------------

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    def log_event(self, event_type: str, **kwargs: Any) -> None:
        """Record a free-form system event (sensor start/stop, mode changes)."""
        self._log_system_event(event_type, kwargs)

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    def finalize_session(self) -> Dict[str, Any]:
        """
        Finalize session and write summary.json.

        Returns:
            Dict with session statistics
        """
        with self._buffer_lock:
            display_copy = list(self.display_buffer)
            calibration_copy = list(self.calibration_buffer)

        accepted = [m for m in calibration_copy if m.accepted]
        spreads = [m.std_dev for m in calibration_copy if m.std_dev is not None]

        summary = {
            "session": self.session_timestamp,
            "duration_seconds": time.time() - self.session_start,
            "total_display_updates": len(display_copy),
            "calibration_attempts": len(calibration_copy),
            "calibration_accepted": len(accepted),
            "calibration_rejected": len(calibration_copy) - len(accepted),
            "avg_calibration_std_dev": sum(spreads) / len(spreads) if spreads else None,
            "last_heading": display_copy[-1].heading_rounded if display_copy else None,
        }

        self._log_system_event("session_end", summary)

        summary_path = self.session_dir / "summary.json"
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2)

        log.info("Telemetry session finalized: %s", summary_path)
        return summary

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        """
        Write JSON line thread-safely.

        Thread-safe: Uses lock for atomic writes.
        """
        try:
            line = json.dumps(data, ensure_ascii=True)
        except TypeError:
            line = json.dumps({"error": "serialization_failed", "repr": repr(data)})

        with self._write_lock:
            with open(path, 'a', encoding='utf-8') as f:
                f.write(line + "\n")
