"""
Two-step "hold steady" calibration for the compass heading.

The user presses the calibration button once to get instructions, performs
the motion, then presses again to confirm. A short collection window then
samples the filtered heading; if the samples are stable the heading filter
is reseeded to their mean, otherwise the user is asked to try again.

States:
- IDLE: normal operation, button reads "Calibrate"
- AWAITING_CONFIRMATION: instructions shown, button reads "Finish calibration"
- COLLECTING: button disabled while samples are gathered

The window is closed by incoming samples (tick), not by a timer, so no
result is produced while the sensors are silent.

Usage:
    session = CalibrationSession()
    session.subscribe(ui.on_calibration_event)
    session.press_button(now_ms)              # instructions
    session.press_button(now_ms)              # start collecting
    result = session.tick(heading, now_ms)    # on every filtered sample
    if result is not None and result.accepted:
        heading_filter.reseed(result.mean)
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from compass.geometry.angle_math import circular_mean, circular_std_dev
from utils.config_sections import CalibrationConfig, load_calibration_config

log = logging.getLogger("CalibrationSession")


class CalibrationPhase(Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COLLECTING = "collecting"


class Prompt(Enum):
    NONE = "none"
    INSTRUCTION = "instruction"
    HOLD_STEADY = "hold_steady"


class ButtonLabel(Enum):
    CALIBRATE = "calibrate"
    FINISH_CALIBRATION = "finish_calibration"


class CalibrationEventKind(Enum):
    PROMPT_INSTRUCTION = "prompt_instruction"
    PROMPT_HOLD_STEADY = "prompt_hold_steady"
    COMPLETED = "completed"
    UNSTABLE_RETRY = "unstable_retry"


@dataclass(frozen=True)
class ButtonState:
    prompt: Prompt
    button_enabled: bool
    button_label: ButtonLabel


@dataclass(frozen=True)
class CalibrationResult:
    accepted: bool
    mean: Optional[float]
    std_dev: Optional[float]
    sample_count: int


@dataclass(frozen=True)
class CalibrationEvent:
    """State transition pushed to subscribers (the UI renders from these)."""

    kind: CalibrationEventKind
    phase: CalibrationPhase
    button: ButtonState
    result: Optional[CalibrationResult] = None


CalibrationListener = Callable[[CalibrationEvent], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class CalibrationSession:
    """State machine for the user-triggered calibration routine."""

    def __init__(self, config: Optional[CalibrationConfig] = None) -> None:
        self.config = config or load_calibration_config()
        self.phase = CalibrationPhase.IDLE
        self.collect_start_ms = 0
        self.samples: List[float] = []
        self.attempts = 0
        self._listeners: List[CalibrationListener] = []

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def is_calibrating(self) -> bool:
        return self.phase is not CalibrationPhase.IDLE

    @property
    def is_collecting(self) -> bool:
        return self.phase is CalibrationPhase.COLLECTING

    def button_state(self, prompt: Prompt = Prompt.NONE) -> ButtonState:
        label = ButtonLabel.FINISH_CALIBRATION if self.is_calibrating else ButtonLabel.CALIBRATE
        return ButtonState(
            prompt=prompt,
            button_enabled=not self.is_collecting,
            button_label=label,
        )

    def restore(self, is_calibrating: bool) -> None:
        """Restore the persisted flag; an interrupted collection is not resumed."""
        self.phase = CalibrationPhase.AWAITING_CONFIRMATION if is_calibrating else CalibrationPhase.IDLE
        self.samples.clear()

    # ------------------------------------------------------------------
    # listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: CalibrationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: CalibrationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: CalibrationEventKind, button: ButtonState, result: Optional[CalibrationResult] = None) -> None:
        event = CalibrationEvent(kind=kind, phase=self.phase, button=button, result=result)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as err:
                log.warning("Calibration listener failed on %s: %s", kind.value, err)

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def press_button(self, now_ms: Optional[int] = None) -> ButtonState:
        """
        Handle an activation of the calibration control.

        Args:
            now_ms: Timestamp on the same clock later passed to tick(); the
                collection window is measured between the two. Falls back to
                wall-clock time only when omitted.
        """
        if self.phase is CalibrationPhase.IDLE:
            self.phase = CalibrationPhase.AWAITING_CONFIRMATION
            state = self.button_state(Prompt.INSTRUCTION)
            log.info("Calibration started, waiting for confirmation")
            self._emit(CalibrationEventKind.PROMPT_INSTRUCTION, state)
            return state

        if self.phase is CalibrationPhase.AWAITING_CONFIRMATION:
            self.phase = CalibrationPhase.COLLECTING
            self.collect_start_ms = _now_ms() if now_ms is None else now_ms
            self.samples.clear()
            self.attempts += 1
            state = self.button_state(Prompt.HOLD_STEADY)
            log.info("Collecting calibration samples for %d ms", self.config.duration_ms)
            self._emit(CalibrationEventKind.PROMPT_HOLD_STEADY, state)
            return state

        # Button is disabled while collecting
        return self.button_state()

    def tick(self, displayed_heading: float, now_ms: int) -> Optional[CalibrationResult]:
        """
        Feed one filtered heading while collecting.

        Returns:
            CalibrationResult once the window has elapsed, otherwise None
        """
        if not self.is_collecting:
            return None

        self.samples.append(displayed_heading)
        if now_ms - self.collect_start_ms < self.config.duration_ms:
            return None

        return self._finish()

    def _finish(self) -> CalibrationResult:
        mean = circular_mean(self.samples)
        std_dev = circular_std_dev(self.samples, mean)
        accepted = mean is not None and std_dev is not None and std_dev <= self.config.max_std_dev_deg

        result = CalibrationResult(
            accepted=accepted,
            mean=mean,
            std_dev=std_dev,
            sample_count=len(self.samples),
        )
        self.samples.clear()

        if accepted:
            self.phase = CalibrationPhase.IDLE
            log.info("Calibration completed: mean=%.1f° std=%.2f° (%d samples)",
                     mean, std_dev, result.sample_count)
            self._emit(CalibrationEventKind.COMPLETED, self.button_state(), result)
        else:
            self.phase = CalibrationPhase.AWAITING_CONFIRMATION
            log.info("Calibration unstable (std=%s, %d samples), retry requested",
                     "n/a" if std_dev is None else f"{std_dev:.2f}°", result.sample_count)
            self._emit(CalibrationEventKind.UNSTABLE_RETRY, self.button_state(), result)

        return result
