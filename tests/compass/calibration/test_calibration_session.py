"""Tests for the calibration state machine."""

from __future__ import annotations

from typing import List

import pytest

from compass.calibration.calibration_session import (
    ButtonLabel,
    CalibrationEvent,
    CalibrationEventKind,
    CalibrationPhase,
    CalibrationSession,
    Prompt,
)
from utils.config_sections import CalibrationConfig

START_MS = 1000


@pytest.fixture()
def session() -> CalibrationSession:
    return CalibrationSession(CalibrationConfig(duration_ms=1500, max_std_dev_deg=5.0))


@pytest.fixture()
def collecting(session: CalibrationSession) -> CalibrationSession:
    session.press_button(START_MS)
    session.press_button(START_MS)
    return session


def feed(session: CalibrationSession, headings: List[float], step_ms: int = 100):
    """Feed headings one per step; return every tick result."""
    return [session.tick(h, START_MS + i * step_ms) for i, h in enumerate(headings)]


def test_initial_state(session: CalibrationSession) -> None:
    state = session.button_state()

    assert session.phase is CalibrationPhase.IDLE
    assert not session.is_calibrating
    assert state.button_label is ButtonLabel.CALIBRATE
    assert state.button_enabled


def test_first_press_shows_instructions(session: CalibrationSession) -> None:
    state = session.press_button(START_MS)

    assert session.phase is CalibrationPhase.AWAITING_CONFIRMATION
    assert state.prompt is Prompt.INSTRUCTION
    assert state.button_label is ButtonLabel.FINISH_CALIBRATION
    assert state.button_enabled


def test_second_press_starts_collecting(session: CalibrationSession) -> None:
    session.press_button(START_MS)
    state = session.press_button(START_MS + 5)

    assert session.phase is CalibrationPhase.COLLECTING
    assert session.collect_start_ms == START_MS + 5
    assert session.samples == []
    assert state.prompt is Prompt.HOLD_STEADY
    assert not state.button_enabled


def test_press_while_collecting_is_ignored(collecting: CalibrationSession) -> None:
    state = collecting.press_button(START_MS + 200)

    assert collecting.phase is CalibrationPhase.COLLECTING
    assert collecting.collect_start_ms == START_MS
    assert state.prompt is Prompt.NONE
    assert not state.button_enabled


def test_press_without_timestamp_uses_clock(session: CalibrationSession) -> None:
    session.press_button()
    session.press_button()
    assert session.collect_start_ms > 0


def test_stable_samples_are_accepted(collecting: CalibrationSession) -> None:
    results = feed(collecting, [45.0] * 16)

    assert all(r is None for r in results[:-1])
    result = results[-1]
    assert result is not None
    assert result.accepted
    assert result.mean == pytest.approx(45.0)
    assert result.std_dev == pytest.approx(0.0, abs=1e-9)
    assert result.sample_count == 16

    assert collecting.phase is CalibrationPhase.IDLE
    assert collecting.samples == []
    state = collecting.button_state()
    assert state.button_label is ButtonLabel.CALIBRATE
    assert state.button_enabled


def test_unstable_samples_are_rejected(collecting: CalibrationSession) -> None:
    result = feed(collecting, [0.0, 40.0] * 8)[-1]

    assert result is not None
    assert not result.accepted
    assert result.std_dev > 5.0

    assert collecting.phase is CalibrationPhase.AWAITING_CONFIRMATION
    assert collecting.samples == []
    state = collecting.button_state()
    assert state.button_label is ButtonLabel.FINISH_CALIBRATION
    assert state.button_enabled


def test_retry_after_rejection(collecting: CalibrationSession) -> None:
    feed(collecting, [0.0, 40.0] * 8)

    collecting.press_button(5000)
    assert collecting.phase is CalibrationPhase.COLLECTING

    results = [collecting.tick(90.0, 5000 + i * 100) for i in range(16)]
    assert results[-1].accepted
    assert collecting.attempts == 2


def test_window_closes_only_on_incoming_samples(collecting: CalibrationSession) -> None:
    assert collecting.tick(45.0, START_MS) is None
    # A long silence produces nothing until the next sample arrives
    result = collecting.tick(45.0, START_MS + 60_000)
    assert result is not None and result.sample_count == 2


def test_empty_window_is_rejected(collecting: CalibrationSession) -> None:
    result = collecting._finish()

    assert not result.accepted
    assert result.mean is None
    assert result.std_dev is None
    assert collecting.phase is CalibrationPhase.AWAITING_CONFIRMATION


def test_tick_outside_collection_is_noop(session: CalibrationSession) -> None:
    assert session.tick(10.0, START_MS) is None
    session.press_button(START_MS)
    assert session.tick(10.0, START_MS + 5000) is None
    assert session.samples == []


def test_events_are_emitted_in_order(session: CalibrationSession) -> None:
    received: List[CalibrationEvent] = []
    session.subscribe(received.append)

    session.press_button(START_MS)
    session.press_button(START_MS)
    feed(session, [45.0] * 16)

    assert [e.kind for e in received] == [
        CalibrationEventKind.PROMPT_INSTRUCTION,
        CalibrationEventKind.PROMPT_HOLD_STEADY,
        CalibrationEventKind.COMPLETED,
    ]
    assert received[-1].result.accepted
    assert received[-1].phase is CalibrationPhase.IDLE


def test_rejection_event(collecting: CalibrationSession) -> None:
    received: List[CalibrationEvent] = []
    collecting.subscribe(received.append)

    feed(collecting, [0.0, 40.0] * 8)

    assert [e.kind for e in received] == [CalibrationEventKind.UNSTABLE_RETRY]
    assert received[0].button.button_label is ButtonLabel.FINISH_CALIBRATION


def test_failing_listener_does_not_break_session(session: CalibrationSession) -> None:
    def broken(event: CalibrationEvent) -> None:
        raise RuntimeError("ui gone")

    received: List[CalibrationEvent] = []
    session.subscribe(broken)
    session.subscribe(received.append)

    session.press_button(START_MS)

    assert session.phase is CalibrationPhase.AWAITING_CONFIRMATION
    assert len(received) == 1


def test_unsubscribe(session: CalibrationSession) -> None:
    received: List[CalibrationEvent] = []
    session.subscribe(received.append)
    session.unsubscribe(received.append)

    session.press_button(START_MS)

    assert received == []


def test_restore(session: CalibrationSession) -> None:
    session.restore(True)
    assert session.phase is CalibrationPhase.AWAITING_CONFIRMATION

    session.restore(False)
    assert session.phase is CalibrationPhase.IDLE
