"""Tests for circular arithmetic helpers."""

from __future__ import annotations

import pytest

from compass.geometry.angle_math import (
    circular_mean,
    circular_std_dev,
    normalize_degrees,
    shortest_delta,
)

ANGLES = [-725.5, -360.0, -180.0, -0.25, 0.0, 0.5, 90.0, 179.9, 180.0, 270.0, 359.99, 360.0, 1080.75]


def circular_close(a: float, b: float, tol: float = 1e-9) -> bool:
    return abs(shortest_delta(a, b)) < tol


@pytest.mark.parametrize("angle", ANGLES)
def test_normalize_is_idempotent_and_in_range(angle: float) -> None:
    once = normalize_degrees(angle)
    assert 0.0 <= once < 360.0
    assert normalize_degrees(once) == once


def test_normalize_folds_negative_values_upward() -> None:
    assert normalize_degrees(-30.0) == pytest.approx(330.0)
    assert normalize_degrees(720.0) == 0.0
    assert normalize_degrees(-1e-15) == 0.0


def test_shortest_delta_crosses_north() -> None:
    assert shortest_delta(350.0, 10.0) == pytest.approx(20.0)
    assert shortest_delta(10.0, 350.0) == pytest.approx(-20.0)


def test_shortest_delta_half_turn_is_positive_both_ways() -> None:
    assert shortest_delta(0.0, 180.0) == 180.0
    assert shortest_delta(180.0, 0.0) == 180.0
    assert shortest_delta(90.0, 270.0) == 180.0


@pytest.mark.parametrize("a", ANGLES)
@pytest.mark.parametrize("b", [0.0, 33.3, 181.0, 359.5, -45.0])
def test_shortest_delta_properties(a: float, b: float) -> None:
    forward = shortest_delta(a, b)
    assert -180.0 < forward <= 180.0
    if abs(forward) != 180.0:
        assert shortest_delta(b, a) == pytest.approx(-forward)
    assert circular_close(normalize_degrees(a + forward), normalize_degrees(b))


@pytest.mark.parametrize("angle", ANGLES)
def test_circular_mean_of_single_sample(angle: float) -> None:
    assert circular_close(circular_mean([angle]), normalize_degrees(angle))


def test_circular_mean_symmetric_around_north() -> None:
    mean = circular_mean([0.0, 10.0, 350.0])
    assert mean is not None
    assert circular_close(mean, 0.0)


def test_circular_mean_empty_is_none_not_zero() -> None:
    assert circular_mean([]) is None


def test_circular_std_dev_of_constant_samples_is_zero() -> None:
    samples = [45.0] * 16
    assert circular_std_dev(samples, circular_mean(samples)) == pytest.approx(0.0, abs=1e-9)


def test_circular_std_dev_is_rms_of_shortest_deltas() -> None:
    samples = [0.0, 40.0] * 8
    mean = circular_mean(samples)
    assert mean == pytest.approx(20.0)
    assert circular_std_dev(samples, mean) == pytest.approx(20.0)


def test_circular_std_dev_wraps_around_north() -> None:
    assert circular_std_dev([355.0, 5.0], 0.0) == pytest.approx(5.0)


def test_circular_std_dev_undefined_inputs() -> None:
    assert circular_std_dev([], 10.0) is None
    assert circular_std_dev([10.0], None) is None
