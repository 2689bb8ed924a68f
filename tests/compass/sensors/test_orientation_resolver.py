"""Tests for OrientationResolver azimuth extraction and display remapping."""

from __future__ import annotations

import math

import pytest

from compass.geometry.angle_math import normalize_degrees, shortest_delta
from compass.sensors.mock_sensor_source import MockSensorSource
from compass.sensors.orientation_resolver import OrientationResolver
from compass.sensors.sensor_types import (
    AccelMagSample,
    DisplayRotation,
    RotationVectorSample,
    SensorSourceMode,
)


@pytest.fixture()
def resolver() -> OrientationResolver:
    return OrientationResolver()


@pytest.fixture()
def source() -> MockSensorSource:
    return MockSensorSource(SensorSourceMode.ROTATION_VECTOR, heading_deg=0.0, noise_deg=0.0)


def assert_heading(actual, expected: float) -> None:
    assert actual is not None
    assert 0.0 <= actual < 360.0
    assert abs(shortest_delta(expected, actual)) < 1e-6


@pytest.mark.parametrize("heading", [0.0, 45.0, 90.0, 180.0, 270.0, 359.0])
def test_rotation_vector_heading(resolver: OrientationResolver, source: MockSensorSource, heading: float) -> None:
    sample = RotationVectorSample(source.rotation_vector(heading))
    assert_heading(resolver.resolve(sample, DisplayRotation.ROTATION_0), heading)


@pytest.mark.parametrize("heading", [0.0, 30.0, 135.0, 250.0])
def test_accel_mag_heading(resolver: OrientationResolver, source: MockSensorSource, heading: float) -> None:
    sample = AccelMagSample((0.0, 0.0, 9.81), source.geomagnetic(heading))
    assert_heading(resolver.resolve(sample, DisplayRotation.ROTATION_0), heading)


@pytest.mark.parametrize("rotation", list(DisplayRotation))
def test_display_rotation_shifts_heading(
    resolver: OrientationResolver, source: MockSensorSource, rotation: DisplayRotation
) -> None:
    sample = RotationVectorSample(source.rotation_vector(30.0))
    expected = normalize_degrees(30.0 + int(rotation))
    assert_heading(resolver.resolve(sample, rotation), expected)


def test_display_rotation_accepts_plain_int(resolver: OrientationResolver, source: MockSensorSource) -> None:
    sample = RotationVectorSample(source.rotation_vector(10.0))
    assert_heading(resolver.resolve(sample, 180), 190.0)


def test_three_component_rotation_vector(resolver: OrientationResolver) -> None:
    half = -math.radians(90.0) / 2.0
    sample = RotationVectorSample((0.0, 0.0, math.sin(half)))
    assert_heading(resolver.resolve(sample, DisplayRotation.ROTATION_0), 90.0)


def test_degenerate_fusion_yields_none(resolver: OrientationResolver) -> None:
    free_fall = AccelMagSample((0.0, 0.0, 0.0), (0.0, 20.0, -40.0))
    vertical_field = AccelMagSample((0.0, 0.0, 9.81), (0.0, 0.0, -40.0))

    assert resolver.resolve(free_fall, DisplayRotation.ROTATION_0) is None
    assert resolver.resolve(vertical_field, DisplayRotation.ROTATION_90) is None


def test_unknown_sample_type_raises(resolver: OrientationResolver) -> None:
    with pytest.raises(TypeError):
        resolver.resolve((0.0, 0.0, 0.0), DisplayRotation.ROTATION_0)


def test_invalid_display_rotation_raises(resolver: OrientationResolver) -> None:
    sample = RotationVectorSample((0.0, 0.0, 0.0, 1.0))
    with pytest.raises(ValueError):
        resolver.resolve(sample, 45)


def test_short_sensor_vectors_are_rejected() -> None:
    with pytest.raises(ValueError):
        RotationVectorSample((0.0, 1.0))
    with pytest.raises(ValueError):
        AccelMagSample((0.0, 9.81), (0.0, 20.0, -40.0))
