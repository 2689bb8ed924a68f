"""Tests for the circular heading filter."""

from __future__ import annotations

import pytest

from compass.filtering.heading_filter import ALPHA, HeadingFilter


def test_alpha_is_fixed() -> None:
    assert ALPHA == 0.15


def test_first_update_seeds_unchanged() -> None:
    f = HeadingFilter()
    assert not f.is_initialized
    assert f.value is None

    assert f.update(123.4) == 123.4
    assert f.is_initialized


def test_update_moves_alpha_of_the_difference() -> None:
    f = HeadingFilter()
    f.update(10.0)

    assert f.update(20.0) == pytest.approx(11.5)


def test_update_takes_shortest_arc_across_north() -> None:
    f = HeadingFilter()
    f.update(350.0)

    assert f.update(10.0) == pytest.approx(353.0)

    f = HeadingFilter()
    f.update(10.0)
    assert f.update(350.0) == pytest.approx(7.0)


def test_repeated_target_converges_without_overshoot() -> None:
    f = HeadingFilter()
    f.update(10.0)

    previous = 10.0
    for _ in range(200):
        current = f.update(13.0)
        assert previous <= current <= 13.0
        previous = current

    assert previous == pytest.approx(13.0, abs=1e-6)


def test_reseed_bypasses_smoothing() -> None:
    f = HeadingFilter()
    f.update(10.0)

    f.reseed(370.0)
    assert f.value == pytest.approx(10.0)

    f.reseed(200.0)
    assert f.update(200.0) == pytest.approx(200.0)


def test_reset_returns_to_uninitialized() -> None:
    f = HeadingFilter()
    f.update(42.0)
    f.reset()

    assert f.value is None
    assert f.update(7.0) == 7.0


def test_seed_is_normalized() -> None:
    f = HeadingFilter()

    assert f.update(370.0) == pytest.approx(10.0)
    assert f.value == pytest.approx(10.0)

    f = HeadingFilter()
    assert f.update(-90.0) == pytest.approx(270.0)
