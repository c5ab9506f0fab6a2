"""Tests for the simplified solar position model."""

from __future__ import annotations

import numpy as np
import pytest

from synthsky.sun import AU_KM, AXIAL_TILT_DEG, LightSource, SolarPosition, SunSnapshot


def test_uninitialised_sun_has_no_direction() -> None:
    sun = SolarPosition()
    assert sun.direction is None
    assert not sun.is_positioned
    with pytest.raises(RuntimeError):
        sun.advance_position(1.0)
    with pytest.raises(RuntimeError):
        sun.snapshot()


def test_init_position_angles() -> None:
    sun = SolarPosition()
    d = sun.init_position(1.5, 45.0)
    assert sun.coord.azimuth == pytest.approx(0.75 * np.pi)
    assert sun.coord.polar == pytest.approx(0.75 * np.pi)
    assert sun.day == 1.5
    np.testing.assert_allclose(d, [-0.5, 0.5, -np.sqrt(0.5)], atol=1e-12)
    np.testing.assert_allclose(sun.light.direction, d)


def test_zero_inclination_puts_sun_at_nadir() -> None:
    sun = SolarPosition()
    np.testing.assert_allclose(sun.init_position(0.0, 0.0), [0.0, 0.0, -1.0], atol=1e-12)


def test_advance_rotates_polar_angle_only() -> None:
    sun = SolarPosition()
    sun.init_position(0.0, 180.0)  # polar 0: zenith
    np.testing.assert_allclose(sun.direction, [0.0, 0.0, 1.0], atol=1e-12)
    az = sun.coord.azimuth
    d = sun.advance_position(90.0)
    np.testing.assert_allclose(d, [1.0, 0.0, 0.0], atol=1e-12)
    assert sun.coord.azimuth == az
    np.testing.assert_allclose(sun.light.direction, d)


def test_advance_zero_is_noop() -> None:
    sun = SolarPosition.default()
    before = sun.direction.copy()
    np.testing.assert_allclose(sun.advance_position(0.0), before, atol=1e-15)


@pytest.mark.parametrize("k", [1, 2, 5])
def test_full_turns_return_to_start(k: int) -> None:
    sun = SolarPosition.default()
    polar0 = sun.coord.polar
    before = sun.direction.copy()
    sun.advance_position(360.0 * k)
    assert sun.coord.polar == pytest.approx(polar0 + 2.0 * np.pi * k)
    np.testing.assert_allclose(sun.direction, before, atol=1e-9)


def test_radius_never_changes() -> None:
    sun = SolarPosition()
    assert sun.coord.radius == -AU_KM
    sun.init_position(0.3, 10.0)
    sun.advance_position(123.0)
    sun.advance_position(-7.0)
    assert sun.coord.radius == -AU_KM


def test_direction_is_unit_length() -> None:
    sun = SolarPosition.default()
    for _ in range(10):
        d = sun.advance_position(17.0)
        assert np.linalg.norm(d) == pytest.approx(1.0)


def test_default_driver_sequence_lands_sun_above_horizon() -> None:
    """Warm-up of 36 steps of 7 degrees plus one frame step leaves the sun 34 degrees from zenith."""
    sun = SolarPosition.default()
    sun.advance_position(36 * 7.0)
    sun.advance_position(7.0)
    assert sun.direction[2] == pytest.approx(np.cos(np.deg2rad(34.0)))


def test_axial_tilt_is_named_but_not_applied() -> None:
    assert AXIAL_TILT_DEG == 23.5
    sun = SolarPosition()
    np.testing.assert_allclose(sun.init_position(0.0, 180.0), [0.0, 0.0, 1.0], atol=1e-12)


def test_snapshot_carries_light_source() -> None:
    sun = SolarPosition.default(LightSource(rgb=(1.0, 0.5, 0.25), flux=3.0))
    snap = sun.snapshot()
    assert snap.rgb == (1.0, 0.5, 0.25)
    assert snap.flux == 3.0
    np.testing.assert_allclose(snap.vec, sun.direction)
    sun.advance_position(30.0)
    assert not np.allclose(snap.vec, sun.direction)


def test_snapshot_from_direction_normalises() -> None:
    snap = SunSnapshot.from_direction((0.0, 0.0, 2.0))
    assert snap.direction == (0.0, 0.0, 1.0)
    with pytest.raises(ValueError):
        SunSnapshot.from_direction((0.0, 0.0, 0.0))
