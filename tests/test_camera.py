"""Tests for the pixel -> view direction mapping."""

from __future__ import annotations

import numpy as np
import pytest

from synthsky.camera import frame_directions, pixel_uv, region_directions, uv_to_direction, validate_dimensions


def test_first_pixel_of_legacy_512_is_below_horizon() -> None:
    u = float(pixel_uv(0, 512))
    assert u == pytest.approx(-0.998043, abs=1e-6)
    d = uv_to_direction(u, u)
    assert float(u * u + u * u) == pytest.approx(1.99218, abs=1e-5)
    assert d[2] < 0.0


def test_far_corner_is_clamped_not_nan() -> None:
    u = float(pixel_uv(511, 512))
    assert u > 1.0
    d = uv_to_direction(u, u)
    assert np.all(np.isfinite(d))
    assert float(d[2]) == pytest.approx(-1.0)


def test_centre_maps_to_zenith() -> None:
    np.testing.assert_allclose(uv_to_direction(0.0, 0.0), [0.0, 0.0, 1.0], atol=1e-15)
    assert float(pixel_uv(2, 5, "centered")) == pytest.approx(0.0)


def test_unit_disc_edge_is_horizon() -> None:
    d = uv_to_direction(1.0, 0.0)
    np.testing.assert_allclose(d, [1.0, 0.0, 0.0], atol=1e-12)


def test_directions_are_unit_length() -> None:
    dirs = frame_directions(16, 16)
    np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, rtol=1e-12)


def test_centered_mapping_is_mirror_symmetric() -> None:
    w = h = 8
    dirs = frame_directions(w, h, "centered").reshape(w, h, 3)
    for x in range(w):
        for y in range(h):
            a = dirs[x, y]
            b = dirs[w - 1 - x, h - 1 - y]
            np.testing.assert_allclose(b, [-a[0], -a[1], a[2]], atol=1e-12)


def test_legacy_mapping_is_offset() -> None:
    w = 9
    x = np.arange(w)
    np.testing.assert_allclose(pixel_uv(x, w) + pixel_uv(w - 1 - x, w), 2.0 / (w - 1))


def test_region_is_slice_of_frame() -> None:
    full = frame_directions(4, 4)
    region = region_directions(4, 4, 1, 2, 2, 2)
    expected = np.stack([full[x * 4 + y] for x in (1, 2) for y in (2, 3)])
    np.testing.assert_allclose(region, expected, rtol=0.0, atol=1e-15)


def test_legacy_needs_two_pixels() -> None:
    with pytest.raises(ValueError):
        pixel_uv(0, 1)
    with pytest.raises(ValueError):
        validate_dimensions(1, 16)
    validate_dimensions(1, 1, "centered")


def test_unknown_centering() -> None:
    with pytest.raises(ValueError):
        pixel_uv(0, 8, "corner")


def test_negative_region_size() -> None:
    with pytest.raises(ValueError):
        region_directions(4, 4, 0, 0, -1, 2)
