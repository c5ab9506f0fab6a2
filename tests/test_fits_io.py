"""Tests for the FITS radiance cube writer."""

from __future__ import annotations

import numpy as np
import pytest
from astropy.io import fits

from synthsky.fits_io import SCALED_MAX, stretch_radiance, write_radiance_fits
from synthsky.texture import PixelBuffer


def test_stretch_puts_peak_on_scaled_max() -> None:
    st = stretch_radiance(np.array([[-1.0, 0.0], [1.0, 2.0]]))
    assert st.raw_min == -1.0
    assert st.raw_max == 2.0
    assert st.factor == pytest.approx(SCALED_MAX / 2.0)
    assert st.scaled.dtype == np.float32
    np.testing.assert_allclose(st.scaled, [[0.0, 0.0], [32767.5, 65535.0]])


def test_stretch_night_frame() -> None:
    st = stretch_radiance(np.zeros((3, 3)))
    assert st.factor == 0.0
    assert st.raw_max == 0.0
    assert not np.any(st.scaled)


def test_stretch_ignores_non_finite() -> None:
    st = stretch_radiance(np.array([[np.nan, 1.0], [np.inf, 4.0]]))
    assert st.raw_max == 4.0
    np.testing.assert_allclose(st.scaled, [[0.0, 16383.75], [0.0, 65535.0]])


def test_write_radiance_cube(tmp_path) -> None:
    w, h = 3, 2
    data = np.arange(w * h * 3, dtype=float).reshape(w * h, 3) / 10.0
    buf = PixelBuffer(w, h, data)
    out = tmp_path / "sub" / "sky_1.fits"
    write_radiance_fits(buf, out, {"FRAME": (1, "Frame index")})

    with fits.open(out) as hdul:
        hdr = hdul[0].header
        cube = hdul[0].data
        assert cube.shape == (4, h, w)
        assert hdr["NLAYERS"] == 4
        assert [hdr[f"LAY{i}"] for i in range(1, 5)] == ["SCALED", "RAD_R", "RAD_G", "RAD_B"]
        assert hdr["FRAME"] == 1
        assert hdr["SCLFAC"] > 0.0
        img = buf.to_image_array()
        np.testing.assert_allclose(cube[1], img[:, :, 0], rtol=1e-6)
        np.testing.assert_allclose(cube[3], img[:, :, 2], rtol=1e-6)
        assert float(cube[0].max()) == pytest.approx(65535.0)


def test_black_frame_has_no_raw_range(tmp_path) -> None:
    buf = PixelBuffer(2, 2, np.zeros((4, 3)))
    out = tmp_path / "black.fits"
    write_radiance_fits(buf, out, {})
    with fits.open(out) as hdul:
        hdr = hdul[0].header
        assert hdr["SCLFAC"] == 0.0
        assert hdr["RAWMAX"] == 0.0
