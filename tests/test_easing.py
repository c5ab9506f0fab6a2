"""Tests for the sample-spacing (easing) schemes."""

from __future__ import annotations

import numpy as np
import pytest

from synthsky.easing import EASINGS, get_easing, linear, march_fractions, quadratic, smoothstep


@pytest.mark.parametrize("name", sorted(EASINGS))
@pytest.mark.parametrize("weight", [0.0, 0.5, 1.0])
def test_easings_are_monotonic_and_pinned(name: str, weight: float) -> None:
    ease = get_easing(name)
    t = np.linspace(0.0, 1.0, 101)
    s = ease(t, weight)
    assert float(s[0]) == 0.0
    assert float(s[-1]) == pytest.approx(1.0)
    assert np.all(np.diff(s) >= 0.0)


def test_smoothstep_values() -> None:
    assert float(smoothstep(0.5, 1.0)) == pytest.approx(0.5)
    assert float(smoothstep(0.25, 1.0)) == pytest.approx(0.15625)
    assert float(smoothstep(0.25, 0.0)) == pytest.approx(0.25)


def test_quadratic_concentrates_near_origin() -> None:
    assert float(quadratic(0.5, 1.0)) == pytest.approx(0.25)
    assert float(quadratic(0.5, 1.0)) < float(linear(0.5))


def test_unknown_easing() -> None:
    with pytest.raises(ValueError):
        get_easing("cubic-bezier")


def test_march_fractions_linear() -> None:
    frac, step = march_fractions(4, linear, 1.0)
    np.testing.assert_allclose(frac, [0.25, 0.5, 0.75, 1.0])
    np.testing.assert_allclose(step, [0.25, 0.25, 0.25, 0.25])


def test_march_steps_cover_whole_ray() -> None:
    frac, step = march_fractions(25, smoothstep, 1.0)
    assert frac.shape == (25,)
    assert float(np.sum(step)) == pytest.approx(1.0)
    assert float(frac[-1]) == pytest.approx(1.0)


def test_march_needs_a_sample() -> None:
    with pytest.raises(ValueError):
        march_fractions(0, linear, 1.0)
