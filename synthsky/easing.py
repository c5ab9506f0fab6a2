from __future__ import annotations

from typing import Callable, Dict

import numpy as np

# ease(t, weight): normalised linear position t in [0, 1] -> arc-length fraction in [0, 1].
# Every scheme is monotonic with ease(0) = 0 and ease(1) = 1.
Easing = Callable[[np.ndarray, float], np.ndarray]


def linear(t, weight: float = 1.0):
    return np.asarray(t, dtype=np.float64)


def smoothstep(t, weight: float = 1.0):
    """Blend of identity and 3t^2 - 2t^3; weight in [0, 1] (1 = full smoothstep)."""
    t = np.asarray(t, dtype=np.float64)
    w = float(np.clip(weight, 0.0, 1.0))
    s = t * t * (3.0 - 2.0 * t)
    return (1.0 - w) * t + w * s


def quadratic(t, weight: float = 1.0):
    """t^(1+weight): samples bunch up near the ray origin where density is highest."""
    t = np.asarray(t, dtype=np.float64)
    return np.power(t, 1.0 + max(float(weight), 0.0))


EASINGS: Dict[str, Easing] = {
    "linear": linear,
    "smoothstep": smoothstep,
    "quadratic": quadratic,
}


def get_easing(name: str) -> Easing:
    key = str(name).strip().lower()
    if key not in EASINGS:
        raise ValueError(f"Unknown easing {name!r}; choose one of {', '.join(sorted(EASINGS))}")
    return EASINGS[key]


def march_fractions(n: int, ease: Easing, weight: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Sample positions for an n-step march: k = 1..n sits at ease(k/n).

    Returns (fractions, step_fractions), both (n,), where step_fractions[k]
    is the arc-length fraction covered since the previous sample.
    """
    if n < 1:
        raise ValueError(f"Sample count must be >= 1, got {n}")
    t = np.arange(0, n + 1, dtype=np.float64) / float(n)
    s = np.asarray(ease(t, weight), dtype=np.float64)
    return s[1:], np.diff(s)
