from __future__ import annotations

import numpy as np

CENTERING_MODES = ("legacy", "centered")


def pixel_uv(x, size: int, centering: str = "legacy"):
    """
    Pixel index -> sampler coordinate around (-1, 1).

    "legacy":   u = 2 (x + 0.5) / (size - 1) - 1   (last pixel lands slightly past +1)
    "centered": u = 2 (x + 0.5) / size - 1         (mirror-symmetric about the centre)
    """
    x = np.asarray(x, dtype=np.float64)
    if centering == "legacy":
        if size < 2:
            raise ValueError(f"Image dimension must be >= 2 for legacy centering, got {size}")
        return 2.0 * (x + 0.5) / float(size - 1) - 1.0
    if centering == "centered":
        if size < 1:
            raise ValueError(f"Image dimension must be >= 1, got {size}")
        return 2.0 * (x + 0.5) / float(size) - 1.0
    raise ValueError(f"centering must be one of {CENTERING_MODES}, got {centering!r}")


def uv_to_direction(u, v) -> np.ndarray:
    """
    Hemispherical (fisheye-like) mapping of sampler coordinates to directions.

      z2 = u^2 + v^2, phi = atan2(v, u), theta = acos(1 - z2)

    1 - z2 is clamped to [-1, 1]: corner pixels with z2 > 2 map straight down
    instead of producing NaN. Every z2 > 1 is below the horizon either way.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    z2 = u * u + v * v
    phi = np.arctan2(v, u)
    theta = np.arccos(np.clip(1.0 - z2, -1.0, 1.0))
    st = np.sin(theta)
    return np.stack([st * np.cos(phi), st * np.sin(phi), np.cos(theta)], axis=-1)


def validate_dimensions(width: int, height: int, centering: str = "legacy") -> None:
    """Raise ValueError for a sampling domain the pixel mapping cannot handle."""
    pixel_uv(0, int(width), centering)
    pixel_uv(0, int(height), centering)


def region_directions(
    width: int,
    height: int,
    x0: int,
    y0: int,
    region_width: int,
    region_height: int,
    centering: str = "legacy",
) -> np.ndarray:
    """
    Directions for pixels x in [x0, x0+region_width), y in [y0, y0+region_height)
    of a width x height sampling domain.

    Returns (region_width * region_height, 3), x outer / y inner (y varies fastest).
    """
    if region_width < 0 or region_height < 0:
        raise ValueError("Region size must be non-negative")
    xs = np.arange(x0, x0 + region_width)
    ys = np.arange(y0, y0 + region_height)
    ii, jj = np.meshgrid(xs, ys, indexing="ij")
    u = pixel_uv(ii.ravel(), width, centering)
    v = pixel_uv(jj.ravel(), height, centering)
    return uv_to_direction(u, v)


def frame_directions(width: int, height: int, centering: str = "legacy") -> np.ndarray:
    return region_directions(width, height, 0, 0, width, height, centering)
