from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np


@dataclass(frozen=True)
class SphericalCoordinate:
    """
    (radius, azimuth, polar) triple, angles in radians.

    Rotations return a new coordinate and never touch the radius:
    a body keeps its distance for the whole session, only the two
    angles evolve.
    """
    radius: float
    azimuth: float = 0.0
    polar: float = 0.0

    def with_azimuth_added(self, delta: float) -> "SphericalCoordinate":
        return replace(self, azimuth=float(self.azimuth + delta))

    def with_polar_added(self, delta: float) -> "SphericalCoordinate":
        return replace(self, polar=float(self.polar + delta))

    def unit(self) -> np.ndarray:
        """Unit direction of the two angles (radius and its sign ignored)."""
        return sphere_to_vec(replace(self, radius=1.0))


def sphere_to_vec(coord: SphericalCoordinate) -> np.ndarray:
    """
    Spherical -> Cartesian.

      x = r sin(polar) cos(azimuth)
      y = r sin(polar) sin(azimuth)
      z = r cos(polar)

    The polar angle is measured from +Z (the local "up" axis).
    """
    r = float(coord.radius)
    if r == 0.0:
        raise ValueError("Degenerate spherical coordinate: radius is exactly zero")
    sp = np.sin(coord.polar)
    return np.array(
        [r * sp * np.cos(coord.azimuth), r * sp * np.sin(coord.azimuth), r * np.cos(coord.polar)],
        dtype=np.float64,
    )


def vec_to_sphere(v: np.ndarray) -> SphericalCoordinate:
    x, y, z = (float(c) for c in np.asarray(v, dtype=np.float64))
    r = float(np.sqrt(x * x + y * y + z * z))
    if r == 0.0:
        raise ValueError("Cannot convert the zero vector to spherical coordinates")
    polar = float(np.arccos(np.clip(z / r, -1.0, 1.0)))
    azimuth = float(np.arctan2(y, x))
    return SphericalCoordinate(radius=r, azimuth=azimuth, polar=polar)
