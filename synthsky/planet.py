from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .intersect import ray_sphere_hits, ray_sphere_intersect
from .polar import SphericalCoordinate, sphere_to_vec

PLANET_RADIUS = 6370.0
RAYLEIGH_SCALE_HEIGHT = 8000.0
MIE_SCALE_HEIGHT = 1500.0

# Eastern time zone meridian, used only for local-time offsets.
DEFAULT_STANDARD_MERIDIAN_DEG = -75.0


@dataclass(frozen=True)
class PlanetGeometry:
    """
    Fixed-radius planet plus a concentric outer atmosphere shell.

    The planet centre is the frame origin. The observer stands on the surface
    at `position()`; the shell (radius = planet radius + Rayleigh scale height)
    bounds every ray march. The planet and shell are never rotated: all
    rotations are applied to the sun instead.

    Instances are immutable, so one geometry can be shared by any number of
    pixel computations at once.
    """
    latitude: float                      # radians
    longitude: float                     # radians
    surface: SphericalCoordinate         # radius = planet radius
    outer_shell: SphericalCoordinate     # radius = planet radius + HR
    standard_meridian: float             # radians
    domain_offset: tuple[float, float]   # (azimuth, polar) half extents, radians

    @staticmethod
    def create(
        lat_deg: float = 65.0,
        lon_deg: float = 0.0,
        radius: float = PLANET_RADIUS,
        shell_height: float = RAYLEIGH_SCALE_HEIGHT,
        standard_meridian_deg: float = DEFAULT_STANDARD_MERIDIAN_DEG,
    ) -> "PlanetGeometry":
        if radius <= 0.0:
            raise ValueError(f"Planet radius must be positive, got {radius}")
        if shell_height <= 0.0:
            raise ValueError(f"Atmosphere shell height must be positive, got {shell_height}")
        return PlanetGeometry(
            latitude=float(np.deg2rad(lat_deg)),
            longitude=float(np.deg2rad(lon_deg)),
            surface=SphericalCoordinate(float(radius)),
            outer_shell=SphericalCoordinate(float(radius + shell_height)),
            standard_meridian=float(np.deg2rad(standard_meridian_deg)),
            domain_offset=_polar_sampler_domain(),
        )

    @property
    def radius(self) -> float:
        return self.surface.radius

    @property
    def shell_radius(self) -> float:
        return self.outer_shell.radius

    @property
    def center(self) -> np.ndarray:
        return np.zeros(3, dtype=np.float64)

    def position(self) -> np.ndarray:
        """Cartesian observer point on the surface (ray-march origin)."""
        return sphere_to_vec(self.surface)

    def intersect_outer_shell(self, origin: np.ndarray, direction: np.ndarray) -> list[float]:
        return ray_sphere_hits(origin, direction, self.center, self.shell_radius)

    def intersect_outer_shell_many(self, origins: np.ndarray, dirs: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Batched exit distances: (hit_mask, t) per ray, t NaN on a miss."""
        return ray_sphere_intersect(origins, dirs, self.center, self.shell_radius)

    def sample_depth(self, point: np.ndarray) -> np.ndarray | float:
        """
        Height proxy for exponential density falloff.

        `point` is an offset from the observer; its up-axis (z) component is
        used directly instead of true altitude above the sphere.
        """
        p = np.asarray(point, dtype=np.float64)
        return p[..., 2]

    def sampling_domain_half_extent(self) -> tuple[float, float]:
        return self.domain_offset

    def sample_point(self, uv: tuple[float, float]) -> np.ndarray:
        """
        Map clamped (u, v) in [-1, 1] to the vector from the observer to a
        point on the outer shell, offsetting the shell angles by uv * domain_offset.
        """
        u = float(np.clip(uv[0], -1.0, 1.0))
        v = float(np.clip(uv[1], -1.0, 1.0))
        shell = self.outer_shell.with_azimuth_added(self.surface.azimuth + u * self.domain_offset[0])
        shell = shell.with_polar_added(self.surface.polar + v * self.domain_offset[1])
        return sphere_to_vec(shell) - self.position()


def _polar_sampler_domain() -> tuple[float, float]:
    # angle at which the surface tangent and the tangent to the shell rim are parallel
    return (np.pi / 2.0, np.pi / 2.0)
