from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

from .polar import SphericalCoordinate

AU_KM = 150_000_000.0  # round figure; only the sign and the constancy matter here
AXIAL_TILT_DEG = 23.5  # named for reference; the sun model does not apply it

DEFAULT_DAY_FRACTION = 1.5
DEFAULT_INCLINATION_DEG = 45.0
DEFAULT_FLUX = 20.5


@dataclass(frozen=True)
class LightSource:
    rgb: tuple[float, float, float] = (1.0, 1.0, 1.0)
    flux: float = DEFAULT_FLUX
    unit: str = "W"


@dataclass
class DirectionalLight:
    """Directional light; origin is carried for the light abstraction only."""
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    source: LightSource = field(default_factory=LightSource)

    def set_direction(self, d: np.ndarray) -> None:
        self.direction = np.array(d, dtype=np.float64)


@dataclass(frozen=True)
class SunSnapshot:
    """Read-only per-frame view of the sun, handed to every pixel task."""
    direction: tuple[float, float, float]
    rgb: tuple[float, float, float]
    flux: float

    @staticmethod
    def from_direction(
        direction,
        rgb: tuple[float, float, float] = (1.0, 1.0, 1.0),
        flux: float = DEFAULT_FLUX,
    ) -> "SunSnapshot":
        d = np.asarray(direction, dtype=np.float64)
        n = float(np.linalg.norm(d))
        if n == 0.0:
            raise ValueError("Sun direction must be non-zero")
        d = d / n
        return SunSnapshot(
            direction=(float(d[0]), float(d[1]), float(d[2])),
            rgb=(float(rgb[0]), float(rgb[1]), float(rgb[2])),
            flux=float(flux),
        )

    @property
    def vec(self) -> np.ndarray:
        return np.array(self.direction, dtype=np.float64)


class SolarPosition:
    """
    Sun position on a sphere of fixed radius around the observer's frame.

    The radius is -AU (negative: the sun sits "behind" the reference frame)
    and is never changed. Only the polar angle is advanced over time; the
    azimuth is fixed when the position is initialised.

    States: uninitialised (direction is None) -> positioned, via init_position.
    """

    def __init__(self, light: DirectionalLight | None = None) -> None:
        self.coord = SphericalCoordinate(-AU_KM)
        self.direction: np.ndarray | None = None
        self.day = 0.0
        self.light = light if light is not None else DirectionalLight()

    @classmethod
    def default(cls, source: LightSource | None = None) -> "SolarPosition":
        sun = cls(DirectionalLight(source=source or LightSource()))
        sun.init_position(DEFAULT_DAY_FRACTION, DEFAULT_INCLINATION_DEG)
        return sun

    @property
    def is_positioned(self) -> bool:
        return self.direction is not None

    def init_position(self, day_fraction: float, inclination_offset_deg: float) -> np.ndarray:
        azimuth = 0.5 * np.pi * float(day_fraction)
        polar = np.pi - np.deg2rad(float(inclination_offset_deg))
        self.coord = replace(self.coord, azimuth=float(azimuth), polar=float(polar))
        self.day = float(day_fraction)
        return self._update_direction()

    def advance_position(self, delta_deg: float) -> np.ndarray:
        if not self.is_positioned:
            raise RuntimeError("Sun position is not initialised; call init_position first")
        self.coord = self.coord.with_polar_added(float(np.deg2rad(delta_deg)))
        return self._update_direction()

    def snapshot(self) -> SunSnapshot:
        if not self.is_positioned:
            raise RuntimeError("Sun position is not initialised; call init_position first")
        src = self.light.source
        return SunSnapshot.from_direction(self.direction, rgb=src.rgb, flux=src.flux)

    def _update_direction(self) -> np.ndarray:
        d = self.coord.unit()
        d = d / np.linalg.norm(d)
        self.direction = d
        self.light.set_direction(d)
        return d.copy()
