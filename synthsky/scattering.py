from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .easing import get_easing, march_fractions
from .planet import MIE_SCALE_HEIGHT, RAYLEIGH_SCALE_HEIGHT, PlanetGeometry
from .sun import SunSnapshot

BETA_RAYLEIGH = (5.8e-6, 1.35e-5, 3.31e-5)
BETA_MIE = (2.1e-3, 2.1e-3, 2.1e-3)
MIE_G = 0.76
MAX_SCALE = 7.0
MIE_EXTINCTION_SCALE = 1.25

OCCLUSION_MODES = ("abort", "skip")


@dataclass(frozen=True)
class ScatterSettings:
    """
    Constants of the single-scattering integrator.

    occlusion:
      "abort" - a light ray that misses the shell zeroes the whole pixel
      "skip"  - only that march step is dropped from the sums
    """
    view_samples: int = 25
    light_samples: int = 25
    easing: str = "smoothstep"
    ease_weight: float = 1.0
    occlusion: str = "abort"
    beta_r: tuple[float, float, float] = BETA_RAYLEIGH
    beta_m: tuple[float, float, float] = BETA_MIE
    mie_g: float = MIE_G
    hr: float = RAYLEIGH_SCALE_HEIGHT
    hm: float = MIE_SCALE_HEIGHT
    max_scale: float = MAX_SCALE
    mie_extinction_scale: float = MIE_EXTINCTION_SCALE

    def __post_init__(self) -> None:
        if int(self.view_samples) < 1 or int(self.light_samples) < 1:
            raise ValueError("view_samples and light_samples must be >= 1")
        if self.occlusion not in OCCLUSION_MODES:
            raise ValueError(f"occlusion must be one of {OCCLUSION_MODES}, got {self.occlusion!r}")
        if len(self.beta_r) != 3 or len(self.beta_m) != 3:
            raise ValueError("beta_r and beta_m must have three (RGB) components")
        if self.hr <= 0.0 or self.hm <= 0.0:
            raise ValueError("Scale heights must be positive")
        if not (-1.0 < self.mie_g < 1.0):
            raise ValueError(f"mie_g must lie in (-1, 1), got {self.mie_g}")
        if self.max_scale < 1.0:
            raise ValueError(f"max_scale must be >= 1, got {self.max_scale}")
        get_easing(self.easing)


def rayleigh_phase(mu):
    mu = np.asarray(mu, dtype=np.float64)
    return 3.0 / (16.0 * np.pi) * (1.0 + mu * mu)


def mie_phase(mu, g: float = MIE_G):
    """Cornette-Shanks style phase with the 1.1 exponent used by this renderer."""
    mu = np.asarray(mu, dtype=np.float64)
    num = 3.0 / (8.0 * np.pi) * ((1.0 - g * g) * (1.0 + mu * mu))
    return num / ((2.0 + g * g) * np.power(1.0 + g * g - 2.0 * g * mu, 1.1))


def asymptotic_scale(sun_z: float, max_scale: float = MAX_SCALE) -> float:
    """
    Rayleigh path-length boost for a low sun: 1/|z| capped at max_scale,
    pinned to max_scale at or below the horizon.
    """
    z = float(sun_z)
    if z <= 0.0:
        return float(max_scale)
    return float(min(1.0 / z, max_scale))


def extinction(
    beta_r,
    beta_m,
    lfactor: float,
    depth_r,
    depth_m,
    mie_scale: float = MIE_EXTINCTION_SCALE,
) -> np.ndarray:
    """tau = beta_r * lfactor * depth_r + beta_m * mie_scale * depth_m, per RGB channel."""
    br = np.asarray(beta_r, dtype=np.float64)
    bm = np.asarray(beta_m, dtype=np.float64)
    dr = np.asarray(depth_r, dtype=np.float64)[..., None]
    dm = np.asarray(depth_m, dtype=np.float64)[..., None]
    return br * (lfactor * dr) + bm * (mie_scale * dm)


def scatter_many(
    directions: np.ndarray,
    planet: PlanetGeometry,
    sun: SunSnapshot,
    settings: ScatterSettings | None = None,
) -> np.ndarray:
    """
    Single-scattering sky radiance for a batch of view directions.

    directions: (N,3), not necessarily unit length. Returns (N,3) RGB radiance.

    Each direction is marched independently with element-wise arithmetic only,
    so a pixel's value does not depend on which batch it was evaluated in.
    """
    s = settings or ScatterSettings()
    d = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
    out = np.zeros_like(d)

    # below the horizon: no sky radiance (NaN directions are dropped too)
    finite = np.isfinite(d[:, 0]) & np.isfinite(d[:, 1]) & np.isfinite(d[:, 2])
    active = finite & (np.where(finite, d[:, 2], -1.0) >= 0.0)
    idx = np.where(active)[0]
    if idx.size == 0:
        return out
    dirs = d[idx]
    n = dirs.shape[0]

    origin = planet.position()

    hit, t_view = planet.intersect_outer_shell_many(np.broadcast_to(origin, dirs.shape), dirs)
    t_view = np.where(hit, t_view, 0.0)
    view_ray = dirs * t_view[:, None]
    view_len = np.sqrt(view_ray[:, 0] ** 2 + view_ray[:, 1] ** 2 + view_ray[:, 2] ** 2)

    sun_dir = sun.vec
    dir_len = np.sqrt(dirs[:, 0] ** 2 + dirs[:, 1] ** 2 + dirs[:, 2] ** 2)
    mu = (dirs[:, 0] * sun_dir[0] + dirs[:, 1] * sun_dir[1] + dirs[:, 2] * sun_dir[2]) / np.maximum(dir_len, 1e-300)
    phase_r = rayleigh_phase(mu)
    phase_m = mie_phase(mu, s.mie_g)
    lfactor = asymptotic_scale(sun_dir[2], s.max_scale)

    ease = get_easing(s.easing)
    view_frac, view_step = march_fractions(int(s.view_samples), ease, s.ease_weight)
    light_frac, light_step = march_fractions(int(s.light_samples), ease, s.ease_weight)

    beta_r = np.asarray(s.beta_r, dtype=np.float64)
    beta_m = np.asarray(s.beta_m, dtype=np.float64)

    od_r = np.zeros(n)
    od_m = np.zeros(n)
    sum_r = np.zeros((n, 3))
    sum_m = np.zeros((n, 3))
    alive = np.ones(n, dtype=bool)

    for k in range(view_frac.size):
        rel = view_ray * view_frac[k]  # offset from the observer
        ds = view_len * view_step[k]
        depth = planet.sample_depth(rel)
        hr = np.exp(-depth / s.hr) * ds
        hm = np.exp(-depth / s.hm) * ds
        od_r += hr
        od_m += hm

        # secondary ray from the sample towards the sun
        lit, t_light = planet.intersect_outer_shell_many(origin[None, :] + rel, sun_dir)
        if s.occlusion == "abort":
            alive &= lit
        t_light = np.where(lit, t_light, 0.0)

        lod_r = np.zeros(n)
        lod_m = np.zeros(n)
        for j in range(light_frac.size):
            lrel = rel + sun_dir[None, :] * (t_light * light_frac[j])[:, None]
            ldepth = planet.sample_depth(lrel)
            lds = t_light * light_step[j]
            lod_r += np.exp(-ldepth / s.hr) * lds
            lod_m += np.exp(-ldepth / s.hm) * lds

        tau = extinction(beta_r, beta_m, lfactor, od_r + lod_r, od_m + lod_m, s.mie_extinction_scale)
        attenuation = np.exp(-tau)
        w = lit.astype(np.float64)
        sum_r += attenuation * (hr * w)[:, None]
        sum_m += attenuation * (hm * w)[:, None]

    rayleigh = sum_r * beta_r * phase_r[:, None]
    mie = sum_m * beta_m * phase_m[:, None]
    rgb = (rayleigh + mie) * sun.flux * np.asarray(sun.rgb, dtype=np.float64)
    rgb[~alive] = 0.0
    out[idx] = rgb
    return out


def scatter(
    direction,
    planet: PlanetGeometry,
    sun: SunSnapshot,
    settings: ScatterSettings | None = None,
    view_up=(0.0, 1.0, 0.0),
) -> np.ndarray:
    """RGB radiance for one view direction. view_up is accepted for API symmetry and unused."""
    return scatter_many(np.asarray(direction, dtype=np.float64)[None, :], planet, sun, settings)[0]
