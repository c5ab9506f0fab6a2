from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

try:
    import tomllib  # py3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from .planet import PlanetGeometry
from .scattering import ScatterSettings
from .sun import DEFAULT_DAY_FRACTION, DEFAULT_FLUX, DEFAULT_INCLINATION_DEG, DirectionalLight, LightSource, SolarPosition

# 365 // 48 degrees of polar rotation per frame
DEFAULT_STEP_DEG = 7.0
DEFAULT_WARMUP_FRAMES = 36
DEFAULT_FIRST_FRAME = 46


@dataclass(frozen=True)
class Config:
    raw: Dict[str, Any]

    @staticmethod
    def default() -> "Config":
        return Config({})

    @property
    def image(self) -> Dict[str, Any]:
        return dict(self.raw.get("image", {}))

    @property
    def planet(self) -> Dict[str, Any]:
        return dict(self.raw.get("planet", {}))

    @property
    def sun(self) -> Dict[str, Any]:
        return dict(self.raw.get("sun", {}))

    @property
    def scatter(self) -> Dict[str, Any]:
        return dict(self.raw.get("scatter", {}))

    @property
    def sequence(self) -> Dict[str, Any]:
        return dict(self.raw.get("sequence", {}))

    @property
    def output(self) -> Dict[str, Any]:
        return dict(self.raw.get("output", {}))

    @property
    def parallel(self) -> Dict[str, Any]:
        return dict(self.raw.get("parallel", {}))


def load_config(path: str | Path) -> Config:
    p = Path(path)
    raw = tomllib.loads(p.read_text(encoding="utf-8"))
    return Config(raw)


def planet_from_config(cfg: Config) -> PlanetGeometry:
    pc = cfg.planet
    kwargs: Dict[str, Any] = {
        "lat_deg": float(pc.get("lat_deg", 65.0)),
        "lon_deg": float(pc.get("lon_deg", 0.0)),
    }
    if "radius" in pc:
        kwargs["radius"] = float(pc["radius"])
    if "standard_meridian_deg" in pc:
        kwargs["standard_meridian_deg"] = float(pc["standard_meridian_deg"])
    sc = cfg.scatter
    if "hr" in sc:
        kwargs["shell_height"] = float(sc["hr"])
    return PlanetGeometry.create(**kwargs)


def settings_from_config(cfg: Config) -> ScatterSettings:
    sc = cfg.scatter
    known = {f.name for f in fields(ScatterSettings)}
    unknown = sorted(set(sc) - known)
    if unknown:
        raise ValueError(f"Unknown [scatter] keys: {', '.join(unknown)}")
    kwargs: Dict[str, Any] = {}
    for k, v in sc.items():
        if k in ("beta_r", "beta_m"):
            kwargs[k] = tuple(float(x) for x in v)
        elif k in ("view_samples", "light_samples"):
            kwargs[k] = int(v)
        elif k in ("easing", "occlusion"):
            kwargs[k] = str(v)
        else:
            kwargs[k] = float(v)
    return ScatterSettings(**kwargs)


def sun_from_config(cfg: Config) -> SolarPosition:
    """Sun initialised from [sun]; not yet advanced by the [sequence] warm-up."""
    sc = cfg.sun
    rgb = tuple(float(x) for x in sc.get("rgb", (1.0, 1.0, 1.0)))
    if len(rgb) != 3:
        raise ValueError(f"sun.rgb must have three components, got {rgb}")
    source = LightSource(rgb=rgb, flux=float(sc.get("flux", DEFAULT_FLUX)), unit=str(sc.get("unit", "W")))
    sun = SolarPosition(DirectionalLight(source=source))
    sun.init_position(
        float(sc.get("day_fraction", DEFAULT_DAY_FRACTION)),
        float(sc.get("inclination_deg", DEFAULT_INCLINATION_DEG)),
    )
    return sun
