from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from astropy.time import Time

from .camera import validate_dimensions
from .config import (
    DEFAULT_FIRST_FRAME,
    DEFAULT_STEP_DEG,
    DEFAULT_WARMUP_FRAMES,
    Config,
    load_config,
    planet_from_config,
    settings_from_config,
    sun_from_config,
)
from .fits_io import write_radiance_fits
from .image_io import JPEG_QUALITY, write_image
from .planet import PlanetGeometry
from .scattering import ScatterSettings
from .sun import SolarPosition
from .texture import EnvBoxError, FrameContext, compute_envbox, compute_full_frame, envbox_faces

_TRUE = ("1", "t", "T", "TRUE", "true", "True")
_FALSE = ("0", "f", "F", "FALSE", "false", "False")


def parse_bool(s: str) -> bool:
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {s!r}")


def _header_cards(
    frame: int,
    ctx: FrameContext,
    sun: SolarPosition,
    clamp: bool,
) -> dict:
    sd = ctx.sun.direction
    s = ctx.settings
    return {
        "DATE": (Time.now().isot, "File creation UTC"),
        "FRAME": (int(frame), "Frame index"),
        "SUNDAY": (float(sun.day), "Sun day fraction"),
        "SUNAZ": (float(np.rad2deg(sun.coord.azimuth)), "Sun azimuth deg"),
        "SUNPOL": (float(np.rad2deg(sun.coord.polar)), "Sun polar deg"),
        "SUNX": (sd[0], "Sun dir x"),
        "SUNY": (sd[1], "Sun dir y"),
        "SUNZ": (sd[2], "Sun dir z"),
        "SUNFLUX": (ctx.sun.flux, "Light flux"),
        "LATDEG": (float(np.rad2deg(ctx.planet.latitude)), "Lat deg"),
        "LONDEG": (float(np.rad2deg(ctx.planet.longitude)), "Lon deg"),
        "PLANRAD": (ctx.planet.radius, "Planet radius"),
        "SHELLRAD": (ctx.planet.shell_radius, "Atmosphere shell radius"),
        "NVIEW": (int(s.view_samples), "View ray samples"),
        "NLIGHT": (int(s.light_samples), "Light ray samples"),
        "EASING": (s.easing, "Sample spacing"),
        "OCCLUS": (s.occlusion, "Light-ray miss policy"),
        "CENTER": (ctx.centering, "Pixel centering"),
        "CLAMP": (int(bool(clamp)), "Tone map 0/1 (image only)"),
    }


def render_frames(
    width: int,
    height: int,
    clamp: bool,
    prefix: str,
    planet: PlanetGeometry,
    sun: SolarPosition,
    settings: ScatterSettings,
    first_frame: int,
    frames: int,
    step_deg: float,
    out_dir: Path,
    ext: str = ".jpg",
    centering: str = "legacy",
    workers: int = 1,
    quality: int = JPEG_QUALITY,
    write_fits: bool = False,
) -> list[Path]:
    """Advance the sun one step per frame and write one image per frame index."""
    written: list[Path] = []
    for i in range(first_frame, first_frame + frames):
        sun.advance_position(step_deg)
        ctx = FrameContext(planet, sun.snapshot(), settings, centering)
        out_path = out_dir / f"{prefix}{i}{ext}"
        print(f"Processing file:{out_path}")
        buf = compute_full_frame(width, height, ctx, workers=workers)
        if write_image(buf, out_path, clamp, quality=quality):
            written.append(out_path)
        if write_fits:
            fits_path = out_dir / f"{prefix}{i}.fits"
            try:
                write_radiance_fits(buf, fits_path, _header_cards(i, ctx, sun, clamp))
            except OSError as exc:
                print(f"Error writing FITS to {fits_path}: {exc}", file=sys.stderr)
            else:
                written.append(fits_path)
    return written


def render_envbox(
    width: int,
    height: int,
    clamp: bool,
    prefix: str,
    ctx: FrameContext,
    out_dir: Path,
    workers: int = 1,
) -> list[Path]:
    """Six face images <prefix>ENVBOX_0..5.png; raises EnvBoxError before computing anything."""
    written: list[Path] = []
    for face, buf in compute_envbox(width, height, ctx, workers=workers):
        out_path = out_dir / f"{prefix}ENVBOX_{face.index}.png"
        print(f"Processing file:{out_path}")
        if write_image(buf, out_path, clamp, alpha=face.alpha):
            written.append(out_path)
    return written


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="synthsky",
        description="Single-scattering (Rayleigh + Mie) sky radiance renderer",
    )
    ap.add_argument("width", type=int, help="Image width in pixels")
    ap.add_argument("height", type=int, help="Image height in pixels")
    ap.add_argument("clamp", type=parse_bool, help="Tone map radiance before encoding (true/false)")
    ap.add_argument("prefix", help="Output filename prefix")
    ap.add_argument("--config", default=None, help="Path to a sky.toml scene file")
    ap.add_argument("--frames", type=int, default=None, help="Number of frames (default [sequence].frames or 1)")
    ap.add_argument("--first-frame", type=int, default=None, help="Index of the first frame written")
    ap.add_argument("--format", default=None, help="Image extension: jpg or png (default [output].format)")
    ap.add_argument("--workers", type=int, default=None, help="Worker processes for the pixel sweep")
    ap.add_argument("--envbox", action="store_true", help="Write six environment-box faces instead of frames")
    ap.add_argument("--fits", action="store_true", help="Also write unclamped radiance as a FITS cube")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else Config.default()
        planet = planet_from_config(cfg)
        settings = settings_from_config(cfg)
        sun = sun_from_config(cfg)
    except (OSError, ValueError) as exc:
        print(f"Bad configuration: {exc}", file=sys.stderr)
        return 1

    seq = cfg.sequence
    step_deg = float(seq.get("step_deg", DEFAULT_STEP_DEG))
    warmup = int(seq.get("warmup_frames", DEFAULT_WARMUP_FRAMES))
    first = int(args.first_frame if args.first_frame is not None else seq.get("first_frame", DEFAULT_FIRST_FRAME))
    frames = int(args.frames if args.frames is not None else seq.get("frames", 1))
    workers = int(args.workers if args.workers is not None else cfg.parallel.get("workers", 1))
    centering = str(cfg.image.get("centering", "legacy"))

    out_cfg = cfg.output
    out_dir = Path(out_cfg.get("dir", "."))
    fmt = str(args.format or out_cfg.get("format", "jpg")).lstrip(".").lower()
    quality = int(out_cfg.get("jpeg_quality", JPEG_QUALITY))

    if frames < 0:
        print(f"Frame count must be non-negative, got {frames}", file=sys.stderr)
        return 1
    try:
        validate_dimensions(args.width, args.height, centering)
        if args.envbox:
            envbox_faces(args.width, args.height)
    except EnvBoxError as exc:
        print(str(exc))
        return 1
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    sun.advance_position(warmup * step_deg)
    out_dir.mkdir(parents=True, exist_ok=True)

    if args.envbox:
        sun.advance_position(step_deg)
        ctx = FrameContext(planet, sun.snapshot(), settings, centering)
        written = render_envbox(args.width, args.height, args.clamp, args.prefix, ctx, out_dir, workers)
    else:
        written = render_frames(
            args.width,
            args.height,
            args.clamp,
            args.prefix,
            planet,
            sun,
            settings,
            first_frame=first,
            frames=frames,
            step_deg=step_deg,
            out_dir=out_dir,
            ext=f".{fmt}",
            centering=centering,
            workers=workers,
            quality=quality,
            write_fits=bool(args.fits),
        )

    for p in written:
        print(f"Wrote: {p}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
