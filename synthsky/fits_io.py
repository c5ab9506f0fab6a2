from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from astropy.io import fits

from .texture import PixelBuffer

SCALED_MAX = 65535.0

# (layer name, unit); RAD_* are the unclamped channels, SCALED their sum stretched to SCALED_MAX
RADIANCE_LAYERS = (
    ("SCALED", "0..65535 (float)"),
    ("RAD_R", "radiance"),
    ("RAD_G", "radiance"),
    ("RAD_B", "radiance"),
)


@dataclass(frozen=True)
class RadianceStretch:
    """Total radiance stretched onto [0, SCALED_MAX], with the numbers needed to undo it."""
    scaled: np.ndarray
    raw_min: float
    raw_max: float
    factor: float


def stretch_radiance(total: np.ndarray) -> RadianceStretch:
    """
    Stretch a (height, width) radiance map so its peak lands on SCALED_MAX.

    Negative and non-finite samples become 0. A frame with no positive
    radiance (a night frame) stays all zero with factor 0.
    """
    x = np.asarray(total, dtype=np.float64)
    finite = np.isfinite(x)
    raw_min = float(np.min(x[finite])) if np.any(finite) else float("nan")
    x = np.where(finite, np.maximum(x, 0.0), 0.0)
    peak = float(np.max(x)) if x.size else 0.0
    if peak <= 0.0:
        return RadianceStretch(np.zeros(x.shape, dtype=np.float32), raw_min, peak, 0.0)
    factor = SCALED_MAX / peak
    scaled = np.clip(x * factor, 0.0, SCALED_MAX).astype(np.float32)
    return RadianceStretch(scaled, raw_min, peak, factor)


def write_radiance_fits(
    buf: PixelBuffer,
    out_path: str | Path,
    header_cards: dict,
    cube_dtype: str = "float32",
) -> None:
    """
    Unclamped (HDR) radiance as a single-HDU cube, one plane per RADIANCE_LAYERS entry.

    numpy shape (4, height, width) -> FITS axes (NAXIS3, NAXIS2, NAXIS1).
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    dtype = np.float32 if cube_dtype.lower() == "float32" else np.float64

    img = buf.to_image_array()
    st = stretch_radiance(img.sum(axis=2))
    cube = np.stack([st.scaled, img[:, :, 0], img[:, :, 1], img[:, :, 2]], axis=0).astype(dtype)

    hdr = fits.Header()
    for k, (v, c) in header_cards.items():
        hdr[k] = (v, c)
    # FITS headers cannot hold NaN
    if np.isfinite(st.raw_min):
        hdr["RAWMIN"] = (st.raw_min, "Raw min of summed radiance")
    hdr["RAWMAX"] = (st.raw_max, "Peak of summed radiance, negatives clipped")
    hdr["SCLFAC"] = (st.factor, "SCALED = sum * SCLFAC")
    hdr["BUNIT"] = ("MIXED", "Units vary by layer; see LAYn/LUn")
    hdr["NLAYERS"] = (len(RADIANCE_LAYERS), "Number of layers in cube")
    for i, (name, unit) in enumerate(RADIANCE_LAYERS, start=1):
        hdr[f"LAY{i}"] = (name, "Layer name")
        hdr[f"LU{i}"] = (unit, "Layer unit")

    fits.PrimaryHDU(data=cube, header=hdr).writeto(out_path, overwrite=True, output_verify="silentfix")
