from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
from PIL import Image

from .texture import PixelBuffer

# Below the knee a log curve keeps dim sky detail; above it a sigmoid rolls off highlights.
TONE_KNEE = 1.31
SIGMOID_GAIN = 0.5
SIGMOID_BIAS = -1.0

JPEG_QUALITY = 80


def tone_map(values: np.ndarray) -> np.ndarray:
    x = np.asarray(values, dtype=np.float64)
    low = np.log(np.where(x < TONE_KNEE, x, 0.0) + 1.0)
    high = 1.0 / (1.0 + np.exp(-x * SIGMOID_GAIN + SIGMOID_BIAS))
    return np.where(x < TONE_KNEE, low, high)


def to_rgba8(buf: PixelBuffer, clamp: bool, alpha: int = 0xFF) -> np.ndarray:
    """(height, width, 4) uint8 image of the radiance buffer."""
    rgb = buf.to_image_array()
    if clamp:
        rgb = tone_map(rgb)
    rgb = np.nan_to_num(rgb, nan=0.0, posinf=1.0, neginf=0.0)
    rgb8 = np.clip(rgb * 255.0, 0.0, 255.0).astype(np.uint8)
    a = np.full(rgb8.shape[:2] + (1,), int(alpha) & 0xFF, dtype=np.uint8)
    return np.concatenate([rgb8, a], axis=2)


def write_image(
    buf: PixelBuffer,
    path: str | Path,
    clamp: bool,
    alpha: int = 0xFF,
    quality: int = JPEG_QUALITY,
) -> bool:
    """
    Encode the buffer to a raster file; the format follows the file extension.

    JPEG drops the alpha channel. Write failures are reported on stderr and
    return False instead of raising.
    """
    path = Path(path)
    try:
        rgba = to_rgba8(buf, clamp, alpha)
        img = Image.fromarray(rgba)
        if path.suffix.lower() in (".jpg", ".jpeg"):
            img.convert("RGB").save(path, quality=int(quality))
        else:
            img.save(path)
    except (OSError, ValueError) as exc:
        print(f"Error writing image to {path}: {exc}", file=sys.stderr)
        return False
    return True
