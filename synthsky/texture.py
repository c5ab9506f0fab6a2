from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from .camera import region_directions
from .planet import PlanetGeometry
from .scattering import ScatterSettings, scatter_many
from .sun import SunSnapshot

# Fixed work-unit size: chunk boundaries (and so results) never depend on the worker count.
CHUNK_PIXELS = 4096

ENVBOX_FACES = 6
ENVBOX_TOP_ALPHA = 0xFF
ENVBOX_BOTTOM_ALPHA = 0x44


class EnvBoxError(ValueError):
    """Requested environment-box dimensions cannot be tiled into faces."""


@dataclass(frozen=True)
class FrameContext:
    """Everything one frame's pixel sweep reads. Taken once, before the sweep starts."""
    planet: PlanetGeometry
    sun: SunSnapshot
    settings: ScatterSettings = field(default_factory=ScatterSettings)
    centering: str = "legacy"


@dataclass
class PixelBuffer:
    """
    Radiance for a width x height pixel grid.

    data is (width*height, 3) with x as the outer and y as the inner
    (fastest-varying) index: pixel (x, y) is data[x * height + y].
    """
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.float64)
        if self.data.shape != (self.width * self.height, 3):
            raise ValueError(
                f"PixelBuffer data must have shape ({self.width * self.height}, 3), got {self.data.shape}"
            )

    def __len__(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> np.ndarray:
        return self.data[x * self.height + y]

    def to_image_array(self) -> np.ndarray:
        """(height, width, 3) array, row = y, column = x."""
        return self.data.reshape(self.width, self.height, 3).transpose(1, 0, 2)


@dataclass(frozen=True)
class EnvBoxFace:
    index: int
    x0: int
    y0: int
    width: int
    height: int
    alpha: int


def _scatter_chunk(args: tuple[np.ndarray, FrameContext]) -> np.ndarray:
    dirs, ctx = args
    return scatter_many(dirs, ctx.planet, ctx.sun, ctx.settings)


def _sweep(dirs: np.ndarray, ctx: FrameContext, workers: int) -> np.ndarray:
    chunks = [dirs[i:i + CHUNK_PIXELS] for i in range(0, dirs.shape[0], CHUNK_PIXELS)]
    if not chunks:
        return np.zeros((0, 3), dtype=np.float64)
    if workers <= 1 or len(chunks) == 1:
        parts = [_scatter_chunk((c, ctx)) for c in chunks]
    else:
        with ProcessPoolExecutor(max_workers=int(workers)) as pool:
            parts = list(pool.map(_scatter_chunk, [(c, ctx) for c in chunks]))
    return np.concatenate(parts, axis=0)


def compute_region(
    width: int,
    height: int,
    x0: int,
    y0: int,
    region_width: int,
    region_height: int,
    ctx: FrameContext,
    workers: int = 1,
) -> PixelBuffer:
    """Radiance for a sub-rectangle of a width x height sampling domain."""
    dirs = region_directions(width, height, x0, y0, region_width, region_height, ctx.centering)
    return PixelBuffer(region_width, region_height, _sweep(dirs, ctx, workers))


def compute_full_frame(width: int, height: int, ctx: FrameContext, workers: int = 1) -> PixelBuffer:
    return compute_region(width, height, 0, 0, width, height, ctx, workers)


def envbox_faces(width: int, height: int) -> list[EnvBoxFace]:
    """
    Six face regions of a width x height domain: the four quadrants, then the
    centred region twice (top and bottom share pixels and differ only in alpha).
    """
    if height != width or height <= 0 or width <= 0:
        raise EnvBoxError("Computed region must be a square texture with positive size")
    if height % 4 != 0 or width % 4 != 0:
        raise EnvBoxError("Computed region must be a multiple of 4")

    rw = width // 2
    rh = height // 2
    corners = [(0, 0), (rw, 0), (0, rh), (rw, rh)]
    faces = [EnvBoxFace(i, x, y, rw, rh, ENVBOX_TOP_ALPHA) for i, (x, y) in enumerate(corners)]
    faces.append(EnvBoxFace(4, rw // 2, rh // 2, rw, rh, ENVBOX_TOP_ALPHA))
    faces.append(EnvBoxFace(5, rw // 2, rh // 2, rw, rh, ENVBOX_BOTTOM_ALPHA))
    return faces


def compute_envbox(
    width: int,
    height: int,
    ctx: FrameContext,
    workers: int = 1,
) -> list[tuple[EnvBoxFace, PixelBuffer]]:
    faces = envbox_faces(width, height)
    out: list[tuple[EnvBoxFace, PixelBuffer]] = []
    cache: dict[tuple[int, int, int, int], PixelBuffer] = {}
    for face in faces:
        key = (face.x0, face.y0, face.width, face.height)
        if key not in cache:
            cache[key] = compute_region(width, height, face.x0, face.y0, face.width, face.height, ctx, workers)
        out.append((face, cache[key]))
    return out
