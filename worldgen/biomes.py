from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from perlin.core import DEFAULT_SEED
from perlin.map2d import sample_grid
from perlin.noise_2d import NoiseGenerator, Octave, fractal_octaves

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Biome:
    name: str
    rgb: tuple[int, int, int]


PLAINS = Biome("plains", (141, 196, 88))
FOREST = Biome("forest", (34, 110, 52))
DESERT = Biome("desert", (222, 196, 120))
SNOW = Biome("snow", (240, 244, 248))
JUNGLE = Biome("jungle", (18, 148, 70))
OCEAN = Biome("ocean", (38, 92, 170))

BIOME_PALETTE: tuple[Biome, ...] = (PLAINS, FOREST, DESERT, SNOW, JUNGLE, OCEAN)


@dataclass(frozen=True)
class BiomeOrigin:
    """Jittered anchor point of one grid cell and the biome it carries."""

    cell_x: int
    cell_y: int
    x: float
    y: float
    palette_index: int
    biome: Biome


def zigzag(n: int) -> int:
    """Map a signed integer onto the non-negatives (0, -1, 1, -2 -> 0, 1, 2, 3)."""
    n = int(n)
    return 2 * n if n >= 0 else -2 * n - 1


def cell_seed(cell_x: int, cell_y: int, seed: int = DEFAULT_SEED) -> np.random.SeedSequence:
    seed = int(seed)
    if seed < 0:
        raise ValueError("seed must be >= 0")
    return np.random.SeedSequence([seed, zigzag(cell_x), zigzag(cell_y)])


def biome_origin(
    cell_x: int,
    cell_y: int,
    *,
    separation: float,
    palette: Sequence[Biome] = BIOME_PALETTE,
    seed: int = DEFAULT_SEED,
) -> BiomeOrigin:
    """Derive the origin of cell (cell_x, cell_y).

    A fresh generator is seeded from (seed, cell) on every call and draws, in
    order: x jitter, y jitter, palette index. Jitter lies in
    [-separation / 2, separation / 2).
    """

    if not palette:
        raise ValueError("palette must not be empty")
    separation = float(separation)
    if not separation > 0.0:
        raise ValueError("separation must be > 0")
    cell_x = int(cell_x)
    cell_y = int(cell_y)

    rng = np.random.default_rng(cell_seed(cell_x, cell_y, seed))
    jitter_x = (float(rng.random()) - 0.5) * separation
    jitter_y = (float(rng.random()) - 0.5) * separation
    idx = int(rng.integers(len(palette)))

    return BiomeOrigin(
        cell_x=cell_x,
        cell_y=cell_y,
        x=cell_x * separation + jitter_x,
        y=cell_y * separation + jitter_y,
        palette_index=idx,
        biome=palette[idx],
    )


def candidate_cells(x: float, y: float, separation: float) -> list[tuple[int, int]]:
    """The four lattice cells bracketing (x, y) / separation.

    Order is (floor, floor), (floor, ceil), (ceil, floor), (ceil, ceil).
    Coincident cells on grid lines are kept, so the order is stable.
    """

    separation = float(separation)
    if not separation > 0.0:
        raise ValueError("separation must be > 0")
    bx = float(x) / separation
    by = float(y) / separation
    fx, cx = math.floor(bx), math.ceil(bx)
    fy, cy = math.floor(by), math.ceil(by)
    return [(fx, fy), (fx, cy), (cx, fy), (cx, cy)]


def nearest_origin(
    x: float,
    y: float,
    *,
    separation: float,
    noise_effect: float,
    x_noise: NoiseGenerator,
    y_noise: NoiseGenerator,
    palette: Sequence[Biome] = BIOME_PALETTE,
    seed: int = DEFAULT_SEED,
) -> BiomeOrigin:
    x = float(x)
    y = float(y)
    cells = candidate_cells(x, y, separation)
    qx = x + x_noise.evaluate(x, y) * float(noise_effect)
    qy = y + y_noise.evaluate(x, y) * float(noise_effect)

    best: BiomeOrigin | None = None
    best_d2 = math.inf
    for i, j in cells:
        o = biome_origin(i, j, separation=separation, palette=palette, seed=seed)
        dx = o.x - qx
        dy = o.y - qy
        d2 = dx * dx + dy * dy
        # Strictly less: the first candidate wins a tie.
        if best is None or d2 < best_d2:
            best = o
            best_d2 = d2
    return best


def classify_biome(
    x: float,
    y: float,
    *,
    separation: float,
    noise_effect: float,
    x_noise: NoiseGenerator,
    y_noise: NoiseGenerator,
    palette: Sequence[Biome] = BIOME_PALETTE,
    seed: int = DEFAULT_SEED,
) -> Biome:
    return nearest_origin(
        x,
        y,
        separation=separation,
        noise_effect=noise_effect,
        x_noise=x_noise,
        y_noise=y_noise,
        palette=palette,
        seed=seed,
    ).biome


_DEFAULT_OCTAVES = fractal_octaves(1.0 / 80.0, 1.0, count=3)


@dataclass(frozen=True)
class BiomeSettings:
    seed: int = DEFAULT_SEED
    separation: float = 100.0
    noise_effect: float = 40.0
    x_octaves: tuple[Octave, ...] = _DEFAULT_OCTAVES
    y_octaves: tuple[Octave, ...] = _DEFAULT_OCTAVES
    palette: tuple[Biome, ...] = BIOME_PALETTE

    def __post_init__(self) -> None:
        if int(self.seed) < 0:
            raise ValueError("seed must be >= 0")
        if not float(self.separation) > 0.0:
            raise ValueError("separation must be > 0")
        if not float(self.noise_effect) >= 0.0:
            raise ValueError("noise_effect must be >= 0")
        if not self.palette:
            raise ValueError("palette must not be empty")


class BiomeClassifier:
    """Noise-distorted nearest-origin classification of the plane.

    The X and Y distortion fields use permutation tables seeded with `seed`
    and `seed + 1`, so they are independent of each other.
    """

    def __init__(self, settings: BiomeSettings | None = None):
        self.settings = settings if settings is not None else BiomeSettings()
        s = self.settings
        self.x_noise = NoiseGenerator(s.x_octaves, seed=s.seed)
        self.y_noise = NoiseGenerator(s.y_octaves, seed=s.seed + 1)
        log.debug(
            "biome classifier: separation=%g noise_effect=%g x=%r y=%r",
            s.separation,
            s.noise_effect,
            self.x_noise,
            self.y_noise,
        )

    def origin(self, cell_x: int, cell_y: int) -> BiomeOrigin:
        s = self.settings
        return biome_origin(
            cell_x, cell_y, separation=s.separation, palette=s.palette, seed=s.seed
        )

    def distortion(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        effect = float(self.settings.noise_effect)
        return self.x_noise.noise(x, y) * effect, self.y_noise.noise(x, y) * effect

    def nearest_origin(self, x: float, y: float) -> BiomeOrigin:
        s = self.settings
        return nearest_origin(
            x,
            y,
            separation=s.separation,
            noise_effect=s.noise_effect,
            x_noise=self.x_noise,
            y_noise=self.y_noise,
            palette=s.palette,
            seed=s.seed,
        )

    def classify(self, x: float, y: float) -> Biome:
        return self.nearest_origin(x, y).biome


def biome_map(
    classifier: BiomeClassifier,
    *,
    width: int,
    height: int,
    step: float = 1.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
) -> np.ndarray:
    """Palette indices (HxW uint8) of `classifier` over a raster grid.

    Same result as calling `classifier.classify` per pixel. Each distinct
    candidate cell is derived once per call.
    """

    s = classifier.settings
    if len(s.palette) > 256:
        raise ValueError("palette must have at most 256 entries")

    xg, yg = sample_grid(
        width=width, height=height, step=step, offset_x=offset_x, offset_y=offset_y
    )
    dx, dy = classifier.distortion(xg, yg)
    qx = (xg + dx).reshape(-1)
    qy = (yg + dy).reshape(-1)

    bx = xg.reshape(-1) / float(s.separation)
    by = yg.reshape(-1) / float(s.separation)
    # Cells stay float64 (exact integers) until int() per distinct cell.
    fx = np.floor(bx)
    cx = np.ceil(bx)
    fy = np.floor(by)
    cy = np.ceil(by)

    ii = np.concatenate([fx, fx, cx, cx])
    jj = np.concatenate([fy, cy, fy, cy])
    cells, inverse = np.unique(np.stack([ii, jj], axis=1), axis=0, return_inverse=True)
    inverse = np.asarray(inverse).reshape(4, -1)

    origins = [classifier.origin(int(i), int(j)) for i, j in cells]
    ox = np.array([o.x for o in origins], dtype=np.float64)
    oy = np.array([o.y for o in origins], dtype=np.float64)
    oidx = np.array([o.palette_index for o in origins], dtype=np.uint8)

    ddx = ox[inverse] - qx
    ddy = oy[inverse] - qy
    d2 = ddx * ddx + ddy * ddy
    # argmin keeps the first minimum, matching the strict-less scan.
    k = np.argmin(d2, axis=0)
    chosen = inverse[k, np.arange(inverse.shape[1])]

    log.debug(
        "biome map %dx%d: %d candidate cells", int(width), int(height), len(origins)
    )
    return oidx[chosen].reshape(xg.shape)


def biome_rgb01(indices: np.ndarray, palette: Sequence[Biome] = BIOME_PALETTE) -> np.ndarray:
    """HxWx3 float image in [0, 1] from palette indices."""

    idx = np.asarray(indices)
    if idx.ndim != 2:
        raise ValueError("indices must be a 2D array")
    colors = np.array([b.rgb for b in palette], dtype=np.float64) / 255.0
    if idx.size and int(idx.max()) >= len(colors):
        raise ValueError("palette index out of range")
    return colors[idx.astype(np.intp)]


def biome_counts(indices: np.ndarray, palette: Sequence[Biome] = BIOME_PALETTE) -> dict[str, int]:
    idx = np.asarray(indices).reshape(-1).astype(np.intp)
    counts = np.bincount(idx, minlength=len(palette))
    return {b.name: int(c) for b, c in zip(palette, counts)}
