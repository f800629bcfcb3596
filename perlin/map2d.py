from __future__ import annotations

import logging

import numpy as np

from perlin.noise_2d import Noise2D

log = logging.getLogger(__name__)


def sample_grid(
    *,
    width: int,
    height: int,
    step: float = 1.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
) -> tuple[np.ndarray, np.ndarray]:
    """World coordinates of a `height x width` raster.

    Column `c` maps to `offset_x + c * step` (rows likewise), so with the
    defaults each pixel samples its own integer coordinate.
    """

    width = int(width)
    height = int(height)
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")

    step = float(step)
    if not step > 0.0:
        raise ValueError("step must be > 0")

    xs = np.arange(width, dtype=np.float64) * step + float(offset_x)
    ys = np.arange(height, dtype=np.float64) * step + float(offset_y)
    return np.meshgrid(xs, ys)


def normalize01(z: np.ndarray) -> np.ndarray:
    """Min/max rescale to [0, 1].

    A flat field has no range to rescale; that is reported as a ValueError
    rather than papered over, since it means the octave configuration is
    degenerate (e.g. all amplitudes zero).
    """

    z = np.asarray(z, dtype=np.float64)
    zmin = float(np.min(z))
    zmax = float(np.max(z))
    if zmax == zmin:
        raise ValueError("cannot normalize a flat noise field (max == min)")
    return (z - zmin) / (zmax - zmin)


def noise_map_2d(
    noise: Noise2D,
    *,
    width: int,
    height: int,
    step: float = 1.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    normalize: bool = False,
    dtype: np.dtype | None = None,
) -> np.ndarray:
    """Sample `noise` over a raster grid.

    Raw values are returned unless `normalize` is set, in which case the
    field is min/max rescaled over the sampled region.
    """

    xg, yg = sample_grid(
        width=width,
        height=height,
        step=step,
        offset_x=offset_x,
        offset_y=offset_y,
    )
    z = noise.noise(xg, yg)
    log.debug("sampled noise map %dx%d (step=%g)", int(width), int(height), float(step))

    if bool(normalize):
        z = normalize01(z)
    if dtype is not None:
        z = np.asarray(z, dtype=dtype)
    return z


def sample_bounds(
    noise: Noise2D,
    *,
    width: int,
    height: int,
    step: float = 1.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    band_rows: int = 256,
) -> tuple[float, float]:
    """Empirical (min, max) of `noise` over a raster, scanned in row bands.

    Bands keep memory flat for very large scans (10000 x 10000 and up).
    """

    width = int(width)
    height = int(height)
    band_rows = max(int(band_rows), 1)
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")

    xs, _ = sample_grid(
        width=width, height=1, step=step, offset_x=offset_x, offset_y=offset_y
    )
    step = float(step)
    offset_y = float(offset_y)

    zmin = np.inf
    zmax = -np.inf
    for top in range(0, height, band_rows):
        rows = np.arange(top, min(top + band_rows, height), dtype=np.float64)
        xg, yg = np.meshgrid(xs[0], rows * step + offset_y)
        z = noise.noise(xg, yg)
        zmin = min(zmin, float(np.min(z)))
        zmax = max(zmax, float(np.max(z)))

    log.debug("noise bounds over %dx%d: [%.6f, %.6f]", width, height, zmin, zmax)
    return float(zmin), float(zmax)
