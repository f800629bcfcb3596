from __future__ import annotations

import logging
import math
import sys
from pathlib import Path

import numpy as np

log = logging.getLogger("scan_noise_bounds")


def main() -> None:
    """Scan a single-octave field over a dense pixel grid and report extremes.

    Every sample whose magnitude exceeds sqrt(0.5) is counted; with the
    default diag4 gradients such samples are expected (the bound is 1.0),
    while unit-length gradient sets should report none.

    Usage: python scripts/scan_noise_bounds.py [size] [grad_set]
    """

    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))

    from perlin.map2d import sample_grid
    from perlin.noise_2d import NoiseGenerator

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    size = int(sys.argv[1]) if len(sys.argv) > 1 else 10000
    grad_set = sys.argv[2] if len(sys.argv) > 2 else "diag4"
    gen = NoiseGenerator([(1.0 / 80.0, 1.0)], grad_set=grad_set)
    limit = math.sqrt(0.5)

    lo = np.inf
    hi = -np.inf
    over = 0
    band = 250
    for top in range(0, size, band):
        xg, yg = sample_grid(width=size, height=min(band, size - top), offset_y=top)
        z = gen.noise(xg, yg)
        lo = min(lo, float(z.min()))
        hi = max(hi, float(z.max()))
        over += int(np.count_nonzero(np.abs(z) > limit))

    log.info(
        "%s over %dx%d: min=%.6f max=%.6f bound=%.6f samples above sqrt(0.5): %d",
        grad_set,
        size,
        size,
        lo,
        hi,
        gen.bound,
        over,
    )


if __name__ == "__main__":
    main()
