from __future__ import annotations

import time

import numpy as np

from perlin.map2d import noise_map_2d
from worldgen.biomes import BiomeClassifier, biome_map


def _timeit(label: str, fn) -> float:
    t0 = time.perf_counter()
    fn()
    t1 = time.perf_counter()
    ms = (t1 - t0) * 1000.0
    print(f"{label}: {ms:.2f} ms")
    return ms


def main() -> None:
    """Quick CPU benchmark.

    Intended targets (laptop-class CPU):
    - noise_map_2d 512x512, 3 octaves: < ~100ms
    - biome_map 512x512: < ~250ms
    - classify, 10k scalar calls: a few hundred ms (one RNG per candidate cell)
    """

    clf = BiomeClassifier()
    params = dict(width=512, height=512, step=1.0, offset_x=0.0, offset_y=0.0)

    _timeit("noise_map_2d 512x512", lambda: noise_map_2d(clf.x_noise, **params))
    _timeit("noise_map_2d 512x512 (float32 out)", lambda: noise_map_2d(clf.x_noise, dtype=np.float32, **params))
    _timeit("biome_map 512x512", lambda: biome_map(clf, **params))

    rng = np.random.default_rng(0)
    pts = rng.random((10_000, 2)) * 5000.0

    def run_scalar() -> None:
        for x, y in pts:
            clf.classify(float(x), float(y))

    _timeit("classify x10000 (scalar)", run_scalar)


if __name__ == "__main__":
    main()
