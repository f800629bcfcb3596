from .core import DEFAULT_SEED, make_permutation, wrap256
from .map2d import noise_map_2d, normalize01, sample_bounds, sample_grid
from .noise_2d import NoiseGenerator, Octave, Perlin2D, fractal_octaves

__all__ = [
    "DEFAULT_SEED",
    "NoiseGenerator",
    "Octave",
    "Perlin2D",
    "fractal_octaves",
    "make_permutation",
    "noise_map_2d",
    "normalize01",
    "sample_bounds",
    "sample_grid",
    "wrap256",
]
