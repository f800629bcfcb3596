from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

PERMUTATION_SIZE = 256
DEFAULT_SEED = 2023


def fade(t: np.ndarray) -> np.ndarray:
    """Quintic fade curve used by Improved Perlin Noise (2002)."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def wrap256(n: np.ndarray) -> np.ndarray:
    """Euclidean modulo of lattice cell coordinates into [0, 256), as int64.

    Negative cells wrap the same way as positive ones, so the noise field is
    periodic with period 256 over the whole plane. Float cells are wrapped
    before the integer cast, so floors beyond the int64 range stay exact.
    """
    return np.mod(n, PERMUTATION_SIZE).astype(np.int64)


def make_permutation(seed: int = DEFAULT_SEED) -> np.ndarray:
    """Build the doubled permutation table (length 512) for `seed`.

    Fisher-Yates over 0..255, walking the index down from 255 to 1 and swapping
    with a uniform pick in [0, index]. The second half is a copy of the first
    so corner lookups at `cell + 1` never need a wrap check.
    """

    rng = np.random.default_rng(int(seed))
    p = np.arange(PERMUTATION_SIZE, dtype=np.int32)
    for i in range(PERMUTATION_SIZE - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        if j != i:
            p[i], p[j] = p[j], p[i]

    table = np.concatenate([p, p])
    table.flags.writeable = False
    return table


def check_finite(*arrays: np.ndarray) -> None:
    for a in arrays:
        if not np.isfinite(a).all():
            raise ValueError("noise coordinates must be finite")


@dataclass(frozen=True)
class Corner2D:
    gx: float
    gy: float
    dx: float
    dy: float
    dot: float


# Hash low bits -> gradient: 0 (1,1), 1 (-1,1), 2 (1,-1), 3 (-1,-1).
_GRAD2_DIAG4 = np.array(
    [
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)

_GRAD2_DIAG8 = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)
_GRAD2_DIAG8 /= np.linalg.norm(_GRAD2_DIAG8, axis=1, keepdims=True)

_GRAD2_AXIS4 = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
    ],
    dtype=np.float64,
)

_GRAD2_CIRCLE16 = np.stack(
    [
        np.cos(np.linspace(0.0, 2.0 * np.pi, 16, endpoint=False, dtype=np.float64)),
        np.sin(np.linspace(0.0, 2.0 * np.pi, 16, endpoint=False, dtype=np.float64)),
    ],
    axis=1,
)

GRAD2_SETS = ("diag4", "diag8", "axis4", "circle16")


def grad2_table(name: str) -> np.ndarray:
    name = str(name)
    if name in {"diag4", "default"}:
        return _GRAD2_DIAG4
    if name in {"diag8", "improved8"}:
        return _GRAD2_DIAG8
    if name in {"axis4"}:
        return _GRAD2_AXIS4
    if name in {"circle16"}:
        return _GRAD2_CIRCLE16
    raise ValueError(f"unknown 2D gradient set: {name}")


def grad2_bound(name: str) -> float:
    """Theoretical single-octave bound of |noise| for a gradient set.

    2D gradient noise peaks at sqrt(0.5) times the gradient length, reached at
    a cell center with all four gradients pointing towards it.
    """

    g = grad2_table(name)
    length = float(np.max(np.linalg.norm(g, axis=1)))
    return length * math.sqrt(0.5)


def grad2_from_hash(
    h: np.ndarray, *, grad_table: np.ndarray = _GRAD2_DIAG4
) -> tuple[np.ndarray, np.ndarray]:
    n = int(grad_table.shape[0])
    if n == 4:
        idx = (h & 3).astype(np.int32)
    else:
        idx = (h % n).astype(np.int32)
    g = grad_table[idx]
    return g[..., 0], g[..., 1]
