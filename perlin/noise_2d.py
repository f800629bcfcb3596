from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple, Union

import numpy as np

from .core import (
    DEFAULT_SEED,
    Corner2D,
    check_finite,
    fade,
    grad2_bound,
    grad2_from_hash,
    grad2_table,
    lerp,
    make_permutation,
    wrap256,
)


class Noise2D(Protocol):
    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:  # pragma: no cover
        ...


class Perlin2D:
    """Single-octave 2D gradient noise over an explicit permutation table."""

    def __init__(
        self,
        *,
        perm: np.ndarray | None = None,
        seed: int = DEFAULT_SEED,
        grad_set: str = "diag4",
    ):
        self.seed = int(seed)
        self.perm = make_permutation(self.seed) if perm is None else np.asarray(perm)
        if self.perm.shape != (512,):
            raise ValueError("permutation table must have 512 entries")
        self.grad_set = str(grad_set)
        self.grad_table = grad2_table(self.grad_set)

    @property
    def bound(self) -> float:
        return grad2_bound(self.grad_set)

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        check_finite(x, y)

        x0 = np.floor(x)
        y0 = np.floor(y)
        xi0 = wrap256(x0)
        yi0 = wrap256(y0)
        xi1 = xi0 + 1
        yi1 = yi0 + 1

        xf = x - x0
        yf = y - y0
        u = fade(xf)
        v = fade(yf)

        p = self.perm
        aa = p[p[xi0] + yi0]
        ab = p[p[xi0] + yi1]
        ba = p[p[xi1] + yi0]
        bb = p[p[xi1] + yi1]

        gxaa, gyaa = grad2_from_hash(aa, grad_table=self.grad_table)
        gxab, gyab = grad2_from_hash(ab, grad_table=self.grad_table)
        gxba, gyba = grad2_from_hash(ba, grad_table=self.grad_table)
        gxbb, gybb = grad2_from_hash(bb, grad_table=self.grad_table)

        x1 = xf - 1.0
        y1 = yf - 1.0

        d00 = gxaa * xf + gyaa * yf
        d01 = gxab * xf + gyab * y1
        d10 = gxba * x1 + gyba * yf
        d11 = gxbb * x1 + gybb * y1

        x_lerp0 = lerp(d00, d10, u)
        x_lerp1 = lerp(d01, d11, u)
        return lerp(x_lerp0, x_lerp1, v)

    def evaluate(self, x: float, y: float) -> float:
        return float(self.noise(np.float64(x), np.float64(y)))

    def debug_point(self, x: float, y: float) -> dict:
        # Scalar breakdown for the explorer's cell view.
        xf = float(x)
        yf = float(y)
        check_finite(np.array([xf, yf]))
        xi0 = int(wrap256(np.floor(np.float64(xf))))
        yi0 = int(wrap256(np.floor(np.float64(yf))))
        xi1 = xi0 + 1
        yi1 = yi0 + 1

        xrel = xf - math.floor(xf)
        yrel = yf - math.floor(yf)

        u = float(fade(np.float64(xrel)))
        v = float(fade(np.float64(yrel)))

        p = self.perm
        aa = int(p[p[xi0] + yi0])
        ab = int(p[p[xi0] + yi1])
        ba = int(p[p[xi1] + yi0])
        bb = int(p[p[xi1] + yi1])

        def corner(h: int, dx: float, dy: float) -> Corner2D:
            gx, gy = grad2_from_hash(np.int32(h), grad_table=self.grad_table)
            gx = float(gx)
            gy = float(gy)
            return Corner2D(gx=gx, gy=gy, dx=dx, dy=dy, dot=(gx * dx + gy * dy))

        c00 = corner(aa, xrel, yrel)
        c10 = corner(ba, xrel - 1.0, yrel)
        c01 = corner(ab, xrel, yrel - 1.0)
        c11 = corner(bb, xrel - 1.0, yrel - 1.0)

        x_lerp0 = float(lerp(c00.dot, c10.dot, u))
        x_lerp1 = float(lerp(c01.dot, c11.dot, u))
        n = float(lerp(x_lerp0, x_lerp1, v))

        return {
            "seed": self.seed,
            "grad_set": self.grad_set,
            "input": {"x": xf, "y": yf},
            "cell": {"xi0": xi0, "yi0": yi0, "xi1": xi1, "yi1": yi1},
            "relative": {"xf": xrel, "yf": yrel},
            "fade": {"u": u, "v": v},
            "hash": {"aa": aa, "ab": ab, "ba": ba, "bb": bb},
            "corners": {
                "c00": c00.__dict__,
                "c10": c10.__dict__,
                "c01": c01.__dict__,
                "c11": c11.__dict__,
            },
            "interpolation": {"x_lerp0": x_lerp0, "x_lerp1": x_lerp1},
            "noise": n,
        }


@dataclass(frozen=True)
class Octave:
    frequency: float
    amplitude: float

    def __post_init__(self) -> None:
        f = float(self.frequency)
        a = float(self.amplitude)
        if not math.isfinite(f) or f <= 0.0:
            raise ValueError("octave frequency must be > 0")
        if not math.isfinite(a) or a < 0.0:
            raise ValueError("octave amplitude must be >= 0")
        object.__setattr__(self, "frequency", f)
        object.__setattr__(self, "amplitude", a)


OctaveLike = Union[Octave, Tuple[float, float]]


def fractal_octaves(
    frequency: float,
    amplitude: float = 1.0,
    *,
    count: int = 4,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
) -> tuple[Octave, ...]:
    """Classic fractal octave list: each octave scales frequency by
    `lacunarity` and amplitude by `persistence`."""

    count = int(count)
    if count < 1:
        raise ValueError("count must be >= 1")

    freq = float(frequency)
    amp = float(amplitude)
    out: list[Octave] = []
    for _ in range(count):
        out.append(Octave(freq, amp))
        freq *= float(lacunarity)
        amp *= float(persistence)
    return tuple(out)


class NoiseGenerator:
    """Sum of gradient-noise octaves sharing one permutation table.

    The output is not normalized: its range is bounded by `bound`, the sum of
    the amplitudes times the single-octave bound of the gradient set.
    """

    def __init__(
        self,
        octaves: Iterable[OctaveLike],
        *,
        perm: np.ndarray | None = None,
        seed: int = DEFAULT_SEED,
        grad_set: str = "diag4",
    ):
        self.octaves = tuple(
            o if isinstance(o, Octave) else Octave(*o) for o in octaves
        )
        if not self.octaves:
            raise ValueError("at least one octave is required")
        self.basis = Perlin2D(perm=perm, seed=seed, grad_set=grad_set)

    @property
    def perm(self) -> np.ndarray:
        return self.basis.perm

    @property
    def amplitude_sum(self) -> float:
        return float(sum(o.amplitude for o in self.octaves))

    @property
    def bound(self) -> float:
        return self.amplitude_sum * self.basis.bound

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
        for o in self.octaves:
            total += self.basis.noise(x * o.frequency, y * o.frequency) * o.amplitude
        return total

    def evaluate(self, x: float, y: float) -> float:
        return float(self.noise(np.float64(x), np.float64(y)))

    def __repr__(self) -> str:
        pairs = ", ".join(f"({o.frequency:g}, {o.amplitude:g})" for o in self.octaves)
        return f"NoiseGenerator([{pairs}], grad_set={self.basis.grad_set!r})"
