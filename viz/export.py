from __future__ import annotations

import io

import numpy as np
from PIL import Image

from perlin.map2d import normalize01


def array_to_png_bytes(z: np.ndarray) -> bytes:
    """Encode a raw noise field as an 8-bit grayscale PNG.

    Values are min/max normalized to [0, 255] over the array itself; a flat
    array raises ValueError (see `normalize01`).
    """

    z = np.asarray(z, dtype=np.float64)
    if z.ndim != 2:
        raise ValueError("expected a 2D array")

    img = np.clip(normalize01(z) * 255.0, 0.0, 255.0).astype(np.uint8)
    out = io.BytesIO()
    Image.fromarray(img).save(out, format="PNG")
    return out.getvalue()


def rgb01_to_png_bytes(rgb01: np.ndarray) -> bytes:
    """Encode an HxWx3 float image in [0, 1] (e.g. a biome map) as PNG."""

    rgb = np.asarray(rgb01, dtype=np.float64)
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError("rgb01 must be HxWx3")

    img = np.clip(np.rint(rgb * 255.0), 0.0, 255.0).astype(np.uint8)
    out = io.BytesIO()
    Image.fromarray(img).save(out, format="PNG")
    return out.getvalue()
