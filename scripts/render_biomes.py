from __future__ import annotations

import logging
import sys
from pathlib import Path

log = logging.getLogger("render_biomes")


def main() -> None:
    """Render the default noise field and biome map to assets/.

    Usage: python scripts/render_biomes.py [out_dir]
    """

    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))

    from perlin.map2d import noise_map_2d
    from viz.export import array_to_png_bytes, rgb01_to_png_bytes
    from worldgen.biomes import BiomeClassifier, biome_counts, biome_map, biome_rgb01

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else root / "assets"
    out_dir.mkdir(parents=True, exist_ok=True)

    params = dict(width=1024, height=1024, step=1.0, offset_x=0.0, offset_y=0.0)
    clf = BiomeClassifier()

    z = noise_map_2d(clf.x_noise, **params)
    noise_path = out_dir / "noise_x.png"
    noise_path.write_bytes(array_to_png_bytes(z))
    log.info("wrote %s (raw range [%.4f, %.4f])", noise_path, z.min(), z.max())

    idx = biome_map(clf, **params)
    biome_path = out_dir / "biomes.png"
    biome_path.write_bytes(rgb01_to_png_bytes(biome_rgb01(idx, clf.settings.palette)))
    log.info("wrote %s %s", biome_path, biome_counts(idx, clf.settings.palette))


if __name__ == "__main__":
    main()
