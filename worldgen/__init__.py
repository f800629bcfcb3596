from __future__ import annotations

from worldgen.biomes import (
    BIOME_PALETTE,
    Biome,
    BiomeClassifier,
    BiomeOrigin,
    BiomeSettings,
    biome_counts,
    biome_map,
    biome_origin,
    biome_rgb01,
    candidate_cells,
    classify_biome,
    nearest_origin,
)

__all__ = [
    "BIOME_PALETTE",
    "Biome",
    "BiomeClassifier",
    "BiomeOrigin",
    "BiomeSettings",
    "biome_counts",
    "biome_map",
    "biome_origin",
    "biome_rgb01",
    "candidate_cells",
    "classify_biome",
    "nearest_origin",
]
