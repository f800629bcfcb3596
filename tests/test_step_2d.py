import plotly.graph_objects as go

from perlin.noise_2d import Perlin2D
from viz.step_2d import (
    biome_candidates_figure,
    perlin2d_cell_figure,
    scanline_figure,
    scanline_series_from_debug,
)
from worldgen.biomes import BiomeClassifier


def test_cell_figure_has_gradient_arrows():
    dbg = Perlin2D(seed=0).debug_point(2.25, 3.75)
    fig = perlin2d_cell_figure(dbg)
    assert isinstance(fig, go.Figure)
    assert len(fig.layout.annotations) == 4


def test_scanline_figure_traces():
    dbg = Perlin2D(seed=0).debug_point(0.4, 0.9)
    fig = scanline_figure(scanline_series_from_debug(dbg, steps=32))
    assert len(fig.data) == 1
    assert len(fig.data[0].x) == 32


def test_biome_candidates_figure_names_winner():
    clf = BiomeClassifier()
    fig = biome_candidates_figure(clf, 150.0, 275.0)
    winner = clf.classify(150.0, 275.0)
    assert winner.name in fig.layout.title.text
    # Four distinct cells: a marker and a link line each, plus the query path.
    assert len(fig.data) == 9


def test_biome_candidates_figure_on_grid_line_dedupes_cells():
    fig = biome_candidates_figure(BiomeClassifier(), 200.0, 50.0)
    assert len(fig.data) == 5
