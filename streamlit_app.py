from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from perlin.core import GRAD2_SETS
from perlin.map2d import noise_map_2d, sample_bounds
from perlin.noise_2d import NoiseGenerator, fractal_octaves
from ui.styles import inject_global_styles
from viz.export import array_to_png_bytes, rgb01_to_png_bytes
from viz.step_2d import (
    biome_candidates_figure,
    perlin2d_cell_figure,
    scanline_figure,
    scanline_series_from_debug,
)
from worldgen.biomes import (
    BIOME_PALETTE,
    BiomeClassifier,
    BiomeSettings,
    biome_counts,
    biome_map,
    biome_rgb01,
)

st.set_page_config(
    page_title="Perlin Biome Map",
    page_icon="~",
    layout="wide",
)

inject_global_styles()


@st.cache_data(show_spinner=False)
def _noise_map(
    *,
    seed: int,
    grad_set: str,
    frequency: float,
    octaves: int,
    lacunarity: float,
    persistence: float,
    width: int,
    height: int,
    offset_x: float,
    offset_y: float,
) -> tuple[np.ndarray, float]:
    gen = NoiseGenerator(
        fractal_octaves(
            frequency,
            count=octaves,
            lacunarity=lacunarity,
            persistence=persistence,
        ),
        seed=seed,
        grad_set=grad_set,
    )
    z = noise_map_2d(
        gen,
        width=width,
        height=height,
        offset_x=offset_x,
        offset_y=offset_y,
    )
    return z, gen.bound


@st.cache_data(show_spinner=False)
def _biome_map(
    *,
    seed: int,
    separation: float,
    noise_effect: float,
    frequency: float,
    octaves: int,
    width: int,
    height: int,
    offset_x: float,
    offset_y: float,
) -> np.ndarray:
    return biome_map(
        _classifier(
            seed=seed,
            separation=separation,
            noise_effect=noise_effect,
            frequency=frequency,
            octaves=octaves,
        ),
        width=width,
        height=height,
        offset_x=offset_x,
        offset_y=offset_y,
    )


def _classifier(
    *, seed: int, separation: float, noise_effect: float, frequency: float, octaves: int
) -> BiomeClassifier:
    oct_list = fractal_octaves(frequency, count=octaves)
    return BiomeClassifier(
        BiomeSettings(
            seed=seed,
            separation=separation,
            noise_effect=noise_effect,
            x_octaves=oct_list,
            y_octaves=oct_list,
        )
    )


st.markdown(
    """
    <div class="pn-header">
      <div class="pn-title">Perlin Biome Map</div>
      <div class="pn-subtitle">
        Gradient noise, octave stacks and noise-distorted biome cells.
      </div>
    </div>
    """,
    unsafe_allow_html=True,
)

with st.sidebar:
    st.header("Noise")
    seed = int(st.number_input("Seed", min_value=0, max_value=2**31 - 1, value=2023))
    grad_set = st.selectbox("Gradient set", list(GRAD2_SETS), index=0)
    frequency = 1.0 / st.slider("Base wavelength (px)", 10.0, 400.0, 80.0, 5.0)
    octaves = st.slider("Octaves", 1, 8, 3)
    lacunarity = st.slider("Lacunarity", 1.0, 4.0, 2.0, 0.05)
    persistence = st.slider("Persistence", 0.05, 1.0, 0.5, 0.05)

    st.divider()
    st.header("Biomes")
    separation = st.slider("Cell separation (px)", 20.0, 400.0, 100.0, 5.0)
    noise_effect = st.slider("Noise effect (px)", 0.0, 200.0, 40.0, 1.0)

    st.divider()
    st.header("View")
    width = st.slider("Width", 64, 1024, 512, 32)
    height = st.slider("Height", 64, 1024, 512, 32)
    offset_x = st.number_input("Offset x", value=0.0, step=50.0)
    offset_y = st.number_input("Offset y", value=0.0, step=50.0)

tab_noise, tab_biomes, tab_learn = st.tabs(["Noise", "Biomes", "Learn"])

with tab_noise:
    z, bound = _noise_map(
        seed=seed,
        grad_set=str(grad_set),
        frequency=float(frequency),
        octaves=int(octaves),
        lacunarity=float(lacunarity),
        persistence=float(persistence),
        width=int(width),
        height=int(height),
        offset_x=float(offset_x),
        offset_y=float(offset_y),
    )
    zmin = float(np.min(z))
    zmax = float(np.max(z))
    cols = st.columns(3)
    cols[0].metric("min", f"{zmin:.4f}")
    cols[1].metric("max", f"{zmax:.4f}")
    cols[2].metric("theoretical bound", f"±{bound:.4f}")

    fig = go.Figure(go.Heatmap(z=z, colorscale="Greys", showscale=True))
    fig.update_layout(height=560, margin=dict(l=0, r=0, t=0, b=0))
    fig.update_yaxes(autorange="reversed", scaleanchor="x", visible=False)
    fig.update_xaxes(visible=False)
    st.plotly_chart(fig, use_container_width=True)

    if zmax > zmin:
        st.download_button(
            "Download PNG",
            data=array_to_png_bytes(z),
            file_name=f"noise_{seed}.png",
            mime="image/png",
        )
    else:
        st.info("Flat field: nothing to normalize (all amplitudes are zero).")

with tab_biomes:
    idx = _biome_map(
        seed=seed,
        separation=float(separation),
        noise_effect=float(noise_effect),
        frequency=float(frequency),
        octaves=int(octaves),
        width=int(width),
        height=int(height),
        offset_x=float(offset_x),
        offset_y=float(offset_y),
    )
    rgb = biome_rgb01(idx)
    st.image(rgb, clamp=True, use_container_width=True)

    counts = biome_counts(idx)
    total = max(sum(counts.values()), 1)
    st.dataframe(
        {
            "biome": [b.name for b in BIOME_PALETTE],
            "pixels": [counts[b.name] for b in BIOME_PALETTE],
            "share": [round(counts[b.name] / total, 4) for b in BIOME_PALETTE],
        },
        hide_index=True,
    )
    st.download_button(
        "Download PNG",
        data=rgb01_to_png_bytes(rgb),
        file_name=f"biomes_{seed}.png",
        mime="image/png",
    )

with tab_learn:
    left, right = st.columns(2)
    with left:
        st.subheader("One noise cell")
        px = st.number_input("x (lattice units)", value=2.25, step=0.05)
        py = st.number_input("y (lattice units)", value=3.75, step=0.05)
        basis = NoiseGenerator([(1.0, 1.0)], seed=seed, grad_set=str(grad_set)).basis
        dbg = basis.debug_point(float(px), float(py))
        st.plotly_chart(perlin2d_cell_figure(dbg), use_container_width=True)
        st.plotly_chart(
            scanline_figure(scanline_series_from_debug(dbg)),
            use_container_width=True,
        )
        with st.expander("Breakdown"):
            st.json(dbg)
    with right:
        st.subheader("One biome classification")
        bx = st.number_input("x (px)", value=float(separation) / 2.0, step=5.0)
        by = st.number_input("y (px)", value=float(separation) / 2.0, step=5.0)
        clf = _classifier(
            seed=seed,
            separation=float(separation),
            noise_effect=float(noise_effect),
            frequency=float(frequency),
            octaves=int(octaves),
        )
        st.plotly_chart(
            biome_candidates_figure(clf, float(bx), float(by)),
            use_container_width=True,
        )
        if st.button("Scan single-octave bounds (512 x 512 lattice samples)"):
            lo, hi = sample_bounds(basis, width=512, height=512, step=0.37)
            st.write(f"min={lo:.6f} max={hi:.6f} (bound ±{basis.bound:.6f})")
