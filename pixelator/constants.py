# pixelator/constants.py
"""
Preset palettes and tunables used across the engine.

- GEOPIXELS_PALETTE, WPLACE_PALETTE, WPLACE_FREE_PALETTE (hex, display order)
- Alpha handling, trivial-colour filtering
- Dithering, clustering, suggestion and filter defaults
"""
from __future__ import annotations

from typing import List

# ================
# Preset palettes
# ================
GEOPIXELS_PALETTE: List[str] = [
    "#FFFFFF", "#F4F59F", "#FFCA3A", "#FF9F1C", "#FF595E", "#E71D36",
    "#F3BBC2", "#FF85A1", "#BD637D", "#CDB4DB", "#6A4C93", "#4D194D",
    "#A8D0DC", "#2EC4B6", "#1A535C", "#6D9DCD", "#1982C4", "#A1C181",
    "#8AC926", "#A0A0A0", "#6B4226", "#505050", "#CFD078", "#145A7A",
    "#8B1D24", "#C07F7A", "#C49A6C", "#5B7B1C", "#000000",
]  # fmt: skip

WPLACE_PALETTE: List[str] = [
    "#000000", "#3C3C3C", "#787878", "#AAAAAA", "#D2D2D2", "#FFFFFF",
    "#600018", "#A50E1E", "#ED1C24", "#FA8072", "#E45C1A", "#FF7F27",
    "#F6AA09", "#F9DD3B", "#FFFABC", "#9C8431", "#C5AD31", "#E8D45F",
    "#4A6B3A", "#5A944A", "#84C573", "#0EB968", "#13E67B", "#87FF5E",
    "#0C816E", "#10AEA6", "#13E1BE", "#0F799F", "#60F7F2", "#BBFAF2",
    "#28509E", "#4093E4", "#7DC7FF", "#4D31B8", "#6B50F6", "#99B1FB",
    "#4A4284", "#7A71C4", "#B5AEF1", "#780C99", "#AA38B9", "#E09FF9",
    "#CB007A", "#EC1F80", "#F38DA9", "#9B5249", "#D18078", "#FAB6A4",
    "#684634", "#95682A", "#DBA463", "#7B6352", "#9C846B", "#D6B594",
    "#D18051", "#F8B277", "#FFC5A5", "#6D643F", "#948C6B", "#CDC59E",
    "#333941", "#6D758D", "#B3B9D1",
]  # fmt: skip

WPLACE_FREE_PALETTE: List[str] = [
    "#000000", "#3C3C3C", "#787878", "#D2D2D2", "#FFFFFF", "#600018",
    "#ED1C24", "#FF7F27", "#F6AA09", "#F9DD3B", "#FFFABC", "#0EB968",
    "#13E67B", "#87FF5E", "#0C816E", "#10AEA6", "#13E1BE", "#60F7F2",
    "#28509E", "#4093E4", "#6B50F6", "#99B1FB", "#780C99", "#AA38B9",
    "#E09FF9", "#CB007A", "#EC1F80", "#F38DA9", "#684634", "#95682A",
    "#F8B277",
]  # fmt: skip

# ======
# Alpha
# ======
# Pixels at or above this alpha are matched; below it they become transparent.
ALPHA_CUTOFF: int = 128

# ==========================
# Trivial-colour filtering
# ==========================
# Palette entries used by less than this share (percent) of the previous result are skipped.
TRIVIAL_COLOR_PERCENT: float = 0.1

# ==========
# Dithering
# ==========
# Peak-to-peak amplitude (8-bit units) of ordered-dither nudges at strength 100.
ORDERED_BASE_AMPLITUDE: float = 64.0

# ===========
# Resampling
# ===========
LANCZOS_LOBES: int = 3

# ===========
# Clustering
# ===========
KMEANS_MAX_ITERATIONS: int = 20

# ============
# Suggestions
# ============
SUGGEST_MAX_SAMPLES: int = 4096
SUGGEST_CLUSTERS: int = 128
SUGGEST_CLUSTERS_DISTINCT: int = 256
# Suggestions closer than this (metric units) to an earlier pick are penalised.
SUGGEST_DISTINCT_RADIUS: float = 30.0
SUGGEST_DEFAULT_COUNT: int = 5

# ==================
# Windowed filters
# ==================
MEDIAN_MAX_RADIUS: int = 10
BILATERAL_MAX_RADIUS: int = 12
KUWAHARA_MAX_RADIUS: int = 14
# Upper bound on gathered window samples per block (controls peak memory).
FILTER_BLOCK_SAMPLES: int = 8_000_000

__all__ = [
    "GEOPIXELS_PALETTE",
    "WPLACE_PALETTE",
    "WPLACE_FREE_PALETTE",
    "ALPHA_CUTOFF",
    "TRIVIAL_COLOR_PERCENT",
    "ORDERED_BASE_AMPLITUDE",
    "LANCZOS_LOBES",
    "KMEANS_MAX_ITERATIONS",
    "SUGGEST_MAX_SAMPLES",
    "SUGGEST_CLUSTERS",
    "SUGGEST_CLUSTERS_DISTINCT",
    "SUGGEST_DISTINCT_RADIUS",
    "SUGGEST_DEFAULT_COUNT",
    "MEDIAN_MAX_RADIUS",
    "BILATERAL_MAX_RADIUS",
    "KUWAHARA_MAX_RADIUS",
    "FILTER_BLOCK_SAMPLES",
]
