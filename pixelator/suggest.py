# pixelator/suggest.py
from __future__ import annotations

"""
Suggest colours the current palette is missing.

Exports:
  suggest(src, existing, metric="cie76", count=5, prefer_distinct=False)
    -> list[RGBTuple], best first

Steps:
  1. sample opaque pixels on a fixed stride (about 4096 samples at most)
  2. cluster the samples (k = 128, or 256 when distinct picks are preferred)
  3. score each cluster by (distance to nearest existing colour) x members
  4. take the top scores, or pick greedily, discounting candidates that sit
     within 30 units of an earlier pick
"""

import math
from typing import List

import numpy as np

from .colour_convert import metric_distance, to_metric_space
from .constants import (
    ALPHA_CUTOFF,
    SUGGEST_CLUSTERS,
    SUGGEST_CLUSTERS_DISTINCT,
    SUGGEST_DEFAULT_COUNT,
    SUGGEST_DISTINCT_RADIUS,
    SUGGEST_MAX_SAMPLES,
)
from .core_types import InvalidConfiguration, Palette, PixelBuffer, RGBTuple
from .kmeans import cluster_colors
from .matching import PaletteMatcher
from .utils import unique_rows_with_inverse


def sample_opaque_pixels(src: PixelBuffer, max_samples: int = SUGGEST_MAX_SAMPLES) -> np.ndarray:
    """Every step-th pixel with alpha > 128, step = ceil(total / max_samples)."""
    flat = src.data.reshape(-1, 4)
    total = flat.shape[0]
    if total == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    step = max(1, math.ceil(total / max_samples))
    picked = flat[::step]
    return picked[picked[:, 3] > ALPHA_CUTOFF, :3]


def _greedy_distinct(
    coords: np.ndarray, weights: np.ndarray, count: int, metric: str
) -> List[int]:
    chosen: List[int] = []
    nearest = np.full(weights.shape[0], np.inf)
    while len(chosen) < count:
        spread = np.minimum(1.0, nearest / SUGGEST_DISTINCT_RADIUS)
        scores = weights * spread
        if chosen:
            scores[chosen] = -1.0
        best = int(np.argmax(scores))
        if scores[best] <= 0.0:
            break
        chosen.append(best)
        d = metric_distance(coords, coords[best][None, :], metric)
        nearest = np.minimum(nearest, d)
    return chosen


def suggest(
    src: PixelBuffer,
    existing: Palette,
    metric: str = "cie76",
    count: int = SUGGEST_DEFAULT_COUNT,
    prefer_distinct: bool = False,
) -> List[RGBTuple]:
    """Colours that would most reduce the image's palette error, best first."""
    if count < 1:
        raise InvalidConfiguration(f"suggestion count must be at least 1, got {count}")
    if len(existing) == 0:
        return []

    samples = sample_opaque_pixels(src)
    if samples.shape[0] == 0:
        return []

    colors, _inverse, counts = unique_rows_with_inverse(samples)
    cap = SUGGEST_CLUSTERS_DISTINCT if prefer_distinct else SUGGEST_CLUSTERS
    centroids, _labels, members = cluster_colors(colors, counts, min(cap, samples.shape[0]))

    rounded = np.rint(np.clip(centroids, 0.0, 255.0)).astype(np.uint8)
    _idx, error = PaletteMatcher(existing, metric).nearest(rounded)
    weights = error * members

    keep = weights > 0
    rounded, weights = rounded[keep], weights[keep]
    if rounded.shape[0] == 0:
        return []

    # Highest weight first; equal rounded centres collapse to their best entry.
    order = np.argsort(-weights, kind="stable")
    seen = set()
    rows: List[RGBTuple] = []
    row_weights: List[float] = []
    for i in order:
        rgb = (int(rounded[i, 0]), int(rounded[i, 1]), int(rounded[i, 2]))
        if rgb in seen:
            continue
        seen.add(rgb)
        rows.append(rgb)
        row_weights.append(float(weights[i]))

    if not prefer_distinct:
        return rows[:count]

    coords = to_metric_space(np.asarray(rows, dtype=np.float64), metric)
    picks = _greedy_distinct(coords, np.asarray(row_weights), count, metric)
    return [rows[i] for i in picks]


__all__ = ["suggest", "sample_opaque_pixels"]
