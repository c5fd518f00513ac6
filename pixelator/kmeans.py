# pixelator/kmeans.py
from __future__ import annotations

"""
Deterministic k-means colour clustering in RGB.

Exports:
  cluster(src, k, max_iterations=20, alpha_cutoff=128) -> Palette
  cluster_colors(colors, weights, k, max_iterations=20)
    -> (centroids[k,3] float64, assignment[N] int, cluster_weights[k])

Clustering runs over distinct colours weighted by pixel count, which gives the
same assignment as clustering every pixel. Seeds are taken at evenly spaced
positions of the colours sorted by luma, so repeated runs agree exactly.
"""

from typing import List, Tuple

import numpy as np

from .constants import ALPHA_CUTOFF, FILTER_BLOCK_SAMPLES, KMEANS_MAX_ITERATIONS
from .core_types import InvalidConfiguration, Palette, PixelBuffer
from .utils import luma, split_rows_into_parts, unique_visible_rgb


def _sq_dist(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    diff = a[:, None, :] - b[None, :, :]
    return np.sum(diff * diff, axis=2)


def _assign(colors: np.ndarray, centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Nearest centroid per colour (first on ties) and its squared distance."""
    n, k = colors.shape[0], centroids.shape[0]
    labels = np.empty(n, dtype=np.int64)
    best = np.empty(n, dtype=np.float64)
    rows = max(1, FILTER_BLOCK_SAMPLES // max(1, k * 3))
    for start, end in split_rows_into_parts(n, rows):
        d2 = _sq_dist(colors[start:end], centroids)
        labels[start:end] = np.argmin(d2, axis=1)
        best[start:end] = d2[np.arange(end - start), labels[start:end]]
    return labels, best


def _initial_centroids(colors: np.ndarray, k: int) -> np.ndarray:
    order = np.lexsort((colors[:, 2], colors[:, 1], colors[:, 0], luma(colors)))
    picks = (np.arange(k) * colors.shape[0]) // k
    return colors[order[picks]].astype(np.float64)


def cluster_colors(
    colors: np.ndarray,
    weights: np.ndarray,
    k: int,
    max_iterations: int = KMEANS_MAX_ITERATIONS,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Weighted Lloyd iterations over distinct RGB rows.

    Args:
      colors: distinct colours [N,3]
      weights: pixel count per colour [N]
      k: requested clusters; clamped to N
    Returns:
      centroids [k,3] float64, assignment [N], summed weight per cluster [k]
    """
    if k < 1:
        raise InvalidConfiguration(f"cluster count must be at least 1, got {k}")
    colors_f = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    w = np.asarray(weights, dtype=np.float64).reshape(-1)
    n = colors_f.shape[0]
    if n == 0:
        empty = np.zeros((0,), dtype=np.int64)
        return np.zeros((0, 3), dtype=np.float64), empty, np.zeros((0,), dtype=np.float64)

    k = min(k, n)
    centroids = _initial_centroids(colors_f, k)
    labels, d2 = _assign(colors_f, centroids)

    for _ in range(max_iterations):
        totals = np.bincount(labels, weights=w, minlength=k)
        sums = np.stack(
            [np.bincount(labels, weights=w * colors_f[:, c], minlength=k) for c in range(3)],
            axis=1,
        )
        filled = totals > 0
        centroids = np.where(
            filled[:, None], sums / np.where(filled, totals, 1.0)[:, None], centroids
        )

        # Empty clusters take the colours worst served by their centroid.
        if not np.all(filled):
            order = np.argsort(-d2, kind="stable")
            taken = 0
            for j in np.flatnonzero(~filled):
                centroids[j] = colors_f[order[taken]]
                taken += 1

        new_labels, d2 = _assign(colors_f, centroids)
        stable = np.array_equal(new_labels, labels)
        labels = new_labels
        if stable:
            break

    cluster_weights = np.bincount(labels, weights=w, minlength=k)
    return centroids, labels, cluster_weights


def _round_unique(centroids: np.ndarray, colors: np.ndarray) -> List[Tuple[int, int, int]]:
    """
    Round centroids; a centroid that collides with an earlier one is replaced
    by the unused image colour farthest from everything chosen so far.
    """
    rounded = np.rint(np.clip(centroids, 0.0, 255.0)).astype(np.int64)
    chosen: List[Tuple[int, int, int]] = []
    seen = set()
    dup_slots: List[int] = []
    for i, row in enumerate(rounded):
        rgb = (int(row[0]), int(row[1]), int(row[2]))
        if rgb in seen:
            dup_slots.append(i)
            chosen.append(rgb)
            continue
        seen.add(rgb)
        chosen.append(rgb)

    if not dup_slots:
        return chosen

    pool = np.asarray(
        [c for c in map(tuple, colors.astype(np.int64).tolist()) if c not in seen],
        dtype=np.float64,
    ).reshape(-1, 3)
    picked = np.asarray(sorted(seen), dtype=np.float64).reshape(-1, 3)
    nearest = _sq_dist(pool, picked).min(axis=1)
    for slot in dup_slots:
        idx = int(np.argmax(nearest))
        rgb = (int(pool[idx, 0]), int(pool[idx, 1]), int(pool[idx, 2]))
        chosen[slot] = rgb
        seen.add(rgb)
        nearest = np.minimum(nearest, _sq_dist(pool, pool[idx : idx + 1])[:, 0])
        nearest[idx] = -1.0
    return chosen


def cluster(
    src: PixelBuffer,
    k: int,
    *,
    max_iterations: int = KMEANS_MAX_ITERATIONS,
    alpha_cutoff: int = ALPHA_CUTOFF,
) -> Palette:
    """
    Palette of min(k, distinct colours) cluster centres over pixels with
    alpha >= alpha_cutoff. Empty when no pixel qualifies.
    """
    if k < 1:
        raise InvalidConfiguration(f"cluster count must be at least 1, got {k}")
    colors, counts = unique_visible_rgb(src.rgb, src.alpha, min_alpha=alpha_cutoff)
    if colors.shape[0] == 0:
        return Palette()
    centroids, _labels, _weights = cluster_colors(colors, counts, k, max_iterations)
    return Palette(tuple(_round_unique(centroids, colors)))


__all__ = ["cluster", "cluster_colors"]
