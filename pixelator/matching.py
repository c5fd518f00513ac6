# pixelator/matching.py
from __future__ import annotations

"""
Nearest-palette lookup under a chosen colour metric.

Exports:
  PaletteMatcher(palette, metric)
    .nearest(rgb_rows)            -> (indices[N], distances[N])
    .nearest_by_uniques(rgb_rows) -> (indices[N], distances[N])
    .nearest_one(r, g, b)         -> (index, distance), cached per colour
    .colour_rows(indices)         -> uint8 [N,3]
  snap_buffer(src, matcher, alpha_cutoff=128) -> PixelBuffer

Ties always resolve to the earliest palette index.
"""

from typing import Dict, Tuple

import numpy as np
from numpy.typing import NDArray

from .colour_convert import metric_distance, to_metric_space
from .constants import ALPHA_CUTOFF, FILTER_BLOCK_SAMPLES
from .core_types import EmptyPaletteError, Palette, PixelBuffer
from .utils import split_rows_into_parts, unique_rows_with_inverse


class PaletteMatcher:
    """Palette coordinates precomputed once per (palette, metric)."""

    def __init__(self, palette: Palette, metric: str) -> None:
        if len(palette) == 0:
            raise EmptyPaletteError("cannot match colours against an empty palette")
        self.palette = palette
        self.metric = metric
        self.rgb: NDArray[np.uint8] = palette.rgb_array()
        self.coords = to_metric_space(self.rgb, metric)
        self._cache: Dict[int, Tuple[int, float]] = {}

    def __len__(self) -> int:
        return len(self.palette)

    def nearest(self, rgb_rows: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorised nearest entry for [N,3] RGB rows (0..255)."""
        rows = np.asarray(rgb_rows, dtype=np.float64).reshape(-1, 3)
        n = rows.shape[0]
        indices = np.zeros(n, dtype=np.int64)
        dists = np.zeros(n, dtype=np.float64)
        block = max(1, FILTER_BLOCK_SAMPLES // max(1, 3 * len(self.palette)))
        for start, end in split_rows_into_parts(n, block):
            pts = to_metric_space(rows[start:end], self.metric)
            d = metric_distance(pts[:, None, :], self.coords[None, :, :], self.metric)
            best = np.argmin(d, axis=1)
            indices[start:end] = best
            dists[start:end] = d[np.arange(end - start), best]
        return indices, dists

    def nearest_by_uniques(self, rgb_rows: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Same as nearest(), computed once per distinct row."""
        rows = np.asarray(rgb_rows).reshape(-1, 3)
        uniques, inverse, _counts = unique_rows_with_inverse(rows)
        u_idx, u_dist = self.nearest(uniques)
        return u_idx[inverse], u_dist[inverse]

    def nearest_one(self, r: int, g: int, b: int) -> Tuple[int, float]:
        key = (r << 16) | (g << 8) | b
        hit = self._cache.get(key)
        if hit is not None:
            return hit
        pt = to_metric_space(np.array([r, g, b], dtype=np.float64), self.metric)
        d = metric_distance(pt[None, :], self.coords, self.metric)
        best = int(np.argmin(d))
        hit = (best, float(d[best]))
        self._cache[key] = hit
        return hit

    def colour_rows(self, indices: np.ndarray) -> NDArray[np.uint8]:
        return self.rgb[np.asarray(indices, dtype=np.int64)]


def snap_buffer(
    src: PixelBuffer, matcher: PaletteMatcher, alpha_cutoff: int = ALPHA_CUTOFF
) -> PixelBuffer:
    """
    Plain nearest mapping. Pixels with alpha >= cutoff take a palette colour
    and alpha 255; the rest get alpha 0 and keep their RGB bytes.
    """
    out = src.data.copy()
    opaque = src.alpha >= alpha_cutoff
    if np.any(opaque):
        idx, _dist = matcher.nearest_by_uniques(src.rgb[opaque])
        out[..., :3][opaque] = matcher.colour_rows(idx)
    out[..., 3] = np.where(opaque, 255, 0).astype(np.uint8)
    return PixelBuffer(src.width, src.height, out)


__all__ = ["PaletteMatcher", "snap_buffer"]
