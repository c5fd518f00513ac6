# pixelator/preprocess.py
from __future__ import annotations

"""
Edge-preserving smoothing run before resampling.

Exports:
  PREPROCESSING_METHODS
  preprocess(src, method, strength)
  median_filter(src, strength)
  bilateral_filter(src, strength)
  kuwahara_filter(src, strength)

Shared rules for the three filters:
  - pixels with alpha 0 are copied unchanged and never act as neighbours
  - neighbours outside the image are excluded (no edge clamping)
  - alpha is never modified
"""

import math
from typing import Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .constants import (
    BILATERAL_MAX_RADIUS,
    FILTER_BLOCK_SAMPLES,
    KUWAHARA_MAX_RADIUS,
    MEDIAN_MAX_RADIUS,
)
from .core_types import InvalidConfiguration, PixelBuffer
from .utils import split_rows_into_parts, summed_area_table, window_sums

PREPROCESSING_METHODS: Tuple[str, ...] = ("none", "median", "bilateral", "kuwahara")


def _radius(strength: float, max_radius: int, min_radius: int) -> int:
    return max(min_radius, int(math.floor(strength / 100.0 * max_radius)))


def _with_rgb(src: PixelBuffer, rgb: np.ndarray, keep: np.ndarray) -> PixelBuffer:
    """Copy of src whose RGB is replaced by `rgb` wherever `keep` is False."""
    out = src.data.copy()
    new_rgb = np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)
    out[..., :3] = np.where(keep[..., None], src.rgb, new_rgb)
    return PixelBuffer(src.width, src.height, out)


# Median


def median_filter(src: PixelBuffer, strength: float) -> PixelBuffer:
    """Per-channel median over a (2r+1)^2 window; upper middle on even counts."""
    radius = _radius(strength, MEDIAN_MAX_RADIUS, 1)
    height, width = src.height, src.width
    valid = src.alpha > 0
    if height == 0 or width == 0 or not np.any(valid):
        return src.copy()

    vals = np.where(valid[..., None], src.rgb.astype(np.float64), np.nan)
    padded = np.pad(
        vals, ((radius, radius), (radius, radius), (0, 0)), constant_values=np.nan
    )
    side = 2 * radius + 1
    # (H, W, 3, side, side)
    windows = sliding_window_view(padded, (side, side), axis=(0, 1))

    rows_per_block = max(1, FILTER_BLOCK_SAMPLES // max(1, width * 3 * side * side))
    result = np.zeros((height, width, 3), dtype=np.float64)
    for y0, y1 in split_rows_into_parts(height, rows_per_block):
        block = windows[y0:y1].reshape(y1 - y0, width, 3, side * side)
        # NaN sorts last, so the first n entries are the valid samples.
        ordered = np.sort(block, axis=-1)
        n_valid = np.sum(~np.isnan(block[:, :, 0, :]), axis=-1)
        pick = np.broadcast_to((n_valid // 2)[:, :, None, None], (y1 - y0, width, 3, 1))
        picked = np.take_along_axis(ordered, pick, axis=-1)[..., 0]
        result[y0:y1] = np.nan_to_num(picked, nan=0.0)

    return _with_rgb(src, result, ~valid)


# Bilateral


def bilateral_filter(src: PixelBuffer, strength: float) -> PixelBuffer:
    """
    Gaussian spatial weight times a Gaussian on the L1 RGB difference.
    sigma_s = r / 2, sigma_c = 30 + 1.5 * strength.
    """
    radius = _radius(strength, BILATERAL_MAX_RADIUS, 2)
    sigma_s = radius / 2.0
    sigma_c = 30.0 + 1.5 * strength
    height, width = src.height, src.width
    valid = src.alpha > 0
    if height == 0 or width == 0 or not np.any(valid):
        return src.copy()

    rgb = src.rgb.astype(np.float64)
    pad = ((radius, radius), (radius, radius))
    rgb_pad = np.pad(rgb, pad + ((0, 0),))
    valid_pad = np.pad(valid, pad, constant_values=False)

    offsets = np.arange(-radius, radius + 1)
    spatial = np.exp(-(offsets * offsets) / (2.0 * sigma_s * sigma_s))
    color_coeff = -1.0 / (2.0 * sigma_c * sigma_c)

    acc = np.zeros_like(rgb)
    acc_w = np.zeros((height, width), dtype=np.float64)
    for iy, dy in enumerate(offsets):
        ys = slice(radius + dy, radius + dy + height)
        for ix, dx in enumerate(offsets):
            xs = slice(radius + dx, radius + dx + width)
            nb = rgb_pad[ys, xs]
            dist = np.abs(nb - rgb).sum(axis=-1)
            weight = spatial[iy] * spatial[ix] * np.exp(dist * dist * color_coeff)
            weight = np.where(valid_pad[ys, xs], weight, 0.0)
            acc += nb * weight[..., None]
            acc_w += weight

    safe = np.where(acc_w > 0.0, acc_w, 1.0)[..., None]
    return _with_rgb(src, acc / safe, ~valid)


# Kuwahara


def kuwahara_filter(src: PixelBuffer, strength: float) -> PixelBuffer:
    """
    Mean of the lowest-variance quadrant among TL, TR, BL, BR.

    Each quadrant is (r+1) x (r+1) and shares the centre row and column.
    Variance is summed over channels; ties keep the earlier quadrant.
    """
    radius = _radius(strength, KUWAHARA_MAX_RADIUS, 2)
    height, width = src.height, src.width
    valid = src.alpha > 0
    if height == 0 or width == 0 or not np.any(valid):
        return src.copy()

    vmask = valid.astype(np.float64)
    rgb = src.rgb.astype(np.float64) * vmask[..., None]
    sat_count = summed_area_table(vmask)
    sat_sum = summed_area_table(rgb)
    sat_sq = summed_area_table(rgb * rgb)

    ys = np.arange(height)[:, None]
    xs = np.arange(width)[None, :]
    top = np.clip(ys - radius, 0, height - 1)
    bottom = np.clip(ys + radius, 0, height - 1)
    left = np.clip(xs - radius, 0, width - 1)
    right = np.clip(xs + radius, 0, width - 1)

    # (y1, y2, x1, x2) per quadrant, in tie-break order.
    quadrants = (
        (top, ys, left, xs),  # TL
        (top, ys, xs, right),  # TR
        (ys, bottom, left, xs),  # BL
        (ys, bottom, xs, right),  # BR
    )

    means = np.zeros((4, height, width, 3), dtype=np.float64)
    variances = np.full((4, height, width), np.inf, dtype=np.float64)
    for q, (y1, y2, x1, x2) in enumerate(quadrants):
        count = window_sums(sat_count, y1, y2, x1, x2)
        sums = window_sums(sat_sum, y1, y2, x1, x2)
        sq = window_sums(sat_sq, y1, y2, x1, x2)
        has = count > 0
        n = np.where(has, count, 1.0)[..., None]
        mean = sums / n
        var = (sq / n).sum(axis=-1) - (mean * mean).sum(axis=-1)
        means[q] = mean
        variances[q] = np.where(has, var, np.inf)

    best = np.argmin(variances, axis=0)
    chosen = np.take_along_axis(means, best[None, :, :, None], axis=0)[0]
    return _with_rgb(src, chosen, ~valid)


def preprocess(src: PixelBuffer, method: str = "none", strength: float = 50) -> PixelBuffer:
    """Dispatch to one smoothing filter. 'none' returns a copy."""
    if method not in PREPROCESSING_METHODS:
        raise InvalidConfiguration(f"unknown preprocessing method {method!r}")
    if not 0 <= strength <= 100:
        raise InvalidConfiguration(
            f"preprocessing strength must be within 0..100, got {strength}"
        )
    if method == "median":
        return median_filter(src, strength)
    if method == "bilateral":
        return bilateral_filter(src, strength)
    if method == "kuwahara":
        return kuwahara_filter(src, strength)
    return src.copy()


__all__ = [
    "PREPROCESSING_METHODS",
    "preprocess",
    "median_filter",
    "bilateral_filter",
    "kuwahara_filter",
]
