# pixelator/quantize.py
from __future__ import annotations

"""
Palette quantization and colour-usage statistics.

Exports:
  quantize(src, palette, metric, preserve_detail_threshold, effective,
           dither_method, dither_strength) -> (PixelBuffer, ColorUsageStats)
  effective_palette(palette, stats, min_percent=0.1) -> Palette
  color_usage_stats(buf) -> ColorUsageStats
  has_semi_transparent(buf) -> bool
"""

import math
from typing import Optional, Tuple

import numpy as np

from .colour_convert import METRICS
from .constants import ALPHA_CUTOFF, TRIVIAL_COLOR_PERCENT
from .core_types import (
    ColorUsage,
    ColorUsageStats,
    EmptyPaletteError,
    InvalidConfiguration,
    Palette,
    PixelBuffer,
)
from .dither import dither
from .utils import unique_visible_rgb


def color_usage_stats(buf: PixelBuffer) -> ColorUsageStats:
    """
    Count and percent per colour over pixels with alpha > 0.
    Ordered by count (descending), then colour value.
    """
    uniques, counts = unique_visible_rgb(buf.rgb, buf.alpha, min_alpha=1)
    total = int(counts.sum())
    if total == 0:
        return {}
    # np.unique already sorts rows by value; a stable sort keeps that for ties.
    order = np.argsort(-counts, kind="stable")
    stats: ColorUsageStats = {}
    for i in order:
        rgb = (int(uniques[i, 0]), int(uniques[i, 1]), int(uniques[i, 2]))
        count = int(counts[i])
        stats[rgb] = ColorUsage(count=count, percent=100.0 * count / total)
    return stats


def effective_palette(
    palette: Palette, stats: ColorUsageStats, min_percent: float = TRIVIAL_COLOR_PERCENT
) -> Palette:
    """Entries whose share of the previous result is at least min_percent."""
    kept = [
        rgb
        for rgb in palette
        if rgb in stats and stats[rgb].percent > 0 and stats[rgb].percent >= min_percent
    ]
    return Palette(tuple(kept))


def has_semi_transparent(buf: PixelBuffer) -> bool:
    """True when any pixel has 0 < alpha < 255."""
    alpha = buf.alpha
    return bool(np.any((alpha > 0) & (alpha < 255)))


def quantize(
    src: PixelBuffer,
    palette: Palette,
    metric: str = "oklab",
    preserve_detail_threshold: float = 0.0,
    effective: Optional[Palette] = None,
    dither_method: str = "none",
    dither_strength: float = 100,
) -> Tuple[PixelBuffer, ColorUsageStats]:
    """
    Map every pixel with alpha >= 128 to a colour of the candidate palette
    (`effective` when given, else `palette`) and return usage statistics of
    the result. Pixels below the cutoff become fully transparent.

    Raises:
      EmptyPaletteError: the candidate set is empty and some pixel needs a colour.
      InvalidConfiguration: unknown metric or dither method, bad threshold.
    """
    if metric not in METRICS:
        raise InvalidConfiguration(f"unknown colour metric {metric!r}")
    if not math.isfinite(preserve_detail_threshold) or preserve_detail_threshold < 0:
        raise InvalidConfiguration(
            f"preserve-detail threshold must be finite and >= 0, got {preserve_detail_threshold}"
        )

    candidates = effective if effective is not None else palette
    opaque = src.alpha >= ALPHA_CUTOFF
    if not np.any(opaque):
        out = src.data.copy()
        out[..., 3] = 0
        return PixelBuffer(src.width, src.height, out), {}
    if len(candidates) == 0:
        raise EmptyPaletteError(
            "no palette colours left to quantize against"
            + (" after trivial-colour filtering" if effective is not None else "")
        )

    result = dither(
        src,
        candidates,
        metric=metric,
        method=dither_method,
        strength=dither_strength,
        preserve_detail_threshold=preserve_detail_threshold,
    )
    return result, color_usage_stats(result)


__all__ = [
    "quantize",
    "effective_palette",
    "color_usage_stats",
    "has_semi_transparent",
]
