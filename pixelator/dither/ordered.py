# pixelator/dither/ordered.py
from __future__ import annotations

"""
Ordered (threshold-matrix) dithering.

Every pixel is nudged by a position-dependent offset taken from a tiled
matrix, then matched to the palette. There is no state between pixels, so the
whole image is handled in one vectorised pass.
"""

from typing import Dict, Tuple

import numpy as np

from ..constants import ALPHA_CUTOFF, ORDERED_BASE_AMPLITUDE
from ..core_types import PixelBuffer
from ..matching import PaletteMatcher

# name -> (matrix, divisor)
ORDERED_MATRICES: Dict[str, Tuple[np.ndarray, int]] = {
    "bayer-4x4": (
        np.array(
            [
                [0, 8, 2, 10],
                [12, 4, 14, 6],
                [3, 11, 1, 9],
                [15, 7, 13, 5],
            ]
        ),
        16,
    ),
    "bayer-8x8": (
        np.array(
            [
                [0, 32, 8, 40, 2, 34, 10, 42],
                [48, 16, 56, 24, 50, 18, 58, 26],
                [12, 44, 4, 36, 14, 46, 6, 38],
                [60, 28, 52, 20, 62, 30, 54, 22],
                [3, 35, 11, 43, 1, 33, 9, 41],
                [51, 19, 59, 27, 49, 17, 57, 25],
                [15, 47, 7, 39, 13, 45, 5, 37],
                [63, 31, 55, 23, 61, 29, 53, 21],
            ]
        ),
        64,
    ),
    "halftone-dot": (
        np.array(
            [
                [12, 5, 6, 13],
                [4, 0, 1, 7],
                [8, 2, 3, 11],
                [14, 9, 10, 15],
            ]
        ),
        16,
    ),
    "diagonal-line": (
        np.array(
            [
                [15, 7, 3, 7],
                [7, 3, 7, 15],
                [3, 7, 15, 7],
                [7, 15, 7, 3],
            ]
        ),
        16,
    ),
    "cross-hatch": (
        np.array(
            [
                [0, 8, 0, 8],
                [8, 15, 8, 15],
                [0, 8, 0, 8],
                [8, 15, 8, 15],
            ]
        ),
        16,
    ),
    "grid": (
        np.array(
            [
                [0, 0, 0, 0],
                [0, 15, 15, 0],
                [0, 15, 15, 0],
                [0, 0, 0, 0],
            ]
        ),
        16,
    ),
}


def threshold_offsets(name: str, width: int, height: int, strength: float) -> np.ndarray:
    """Per-pixel nudge [H,W]: (m[y%n][x%n] / div - 0.5) * 64 * strength / 100."""
    matrix, divisor = ORDERED_MATRICES[name]
    size = matrix.shape[0]
    tiled = matrix[np.arange(height)[:, None] % size, np.arange(width)[None, :] % size]
    return (tiled / divisor - 0.5) * ORDERED_BASE_AMPLITUDE * (strength / 100.0)


def ordered_dither(
    src: PixelBuffer,
    matcher: PaletteMatcher,
    method: str,
    strength: float,
    preserve_detail_threshold: float = 0.0,
    alpha_cutoff: int = ALPHA_CUTOFF,
) -> PixelBuffer:
    """
    Nudge, clamp, round and match. Locked pixels (nearest distance within the
    preserve-detail threshold) take their un-nudged nearest colour.
    """
    out = src.data.copy()
    opaque = src.alpha >= alpha_cutoff
    out[..., 3] = np.where(opaque, 255, 0).astype(np.uint8)
    if not np.any(opaque):
        return PixelBuffer(src.width, src.height, out)

    nudge = threshold_offsets(method, src.width, src.height, strength)
    shifted = np.clip(src.rgb.astype(np.float64) + nudge[..., None], 0.0, 255.0)
    shifted = np.floor(shifted + 0.5).astype(np.uint8)

    idx, _dist = matcher.nearest_by_uniques(shifted[opaque])
    if preserve_detail_threshold > 0:
        base_idx, base_dist = matcher.nearest_by_uniques(src.rgb[opaque])
        idx = np.where(base_dist <= preserve_detail_threshold, base_idx, idx)

    out[..., :3][opaque] = matcher.colour_rows(idx)
    return PixelBuffer(src.width, src.height, out)


__all__ = ["ORDERED_MATRICES", "threshold_offsets", "ordered_dither"]
