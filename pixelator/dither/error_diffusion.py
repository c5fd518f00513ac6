# pixelator/dither/error_diffusion.py
from __future__ import annotations

"""
Error-diffusion dithering (raster order, no serpentine).

Kernels are (dx, dy, weight) triples relative to the current pixel. The
quantisation residual is scaled by strength / 100 and pushed only to
neighbours that will themselves be matched (alpha >= cutoff).
"""

import math
from typing import Dict, Tuple

import numpy as np

from ..constants import ALPHA_CUTOFF
from ..core_types import PixelBuffer
from ..matching import PaletteMatcher

Kernel = Tuple[Tuple[int, int, float], ...]

ERROR_KERNELS: Dict[str, Kernel] = {
    "floyd-steinberg": (
        (1, 0, 7 / 16),
        (-1, 1, 3 / 16),
        (0, 1, 5 / 16),
        (1, 1, 1 / 16),
    ),
    "burkes": (
        (1, 0, 8 / 32),
        (2, 0, 4 / 32),
        (-2, 1, 2 / 32),
        (-1, 1, 4 / 32),
        (0, 1, 8 / 32),
        (1, 1, 4 / 32),
        (2, 1, 2 / 32),
    ),
    "stucki": (
        (1, 0, 8 / 42),
        (2, 0, 4 / 42),
        (-2, 1, 2 / 42),
        (-1, 1, 4 / 42),
        (0, 1, 8 / 42),
        (1, 1, 4 / 42),
        (2, 1, 2 / 42),
        (-2, 2, 1 / 42),
        (-1, 2, 2 / 42),
        (0, 2, 4 / 42),
        (1, 2, 2 / 42),
        (2, 2, 1 / 42),
    ),
    "sierra-2": (
        (1, 0, 4 / 16),
        (2, 0, 3 / 16),
        (-2, 1, 1 / 16),
        (-1, 1, 2 / 16),
        (0, 1, 3 / 16),
        (1, 1, 2 / 16),
        (2, 1, 1 / 16),
    ),
    "sierra-lite": (
        (1, 0, 2 / 4),
        (-1, 1, 1 / 4),
        (0, 1, 1 / 4),
    ),
}


def _round_channel(v: float) -> int:
    """Round half up and clamp to 0..255."""
    return min(255, max(0, int(math.floor(v + 0.5))))


def diffuse_error(
    src: PixelBuffer,
    matcher: PaletteMatcher,
    method: str,
    strength: float,
    preserve_detail_threshold: float = 0.0,
    alpha_cutoff: int = ALPHA_CUTOFF,
) -> PixelBuffer:
    """
    Match pixels in raster order, carrying the scaled residual forward.

    The working value (source plus received error) is rounded and clamped
    for matching; the residual is taken from the unclamped value. Locked
    pixels (source nearest distance within the preserve-detail threshold)
    keep that nearest colour, ignore received error and pass none on.
    """
    kernel = ERROR_KERNELS[method]
    height, width = src.height, src.width
    factor = strength / 100.0

    out = src.data.copy()
    opaque = src.alpha >= alpha_cutoff
    out[..., 3] = np.where(opaque, 255, 0).astype(np.uint8)
    if not np.any(opaque):
        return PixelBuffer(width, height, out)

    locked = np.zeros((height, width), dtype=bool)
    if preserve_detail_threshold > 0:
        base_idx, base_dist = matcher.nearest_by_uniques(src.rgb[opaque])
        lock_hits = base_dist <= preserve_detail_threshold
        locked[opaque] = lock_hits
        locked_rgb = out[..., :3][opaque]
        locked_rgb[lock_hits] = matcher.colour_rows(base_idx[lock_hits])
        out[..., :3][opaque] = locked_rgb

    work = src.rgb.astype(np.float64)
    pal = matcher.rgb
    receives = opaque & ~locked

    for y in range(height):
        for x in range(width):
            if not receives[y, x]:
                continue
            r, g, b = work[y, x]
            j, _dist = matcher.nearest_one(
                _round_channel(r), _round_channel(g), _round_channel(b)
            )
            chosen = pal[j]
            out[y, x, :3] = chosen

            if factor == 0.0:
                continue
            er = (r - float(chosen[0])) * factor
            eg = (g - float(chosen[1])) * factor
            eb = (b - float(chosen[2])) * factor
            for dx, dy, w in kernel:
                nx, ny = x + dx, y + dy
                if 0 <= ny < height and 0 <= nx < width and receives[ny, nx]:
                    work[ny, nx, 0] += er * w
                    work[ny, nx, 1] += eg * w
                    work[ny, nx, 2] += eb * w

    return PixelBuffer(width, height, out)


__all__ = ["ERROR_KERNELS", "diffuse_error"]
