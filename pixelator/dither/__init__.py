# pixelator/dither/__init__.py
"""
Dithering against a fixed palette.

API:
  dither(buffer, palette, metric, method, strength, preserve_detail_threshold=0)
    -> PixelBuffer whose opaque pixels (alpha >= 128) all hold palette colours

  DITHER_METHODS    : 'none', error-diffusion kernels, then ordered matrices
  ERROR_KERNELS     : name -> ((dx, dy, weight), ...)
  ORDERED_MATRICES  : name -> (matrix, divisor)

Strength 0 behaves exactly like 'none'. Output is deterministic.
"""

from __future__ import annotations

from typing import Tuple

from ..constants import ALPHA_CUTOFF
from ..core_types import InvalidConfiguration, Palette, PixelBuffer
from ..matching import PaletteMatcher, snap_buffer
from .error_diffusion import ERROR_KERNELS, diffuse_error
from .ordered import ORDERED_MATRICES, ordered_dither, threshold_offsets

DITHER_METHODS: Tuple[str, ...] = ("none", *ERROR_KERNELS, *ORDERED_MATRICES)


def dither(
    buffer: PixelBuffer,
    palette: Palette,
    metric: str = "oklab",
    method: str = "none",
    strength: float = 100,
    preserve_detail_threshold: float = 0.0,
) -> PixelBuffer:
    if method not in DITHER_METHODS:
        raise InvalidConfiguration(f"unknown dither method {method!r}")
    if not 0 <= strength <= 100:
        raise InvalidConfiguration(f"dither strength must be within 0..100, got {strength}")

    matcher = PaletteMatcher(palette, metric)
    if method == "none" or strength == 0:
        return snap_buffer(buffer, matcher, ALPHA_CUTOFF)
    if method in ERROR_KERNELS:
        return diffuse_error(
            buffer, matcher, method, strength, preserve_detail_threshold, ALPHA_CUTOFF
        )
    return ordered_dither(
        buffer, matcher, method, strength, preserve_detail_threshold, ALPHA_CUTOFF
    )


__all__ = [
    "DITHER_METHODS",
    "ERROR_KERNELS",
    "ORDERED_MATRICES",
    "dither",
    "diffuse_error",
    "ordered_dither",
    "threshold_offsets",
]
