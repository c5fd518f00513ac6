# pixelator/adjust.py
from __future__ import annotations

"""
Global colour adjustments applied before any filtering or resampling.

Exports:
  adjust_colors(buf, brightness, contrast, saturation)
  contrast_factor(contrast)
"""

import numpy as np

from .core_types import InvalidConfiguration, PixelBuffer
from .utils import luma


def contrast_factor(contrast: float) -> float:
    """Standard 8-bit contrast curve factor for contrast in -100..100."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def _check_range(name: str, value: float) -> None:
    if not -100 <= value <= 100:
        raise InvalidConfiguration(f"{name} must be within -100..100, got {value}")


def adjust_colors(
    buf: PixelBuffer, brightness: float = 0, contrast: float = 0, saturation: float = 0
) -> PixelBuffer:
    """
    Brightness, then contrast around 128, then saturation against Rec. 601 luma.

    Every pixel is adjusted (alpha is never read or written). The result is
    clamped to 0..255 and rounded half to even. All-zero settings return a copy.
    """
    for name, value in (
        ("brightness", brightness),
        ("contrast", contrast),
        ("saturation", saturation),
    ):
        _check_range(name, value)

    if brightness == 0 and contrast == 0 and saturation == 0:
        return buf.copy()

    rgb = buf.rgb.astype(np.float64) + float(brightness)
    rgb = contrast_factor(float(contrast)) * (rgb - 128.0) + 128.0
    if saturation != 0:
        gray = luma(rgb)[..., None]
        rgb = gray + (rgb - gray) * (1.0 + saturation / 100.0)

    out = buf.data.copy()
    out[..., :3] = np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)
    return PixelBuffer(buf.width, buf.height, out)


__all__ = ["adjust_colors", "contrast_factor"]
