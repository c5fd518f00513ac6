# pixelator/resample.py
from __future__ import annotations

"""
Scaling to target dimensions.

Exports:
  RESAMPLING_METHODS
  resample(src, target_w, target_h, method)
  width_for_height(src_w, src_h, target_h)

Filtering kernels are built per axis as (taps, weights) tables and applied
separably. Bilinear and Lanczos filter premultiplied colour so fully
transparent source pixels never tint visible output.
"""

import math
from typing import Tuple

import numpy as np

from .constants import LANCZOS_LOBES
from .core_types import InvalidConfiguration, PixelBuffer

RESAMPLING_METHODS: Tuple[str, ...] = ("nearest", "bilinear", "lanczos")

AxisTaps = Tuple[np.ndarray, np.ndarray]  # (indices[out, T], weights[out, T])


def width_for_height(src_w: int, src_h: int, target_h: int) -> int:
    """Width keeping the source aspect ratio at target_h rows (at least 1)."""
    if src_w <= 0 or src_h <= 0 or target_h <= 0:
        raise InvalidConfiguration("dimensions must be positive")
    return max(1, int(round(target_h * src_w / src_h)))


# Per-axis tap tables


def _normalise(idx: np.ndarray, w: np.ndarray, n_in: int) -> AxisTaps:
    w = np.where((idx >= 0) & (idx < n_in), w, 0.0)
    total = w.sum(axis=1, keepdims=True)
    w = np.divide(w, total, out=np.zeros_like(w), where=total > 0)
    return np.clip(idx, 0, n_in - 1), w


def _linear_taps(n_out: int, n_in: int) -> AxisTaps:
    ratio = n_in / n_out
    sx = np.clip((np.arange(n_out) + 0.5) * ratio - 0.5, 0.0, n_in - 1)
    x1 = np.floor(sx).astype(np.int64)
    x2 = np.minimum(x1 + 1, n_in - 1)
    dx = sx - x1
    idx = np.stack([x1, x2], axis=1)
    w = np.stack([1.0 - dx, dx], axis=1)
    return idx, w


def _area_taps(n_out: int, n_in: int) -> AxisTaps:
    ratio = n_in / n_out
    lo = np.arange(n_out) * ratio
    hi = lo + ratio
    start = np.floor(lo).astype(np.int64)
    taps = int(math.ceil(ratio)) + 1
    idx = start[:, None] + np.arange(taps)[None, :]
    overlap = np.minimum(idx + 1, hi[:, None]) - np.maximum(idx, lo[:, None])
    return _normalise(idx, np.maximum(overlap, 0.0), n_in)


def _lanczos_kernel(t: np.ndarray, lobes: int) -> np.ndarray:
    inside = np.abs(t) < lobes
    return np.where(inside, np.sinc(t) * np.sinc(t / lobes), 0.0)


def _lanczos_taps(n_out: int, n_in: int, lobes: int = LANCZOS_LOBES) -> AxisTaps:
    ratio = n_in / n_out
    scale = max(ratio, 1.0)
    radius = lobes * scale
    centre = (np.arange(n_out) + 0.5) * ratio - 0.5
    start = np.floor(centre - radius + 1.0).astype(np.int64)
    taps = int(math.ceil(2.0 * radius)) + 1
    idx = start[:, None] + np.arange(taps)[None, :]
    w = _lanczos_kernel((centre[:, None] - idx) / scale, lobes)
    return _normalise(idx, w, n_in)


def _apply_taps(arr: np.ndarray, taps: AxisTaps, axis: int) -> np.ndarray:
    idx, w = taps
    n_out = idx.shape[0]
    shape = list(arr.shape)
    shape[axis] = n_out
    acc = np.zeros(shape, dtype=np.float64)
    for t in range(idx.shape[1]):
        if axis == 0:
            acc += w[:, t, None, None] * arr[idx[:, t]]
        else:
            acc += w[None, :, t, None] * arr[:, idx[:, t]]
    return acc


# Pixel-level passes


def _nearest(src: PixelBuffer, target_w: int, target_h: int) -> PixelBuffer:
    ys = (np.arange(target_h) * src.height) // target_h
    xs = (np.arange(target_w) * src.width) // target_w
    return PixelBuffer(target_w, target_h, src.data[ys[:, None], xs[None, :]].copy())


def _filtered(src: PixelBuffer, y_taps: AxisTaps, x_taps: AxisTaps) -> PixelBuffer:
    arr = src.data.astype(np.float64)
    arr[..., :3] *= arr[..., 3:4] / 255.0

    out = _apply_taps(_apply_taps(arr, y_taps, axis=0), x_taps, axis=1)

    alpha_f = np.clip(out[..., 3], 0.0, 255.0)
    alpha = np.rint(alpha_f).astype(np.uint8)
    safe = np.where(alpha_f > 0.0, alpha_f, 1.0)[..., None]
    rgb = np.where(alpha[..., None] > 0, out[..., :3] * 255.0 / safe, 0.0)

    data = np.empty(out.shape, dtype=np.uint8)
    data[..., :3] = np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)
    data[..., 3] = alpha
    return PixelBuffer(out.shape[1], out.shape[0], data)


def resample(
    src: PixelBuffer, target_w: int, target_h: int, method: str = "nearest"
) -> PixelBuffer:
    """
    Scale `src` to exactly target_w x target_h.

    nearest   point sampling, src = floor(dst * src_size / dst_size)
    bilinear  2x2 interpolation on pixel centres; exact area averaging when
              both axes shrink
    lanczos   separable windowed sinc (3 lobes), widened when downscaling
    """
    if target_w <= 0 or target_h <= 0:
        raise InvalidConfiguration(
            f"target size must be positive, got {target_w}x{target_h}"
        )
    if method not in RESAMPLING_METHODS:
        raise InvalidConfiguration(f"unknown resampling method {method!r}")
    if src.width == 0 or src.height == 0:
        raise InvalidConfiguration("source image has no pixels")

    if method == "nearest":
        return _nearest(src, target_w, target_h)

    if method == "bilinear":
        if target_w < src.width and target_h < src.height:
            return _filtered(
                src,
                _area_taps(target_h, src.height),
                _area_taps(target_w, src.width),
            )
        return _filtered(
            src,
            _linear_taps(target_h, src.height),
            _linear_taps(target_w, src.width),
        )

    return _filtered(
        src,
        _lanczos_taps(target_h, src.height),
        _lanczos_taps(target_w, src.width),
    )


__all__ = ["RESAMPLING_METHODS", "resample", "width_for_height"]
