# pixelator/utils.py
from __future__ import annotations

"""
Shared utilities for pixelator.

Includes timing and settings formatting, unique-colour helpers used by the
quantizer, clusterer and suggester, integral-image window sums used by the
windowed filters, and tidy logging.
"""

import sys
from typing import Any, Iterable, List, Tuple

import numpy as np

from .core_types import U8Image, U8Mask


#  Time / size formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


# Unique colour helpers


def unique_visible_rgb(
    image_rgb: U8Image, alpha_mask: U8Mask, min_alpha: int = 1
) -> Tuple[U8Image, np.ndarray]:
    """Return (unique RGB rows among alpha >= min_alpha, counts), rows sorted."""
    visible_mask = alpha_mask >= min_alpha
    if not np.any(visible_mask):
        return np.zeros((0, 3), dtype=np.uint8), np.zeros((0,), dtype=np.int64)
    flat_rgb = image_rgb[visible_mask].reshape(-1, 3)
    uniques, counts = np.unique(flat_rgb, axis=0, return_counts=True)
    return uniques.astype(np.uint8, copy=False), counts.astype(np.int64, copy=False)


def unique_rows_with_inverse(
    rows: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(uniques, inverse, counts) for an (N, 3) array; inverse is flat."""
    if rows.shape[0] == 0:
        empty = np.zeros((0,), dtype=np.int64)
        return rows.reshape(0, 3), empty, empty
    uniques, inverse, counts = np.unique(
        rows, axis=0, return_inverse=True, return_counts=True
    )
    return uniques, inverse.reshape(-1), counts


def luma(rgb: np.ndarray) -> np.ndarray:
    """Rec. 601 luma on the 0..255 scale."""
    rgb_f = np.asarray(rgb, dtype=np.float64)
    return 0.2989 * rgb_f[..., 0] + 0.5870 * rgb_f[..., 1] + 0.1140 * rgb_f[..., 2]


def split_rows_into_parts(height: int, rows_per_part: int) -> List[Tuple[int, int]]:
    """Partition range [0, height) into contiguous [start, end) spans of rows_per_part."""
    step = max(1, int(rows_per_part))
    return [(start, min(start + step, height)) for start in range(0, height, step)]


# Lightweight image-space ops


def summed_area_table(arr: np.ndarray) -> np.ndarray:
    """Zero-padded integral image over the first two axes. Returns float64."""
    height, width = arr.shape[:2]
    integ = np.zeros((height + 1, width + 1) + arr.shape[2:], dtype=np.float64)
    integ[1:, 1:] = np.cumsum(np.cumsum(arr.astype(np.float64), axis=0), axis=1)
    return integ


def window_sums(
    integ: np.ndarray,
    y1: np.ndarray,
    y2: np.ndarray,
    x1: np.ndarray,
    x2: np.ndarray,
) -> np.ndarray:
    """
    Sums over inclusive windows [y1..y2] x [x1..x2] from a padded integral image.
    Index arrays broadcast against each other; bounds must already be clipped.
    """
    return (
        integ[y2 + 1, x2 + 1]
        - integ[y1, x2 + 1]
        - integ[y2 + 1, x1]
        + integ[y1, x1]
    )


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [pixelate] Size: 64x64  Resample: nearest  Dither: floyd-steinberg  Metric: oklab
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    # formatting
    "format_seconds_compact",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    # colour helpers
    "unique_visible_rgb",
    "unique_rows_with_inverse",
    "luma",
    "split_rows_into_parts",
    # image-space ops
    "summed_area_table",
    "window_sums",
    # logging
    "print_config_line",
    "log",
    "debug_log",
    "warn",
    "error",
]
