# pixelator/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics (sRGB, D65).

Exports:
  rgb_to_linear(srgb)
  rgb_to_lab(rgb)
  rgb_to_oklab(rgb)
  lab_to_lch(lab)
  to_lab(color), to_oklab(color)
  delta_e76, delta_e94, delta_e2000, delta_oklab, delta_redmean
  to_metric_space(rgb, metric)
  metric_distance(a, b, metric)
  distance(c1, c2, metric)
  METRICS

RGB inputs are on the 0..255 scale (uint8 or float). All metric functions
broadcast over leading axes and return float64.
"""

import math
from typing import Callable, Dict, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .core_types import Lab, Lch, OKLab

METRICS: Tuple[str, ...] = ("cie76", "cie94", "ciede2000", "oklab", "redmean")


def _check_metric(metric: str) -> str:
    if metric not in METRICS:
        raise ValueError(
            f"unknown colour metric {metric!r}; expected one of {', '.join(METRICS)}"
        )
    return metric


# sRGB to linear


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Args:
      srgb: array[...,3] in 0..1 (float)
    Returns:
      float64 array[...,3]
    """
    srgb_f = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb_f <= 0.04045,
        srgb_f / 12.92,
        ((np.maximum(srgb_f, 0.04045) + 0.055) / 1.055) ** 2.4,
    )


def _linear_rgb(rgb: np.ndarray) -> np.ndarray:
    return rgb_to_linear(np.asarray(rgb, dtype=np.float64) / 255.0)


# sRGB to Lab (D65)


def rgb_to_lab(rgb: np.ndarray) -> Lab:
    """
    sRGB [0..255] to CIE Lab (D65). Preserves shape (...,3).
    """
    lin = _linear_rgb(rgb)
    r_lin, g_lin, b_lin = lin[..., 0], lin[..., 1], lin[..., 2]

    # Linear RGB -> XYZ (D65)
    X = 0.4124564 * r_lin + 0.3575761 * g_lin + 0.1804375 * b_lin
    Y = 0.2126729 * r_lin + 0.7151522 * g_lin + 0.0721750 * b_lin
    Z = 0.0193339 * r_lin + 0.1191920 * g_lin + 0.9503041 * b_lin

    # Reference white (D65)
    Xn, Yn, Zn = 0.95047, 1.00000, 1.08883
    x, y, z = X / Xn, Y / Yn, Z / Zn
    e, k = 216.0 / 24389.0, 24389.0 / 27.0

    def f(t: np.ndarray) -> np.ndarray:
        return np.where(t > e, np.cbrt(t), (k * t + 16.0) / 116.0)

    fx, fy, fz = f(x), f(y), f(z)
    out = np.empty(lin.shape, dtype=np.float64)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


# sRGB to OKLab


def rgb_to_oklab(rgb: np.ndarray) -> OKLab:
    """sRGB [0..255] to OKLab (L in 0..1). Preserves shape (...,3)."""
    lin = _linear_rgb(rgb)
    r_lin, g_lin, b_lin = lin[..., 0], lin[..., 1], lin[..., 2]

    l_ = np.cbrt(0.4122214708 * r_lin + 0.5363325363 * g_lin + 0.0514459929 * b_lin)
    m_ = np.cbrt(0.2119034982 * r_lin + 0.6806995451 * g_lin + 0.1073969566 * b_lin)
    s_ = np.cbrt(0.0883024619 * r_lin + 0.2817188376 * g_lin + 0.6299787005 * b_lin)

    out = np.empty(lin.shape, dtype=np.float64)
    out[..., 0] = 0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_
    out[..., 1] = 1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_
    out[..., 2] = 0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_
    return out


# Lab to LCh


def lab_to_lch(lab: Lab) -> Lch:
    """
    Lab[...,3] to LCh[...,3] (degrees in [0,360)).
    """
    lab = np.asarray(lab, dtype=np.float64)
    C = np.hypot(lab[..., 1], lab[..., 2])
    h = np.degrees(np.arctan2(lab[..., 2], lab[..., 1])) % 360.0
    return np.stack([lab[..., 0], C, h], axis=-1)


def to_lab(color: Sequence[int]) -> Tuple[float, float, float]:
    """Single colour to an (L, a, b) tuple."""
    L, a, b = rgb_to_lab(np.asarray(color[:3], dtype=np.float64))
    return (float(L), float(a), float(b))


def to_oklab(color: Sequence[int]) -> Tuple[float, float, float]:
    """Single colour to an OKLab (L, a, b) tuple."""
    L, a, b = rgb_to_oklab(np.asarray(color[:3], dtype=np.float64))
    return (float(L), float(a), float(b))


# Distances on precomputed coordinates


def delta_e76(lab1: Lab, lab2: Lab) -> NDArray[np.float64]:
    """Euclidean distance in CIELAB."""
    d = np.asarray(lab1, dtype=np.float64) - np.asarray(lab2, dtype=np.float64)
    return np.sqrt(np.sum(d * d, axis=-1))


def delta_e94(lab1: Lab, lab2: Lab) -> NDArray[np.float64]:
    """
    CIE94 with kL=2, K1=0.048, K2=0.014, SL=1.

    SC and SH are weighted by the geometric mean chroma of both colours, so
    delta_e94(a, b) == delta_e94(b, a).
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    dL = lab1[..., 0] - lab2[..., 0]
    C1 = np.hypot(lab1[..., 1], lab1[..., 2])
    C2 = np.hypot(lab2[..., 1], lab2[..., 2])
    dC = C1 - C2
    da = lab1[..., 1] - lab2[..., 1]
    db = lab1[..., 2] - lab2[..., 2]
    dH2 = np.maximum(da * da + db * db - dC * dC, 0.0)

    C_g = np.sqrt(C1 * C2)
    S_c = 1.0 + 0.048 * C_g
    S_h = 1.0 + 0.014 * C_g
    kL = 2.0
    return np.sqrt((dL / kL) ** 2 + (dC / S_c) ** 2 + dH2 / (S_h * S_h))


def _hue_deg(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    h = np.degrees(np.arctan2(b, a)) % 360.0
    return np.where((a == 0.0) & (b == 0.0), 0.0, h)


def delta_e2000(lab1: Lab, lab2: Lab) -> NDArray[np.float64]:
    """
    CIEDE2000 (kL = kC = kH = 1). Vectorised and broadcasting.
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    C_bar7 = (0.5 * (C1 + C2)) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar7 / (C_bar7 + 25.0**7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = np.hypot(a1p, b1)
    C2p = np.hypot(a2p, b2)
    h1p = _hue_deg(a1p, b1)
    h2p = _hue_deg(a2p, b2)

    dLp = L2 - L1
    dCp = C2p - C1p

    chroma_prod = C1p * C2p
    neutral = chroma_prod == 0.0
    dhp = h2p - h1p
    dhp = np.where(dhp > 180.0, dhp - 360.0, dhp)
    dhp = np.where(dhp < -180.0, dhp + 360.0, dhp)
    dhp = np.where(neutral, 0.0, dhp)
    dHp = 2.0 * np.sqrt(chroma_prod) * np.sin(np.radians(dhp / 2.0))

    L_bar = 0.5 * (L1 + L2)
    C_bar_p = 0.5 * (C1p + C2p)

    h_sum = h1p + h2p
    h_far = np.abs(h1p - h2p) > 180.0
    h_bar_p = np.where(
        h_far,
        np.where(h_sum < 360.0, 0.5 * (h_sum + 360.0), 0.5 * (h_sum - 360.0)),
        0.5 * h_sum,
    )
    h_bar_p = np.where(neutral, h_sum, h_bar_p)

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )

    d_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    C_bar_p7 = C_bar_p**7
    R_c = 2.0 * np.sqrt(C_bar_p7 / (C_bar_p7 + 25.0**7))

    L_off2 = (L_bar - 50.0) ** 2
    S_l = 1.0 + (0.015 * L_off2) / np.sqrt(20.0 + L_off2)
    S_c = 1.0 + 0.045 * C_bar_p
    S_h = 1.0 + 0.015 * C_bar_p * T
    R_t = -np.sin(np.radians(2.0 * d_theta)) * R_c

    tL = dLp / S_l
    tC = dCp / S_c
    tH = dHp / S_h
    return np.sqrt(np.maximum(tL * tL + tC * tC + tH * tH + R_t * tC * tH, 0.0))


def delta_oklab(ok1: OKLab, ok2: OKLab) -> NDArray[np.float64]:
    """Euclidean OKLab distance, scaled x100 to sit in the CIELAB range."""
    return 100.0 * delta_e76(ok1, ok2)


def delta_redmean(rgb1: np.ndarray, rgb2: np.ndarray) -> NDArray[np.float64]:
    """Weighted RGB distance ("redmean"). Inputs on the 0..255 scale."""
    rgb1 = np.asarray(rgb1, dtype=np.float64)
    rgb2 = np.asarray(rgb2, dtype=np.float64)
    r_mean = 0.5 * (rgb1[..., 0] + rgb2[..., 0])
    d = rgb1 - rgb2
    return np.sqrt(
        (2.0 + r_mean / 256.0) * d[..., 0] ** 2
        + 4.0 * d[..., 1] ** 2
        + (2.0 + (255.0 - r_mean) / 256.0) * d[..., 2] ** 2
    )


_SPACE: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "cie76": rgb_to_lab,
    "cie94": rgb_to_lab,
    "ciede2000": rgb_to_lab,
    "oklab": rgb_to_oklab,
    "redmean": lambda rgb: np.asarray(rgb, dtype=np.float64),
}

_DELTA: Dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "cie76": delta_e76,
    "cie94": delta_e94,
    "ciede2000": delta_e2000,
    "oklab": delta_oklab,
    "redmean": delta_redmean,
}


def to_metric_space(rgb: np.ndarray, metric: str) -> NDArray[np.float64]:
    """Coordinates that `metric_distance` expects for this metric."""
    return _SPACE[_check_metric(metric)](rgb)


def metric_distance(a: np.ndarray, b: np.ndarray, metric: str) -> NDArray[np.float64]:
    """Distance between coordinates produced by `to_metric_space`."""
    return _DELTA[_check_metric(metric)](a, b)


def distance(c1: Sequence[int], c2: Sequence[int], metric: str) -> float:
    """Perceptual distance between two RGB colours. Symmetric; 0 for equal colours."""
    _check_metric(metric)
    if tuple(int(v) for v in c1[:3]) == tuple(int(v) for v in c2[:3]):
        return 0.0
    p = to_metric_space(np.asarray([c1[:3], c2[:3]], dtype=np.float64), metric)
    d = float(metric_distance(p[0], p[1], metric))
    return 0.0 if math.isnan(d) else d


__all__ = [
    "METRICS",
    "rgb_to_linear",
    "rgb_to_lab",
    "rgb_to_oklab",
    "lab_to_lch",
    "to_lab",
    "to_oklab",
    "delta_e76",
    "delta_e94",
    "delta_e2000",
    "delta_oklab",
    "delta_redmean",
    "to_metric_space",
    "metric_distance",
    "distance",
]
