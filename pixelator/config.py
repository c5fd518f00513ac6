# pixelator/config.py
from __future__ import annotations

"""
The validated settings record for one pixelate run.

Exports:
  FixedPalette(palette), ClusteredPalette(k), PaletteSource
  Configuration (frozen)
    .validate()
    .describe() -> [(label, value), ...] for print_config_line
    Configuration.from_settings(mapping)  # host camelCase settings

palette_source:
  FixedPalette      quantize against a given palette
  ClusteredPalette  derive k colours from the resized image first
  None              resample only; no palette step
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from .colour_convert import METRICS
from .core_types import (
    ColorUsage,
    ColorUsageStats,
    InvalidConfiguration,
    Palette,
    hex_to_rgb,
)
from .dither import DITHER_METHODS
from .palette_data import build_palette
from .preprocess import PREPROCESSING_METHODS
from .resample import RESAMPLING_METHODS


@dataclass(frozen=True)
class FixedPalette:
    palette: Palette


@dataclass(frozen=True)
class ClusteredPalette:
    k: int


PaletteSource = Union[FixedPalette, ClusteredPalette, None]


def _require(ok: bool, message: str) -> None:
    if not ok:
        raise InvalidConfiguration(message)


def _is_count(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _in_range(name: str, value: float, lo: float, hi: float) -> None:
    _require(
        isinstance(value, (int, float)) and math.isfinite(value) and lo <= value <= hi,
        f"{name} must be within {lo:g}..{hi:g}, got {value!r}",
    )


def _one_of(name: str, value: str, options: Tuple[str, ...]) -> None:
    _require(
        value in options,
        f"unknown {name} {value!r}; expected one of {', '.join(options)}",
    )


@dataclass(frozen=True)
class Configuration:
    target_width: int
    target_height: int
    resampling_method: str = "nearest"
    dither_method: str = "none"
    dither_strength: float = 100
    palette_source: PaletteSource = None
    color_match_algorithm: str = "oklab"
    preprocessing_method: str = "none"
    preprocessing_strength: float = 50
    brightness: float = 0
    contrast: float = 0
    saturation: float = 0
    preserve_detail_threshold: float = 0
    filter_trivial_colors: bool = False
    color_stats: Optional[ColorUsageStats] = None

    def validate(self) -> "Configuration":
        """Raise InvalidConfiguration on the first bad field; return self."""
        _require(
            _is_count(self.target_width) and self.target_width > 0,
            f"target width must be a positive integer, got {self.target_width!r}",
        )
        _require(
            _is_count(self.target_height) and self.target_height > 0,
            f"target height must be a positive integer, got {self.target_height!r}",
        )
        _one_of("resampling method", self.resampling_method, RESAMPLING_METHODS)
        _one_of("dither method", self.dither_method, DITHER_METHODS)
        _one_of("colour match algorithm", self.color_match_algorithm, METRICS)
        _one_of("preprocessing method", self.preprocessing_method, PREPROCESSING_METHODS)
        _in_range("dither strength", self.dither_strength, 0, 100)
        _in_range("preprocessing strength", self.preprocessing_strength, 0, 100)
        _in_range("brightness", self.brightness, -100, 100)
        _in_range("contrast", self.contrast, -100, 100)
        _in_range("saturation", self.saturation, -100, 100)
        _in_range("preserve-detail threshold", self.preserve_detail_threshold, 0, math.inf)

        source = self.palette_source
        if isinstance(source, ClusteredPalette):
            _require(
                _is_count(source.k) and source.k >= 1,
                f"cluster colour count must be at least 1, got {source.k!r}",
            )
        else:
            _require(
                source is None or isinstance(source, FixedPalette),
                f"unsupported palette source {source!r}",
            )
        return self

    def describe(self) -> List[Tuple[str, Any]]:
        source = self.palette_source
        if isinstance(source, FixedPalette):
            palette_text = f"{len(source.palette)} colours"
        elif isinstance(source, ClusteredPalette):
            palette_text = f"k-means {source.k}"
        else:
            palette_text = "none"
        return [
            ("Size", f"{self.target_width}x{self.target_height}"),
            ("Resample", self.resampling_method),
            ("Preprocess", self.preprocessing_method),
            ("Palette", palette_text),
            ("Metric", self.color_match_algorithm),
            ("Dither", self.dither_method),
            ("Strength", self.dither_strength),
            ("Detail", self.preserve_detail_threshold),
            ("Trivial filter", self.filter_trivial_colors),
        ]

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "Configuration":
        """
        Build from a host settings record, e.g.

          {"targetWidth": 64, "targetHeight": 64, "paletteMode": "geopixels+custom",
           "customPalette": "#FF00FF", "ditherMethod": "floyd-steinberg",
           "ditherStrength": 80, "colorMatchAlgorithm": "ciede2000"}

        A literal "palette" list of hex strings takes precedence over
        paletteMode. Missing or null values fall back to defaults.
        """

        def get(key: str, default: Any) -> Any:
            value = settings.get(key)
            return default if value is None else value

        _require(
            "targetWidth" in settings and "targetHeight" in settings,
            "settings need targetWidth and targetHeight",
        )

        if settings.get("palette") is not None:
            try:
                palette = Palette.from_hex(settings["palette"])
            except (TypeError, ValueError) as exc:
                raise InvalidConfiguration(f"bad palette entry: {exc}") from exc
        else:
            palette = build_palette(
                str(get("paletteMode", "none")), str(get("customPalette", ""))
            )

        source: PaletteSource
        if get("useKmeans", False):
            _require(
                len(palette) == 0,
                "k-means clustering cannot be combined with a fixed palette",
            )
            source = ClusteredPalette(int(get("kmeansColors", 16)))
        elif len(palette) > 0:
            source = FixedPalette(palette)
        else:
            source = None

        stats: Optional[ColorUsageStats] = None
        raw_stats = settings.get("colorStats")
        if raw_stats:
            stats = {}
            try:
                for item in raw_stats:
                    stats[hex_to_rgb(str(item["color"]))] = ColorUsage(
                        count=int(item.get("count", 0)),
                        percent=float(item["percent"]),
                    )
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidConfiguration(f"bad colour statistics entry: {exc}") from exc

        return cls(
            target_width=settings["targetWidth"],
            target_height=settings["targetHeight"],
            resampling_method=get("resamplingMethod", "nearest"),
            dither_method=get("ditherMethod", "none"),
            dither_strength=get("ditherStrength", 100),
            palette_source=source,
            color_match_algorithm=get("colorMatchAlgorithm", "oklab"),
            preprocessing_method=get("preprocessingMethod", "none"),
            preprocessing_strength=get("preprocessingStrength", 50),
            brightness=get("brightness", 0),
            contrast=get("contrast", 0),
            saturation=get("saturation", 0),
            preserve_detail_threshold=get("preserveDetailThreshold", 0),
            filter_trivial_colors=bool(get("filterTrivialColors", False)),
            color_stats=stats,
        )


__all__ = [
    "FixedPalette",
    "ClusteredPalette",
    "PaletteSource",
    "Configuration",
]
