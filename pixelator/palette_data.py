# pixelator/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PRESETS: dict[str, Palette]     # 'geopixels', 'wplace', 'wplace-free'
  PALETTE_MODES: tuple[str, ...]
  parse_custom_palette(text) -> Palette
  build_palette(mode, custom_text="", presets=PRESETS) -> Palette
  sort_palette_by_usage(palette, stats) -> Palette
  palette_to_text(palette) -> str
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from .constants import GEOPIXELS_PALETTE, WPLACE_FREE_PALETTE, WPLACE_PALETTE
from .core_types import (
    ColorUsageStats,
    InvalidConfiguration,
    Palette,
    RGBTuple,
    hex_to_rgb,
)

PRESETS: Dict[str, Palette] = {
    "geopixels": Palette.from_hex(GEOPIXELS_PALETTE),
    "wplace": Palette.from_hex(WPLACE_PALETTE),
    "wplace-free": Palette.from_hex(WPLACE_FREE_PALETTE),
}

PALETTE_MODES: Tuple[str, ...] = (
    "none",
    "custom",
    *PRESETS,
    *(f"{name}+custom" for name in PRESETS),
)

_TOKEN_SPLIT = re.compile(r"[\s,]+")
_DECIMAL = re.compile(r"^\d+$")
_HEX6 = re.compile(r"^#?[0-9A-Fa-f]{6}$")
_MAX_24BIT = 0xFFFFFF


def _parse_token(token: str) -> Optional[RGBTuple]:
    """Decimal 24-bit integer first, then 6-digit hex; None if neither."""
    if _DECIMAL.match(token):
        value = int(token, 10)
        if value <= _MAX_24BIT:
            return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    if _HEX6.match(token):
        return hex_to_rgb(token)
    return None


def parse_custom_palette(text: str) -> Palette:
    """
    Parse free-form colour text such as "#FFFFFF, 0, FF0000".

    Tokens are separated by commas and/or whitespace. An all-digit token up to
    16777215 is a packed 0xRRGGBB integer; "123456" therefore reads as decimal.
    Anything else must be six hex digits with an optional '#'. Malformed
    tokens are dropped, repeats keep their first position.
    """
    colors: List[RGBTuple] = []
    for token in _TOKEN_SPLIT.split(text.strip()):
        if not token:
            continue
        rgb = _parse_token(token)
        if rgb is not None:
            colors.append(rgb)
    return Palette.from_colors(colors)


def build_palette(
    mode: str,
    custom_text: str = "",
    presets: Mapping[str, Palette] = PRESETS,
) -> Palette:
    """
    Resolve a palette mode:
      none             -> empty palette
      custom           -> parsed custom text
      <preset>         -> that preset
      <preset>+custom  -> preset followed by new custom colours
    """
    if mode == "none":
        return Palette()
    if mode == "custom":
        return parse_custom_palette(custom_text)
    if mode in presets:
        return presets[mode]
    base, sep, suffix = mode.partition("+")
    if sep and suffix == "custom" and base in presets:
        return presets[base].merged_with(parse_custom_palette(custom_text))
    raise InvalidConfiguration(f"unknown palette mode {mode!r}")


def sort_palette_by_usage(palette: Palette, stats: ColorUsageStats) -> Palette:
    """Most used first; unused and tied colours keep their palette order."""
    if not stats:
        return palette
    ordered = sorted(
        palette.colors,
        key=lambda rgb: -(stats[rgb].count if rgb in stats else 0),
    )
    return Palette(tuple(ordered))


def palette_to_text(palette: Palette) -> str:
    """'#RRGGBB, #RRGGBB, ...', the form parse_custom_palette reads back."""
    return ", ".join(palette.hex_list())


__all__ = [
    "PRESETS",
    "PALETTE_MODES",
    "parse_custom_palette",
    "build_palette",
    "sort_palette_by_usage",
    "palette_to_text",
]
