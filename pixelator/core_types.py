# pixelator/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, errors, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA or (H, W, 3) RGB
U8Mask = NDArray[np.uint8]  # (H, W)
Lab = NDArray[np.float64]  # (..., 3) CIE Lab
OKLab = NDArray[np.float64]  # (..., 3) OKLab
Lch = NDArray[np.float64]  # (..., 3) CIE LCh


# Errors


class PixelatorError(Exception):
    """Base class for engine errors."""


class InvalidConfiguration(PixelatorError, ValueError):
    """Settings rejected before any pixel work starts."""


class EmptyPaletteError(PixelatorError):
    """Quantizing was requested against a zero-length candidate palette."""


# Value objects


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Row-major RGBA raster. `data` is uint8 with shape (height, width, 4)."""

    width: int
    height: int
    data: U8Image

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("buffer dimensions must be non-negative")
        arr = np.asarray(self.data)
        if arr.dtype != np.uint8:
            raise TypeError("expected uint8 pixel data")
        if arr.size != self.width * self.height * 4:
            raise ValueError(
                f"pixel data holds {arr.size} samples, expected "
                f"{self.width}x{self.height}x4"
            )
        object.__setattr__(self, "data", arr.reshape(self.height, self.width, 4))

    @classmethod
    def from_bytes(cls, width: int, height: int, raw: bytes) -> "PixelBuffer":
        """Wrap flat RGBA bytes (copied)."""
        arr = np.frombuffer(bytes(raw), dtype=np.uint8).copy()
        return cls(width, height, arr)

    @classmethod
    def blank(
        cls, width: int, height: int, fill: Sequence[int] = (0, 0, 0, 0)
    ) -> "PixelBuffer":
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[...] = np.asarray(fill, dtype=np.uint8)
        return cls(width, height, data)

    @property
    def rgb(self) -> U8Image:
        return self.data[..., :3]

    @property
    def alpha(self) -> U8Mask:
        return self.data[..., 3]

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.data.copy())

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and bool(np.array_equal(self.data, other.data))
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class Palette:
    """Ordered unique colours. Order is the tie-break and display order."""

    colors: Tuple[RGBTuple, ...] = ()

    def __post_init__(self) -> None:
        normalised = tuple(coerce_to_rgb_tuple(c) for c in self.colors)
        if len(set(normalised)) != len(normalised):
            raise ValueError("palette colours must be unique")
        for rgb in normalised:
            if not all(0 <= ch <= 255 for ch in rgb):
                raise ValueError(f"colour out of 8-bit range: {rgb}")
        object.__setattr__(self, "colors", normalised)

    @classmethod
    def from_colors(cls, colors: Iterable[Sequence[int]]) -> "Palette":
        """Build a palette, dropping repeats while keeping first occurrences."""
        seen: Dict[RGBTuple, None] = {}
        for c in colors:
            seen.setdefault(coerce_to_rgb_tuple(c), None)
        return cls(tuple(seen))

    @classmethod
    def from_hex(cls, hex_list: Iterable[str]) -> "Palette":
        return cls.from_colors(hex_to_rgb(hx) for hx in hex_list)

    def merged_with(self, other: Iterable[Sequence[int]]) -> "Palette":
        """This palette followed by any new colours from `other`."""
        return Palette.from_colors(list(self.colors) + list(other))

    def rgb_array(self) -> NDArray[np.uint8]:
        """(P, 3) uint8 array in palette order."""
        return np.array(self.colors, dtype=np.uint8).reshape(-1, 3)

    def hex_list(self) -> List[HexStr]:
        return [rgb_to_hex(c) for c in self.colors]

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[RGBTuple]:
        return iter(self.colors)

    def __contains__(self, item: object) -> bool:
        try:
            return coerce_to_rgb_tuple(item) in self.colors  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    def __getitem__(self, index: int) -> RGBTuple:
        return self.colors[index]


@dataclass(frozen=True)
class ColorUsage:
    """Pixel count and share (0..100) of opaque pixels for one colour."""

    count: int
    percent: float


ColorUsageStats = Dict[RGBTuple, ColorUsage]


# Small helpers


def rgb_to_hex(rgb: Sequence[int]) -> HexStr:
    """RGB tuple to uppercase hex string '#RRGGBB'."""
    return f"#{int(rgb[0]):02X}{int(rgb[1]):02X}{int(rgb[2]):02X}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (leading '#' optional, any case)."""
    s = hex_str.strip().lower().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        raise ValueError("hex must be 'rrggbb' or 'rgb'")
    return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length (or longer) sequence or array to an (int, int, int) tuple.
    Helpful when extracting values from NumPy rows.
    """
    if isinstance(value, str):
        return hex_to_rgb(value)
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def assert_u8_image_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "U8Mask",
    "Lab",
    "OKLab",
    "Lch",
    # errors
    "PixelatorError",
    "InvalidConfiguration",
    "EmptyPaletteError",
    # value objects
    "PixelBuffer",
    "Palette",
    "ColorUsage",
    "ColorUsageStats",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "assert_u8_image_rgba",
]
