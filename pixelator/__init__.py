# pixelator/__init__.py
"""
pixelator package.

Purpose:
  Turn an RGBA raster into palette-constrained pixel art: colour adjustment,
  edge-preserving smoothing, resampling, palette selection or k-means
  clustering, dithering, and palette-gap suggestions.

Public API:
  run_pixelate    : full pipeline for one image and Configuration.
  run_suggest     : colours missing from a palette, best first.
  handle_request  : request -> response, never raises for stage failures.
  PixelatorWorker : single background thread running requests in order.
  Configuration   : validated settings (FixedPalette / ClusteredPalette).
  colour_convert  : sRGB to Lab / OKLab and the distance metrics.
  core_types      : PixelBuffer, Palette, ColorUsage and the error classes.
  palette_data    : presets and custom palette parsing.
  dither          : error diffusion and ordered dithering.
  image_io        : Pillow adapters (load / save / convert).
  utils           : shared helpers (formatting, logging).

Quick start:
  from pixelator import Configuration, FixedPalette, run_pixelate
  from pixelator.palette_data import build_palette
  from pixelator.image_io import load_buffer, save_buffer
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import constants
from . import palette_data
from . import dither
from . import image_io
from . import utils

from .config import ClusteredPalette, Configuration, FixedPalette  # noqa: E402
from .core_types import (  # noqa: E402
    ColorUsage,
    EmptyPaletteError,
    InvalidConfiguration,
    Palette,
    PixelatorError,
    PixelBuffer,
)
from .pipeline import (  # noqa: E402
    PixelateRequest,
    PixelateResponse,
    PixelateResult,
    SuggestRequest,
    SuggestResponse,
    handle_request,
    run_pixelate,
    run_suggest,
)
from .worker import PixelatorWorker  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "constants",
    "palette_data",
    "dither",
    "image_io",
    "utils",
    "Configuration",
    "FixedPalette",
    "ClusteredPalette",
    "PixelBuffer",
    "Palette",
    "ColorUsage",
    "PixelatorError",
    "InvalidConfiguration",
    "EmptyPaletteError",
    "PixelateRequest",
    "PixelateResponse",
    "PixelateResult",
    "SuggestRequest",
    "SuggestResponse",
    "handle_request",
    "run_pixelate",
    "run_suggest",
    "PixelatorWorker",
]
