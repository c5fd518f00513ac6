# pixelator/pipeline.py
from __future__ import annotations

"""
Request handling and stage ordering.

Exports:
  PixelateRequest, SuggestRequest, Request
  PixelateResponse, SuggestResponse, Response
  PixelateResult
  run_pixelate(source, config, *, debug=False) -> PixelateResult
  run_suggest(source, palette, metric, count, prefer_distinct) -> list[RGBTuple]
  handle_request(request) -> Response

Stage order: adjust -> preprocess -> resample -> palette (fixed or clustered)
-> trivial-colour filter -> quantize + dither -> stats.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar, Union

from .adjust import adjust_colors
from .config import ClusteredPalette, Configuration, FixedPalette
from .constants import SUGGEST_DEFAULT_COUNT
from .core_types import ColorUsageStats, Palette, PixelBuffer, RGBTuple, rgb_to_hex
from .kmeans import cluster
from .preprocess import preprocess
from .quantize import color_usage_stats, effective_palette, quantize
from .resample import resample
from .suggest import suggest
from .utils import debug_log, error, format_seconds_compact, print_config_line

T = TypeVar("T")


# Requests / responses


@dataclass(frozen=True)
class PixelateRequest:
    source: PixelBuffer
    config: Configuration
    request_id: int = 0
    debug: bool = False
    kind: str = field(default="pixelate", init=False)


@dataclass(frozen=True)
class SuggestRequest:
    source: PixelBuffer
    palette: Palette
    metric: str = "cie76"
    count: int = SUGGEST_DEFAULT_COUNT
    prefer_distinct: bool = False
    request_id: int = 0
    kind: str = field(default="suggest", init=False)


@dataclass(frozen=True)
class PixelateResult:
    buffer: PixelBuffer
    generated_palette: Optional[Palette]
    color_stats: ColorUsageStats


@dataclass(frozen=True)
class PixelateResponse:
    request_id: int
    status: str  # "success" | "error"
    result: Optional[PixelateResult] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class SuggestResponse:
    request_id: int
    status: str  # "suggestions" | "error"
    suggestions: List[RGBTuple] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "suggestions"

    def hex_suggestions(self) -> List[str]:
        return [rgb_to_hex(c) for c in self.suggestions]


Request = Union[PixelateRequest, SuggestRequest]
Response = Union[PixelateResponse, SuggestResponse]


# Stages


def _timed(label: str, debug: bool, fn: Callable[[], T]) -> T:
    if not debug:
        return fn()
    t0 = time.perf_counter()
    value = fn()
    debug_log(f"{label:<10} {format_seconds_compact(time.perf_counter() - t0)}")
    return value


def run_pixelate(
    source: PixelBuffer, config: Configuration, *, debug: bool = False
) -> PixelateResult:
    """Validate `config`, then run every stage in order on `source`."""
    config.validate()
    if debug:
        print_config_line("pixelate", config.describe(), debug=True)
    t_start = time.perf_counter()

    buf = source
    if config.brightness or config.contrast or config.saturation:
        buf = _timed(
            "adjust",
            debug,
            lambda: adjust_colors(
                source, config.brightness, config.contrast, config.saturation
            ),
        )

    if config.preprocessing_method != "none":
        buf = _timed(
            "preprocess",
            debug,
            lambda: preprocess(
                buf, config.preprocessing_method, config.preprocessing_strength
            ),
        )

    buf = _timed(
        "resample",
        debug,
        lambda: resample(
            buf, config.target_width, config.target_height, config.resampling_method
        ),
    )

    generated: Optional[Palette] = None
    src_kind = config.palette_source
    if isinstance(src_kind, ClusteredPalette):
        k = src_kind.k
        generated = _timed("k-means", debug, lambda: cluster(buf, k))
        palette = generated
    elif isinstance(src_kind, FixedPalette):
        palette = src_kind.palette
    else:
        stats = color_usage_stats(buf)
        if debug:
            debug_log(
                f"done       {format_seconds_compact(time.perf_counter() - t_start)}"
                f"  colours={len(stats)}  (no palette)"
            )
        return PixelateResult(buf, None, stats)

    effective: Optional[Palette] = None
    # Earlier stats only describe a fixed palette.
    if (
        config.filter_trivial_colors
        and config.color_stats
        and isinstance(src_kind, FixedPalette)
    ):
        effective = effective_palette(palette, config.color_stats)
        if debug:
            debug_log(f"trivial filter kept {len(effective)}/{len(palette)} colours")

    out, stats = _timed(
        "quantize",
        debug,
        lambda: quantize(
            buf,
            palette,
            metric=config.color_match_algorithm,
            preserve_detail_threshold=config.preserve_detail_threshold,
            effective=effective,
            dither_method=config.dither_method,
            dither_strength=config.dither_strength,
        ),
    )
    if debug:
        debug_log(
            f"done       {format_seconds_compact(time.perf_counter() - t_start)}"
            f"  colours={len(stats)}"
        )
    return PixelateResult(out, generated, stats)


def run_suggest(
    source: PixelBuffer,
    palette: Palette,
    metric: str = "cie76",
    count: int = SUGGEST_DEFAULT_COUNT,
    prefer_distinct: bool = False,
) -> List[RGBTuple]:
    return suggest(source, palette, metric=metric, count=count, prefer_distinct=prefer_distinct)


def handle_request(request: Request) -> Response:
    """
    Run one request to completion. Any failure becomes a single error
    response carrying str(exc); nothing is retried.
    """
    if isinstance(request, SuggestRequest):
        try:
            picks = run_suggest(
                request.source,
                request.palette,
                request.metric,
                request.count,
                request.prefer_distinct,
            )
        except Exception as exc:
            error(f"suggest request {request.request_id} failed: {exc}")
            return SuggestResponse(request.request_id, "error", message=str(exc))
        return SuggestResponse(request.request_id, "suggestions", suggestions=picks)

    if isinstance(request, PixelateRequest):
        try:
            result = run_pixelate(request.source, request.config, debug=request.debug)
        except Exception as exc:
            error(f"pixelate request {request.request_id} failed: {exc}")
            return PixelateResponse(request.request_id, "error", message=str(exc))
        return PixelateResponse(request.request_id, "success", result=result)

    raise TypeError(f"unsupported request type {type(request).__name__}")


__all__ = [
    "PixelateRequest",
    "SuggestRequest",
    "Request",
    "PixelateResponse",
    "SuggestResponse",
    "Response",
    "PixelateResult",
    "run_pixelate",
    "run_suggest",
    "handle_request",
]
