import numpy as np
import pytest

from pixelator.core_types import InvalidConfiguration, Palette, PixelBuffer
from pixelator.dither import (
    DITHER_METHODS,
    ERROR_KERNELS,
    ORDERED_MATRICES,
    dither,
    threshold_offsets,
)

MONO = Palette(((0, 0, 0), (255, 255, 255)))
PAL4 = Palette.from_hex(["#000000", "#FFFFFF", "#E71D36", "#1982C4"])


def _gradient(w=24, h=12):
    data = np.zeros((h, w, 4), dtype=np.uint8)
    ramp = np.linspace(0, 255, w).round().astype(np.uint8)
    data[..., 0] = ramp[None, :]
    data[..., 1] = ramp[None, ::-1]
    data[..., 2] = (np.arange(h) * 20).astype(np.uint8)[:, None]
    data[..., 3] = 255
    return PixelBuffer(w, h, data)


def test_method_list_order():
    assert DITHER_METHODS[0] == "none"
    assert DITHER_METHODS[1 : 1 + len(ERROR_KERNELS)] == tuple(ERROR_KERNELS)
    assert DITHER_METHODS[1 + len(ERROR_KERNELS) :] == tuple(ORDERED_MATRICES)


PUBLISHED_KERNELS = {
    "floyd-steinberg": (16, [(1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)]),
    "burkes": (
        32,
        [(1, 0, 8), (2, 0, 4), (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2)],
    ),
    "stucki": (
        42,
        [
            (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
            (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
        ],
    ),
    "sierra-2": (
        16,
        [(1, 0, 4), (2, 0, 3), (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1)],
    ),
    "sierra-lite": (4, [(1, 0, 2), (-1, 1, 1), (0, 1, 1)]),
}  # fmt: skip

PUBLISHED_MATRICES = {
    "bayer-4x4": (16, [[0, 8, 2, 10], [12, 4, 14, 6], [3, 11, 1, 9], [15, 7, 13, 5]]),
    "bayer-8x8": (
        64,
        [
            [0, 32, 8, 40, 2, 34, 10, 42],
            [48, 16, 56, 24, 50, 18, 58, 26],
            [12, 44, 4, 36, 14, 46, 6, 38],
            [60, 28, 52, 20, 62, 30, 54, 22],
            [3, 35, 11, 43, 1, 33, 9, 41],
            [51, 19, 59, 27, 49, 17, 57, 25],
            [15, 47, 7, 39, 13, 45, 5, 37],
            [63, 31, 55, 23, 61, 29, 53, 21],
        ],
    ),
    "halftone-dot": (16, [[12, 5, 6, 13], [4, 0, 1, 7], [8, 2, 3, 11], [14, 9, 10, 15]]),
    "diagonal-line": (16, [[15, 7, 3, 7], [7, 3, 7, 15], [3, 7, 15, 7], [7, 15, 7, 3]]),
    "cross-hatch": (16, [[0, 8, 0, 8], [8, 15, 8, 15], [0, 8, 0, 8], [8, 15, 8, 15]]),
    "grid": (16, [[0, 0, 0, 0], [0, 15, 15, 0], [0, 15, 15, 0], [0, 0, 0, 0]]),
}  # fmt: skip


@pytest.mark.parametrize("name", sorted(PUBLISHED_KERNELS))
def test_error_kernel_coefficients(name):
    divisor, taps = PUBLISHED_KERNELS[name]

    assert ERROR_KERNELS[name] == tuple((dx, dy, num / divisor) for dx, dy, num in taps)


@pytest.mark.parametrize("name", sorted(PUBLISHED_MATRICES))
def test_ordered_matrices_and_divisors(name):
    divisor, rows = PUBLISHED_MATRICES[name]
    matrix, got_divisor = ORDERED_MATRICES[name]

    assert got_divisor == divisor
    assert matrix.tolist() == rows


def test_all_methods_are_tabulated():
    assert set(ERROR_KERNELS) == set(PUBLISHED_KERNELS)
    assert set(ORDERED_MATRICES) == set(PUBLISHED_MATRICES)


def test_error_kernels_distribute_all_error():
    for name, kernel in ERROR_KERNELS.items():
        assert sum(w for _dx, _dy, w in kernel) == pytest.approx(1.0), name
        assert all(dy > 0 or dx > 0 for dx, dy, _w in kernel), name


@pytest.mark.parametrize("method", DITHER_METHODS)
def test_output_only_uses_palette_colours(method):
    src = _gradient()
    src.data[0, :5, 3] = 60

    out = dither(src, PAL4, metric="oklab", method=method, strength=80)

    opaque = out.alpha == 255
    assert np.all(out.alpha[0, :5] == 0)
    assert np.array_equal(out.rgb[0, :5], src.rgb[0, :5])
    assert {tuple(px) for px in out.rgb[opaque].tolist()} <= set(PAL4.colors)


@pytest.mark.parametrize("method", DITHER_METHODS[1:])
def test_zero_strength_equals_plain_snap(method):
    src = _gradient()

    assert dither(src, PAL4, "cie94", method, 0) == dither(src, PAL4, "cie94", "none", 100)


@pytest.mark.parametrize("method", ["floyd-steinberg", "stucki", "bayer-8x8"])
def test_dithering_is_deterministic(method):
    src = _gradient()

    assert dither(src, PAL4, "ciede2000", method, 100) == dither(
        src, PAL4, "ciede2000", method, 100
    )


@pytest.mark.parametrize("method", ["floyd-steinberg", "sierra-lite", "bayer-4x4"])
def test_mid_grey_mixes_black_and_white(method):
    src = PixelBuffer.blank(16, 16, (128, 128, 128, 255))

    out = dither(src, MONO, "cie76", method, 100)

    white = float(np.mean(out.rgb[..., 0] == 255))
    assert 0.3 < white < 0.7
    assert dither(src, MONO, "cie76", "none", 100).rgb.min() == 255


@pytest.mark.parametrize("method", ["floyd-steinberg", "bayer-4x4"])
def test_preserve_detail_locks_close_colours(method):
    src = PixelBuffer.blank(8, 8, (140, 140, 140, 255))

    free = dither(src, MONO, "cie76", method, 100)
    locked = dither(src, MONO, "cie76", method, 100, preserve_detail_threshold=50)

    assert np.any(free.rgb == 0)
    assert np.all(locked.rgb == 255)


def test_locked_pixels_do_not_pass_on_error():
    data = np.zeros((1, 2, 4), dtype=np.uint8)
    data[0, 0] = (140, 140, 140, 255)
    data[0, 1] = (128, 128, 128, 255)
    src = PixelBuffer(2, 1, data)

    # Unlocked, the first pixel's error drags the second grey to black.
    free = dither(src, MONO, "cie76", "floyd-steinberg", 100)
    locked = dither(src, MONO, "cie76", "floyd-steinberg", 100, preserve_detail_threshold=45)

    assert free.rgb[0, 0, 0] == 255 and free.rgb[0, 1, 0] == 0
    assert locked.rgb[0, 0, 0] == 255 and locked.rgb[0, 1, 0] == 255


def test_threshold_offsets_scale_with_strength():
    full = threshold_offsets("bayer-4x4", 8, 8, 100)
    half = threshold_offsets("bayer-4x4", 8, 8, 50)

    assert full.shape == (8, 8)
    assert full.min() == pytest.approx(-32.0)
    assert full.max() == pytest.approx(15 / 16 * 64 - 32)
    assert np.allclose(half, full / 2)
    assert np.array_equal(full[:4, :4], full[4:, 4:])


def test_invalid_method_or_strength_raises():
    src = _gradient()

    with pytest.raises(InvalidConfiguration):
        dither(src, PAL4, "oklab", "atkinson", 50)
    with pytest.raises(InvalidConfiguration):
        dither(src, PAL4, "oklab", "floyd-steinberg", 101)
