import numpy as np
import pytest

from pixelator.core_types import InvalidConfiguration, Palette, PixelBuffer
from pixelator.suggest import sample_opaque_pixels, suggest

BLUE = Palette(((0, 0, 255),))


def _reds_and_green():
    data = np.zeros((10, 10, 4), dtype=np.uint8)
    flat = data.reshape(-1, 4)
    flat[:50] = (255, 0, 0, 255)
    flat[50:85] = (250, 5, 5, 255)
    flat[85:] = (0, 255, 0, 255)
    return PixelBuffer(10, 10, data)


def test_heaviest_gaps_come_first():
    assert suggest(_reds_and_green(), BLUE, count=2) == [(255, 0, 0), (250, 5, 5)]


def test_distinct_mode_skips_near_duplicates():
    picks = suggest(_reds_and_green(), BLUE, count=2, prefer_distinct=True)

    assert picks == [(255, 0, 0), (0, 255, 0)]


def test_colours_already_in_palette_are_not_suggested():
    src = PixelBuffer.blank(6, 6, (0, 0, 255, 255))

    assert suggest(src, BLUE) == []


def test_nothing_to_suggest_without_palette_or_opaque_pixels():
    assert suggest(_reds_and_green(), Palette()) == []
    assert suggest(PixelBuffer.blank(4, 4, (255, 0, 0, 128)), BLUE) == []


def test_suggestions_are_unique_and_bounded():
    rng = np.random.default_rng(2)
    data = rng.integers(0, 256, size=(40, 40, 4), dtype=np.uint8)
    data[..., 3] = 255

    picks = suggest(PixelBuffer(40, 40, data), BLUE, metric="oklab", count=7)

    assert len(picks) == 7
    assert len(set(picks)) == 7
    assert (0, 0, 255) not in picks


def test_sampling_stride_and_alpha_filter():
    src = PixelBuffer.blank(100, 100, (1, 2, 3, 255))
    src.data[0, 0, 3] = 128

    samples = sample_opaque_pixels(src)

    # stride 3 over 10000 pixels, minus the skipped half-transparent first pixel
    assert samples.shape == (3333, 3)


def test_bad_count_raises():
    with pytest.raises(InvalidConfiguration):
        suggest(_reds_and_green(), BLUE, count=0)
