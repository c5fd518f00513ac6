import numpy as np
import pytest

from pixelator.core_types import (
    ColorUsage,
    EmptyPaletteError,
    InvalidConfiguration,
    Palette,
    PixelBuffer,
)
from pixelator.matching import PaletteMatcher, snap_buffer
from pixelator.quantize import (
    color_usage_stats,
    effective_palette,
    has_semi_transparent,
    quantize,
)

MONO = Palette(((0, 0, 0), (255, 255, 255)))


def test_matcher_rejects_empty_palette():
    with pytest.raises(EmptyPaletteError):
        PaletteMatcher(Palette(), "oklab")


@pytest.mark.parametrize("metric", ["cie76", "cie94", "ciede2000", "oklab", "redmean"])
def test_matcher_picks_obvious_neighbours(metric):
    matcher = PaletteMatcher(Palette(((255, 0, 0), (0, 255, 0), (0, 0, 255))), metric)

    idx, dist = matcher.nearest(np.array([[250, 10, 10], [5, 240, 0], [0, 0, 255]]))

    assert idx.tolist() == [0, 1, 2]
    assert dist[2] == pytest.approx(0.0, abs=1e-9)
    assert matcher.nearest_one(250, 10, 10)[0] == 0


def test_nearest_by_uniques_matches_nearest():
    rng = np.random.default_rng(1)
    rows = rng.integers(0, 256, size=(200, 3))
    rows[100:] = rows[:100]
    matcher = PaletteMatcher(Palette.from_hex(["#000", "#fff", "#f00", "#0f0", "#00f"]), "cie94")

    a_idx, a_dist = matcher.nearest(rows)
    b_idx, b_dist = matcher.nearest_by_uniques(rows)

    assert np.array_equal(a_idx, b_idx)
    assert np.allclose(a_dist, b_dist)


def test_solid_red_against_blue_palette():
    src = PixelBuffer.blank(4, 4, (255, 0, 0, 255))

    out, stats = quantize(src, Palette(((0, 0, 255),)), metric="oklab")

    assert np.all(out.data == np.array([0, 0, 255, 255], dtype=np.uint8))
    assert stats == {(0, 0, 255): ColorUsage(16, 100.0)}


def test_alpha_cutoff_and_transparent_bytes():
    data = np.zeros((1, 3, 4), dtype=np.uint8)
    data[0, 0] = (12, 34, 56, 127)
    data[0, 1] = (200, 200, 200, 128)
    data[0, 2] = (20, 20, 20, 255)

    out, stats = quantize(PixelBuffer(3, 1, data), MONO, metric="cie76")

    assert out.data[0].tolist() == [[12, 34, 56, 0], [255, 255, 255, 255], [0, 0, 0, 255]]
    assert set(stats) == {(0, 0, 0), (255, 255, 255)}
    assert stats[(0, 0, 0)].percent == pytest.approx(50.0)


def test_snap_buffer_matches_quantize_without_dither():
    rng = np.random.default_rng(5)
    data = rng.integers(0, 256, size=(6, 7, 4), dtype=np.uint8)
    src = PixelBuffer(7, 6, data)

    snapped = snap_buffer(src, PaletteMatcher(MONO, "oklab"))
    out, _stats = quantize(src, MONO, metric="oklab")

    assert snapped == out


def test_every_opaque_output_pixel_is_a_palette_colour():
    rng = np.random.default_rng(11)
    src = PixelBuffer(9, 9, rng.integers(0, 256, size=(9, 9, 4), dtype=np.uint8))
    pal = Palette.from_hex(["#123456", "#abcdef", "#ff8800", "#000000"])

    out, _stats = quantize(src, pal, metric="ciede2000")

    opaque = out.alpha == 255
    assert set(out.alpha.reshape(-1).tolist()) <= {0, 255}
    assert {tuple(px) for px in out.rgb[opaque].tolist()} <= set(pal.colors)


def test_color_usage_stats_order_and_visibility():
    data = np.zeros((1, 6, 4), dtype=np.uint8)
    data[0, :, :3] = [(9, 9, 9), (1, 1, 1), (1, 1, 1), (5, 5, 5), (9, 9, 9), (7, 7, 7)]
    data[0, :, 3] = [255, 255, 255, 255, 255, 0]

    stats = color_usage_stats(PixelBuffer(6, 1, data))

    assert list(stats) == [(1, 1, 1), (9, 9, 9), (5, 5, 5)]
    assert stats[(5, 5, 5)] == ColorUsage(1, 20.0)
    assert sum(u.percent for u in stats.values()) == pytest.approx(100.0)


def test_effective_palette_drops_trivial_and_unused_colours():
    pal = Palette(((1, 1, 1), (2, 2, 2), (3, 3, 3), (4, 4, 4)))
    stats = {
        (1, 1, 1): ColorUsage(999, 99.9),
        (2, 2, 2): ColorUsage(1, 0.05),
        (4, 4, 4): ColorUsage(0, 0.1),
    }

    assert effective_palette(pal, stats).colors == ((1, 1, 1), (4, 4, 4))


def test_effective_palette_is_used_as_the_candidate_set():
    src = PixelBuffer.blank(2, 2, (250, 250, 250, 255))

    out, _stats = quantize(src, MONO, metric="cie76", effective=Palette(((0, 0, 0),)))

    assert np.all(out.rgb == 0)


def test_empty_candidates_raise_only_when_needed():
    opaque = PixelBuffer.blank(2, 2, (1, 2, 3, 255))
    hidden = PixelBuffer.blank(2, 2, (1, 2, 3, 10))

    with pytest.raises(EmptyPaletteError):
        quantize(opaque, MONO, effective=Palette())

    out, stats = quantize(hidden, Palette())
    assert stats == {}
    assert np.all(out.alpha == 0)
    assert np.all(out.rgb == hidden.rgb)


def test_invalid_arguments_raise():
    src = PixelBuffer.blank(1, 1, (0, 0, 0, 255))

    with pytest.raises(InvalidConfiguration):
        quantize(src, MONO, metric="hsv")
    with pytest.raises(InvalidConfiguration):
        quantize(src, MONO, preserve_detail_threshold=-1)
    with pytest.raises(InvalidConfiguration):
        quantize(src, MONO, dither_method="atkinson")


def test_has_semi_transparent():
    src = PixelBuffer.blank(2, 1, (0, 0, 0, 255))
    assert not has_semi_transparent(src)

    src.data[0, 1, 3] = 0
    assert not has_semi_transparent(src)

    src.data[0, 0, 3] = 64
    assert has_semi_transparent(src)
