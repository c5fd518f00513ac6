import numpy as np
import pytest

from pixelator.config import ClusteredPalette, Configuration, FixedPalette
from pixelator.core_types import ColorUsage, InvalidConfiguration, Palette
from pixelator.palette_data import PRESETS


def test_defaults():
    cfg = Configuration(32, 16).validate()

    assert cfg.resampling_method == "nearest"
    assert cfg.dither_method == "none"
    assert cfg.color_match_algorithm == "oklab"
    assert cfg.palette_source is None
    assert cfg.preprocessing_strength == 50


def test_from_settings_builds_merged_palette():
    cfg = Configuration.from_settings(
        {
            "targetWidth": 64,
            "targetHeight": 48,
            "paletteMode": "geopixels+custom",
            "customPalette": "#FF00FF",
            "ditherMethod": "floyd-steinberg",
            "ditherStrength": 80,
            "colorMatchAlgorithm": "ciede2000",
            "resamplingMethod": None,
        }
    ).validate()

    assert isinstance(cfg.palette_source, FixedPalette)
    assert len(cfg.palette_source.palette) == len(PRESETS["geopixels"]) + 1
    assert cfg.palette_source.palette[-1] == (255, 0, 255)
    assert cfg.dither_strength == 80
    assert cfg.resampling_method == "nearest"


def test_literal_palette_takes_precedence():
    cfg = Configuration.from_settings(
        {"targetWidth": 8, "targetHeight": 8, "palette": ["#000000", "#fff"], "paletteMode": "wplace"}
    )

    assert cfg.palette_source == FixedPalette(Palette(((0, 0, 0), (255, 255, 255))))


def test_kmeans_settings():
    cfg = Configuration.from_settings({"targetWidth": 8, "targetHeight": 8, "useKmeans": True})

    assert cfg.palette_source == ClusteredPalette(16)

    with pytest.raises(InvalidConfiguration):
        Configuration.from_settings(
            {"targetWidth": 8, "targetHeight": 8, "useKmeans": True, "paletteMode": "wplace"}
        )


def test_color_stats_are_parsed():
    cfg = Configuration.from_settings(
        {
            "targetWidth": 8,
            "targetHeight": 8,
            "paletteMode": "wplace-free",
            "filterTrivialColors": True,
            "colorStats": [
                {"color": "#000000", "count": 90, "percent": 90.0},
                {"color": "#FFFFFF", "percent": 10.0},
            ],
        }
    )

    assert cfg.filter_trivial_colors is True
    assert cfg.color_stats == {
        (0, 0, 0): ColorUsage(90, 90.0),
        (255, 255, 255): ColorUsage(0, 10.0),
    }


@pytest.mark.parametrize(
    "settings",
    [
        {"targetWidth": 8},
        {"targetWidth": 8, "targetHeight": 8, "paletteMode": "nope"},
        {"targetWidth": 8, "targetHeight": 8, "palette": ["#12"]},
        {"targetWidth": 8, "targetHeight": 8, "colorStats": [{"color": "#000000"}]},
    ],
)
def test_bad_settings_raise(settings):
    with pytest.raises(InvalidConfiguration):
        Configuration.from_settings(settings)


@pytest.mark.parametrize(
    "overrides",
    [
        {"target_width": 0},
        {"target_height": 2.5},
        {"resampling_method": "bicubic"},
        {"dither_method": "atkinson"},
        {"color_match_algorithm": "hsv"},
        {"preprocessing_method": "blur"},
        {"dither_strength": 101},
        {"preprocessing_strength": -1},
        {"brightness": 150},
        {"preserve_detail_threshold": -0.5},
        {"palette_source": ClusteredPalette(0)},
        {"palette_source": "wplace"},
    ],
)
def test_validate_rejects_bad_fields(overrides):
    fields = {"target_width": 4, "target_height": 4}
    fields.update(overrides)

    with pytest.raises(InvalidConfiguration):
        Configuration(**fields).validate()


def test_describe_summarises_palette_source():
    described = dict(Configuration(4, 4, palette_source=ClusteredPalette(8)).describe())

    assert described["Size"] == "4x4"
    assert described["Palette"] == "k-means 8"


@pytest.mark.parametrize("width", [True, False])
def test_validate_rejects_bool_dimensions(width):
    with pytest.raises(InvalidConfiguration):
        Configuration(width, 4).validate()

    with pytest.raises(InvalidConfiguration):
        Configuration(4, 4, palette_source=ClusteredPalette(True)).validate()


def test_validate_accepts_numpy_integers():
    cfg = Configuration(
        np.int64(64), np.int32(32), palette_source=ClusteredPalette(np.int64(8))
    ).validate()

    assert cfg.target_width == 64
