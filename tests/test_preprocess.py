import numpy as np
import pytest

from pixelator.core_types import InvalidConfiguration, PixelBuffer
from pixelator.preprocess import PREPROCESSING_METHODS, preprocess


def _noisy(w=12, h=10, seed=3):
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=(h, w, 4), dtype=np.uint8)
    data[..., 3] = 255
    return PixelBuffer(w, h, data)


def _halves(size=6):
    data = np.zeros((size, size, 4), dtype=np.uint8)
    data[:, size // 2 :, :3] = 255
    data[..., 3] = 255
    return PixelBuffer(size, size, data)


def test_none_returns_a_copy():
    src = _noisy()

    out = preprocess(src, "none", 80)

    assert out == src
    assert out.data is not src.data


@pytest.mark.parametrize("method", PREPROCESSING_METHODS[1:])
def test_solid_image_is_unchanged(method):
    src = PixelBuffer.blank(9, 7, (30, 60, 90, 255))

    assert preprocess(src, method, 70) == src


@pytest.mark.parametrize("method", PREPROCESSING_METHODS[1:])
def test_alpha_and_transparent_pixels_are_untouched(method):
    src = _noisy()
    src.data[2:5, 3:6, 3] = 0
    src.data[0, 0, 3] = 100

    out = preprocess(src, method, 60)

    assert np.array_equal(out.alpha, src.alpha)
    hidden = src.alpha == 0
    assert np.array_equal(out.rgb[hidden], src.rgb[hidden])


@pytest.mark.parametrize("method", PREPROCESSING_METHODS[1:])
def test_smoothing_reduces_noise(method):
    src = _noisy()

    out = preprocess(src, method, 50)

    assert out.rgb.astype(float).std() < src.rgb.astype(float).std()


def test_median_removes_single_outlier():
    src = PixelBuffer.blank(5, 5, (10, 10, 10, 255))
    src.data[2, 2, :3] = 250

    out = preprocess(src, "median", 0)

    assert out.rgb[2, 2].tolist() == [10, 10, 10]


def test_kuwahara_keeps_a_hard_edge():
    src = _halves()

    assert preprocess(src, "kuwahara", 0) == src


def test_transparent_neighbours_are_ignored():
    data = np.zeros((3, 3, 4), dtype=np.uint8)
    data[..., :3] = 200
    data[..., 3] = 255
    data[0, :, :3] = 0
    data[0, :, 3] = 0
    src = PixelBuffer(3, 3, data)

    for method in PREPROCESSING_METHODS[1:]:
        out = preprocess(src, method, 30)
        assert np.all(out.rgb[1:] == 200), method


def test_bad_arguments_raise():
    with pytest.raises(InvalidConfiguration):
        preprocess(_noisy(), "gaussian", 50)
    with pytest.raises(InvalidConfiguration):
        preprocess(_noisy(), "median", 150)
