import numpy as np
import pytest

from pixelator.adjust import adjust_colors, contrast_factor
from pixelator.core_types import InvalidConfiguration, PixelBuffer


def _solid(rgba, w=2, h=2):
    return PixelBuffer.blank(w, h, rgba)


def test_zero_settings_return_an_equal_copy():
    src = _solid((10, 20, 30, 200))

    out = adjust_colors(src)

    assert out == src
    assert out.data is not src.data


def test_brightness_shifts_and_clamps():
    out = adjust_colors(_solid((10, 250, 128, 255)), brightness=20)

    assert out.data[0, 0].tolist() == [30, 255, 148, 255]


def test_full_desaturation_gives_luma_grey():
    out = adjust_colors(_solid((255, 0, 0, 255)), saturation=-100)

    assert out.data[0, 0].tolist() == [76, 76, 76, 255]


def test_contrast_pivots_on_128():
    assert contrast_factor(0) == pytest.approx(1.0)

    out = adjust_colors(_solid((128, 100, 200, 255)), contrast=50)

    assert out.data[0, 0, 0] == 128
    assert out.data[0, 0, 1] < 100
    assert out.data[0, 0, 2] > 200


def test_alpha_is_never_touched():
    data = np.zeros((1, 2, 4), dtype=np.uint8)
    data[0, 0] = (100, 100, 100, 0)
    data[0, 1] = (100, 100, 100, 77)

    out = adjust_colors(PixelBuffer(2, 1, data), brightness=50)

    assert out.alpha.tolist() == [[0, 77]]
    assert out.rgb[0, 0].tolist() == [150, 150, 150]


@pytest.mark.parametrize("kwargs", [{"brightness": 101}, {"contrast": -101}, {"saturation": 200}])
def test_out_of_range_values_raise(kwargs):
    with pytest.raises(InvalidConfiguration):
        adjust_colors(_solid((0, 0, 0, 255)), **kwargs)
