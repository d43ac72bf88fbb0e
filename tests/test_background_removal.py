import pytest

from pdflyer.core.imaging import remove_background
from pdflyer.core.imaging.background import luminance, removal_threshold
from tests.conftest import make_image, make_transparent_image


def test_luminance_weights():
    assert luminance(255, 255, 255) == pytest.approx(255)
    assert luminance(0, 0, 0) == 0
    assert luminance(100, 0, 0) == pytest.approx(29.9)


@pytest.mark.parametrize("background, expected", [
    (255.0, 215.0),
    (150.0, 110.0),
    (100.0, 200.0),
    (20.0, 200.0),
])
def test_removal_threshold(background, expected):
    assert removal_threshold(background) == pytest.approx(expected)


def test_white_background_becomes_transparent():
    data = make_image(40, 20)

    pix = remove_background(data, "image/png")

    assert pix.alpha
    assert (pix.width, pix.height) == (40, 20)
    assert pix.pixel(0, 0)[3] == 0
    assert pix.pixel(39, 19)[3] == 0
    assert pix.pixel(20, 10)[:4] == (0, 0, 0, 255)


def test_jpeg_input():
    data = make_image(40, 20, fmt="jpeg")

    pix = remove_background(data, "image/jpeg")

    assert pix.pixel(0, 0)[3] == 0
    assert pix.pixel(20, 10)[3] == 255


def test_dark_background_uses_fixed_threshold():
    # Black background with a white mark: only the bright mark is removed
    data = make_image(40, 20, background=(0, 0, 0), square=(255, 255, 255))

    pix = remove_background(data)

    assert pix.pixel(0, 0)[3] == 255
    assert pix.pixel(20, 10)[3] == 0


def test_undecodable_image():
    with pytest.raises(ValueError):
        remove_background(b"nope", "image/png")


def test_transparent_background_stays_transparent():
    data = make_transparent_image(40, 20)

    pix = remove_background(data, "image/png")

    assert pix.pixel(0, 0)[3] == 0
    assert pix.pixel(39, 19)[3] == 0
    assert pix.pixel(20, 10)[:4] == (0, 0, 0, 255)


def test_partial_alpha_is_kept():
    # Dark ink at half opacity keeps its own alpha
    data = make_transparent_image(40, 20, square=(40, 40, 40), alpha=128)

    pix = remove_background(data, "image/png")

    assert pix.pixel(0, 0)[3] == 0
    assert pix.pixel(20, 10)[3] == 128


def test_garbage_bytes_are_rejected():
    with pytest.raises(ValueError):
        remove_background(b"not an image at all", "image/png")
