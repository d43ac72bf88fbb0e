import pytest

from pdflyer.core.document import NativeBox, PageGeometry, to_native_box


def test_letter_page_geometry():
    geometry = PageGeometry.for_page(612, 792, 800)

    assert geometry.rendered_width == 800
    assert geometry.scale_factor == pytest.approx(800 / 612)
    assert geometry.rendered_height == pytest.approx(792 * 800 / 612)


def test_to_native_point_flips_y_axis():
    geometry = PageGeometry.for_page(612, 792, 800)

    pdf_x, pdf_y = geometry.to_native_point(100, 100)

    assert pdf_x == pytest.approx(76.5)
    assert pdf_y == pytest.approx(715.5)


def test_origin_maps_to_top_left_corner():
    geometry = PageGeometry.for_page(842, 595, 800)

    assert geometry.to_native_point(0, 0) == pytest.approx((0, 595))


def test_to_native_box_scales_size():
    geometry = PageGeometry.for_page(612, 792, 800)

    box = to_native_box(geometry, 100, 100, 200, 50)

    assert box.width == pytest.approx(153.0)
    assert box.height == pytest.approx(38.25)
    assert box.bottom == pytest.approx(715.5 - 38.25)


def test_to_native_box_without_size():
    geometry = PageGeometry.for_page(612, 792, 800)

    box = to_native_box(geometry, 10, 10)

    assert box.width is None and box.height is None
    assert box.bottom == box.y


@pytest.mark.parametrize("x, y, expected", [
    (-20, -5, (0, 0)),
    (50, 60, (50, 60)),
    (790, 2000, (700, None)),
])
def test_clamp_position_keeps_box_on_page(x, y, expected):
    geometry = PageGeometry.for_page(612, 792, 800)

    cx, cy = geometry.clamp_position(x, y, 100, 100)

    assert cx == pytest.approx(expected[0])
    if expected[1] is None:
        assert cy == pytest.approx(geometry.rendered_height - 100)
    else:
        assert cy == pytest.approx(expected[1])


def test_native_box_bottom():
    assert NativeBox(10, 100, 20, 30).bottom == 70
