#!/usr/bin/env python3
"""
Tests for the coordinate mapper and the palette encoder.

Verifies:
1. World <-> pixel mapping corners, Y flip and inverse
2. Iteration palette: black inside the set, distinct bands outside
3. Angle palette is 2*pi periodic
4. Colormap LUT construction and application
"""

import math

import numpy as np

from math_visuals.mapper import aspect_bounds, in_canvas, is_proper, to_pixel, to_world, world_grid
from math_visuals.palette import (
    apply_colormap, build_lut, color_from_angle, color_from_iterations,
    get_colormap, hsl_to_rgb,
)

BOUNDS = [
    (-2.5, 1.5, -1.5, 1.5),
    (0.0, 1.0, 0.0, 1.0),
    (-30.0, 30.0, -6.0, 1.0),
    (-0.75, -0.74, 0.1, 0.11),
]


def test_corners_map_with_y_flip():
    for W, H in ((64, 64), (320, 200), (7, 3)):
        for b in BOUNDS:
            xmin, xmax, ymin, ymax = b
            assert to_pixel(xmin, ymin, b, W, H) == (0, H - 1)
            assert to_pixel(xmax, ymax, b, W, H) == (W - 1, 0)
            assert to_pixel(xmin, ymax, b, W, H) == (0, 0)
            assert to_pixel(xmax, ymin, b, W, H) == (W - 1, H - 1)


def test_to_world_inverts_to_pixel():
    b = (-2.0, 3.0, -1.0, 4.0)
    W, H = 101, 51
    for px, py in ((0, 0), (50, 25), (100, 50), (13, 42)):
        x, y = to_world(px, py, b, W, H)
        assert to_pixel(x, y, b, W, H) == (px, py)
    x, y = to_world(0, H - 1, b, W, H)
    assert math.isclose(x, -2.0) and math.isclose(y, -1.0)


def test_to_pixel_vectorised_and_unclipped():
    b = (0.0, 1.0, 0.0, 1.0)
    px, py = to_pixel(np.array([0.0, 0.5, 2.0]), np.array([0.0, 0.5, -1.0]), b, 11, 11)
    assert px.tolist() == [0.0, 5.0, 20.0]
    assert py.tolist() == [10.0, 5.0, 20.0]
    assert in_canvas(px, py, 11, 11).tolist() == [True, True, False]


def test_half_pixel_rounds_up():
    # 2.5 and 0.5 land exactly between two pixels
    assert to_pixel(2.5, 1.0, (0.0, 4.0, 0.0, 1.0), 5, 2) == (3, 0)
    assert to_pixel(0.5, 0.5, (0.0, 1.0, 0.0, 1.0), 2, 2) == (1, 1)
    px, py = to_pixel(np.array([0.5, 1.5]), np.array([0.0, 0.0]), (0.0, 4.0, 0.0, 1.0), 5, 2)
    assert px.tolist() == [1.0, 2.0]


def test_world_grid_rows_run_top_down():
    b = (-1.0, 1.0, -2.0, 2.0)
    X, Y = world_grid(b, 5, 9)
    assert X.shape == (9, 5)
    assert X[0, 0] == -1.0 and X[0, -1] == 1.0
    assert Y[0, 0] == 2.0 and Y[-1, 0] == -2.0


def test_single_pixel_canvas():
    assert to_pixel(0.3, 0.7, (0.0, 1.0, 0.0, 1.0), 1, 1) == (0, 0)
    X, Y = world_grid((0.0, 1.0, 0.0, 1.0), 1, 1)
    assert X.shape == (1, 1)


def test_aspect_bounds_and_is_proper():
    b = aspect_bounds(-0.5, 0.0, 3.5, 200, 100)
    assert b == (-2.25, 1.25, -0.875, 0.875)
    assert is_proper(b)
    assert not is_proper((1.0, 1.0, 0.0, 1.0))
    assert not is_proper((0.0, 1.0, 2.0, 1.0))
    assert not is_proper((0.0, float("inf"), 0.0, 1.0))
    assert not is_proper((0.0, 1.0))


def test_hsl_to_rgb_primaries():
    assert hsl_to_rgb(0, 1.0, 0.5).tolist() == [255, 0, 0]
    assert hsl_to_rgb(120, 1.0, 0.5).tolist() == [0, 255, 0]
    assert hsl_to_rgb(240, 1.0, 0.5).tolist() == [0, 0, 255]
    assert hsl_to_rgb(0, 0.0, 1.0).tolist() == [255, 255, 255]
    assert hsl_to_rgb(360, 1.0, 0.5).tolist() == [255, 0, 0]


def test_iteration_palette():
    assert color_from_iterations(100, 100).tolist() == [0, 0, 0]
    assert color_from_iterations(250, 100).tolist() == [0, 0, 0]
    assert color_from_iterations(0, 100).tolist() == [204, 51, 51]

    iters = np.arange(0, 101)
    rgb = color_from_iterations(iters, 100)
    assert rgb.shape == (101, 3)
    assert rgb.dtype == np.uint8
    assert (rgb[:-1].sum(axis=1) > 0).all()
    # Several hue cycles -> many distinct colours
    assert len({tuple(c) for c in rgb[:-1]}) > 50


def test_angle_palette_periodic():
    for a in (0.0, 1.0, 2.0 * math.pi / 3, -2.0):
        assert color_from_angle(a).tolist() == color_from_angle(a + 2 * math.pi).tolist()
    assert color_from_angle(0.0).tolist() != color_from_angle(math.pi).tolist()


def test_colormaps():
    lut = build_lut([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))])
    assert lut.shape == (256, 3)
    assert lut[0].tolist() == [0, 0, 0]
    assert lut[-1].tolist() == [255, 255, 255]

    gray = get_colormap("gray")
    img = apply_colormap(np.array([[0.0, 0.5, 1.0, 2.0]]), gray)
    assert img.shape == (1, 4, 3)
    assert img[0, :, 0].tolist() == [0, 128, 255, 255]

    for name in ("paper", "ink", "fire", "ocean", "plasma"):
        assert get_colormap(name).shape == (256, 3)


if __name__ == "__main__":
    print("\n=== Testing mapper + palette ===\n")
    for name, fn in list(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
            print(f"  ✓ {name}")
    print("\n✓ All tests passed!\n")
