"""
Coordinate Mapper

Affine map between a rectangular world window and a W x H pixel raster.

    bounds = (xmin, xmax, ymin, ymax)

World Y grows upward, pixel Y grows downward, so (xmin, ymin) lands on the
bottom-left pixel (0, H-1) and (xmax, ymax) on the top-right pixel (W-1, 0).
Pixel coordinates are rounded half up (0.5 -> 1) and are NOT clipped; the
raster drops out-of-canvas samples with in_canvas().

All functions accept python scalars or numpy arrays.
"""

import numpy as np


def _span(n):
    # A 1-pixel axis maps everything onto pixel 0
    return max(n - 1, 1)


def to_pixel(x, y, bounds, W, H):
    """Map world (x, y) to integer pixel (px, py)."""
    xmin, xmax, ymin, ymax = bounds
    sx = (x - xmin) / (xmax - xmin)
    sy = (y - ymin) / (ymax - ymin)
    px = np.floor(sx * (W - 1) + 0.5)
    py = np.floor((1.0 - sy) * (H - 1) + 0.5)
    if np.ndim(px) == 0 and np.ndim(py) == 0:
        return int(px), int(py)
    return px, py


def to_world(px, py, bounds, W, H):
    """Inverse of to_pixel (without rounding)."""
    xmin, xmax, ymin, ymax = bounds
    x = xmin + (xmax - xmin) * (px / _span(W))
    y = ymax - (ymax - ymin) * (py / _span(H))
    return x, y


def world_grid(bounds, W, H):
    """World coordinates of every pixel centre.

    Returns:
        (X, Y) float64 arrays of shape (H, W); row 0 is the top (ymax).
    """
    px = np.arange(W, dtype=np.float64)
    py = np.arange(H, dtype=np.float64)
    xs, ys = to_world(px, py, bounds, W, H)
    return np.meshgrid(xs, ys)


def aspect_bounds(cx, cy, width, W, H):
    """Window of world width `width` centred on (cx, cy), matching W/H."""
    aspect = W / H
    height = width / aspect
    return (cx - width / 2, cx + width / 2, cy - height / 2, cy + height / 2)


def in_canvas(px, py, W, H):
    """Boolean mask of pixel coordinates inside [0, W-1] x [0, H-1]."""
    return (px >= 0) & (px <= W - 1) & (py >= 0) & (py <= H - 1)


def is_proper(bounds):
    """True when bounds is a finite, non-degenerate rectangle."""
    try:
        xmin, xmax, ymin, ymax = (float(v) for v in bounds)
    except (TypeError, ValueError):
        return False
    if not all(np.isfinite((xmin, xmax, ymin, ymax))):
        return False
    return xmax > xmin and ymax > ymin
