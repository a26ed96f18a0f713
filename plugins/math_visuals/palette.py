"""
Palette / Intensity Encoder

Turns scalar render results into RGB:

- color_from_iterations: escape-time counts -> banded HSL palette
  (4 hue cycles, sinusoidally modulated lightness, black inside the set)
- color_from_angle:      root angle -> hue, for Newton basins
- colormap LUTs:         (256, 3) uint8 tables for [0, 1] scalar fields

Everything is vectorised; scalars go in, a length-3 uint8 array comes out.
"""

import math
import numpy as np

TAU = 2.0 * math.pi


def hsl_to_rgb(h, s, l):
    """HSL -> RGB.

    Args:
        h: Hue in degrees (any range, wrapped to [0, 360))
        s: Saturation [0, 1]
        l: Lightness [0, 1]

    Returns:
        (..., 3) uint8 array
    """
    h = np.asarray(h, dtype=np.float64)
    s = np.clip(np.asarray(s, dtype=np.float64), 0.0, 1.0)
    l = np.clip(np.asarray(l, dtype=np.float64), 0.0, 1.0)
    h, s, l = np.broadcast_arrays(h, s, l)

    c = (1.0 - np.abs(2.0 * l - 1.0)) * s
    hp = np.mod(h, 360.0) / 60.0
    x = c * (1.0 - np.abs(np.mod(hp, 2.0) - 1.0))
    zero = np.zeros_like(c)
    sector = np.clip(hp.astype(np.int64), 0, 5)

    r1 = np.choose(sector, [c, x, zero, zero, x, c])
    g1 = np.choose(sector, [x, c, c, x, zero, zero])
    b1 = np.choose(sector, [zero, zero, x, c, c, x])

    m = l - c / 2.0
    rgb = np.stack([r1 + m, g1 + m, b1 + m], axis=-1)
    return np.rint(rgb * 255.0).astype(np.uint8)


def color_from_iterations(iters, max_iter):
    """Banded colour for escape-time iteration counts.

    Points with iters >= max_iter (never escaped) are black.
    """
    iters = np.asarray(iters)
    t = iters / float(max_iter)
    rgb = hsl_to_rgb(360.0 * t * 4.0, 0.6, 0.5 + 0.2 * np.sin(TAU * t))
    rgb[iters >= max_iter] = 0
    return rgb


def color_from_angle(angle):
    """Hue from an angle in radians; angles equal mod 2*pi share a colour."""
    ang = np.mod(np.asarray(angle, dtype=np.float64), TAU)
    return hsl_to_rgb(360.0 * ang / TAU, 0.7, 0.55)


# ── Colormap lookup tables ───────────────────────────────────────────────

def build_lut(stops, n=256):
    """
    Build a colormap by interpolating between color stops.

    Args:
        stops: List of (position, (r, g, b)) where position is [0, 1]
        n: Number of entries in the LUT

    Interpolation between neighbouring stops is smoothstepped.
    """
    positions = np.array([s[0] for s in stops], dtype=np.float64)
    colors = np.array([s[1] for s in stops], dtype=np.float64)
    t = np.linspace(0.0, 1.0, n)

    j = np.clip(np.searchsorted(positions, t, side="right") - 1,
                0, len(positions) - 2)
    span = positions[j + 1] - positions[j]
    frac = np.where(span > 0, (t - positions[j]) / np.where(span > 0, span, 1.0), 0.0)
    frac = np.clip(frac, 0.0, 1.0)
    frac = frac * frac * (3 - 2 * frac)  # smoothstep

    lut = colors[j] + frac[:, None] * (colors[j + 1] - colors[j])
    return lut.astype(np.uint8)


def gray():
    """Linear black -> white ramp."""
    ramp = np.arange(256, dtype=np.uint8)
    return np.stack([ramp, ramp, ramp], axis=1)


def paper():
    """Warm paper background fading to graphite, like the printed book."""
    return build_lut([
        (0.00, (240, 238, 230)),
        (1.00, (50, 50, 50)),
    ])


def ink():
    """Blue-black ink bleeding into pale cyan."""
    return build_lut([
        (0.00, (11, 11, 16)),
        (0.40, (30, 50, 90)),
        (0.75, (120, 180, 210)),
        (1.00, (230, 245, 255)),
    ])


def fire():
    """Black through red to yellow-white fire."""
    return build_lut([
        (0.00, (0, 0, 0)),
        (0.20, (60, 5, 0)),
        (0.40, (180, 30, 0)),
        (0.60, (240, 100, 10)),
        (0.80, (255, 200, 50)),
        (1.00, (255, 255, 200)),
    ])


def ocean():
    """Deep blue to cyan to white ocean depths."""
    return build_lut([
        (0.00, (0, 2, 15)),
        (0.25, (5, 20, 80)),
        (0.50, (10, 80, 160)),
        (0.75, (40, 180, 220)),
        (1.00, (200, 250, 255)),
    ])


def plasma():
    """Purple-pink-orange-yellow plasma gradient."""
    return build_lut([
        (0.00, (10, 0, 20)),
        (0.25, (80, 10, 130)),
        (0.50, (190, 30, 100)),
        (0.75, (240, 130, 30)),
        (1.00, (245, 240, 80)),
    ])


# Registry of all colormaps
COLORMAPS = {
    "gray": gray,
    "paper": paper,
    "ink": ink,
    "fire": fire,
    "ocean": ocean,
    "plasma": plasma,
}


def get_colormap(name):
    """Get a colormap LUT (256, 3) uint8 array by name. KeyError if unknown."""
    return COLORMAPS[name]()


def apply_colormap(field, lut):
    """
    Apply a colormap LUT to a 2D float field.

    Args:
        field: 2D numpy array with values in [0, 1]
        lut: (256, 3) uint8 colormap lookup table

    Returns:
        (H, W, 3) uint8 RGB image
    """
    indices = np.rint(np.clip(field, 0, 1) * 255).astype(np.uint8)
    return lut[indices]
