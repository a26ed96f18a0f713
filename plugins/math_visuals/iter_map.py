"""
Iterated-Map Kernel (strange attractors of 2D maps)

One long orbit from (0.1, 0.0) instead of per-pixel iteration:

    de_jong:        x' = sin(a y) - cos(b x)
                    y' = sin(c x) - cos(d y)
    clifford:       x' = sin(a y) + c cos(a x)
                    y' = sin(b x) + d cos(b y)
    ikeda:          t  = 0.4 - 6 / (1 + x^2 + y^2)
                    x' = 1 + u (x cos t - y sin t)
                    y' = u (x sin t + y cos t)
    gumowski_mira:  f(x) = a x + 2 (1 - a) x^2 / (1 + x^2)
                    x' = b y + f(x)
                    y' = -x + f(x')

After the first `discard` transient steps every iterate adds `ink` to the
pixel it lands on (saturating at 255), so the image shows orbit density.
"""

import math
from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import to_pixel
from .validate import ParamReader

DEFAULT_BOUNDS = (-3.0, 3.0, -3.0, 3.0)
START = (0.1, 0.0)

FAMILY_PARAMS = {
    "de_jong": ("a", "b", "c", "d"),
    "clifford": ("a", "b", "c", "d"),
    "ikeda": ("u",),
    "gumowski_mira": ("a", "b"),
}


@dataclass(frozen=True)
class IterMapParams:
    family: str
    coeffs: tuple
    steps: int
    discard: int
    ink: int
    bounds: tuple


def make_step(family, coeffs):
    """Return the family's map as a function (x, y) -> (x', y')."""
    if family == "de_jong":
        a, b, c, d = coeffs

        def step(x, y):
            return math.sin(a * y) - math.cos(b * x), math.sin(c * x) - math.cos(d * y)

    elif family == "clifford":
        a, b, c, d = coeffs

        def step(x, y):
            return (math.sin(a * y) + c * math.cos(a * x),
                    math.sin(b * x) + d * math.cos(b * y))

    elif family == "ikeda":
        (u,) = coeffs

        def step(x, y):
            t = 0.4 - 6.0 / (1.0 + x * x + y * y)
            ct, st = math.cos(t), math.sin(t)
            return 1.0 + u * (x * ct - y * st), u * (x * st + y * ct)

    else:
        a, b = coeffs

        def f(x):
            return a * x + (2.0 * (1.0 - a) * x * x) / (1.0 + x * x)

        def step(x, y):
            xn = b * y + f(x)
            return xn, -x + f(xn)

    return step


def orbit(step, steps, start=START):
    """Run the map `steps` times; returns (xs, ys) of every iterate."""
    xs = np.empty(steps, dtype=np.float64)
    ys = np.empty(steps, dtype=np.float64)
    x, y = start
    for i in range(steps):
        x, y = step(x, y)
        xs[i] = x
        ys[i] = y
    return xs, ys


class IterMap(Kernel):
    """Density plot of a single orbit of a 2D chaotic map."""

    renderer_type = "iter_map"
    label = "Iterated map attractor"
    families = tuple(FAMILY_PARAMS)

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        if preset.family not in FAMILY_PARAMS:
            read.fail("family", f"iter_map supports {list(FAMILY_PARAMS)}, got {preset.family!r}")
        coeffs = tuple(read.number(k) for k in FAMILY_PARAMS[preset.family])
        return IterMapParams(
            family=preset.family,
            coeffs=coeffs,
            steps=read.integer("steps", 500_000, minimum=0),
            discard=read.integer("discard", 1000, minimum=0),
            ink=read.integer("ink", 220, minimum=1),
            bounds=read.view_bounds(DEFAULT_BOUNDS),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = params.bounds
        steps = ctx.budget.clamp("map_steps", params.steps)
        xs, ys = orbit(make_step(params.family, params.coeffs), steps)

        # Iterate i (0-based) is plotted when i > discard
        keep = slice(params.discard + 1, None)
        with np.errstate(invalid="ignore", over="ignore"):
            px, py = to_pixel(xs[keep], ys[keep], ctx.bounds, ctx.width, ctx.height)
        raster.accumulate(px, py, ink=params.ink)
